"""Tests for swing point detection, Fibonacci levels and daily candle shape."""

import pytest

from scanner.strategy.models import CandleData, SwingPoint
from scanner.strategy.swings import (
    calculate_fibonacci_levels,
    calculate_trade_levels,
    classify_daily_candle,
    find_swing_points,
    is_daily_bearish,
    is_daily_bullish,
)


def _make_candle(ts: int, o: float, h: float, l: float, c: float, vol: float = 1000.0) -> CandleData:
    return CandleData(timestamp=ts, open=o, high=h, low=l, close=c, volume=vol)


def _candles_from_mids(mids: list[float]) -> list[CandleData]:
    """Candle i has high = mid + 0.5 and low = mid - 0.5, timestamp i."""
    return [_make_candle(i, m, m + 0.5, m - 0.5, m) for i, m in enumerate(mids)]


def _peak(n: int, apex: int) -> list[CandleData]:
    """Strictly rising up to *apex*, strictly falling afterwards."""
    mids = [float(i) if i <= apex else float(2 * apex - i) for i in range(n)]
    return _candles_from_mids(mids)


# Low at index 3 (6.5), high at index 7 (11.5) with lookback 2.
_VALLEY_THEN_PEAK = [10.0, 9.0, 8.0, 7.0, 8.0, 9.0, 10.0, 11.0, 10.0, 9.0, 8.0]


class TestFindSwingPoints:
    @pytest.mark.parametrize("lookback", [2, 5, 10])
    def test_peak_marks_only_apex(self, lookback):
        candles = _peak(2 * lookback + 11, apex=lookback + 5)
        points = find_swing_points(candles, lookback)
        assert points == [
            SwingPoint(price=candles[lookback + 5].high, timestamp=lookback + 5, type="HIGH")
        ]

    def test_valley_and_peak_in_time_order(self):
        points = find_swing_points(_candles_from_mids(_VALLEY_THEN_PEAK), lookback=2)
        assert points == [
            SwingPoint(price=6.5, timestamp=3, type="LOW"),
            SwingPoint(price=11.5, timestamp=7, type="HIGH"),
        ]

    def test_equal_neighbour_is_not_a_swing(self):
        mids = [1.0, 2.0, 3.0, 3.0, 2.0, 1.0, 0.0]
        assert find_swing_points(_candles_from_mids(mids), lookback=2) == []

    def test_needs_full_neighbourhood(self):
        # Apex at index 1 has only one candle to its left.
        candles = _candles_from_mids([1.0, 5.0, 4.0, 3.0, 2.0])
        assert find_swing_points(candles, lookback=2) == []

    def test_too_short_window(self):
        assert find_swing_points(_peak(5, 2), lookback=10) == []


class TestFibonacci:
    def test_levels(self):
        levels = calculate_fibonacci_levels(100, 50)
        assert levels.retracement_618 == pytest.approx(69.1)
        assert levels.extension_1618 == pytest.approx(180.9)

    def test_to_dict_uses_wire_names(self):
        levels = calculate_fibonacci_levels(100, 50)
        assert set(levels.to_dict()) == {"extension1618", "retracement618"}


class TestTradeLevels:
    def test_bullish_uses_latest_high_and_older_low(self):
        candles = _candles_from_mids(_VALLEY_THEN_PEAK)
        levels = calculate_trade_levels(candles, "BULLISH", lookback=2)
        expected = calculate_fibonacci_levels(11.5, 6.5)
        assert levels == expected

    def test_bearish_needs_high_older_than_latest_low(self):
        candles = _candles_from_mids(_VALLEY_THEN_PEAK)
        assert calculate_trade_levels(candles, "BEARISH", lookback=2) is None

    def test_bearish_after_peak_then_valley(self):
        mids = [8.0, 9.0, 10.0, 11.0, 10.0, 9.0, 8.0, 7.0, 8.0, 9.0, 10.0]
        candles = _candles_from_mids(mids)
        levels = calculate_trade_levels(candles, "BEARISH", lookback=2)
        assert levels == calculate_fibonacci_levels(11.5, 6.5)

    def test_fewer_than_two_swings(self):
        candles = _peak(25, 12)
        assert calculate_trade_levels(candles, "BULLISH", lookback=5) is None

    def test_custom_swing_finder(self):
        def finder(_candles):
            return [
                SwingPoint(price=90.0, timestamp=1, type="LOW"),
                SwingPoint(price=120.0, timestamp=2, type="HIGH"),
            ]

        levels = calculate_trade_levels([], "BULLISH", swing_finder=finder)
        assert levels == calculate_fibonacci_levels(120.0, 90.0)


class TestDailyCandle:
    def test_long_bullish_body(self):
        candle = _make_candle(0, 10.0, 20.0, 9.0, 18.0)
        assert is_daily_bullish(candle)
        assert not is_daily_bearish(candle)
        assert classify_daily_candle(candle) == "BULLISH"

    def test_long_bearish_body(self):
        candle = _make_candle(0, 18.0, 20.0, 9.0, 10.0)
        assert is_daily_bearish(candle)
        assert classify_daily_candle(candle) == "BEARISH"

    def test_body_at_exactly_60_percent_is_not_long(self):
        candle = _make_candle(0, 10.0, 20.0, 10.0, 16.0)
        assert not is_daily_bullish(candle)
        assert classify_daily_candle(candle) == "NEUTRAL"

    def test_doji_is_neutral(self):
        assert classify_daily_candle(_make_candle(0, 10.0, 11.0, 9.0, 10.0)) == "NEUTRAL"
