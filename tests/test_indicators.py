"""Deterministic tests for the indicator library.

All tests use fixed candle data fixtures. Same input = same output, always.
"""

import math

import pytest

from scanner.strategy.indicators import (
    calculate_adx,
    calculate_atr,
    calculate_bollinger,
    calculate_ema,
    calculate_ma,
    calculate_rsi,
    calculate_sma,
    calculate_stoch_rsi,
    calculate_volume_ma,
    true_ranges,
)
from scanner.strategy.models import CandleData


# ── Candle fixtures ──────────────────────────────────────────────────────

def _make_candle(ts: int, o: float, h: float, l: float, c: float, vol: float = 1000.0) -> CandleData:
    return CandleData(timestamp=ts, open=o, high=h, low=l, close=c, volume=vol)


def _candles_from_closes(values: list[float], spread: float = 0.5) -> list[CandleData]:
    return [
        _make_candle(i * 60_000, v, v + spread, v - spread, v)
        for i, v in enumerate(values)
    ]


def _zigzag(n: int = 60) -> list[CandleData]:
    """Oscillating closes with a mild upward drift."""
    pattern = [0.0, 1.5, 0.5, 2.5, 1.0, 3.0, 0.2, 2.0]
    closes = [100.0 + pattern[i % len(pattern)] + i * 0.1 for i in range(n)]
    return _candles_from_closes(closes)


def _trending_up(n: int = 40) -> list[CandleData]:
    """Every bar's high and low one point above the previous bar's."""
    return [
        _make_candle(i * 60_000, 100.0 + i, 101.0 + i, 99.0 + i, 100.0 + i)
        for i in range(n)
    ]


# ── Moving averages ──────────────────────────────────────────────────────


class TestMovingAverages:
    @pytest.mark.parametrize("period", [1, 3, 10])
    def test_constant_series_equals_constant(self, period):
        values = [5.0] * 25
        assert calculate_sma(values, period) == pytest.approx([5.0] * (26 - period))
        assert calculate_ema(values, period) == pytest.approx([5.0] * (26 - period))

    def test_output_is_trimmed_to_warm_up(self):
        values = [float(i) for i in range(30)]
        assert len(calculate_sma(values, 10)) == 21
        assert len(calculate_ema(values, 10)) == 21

    def test_sma_known_values(self):
        assert calculate_sma([1.0, 2.0, 3.0, 4.0, 5.0], 3) == pytest.approx([2.0, 3.0, 4.0])

    def test_ema_seeded_with_sma(self):
        # k = 0.5: seed 2.0, then (4-2)*0.5+2 = 3, (5-3)*0.5+3 = 4
        assert calculate_ema([1.0, 2.0, 3.0, 4.0, 5.0], 3) == pytest.approx([2.0, 3.0, 4.0])

    def test_short_input_returns_empty(self):
        assert calculate_sma([1.0, 2.0], 3) == []
        assert calculate_ema([1.0, 2.0], 3) == []

    def test_linear_series_ema_lags_by_half_period(self):
        values = [float(i) for i in range(60)]
        ema = calculate_ema(values, 21)
        assert ema[-1] == pytest.approx(59.0 - 10.0)

    def test_ma_and_volume_ma_use_closes_and_volumes(self):
        candles = [
            _make_candle(i, 1.0, 2.0, 0.5, float(i), vol=float(i * 10))
            for i in range(5)
        ]
        assert calculate_ma(candles, 5) == pytest.approx([2.0])
        assert calculate_volume_ma(candles, 5) == pytest.approx([20.0])


# ── RSI ──────────────────────────────────────────────────────────────────


class TestRSI:
    def test_bounded_0_to_100(self):
        rsi = calculate_rsi(_zigzag(), 14)
        assert rsi
        assert all(0.0 <= v <= 100.0 for v in rsi)

    def test_length(self):
        assert len(calculate_rsi(_zigzag(60), 14)) == 47

    def test_strong_uptrend_approaches_100(self):
        candles = _candles_from_closes([100.0 * (i + 1) for i in range(40)])
        assert calculate_rsi(candles, 14)[-1] > 98.0

    def test_downtrend_is_zero(self):
        candles = _candles_from_closes([1000.0 - 10 * i for i in range(40)])
        assert all(v == 0.0 for v in calculate_rsi(candles, 14))

    def test_flat_series_is_zero(self):
        # No gains and no losses: the zero loss is replaced by 1, RS = 0.
        candles = _candles_from_closes([50.0] * 20)
        assert calculate_rsi(candles, 14) == pytest.approx([0.0] * 7)

    def test_seed_includes_leading_zero_change(self):
        # changes: 0, +1, +1 → avg_gain = 2/3, avg_loss 0 → 1
        candles = _candles_from_closes([10.0, 11.0, 12.0])
        rs = 2 / 3
        assert calculate_rsi(candles, 3) == pytest.approx([100 - 100 / (1 + rs)])

    def test_short_input_returns_empty(self):
        assert calculate_rsi(_zigzag(5), 14) == []


# ── ATR ──────────────────────────────────────────────────────────────────


class TestATR:
    def test_uniform_range(self):
        candles = [_make_candle(i, 10.0, 11.0, 9.0, 10.0) for i in range(20)]
        atr = calculate_atr(candles, 14)
        assert len(atr) == 7
        assert atr == pytest.approx([2.0] * 7)

    def test_first_bar_uses_own_low_as_previous_close(self):
        candles = [_make_candle(0, 10.0, 12.0, 9.0, 11.0)]
        # max(3, |12-9|, |9-9|) = 3
        assert true_ranges(candles) == [3.0]

    def test_gap_counts_towards_true_range(self):
        candles = [
            _make_candle(0, 10.0, 10.5, 9.5, 10.0),
            _make_candle(1, 13.0, 13.5, 12.5, 13.0),
        ]
        assert true_ranges(candles)[1] == pytest.approx(3.5)

    def test_never_negative(self):
        assert all(v >= 0 for v in calculate_atr(_zigzag(), 14))

    def test_short_input_returns_empty(self):
        assert calculate_atr(_zigzag(5), 14) == []


# ── ADX ──────────────────────────────────────────────────────────────────


class TestADX:
    def test_length(self):
        assert len(calculate_adx(_zigzag(60), 14)) == 60 - 28 + 1

    def test_needs_two_periods(self):
        assert calculate_adx(_zigzag(27), 14) == []
        assert len(calculate_adx(_zigzag(28), 14)) == 1

    def test_pure_uptrend_is_100(self):
        # +DM = 1 every bar, -DM = 0, TR = 2 → +DI = 50, -DI = 0, DX = 100
        adx = calculate_adx(_trending_up(40), 14)
        assert adx == pytest.approx([100.0] * len(adx))

    def test_flat_market_is_zero(self):
        candles = [_make_candle(i, 5.0, 5.0, 5.0, 5.0) for i in range(40)]
        assert calculate_adx(candles, 14) == pytest.approx([0.0] * 13)

    def test_never_negative(self):
        adx = calculate_adx(_zigzag(80), 14)
        assert adx
        assert all(v >= 0 for v in adx)


# ── Bollinger Bands ──────────────────────────────────────────────────────


class TestBollinger:
    def test_known_values(self):
        candles = _candles_from_closes([1.0, 2.0, 3.0, 4.0, 5.0])
        bands = calculate_bollinger(candles, 5, 2.0)
        sigma = math.sqrt(2.0)  # population std-dev of 1..5
        assert bands.middle == pytest.approx([3.0])
        assert bands.upper == pytest.approx([3.0 + 2 * sigma])
        assert bands.lower == pytest.approx([3.0 - 2 * sigma])

    def test_constant_series_collapses(self):
        bands = calculate_bollinger(_candles_from_closes([7.0] * 25), 20, 2.0)
        assert bands.upper == pytest.approx(bands.middle)
        assert bands.lower == pytest.approx(bands.middle)
        assert len(bands.middle) == 6

    def test_upper_above_lower(self):
        bands = calculate_bollinger(_zigzag(), 20, 2.0)
        assert all(u >= m >= l for u, m, l in zip(bands.upper, bands.middle, bands.lower))

    def test_short_input_returns_empty_bands(self):
        bands = calculate_bollinger(_zigzag(10), 20, 2.0)
        assert bands.upper == bands.middle == bands.lower == []


# ── Stochastic RSI ───────────────────────────────────────────────────────


class TestStochRSI:
    def test_lengths(self):
        # rsi: 40-14+1 = 27, raw: 27-14+1 = 14, %K: 12, %D: 10
        k, d = calculate_stoch_rsi(_zigzag(40), 14, 3, 3)
        assert len(k) == 12
        assert len(d) == 10

    def test_bounded_0_to_100(self):
        k, d = calculate_stoch_rsi(_zigzag(80), 14, 3, 3)
        assert all(0.0 <= v <= 100.0 for v in k + d)

    def test_flat_rsi_window_is_zero(self):
        k, d = calculate_stoch_rsi(_candles_from_closes([20.0] * 40), 14, 3, 3)
        assert k == pytest.approx([0.0] * len(k))
        assert d == pytest.approx([0.0] * len(d))

    def test_d_is_sma_of_k(self):
        k, d = calculate_stoch_rsi(_zigzag(60), 14, 3, 3)
        assert d == pytest.approx(calculate_sma(k, 3))

    def test_short_input_returns_empty(self):
        assert calculate_stoch_rsi(_zigzag(20), 14, 3, 3) == ([], [])


class TestDeterminism:
    def test_identical_input_identical_output(self):
        candles = _zigzag(80)
        assert calculate_rsi(candles, 14) == calculate_rsi(candles, 14)
        assert calculate_adx(candles, 14) == calculate_adx(candles, 14)
        assert calculate_stoch_rsi(candles, 14, 3, 3) == calculate_stoch_rsi(candles, 14, 3, 3)
        assert calculate_bollinger(candles) == calculate_bollinger(candles)
