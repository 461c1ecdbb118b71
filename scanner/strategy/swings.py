"""Swing points, Fibonacci trade levels and daily candle shape — pure functions."""

from collections.abc import Callable, Sequence
from typing import Optional

from scanner.strategy.models import CandleData, Direction, FibonacciLevels, SwingPoint

SwingFinder = Callable[[Sequence[CandleData]], list[SwingPoint]]

# A daily candle is "long-bodied" when its body exceeds this share of range.
LONG_BODY_RATIO = 0.6


def find_swing_points(
    candles: Sequence[CandleData], lookback: int = 10
) -> list[SwingPoint]:
    """Identify swing highs and lows.

    A swing high is a candle whose high is strictly higher than every high
    in the *lookback* candles on each side; a swing low is the mirror on
    lows.  Only candles with a full neighbourhood on both sides qualify.

    Points come back in time order; when one candle is both, its HIGH is
    listed before its LOW.
    """
    points: list[SwingPoint] = []
    for i in range(lookback, len(candles) - lookback):
        left = candles[i - lookback : i]
        right = candles[i + 1 : i + lookback + 1]
        candle = candles[i]

        if candle.high > max(c.high for c in left) and candle.high > max(
            c.high for c in right
        ):
            points.append(
                SwingPoint(price=candle.high, timestamp=candle.timestamp, type="HIGH")
            )

        if candle.low < min(c.low for c in left) and candle.low < min(
            c.low for c in right
        ):
            points.append(
                SwingPoint(price=candle.low, timestamp=candle.timestamp, type="LOW")
            )
    return points


def calculate_fibonacci_levels(swing_high: float, swing_low: float) -> FibonacciLevels:
    """Return the 161.8% extension and 61.8% retracement of a swing range."""
    price_range = swing_high - swing_low
    return FibonacciLevels(
        extension_1618=swing_high + price_range * 1.618,
        retracement_618=swing_high - price_range * 0.618,
    )


def calculate_trade_levels(
    candles: Sequence[CandleData],
    direction: Direction,
    lookback: int = 10,
    swing_finder: Optional[SwingFinder] = None,
) -> Optional[FibonacciLevels]:
    """Derive Fibonacci levels from the most recent qualifying swing pair.

    * ``BULLISH``: the latest swing HIGH, then the latest swing LOW that
      is older than it.
    * ``BEARISH``: the latest swing LOW, then the latest swing HIGH that
      is older than it.

    *swing_finder* replaces :func:`find_swing_points` when supplied.

    Returns ``None`` when fewer than two swing points exist or no
    qualifying pair is found.
    """
    if swing_finder is None:
        points = find_swing_points(candles, lookback)
    else:
        points = swing_finder(candles)
    if len(points) < 2:
        return None

    ordered = sorted(points, key=lambda p: p.timestamp, reverse=True)

    if direction == "BULLISH":
        anchor_type, pair_type = "HIGH", "LOW"
    else:
        anchor_type, pair_type = "LOW", "HIGH"

    anchor = next((p for p in ordered if p.type == anchor_type), None)
    anchor_time = anchor.timestamp if anchor is not None else 0
    pair = next(
        (p for p in ordered if p.type == pair_type and p.timestamp < anchor_time),
        None,
    )
    if anchor is None or pair is None:
        return None

    if direction == "BULLISH":
        return calculate_fibonacci_levels(anchor.price, pair.price)
    return calculate_fibonacci_levels(pair.price, anchor.price)


# ── Daily candle shape ───────────────────────────────────────────────────


def _is_long_body(candle: CandleData) -> bool:
    body = abs(candle.close - candle.open)
    return body > (candle.high - candle.low) * LONG_BODY_RATIO


def is_daily_bullish(candle: CandleData) -> bool:
    """Long-bodied candle that closed above its open."""
    return candle.close > candle.open and _is_long_body(candle)


def is_daily_bearish(candle: CandleData) -> bool:
    """Long-bodied candle that closed below its open."""
    return candle.close < candle.open and _is_long_body(candle)


def classify_daily_candle(candle: CandleData) -> Direction:
    if is_daily_bullish(candle):
        return "BULLISH"
    if is_daily_bearish(candle):
        return "BEARISH"
    return "NEUTRAL"
