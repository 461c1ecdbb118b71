"""Technical indicators — SMA, EMA, RSI, ATR, ADX, Bollinger Bands, Stoch RSI.

Pure functions, no I/O.  Every series is returned *trimmed*: the first
element corresponds to the first bar with enough history, so the last
element always lines up with the last candle.  Short input never raises;
it yields an empty series.

The recurrences match the scanner's historical signal output, quirks
included:

* ATR is a plain rolling mean of true range, not Wilder-smoothed.
* Zero denominators in RSI, DX and Stoch RSI are replaced by ``1``.
"""

import math
from collections.abc import Sequence

from scanner.strategy.models import BollingerBands, CandleData


def closes(candles: Sequence[CandleData]) -> list[float]:
    return [c.close for c in candles]


def volumes(candles: Sequence[CandleData]) -> list[float]:
    return [c.volume for c in candles]


# ── Moving averages ──────────────────────────────────────────────────────


def calculate_sma(values: Sequence[float], period: int) -> list[float]:
    """Simple rolling mean over *period* values.

    Output length is ``len(values) - period + 1`` (empty when too short).
    """
    if period <= 0 or len(values) < period:
        return []

    result: list[float] = []
    for i in range(period - 1, len(values)):
        window = values[i - period + 1 : i + 1]
        result.append(sum(window) / period)
    return result


def calculate_ema(values: Sequence[float], period: int) -> list[float]:
    """Exponential moving average seeded with the SMA of the first *period*.

    Recurrence: ``ema = (value - prev) × k + prev`` with ``k = 2 / (period + 1)``.
    Output length is ``len(values) - period + 1``.
    """
    if period <= 0 or len(values) < period:
        return []

    k = 2 / (period + 1)
    ema: list[float] = [sum(values[:period]) / period]
    for i in range(period, len(values)):
        prev = ema[-1]
        ema.append((values[i] - prev) * k + prev)
    return ema


def calculate_ma(candles: Sequence[CandleData], period: int) -> list[float]:
    """SMA of closing prices."""
    return calculate_sma(closes(candles), period)


def calculate_volume_ma(candles: Sequence[CandleData], period: int) -> list[float]:
    """SMA of bar volumes."""
    return calculate_sma(volumes(candles), period)


# ── RSI ──────────────────────────────────────────────────────────────────


def calculate_rsi(candles: Sequence[CandleData], period: int = 14) -> list[float]:
    """Relative Strength Index with Wilder smoothing.

    Algorithm:
        1. change[0] = 0, change[i] = close[i] - close[i-1]
        2. Split into gains and losses (absolute values).
        3. Seed averages = simple mean of the first *period* gains/losses
           (the leading zero change included).
        4. Subsequent: avg = (prev_avg × (period-1) + current) / period
        5. RSI = 100 - 100 / (1 + avg_gain / avg_loss), a zero
           ``avg_loss`` replaced by 1.

    Output length is ``len(candles) - period + 1``.
    """
    if period <= 0 or len(candles) < period:
        return []

    changes = [0.0] + [
        candles[i].close - candles[i - 1].close for i in range(1, len(candles))
    ]
    gains = [ch if ch > 0 else 0.0 for ch in changes]
    losses = [-ch if ch < 0 else 0.0 for ch in changes]

    avg_gain = sum(gains[:period]) / period
    avg_loss = sum(losses[:period]) / period

    def _rsi(ag: float, al: float) -> float:
        rs = ag / (al or 1)
        return 100 - 100 / (1 + rs)

    rsi: list[float] = [_rsi(avg_gain, avg_loss)]
    for i in range(period, len(changes)):
        avg_gain = (avg_gain * (period - 1) + gains[i]) / period
        avg_loss = (avg_loss * (period - 1) + losses[i]) / period
        rsi.append(_rsi(avg_gain, avg_loss))
    return rsi


# ── ATR ──────────────────────────────────────────────────────────────────


def true_ranges(candles: Sequence[CandleData]) -> list[float]:
    """True range per bar; the first bar uses its own low as previous close."""
    trs: list[float] = []
    for i, candle in enumerate(candles):
        prev_close = candles[i - 1].close if i > 0 else candle.low
        trs.append(
            max(
                candle.high - candle.low,
                abs(candle.high - prev_close),
                abs(candle.low - prev_close),
            )
        )
    return trs


def calculate_atr(candles: Sequence[CandleData], period: int = 14) -> list[float]:
    """Average True Range as a simple rolling mean of true range.

    Output length is ``len(candles) - period + 1``.
    """
    return calculate_sma(true_ranges(candles), period)


# ── ADX ──────────────────────────────────────────────────────────────────


def calculate_adx(candles: Sequence[CandleData], period: int = 14) -> list[float]:
    """Average Directional Index.

    Algorithm:
        1. Per bar (from the second): TR from bar-over-bar high/low deltas,
           +DM / -DM zeroed unless the move dominates and is positive.
        2. Seed sums of the first *period* values, then Wilder smoothing
           ``s = s - s / period + raw``.
        3. ±DI = 100 × smoothed DM / smoothed TR.
        4. DX = 100 × |+DI − −DI| / (+DI + −DI), a zero sum replaced by 1.
        5. ADX seed = mean of the first *period* DX values, then
           ``adx = (prev × (period-1) + dx) / period``.

    Requires at least ``2 × period`` candles.  Output length is
    ``len(candles) - 2 × period + 1``.
    """
    if period <= 0 or len(candles) < 2 * period:
        return []

    trs: list[float] = []
    plus_dms: list[float] = []
    minus_dms: list[float] = []

    for i in range(1, len(candles)):
        high = candles[i].high
        low = candles[i].low
        prev_high = candles[i - 1].high
        prev_low = candles[i - 1].low

        trs.append(max(high - low, abs(high - prev_high), abs(low - prev_low)))

        up_move = high - prev_high
        down_move = prev_low - low
        plus_dms.append(up_move if (up_move > down_move and up_move > 0) else 0.0)
        minus_dms.append(down_move if (down_move > up_move and down_move > 0) else 0.0)

    smooth_tr = sum(trs[:period])
    smooth_plus = sum(plus_dms[:period])
    smooth_minus = sum(minus_dms[:period])

    def _dx(s_plus: float, s_minus: float, s_tr: float) -> float:
        if s_tr == 0:
            return 0.0
        plus_di = s_plus / s_tr * 100
        minus_di = s_minus / s_tr * 100
        return abs(plus_di - minus_di) / ((plus_di + minus_di) or 1) * 100

    dxs: list[float] = [_dx(smooth_plus, smooth_minus, smooth_tr)]
    for i in range(period, len(trs)):
        smooth_tr = smooth_tr - smooth_tr / period + trs[i]
        smooth_plus = smooth_plus - smooth_plus / period + plus_dms[i]
        smooth_minus = smooth_minus - smooth_minus / period + minus_dms[i]
        dxs.append(_dx(smooth_plus, smooth_minus, smooth_tr))

    adx: list[float] = [sum(dxs[:period]) / period]
    for i in range(period, len(dxs)):
        adx.append((adx[-1] * (period - 1) + dxs[i]) / period)
    return adx


# ── Bollinger Bands ──────────────────────────────────────────────────────


def calculate_bollinger(
    candles: Sequence[CandleData],
    period: int = 20,
    std_dev: float = 2.0,
) -> BollingerBands:
    """Bollinger Bands over closing prices.

    Middle = SMA(close, *period*)
    Upper  = middle + *std_dev* × σ
    Lower  = middle − *std_dev* × σ

    σ is the population standard deviation of the trailing window.
    """
    values = closes(candles)
    middle = calculate_sma(values, period)
    upper: list[float] = []
    lower: list[float] = []

    for offset, avg in enumerate(middle):
        window = values[offset : offset + period]
        variance = sum((x - avg) ** 2 for x in window) / period
        sigma = math.sqrt(variance)
        upper.append(avg + sigma * std_dev)
        lower.append(avg - sigma * std_dev)

    return BollingerBands(upper=upper, middle=middle, lower=lower)


# ── Stochastic RSI ───────────────────────────────────────────────────────


def calculate_stoch_rsi(
    candles: Sequence[CandleData],
    period: int = 14,
    k_period: int = 3,
    d_period: int = 3,
) -> tuple[list[float], list[float]]:
    """Stochastic RSI %K and %D lines.

    raw = (RSI - min(RSI window)) / (max - min) × 100 over a *period*-long
    window of RSI values (a flat window divides by 1); %K = SMA(raw,
    *k_period*); %D = SMA(%K, *d_period*).

    Returns ``(k, d)``; either may be empty when history is short.
    """
    rsi = calculate_rsi(candles, period)

    stoch: list[float] = []
    for i in range(period - 1, len(rsi)):
        window = rsi[i - period + 1 : i + 1]
        high = max(window)
        low = min(window)
        stoch.append((rsi[i] - low) / ((high - low) or 1) * 100)

    k = calculate_sma(stoch, k_period)
    d = calculate_sma(k, d_period)
    return k, d
