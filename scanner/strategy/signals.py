"""Signal events — turn a condition result into an alert record. Pure functions.

One condition result produces at most one event.  Crossovers prefer the
"over" side when, improbably, both flags are set.  ATR and ADX readings are
reported whenever the value is non-zero; they carry no direction.

Trend results raise ``LONG`` / ``SHORT`` when a direction was found and
carry the Fibonacci trade levels along when a swing pair was available.
"""

from collections.abc import Sequence
from typing import Optional

from scanner.models.indicator_config import IndicatorConfig
from scanner.strategy.conditions import (
    ADXConditions,
    ATRConditions,
    ConditionResult,
    EMAConditions,
    MAConditions,
    PriceEMAConditions,
    StochRSIConditions,
    TrendConditions,
    VolumeConditions,
)
from scanner.strategy.indicators import calculate_ema, calculate_ma, calculate_rsi, closes
from scanner.strategy.models import CandleData, SignalEvent

SIGNAL_TYPES: tuple[str, ...] = (
    "VOLUME_SPIKE",
    "EMA_CROSS_OVER",
    "EMA_CROSS_UNDER",
    "PRICE_CROSS_EMA",
    "STOCH_RSI_CROSS",
    "MA_CROSS_OVER",
    "MA_CROSS_UNDER",
    "ATR_READING",
    "ADX_READING",
    "LONG",
    "SHORT",
)

SECONDARY_INDICATORS: tuple[str, ...] = ("ema", "sma", "rsi")


def _describe(
    config: IndicatorConfig, result: ConditionResult
) -> Optional[tuple[str, str]]:
    """Return ``(signal_type, details)`` for a fired condition, else ``None``."""
    if isinstance(result, VolumeConditions):
        if not result.volume_spike:
            return None
        ratio = result.current_volume / result.volume_ma if result.volume_ma else 0.0
        return "VOLUME_SPIKE", f"Volume {ratio:.2f}x above average"

    if isinstance(result, EMAConditions):
        fast, slow = config.ema.fast_period, config.ema.slow_period
        if result.cross_over:
            return "EMA_CROSS_OVER", f"EMA {fast} crossed above EMA {slow}"
        if result.cross_under:
            return "EMA_CROSS_UNDER", f"EMA {fast} crossed below EMA {slow}"
        return None

    if isinstance(result, PriceEMAConditions):
        period = config.price_ema.period
        if result.cross_over:
            return "PRICE_CROSS_EMA", f"Price crossed above EMA {period}"
        if result.cross_under:
            return "PRICE_CROSS_EMA", f"Price crossed below EMA {period}"
        return None

    if isinstance(result, MAConditions):
        fast, slow = config.ma.fast_period, config.ma.slow_period
        if result.cross_over:
            return "MA_CROSS_OVER", f"MA {fast} crossed above MA {slow}"
        if result.cross_under:
            return "MA_CROSS_UNDER", f"MA {fast} crossed below MA {slow}"
        return None

    if isinstance(result, StochRSIConditions):
        if result.cross_over:
            side = "above"
        elif result.cross_under:
            side = "below"
        else:
            return None
        details = f"Stoch RSI K({result.k:.2f}) crossed {side} D({result.d:.2f})"
        # %K at or beyond a configured band tags the zone the cross happened in.
        params = config.stoch_rsi
        if params is not None and result.k >= params.overbought:
            details += " in overbought zone"
        elif params is not None and result.k <= params.oversold:
            details += " in oversold zone"
        return "STOCH_RSI_CROSS", details

    if isinstance(result, ATRConditions):
        return ("ATR_READING", f"ATR: {result.atr:.4f}") if result.atr else None

    if isinstance(result, ADXConditions):
        return ("ADX_READING", f"ADX: {result.adx:.2f}") if result.adx else None

    if isinstance(result, TrendConditions):
        trend = result.trend
        if trend.direction == "NEUTRAL":
            return None
        signal_type = "LONG" if trend.direction == "BULLISH" else "SHORT"
        return (
            signal_type,
            f"{trend.direction.title()} trend: RSI {trend.rsi:.2f}, "
            f"EMA21 {trend.ema21:.4f}, EMA50 {trend.ema50:.4f}, "
            f"volume {trend.volume_ratio:.2f}x",
        )

    return None


def build_signal_event(
    symbol: str,
    config: IndicatorConfig,
    result: Optional[ConditionResult],
    candle: CandleData,
) -> Optional[SignalEvent]:
    """Build the alert for *result* evaluated on the bar *candle*.

    Returns ``None`` when nothing fired (including a ``None`` result).
    """
    if result is None:
        return None

    described = _describe(config, result)
    if described is None:
        return None
    signal_type, details = described

    trade_levels = None
    if isinstance(result, TrendConditions):
        trade_levels = result.trade_levels

    return SignalEvent(
        symbol=symbol,
        type=signal_type,
        timeframe=config.timeframe,
        price=candle.close,
        details=details,
        timestamp=candle.timestamp,
        trade_levels=trade_levels,
    )


def secondary_indicator_status(
    candles: Sequence[CandleData],
    price: float,
    kind: str,
    period: int,
    timeframe: str,
) -> str:
    """Describe *price* against a second indicator on another timeframe.

    *kind* is ``"ema"``, ``"sma"`` or ``"rsi"``.  Returns an empty string
    when the indicator has no value yet.

    Raises ``ValueError`` for an unknown *kind*.
    """
    if kind in ("ema", "sma"):
        if kind == "ema":
            series = calculate_ema(closes(candles), period)
        else:
            series = calculate_ma(candles, period)
        if not series:
            return ""
        value = series[-1]
        side = "ABOVE" if price > value else "BELOW"
        return (
            f"Price ${price:.2f} is {side} {kind.upper()}{period} "
            f"(${value:.2f}) on {timeframe}"
        )

    if kind == "rsi":
        rsi_values = calculate_rsi(candles, period)
        if not rsi_values:
            return ""
        rsi = rsi_values[-1]
        if rsi > 70:
            zone = "OVERBOUGHT"
        elif rsi < 30:
            zone = "OVERSOLD"
        else:
            zone = "NEUTRAL"
        return f"RSI{period}: {rsi:.2f} ({zone}) on {timeframe}"

    raise ValueError(
        f"Unknown secondary indicator '{kind}'. Available: {', '.join(SECONDARY_INDICATORS)}"
    )
