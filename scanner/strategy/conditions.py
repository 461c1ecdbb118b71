"""Condition detectors — one pure function per indicator strategy.

Each detector reads the latest two points of freshly computed series and
reports whether a transition happened on the last bar.  Nothing is cached
between calls: "previous" always means the second-to-last bar of the
window that was passed in.

Crossover tie-break: the *before* side is non-strict and the *after* side
is strict, so a series that touches and then separates counts as a cross
exactly once, and two flat, equal series never cross.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import ClassVar, Optional, Union

from scanner.models.indicator_config import (
    ADXConfig,
    ATRConfig,
    EMAConfig,
    MAConfig,
    PriceEMAConfig,
    StochRSIConfig,
    TrendConfig,
    VolumeConfig,
)
from scanner.strategy.indicators import (
    calculate_adx,
    calculate_atr,
    calculate_ema,
    calculate_ma,
    calculate_stoch_rsi,
    calculate_volume_ma,
    closes,
)
from scanner.strategy.models import CandleData, FibonacciLevels, TrendAnalysis
from scanner.strategy.swings import calculate_trade_levels
from scanner.strategy.trend import analyze_trend


def detect_cross(
    prev_a: float, last_a: float, prev_b: float, last_b: float
) -> tuple[bool, bool]:
    """Return ``(cross_over, cross_under)`` of series *a* against series *b*."""
    cross_over = prev_a <= prev_b and last_a > last_b
    cross_under = prev_a >= prev_b and last_a < last_b
    return cross_over, cross_under


# ── Result variants ──────────────────────────────────────────────────────


@dataclass(frozen=True)
class VolumeConditions:
    indicator_type: ClassVar[str] = "volume"

    volume_spike: bool
    current_volume: float
    volume_ma: float

    def to_dict(self) -> dict:
        return {
            "volumeSpike": self.volume_spike,
            "currentVolume": self.current_volume,
            "volumeMA": self.volume_ma,
        }


@dataclass(frozen=True)
class EMAConditions:
    indicator_type: ClassVar[str] = "ema"

    cross_over: bool
    cross_under: bool
    fast: float
    slow: float

    def to_dict(self) -> dict:
        return {
            "emaCrossOver": self.cross_over,
            "emaCrossUnder": self.cross_under,
            "emaFast": self.fast,
            "emaSlow": self.slow,
        }


@dataclass(frozen=True)
class PriceEMAConditions:
    indicator_type: ClassVar[str] = "price-ema"

    cross_over: bool
    cross_under: bool
    ema: float
    price: float

    def to_dict(self) -> dict:
        return {
            "priceCrossOver": self.cross_over,
            "priceCrossUnder": self.cross_under,
            "ema": self.ema,
            "price": self.price,
        }


@dataclass(frozen=True)
class MAConditions:
    indicator_type: ClassVar[str] = "ma"

    cross_over: bool
    cross_under: bool
    fast: float
    slow: float

    def to_dict(self) -> dict:
        return {
            "maCrossOver": self.cross_over,
            "maCrossUnder": self.cross_under,
            "maFast": self.fast,
            "maSlow": self.slow,
        }


@dataclass(frozen=True)
class StochRSIConditions:
    indicator_type: ClassVar[str] = "stoch-rsi"

    cross_over: bool
    cross_under: bool
    k: float
    d: float

    def to_dict(self) -> dict:
        return {
            "stochRSICrossOver": self.cross_over,
            "stochRSICrossUnder": self.cross_under,
            "kValue": self.k,
            "dValue": self.d,
        }


@dataclass(frozen=True)
class ATRConditions:
    indicator_type: ClassVar[str] = "atr"

    atr: float

    def to_dict(self) -> dict:
        return {"atr": self.atr}


@dataclass(frozen=True)
class ADXConditions:
    indicator_type: ClassVar[str] = "adx"

    adx: float

    def to_dict(self) -> dict:
        return {"adx": self.adx}


@dataclass(frozen=True)
class TrendConditions:
    indicator_type: ClassVar[str] = "trend"

    trend: TrendAnalysis
    trade_levels: Optional[FibonacciLevels] = None

    def to_dict(self) -> dict:
        return {
            **self.trend.to_dict(),
            "tradeLevels": self.trade_levels.to_dict() if self.trade_levels else None,
        }


ConditionResult = Union[
    VolumeConditions,
    EMAConditions,
    PriceEMAConditions,
    MAConditions,
    StochRSIConditions,
    ATRConditions,
    ADXConditions,
    TrendConditions,
]


# ── Detectors ────────────────────────────────────────────────────────────
# Signature: (params, candles, daily_candle) -> result or None.
# ``None`` means "nothing to report this cycle": missing parameter block or
# not enough history for the configured periods.


def detect_volume(
    params: Optional[VolumeConfig],
    candles: Sequence[CandleData],
    daily_candle: Optional[CandleData] = None,
) -> Optional[VolumeConditions]:
    if params is None:
        return None
    volume_ma = calculate_volume_ma(candles, params.period)
    if not volume_ma:
        return None

    current_volume = candles[-1].volume
    last_ma = volume_ma[-1]
    return VolumeConditions(
        volume_spike=current_volume > last_ma * params.spike_threshold,
        current_volume=current_volume,
        volume_ma=last_ma,
    )


def detect_ema_cross(
    params: Optional[EMAConfig],
    candles: Sequence[CandleData],
    daily_candle: Optional[CandleData] = None,
) -> Optional[EMAConditions]:
    if params is None:
        return None
    values = closes(candles)
    fast = calculate_ema(values, params.fast_period)
    slow = calculate_ema(values, params.slow_period)
    if len(fast) < 2 or len(slow) < 2:
        return None

    cross_over, cross_under = detect_cross(fast[-2], fast[-1], slow[-2], slow[-1])
    return EMAConditions(
        cross_over=cross_over,
        cross_under=cross_under,
        fast=fast[-1],
        slow=slow[-1],
    )


def detect_price_ema_cross(
    params: Optional[PriceEMAConfig],
    candles: Sequence[CandleData],
    daily_candle: Optional[CandleData] = None,
) -> Optional[PriceEMAConditions]:
    if params is None:
        return None
    ema = calculate_ema(closes(candles), params.period)
    if len(ema) < 2:
        return None

    prev_price = candles[-2].close
    price = candles[-1].close
    cross_over, cross_under = detect_cross(prev_price, price, ema[-2], ema[-1])
    return PriceEMAConditions(
        cross_over=cross_over,
        cross_under=cross_under,
        ema=ema[-1],
        price=price,
    )


def detect_ma_cross(
    params: Optional[MAConfig],
    candles: Sequence[CandleData],
    daily_candle: Optional[CandleData] = None,
) -> Optional[MAConditions]:
    if params is None:
        return None
    fast = calculate_ma(candles, params.fast_period)
    slow = calculate_ma(candles, params.slow_period)
    if len(fast) < 2 or len(slow) < 2:
        return None

    cross_over, cross_under = detect_cross(fast[-2], fast[-1], slow[-2], slow[-1])
    return MAConditions(
        cross_over=cross_over,
        cross_under=cross_under,
        fast=fast[-1],
        slow=slow[-1],
    )


def detect_stoch_rsi_cross(
    params: Optional[StochRSIConfig],
    candles: Sequence[CandleData],
    daily_candle: Optional[CandleData] = None,
) -> Optional[StochRSIConditions]:
    if params is None:
        return None
    k, d = calculate_stoch_rsi(candles, params.period, params.k_period, params.d_period)
    if len(k) < 2 or len(d) < 2:
        return None

    cross_over, cross_under = detect_cross(k[-2], k[-1], d[-2], d[-1])
    return StochRSIConditions(
        cross_over=cross_over,
        cross_under=cross_under,
        k=k[-1],
        d=d[-1],
    )


def detect_atr(
    params: Optional[ATRConfig],
    candles: Sequence[CandleData],
    daily_candle: Optional[CandleData] = None,
) -> Optional[ATRConditions]:
    if params is None:
        return None
    atr = calculate_atr(candles, params.period)
    if not atr:
        return None
    return ATRConditions(atr=atr[-1])


def detect_adx(
    params: Optional[ADXConfig],
    candles: Sequence[CandleData],
    daily_candle: Optional[CandleData] = None,
) -> Optional[ADXConditions]:
    if params is None:
        return None
    adx = calculate_adx(candles, params.period)
    if not adx:
        return None
    return ADXConditions(adx=adx[-1])


def detect_trend(
    params: Optional[TrendConfig],
    candles: Sequence[CandleData],
    daily_candle: Optional[CandleData] = None,
) -> Optional[TrendConditions]:
    """Trend mode; the parameter block is optional, the daily candle is not."""
    if daily_candle is None:
        return None

    trend = analyze_trend(candles, daily_candle, params)
    levels = None
    if trend.direction != "NEUTRAL":
        levels = calculate_trade_levels(candles, trend.direction)
    return TrendConditions(trend=trend, trade_levels=levels)
