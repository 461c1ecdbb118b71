"""Indicator configuration — one active strategy plus its parameter block.

``IndicatorConfig`` is a tagged union in dataclass form: ``indicator_type``
selects the strategy and only the matching parameter block is read.  The
other blocks may be present (a UI usually keeps all of them around) and are
ignored.
"""

from dataclasses import dataclass
from typing import Literal, Optional

IndicatorType = Literal[
    "volume", "ema", "price-ema", "ma", "stoch-rsi", "trend", "atr", "adx"
]

INDICATOR_TYPES: tuple[str, ...] = (
    "volume",
    "ema",
    "price-ema",
    "ma",
    "stoch-rsi",
    "trend",
    "atr",
    "adx",
)


@dataclass(frozen=True)
class VolumeConfig:
    period: int = 20
    spike_threshold: float = 2.0


@dataclass(frozen=True)
class EMAConfig:
    fast_period: int = 8
    slow_period: int = 21


@dataclass(frozen=True)
class PriceEMAConfig:
    period: int = 21


@dataclass(frozen=True)
class MAConfig:
    fast_period: int = 10
    slow_period: int = 20


@dataclass(frozen=True)
class StochRSIConfig:
    period: int = 14
    k_period: int = 3
    d_period: int = 3
    overbought: float = 80.0
    oversold: float = 20.0


@dataclass(frozen=True)
class ATRConfig:
    period: int = 14


@dataclass(frozen=True)
class ADXConfig:
    period: int = 14


@dataclass(frozen=True)
class TrendConfig:
    """Parameters of the multi-indicator trend recipe.

    The defaults are the classic RSI(14) / EMA(21, 50) / BB(20, 2) /
    volume MA(20) × 2 setup; trend mode uses them when no block is given.
    """

    rsi_period: int = 14
    ema_fast: int = 21
    ema_slow: int = 50
    bb_period: int = 20
    bb_std_dev: float = 2.0
    volume_period: int = 20
    volume_threshold: float = 2.0
    min_candles: int = 50


@dataclass(frozen=True)
class IndicatorConfig:
    """Selects exactly one indicator strategy for the condition engine."""

    indicator_type: IndicatorType
    timeframe: str = "1h"
    volume: Optional[VolumeConfig] = None
    ema: Optional[EMAConfig] = None
    price_ema: Optional[PriceEMAConfig] = None
    ma: Optional[MAConfig] = None
    stoch_rsi: Optional[StochRSIConfig] = None
    trend: Optional[TrendConfig] = None
    atr: Optional[ATRConfig] = None
    adx: Optional[ADXConfig] = None

    def active_params(self):
        """Return the parameter block for ``indicator_type`` (may be ``None``)."""
        return getattr(self, PARAM_FIELDS[self.indicator_type])


# indicator_type → attribute holding its parameter block
PARAM_FIELDS: dict[str, str] = {
    "volume": "volume",
    "ema": "ema",
    "price-ema": "price_ema",
    "ma": "ma",
    "stoch-rsi": "stoch_rsi",
    "trend": "trend",
    "atr": "atr",
    "adx": "adx",
}

# Block classes keyed by attribute name, used by the config loader.
PARAM_CLASSES: dict[str, type] = {
    "volume": VolumeConfig,
    "ema": EMAConfig,
    "price_ema": PriceEMAConfig,
    "ma": MAConfig,
    "stoch_rsi": StochRSIConfig,
    "trend": TrendConfig,
    "atr": ATRConfig,
    "adx": ADXConfig,
}


DEFAULT_INDICATOR_CONFIG = IndicatorConfig(
    indicator_type="volume",
    timeframe="1h",
    volume=VolumeConfig(),
    ema=EMAConfig(),
    price_ema=PriceEMAConfig(),
    ma=MAConfig(),
    stoch_rsi=StochRSIConfig(),
    atr=ATRConfig(),
    adx=ADXConfig(),
    trend=TrendConfig(),
)
