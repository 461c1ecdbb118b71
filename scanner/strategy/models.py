"""Strategy data models — typed representations for indicator outputs."""

from dataclasses import asdict, dataclass
from typing import Literal, Optional

Direction = Literal["BULLISH", "BEARISH", "NEUTRAL"]
SwingType = Literal["HIGH", "LOW"]


@dataclass(frozen=True)
class CandleData:
    """A single OHLCV bar. ``timestamp`` is the bar open time in epoch ms."""

    timestamp: int
    open: float
    high: float
    low: float
    close: float
    volume: float

    @classmethod
    def from_dict(cls, data: dict) -> "CandleData":
        """Build a candle from a JSON-style mapping (numeric strings allowed)."""
        return cls(
            timestamp=int(data["timestamp"]),
            open=float(data["open"]),
            high=float(data["high"]),
            low=float(data["low"]),
            close=float(data["close"]),
            volume=float(data.get("volume", 0.0)),
        )


@dataclass(frozen=True)
class SwingPoint:
    """A local price extreme relative to a symmetric neighbourhood."""

    price: float
    timestamp: int
    type: SwingType


@dataclass(frozen=True)
class FibonacciLevels:
    """Trade levels derived from one swing high / swing low pair."""

    extension_1618: float
    retracement_618: float

    def to_dict(self) -> dict:
        return {
            "extension1618": self.extension_1618,
            "retracement618": self.retracement_618,
        }


@dataclass(frozen=True)
class BollingerBands:
    """Upper / middle / lower band series, all the same length."""

    upper: list[float]
    middle: list[float]
    lower: list[float]


@dataclass(frozen=True)
class TrendAnalysis:
    """Point-in-time snapshot used by the ``trend`` indicator mode."""

    is_valid: bool
    direction: Direction
    rsi: float
    ema21: float
    ema50: float
    bb_upper: float
    bb_lower: float
    bb_middle: float
    volume_ratio: float
    volume_spike: bool
    daily_candle: Direction

    def to_dict(self) -> dict:
        data = asdict(self)
        return {
            "isValid": data["is_valid"],
            "direction": data["direction"],
            "rsi": data["rsi"],
            "ema21": data["ema21"],
            "ema50": data["ema50"],
            "bbUpper": data["bb_upper"],
            "bbLower": data["bb_lower"],
            "bbMiddle": data["bb_middle"],
            "volumeRatio": data["volume_ratio"],
            "volumeSpike": data["volume_spike"],
            "dailyCandle": data["daily_candle"],
        }


# Returned when the window is too short for the trend recipe.
NEUTRAL_TREND = TrendAnalysis(
    is_valid=False,
    direction="NEUTRAL",
    rsi=0.0,
    ema21=0.0,
    ema50=0.0,
    bb_upper=0.0,
    bb_lower=0.0,
    bb_middle=0.0,
    volume_ratio=0.0,
    volume_spike=False,
    daily_candle="BEARISH",
)


@dataclass(frozen=True)
class SignalEvent:
    """A discrete alert raised when a configured condition fires."""

    symbol: str
    type: str
    timeframe: str
    price: float
    details: str
    timestamp: int
    trade_levels: Optional[FibonacciLevels] = None

    def to_dict(self) -> dict:
        return {
            "symbol": self.symbol,
            "type": self.type,
            "timeframe": self.timeframe,
            "price": self.price,
            "details": self.details,
            "timestamp": self.timestamp,
            "tradeLevels": self.trade_levels.to_dict() if self.trade_levels else None,
        }
