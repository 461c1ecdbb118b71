"""Order book data models — depth snapshots and derived metrics."""

import math
from dataclasses import dataclass
from typing import Literal, Optional

OrderBookSignal = Literal["BUY", "SELL", "NEUTRAL"]

PriceLevel = tuple[float, float]  # (price, quantity)


@dataclass(frozen=True)
class OrderBookData:
    """A depth snapshot.

    ``bids`` are sorted by price descending and ``asks`` ascending, so the
    best bid / best ask sit at index 0.  Both sides must be non-empty.
    """

    bids: list[PriceLevel]
    asks: list[PriceLevel]
    timestamp: int = 0

    @classmethod
    def from_raw(cls, payload: dict) -> "OrderBookData":
        """Parse an exchange-style depth payload.

        Accepts ``[price, qty]`` pairs as numbers or numeric strings (the
        usual REST depth format) and sorts each side best-first.
        """
        bids = sorted(
            ((float(p), float(q)) for p, q in payload.get("bids", [])),
            key=lambda level: level[0],
            reverse=True,
        )
        asks = sorted(
            ((float(p), float(q)) for p, q in payload.get("asks", [])),
            key=lambda level: level[0],
        )
        timestamp = payload.get("timestamp", payload.get("lastUpdateId", 0))
        return cls(bids=bids, asks=asks, timestamp=int(timestamp))


@dataclass(frozen=True)
class SideValues:
    """A bid-side / ask-side pair of numbers."""

    bids: float
    asks: float

    @property
    def ratio(self) -> float:
        """Bids over asks; ``inf`` / ``nan`` when the ask side is zero."""
        if self.asks == 0:
            return math.inf if self.bids > 0 else math.nan
        return self.bids / self.asks


@dataclass(frozen=True)
class PriceImpact:
    """Fractional move from the top of book needed to fill the target size."""

    buy: float
    sell: float


@dataclass(frozen=True)
class OrderBookMetrics:
    """Microstructure metrics derived from one ``OrderBookData`` snapshot."""

    bid_ask_imbalance: float
    liquidity: SideValues
    depth: SideValues
    price_impact: PriceImpact
    support: float
    resistance: float
    current_price: float
    score: float

    def to_dict(self) -> dict:
        return {
            "bidAskImbalance": self.bid_ask_imbalance,
            "liquidity": {"bids": self.liquidity.bids, "asks": self.liquidity.asks},
            "depth": {"bids": int(self.depth.bids), "asks": int(self.depth.asks)},
            "priceImpact": {"buy": self.price_impact.buy, "sell": self.price_impact.sell},
            "support": self.support,
            "resistance": self.resistance,
            "currentPrice": self.current_price,
            "score": self.score,
        }


@dataclass(frozen=True)
class Interpretation:
    """Directional read of a set of order book metrics."""

    signal: OrderBookSignal
    confidence: float
    reason: str
    price_action: str
    alert: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "signal": self.signal,
            "confidence": self.confidence,
            "reason": self.reason,
            "priceAction": self.price_action,
            "alert": self.alert,
        }
