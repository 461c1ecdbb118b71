"""Order book analysis — depth metrics, composite score and interpretation.

Pure functions over a single ``OrderBookData`` snapshot, no I/O.

Preconditions: both sides of the book are non-empty and every price is
positive.  Neither is guarded against.  An empty side raises
``IndexError``, and a zero price raises ``ZeroDivisionError`` from the
price-impact walk or from ``interpret_metrics``.  A book whose quantities
are all zero yields a ``nan`` imbalance.
"""

import logging
import math

from scanner.orderbook.models import (
    Interpretation,
    OrderBookData,
    OrderBookMetrics,
    PriceImpact,
    PriceLevel,
    SideValues,
)

logger = logging.getLogger("scanner.orderbook")

DEFAULT_TARGET_VOLUME = 10.0

# ── Score / interpretation thresholds ────────────────────────────────────
LIQUIDITY_RATIO_HIGH = 1.2
LIQUIDITY_RATIO_LOW = 0.8
IMBALANCE_THRESHOLD = 0.2
LEVEL_PROXIMITY = 0.001  # 0.1% of price counts as "at" a level
ALERT_BULLISH_SCORE = 8
ALERT_BEARISH_SCORE = 2
BUY_SCORE = 6
SELL_SCORE = 4


def calculate_bid_ask_imbalance(
    bids: list[PriceLevel], asks: list[PriceLevel], current_price: float
) -> float:
    """Distance-weighted imbalance in roughly [-1, 1].

    Each level's quantity is weighted by ``1 / (distance from mid + 1)``
    so orders near the touch dominate.  Positive means bid-heavy.
    """
    weighted_bids = sum(qty / (current_price - price + 1) for price, qty in bids)
    weighted_asks = sum(qty / (price - current_price + 1) for price, qty in asks)
    total = weighted_bids + weighted_asks
    if total == 0:
        return math.nan
    return (weighted_bids - weighted_asks) / total


def calculate_liquidity(bids: list[PriceLevel], asks: list[PriceLevel]) -> SideValues:
    """Notional (price × quantity) resting on each side."""
    return SideValues(
        bids=sum(price * qty for price, qty in bids),
        asks=sum(price * qty for price, qty in asks),
    )


def calculate_depth(bids: list[PriceLevel], asks: list[PriceLevel]) -> SideValues:
    return SideValues(bids=len(bids), asks=len(asks))


def _walk_impact(
    levels: list[PriceLevel], target_volume: float, direction: int
) -> float:
    """Fractional distance from the top level to where *target_volume* fills.

    *direction* is +1 for the ask side (prices rise) and -1 for bids.
    Returns 0 when the side cannot fill the target.
    """
    best = levels[0][0]
    accumulated = 0.0
    for price, qty in levels:
        accumulated += qty
        if accumulated >= target_volume:
            return (price - best) * direction / best
    return 0.0


def calculate_price_impact(
    bids: list[PriceLevel], asks: list[PriceLevel], target_volume: float
) -> PriceImpact:
    """Price impact of a market buy (walking asks) and sell (walking bids)."""
    return PriceImpact(
        buy=_walk_impact(asks, target_volume, 1),
        sell=_walk_impact(bids, target_volume, -1),
    )


def find_support_resistance(
    bids: list[PriceLevel], asks: list[PriceLevel]
) -> tuple[float, float]:
    """Locate the heaviest volume clusters around the touch.

    Quantities from both sides are bucketed by price truncated to two
    decimals.  Support is the heaviest bucket at or below the best bid,
    resistance the heaviest at or above the best ask; each falls back to
    the best price itself when no bucket qualifies.
    """
    volume_by_price: dict[float, float] = {}
    for price, qty in (*bids, *asks):
        bucket = math.floor(price * 100) / 100
        volume_by_price[bucket] = volume_by_price.get(bucket, 0.0) + qty

    ranked = sorted(volume_by_price.items(), key=lambda item: item[1], reverse=True)

    best_bid = bids[0][0]
    best_ask = asks[0][0]
    support = next((price for price, _ in ranked if price <= best_bid), None)
    resistance = next((price for price, _ in ranked if price >= best_ask), None)
    return support or best_bid, resistance or best_ask


def calculate_score(
    imbalance: float, liquidity: SideValues, price_impact: PriceImpact
) -> float:
    """Composite 0–10 score.

    * |imbalance| × 3 (0–3 points)
    * ±2 when the bid/ask liquidity ratio is above 1.2 / below 0.8
    * ±3 when buying is cheaper / dearer than selling in price impact
    """
    score = abs(imbalance * 3)

    ratio = liquidity.ratio
    if ratio > LIQUIDITY_RATIO_HIGH:
        score += 2
    elif ratio < LIQUIDITY_RATIO_LOW:
        score -= 2

    if price_impact.buy < price_impact.sell:
        score += 3
    elif price_impact.sell < price_impact.buy:
        score -= 3

    return min(max(score, 0), 10)


def analyze_order_book(
    book: OrderBookData, target_volume: float = DEFAULT_TARGET_VOLUME
) -> OrderBookMetrics:
    """Compute the full metric set for one depth snapshot.

    Args:
        book: Snapshot with non-empty, best-first ``bids`` and ``asks``.
        target_volume: Size used for the price-impact walk.
    """
    bids, asks = book.bids, book.asks
    current_price = (bids[0][0] + asks[0][0]) / 2

    imbalance = calculate_bid_ask_imbalance(bids, asks, current_price)
    liquidity = calculate_liquidity(bids, asks)
    depth = calculate_depth(bids, asks)
    price_impact = calculate_price_impact(bids, asks, target_volume)
    support, resistance = find_support_resistance(bids, asks)

    metrics = OrderBookMetrics(
        bid_ask_imbalance=imbalance,
        liquidity=liquidity,
        depth=depth,
        price_impact=price_impact,
        support=support,
        resistance=resistance,
        current_price=current_price,
        score=calculate_score(imbalance, liquidity, price_impact),
    )
    logger.debug(
        "Order book @%d: mid=%.8f imbalance=%.4f score=%.2f",
        book.timestamp,
        current_price,
        imbalance,
        metrics.score,
    )
    return metrics


def interpret_metrics(metrics: OrderBookMetrics) -> Interpretation:
    """Map metrics to a BUY / SELL / NEUTRAL read with confidence and alert.

    Starting from ``metrics.score``:

    * +1 when price sits within 0.1% of support, else −1 when within 0.1%
      of resistance.
    * ±2 for imbalance beyond ±0.2, ±1 for a liquidity ratio outside
      [0.8, 1.2], each adding a reason fragment.

    The adjusted score drives the alert (≥ 8 bullish, ≤ 2 bearish), the
    signal (≥ 6 BUY, ≤ 4 SELL) and ``confidence = min(|score| / 10, 1)``.
    """
    score = metrics.score
    reasons: list[str] = []
    price = metrics.current_price

    price_action = "Between levels"
    support_distance = abs(price - metrics.support) / price
    resistance_distance = abs(price - metrics.resistance) / price
    if support_distance < LEVEL_PROXIMITY:
        price_action = "At support"
        score += 1
    elif resistance_distance < LEVEL_PROXIMITY:
        price_action = "At resistance"
        score -= 1

    if metrics.bid_ask_imbalance > IMBALANCE_THRESHOLD:
        reasons.append("Strong buying pressure")
        score += 2
    elif metrics.bid_ask_imbalance < -IMBALANCE_THRESHOLD:
        reasons.append("Strong selling pressure")
        score -= 2

    ratio = metrics.liquidity.ratio
    if ratio > LIQUIDITY_RATIO_HIGH:
        reasons.append("Higher bid liquidity")
        score += 1
    elif ratio < LIQUIDITY_RATIO_LOW:
        reasons.append("Higher ask liquidity")
        score -= 1

    alert = None
    if score >= ALERT_BULLISH_SCORE:
        alert = "Strong bullish signal detected!"
    elif score <= ALERT_BEARISH_SCORE:
        alert = "Strong bearish signal detected!"

    if score >= BUY_SCORE:
        signal = "BUY"
    elif score <= SELL_SCORE:
        signal = "SELL"
    else:
        signal = "NEUTRAL"

    return Interpretation(
        signal=signal,
        confidence=min(abs(score) / 10, 1),
        reason=", ".join(reasons),
        price_action=price_action,
        alert=alert,
    )
