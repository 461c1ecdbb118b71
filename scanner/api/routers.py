"""Internal API routers — /conditions, /orderbook, /signals endpoints.

No analytics logic here.  Bodies are parsed into core types and handed to
the condition engine and order book analyzer; parsing failures become 422s.
"""

import logging
import math
from typing import Optional

from fastapi import APIRouter, HTTPException

from scanner.config import load_indicator_config
from scanner.orderbook.analyzer import DEFAULT_TARGET_VOLUME, analyze_order_book, interpret_metrics
from scanner.orderbook.models import OrderBookData
from scanner.strategy.engine import detect_conditions
from scanner.strategy.models import CandleData
from scanner.strategy.signals import (
    SECONDARY_INDICATORS,
    build_signal_event,
    secondary_indicator_status,
)

logger = logging.getLogger("scanner.api")
router = APIRouter()

# Target volume for /orderbook when the body omits one (set at startup).
_default_target_volume: float = DEFAULT_TARGET_VOLUME


def configure_routers(target_volume: Optional[float] = None) -> None:
    """Inject runtime settings from the application startup."""
    global _default_target_volume  # noqa: PLW0603
    if target_volume is not None:
        _default_target_volume = target_volume


def _bad_request(exc: Exception) -> HTTPException:
    logger.warning("Rejected request body: %s", exc)
    return HTTPException(status_code=422, detail=str(exc))


def _parse_candles(body: dict) -> tuple[list[CandleData], Optional[CandleData]]:
    candles = [CandleData.from_dict(c) for c in body.get("candles", [])]
    daily_raw = body.get("daily_candle") or body.get("dailyCandle")
    daily = CandleData.from_dict(daily_raw) if daily_raw else None
    return candles, daily


@router.post("/conditions")
async def post_conditions(body: dict):
    """Evaluate the configured strategy on the supplied candle window.

    Body: ``{"config": {...}, "candles": [...], "daily_candle": {...}}``.
    An empty ``conditions`` object means nothing could be evaluated.
    """
    try:
        config = load_indicator_config(body["config"])
        candles, daily = _parse_candles(body)
    except (KeyError, TypeError, ValueError) as exc:
        raise _bad_request(exc) from exc

    result = detect_conditions(config, candles, daily)
    return {
        "indicator_type": config.indicator_type,
        "conditions": result.to_dict() if result is not None else {},
    }


def _parse_secondary(raw, default_timeframe: str) -> tuple[str, int, str, list[CandleData]]:
    """Read the optional ``secondary`` block of a ``/signals`` body."""
    if not isinstance(raw, dict):
        raise ValueError(f"'secondary' must be a mapping, got {type(raw).__name__}")
    kind = str(raw["kind"]).lower()
    if kind not in SECONDARY_INDICATORS:
        raise ValueError(
            f"Unknown secondary indicator '{kind}'. Available: {', '.join(SECONDARY_INDICATORS)}"
        )
    period = raw.get("period", 14)
    if isinstance(period, bool) or not isinstance(period, int) or period <= 0:
        raise ValueError(f"'secondary.period' must be a positive integer, got {period!r}")
    timeframe = str(raw.get("timeframe", default_timeframe))
    candles = [CandleData.from_dict(c) for c in raw.get("candles", [])]
    return kind, period, timeframe, candles


@router.post("/signals")
async def post_signals(body: dict):
    """Evaluate the strategy and return the alert raised on the last bar.

    Body as for ``/conditions`` plus ``"symbol"``.  ``signal`` is ``null``
    when nothing fired.  An optional ``"secondary": {"kind", "period",
    "timeframe", "candles"}`` block adds a ``secondary`` status line that
    places the last close against an EMA, SMA or RSI on another timeframe.
    """
    try:
        config = load_indicator_config(body["config"])
        symbol = str(body["symbol"])
        candles, daily = _parse_candles(body)
        secondary = None
        if body.get("secondary") is not None:
            secondary = _parse_secondary(body["secondary"], config.timeframe)
    except (KeyError, TypeError, ValueError) as exc:
        raise _bad_request(exc) from exc

    response: dict = {"symbol": symbol, "signal": None}
    if secondary is not None:
        kind, period, timeframe, secondary_candles = secondary
        response["secondary"] = ""
        if candles:
            response["secondary"] = secondary_indicator_status(
                secondary_candles, candles[-1].close, kind, period, timeframe
            )

    if not candles:
        return response

    result = detect_conditions(config, candles, daily)
    event = build_signal_event(symbol, config, result, candles[-1])
    if event is not None:
        logger.info("%s %s: %s", symbol, event.type, event.details)
        response["signal"] = event.to_dict()
    return response


@router.post("/orderbook")
async def post_orderbook(body: dict):
    """Analyze a depth snapshot and interpret the resulting metrics.

    Body: ``{"bids": [[price, qty], ...], "asks": [...], "timestamp": ms,
    "target_volume": 10}``.  Both sides must be non-empty and every price
    positive.
    """
    try:
        book = OrderBookData.from_raw(body)
        target_volume = float(body.get("target_volume", _default_target_volume))
    except (KeyError, TypeError, ValueError) as exc:
        raise _bad_request(exc) from exc

    if not book.bids or not book.asks:
        raise _bad_request(ValueError("Order book needs at least one bid and one ask"))
    if any(price <= 0 for price, _ in (*book.bids, *book.asks)):
        raise _bad_request(ValueError("Order book prices must be positive"))

    metrics = analyze_order_book(book, target_volume)
    if math.isnan(metrics.bid_ask_imbalance):
        raise _bad_request(ValueError("Order book has no resting quantity"))
    return {
        "metrics": metrics.to_dict(),
        "interpretation": interpret_metrics(metrics).to_dict(),
    }
