"""Detector registry — maps indicator types to condition detectors.

Used by the condition engine to dispatch on ``IndicatorConfig.indicator_type``.
"""

from collections.abc import Callable

from scanner.strategy.conditions import (
    detect_adx,
    detect_atr,
    detect_ema_cross,
    detect_ma_cross,
    detect_price_ema_cross,
    detect_stoch_rsi_cross,
    detect_trend,
    detect_volume,
)


DETECTOR_REGISTRY: dict[str, Callable] = {
    "volume": detect_volume,
    "ema": detect_ema_cross,
    "price-ema": detect_price_ema_cross,
    "ma": detect_ma_cross,
    "stoch-rsi": detect_stoch_rsi_cross,
    "trend": detect_trend,
    "atr": detect_atr,
    "adx": detect_adx,
}


def get_detector(indicator_type: str) -> Callable:
    """Look up the detector for *indicator_type*.

    Raises ``KeyError`` if the indicator type is not registered.
    """
    if indicator_type not in DETECTOR_REGISTRY:
        raise KeyError(
            f"Unknown indicator type '{indicator_type}'. "
            f"Available: {', '.join(DETECTOR_REGISTRY.keys())}"
        )
    return DETECTOR_REGISTRY[indicator_type]
