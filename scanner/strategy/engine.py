"""Condition engine — evaluates the configured strategy on a candle window.

Stateless across calls: every evaluation recomputes from the window it is
handed, so the caller owns the only state (the window itself).
"""

import logging
from collections.abc import Sequence
from typing import Optional

from scanner.models.indicator_config import IndicatorConfig
from scanner.strategy.conditions import ConditionResult
from scanner.strategy.models import CandleData
from scanner.strategy.registry import get_detector

logger = logging.getLogger("scanner.conditions")

# Crossovers need a previous and a current bar.
MIN_CANDLES = 2


def detect_conditions(
    config: IndicatorConfig,
    candles: Sequence[CandleData],
    daily_candle: Optional[CandleData] = None,
) -> Optional[ConditionResult]:
    """Run the detector selected by ``config.indicator_type``.

    Args:
        config: Active strategy and its parameter block.
        candles: Window of closed candles, oldest first.
        daily_candle: Latest daily candle; required by ``trend`` mode only.

    Returns:
        The typed result variant for the active strategy, or ``None`` when
        there is nothing to evaluate (short window, missing parameter
        block, or trend mode without a daily candle).
    """
    if len(candles) < MIN_CANDLES:
        return None

    detector = get_detector(config.indicator_type)
    return detector(config.active_params(), candles, daily_candle)


class ConditionEngine:
    """Binds one ``IndicatorConfig`` and evaluates it per market update.

    Args:
        config: The strategy to evaluate on every :meth:`check` call.
    """

    def __init__(self, config: IndicatorConfig) -> None:
        self._config = config

    @property
    def config(self) -> IndicatorConfig:
        return self._config

    def check(
        self,
        candles: Sequence[CandleData],
        daily_candle: Optional[CandleData] = None,
    ) -> Optional[ConditionResult]:
        """Evaluate the bound strategy on *candles*."""
        result = detect_conditions(self._config, candles, daily_candle)
        if result is None:
            logger.debug(
                "No %s conditions for %d candle(s)",
                self._config.indicator_type,
                len(candles),
            )
        else:
            logger.debug("%s conditions: %s", self._config.indicator_type, result.to_dict())
        return result
