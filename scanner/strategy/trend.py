"""Trend analysis — multi-indicator directional filter for the ``trend`` mode.

The recipe combines momentum (RSI), trend (fast/slow EMA), volatility
(Bollinger Bands), participation (volume vs its MA) and the shape of the
latest daily candle:

* **Valid** setup: RSI within [30, 70], close inside the bands and volume
  above ``volume_threshold`` × its moving average.
* **Bullish**: fast EMA above slow EMA, close pulled back *between* them
  (slow < close < fast) and a long-bodied bullish daily candle.
* **Bearish**: the mirror image.
* Anything else, or an invalid setup, is **neutral**.
"""

from collections.abc import Sequence
from typing import Optional

from scanner.models.indicator_config import TrendConfig
from scanner.strategy.indicators import (
    calculate_bollinger,
    calculate_ema,
    calculate_rsi,
    calculate_volume_ma,
    closes,
)
from scanner.strategy.models import NEUTRAL_TREND, CandleData, Direction, TrendAnalysis
from scanner.strategy.swings import classify_daily_candle

RSI_LOWER = 30
RSI_UPPER = 70


def analyze_trend(
    candles: Sequence[CandleData],
    daily_candle: CandleData,
    params: Optional[TrendConfig] = None,
) -> TrendAnalysis:
    """Evaluate the trend recipe on the latest bar of *candles*.

    Returns :data:`NEUTRAL_TREND` when fewer than ``params.min_candles``
    candles are supplied.  When the setup is not valid the indicator values
    are still reported, only the direction is forced to ``NEUTRAL``.
    """
    params = params or TrendConfig()
    if len(candles) < params.min_candles:
        return NEUTRAL_TREND

    price = candles[-1].close
    values = closes(candles)

    rsi = calculate_rsi(candles, params.rsi_period)
    ema_fast = calculate_ema(values, params.ema_fast)
    ema_slow = calculate_ema(values, params.ema_slow)
    bands = calculate_bollinger(candles, params.bb_period, params.bb_std_dev)
    volume_ma = calculate_volume_ma(candles, params.volume_period)

    if not (rsi and ema_fast and ema_slow and bands.middle and volume_ma):
        return NEUTRAL_TREND

    current_rsi = rsi[-1]
    fast = ema_fast[-1]
    slow = ema_slow[-1]
    upper = bands.upper[-1]
    lower = bands.lower[-1]

    volume_ratio = candles[-1].volume / volume_ma[-1] if volume_ma[-1] else 0.0
    volume_spike = volume_ratio > params.volume_threshold

    daily = classify_daily_candle(daily_candle)

    is_valid = (
        RSI_LOWER <= current_rsi <= RSI_UPPER
        and lower <= price <= upper
        and volume_spike
    )

    direction: Direction = "NEUTRAL"
    if is_valid:
        if fast > slow and slow < price < fast and daily == "BULLISH":
            direction = "BULLISH"
        elif fast < slow and fast < price < slow and daily == "BEARISH":
            direction = "BEARISH"

    return TrendAnalysis(
        is_valid=is_valid,
        direction=direction,
        rsi=current_rsi,
        ema21=fast,
        ema50=slow,
        bb_upper=upper,
        bb_lower=lower,
        bb_middle=bands.middle[-1],
        volume_ratio=volume_ratio,
        volume_spike=volume_spike,
        daily_candle=daily,
    )
