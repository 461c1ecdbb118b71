"""Rolling candle windows — caller-held, per-symbol market state.

The analytics core never remembers anything between calls.  Whatever feeds
it keeps one bounded window per (symbol, timeframe) here and hands the
window's contents to the condition engine on every update.
"""

import logging
from collections import deque
from typing import Optional

from scanner.strategy.models import CandleData

logger = logging.getLogger("scanner.window")


class CandleWindow:
    """Bounded, time-ordered candle buffer for one symbol and timeframe.

    Args:
        max_size: Number of candles to retain; older candles drop off.
    """

    def __init__(self, max_size: int = 500) -> None:
        if max_size < 2:
            raise ValueError(f"max_size must be at least 2, got {max_size}")
        self._candles: deque[CandleData] = deque(maxlen=max_size)

    def __len__(self) -> int:
        return len(self._candles)

    @property
    def max_size(self) -> int:
        return self._candles.maxlen

    @property
    def last(self) -> Optional[CandleData]:
        return self._candles[-1] if self._candles else None

    def append(self, candle: CandleData) -> bool:
        """Add a candle, keeping timestamps strictly increasing.

        A candle with the same timestamp as the last one replaces it (a
        streaming feed re-sending the bar in progress).

        Returns ``True`` if a new bar was added, ``False`` on replacement.
        Raises ``ValueError`` if *candle* is older than the last candle.
        """
        last = self.last
        if last is not None:
            if candle.timestamp < last.timestamp:
                raise ValueError(
                    f"Out-of-order candle: {candle.timestamp} < {last.timestamp}"
                )
            if candle.timestamp == last.timestamp:
                self._candles[-1] = candle
                return False
        self._candles.append(candle)
        return True

    def extend(self, candles: list[CandleData]) -> None:
        for candle in candles:
            self.append(candle)

    def snapshot(self) -> list[CandleData]:
        """Return the window contents, oldest first."""
        return list(self._candles)


class WindowRegistry:
    """Holds one ``CandleWindow`` per (symbol, timeframe) key."""

    def __init__(self, max_size: int = 500) -> None:
        self._max_size = max_size
        self._windows: dict[tuple[str, str], CandleWindow] = {}

    def get(self, symbol: str, timeframe: str) -> CandleWindow:
        """Return the window for *symbol*/*timeframe*, creating it on first use."""
        key = (symbol, timeframe)
        if key not in self._windows:
            logger.debug("New %d-candle window for %s %s", self._max_size, symbol, timeframe)
            self._windows[key] = CandleWindow(self._max_size)
        return self._windows[key]

    def drop(self, symbol: str, timeframe: str) -> None:
        self._windows.pop((symbol, timeframe), None)

    @property
    def keys(self) -> list[tuple[str, str]]:
        return list(self._windows.keys())
