"""Average True Range with Wilder smoothing."""

from __future__ import annotations

from typing import Optional

from stratcore.core.errors import InsufficientHistory
from stratcore.core.types import Bar


def true_range(high: float, low: float, prev_close: Optional[float]) -> float:
    tr = float(high) - float(low)
    if prev_close is None:
        return tr
    return max(tr, abs(float(high) - prev_close), abs(float(low) - prev_close))


class AverageTrueRange:
    """
    ATR seeded with the mean of the first ``period`` true ranges, then
    smoothed as ``atr = (prev_atr * (period - 1) + tr) / period``.

    The first bar has no previous close, so its true range is high - low.
    """

    name = "atr"

    def __init__(self, period: int) -> None:
        self.period = int(period)
        self._prev_close: Optional[float] = None
        self._seed_sum = 0.0
        self._atr: Optional[float] = None
        self._count = 0

    @property
    def count(self) -> int:
        return self._count

    @property
    def ready(self) -> bool:
        return self._atr is not None

    @property
    def value(self) -> float:
        if self._atr is None:
            raise InsufficientHistory(self.name, self._count, self.period)
        return self._atr

    def update(self, bar: Bar) -> None:
        tr = true_range(bar.high, bar.low, self._prev_close)
        self._prev_close = float(bar.close)
        self._count += 1

        if self._atr is None:
            self._seed_sum += tr
            if self._count >= self.period:
                self._atr = self._seed_sum / self.period
            return

        self._atr = (self._atr * (self.period - 1) + tr) / self.period
