"""Williams %R over a rolling high/low window."""

from __future__ import annotations

from collections import deque
from typing import Deque, Optional

from stratcore.core.errors import InsufficientHistory
from stratcore.core.types import Bar


class WilliamsR:
    """
    Williams %R momentum oscillator.

    %R = -100 * (highest_high - close) / (highest_high - lowest_low), taken
    over the last ``period`` bars including the current one. Values lie in
    [-100, 0]; near 0 is overbought, near -100 oversold.

    When every high and low in the window is the same price the range is
    zero and %R is undefined; ``value`` then returns None.
    """

    name = "williams_r"

    def __init__(self, period: int) -> None:
        self.period = int(period)
        self._highs: Deque[float] = deque(maxlen=self.period)
        self._lows: Deque[float] = deque(maxlen=self.period)
        self._value: Optional[float] = None
        self._count = 0

    @property
    def ready(self) -> bool:
        return self._count >= self.period

    @property
    def value(self) -> Optional[float]:
        if not self.ready:
            raise InsufficientHistory(self.name, self._count, self.period)
        return self._value

    def update(self, bar: Bar) -> None:
        self._highs.append(float(bar.high))
        self._lows.append(float(bar.low))
        self._count += 1
        if not self.ready:
            return

        highest = max(self._highs)
        lowest = min(self._lows)
        span = highest - lowest
        if span <= 0:
            self._value = None
            return
        self._value = -100.0 * (highest - float(bar.close)) / span
