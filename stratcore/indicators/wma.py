"""Linearly weighted moving average of closes."""

from __future__ import annotations

from collections import deque
from typing import Deque

from stratcore.core.errors import InsufficientHistory
from stratcore.core.types import Bar


class WeightedMovingAverage:
    """
    WMA over ``period`` closes, oldest weight 1 up to newest weight ``period``.

    Keeps a running plain sum and weighted sum so each update is O(1):
    sliding the window by one bar turns the weighted numerator into
    ``numerator - window_sum + period * new_close``.
    """

    name = "wma"

    def __init__(self, period: int) -> None:
        self.period = int(period)
        self._window: Deque[float] = deque()
        self._window_sum = 0.0
        self._numerator = 0.0
        self._denominator = self.period * (self.period + 1) / 2.0
        self._count = 0

    @property
    def ready(self) -> bool:
        return self._count >= self.period

    @property
    def value(self) -> float:
        if not self.ready:
            raise InsufficientHistory(self.name, self._count, self.period)
        return self._numerator / self._denominator

    def update(self, bar: Bar) -> None:
        close = float(bar.close)
        self._count += 1

        if len(self._window) < self.period:
            self._window.append(close)
            self._window_sum += close
            self._numerator += len(self._window) * close
            return

        oldest = self._window.popleft()
        self._window.append(close)
        self._numerator = self._numerator - self._window_sum + self.period * close
        self._window_sum = self._window_sum - oldest + close
