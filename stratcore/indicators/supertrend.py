"""Supertrend band with a one-sided ratchet on the previous value."""

from __future__ import annotations

from typing import Optional

from stratcore.core.errors import InsufficientHistory
from stratcore.core.types import Bar
from stratcore.indicators.atr import AverageTrueRange


class Supertrend:
    """
    Single-line Supertrend.

    For each bar, with ``mid = (high + low) / 2``::

        basic_upper = mid + multiplier * atr
        basic_lower = mid - multiplier * atr

    The new value ratchets off the previous one using the previous close:

    - previous close above previous value: ``max(basic_lower, previous)``
    - previous close below previous value: ``min(basic_upper, previous)``
    - previous close equal to previous value: previous value is held

    The result is then clamped into ``[basic_lower, basic_upper]`` so the line
    never leaves the current bar's bands. The first value after ATR warm-up
    starts on ``basic_lower``.
    """

    name = "supertrend"

    def __init__(self, atr_period: int, multiplier: float) -> None:
        self.multiplier = float(multiplier)
        self.atr = AverageTrueRange(atr_period)
        self._value: Optional[float] = None
        self._prev_value: Optional[float] = None
        self._prev_close: Optional[float] = None
        self._basic_upper: Optional[float] = None
        self._basic_lower: Optional[float] = None

    @property
    def ready(self) -> bool:
        return self._value is not None

    @property
    def value(self) -> float:
        if self._value is None:
            raise InsufficientHistory(self.name, self.atr.count, self.atr.period)
        return self._value

    @property
    def previous_value(self) -> Optional[float]:
        """Value on the prior bar; None until two values exist."""
        return self._prev_value

    @property
    def bands(self) -> tuple[float, float]:
        if self._basic_lower is None or self._basic_upper is None:
            raise InsufficientHistory(self.name, self.atr.count, self.atr.period)
        return self._basic_lower, self._basic_upper

    def update(self, bar: Bar) -> None:
        self.atr.update(bar)
        prev_close = self._prev_close
        self._prev_close = float(bar.close)
        if not self.atr.ready:
            return

        mid = (float(bar.high) + float(bar.low)) / 2.0
        offset = self.multiplier * self.atr.value
        upper = mid + offset
        lower = mid - offset

        previous = self._value
        if previous is None or prev_close is None:
            value = lower
        elif prev_close > previous:
            value = max(lower, previous)
        elif prev_close < previous:
            value = min(upper, previous)
        else:
            value = previous

        self._prev_value = previous
        self._value = min(max(value, lower), upper)
        self._basic_upper = upper
        self._basic_lower = lower
