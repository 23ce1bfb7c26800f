"""Per-bar indicator engine producing immutable snapshots."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Mapping, Optional

from stratcore.core.errors import InsufficientHistory
from stratcore.core.types import Bar
from stratcore.indicators.supertrend import Supertrend
from stratcore.indicators.williams_r import WilliamsR
from stratcore.indicators.wma import WeightedMovingAverage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IndicatorSnapshot:
    bar_index: int
    close: float
    prev_close: Optional[float] = None
    williams_r: Optional[float] = None
    wma: Optional[float] = None
    atr: Optional[float] = None
    supertrend: Optional[float] = None
    prev_supertrend: Optional[float] = None
    upper_band: Optional[float] = None
    lower_band: Optional[float] = None
    warming_up: Mapping[str, tuple[int, int]] = field(default_factory=dict)

    @property
    def trend(self) -> Optional[str]:
        """'up' iff close is above the Supertrend value; None before warm-up."""
        if self.supertrend is None:
            return None
        return "up" if self.close > self.supertrend else "down"

    def require(self, name: str) -> Optional[float]:
        """Return an indicator value, raising InsufficientHistory while it warms up.

        A ready Williams %R can still be None when the window has no range.
        """
        pending = self.warming_up.get(name)
        if pending is not None:
            available, required = pending
            raise InsufficientHistory(name, available, required)
        return getattr(self, name)


class IndicatorEngine:
    """
    Owns the rolling state of every enabled indicator for one strategy.

    ``update`` must be called exactly once per bar in timestamp order. Only
    indicators given a period are computed; the rest stay None in snapshots
    and are never reported as warming up.
    """

    def __init__(
        self,
        *,
        williams_r_period: Optional[int] = None,
        wma_period: Optional[int] = None,
        atr_period: Optional[int] = None,
        supertrend_multiplier: float = 1.5,
    ) -> None:
        self._williams_r = WilliamsR(williams_r_period) if williams_r_period else None
        self._wma = WeightedMovingAverage(wma_period) if wma_period else None
        self._supertrend = (
            Supertrend(atr_period, supertrend_multiplier) if atr_period else None
        )
        self._prev_close: Optional[float] = None
        self._bar_count = 0

    @property
    def bar_count(self) -> int:
        return self._bar_count

    def update(self, bar: Bar) -> IndicatorSnapshot:
        self._bar_count += 1
        warming_up: dict[str, tuple[int, int]] = {}
        values: dict[str, Optional[float]] = {}

        if self._williams_r is not None:
            self._williams_r.update(bar)
            if self._williams_r.ready:
                values["williams_r"] = self._williams_r.value
            else:
                warming_up["williams_r"] = (self._bar_count, self._williams_r.period)

        if self._wma is not None:
            self._wma.update(bar)
            if self._wma.ready:
                values["wma"] = self._wma.value
            else:
                warming_up["wma"] = (self._bar_count, self._wma.period)

        if self._supertrend is not None:
            self._supertrend.update(bar)
            period = self._supertrend.atr.period
            if self._supertrend.ready:
                lower, upper = self._supertrend.bands
                values["atr"] = self._supertrend.atr.value
                values["supertrend"] = self._supertrend.value
                values["lower_band"] = lower
                values["upper_band"] = upper
                values["prev_supertrend"] = self._supertrend.previous_value
                if self._supertrend.previous_value is None:
                    warming_up["prev_supertrend"] = (self._bar_count, period + 1)
            else:
                for name in ("atr", "supertrend", "lower_band", "upper_band"):
                    warming_up[name] = (self._bar_count, period)
                warming_up["prev_supertrend"] = (self._bar_count, period + 1)

        snapshot = IndicatorSnapshot(
            bar_index=self._bar_count,
            close=float(bar.close),
            prev_close=self._prev_close,
            warming_up=warming_up,
            **values,
        )
        self._prev_close = float(bar.close)
        if warming_up:
            logger.debug(f"Indicators warming up at bar {self._bar_count}: {sorted(warming_up)}")
        return snapshot
