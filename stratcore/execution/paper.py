"""Paper broker that records every order request instead of routing it."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from stratcore.core.ports import BrokerPort
from stratcore.core.types import ProfitTarget

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BrokerCall:
    method: str
    argument: Any = None


class PaperBroker(BrokerPort):
    """Minimal broker stand-in for dry runs; fills are reported by the caller."""

    def __init__(self, tick_size: float = 0.25, point_value: float = 50.0) -> None:
        self._tick_size = float(tick_size)
        self._point_value = float(point_value)
        self.calls: list[BrokerCall] = []

    @property
    def tick_size(self) -> float:
        return self._tick_size

    @property
    def point_value(self) -> float:
        return self._point_value

    def _record(self, method: str, argument: Any = None) -> None:
        self.calls.append(BrokerCall(method, argument))
        logger.debug(f"paper {method}({'' if argument is None else argument})")

    def enter_long(self, quantity: int) -> None:
        self._record("enter_long", quantity)

    def enter_short(self, quantity: int) -> None:
        self._record("enter_short", quantity)

    def exit_long(self) -> None:
        self._record("exit_long")

    def exit_short(self) -> None:
        self._record("exit_short")

    def set_trailing_stop(self, ticks: int) -> None:
        self._record("set_trailing_stop", ticks)

    def set_profit_target(self, target: ProfitTarget) -> None:
        self._record("set_profit_target", target)

    def methods(self) -> list[str]:
        return [call.method for call in self.calls]
