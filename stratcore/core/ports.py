"""Port definitions for the host-side collaborators of the strategy core."""

from __future__ import annotations

from typing import Protocol

from .types import ProfitTarget


class BrokerPort(Protocol):
    """Order capability supplied by the host.

    The core never routes orders itself; it only calls these methods and
    waits for the host to report fills back through ``on_fill``.
    """

    @property
    def tick_size(self) -> float:
        """Minimum price increment of the traded instrument."""

    @property
    def point_value(self) -> float:
        """Currency value of one full point of price movement."""

    def enter_long(self, quantity: int) -> None:
        """Submit a market entry to go long."""

    def enter_short(self, quantity: int) -> None:
        """Submit a market entry to go short."""

    def exit_long(self) -> None:
        """Close any long exposure."""

    def exit_short(self) -> None:
        """Close any short exposure."""

    def set_trailing_stop(self, ticks: int) -> None:
        """Attach a trailing stop at a tick distance to the pending entry."""

    def set_profit_target(self, target: ProfitTarget) -> None:
        """Attach a profit target to the pending entry."""
