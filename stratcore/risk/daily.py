"""
Daily Risk Tracker
Per-calendar-day realized P&L, hard goal/loss limits and profit-target cooldown.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict

from stratcore.core.errors import PnLSourceConflict

logger = logging.getLogger(__name__)

PnLSource = Literal["fills", "external"]

_ZERO = Decimal("0")


class LimitStatus(str, Enum):
    """Outcome of a daily limit check."""
    OK = "ok"
    GOAL_REACHED = "goal_reached"
    LOSS_LIMIT_REACHED = "loss_limit_reached"


class DailyRiskState(BaseModel):
    """Daily risk state - mutable, owned by one strategy instance."""
    model_config = ConfigDict(extra="forbid")

    current_date: Optional[date] = None
    cumulative_realized_pnl: Decimal = _ZERO
    daily_goal: Optional[Decimal] = None
    daily_loss_limit: Optional[Decimal] = None
    target_hit: bool = False
    bars_since_target_hit: int = 0
    cooldown_bars: int = 0
    latched_limit: LimitStatus = LimitStatus.OK
    external_baseline: Decimal = _ZERO
    external_cumulative: Optional[Decimal] = None


def to_decimal(value: float | int | Decimal) -> Decimal:
    """Convert host numbers without binary float artefacts."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def realized_pnl(
    entry_price: float | Decimal,
    exit_price: float | Decimal,
    quantity: int,
    *,
    is_long: bool,
    point_value: float | Decimal,
) -> Decimal:
    """
    Realized P&L for closing ``quantity`` at ``exit_price``.

    Closing a long higher than entry is a gain; closing a short lower than
    entry is a gain.

    Args:
        entry_price: Average entry fill price
        exit_price: Closing fill price
        quantity: Closed quantity
        is_long: Side of the position being closed
        point_value: Currency value of one point

    Returns:
        Currency P&L as Decimal
    """
    direction = 1 if is_long else -1
    move = to_decimal(exit_price) - to_decimal(entry_price)
    return move * int(quantity) * direction * to_decimal(point_value)


class DailyRiskTracker:
    """
    Tracks realized P&L for the calendar day of the bar stream.

    Two independent gates are enforced:
    - Hard stop: once the daily goal or loss limit is reached, the status is
      latched until the next date and entries stay suppressed.
    - Soft cooldown: after a profit-target fill, entries are suppressed for
      ``cooldown_bars`` subsequent bars, then resume.

    Realized P&L comes from exactly one source. With ``pnl_source="fills"``
    the tracker sums per-fill deltas; with ``"external"`` the host pushes a
    cumulative figure and the tracker rebases it at each day rollover.
    """

    def __init__(
        self,
        state: DailyRiskState,
        *,
        pnl_source: PnLSource = "fills",
    ) -> None:
        """
        Initialize tracker.

        Args:
            state: State bundle this tracker mutates
            pnl_source: Where realized P&L comes from
        """
        self._state = state
        self._pnl_source = pnl_source

    @property
    def state(self) -> DailyRiskState:
        return self._state

    @property
    def pnl_source(self) -> PnLSource:
        return self._pnl_source

    @property
    def cumulative_realized_pnl(self) -> Decimal:
        return self._state.cumulative_realized_pnl

    @property
    def in_cooldown(self) -> bool:
        return self._state.target_hit

    @property
    def remaining_goal(self) -> Optional[Decimal]:
        """Currency left before the daily goal; None when no goal is set."""
        if self._state.daily_goal is None:
            return None
        return self._state.daily_goal - self._state.cumulative_realized_pnl

    def on_new_bar(self, bar_date: date) -> bool:
        """
        Roll the day over when the bar's date differs from the stored date.

        Must run before any limit check for that bar.

        Returns:
            True if a rollover happened
        """
        state = self._state
        if state.current_date == bar_date:
            return False

        previous = state.current_date
        state.current_date = bar_date
        state.cumulative_realized_pnl = _ZERO
        state.target_hit = False
        state.bars_since_target_hit = 0
        state.latched_limit = LimitStatus.OK
        if state.external_cumulative is not None:
            state.external_baseline = state.external_cumulative

        if previous is not None:
            logger.info(f"Daily risk reset: {previous} -> {bar_date}")
        return True

    def on_cooldown_tick(self) -> None:
        """Advance the cooldown counter by one bar, releasing it once it has run out."""
        state = self._state
        if not state.target_hit:
            return
        state.bars_since_target_hit += 1
        if state.bars_since_target_hit > state.cooldown_bars:
            state.target_hit = False
            state.bars_since_target_hit = 0
            logger.debug("Profit-target cooldown finished")

    def on_fill(self, delta: Decimal) -> None:
        """
        Add a realized P&L delta from a closing fill.

        Raises:
            PnLSourceConflict: If this tracker reads P&L from the host instead
        """
        if self._pnl_source != "fills":
            raise PnLSourceConflict(
                "Tracker is configured for external P&L; fill deltas are not accepted"
            )
        self._state.cumulative_realized_pnl += to_decimal(delta)
        logger.info(
            f"Realized {delta} -> daily P&L {self._state.cumulative_realized_pnl}"
        )

    def sync_external(self, cumulative: float | Decimal) -> None:
        """
        Take the host's cumulative realized P&L figure.

        Raises:
            PnLSourceConflict: If this tracker sums fills itself
        """
        if self._pnl_source != "external":
            raise PnLSourceConflict(
                "Tracker is configured for fill-based P&L; external figures are not accepted"
            )
        state = self._state
        value = to_decimal(cumulative)
        state.external_cumulative = value
        state.cumulative_realized_pnl = value - state.external_baseline

    def on_profit_target_fill(self) -> None:
        """Start (or restart) the cooldown after a profit-target execution."""
        state = self._state
        state.target_hit = True
        state.bars_since_target_hit = 0
        if state.cooldown_bars > 0:
            logger.info(f"Profit target hit, entries paused for {state.cooldown_bars} bars")

    def check_limits(self) -> LimitStatus:
        """Check the daily goal and loss limit; a reached limit stays latched for the day."""
        state = self._state
        if state.latched_limit is not LimitStatus.OK:
            return state.latched_limit

        pnl = state.cumulative_realized_pnl
        status = LimitStatus.OK
        if state.daily_goal is not None and pnl >= state.daily_goal:
            status = LimitStatus.GOAL_REACHED
        elif state.daily_loss_limit is not None and pnl <= state.daily_loss_limit:
            status = LimitStatus.LOSS_LIMIT_REACHED

        if status is not LimitStatus.OK:
            state.latched_limit = status
            logger.warning(
                f"Daily limit reached ({status.value}): P&L {pnl} on {state.current_date}"
            )
        return status
