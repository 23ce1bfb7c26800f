"""
Position/Order State Machine
Single-position lifecycle: Flat -> Entering -> Long|Short -> Exiting -> Flat.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict

from stratcore.core.errors import DesynchronizedFill
from stratcore.core.ports import BrokerPort
from stratcore.core.types import FillEvent, OrderRole, OrderSide, ProfitTarget
from stratcore.risk.daily import realized_pnl

logger = logging.getLogger(__name__)


class PositionSide(str, Enum):
    FLAT = "flat"
    LONG = "long"
    SHORT = "short"


class PositionStatus(str, Enum):
    FLAT = "flat"
    ENTERING = "entering"
    LONG = "long"
    SHORT = "short"
    EXITING = "exiting"


_OPENING_SIDE = {PositionSide.LONG: OrderSide.BUY, PositionSide.SHORT: OrderSide.SELL}
_CLOSING_SIDE = {PositionSide.LONG: OrderSide.SELL, PositionSide.SHORT: OrderSide.BUY}


class PositionState(BaseModel):
    """Position state - mutable, written only by PositionStateMachine."""
    model_config = ConfigDict(extra="forbid")

    status: PositionStatus = PositionStatus.FLAT
    side: PositionSide = PositionSide.FLAT
    quantity: int = 0
    requested_quantity: int = 0
    filled_quantity: int = 0
    entry_price: Optional[float] = None
    attached_stop_ticks: Optional[int] = None
    attached_target: Optional[ProfitTarget] = None

    @property
    def is_flat(self) -> bool:
        return self.status is PositionStatus.FLAT

    @property
    def is_long(self) -> bool:
        return self.side is PositionSide.LONG and self.quantity > 0

    @property
    def is_short(self) -> bool:
        return self.side is PositionSide.SHORT and self.quantity > 0


class PositionStateMachine:
    """
    Executes intents against the broker and reconciles fills.

    Invariants:
    - At most one position; entries are accepted only while Flat.
    - Exit requests that do not apply to the current exposure are no-ops.
    - A fill that does not match the believed exposure raises
      DesynchronizedFill rather than being dropped.
    """

    def __init__(self, state: PositionState, broker: BrokerPort) -> None:
        """
        Initialize state machine.

        Args:
            state: Position state this machine owns
            broker: Host order capability
        """
        self._state = state
        self._broker = broker

    @property
    def state(self) -> PositionState:
        return self._state

    def enter(
        self,
        side: PositionSide,
        quantity: int,
        *,
        stop_ticks: Optional[int],
        target: ProfitTarget,
    ) -> bool:
        """
        Request a new position and attach its protective orders.

        Args:
            side: LONG or SHORT
            quantity: Contracts to enter
            stop_ticks: Trailing stop distance, or None for no stop
            target: Profit target to attach

        Returns:
            True if the entry was sent, False if rejected
        """
        state = self._state
        if side is PositionSide.FLAT:
            raise ValueError("Entry side must be LONG or SHORT")
        if not state.is_flat:
            logger.debug(
                f"Entry {side.value} rejected: position is {state.status.value}"
            )
            return False

        if side is PositionSide.LONG:
            self._broker.enter_long(quantity)
        else:
            self._broker.enter_short(quantity)
        if stop_ticks is not None:
            self._broker.set_trailing_stop(stop_ticks)
        self._broker.set_profit_target(target)

        state.status = PositionStatus.ENTERING
        state.side = side
        state.requested_quantity = int(quantity)
        state.filled_quantity = 0
        state.quantity = 0
        state.entry_price = None
        state.attached_stop_ticks = stop_ticks
        state.attached_target = target
        logger.info(
            f"ENTER_{side.value.upper()} qty={quantity} stop={stop_ticks} "
            f"target={target.value} {target.mode.value}"
        )
        return True

    def exit(self, side: Optional[PositionSide] = None) -> bool:
        """
        Request an exit of the open position.

        Args:
            side: Side to exit, or None for whichever side is open

        Returns:
            True if an exit was sent; False when it did not apply
        """
        state = self._state
        if state.status not in (PositionStatus.LONG, PositionStatus.SHORT):
            return False
        if side is not None and side is not state.side:
            return False

        if state.side is PositionSide.LONG:
            self._broker.exit_long()
        else:
            self._broker.exit_short()
        state.status = PositionStatus.EXITING
        logger.info(f"EXIT_{state.side.value.upper()} qty={state.quantity}")
        return True

    def apply_fill(self, fill: FillEvent, *, point_value: float) -> Optional[Decimal]:
        """
        Reconcile a fill with the believed exposure.

        Args:
            fill: Fill reported by the host
            point_value: Currency value of one point

        Returns:
            Realized P&L for closing fills, None for entry fills

        Raises:
            DesynchronizedFill: If the fill does not match the position state
        """
        if fill.quantity <= 0:
            raise DesynchronizedFill(f"Fill with non-positive quantity {fill.quantity}", fill)
        if fill.role is OrderRole.ENTRY:
            self._apply_entry_fill(fill)
            return None
        return self._apply_closing_fill(fill, point_value)

    def _apply_entry_fill(self, fill: FillEvent) -> None:
        state = self._state
        # an exit may be requested before a partial entry completes
        accepting = state.status is PositionStatus.ENTERING or (
            state.status
            in (PositionStatus.LONG, PositionStatus.SHORT, PositionStatus.EXITING)
            and state.filled_quantity < state.requested_quantity
        )
        if not accepting or fill.side is not _OPENING_SIDE.get(state.side):
            raise DesynchronizedFill(
                f"Entry fill {fill.side.value} x{fill.quantity} while position is "
                f"{state.status.value}/{state.side.value}",
                fill,
            )
        total_filled = state.filled_quantity + fill.quantity
        if total_filled > state.requested_quantity:
            raise DesynchronizedFill(
                f"Entry fills {total_filled} exceed requested {state.requested_quantity}", fill
            )

        open_quantity = state.quantity + fill.quantity
        previous_cost = (state.entry_price or 0.0) * state.quantity
        state.entry_price = (previous_cost + float(fill.price) * fill.quantity) / open_quantity
        state.quantity = open_quantity
        state.filled_quantity = total_filled
        if state.status is PositionStatus.ENTERING:
            state.status = (
                PositionStatus.LONG if state.side is PositionSide.LONG else PositionStatus.SHORT
            )
        logger.info(
            f"Filled entry {state.side.value} {fill.quantity}@{fill.price} "
            f"(position {state.quantity}@{state.entry_price})"
        )

    def _apply_closing_fill(self, fill: FillEvent, point_value: float) -> Decimal:
        state = self._state
        if state.status not in (
            PositionStatus.LONG,
            PositionStatus.SHORT,
            PositionStatus.EXITING,
        ) or state.entry_price is None:
            raise DesynchronizedFill(
                f"{fill.role.value} fill while position is {state.status.value}", fill
            )
        if fill.side is not _CLOSING_SIDE[state.side]:
            raise DesynchronizedFill(
                f"{fill.role.value} fill side {fill.side.value} does not close a "
                f"{state.side.value} position",
                fill,
            )
        if fill.quantity > state.quantity:
            raise DesynchronizedFill(
                f"Closing fill x{fill.quantity} exceeds open quantity {state.quantity}", fill
            )

        pnl = realized_pnl(
            state.entry_price,
            fill.price,
            fill.quantity,
            is_long=state.side is PositionSide.LONG,
            point_value=point_value,
        )
        state.quantity -= fill.quantity
        logger.info(
            f"Closed {fill.quantity} {state.side.value} via {fill.role.value} @{fill.price}: {pnl}"
        )
        if state.quantity == 0:
            self._reset()
        return pnl

    def _reset(self) -> None:
        state = self._state
        state.status = PositionStatus.FLAT
        state.side = PositionSide.FLAT
        state.quantity = 0
        state.requested_quantity = 0
        state.filled_quantity = 0
        state.entry_price = None
        state.attached_stop_ticks = None
        state.attached_target = None
