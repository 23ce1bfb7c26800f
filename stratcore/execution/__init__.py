"""Position lifecycle and broker adapters."""

from stratcore.execution.paper import BrokerCall, PaperBroker
from stratcore.execution.position import (
    PositionSide,
    PositionState,
    PositionStateMachine,
    PositionStatus,
)

__all__ = [
    "BrokerCall",
    "PaperBroker",
    "PositionSide",
    "PositionState",
    "PositionStateMachine",
    "PositionStatus",
]
