"""Pure core contracts for the strategy engine."""

from stratcore.core.errors import (
    AlreadyConfigured,
    ConfigOutOfRange,
    DesynchronizedFill,
    InsufficientHistory,
    InvalidWindowConfig,
    PnLSourceConflict,
    StrategyCoreError,
)
from stratcore.core.ports import BrokerPort
from stratcore.core.types import (
    Bar,
    FillEvent,
    Intent,
    IntentAction,
    OrderRole,
    OrderSide,
    ProfitTarget,
    TargetMode,
)

__all__ = [
    "StrategyCoreError",
    "InsufficientHistory",
    "InvalidWindowConfig",
    "ConfigOutOfRange",
    "AlreadyConfigured",
    "DesynchronizedFill",
    "PnLSourceConflict",
    "BrokerPort",
    "Bar",
    "FillEvent",
    "Intent",
    "IntentAction",
    "OrderRole",
    "OrderSide",
    "ProfitTarget",
    "TargetMode",
]
