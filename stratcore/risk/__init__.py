"""Daily risk tracking and its optional persistence."""

from stratcore.risk.daily import (
    DailyRiskState,
    DailyRiskTracker,
    LimitStatus,
    PnLSource,
    realized_pnl,
    to_decimal,
)
from stratcore.risk.store import RiskStateStore

__all__ = [
    "DailyRiskState",
    "DailyRiskTracker",
    "LimitStatus",
    "PnLSource",
    "RiskStateStore",
    "realized_pnl",
    "to_decimal",
]
