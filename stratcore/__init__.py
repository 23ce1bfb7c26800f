"""Bar-driven intraday futures strategy core."""

from stratcore.core import Bar, FillEvent, Intent, IntentAction, ProfitTarget
from stratcore.strategy import StrategyConfig, StrategyCore, build_config

__version__ = "0.1.0"

__all__ = [
    "Bar",
    "FillEvent",
    "Intent",
    "IntentAction",
    "ProfitTarget",
    "StrategyConfig",
    "StrategyCore",
    "build_config",
]
