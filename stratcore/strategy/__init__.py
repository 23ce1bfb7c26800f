"""Strategy configuration, rule policies and the bar-driven core."""

from stratcore.strategy.config import (
    IndicatorConfig,
    MomentumConfig,
    OrderConfig,
    RiskConfig,
    StrategyConfig,
    load_strategy_config,
)
from stratcore.strategy.core import StrategyContext, StrategyCore
from stratcore.strategy.presets import PRESETS, build_config, merge_overrides
from stratcore.strategy.rules import (
    CompositePolicy,
    GatingState,
    MomentumThreshold,
    RenkoColorExit,
    RulePolicy,
    TrendFollowing,
    build_policy,
)

__all__ = [
    "CompositePolicy",
    "GatingState",
    "IndicatorConfig",
    "MomentumConfig",
    "MomentumThreshold",
    "OrderConfig",
    "PRESETS",
    "RenkoColorExit",
    "RiskConfig",
    "RulePolicy",
    "StrategyConfig",
    "StrategyContext",
    "StrategyCore",
    "TrendFollowing",
    "build_config",
    "build_policy",
    "load_strategy_config",
    "merge_overrides",
]
