"""
Strategy Configuration
Immutable, validated parameter set for one strategy instance.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from stratcore.core.errors import ConfigOutOfRange
from stratcore.gating.window import TradingWindow
from stratcore.risk.daily import PnLSource

Variant = Literal["momentum_threshold", "trend_following"]


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class IndicatorConfig(_Frozen):
    """Indicator periods."""

    williams_r_period: int = Field(default=14, gt=0)
    wma_period: int = Field(default=100, gt=0)
    atr_period: int = Field(default=10, gt=0)
    supertrend_multiplier: float = Field(default=1.5, gt=0)


class MomentumConfig(_Frozen):
    """Williams %R thresholds and optional entry filters."""

    overbought: float = Field(default=-20.0, ge=-100, le=0)
    oversold: float = Field(default=-80.0, ge=-100, le=0)
    use_wma_filter: bool = False
    require_bar_color: bool = False

    @model_validator(mode="after")
    def _check_order(self) -> "MomentumConfig":
        if self.oversold >= self.overbought:
            raise ValueError("oversold must be below overbought")
        return self


class OrderConfig(_Frozen):
    """Protective orders attached to every entry."""

    trail_stop_ticks: Optional[int] = Field(default=80, gt=0)
    profit_target_ticks: int = Field(default=80, gt=0)
    scale_final_target: bool = False


class RiskConfig(_Frozen):
    """Daily limits, cooldown and the realized P&L source."""

    daily_goal: Optional[Decimal] = Field(default=None, gt=0)
    daily_loss_limit: Optional[Decimal] = Field(default=None, lt=0)
    force_exit_on_limit: bool = False
    cooldown_bars: int = Field(default=0, ge=0)
    pnl_source: PnLSource = "fills"


class StrategyConfig(_Frozen):
    """Top-level strategy parameters; never mutated after construction."""

    variant: Variant = "momentum_threshold"
    quantity: int = Field(default=1, gt=0)
    bars_required_to_trade: int = Field(default=20, ge=0)
    window: TradingWindow = Field(default_factory=TradingWindow)
    indicators: IndicatorConfig = Field(default_factory=IndicatorConfig)
    momentum: MomentumConfig = Field(default_factory=MomentumConfig)
    renko_color_exit: bool = False
    orders: OrderConfig = Field(default_factory=OrderConfig)
    risk: RiskConfig = Field(default_factory=RiskConfig)

    @property
    def uses_williams_r(self) -> bool:
        return self.variant == "momentum_threshold"

    @property
    def uses_wma(self) -> bool:
        return self.variant == "momentum_threshold" and self.momentum.use_wma_filter

    @property
    def uses_supertrend(self) -> bool:
        return self.variant == "trend_following"


def _field_name(error: Mapping[str, Any]) -> str:
    loc = [str(part) for part in error.get("loc", ()) if part != "__root__"]
    return ".".join(loc) or "config"


def load_strategy_config(data: StrategyConfig | Mapping[str, Any]) -> StrategyConfig:
    """
    Validate raw configuration values into a StrategyConfig.

    Args:
        data: A StrategyConfig (returned as-is) or a plain mapping

    Returns:
        Validated, frozen StrategyConfig

    Raises:
        ConfigOutOfRange: Naming the first offending field
        InvalidWindowConfig: If a window bound cannot be parsed
    """
    if isinstance(data, StrategyConfig):
        return data
    try:
        return StrategyConfig.model_validate(dict(data))
    except ValidationError as exc:
        first = exc.errors()[0]
        raise ConfigOutOfRange(_field_name(first), first.get("msg", "invalid value")) from exc
