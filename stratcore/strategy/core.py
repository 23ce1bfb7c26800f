"""
Strategy Core
Host-facing entry points: configure, on_bar, on_fill.

Per bar: day rollover and cooldown tick -> indicator update -> warm-up and
trading window gates -> daily limit check (may force an exit) -> rule
policy -> position state machine -> broker.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Mapping, Optional

from stratcore.core.errors import AlreadyConfigured, InsufficientHistory, StrategyCoreError
from stratcore.core.ports import BrokerPort
from stratcore.core.types import (
    Bar,
    FillEvent,
    Intent,
    IntentAction,
    OrderRole,
    ProfitTarget,
)
from stratcore.execution.position import PositionSide, PositionState, PositionStateMachine
from stratcore.indicators.engine import IndicatorEngine
from stratcore.risk.daily import DailyRiskState, DailyRiskTracker, LimitStatus, to_decimal
from stratcore.risk.store import RiskStateStore
from stratcore.strategy.config import StrategyConfig, load_strategy_config
from stratcore.strategy.rules import CompositePolicy, GatingState, build_policy

logger = logging.getLogger(__name__)


@dataclass
class StrategyContext:
    """Explicit state bundle for one strategy instance."""

    indicators: IndicatorEngine
    risk: DailyRiskState
    position: PositionState


def build_indicator_engine(config: StrategyConfig) -> IndicatorEngine:
    """Enable only the indicators the configured rules read."""
    periods = config.indicators
    return IndicatorEngine(
        williams_r_period=periods.williams_r_period if config.uses_williams_r else None,
        wma_period=periods.wma_period if config.uses_wma else None,
        atr_period=periods.atr_period if config.uses_supertrend else None,
        supertrend_multiplier=periods.supertrend_multiplier,
    )


def new_risk_state(config: StrategyConfig) -> DailyRiskState:
    return DailyRiskState(
        daily_goal=config.risk.daily_goal,
        daily_loss_limit=config.risk.daily_loss_limit,
        cooldown_bars=config.risk.cooldown_bars,
    )


class StrategyCore:
    """
    Bar-driven decision engine for a single instrument.

    The host delivers bars and fills one at a time in chronological order;
    the core never blocks and never spawns work.
    """

    def __init__(
        self,
        broker: BrokerPort,
        config: StrategyConfig | Mapping[str, Any] | None = None,
        *,
        risk_store: Optional[RiskStateStore] = None,
    ) -> None:
        """
        Initialize strategy core.

        Args:
            broker: Host order capability
            config: Optional configuration; otherwise call ``configure`` before the first bar
            risk_store: Optional persistence for daily risk state
        """
        self._broker = broker
        self._risk_store = risk_store
        self._config: Optional[StrategyConfig] = None
        self._context: Optional[StrategyContext] = None
        self._policy: Optional[CompositePolicy] = None
        self._risk: Optional[DailyRiskTracker] = None
        self._positions: Optional[PositionStateMachine] = None
        if config is not None:
            self.configure(config)

    def configure(self, config: StrategyConfig | Mapping[str, Any]) -> None:
        """
        One-time setup before the first bar.

        Raises:
            AlreadyConfigured: If called twice
            ConfigOutOfRange: If a value is rejected
            InvalidWindowConfig: If a window bound cannot be parsed
        """
        if self._config is not None:
            raise AlreadyConfigured("Strategy core is already configured")
        resolved = load_strategy_config(config)

        context = StrategyContext(
            indicators=build_indicator_engine(resolved),
            risk=new_risk_state(resolved),
            position=PositionState(),
        )
        self._policy = build_policy(resolved)
        self._risk = DailyRiskTracker(context.risk, pnl_source=resolved.risk.pnl_source)
        self._positions = PositionStateMachine(context.position, self._broker)
        self._context = context
        self._config = resolved
        logger.info(
            f"Strategy configured: variant={resolved.variant} qty={resolved.quantity} "
            f"window={resolved.window.start}-{resolved.window.end} "
            f"pnl_source={resolved.risk.pnl_source}"
        )

    @property
    def config(self) -> StrategyConfig:
        self._require_configured()
        return self._config  # type: ignore[return-value]

    @property
    def context(self) -> StrategyContext:
        self._require_configured()
        return self._context  # type: ignore[return-value]

    @property
    def position(self) -> PositionState:
        return self.context.position

    @property
    def risk_state(self) -> DailyRiskState:
        return self.context.risk

    def _require_configured(self) -> None:
        if self._config is None:
            raise StrategyCoreError("Strategy core is not configured")

    def on_bar(self, bar: Bar) -> Optional[Intent]:
        """
        Process one closed bar.

        Args:
            bar: Next bar, strictly later than the previous one

        Returns:
            The intent that was executed against the broker, or None
        """
        self._require_configured()
        config = self._config
        context = self._context
        risk = self._risk
        bar_date = bar.timestamp.date()

        if self._risk_store is not None and context.indicators.bar_count == 0:
            self._restore_risk_state(bar_date)
        if risk.on_new_bar(bar_date):
            self._save_risk_state()
        risk.on_cooldown_tick()

        snapshot = context.indicators.update(bar)

        if snapshot.bar_index <= config.bars_required_to_trade:
            logger.debug(f"Warm-up: bar {snapshot.bar_index}/{config.bars_required_to_trade}")
            return None
        if not config.window.contains(bar.timestamp):
            logger.debug(f"Outside trading window at {bar.timestamp.time()}")
            return None

        status = risk.check_limits()
        if status is not LimitStatus.OK:
            if config.risk.force_exit_on_limit and not context.position.is_flat:
                logger.warning(f"Forcing exit: {status.value}")
                return self._execute(Intent(IntentAction.FLATTEN, f"daily {status.value}"), bar)
            return None

        gating = GatingState(
            entries_allowed=not risk.in_cooldown,
            in_cooldown=risk.in_cooldown,
        )
        if gating.in_cooldown:
            logger.debug(f"Entries paused: cooldown bar {risk.state.bars_since_target_hit}")
        try:
            intent = self._policy.evaluate(snapshot, bar, context.position, gating)
        except InsufficientHistory as exc:
            logger.debug(f"Rules skipped: {exc}")
            return None
        if intent is None:
            return None
        return self._execute(intent, bar)

    def on_fill(self, fill: FillEvent) -> None:
        """
        Apply a fill reported by the host.

        Raises:
            DesynchronizedFill: If the fill does not match the believed position
        """
        self._require_configured()
        pnl = self._positions.apply_fill(fill, point_value=self._broker.point_value)
        if pnl is not None and self._risk.pnl_source == "fills":
            self._risk.on_fill(pnl)
        if fill.role is OrderRole.TARGET:
            self._risk.on_profit_target_fill()
        self._save_risk_state()

    def sync_external_pnl(self, cumulative: float | Decimal) -> None:
        """
        Push the host's cumulative realized P&L (external P&L source only).

        Raises:
            PnLSourceConflict: If the core sums fills itself
        """
        self._require_configured()
        self._risk.sync_external(cumulative)
        self._save_risk_state()

    def _execute(self, intent: Intent, bar: Bar) -> Optional[Intent]:
        config = self._config
        positions = self._positions
        action = intent.action

        if action.is_entry:
            side = PositionSide.LONG if action is IntentAction.ENTER_LONG else PositionSide.SHORT
            accepted = positions.enter(
                side,
                config.quantity,
                stop_ticks=config.orders.trail_stop_ticks,
                target=self._profit_target(bar),
            )
            if not accepted:
                return None
            return Intent(action, intent.reason, config.quantity)

        if action is IntentAction.EXIT_LONG:
            sent = positions.exit(PositionSide.LONG)
        elif action is IntentAction.EXIT_SHORT:
            sent = positions.exit(PositionSide.SHORT)
        else:
            sent = positions.exit(None)
        return intent if sent else None

    def _profit_target(self, bar: Bar) -> ProfitTarget:
        """Tick target, or the remaining daily goal in currency when that is smaller.

        Ticks are priced with the tick size of the bar the entry is decided on.
        """
        config = self._config
        ticks = config.orders.profit_target_ticks
        default = ProfitTarget.ticks(ticks)
        if not config.orders.scale_final_target:
            return default

        remaining = self._risk.remaining_goal
        if remaining is None or remaining <= 0:
            return default
        tick_value = to_decimal(bar.tick_size) * to_decimal(self._broker.point_value)
        default_amount = tick_value * ticks * config.quantity
        if remaining < default_amount:
            logger.info(f"Final trade of day: target {remaining} instead of {ticks} ticks")
            return ProfitTarget.currency(remaining)
        return default

    def _restore_risk_state(self, session_date) -> None:
        stored = self._risk_store.load(session_date)
        if stored is None:
            return
        state = self._context.risk
        for name, value in stored.model_dump().items():
            setattr(state, name, value)
        risk_config = self._config.risk
        state.daily_goal = risk_config.daily_goal
        state.daily_loss_limit = risk_config.daily_loss_limit
        state.cooldown_bars = risk_config.cooldown_bars

    def _save_risk_state(self) -> None:
        if self._risk_store is not None:
            self._risk_store.save(self._context.risk)
