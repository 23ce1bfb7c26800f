from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Optional

import pytest

from stratcore.core.errors import (
    AlreadyConfigured,
    ConfigOutOfRange,
    DesynchronizedFill,
    PnLSourceConflict,
    StrategyCoreError,
)
from stratcore.core.types import Bar, FillEvent, IntentAction, OrderRole, OrderSide, ProfitTarget
from stratcore.execution.paper import PaperBroker
from stratcore.execution.position import PositionStatus
from stratcore.risk.store import RiskStateStore
from stratcore.strategy.core import StrategyCore

_DAY = datetime(2026, 3, 2, 9, 0)


def _config(**overrides: Any) -> dict[str, Any]:
    config: dict[str, Any] = {
        "variant": "momentum_threshold",
        "bars_required_to_trade": 0,
        "indicators": {"williams_r_period": 3},
    }
    config.update(overrides)
    return config


def _rising(k: int, start: datetime = _DAY) -> Bar:
    """Bar k of a staircase whose close is always the window high (%R = 0)."""
    return Bar(
        timestamp=start + timedelta(minutes=k),
        open=100.0 + k,
        high=101.0 + k,
        low=99.0 + k,
        close=101.0 + k,
    )


def _fill(
    price: float,
    side: OrderSide,
    role: OrderRole,
    quantity: int = 1,
    timestamp: Optional[datetime] = None,
) -> FillEvent:
    return FillEvent(price=price, quantity=quantity, side=side, role=role, timestamp=timestamp or _DAY)


def _enter_long_on_third_bar(core: StrategyCore) -> None:
    assert core.on_bar(_rising(1)) is None
    assert core.on_bar(_rising(2)) is None
    intent = core.on_bar(_rising(3))
    assert intent is not None
    assert intent.action is IntentAction.ENTER_LONG


def test_momentum_entry_and_renko_exit() -> None:
    broker = PaperBroker()
    core = StrategyCore(broker, _config(renko_color_exit=True))
    core.on_bar(Bar(_DAY, 100.0, 101.0, 99.0, 100.0))
    core.on_bar(Bar(_DAY + timedelta(minutes=1), 100.0, 101.0, 99.0, 100.0))

    # %R = -100 * (102 - 101.4) / (102 - 98) = -15
    intent = core.on_bar(Bar(_DAY + timedelta(minutes=2), 100.0, 102.0, 98.0, 101.4))
    assert intent.action is IntentAction.ENTER_LONG
    assert intent.quantity == 1
    assert broker.methods() == ["enter_long", "set_trailing_stop", "set_profit_target"]
    assert core.position.status is PositionStatus.ENTERING

    core.on_fill(_fill(101.5, OrderSide.BUY, OrderRole.ENTRY))
    assert core.position.is_long

    # %R = -100 * (102 - 97.75) / (102 - 97) = -85 on a bearish brick
    intent = core.on_bar(Bar(_DAY + timedelta(minutes=3), 101.0, 101.5, 97.0, 97.75))
    assert intent.action is IntentAction.EXIT_LONG
    assert broker.methods()[-1] == "exit_long"
    assert core.position.status is PositionStatus.EXITING


def test_oversold_while_long_does_not_reverse() -> None:
    broker = PaperBroker()
    core = StrategyCore(broker, _config())
    core.on_bar(Bar(_DAY, 100.0, 101.0, 99.0, 100.0))
    core.on_bar(Bar(_DAY + timedelta(minutes=1), 100.0, 101.0, 99.0, 100.0))
    core.on_bar(Bar(_DAY + timedelta(minutes=2), 100.0, 102.0, 98.0, 101.4))
    core.on_fill(_fill(101.5, OrderSide.BUY, OrderRole.ENTRY))
    calls_before = list(broker.calls)

    assert core.on_bar(Bar(_DAY + timedelta(minutes=3), 101.0, 101.5, 97.0, 97.75)) is None
    assert broker.calls == calls_before
    assert core.position.is_long


def test_no_entries_during_global_warm_up() -> None:
    broker = PaperBroker()
    core = StrategyCore(broker, _config(bars_required_to_trade=5))
    for k in range(1, 6):
        assert core.on_bar(_rising(k)) is None
    assert broker.calls == []
    assert core.on_bar(_rising(6)).action is IntentAction.ENTER_LONG


def test_no_entries_outside_trading_window() -> None:
    broker = PaperBroker()
    core = StrategyCore(broker, _config(window={"start": "09:00", "end": "09:02"}))
    for k in range(1, 6):
        core.on_bar(_rising(k))
    assert broker.calls == []


def test_cooldown_after_profit_target() -> None:
    broker = PaperBroker()
    core = StrategyCore(broker, _config(risk={"cooldown_bars": 5}))
    _enter_long_on_third_bar(core)
    core.on_fill(_fill(104.0, OrderSide.BUY, OrderRole.ENTRY))
    core.on_fill(_fill(106.0, OrderSide.SELL, OrderRole.TARGET))
    assert core.position.is_flat
    assert core.risk_state.cumulative_realized_pnl == Decimal("100")
    assert core.risk_state.target_hit

    for k in range(4, 9):
        assert core.on_bar(_rising(k)) is None
    assert core.on_bar(_rising(9)).action is IntentAction.ENTER_LONG
    assert broker.methods().count("enter_long") == 2


def test_goal_latches_until_next_day() -> None:
    broker = PaperBroker()
    core = StrategyCore(broker, _config(risk={"daily_goal": "50"}))
    _enter_long_on_third_bar(core)
    core.on_fill(_fill(104.0, OrderSide.BUY, OrderRole.ENTRY))
    core.on_fill(_fill(106.0, OrderSide.SELL, OrderRole.TARGET))

    for k in range(4, 10):
        assert core.on_bar(_rising(k)) is None
    assert broker.methods().count("enter_long") == 1

    intent = core.on_bar(_rising(10, start=_DAY + timedelta(days=1)))
    assert intent.action is IntentAction.ENTER_LONG
    assert core.risk_state.cumulative_realized_pnl == Decimal("0")


def test_loss_limit_forces_exit() -> None:
    broker = PaperBroker()
    core = StrategyCore(
        broker,
        _config(quantity=2, risk={"daily_loss_limit": "-100", "force_exit_on_limit": True}),
    )
    _enter_long_on_third_bar(core)
    core.on_fill(_fill(104.0, OrderSide.BUY, OrderRole.ENTRY, quantity=2))
    core.on_fill(_fill(101.0, OrderSide.SELL, OrderRole.STOP, quantity=1))
    assert core.risk_state.cumulative_realized_pnl == Decimal("-150")

    intent = core.on_bar(_rising(4))
    assert intent.action is IntentAction.FLATTEN
    assert broker.methods()[-1] == "exit_long"

    assert core.on_bar(_rising(5)) is None
    assert broker.methods().count("exit_long") == 1


def test_loss_limit_without_forced_exit_leaves_position() -> None:
    broker = PaperBroker()
    core = StrategyCore(broker, _config(quantity=2, risk={"daily_loss_limit": "-100"}))
    _enter_long_on_third_bar(core)
    core.on_fill(_fill(104.0, OrderSide.BUY, OrderRole.ENTRY, quantity=2))
    core.on_fill(_fill(101.0, OrderSide.SELL, OrderRole.STOP, quantity=1))

    assert core.on_bar(_rising(4)) is None
    assert "exit_long" not in broker.methods()
    assert core.position.is_long


def test_trend_following_entry_and_exit() -> None:
    broker = PaperBroker()
    core = StrategyCore(
        broker,
        {
            "variant": "trend_following",
            "bars_required_to_trade": 0,
            "indicators": {"atr_period": 3, "supertrend_multiplier": 1.5},
            "orders": {"trail_stop_ticks": None, "profit_target_ticks": 10},
        },
    )
    for i in range(3):
        bar = Bar(_DAY + timedelta(minutes=i), 100.5 + i, 102 + i, 100 + i, 101.5 + i)
        assert core.on_bar(bar) is None

    intent = core.on_bar(Bar(_DAY + timedelta(minutes=3), 103.5, 105, 103, 104.5))
    assert intent.action is IntentAction.ENTER_LONG
    assert broker.methods() == ["enter_long", "set_profit_target"]
    assert broker.calls[-1].argument == ProfitTarget.ticks(10)
    core.on_fill(_fill(104.5, OrderSide.BUY, OrderRole.ENTRY))

    intent = core.on_bar(Bar(_DAY + timedelta(minutes=4), 105, 106, 90, 91))
    assert intent.action is IntentAction.EXIT_LONG
    assert broker.methods()[-1] == "exit_long"


def test_final_target_is_scaled_to_remaining_goal() -> None:
    broker = PaperBroker(tick_size=0.25, point_value=50.0)
    core = StrategyCore(
        broker,
        _config(orders={"scale_final_target": True}, risk={"daily_goal": "300"}),
    )
    _enter_long_on_third_bar(core)
    assert broker.calls[-1].argument == ProfitTarget.currency(Decimal("300"))


def test_target_stays_in_ticks_when_goal_is_far() -> None:
    broker = PaperBroker(tick_size=0.25, point_value=50.0)
    core = StrategyCore(
        broker,
        _config(orders={"scale_final_target": True}, risk={"daily_goal": "5000"}),
    )
    _enter_long_on_third_bar(core)
    assert broker.calls[-1].argument == ProfitTarget.ticks(80)


def test_external_pnl_source_ignores_fill_deltas() -> None:
    core = StrategyCore(PaperBroker(), _config(risk={"pnl_source": "external", "daily_goal": "500"}))
    _enter_long_on_third_bar(core)
    core.on_fill(_fill(104.0, OrderSide.BUY, OrderRole.ENTRY))
    core.on_fill(_fill(106.0, OrderSide.SELL, OrderRole.EXIT))
    assert core.risk_state.cumulative_realized_pnl == Decimal("0")

    core.sync_external_pnl(Decimal("600"))
    assert core.on_bar(_rising(4)) is None
    assert core.risk_state.latched_limit.value == "goal_reached"


def test_sync_external_pnl_rejected_for_fill_source() -> None:
    core = StrategyCore(PaperBroker(), _config())
    with pytest.raises(PnLSourceConflict):
        core.sync_external_pnl(100)


def test_unexpected_fill_raises() -> None:
    core = StrategyCore(PaperBroker(), _config())
    with pytest.raises(DesynchronizedFill):
        core.on_fill(_fill(100.0, OrderSide.SELL, OrderRole.STOP))


def test_configure_only_once() -> None:
    core = StrategyCore(PaperBroker())
    with pytest.raises(StrategyCoreError, match="not configured"):
        core.on_bar(_rising(1))

    core.configure(_config())
    with pytest.raises(AlreadyConfigured):
        core.configure(_config())


def test_configure_names_offending_field() -> None:
    core = StrategyCore(PaperBroker())
    with pytest.raises(ConfigOutOfRange) as exc_info:
        core.configure({"indicators": {"williams_r_period": 0}})
    assert exc_info.value.field == "indicators.williams_r_period"


def test_risk_state_survives_restart(tmp_path) -> None:
    store = RiskStateStore(tmp_path, "es")
    config = _config(risk={"daily_goal": "1000"})
    core = StrategyCore(PaperBroker(), config, risk_store=store)
    _enter_long_on_third_bar(core)
    core.on_fill(_fill(104.0, OrderSide.BUY, OrderRole.ENTRY))
    core.on_fill(_fill(106.0, OrderSide.SELL, OrderRole.TARGET))
    assert store.path.is_file()

    restarted = StrategyCore(PaperBroker(), config, risk_store=store)
    restarted.on_bar(_rising(4))
    assert restarted.risk_state.cumulative_realized_pnl == Decimal("100")
    assert restarted.risk_state.daily_goal == Decimal("1000")


def test_final_target_prices_ticks_with_bar_tick_size() -> None:
    def fine_tick(k: int) -> Bar:
        bar = _rising(k)
        return Bar(bar.timestamp, bar.open, bar.high, bar.low, bar.close, tick_size=0.125)

    config = _config(orders={"scale_final_target": True}, risk={"daily_goal": "700"})

    # 80 ticks of 0.25 at 50 per point is 1000, more than the 700 left
    coarse = PaperBroker(point_value=50.0)
    core = StrategyCore(coarse, config)
    _enter_long_on_third_bar(core)
    assert coarse.calls[-1].argument == ProfitTarget.currency(Decimal("700"))

    # 80 ticks of 0.125 is only 500, so the tick target stays
    fine = PaperBroker(point_value=50.0)
    core = StrategyCore(fine, config)
    for k in (1, 2):
        assert core.on_bar(fine_tick(k)) is None
    assert core.on_bar(fine_tick(3)).action is IntentAction.ENTER_LONG
    assert fine.calls[-1].argument == ProfitTarget.ticks(80)
