"""Named variant presets applied as partial overrides over the defaults."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from stratcore.core.errors import ConfigOutOfRange
from stratcore.strategy.config import StrategyConfig, load_strategy_config

_WILLIAMS_WMA: dict[str, Any] = {
    "variant": "momentum_threshold",
    "window": {"start": "03:30", "end": "04:00"},
    "indicators": {"williams_r_period": 20, "wma_period": 100},
    "momentum": {"overbought": -20, "oversold": -80, "use_wma_filter": False},
    "orders": {"trail_stop_ticks": 65, "profit_target_ticks": 80},
    "risk": {"cooldown_bars": 0, "pnl_source": "external"},
}

PRESETS: dict[str, dict[str, Any]] = {
    "williams_renko": {
        "variant": "momentum_threshold",
        "renko_color_exit": True,
        "window": {"start": "07:00", "end": "10:00"},
        "indicators": {"williams_r_period": 14},
        "momentum": {"overbought": -20, "oversold": -80},
        "orders": {"trail_stop_ticks": 80, "profit_target_ticks": 80},
        "risk": {"daily_goal": "500", "daily_loss_limit": "-300", "pnl_source": "fills"},
    },
    "williams_renko_v2": {
        "variant": "momentum_threshold",
        "window": {"start": "03:30", "end": "04:00"},
        "momentum": {"overbought": -20, "oversold": -80},
        "orders": {"trail_stop_ticks": 80, "profit_target_ticks": 80, "scale_final_target": True},
        "risk": {
            "daily_goal": "1000",
            "daily_loss_limit": "-1000",
            "force_exit_on_limit": True,
            "pnl_source": "fills",
        },
    },
    "williams_renko_v3": {
        "variant": "momentum_threshold",
        "window": {"start": "03:30", "end": "04:00"},
        "momentum": {"overbought": -10, "oversold": -90},
        "orders": {"trail_stop_ticks": 80, "profit_target_ticks": 80},
        "risk": {
            "daily_goal": "1000",
            "daily_loss_limit": "-1000",
            "force_exit_on_limit": True,
            "pnl_source": "external",
        },
    },
    "williams_renko_wma": _WILLIAMS_WMA,
    "williams_renko_tick": {
        **_WILLIAMS_WMA,
        "momentum": {**_WILLIAMS_WMA["momentum"], "use_wma_filter": True, "require_bar_color": True},
    },
    "supertrend_renko": {
        "variant": "trend_following",
        "quantity": 1,
        "bars_required_to_trade": 10,
        "window": {"start": "09:30", "end": "16:00"},
        "indicators": {"atr_period": 10, "supertrend_multiplier": 1.5},
        "orders": {"trail_stop_ticks": None, "profit_target_ticks": 10},
    },
}


def merge_overrides(base: Mapping[str, Any], overrides: Optional[Mapping[str, Any]]) -> dict[str, Any]:
    """Merge nested override mappings; only keys present in ``overrides`` change."""
    merged: dict[str, Any] = dict(base)
    if not overrides:
        return merged
    for key, value in overrides.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = merge_overrides(current, value)
        else:
            merged[key] = value
    return merged


def build_config(
    preset: Optional[str] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> StrategyConfig:
    """
    Resolve a preset plus overrides into a validated StrategyConfig.

    Raises:
        ConfigOutOfRange: Unknown preset or out-of-range value
    """
    base: Mapping[str, Any] = {}
    if preset is not None:
        if preset not in PRESETS:
            raise ConfigOutOfRange("preset", f"unknown preset {preset!r}")
        base = PRESETS[preset]
    return load_strategy_config(merge_overrides(base, overrides))
