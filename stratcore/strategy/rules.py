"""Swappable entry/exit rule policies and the variant table that selects them."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional, Protocol

from stratcore.core.errors import ConfigOutOfRange
from stratcore.core.types import Bar, Intent, IntentAction
from stratcore.execution.position import PositionState
from stratcore.indicators.engine import IndicatorSnapshot
from stratcore.strategy.config import StrategyConfig


@dataclass(frozen=True)
class GatingState:
    entries_allowed: bool = True
    in_cooldown: bool = False


class RulePolicy(Protocol):
    def evaluate(
        self,
        snapshot: IndicatorSnapshot,
        bar: Bar,
        position: PositionState,
        gating: GatingState,
    ) -> Optional[Intent]:
        """Return the intent for this bar, or None.

        May raise InsufficientHistory when a required indicator is warming up.
        """


@dataclass(frozen=True)
class MomentumThreshold:
    """Williams %R breakout entries with optional WMA and bar-color filters."""

    overbought: float
    oversold: float
    use_wma_filter: bool = False
    require_bar_color: bool = False

    def evaluate(
        self,
        snapshot: IndicatorSnapshot,
        bar: Bar,
        position: PositionState,
        gating: GatingState,
    ) -> Optional[Intent]:
        if not gating.entries_allowed:
            return None
        williams_r = snapshot.require("williams_r")
        if williams_r is None:
            return None
        wma = snapshot.require("wma") if self.use_wma_filter else None

        long_filter = wma is None or bar.close > wma
        short_filter = wma is None or bar.close < wma
        long_color = not self.require_bar_color or bar.is_bullish
        short_color = not self.require_bar_color or bar.is_bearish

        if williams_r > self.overbought and not position.is_long and long_filter and long_color:
            return Intent(IntentAction.ENTER_LONG, f"williams_r {williams_r:.2f} > {self.overbought}")
        if williams_r < self.oversold and not position.is_short and short_filter and short_color:
            return Intent(IntentAction.ENTER_SHORT, f"williams_r {williams_r:.2f} < {self.oversold}")
        return None


@dataclass(frozen=True)
class TrendFollowing:
    """Supertrend continuation entries and reversal exits."""

    def evaluate(
        self,
        snapshot: IndicatorSnapshot,
        bar: Bar,
        position: PositionState,
        gating: GatingState,
    ) -> Optional[Intent]:
        value = snapshot.require("supertrend")
        prev_value = snapshot.require("prev_supertrend")
        prev_close = snapshot.prev_close
        if value is None or prev_value is None or prev_close is None:
            return None
        close = bar.close
        was_above = prev_close > prev_value
        was_below = prev_close < prev_value

        if position.is_flat:
            if not gating.entries_allowed:
                return None
            if was_above and close > value:
                return Intent(IntentAction.ENTER_LONG, "close held above supertrend")
            if was_below and close < value:
                return Intent(IntentAction.ENTER_SHORT, "close held below supertrend")
            return None

        if position.is_long and was_above and close < value:
            return Intent(IntentAction.EXIT_LONG, "close crossed below supertrend")
        if position.is_short and was_below and close > value:
            return Intent(IntentAction.EXIT_SHORT, "close crossed above supertrend")
        return None


@dataclass(frozen=True)
class RenkoColorExit:
    """Exit on a brick of the opposite color, independent of the entry rule."""

    def evaluate(
        self,
        snapshot: IndicatorSnapshot,
        bar: Bar,
        position: PositionState,
        gating: GatingState,
    ) -> Optional[Intent]:
        if position.is_long and bar.is_bearish:
            return Intent(IntentAction.EXIT_LONG, "bearish brick")
        if position.is_short and bar.is_bullish:
            return Intent(IntentAction.EXIT_SHORT, "bullish brick")
        return None


@dataclass(frozen=True)
class CompositePolicy:
    """Exit rules run first while a position is open, then the entry rule."""

    entry: RulePolicy
    exits: tuple[RulePolicy, ...] = field(default_factory=tuple)

    def evaluate(
        self,
        snapshot: IndicatorSnapshot,
        bar: Bar,
        position: PositionState,
        gating: GatingState,
    ) -> Optional[Intent]:
        if not position.is_flat:
            for rule in self.exits:
                intent = rule.evaluate(snapshot, bar, position, gating)
                if intent is not None:
                    return intent
        return self.entry.evaluate(snapshot, bar, position, gating)


def _momentum_threshold(config: StrategyConfig) -> RulePolicy:
    return MomentumThreshold(
        overbought=config.momentum.overbought,
        oversold=config.momentum.oversold,
        use_wma_filter=config.momentum.use_wma_filter,
        require_bar_color=config.momentum.require_bar_color,
    )


def _trend_following(config: StrategyConfig) -> RulePolicy:
    return TrendFollowing()


VARIANTS: dict[str, Callable[[StrategyConfig], RulePolicy]] = {
    "momentum_threshold": _momentum_threshold,
    "trend_following": _trend_following,
}


def build_policy(config: StrategyConfig) -> CompositePolicy:
    factory = VARIANTS.get(config.variant)
    if factory is None:
        raise ConfigOutOfRange("variant", f"unknown variant {config.variant!r}")
    exits: tuple[RulePolicy, ...] = (RenkoColorExit(),) if config.renko_color_exit else ()
    return CompositePolicy(entry=factory(config), exits=exits)
