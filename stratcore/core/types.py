"""Core domain types shared by the indicator, risk, position and rule layers."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional


class OrderSide(str, Enum):
    BUY = "buy"
    SELL = "sell"


class OrderRole(str, Enum):
    """Which order produced a fill."""

    ENTRY = "entry"
    STOP = "stop"
    TARGET = "target"
    EXIT = "exit"


class IntentAction(str, Enum):
    ENTER_LONG = "enter_long"
    ENTER_SHORT = "enter_short"
    EXIT_LONG = "exit_long"
    EXIT_SHORT = "exit_short"
    FLATTEN = "flatten"

    @property
    def is_entry(self) -> bool:
        return self in (IntentAction.ENTER_LONG, IntentAction.ENTER_SHORT)


class TargetMode(str, Enum):
    TICKS = "ticks"
    CURRENCY = "currency"


@dataclass(frozen=True)
class Bar:
    timestamp: datetime
    open: float
    high: float
    low: float
    close: float
    tick_size: float = 0.25

    @property
    def is_bullish(self) -> bool:
        return self.close > self.open

    @property
    def is_bearish(self) -> bool:
        return self.close < self.open


@dataclass(frozen=True)
class FillEvent:
    price: float
    quantity: int
    side: OrderSide
    role: OrderRole
    timestamp: datetime


@dataclass(frozen=True)
class ProfitTarget:
    mode: TargetMode
    value: Decimal

    @classmethod
    def ticks(cls, ticks: int) -> "ProfitTarget":
        return cls(mode=TargetMode.TICKS, value=Decimal(int(ticks)))

    @classmethod
    def currency(cls, amount: Decimal) -> "ProfitTarget":
        return cls(mode=TargetMode.CURRENCY, value=Decimal(amount))


@dataclass(frozen=True)
class Intent:
    action: IntentAction
    reason: str = ""
    quantity: Optional[int] = None
