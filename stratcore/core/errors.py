"""Typed errors for the strategy core."""

from __future__ import annotations

from typing import Any


class StrategyCoreError(Exception):
    """Base class for strategy core errors."""


class InsufficientHistory(StrategyCoreError):
    """Raised when an indicator is read before its warm-up period is complete."""

    def __init__(self, indicator: str, available: int, required: int) -> None:
        self.indicator = indicator
        self.available = available
        self.required = required
        super().__init__(
            f"{indicator} needs {required} bars, only {available} available"
        )


class InvalidWindowConfig(StrategyCoreError):
    """Raised when a trading window bound cannot be parsed."""


class ConfigOutOfRange(StrategyCoreError):
    """Raised when a configuration value is rejected; names the offending field."""

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        super().__init__(f"{field}: {message}")


class AlreadyConfigured(StrategyCoreError):
    """Raised when a strategy core is configured a second time."""


class DesynchronizedFill(StrategyCoreError):
    """Raised when a fill does not match the exposure the core believes it holds."""

    def __init__(self, message: str, fill: Any = None) -> None:
        self.fill = fill
        super().__init__(message)


class PnLSourceConflict(StrategyCoreError):
    """Raised when realized P&L arrives from a source the tracker is not configured for."""
