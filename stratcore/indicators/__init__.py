"""Incremental indicator recurrences and the per-bar indicator engine."""

from stratcore.indicators.atr import AverageTrueRange, true_range
from stratcore.indicators.engine import IndicatorEngine, IndicatorSnapshot
from stratcore.indicators.supertrend import Supertrend
from stratcore.indicators.williams_r import WilliamsR
from stratcore.indicators.wma import WeightedMovingAverage

__all__ = [
    "AverageTrueRange",
    "IndicatorEngine",
    "IndicatorSnapshot",
    "Supertrend",
    "WeightedMovingAverage",
    "WilliamsR",
    "true_range",
]
