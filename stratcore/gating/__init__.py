"""Per-bar gating predicates."""

from stratcore.gating.window import TradingWindow, is_eligible, parse_time_of_day

__all__ = ["TradingWindow", "is_eligible", "parse_time_of_day"]
