"""Time-of-day trading window, including windows that cross midnight."""

from __future__ import annotations

from datetime import datetime, time

from pydantic import BaseModel, ConfigDict, field_validator

from stratcore.core.errors import InvalidWindowConfig

_TIME_FORMATS = ("%H:%M:%S", "%H:%M")


def parse_time_of_day(value: object) -> time:
    """
    Parse a window bound.

    Accepts ``datetime.time`` or strings like ``"09:30"`` / ``"23:00:00"``.

    Raises:
        InvalidWindowConfig: If the value is not a wall-clock time in [00:00, 24:00)
    """
    if isinstance(value, time):
        return value
    if isinstance(value, str):
        raw = value.strip()
        for fmt in _TIME_FORMATS:
            try:
                return datetime.strptime(raw, fmt).time()
            except ValueError:
                continue
    raise InvalidWindowConfig(f"Cannot parse trading window time: {value!r}")


class TradingWindow(BaseModel):
    """Inclusive [start, end] time-of-day window; start > end crosses midnight."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    start: time = time(0, 0)
    end: time = time.max

    @field_validator("start", "end", mode="before")
    @classmethod
    def _parse_bound(cls, v: object) -> time:
        return parse_time_of_day(v)

    @property
    def crosses_midnight(self) -> bool:
        return self.start > self.end

    def contains(self, moment: datetime | time) -> bool:
        time_of_day = moment.time() if isinstance(moment, datetime) else moment
        return is_eligible(time_of_day, self)


def is_eligible(time_of_day: time, window: TradingWindow) -> bool:
    if window.start <= window.end:
        return window.start <= time_of_day <= window.end
    # crossing midnight: reject only the gap strictly between end and start
    return not (time_of_day < window.start and time_of_day > window.end)
