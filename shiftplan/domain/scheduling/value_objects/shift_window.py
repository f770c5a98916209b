"""
Shift Window Value Objects

A machine's daily working window is either a fixed ``HH:MM-HH:MM`` range or a
``Custom`` window of configurable length. Both variants share one working
hours computation; the legacy string form is parsed once, at the boundary.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Annotated, Literal

from pydantic import Field, model_validator

from ....core.config import settings
from ...shared.base import ValueObject

MINUTES_PER_DAY = 24 * 60
CUSTOM_TIMING = "Custom"


def parse_clock(value: str) -> time:
    """Parse an ``HH:MM`` string into a time."""
    hours, sep, minutes = value.strip().partition(":")
    if not sep or not hours.isdigit() or not minutes.isdigit():
        raise ValueError(f"Invalid clock time {value!r}, expected HH:MM")
    hour, minute = int(hours), int(minutes)
    # 24:00 is accepted as an end-of-day marker
    if hour == 24 and minute == 0:
        return time(0, 0)
    return time(hour, minute)


def _minute_of_day(value: time) -> int:
    return value.hour * 60 + value.minute


class _WindowBase(ValueObject):
    start: time
    end: time

    @property
    def wraps_midnight(self) -> bool:
        """True when the window ends on the next calendar date."""
        return self.end <= self.start

    def duration_minutes(self) -> int:
        """
        Length of the window in minutes.

        Overnight windows wrap past midnight; equal start and end is a
        round-the-clock window.
        """
        start_minutes = _minute_of_day(self.start)
        end_minutes = _minute_of_day(self.end)
        if end_minutes > start_minutes:
            return end_minutes - start_minutes
        return MINUTES_PER_DAY - start_minutes + end_minutes

    @property
    def working_hours(self) -> float:
        """Working hours per day, rounded to one decimal place."""
        return round(self.duration_minutes() / 60, 1)

    def bounds_on(self, day: date) -> tuple[datetime, datetime]:
        """Concrete start and end instants of the window opening on ``day``."""
        opens = datetime.combine(day, self.start)
        return opens, opens + timedelta(minutes=self.duration_minutes())

    def as_range(self) -> str:
        return f"{self.start.strftime('%H:%M')}-{self.end.strftime('%H:%M')}"


class FixedWindow(_WindowBase):
    """A window given explicitly as ``HH:MM-HH:MM``."""

    kind: Literal["fixed"] = "fixed"

    def __str__(self) -> str:
        return self.as_range()


class CustomWindow(_WindowBase):
    """A ``Custom`` window: a fixed number of hours from a configurable start."""

    kind: Literal["custom"] = "custom"
    start: time = time(9, 0)
    end: time = time(17, 0)

    @model_validator(mode="before")
    @classmethod
    def _derive_end(cls, data):
        if isinstance(data, dict) and data.get("start") is not None and data.get("end") is None:
            data = dict(data)
            data["end"] = cls.end_for(data["start"])
        return data

    @staticmethod
    def end_for(start: time | str, hours: int | None = None) -> time:
        """End of a custom window opening at ``start``."""
        if isinstance(start, str):
            start = parse_clock(start)
        hours = settings.CUSTOM_SHIFT_HOURS if hours is None else hours
        end_minutes = (_minute_of_day(start) + hours * 60) % MINUTES_PER_DAY
        return time(end_minutes // 60, end_minutes % 60)

    @classmethod
    def for_start(cls, start: time | None = None) -> CustomWindow:
        """Custom window from ``start``, or the configured default start."""
        start = start or parse_clock(settings.DEFAULT_SHIFT_START)
        return cls(start=start, end=cls.end_for(start))

    def __str__(self) -> str:
        return CUSTOM_TIMING


ShiftWindow = Annotated[FixedWindow | CustomWindow, Field(discriminator="kind")]


def parse_shift_timing(
    value: str | FixedWindow | CustomWindow, custom_start: time | None = None
) -> FixedWindow | CustomWindow:
    """
    Convert the legacy string representation into a tagged window.

    Args:
        value: ``"HH:MM-HH:MM"``, ``"Custom"``, or an already parsed window
        custom_start: Start used for ``Custom`` windows

    Returns:
        FixedWindow or CustomWindow

    Raises:
        ValueError: If the string is neither form
    """
    if isinstance(value, (FixedWindow, CustomWindow)):
        return value

    text = value.strip()
    if text.lower() == CUSTOM_TIMING.lower():
        return CustomWindow.for_start(custom_start)

    start, sep, end = text.partition("-")
    if not sep:
        raise ValueError(f"Invalid shift timing {value!r}, expected HH:MM-HH:MM or Custom")
    return FixedWindow(start=parse_clock(start), end=parse_clock(end))


def working_hours_for(value: str | FixedWindow | CustomWindow) -> float:
    """Working hours per day for a timing string or window."""
    return parse_shift_timing(value).working_hours
