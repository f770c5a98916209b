"""
Shift Entity

A named shift: the weekdays it runs on, its breaks, and whether (and how much)
overtime may be added to it.
"""

from datetime import date, datetime, time, timedelta

from pydantic import Field

from ...shared.base import Entity, ValueObject
from ..value_objects.enums import Weekday

DEFAULT_WORKING_DAYS = frozenset(
    {
        Weekday.MONDAY,
        Weekday.TUESDAY,
        Weekday.WEDNESDAY,
        Weekday.THURSDAY,
        Weekday.FRIDAY,
        Weekday.SATURDAY,
    }
)


class ShiftTiming(ValueObject):
    """Clock times and overtime allowance of a shift."""

    start_time: time = time(9, 0)
    end_time: time = time(17, 0)
    allow_flexible_timing: bool = False
    overtime_allowed: bool = True
    max_overtime_hours: float | None = Field(default=None, ge=0)


class BreakTime(ValueObject):
    """A named break inside a shift."""

    id: str = ""
    name: str = ""
    start: time
    end: time
    is_paid: bool = False
    type: str = "custom"

    def bounds_on(self, day: date) -> tuple[datetime, datetime]:
        """Concrete interval of the break when its shift opens on ``day``."""
        opens = datetime.combine(day, self.start)
        closes = datetime.combine(day, self.end)
        if closes <= opens:
            closes += timedelta(days=1)
        return opens, closes


class Shift(Entity):
    name: str = ""
    timing: ShiftTiming = Field(default_factory=ShiftTiming)
    break_times: tuple[BreakTime, ...] = ()
    working_days: frozenset[Weekday] = DEFAULT_WORKING_DAYS
    is_active: bool = True

    @property
    def unpaid_breaks(self) -> list[BreakTime]:
        return [b for b in self.break_times if not b.is_paid]

    def works_on(self, day: date) -> bool:
        """Check if the shift runs on the weekday of ``day``."""
        return Weekday.from_index(day.weekday()) in self.working_days

    @classmethod
    def default(cls) -> "Shift":
        """Monday to Saturday shift used when no configured shift applies."""
        return cls(id="default", name="Default")
