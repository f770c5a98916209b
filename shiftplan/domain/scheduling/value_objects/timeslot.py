"""TimeSlot value object.

A contiguous stretch of working time on one machine. Schedule items keep the
slots the working calendar produced so that load can be measured per day.
"""
from __future__ import annotations

from datetime import datetime

from pydantic import model_validator

from ...shared.base import ValueObject


class TimeSlot(ValueObject):
    start: datetime
    end: datetime

    @model_validator(mode="after")
    def _end_not_before_start(self) -> TimeSlot:
        if self.end < self.start:
            raise ValueError("End time must not be before start time")
        return self

    @property
    def minutes(self) -> float:
        return (self.end - self.start).total_seconds() / 60

    def overlap_minutes(self, start: datetime | None, end: datetime | None) -> float:
        """Minutes of this slot inside ``[start, end)``; open bounds are unbounded."""
        lo = self.start if start is None else max(self.start, start)
        hi = self.end if end is None else min(self.end, end)
        if hi <= lo:
            return 0.0
        return (hi - lo).total_seconds() / 60

    def overlaps(self, other: TimeSlot) -> bool:
        return self.start < other.end and other.start < self.end
