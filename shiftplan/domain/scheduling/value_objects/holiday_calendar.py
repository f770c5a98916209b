"""
Holiday Calendar Value Object

Set of non-working dates, each optionally tagged with a reason. Every Sunday
is an implicit holiday unless it is explicitly overridden as a working day.
Hosts exchange holidays as ``"YYYY-MM-DD|reason"`` strings; ``from_entries``
and ``to_entries`` convert between that form and the calendar.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta

SUNDAY = 6
SUNDAY_REASON = "Sunday"
ENTRY_SEPARATOR = "|"


def parse_holiday_entry(entry: str) -> tuple[date, str]:
    """
    Parse one ``"YYYY-MM-DD|reason"`` entry.

    The reason is optional and may itself contain the separator.

    Raises:
        ValueError: If the date part is not an ISO date
    """
    day, _, reason = entry.strip().partition(ENTRY_SEPARATOR)
    return date.fromisoformat(day.strip()), reason.strip()


def format_holiday_entry(day: date, reason: str = "") -> str:
    """Format a holiday as ``"YYYY-MM-DD|reason"`` (no separator without a reason)."""
    if reason:
        return f"{day.isoformat()}{ENTRY_SEPARATOR}{reason}"
    return day.isoformat()


@dataclass(frozen=True)
class HolidayCalendar:
    """
    Immutable set of holidays.

    ``holidays`` maps each explicit holiday to its reason ("" when none);
    ``sunday_overrides`` lists Sundays that are working days.
    """

    holidays: dict[date, str] = field(default_factory=dict)
    sunday_overrides: frozenset[date] = frozenset()

    def __post_init__(self):
        for day in self.sunday_overrides:
            if day.weekday() != SUNDAY:
                raise ValueError(f"Sunday override {day.isoformat()} is not a Sunday")

    @classmethod
    def from_entries(
        cls,
        entries: Iterable[str | date | datetime | tuple[date, str]],
        sunday_overrides: Iterable[date] = (),
    ) -> HolidayCalendar:
        """
        Build a calendar from mixed holiday entries.

        Args:
            entries: ``"YYYY-MM-DD|reason"`` strings, dates, or (date, reason) pairs
            sunday_overrides: Sundays to treat as working days

        Returns:
            New HolidayCalendar
        """
        holidays: dict[date, str] = {}
        for entry in entries:
            if isinstance(entry, str):
                day, reason = parse_holiday_entry(entry)
            elif isinstance(entry, tuple):
                day, reason = entry
            elif isinstance(entry, datetime):
                day, reason = entry.date(), ""
            else:
                day, reason = entry, ""
            # a later entry with a reason wins over a bare duplicate
            if reason or day not in holidays:
                holidays[day] = reason
        return cls(holidays=holidays, sunday_overrides=frozenset(sunday_overrides))

    @classmethod
    def coerce(
        cls,
        value: HolidayCalendar
        | Iterable[str | date | datetime | tuple[date, str]]
        | None,
    ) -> HolidayCalendar:
        """Accept a calendar, an iterable of entries, or None."""
        if value is None:
            return cls()
        if isinstance(value, HolidayCalendar):
            return value
        return cls.from_entries(value)

    def to_entries(self) -> list[str]:
        """Explicit holidays as sorted ``"YYYY-MM-DD|reason"`` strings."""
        return [
            format_holiday_entry(day, reason)
            for day, reason in sorted(self.holidays.items())
        ]

    def is_holiday(self, target_date: date) -> bool:
        """Check if a date is a holiday (explicit, or a non-overridden Sunday)."""
        if target_date in self.holidays:
            return True
        return (
            target_date.weekday() == SUNDAY
            and target_date not in self.sunday_overrides
        )

    def reason_for(self, target_date: date) -> str | None:
        """Reason a date is a holiday, or None when it is not one."""
        if target_date in self.holidays:
            return self.holidays[target_date] or None
        if self.is_holiday(target_date):
            return SUNDAY_REASON
        return None

    def holidays_between(self, start: date, end: date) -> list[tuple[date, str | None]]:
        """All holidays (including implicit Sundays) in ``[start, end]``."""
        result = []
        current = start
        while current <= end:
            if self.is_holiday(current):
                result.append((current, self.reason_for(current)))
            current += timedelta(days=1)
        return result

    def add_holiday(self, holiday_date: date, reason: str = "") -> HolidayCalendar:
        """
        Create a new calendar with an additional holiday.

        Args:
            holiday_date: Date to add as holiday
            reason: Optional reason

        Returns:
            New HolidayCalendar with added holiday
        """
        new_holidays = dict(self.holidays)
        new_holidays[holiday_date] = reason
        return HolidayCalendar(
            holidays=new_holidays, sunday_overrides=self.sunday_overrides
        )

    def remove_holiday(self, holiday_date: date) -> HolidayCalendar:
        """
        Create a new calendar with a holiday removed.

        Removing a Sunday records it as an override, making it a working day.
        """
        new_holidays = dict(self.holidays)
        new_holidays.pop(holiday_date, None)
        overrides = self.sunday_overrides
        if holiday_date.weekday() == SUNDAY:
            overrides = overrides | {holiday_date}
        return HolidayCalendar(holidays=new_holidays, sunday_overrides=overrides)

    def __len__(self) -> int:
        return len(self.holidays)

    def __str__(self) -> str:
        result = f"{len(self.holidays)} holidays + Sundays"
        if self.sunday_overrides:
            result += f" ({len(self.sunday_overrides)} working Sundays)"
        return result
