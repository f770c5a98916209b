"""
Working Calendar Service

Maps "start instant + working minutes" onto concrete working-time slots for
one machine. A machine works inside its daily shift window on the weekdays of
its shift, never on holidays (including implicit Sundays), and never during
the shift's unpaid breaks. Work that does not fit in the current window
carries over to the next working day.
"""

from collections.abc import Iterable, Sequence
from datetime import date, datetime, time, timedelta

from ....core.config import settings
from ....core.observability import get_logger
from ...shared.exceptions import ErrorType, NoWorkingTimeError
from ..entities.machine import Machine
from ..entities.shift import DEFAULT_WORKING_DAYS, BreakTime, Shift
from ..value_objects.enums import Weekday
from ..value_objects.holiday_calendar import HolidayCalendar
from ..value_objects.issues import SchedulingIssue
from ..value_objects.shift_window import CustomWindow, FixedWindow
from ..value_objects.timeslot import TimeSlot

logger = get_logger(__name__)

ONE_DAY = timedelta(days=1)


class WorkingCalendar:
    """
    Working time of a single machine.

    Args:
        window: Daily working window of the machine
        holidays: Holiday calendar (Sundays are holidays unless overridden)
        working_days: Weekdays the shift runs on
        breaks: Unpaid breaks carved out of every window
        search_limit_days: Days searched for working time before giving up
    """

    def __init__(
        self,
        window: FixedWindow | CustomWindow,
        holidays: HolidayCalendar | None = None,
        working_days: Iterable[Weekday] = DEFAULT_WORKING_DAYS,
        breaks: Sequence[BreakTime] = (),
        search_limit_days: int | None = None,
    ) -> None:
        self.window = window
        self.holidays = holidays or HolidayCalendar()
        self.working_days = frozenset(working_days)
        self.breaks = tuple(breaks)
        self.search_limit_days = (
            settings.CALENDAR_SEARCH_LIMIT_DAYS
            if search_limit_days is None
            else search_limit_days
        )

    def is_working_day(self, day: date) -> bool:
        """Check if a date is neither a holiday nor outside the shift's weekdays."""
        if self.holidays.is_holiday(day):
            return False
        return Weekday.from_index(day.weekday()) in self.working_days

    def day_segments(self, day: date) -> list[TimeSlot]:
        """
        Usable working slots of the window opening on ``day``.

        The part of an overnight window that falls on a non-working date is
        dropped, and unpaid breaks are cut out.
        """
        if not self.is_working_day(day):
            return []

        opens, closes = self.window.bounds_on(day)
        next_midnight = datetime.combine(day + ONE_DAY, time(0, 0))
        if closes > next_midnight and not self.is_working_day(day + ONE_DAY):
            closes = next_midnight

        segments = [(opens, closes)]
        for brk in self.breaks:
            segments = _subtract(segments, *self._break_bounds(brk, opens))

        return [TimeSlot(start=s, end=e) for s, e in segments if e > s]

    def allocate(self, from_instant: datetime, duration_minutes: float) -> list[TimeSlot]:
        """
        Consume ``duration_minutes`` of working time starting at ``from_instant``.

        Args:
            from_instant: Earliest instant work may start
            duration_minutes: Working minutes to place

        Returns:
            Contiguous working slots, in order. A zero duration returns one
            empty slot at the first working instant.

        Raises:
            NoWorkingTimeError: If no working time exists within the search limit
        """
        remaining = max(0.0, float(duration_minutes))
        cursor = from_instant
        slots: list[TimeSlot] = []

        # an overnight window opened the day before may still be running
        day = from_instant.date() - ONE_DAY
        last_found = from_instant.date()

        while True:
            if (day - last_found).days > self.search_limit_days:
                raise NoWorkingTimeError(self.search_limit_days, last_found.isoformat())

            for segment in self.day_segments(day):
                if segment.end <= cursor:
                    continue
                start = max(segment.start, cursor)
                available = (segment.end - start).total_seconds() / 60
                take = min(available, remaining)
                end = start + timedelta(minutes=take)
                slots.append(TimeSlot(start=start, end=end))
                remaining -= take
                cursor = end
                last_found = day
                if remaining <= 0:
                    return _merge(slots)
            day += ONE_DAY

    def next_working_window(
        self, from_instant: datetime, duration_minutes: float
    ) -> tuple[datetime, datetime]:
        """Start and end instants of ``duration_minutes`` of work."""
        slots = self.allocate(from_instant, duration_minutes)
        return slots[0].start, slots[-1].end

    def next_working_instant(self, from_instant: datetime) -> datetime:
        """First instant at or after ``from_instant`` inside working time."""
        return self.allocate(from_instant, 0)[0].start

    def working_minutes_on(self, day: date) -> float:
        """Working minutes of the window opening on ``day``."""
        return sum(slot.minutes for slot in self.day_segments(day))

    def _break_bounds(self, brk: BreakTime, opens: datetime) -> tuple[datetime, datetime]:
        start, end = brk.bounds_on(opens.date())
        # breaks before the window's opening time belong to its overnight part
        if start < opens:
            start, end = start + ONE_DAY, end + ONE_DAY
        return start, end


def _subtract(
    segments: list[tuple[datetime, datetime]], cut_start: datetime, cut_end: datetime
) -> list[tuple[datetime, datetime]]:
    result = []
    for start, end in segments:
        if cut_end <= start or cut_start >= end:
            result.append((start, end))
            continue
        if start < cut_start:
            result.append((start, cut_start))
        if cut_end < end:
            result.append((cut_end, end))
    return result


def _merge(slots: list[TimeSlot]) -> list[TimeSlot]:
    merged = [slots[0]]
    for slot in slots[1:]:
        if slot.start == merged[-1].end:
            merged[-1] = TimeSlot(start=merged[-1].start, end=slot.end)
        else:
            merged.append(slot)
    # zero-length leading slot only when the whole request was empty
    return [s for s in merged if s.minutes > 0] or merged[:1]


def resolve_shift(
    machine: Machine, shifts: Sequence[Shift]
) -> tuple[Shift, list[SchedulingIssue]]:
    """
    Pick the shift governing a machine.

    The machine's own ``shift_id`` wins, then the first active shift, then the
    default Monday to Saturday shift. A shift without working days cannot be
    used; it is reported and the default week is used instead.
    """
    issues: list[SchedulingIssue] = []
    shift = None
    if machine.shift_id is not None:
        shift = next((s for s in shifts if s.id == machine.shift_id), None)
        if shift is None:
            issues.append(
                SchedulingIssue(
                    kind=ErrorType.INVALID_CONFIGURATION,
                    message=f"Machine {machine.id} references unknown shift {machine.shift_id}",
                    machine_id=machine.id,
                )
            )
    if shift is None:
        shift = next((s for s in shifts if s.is_active), None)
    if shift is None:
        return Shift.default(), issues

    if not shift.working_days:
        logger.warning(
            "Shift has no working days, using default week",
            shift_id=shift.id,
            machine_id=machine.id,
        )
        issues.append(
            SchedulingIssue(
                kind=ErrorType.INVALID_CONFIGURATION,
                message=f"Shift {shift.id} has no working days; default week used",
                machine_id=machine.id,
            )
        )
        shift = shift.with_changes(working_days=DEFAULT_WORKING_DAYS)
    return shift, issues


def calendar_for_machine(
    machine: Machine,
    shift: Shift | None,
    holidays: HolidayCalendar | Iterable | None = None,
    search_limit_days: int | None = None,
) -> WorkingCalendar:
    """Build the working calendar of a machine under a shift."""
    working_days = shift.working_days if shift and shift.working_days else DEFAULT_WORKING_DAYS
    return WorkingCalendar(
        window=machine.shift_timing,
        holidays=HolidayCalendar.coerce(holidays),
        working_days=working_days,
        breaks=shift.unpaid_breaks if shift else (),
        search_limit_days=search_limit_days,
    )


def next_working_window(
    machine: Machine,
    shift: Shift | None,
    holidays: HolidayCalendar | Iterable | None,
    from_instant: datetime,
    duration_minutes: float,
) -> tuple[datetime, datetime]:
    """
    Start and end of ``duration_minutes`` of work on a machine.

    Raises:
        NoWorkingTimeError: If the calendar has no working time at all
    """
    calendar = calendar_for_machine(machine, shift, holidays)
    return calendar.next_working_window(from_instant, duration_minutes)
