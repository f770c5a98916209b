"""Value objects for the scheduling domain."""

from .enums import (
    AlertSeverity,
    AlertType,
    MachineStatus,
    OrderStatus,
    OvertimeStatus,
    Priority,
    ProcessDelayType,
    ScheduleItemStatus,
    SchedulingMode,
    SuggestedAction,
    Weekday,
)
from .holiday_calendar import HolidayCalendar, format_holiday_entry, parse_holiday_entry
from .issues import SchedulingIssue
from .shift_window import (
    CustomWindow,
    FixedWindow,
    ShiftWindow,
    parse_shift_timing,
    working_hours_for,
)
from .timeslot import TimeSlot

__all__ = [
    # Enums
    "AlertSeverity",
    "AlertType",
    "MachineStatus",
    "OrderStatus",
    "OvertimeStatus",
    "Priority",
    "ProcessDelayType",
    "ScheduleItemStatus",
    "SchedulingMode",
    "SuggestedAction",
    "Weekday",
    # Calendar
    "HolidayCalendar",
    "format_holiday_entry",
    "parse_holiday_entry",
    # Shift windows
    "CustomWindow",
    "FixedWindow",
    "ShiftWindow",
    "parse_shift_timing",
    "working_hours_for",
    # Other
    "SchedulingIssue",
    "TimeSlot",
]
