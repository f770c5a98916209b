"""Domain services for the scheduling domain."""

from . import capacity_tracker
from .alert_synthesizer import generate_alerts
from .conflict_detector import ScheduleConflict, accept_suggested_date, detect_conflicts
from .feasibility_checker import (
    FeasibilityResult,
    check_feasibility,
    next_feasible_dates,
)
from .item_actions import (
    RedistributionResult,
    change_status,
    redistribute,
    request_overtime,
    toggle_scheduling_mode,
)
from .overtime_policy import (
    OvertimeDecision,
    OvertimePolicy,
    evaluate_overtime,
    is_overtime_allowed,
    multiplier_for,
)
from .schedule_generator import (
    ScheduleGenerator,
    SchedulePlanner,
    ScheduleResult,
    allocated_minutes,
    generate,
)
from .status_projector import (
    auto_status,
    order_progress,
    order_status,
    progress,
    project,
)
from .working_calendar import (
    WorkingCalendar,
    calendar_for_machine,
    next_working_window,
    resolve_shift,
)

__all__ = [
    "capacity_tracker",
    # Calendar
    "WorkingCalendar",
    "calendar_for_machine",
    "next_working_window",
    "resolve_shift",
    # Generation
    "ScheduleGenerator",
    "SchedulePlanner",
    "ScheduleResult",
    "allocated_minutes",
    "generate",
    # Conflicts and feasibility
    "ScheduleConflict",
    "accept_suggested_date",
    "detect_conflicts",
    "FeasibilityResult",
    "check_feasibility",
    "next_feasible_dates",
    # Overtime
    "OvertimeDecision",
    "OvertimePolicy",
    "evaluate_overtime",
    "is_overtime_allowed",
    "multiplier_for",
    # Status
    "auto_status",
    "order_progress",
    "order_status",
    "progress",
    "project",
    # Alerts and actions
    "generate_alerts",
    "RedistributionResult",
    "change_status",
    "redistribute",
    "request_overtime",
    "toggle_scheduling_mode",
]
