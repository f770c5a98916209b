"""Entities for the scheduling domain."""

from .alert import Alert
from .machine import Machine
from .order import PurchaseOrder
from .product import ProcessDelay, ProcessStep, Product
from .schedule import ScheduleBook
from .schedule_item import ActionRecord, OvertimeRecord, ScheduleItem
from .shift import DEFAULT_WORKING_DAYS, BreakTime, Shift, ShiftTiming

__all__ = [
    "ActionRecord",
    "Alert",
    "BreakTime",
    "DEFAULT_WORKING_DAYS",
    "Machine",
    "OvertimeRecord",
    "ProcessDelay",
    "ProcessStep",
    "Product",
    "PurchaseOrder",
    "ScheduleBook",
    "ScheduleItem",
    "Shift",
    "ShiftTiming",
]
