"""
Schedule Item Entity

One process step of one order placed on one machine, together with its
actual execution times, overtime records and the history of user actions.
"""

from __future__ import annotations

from datetime import date, datetime, time

from pydantic import Field, model_validator

from ...shared.base import Entity, ValueObject
from ..value_objects.enums import OvertimeStatus, ScheduleItemStatus, SchedulingMode
from ..value_objects.timeslot import TimeSlot


class ActionRecord(ValueObject):
    """An entry in an item's append-only action history."""

    action: str
    timestamp: datetime
    actor: str = "system"


class OvertimeRecord(Entity):
    """Overtime planned or worked on behalf of a schedule item."""

    schedule_item_id: str
    shift_id: str | None = None
    work_date: date
    planned_overtime_hours: float = Field(gt=0)
    actual_overtime_hours: float | None = Field(default=None, ge=0)
    reason: str = ""
    status: OvertimeStatus = OvertimeStatus.PLANNED
    cost_multiplier: float = Field(default=1.5, ge=1)
    start_time: time | None = None
    end_time: time | None = None

    @property
    def hours(self) -> float:
        """Actual hours once recorded, else the planned hours."""
        if self.actual_overtime_hours is not None:
            return self.actual_overtime_hours
        return self.planned_overtime_hours

    @property
    def cost_hours(self) -> float:
        """Hours weighted by the cost multiplier."""
        return self.hours * self.cost_multiplier

    @property
    def counts_towards_cost(self) -> bool:
        return self.status != OvertimeStatus.REJECTED


class ScheduleItem(Entity):
    """
    Placement of one process step of one order.

    Items in progress, completed, or pinned in manual mode are held: the
    generator keeps them verbatim on regeneration.
    """

    po_id: str
    product_id: str
    machine_id: str
    process_step: int = Field(ge=1)
    quantity: int = Field(gt=0)
    allocated_time: float | None = Field(default=None, ge=0)
    start_date: datetime
    end_date: datetime
    work_segments: tuple[TimeSlot, ...] = ()
    actual_start_time: datetime | None = None
    actual_end_time: datetime | None = None
    status: ScheduleItemStatus = ScheduleItemStatus.SCHEDULED
    progress: float | None = Field(default=None, ge=0, le=100)
    scheduling_mode: SchedulingMode = SchedulingMode.AUTO
    overtime_records: tuple[OvertimeRecord, ...] = ()
    notes: str = ""
    action_history: tuple[ActionRecord, ...] = ()
    quality_score: float | None = Field(default=None, ge=0, le=100)

    @model_validator(mode="after")
    def _end_not_before_start(self) -> ScheduleItem:
        if self.end_date < self.start_date:
            raise ValueError("End date must not be before start date")
        return self

    @staticmethod
    def make_id(po_id: str, sequence: int) -> str:
        """Deterministic id so regeneration can match items across runs."""
        return f"{po_id}-step-{sequence}"

    @property
    def is_manual(self) -> bool:
        return self.scheduling_mode == SchedulingMode.MANUAL

    @property
    def is_held(self) -> bool:
        """Check if regeneration must keep this item as it is."""
        return self.status.is_held or self.is_manual

    @property
    def effective_start(self) -> datetime:
        return self.actual_start_time or self.start_date

    @property
    def effective_end(self) -> datetime:
        return self.actual_end_time or self.end_date

    @property
    def load_minutes(self) -> float:
        return self.allocated_time or 0.0

    def slots(self) -> tuple[TimeSlot, ...]:
        """Working segments, or the whole planned span when none were recorded."""
        if self.work_segments:
            return self.work_segments
        return (TimeSlot(start=self.start_date, end=self.end_date),)

    @property
    def planned_overtime_hours(self) -> float:
        return sum(
            record.planned_overtime_hours
            for record in self.overtime_records
            if record.counts_towards_cost
        )

    @property
    def overtime_hours(self) -> float:
        return sum(
            record.hours for record in self.overtime_records if record.counts_towards_cost
        )

    @property
    def overtime_cost_hours(self) -> float:
        return sum(
            record.cost_hours
            for record in self.overtime_records
            if record.counts_towards_cost
        )

    def record_action(
        self, action: str, timestamp: datetime, actor: str = "system", **changes
    ) -> ScheduleItem:
        """Copy of the item with ``changes`` applied and the action appended."""
        entry = ActionRecord(action=action, timestamp=timestamp, actor=actor)
        return self.with_changes(action_history=(*self.action_history, entry), **changes)
