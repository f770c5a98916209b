"""
Item Actions

Explicit user edits to schedule items: status changes, switching between
automatic and manual scheduling, overtime requests and moving work to another
machine. Every action returns new items and is recorded in the item's action
history.
"""

import math
from collections.abc import Sequence
from datetime import datetime, timedelta

from pydantic import Field

from ....core.observability import get_logger
from ...shared.base import ValueObject
from ...shared.exceptions import ScheduleItemNotFoundError
from ..entities.machine import Machine
from ..entities.schedule_item import OvertimeRecord, ScheduleItem
from ..entities.shift import Shift
from ..value_objects.enums import OvertimeStatus, ScheduleItemStatus, SchedulingMode
from ..value_objects.holiday_calendar import HolidayCalendar
from . import capacity_tracker
from .overtime_policy import OvertimeDecision, OvertimePolicy, evaluate_overtime
from .status_projector import progress

logger = get_logger(__name__)


class RedistributionResult(ValueObject):
    """Outcome of moving items to another machine."""

    success: bool
    reason: str | None = None
    items: list[ScheduleItem] = Field(default_factory=list)
    moved_item_ids: list[str] = Field(default_factory=list)


def change_status(
    item: ScheduleItem,
    status: ScheduleItemStatus,
    now: datetime,
    actor: str = "system",
) -> ScheduleItem:
    """
    Set an item's status the way an operator reports it.

    Starting records the actual start; completing records the actual end and
    full progress; pausing or delaying freezes the current progress; going
    back to scheduled clears the recorded execution.
    """
    changes: dict = {"status": status}
    if status == ScheduleItemStatus.IN_PROGRESS:
        changes["actual_start_time"] = item.actual_start_time or now
    elif status == ScheduleItemStatus.COMPLETED:
        changes["actual_start_time"] = item.actual_start_time or min(item.start_date, now)
        changes["actual_end_time"] = item.actual_end_time or now
        changes["progress"] = 100.0
    elif status in (ScheduleItemStatus.PAUSED, ScheduleItemStatus.DELAYED):
        changes["progress"] = progress(item, now) or None
    elif status == ScheduleItemStatus.SCHEDULED:
        changes.update(actual_start_time=None, actual_end_time=None, progress=None)

    logger.info(
        "Item status changed",
        item_id=item.id,
        old_status=item.status.value,
        new_status=status.value,
        actor=actor,
    )
    return item.record_action(
        f"status:{item.status.value}->{status.value}", now, actor, **changes
    )


def toggle_scheduling_mode(
    item: ScheduleItem,
    mode: SchedulingMode | None,
    now: datetime,
    actor: str = "system",
) -> ScheduleItem:
    """Pin an item to manual scheduling or hand it back to the generator."""
    if mode is None:
        mode = SchedulingMode.AUTO if item.is_manual else SchedulingMode.MANUAL
    if mode == item.scheduling_mode:
        return item
    return item.record_action(f"mode:{mode.value}", now, actor, scheduling_mode=mode)


def request_overtime(
    item: ScheduleItem,
    hours: float,
    reason: str,
    shift: Shift | None,
    now: datetime,
    policy: OvertimePolicy | None = None,
    holidays: HolidayCalendar | None = None,
    actor: str = "system",
) -> tuple[ScheduleItem, OvertimeDecision]:
    """
    Plan overtime right after an item's end.

    Overtime already planned on the same date counts towards the shift's
    maximum. A refused request returns the item unchanged with the reason.
    """
    work_date = item.end_date.date()
    already = sum(
        record.hours
        for record in item.overtime_records
        if record.work_date == work_date and record.counts_towards_cost
    )
    holiday = holidays is not None and holidays.is_holiday(work_date)
    decision = evaluate_overtime(hours, shift, policy, holiday=holiday)
    if decision.allowed and already + hours > decision.max_hours:
        decision = OvertimeDecision(
            allowed=False,
            reason=(
                f"{already:g}h already planned on {work_date.isoformat()}; "
                f"{hours:g}h more exceeds the maximum of {decision.max_hours:g}h"
            ),
            max_hours=decision.max_hours,
        )

    if not decision.allowed:
        logger.info("Overtime refused", item_id=item.id, hours=hours, reason=decision.reason)
        return item, decision

    record = OvertimeRecord(
        id=f"{item.id}-ot-{len(item.overtime_records) + 1}",
        schedule_item_id=item.id,
        shift_id=shift.id if shift else None,
        work_date=work_date,
        planned_overtime_hours=hours,
        reason=reason,
        status=OvertimeStatus.PLANNED,
        cost_multiplier=decision.cost_multiplier,
        start_time=item.end_date.time(),
        end_time=(item.end_date + timedelta(hours=hours)).time(),
    )
    updated = item.record_action(
        f"overtime:{hours:g}h",
        now,
        actor,
        overtime_records=(*item.overtime_records, record),
    )
    return updated, decision


def redistribute(
    items: Sequence[ScheduleItem],
    item_ids: Sequence[str],
    target_machine: Machine,
    machines: Sequence[Machine],
    now: datetime | None = None,
    actor: str = "system",
) -> RedistributionResult:
    """
    Move items to another machine.

    The move is refused when the target is not available for work, when an
    item is already running or finished, or when the target would be
    overloaded. Allocated time is rescaled to the target's efficiency.

    Raises:
        ScheduleItemNotFoundError: If an id does not match any item
    """
    now = now or datetime.now()
    by_id = {item.id: item for item in items}
    machines_by_id = {machine.id: machine for machine in machines}
    for item_id in item_ids:
        if item_id not in by_id:
            raise ScheduleItemNotFoundError(item_id)

    def refuse(reason: str) -> RedistributionResult:
        logger.info("Redistribution refused", target_machine=target_machine.id, reason=reason)
        return RedistributionResult(success=False, reason=reason, items=list(items))

    if not target_machine.is_available_for_work:
        return refuse(
            f"Machine {target_machine.id} is not available ({target_machine.status.value})"
        )
    held = [item_id for item_id in item_ids if by_id[item_id].status.is_held]
    if held:
        return refuse(f"Items already under way or finished cannot move: {', '.join(held)}")

    moved_ids = set(item_ids)
    updated = []
    for item in items:
        if item.id not in moved_ids or item.machine_id == target_machine.id:
            updated.append(item)
            continue
        source = machines_by_id.get(item.machine_id)
        allocated = item.allocated_time
        if allocated is not None and source is not None:
            allocated = math.ceil(
                round(allocated * source.efficiency / target_machine.efficiency, 6)
            )
        updated.append(
            item.record_action(
                f"redistribute:{item.machine_id}->{target_machine.id}",
                now,
                actor,
                machine_id=target_machine.id,
                allocated_time=allocated,
            )
        )

    if capacity_tracker.is_overloaded(target_machine, updated):
        return refuse(f"Machine {target_machine.id} would be over capacity")

    logger.info(
        "Items redistributed",
        target_machine=target_machine.id,
        item_ids=sorted(moved_ids),
    )
    return RedistributionResult(
        success=True, items=updated, moved_item_ids=sorted(moved_ids)
    )
