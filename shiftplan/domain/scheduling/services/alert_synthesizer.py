"""
Alert Synthesizer

Scans orders, machines and schedule items for delivery risk, breakdowns,
capacity overload and poor quality, and raises alerts with the actions a host
can offer to remedy them.
"""

from collections.abc import Iterable, Sequence
from datetime import datetime

from ....core.config import settings
from ....core.observability import get_logger
from ..entities.alert import Alert
from ..entities.machine import Machine
from ..entities.order import PurchaseOrder
from ..entities.schedule_item import ScheduleItem
from ..value_objects.enums import (
    AlertSeverity,
    AlertType,
    MachineStatus,
    OrderStatus,
    ScheduleItemStatus,
    SuggestedAction,
)
from . import capacity_tracker
from .status_projector import auto_status, order_status

logger = get_logger(__name__)

# (minimum overload ratio, severity), checked from the top
OVERLOAD_SEVERITY = (
    (2.0, AlertSeverity.CRITICAL),
    (1.5, AlertSeverity.HIGH),
    (1.2, AlertSeverity.MEDIUM),
)
# (minimum days late, severity), checked from the top
LATENESS_SEVERITY = (
    (7, AlertSeverity.HIGH),
    (3, AlertSeverity.MEDIUM),
)
QUALITY_CRITICAL_MARGIN = 20.0


def _alert_id(alert_type: AlertType, entity_id: str) -> str:
    return f"{alert_type.value}-{entity_id}"


def _delivery_risk(
    order: PurchaseOrder, items: list[ScheduleItem], now: datetime
) -> Alert | None:
    if order.status in (OrderStatus.COMPLETED, OrderStatus.CANCELLED):
        return None

    own = [item for item in items if item.po_id == order.id]
    completion = max((item.effective_end for item in own), default=None)
    status = order_status(order, items, now)
    projected_late = completion is not None and completion.date() > order.delivery_date
    if status != OrderStatus.DELAYED and not projected_late:
        return None

    expected = max(now.date(), completion.date()) if completion else now.date()
    days_late = max(0, (expected - order.delivery_date).days)
    if order.deadline is not None and expected > order.deadline:
        severity = AlertSeverity.CRITICAL
    else:
        severity = next(
            (sev for days, sev in LATENESS_SEVERITY if days_late >= days),
            AlertSeverity.LOW,
        )

    return Alert(
        id=_alert_id(AlertType.DELIVERY_RISK, order.id),
        type=AlertType.DELIVERY_RISK,
        severity=severity,
        title=f"Order {order.display_name} at risk",
        message=(
            f"Order {order.display_name} is expected {days_late} day(s) after "
            f"its delivery date {order.delivery_date.isoformat()}"
        ),
        affected_entities=(order.id, *sorted({item.machine_id for item in own})),
        suggested_actions=(
            SuggestedAction.RESCHEDULE,
            SuggestedAction.OVERTIME,
            SuggestedAction.REDISTRIBUTE,
        ),
        created_at=now,
    )


def _machine_breakdown(
    machine: Machine, items: list[ScheduleItem], now: datetime
) -> Alert | None:
    if machine.status != MachineStatus.BREAKDOWN:
        return None

    queued = [
        item
        for item in items
        if item.machine_id == machine.id
        and auto_status(item, now) != ScheduleItemStatus.COMPLETED
    ]
    return Alert(
        id=_alert_id(AlertType.MACHINE_BREAKDOWN, machine.id),
        type=AlertType.MACHINE_BREAKDOWN,
        severity=AlertSeverity.CRITICAL if queued else AlertSeverity.HIGH,
        title=f"Machine {machine.name or machine.id} broken down",
        message=f"{len(queued)} schedule item(s) are waiting on machine {machine.name or machine.id}",
        affected_entities=(machine.id, *sorted({item.po_id for item in queued})),
        suggested_actions=(SuggestedAction.MAINTENANCE, SuggestedAction.REDISTRIBUTE),
        created_at=now,
    )


def _capacity_overload(
    machine: Machine, items: list[ScheduleItem], now: datetime
) -> Alert | None:
    ratio = capacity_tracker.peak_load_ratio(machine, items)
    if ratio <= 1.0:
        return None

    loads = capacity_tracker.daily_loads(machine.id, items)
    peak_day = max(loads, key=lambda day: loads[day])
    severity = next(
        (sev for threshold, sev in OVERLOAD_SEVERITY if ratio >= threshold),
        AlertSeverity.LOW,
    )
    return Alert(
        id=_alert_id(AlertType.CAPACITY_OVERLOAD, machine.id),
        type=AlertType.CAPACITY_OVERLOAD,
        severity=severity,
        title=f"Machine {machine.name or machine.id} over capacity",
        message=(
            f"Load on {peak_day.isoformat()} is {ratio * 100:.0f}% of the "
            f"{capacity_tracker.capacity(machine):.0f} minute daily capacity"
        ),
        affected_entities=(machine.id,),
        suggested_actions=(SuggestedAction.REDISTRIBUTE, SuggestedAction.OVERTIME),
        created_at=now,
    )


def _quality_issue(item: ScheduleItem, threshold: float, now: datetime) -> Alert | None:
    if item.quality_score is None or item.quality_score >= threshold:
        return None

    severity = (
        AlertSeverity.HIGH
        if item.quality_score < threshold - QUALITY_CRITICAL_MARGIN
        else AlertSeverity.MEDIUM
    )
    return Alert(
        id=_alert_id(AlertType.QUALITY_ISSUE, item.id),
        type=AlertType.QUALITY_ISSUE,
        severity=severity,
        title=f"Quality below target on {item.id}",
        message=f"Quality score {item.quality_score:g} is below the threshold of {threshold:g}",
        affected_entities=(item.id, item.po_id, item.machine_id),
        suggested_actions=(SuggestedAction.INSPECT_QUALITY,),
        created_at=now,
    )


def generate_alerts(
    orders: Sequence[PurchaseOrder],
    machines: Sequence[Machine],
    items: Iterable[ScheduleItem],
    now: datetime,
    quality_threshold: float | None = None,
) -> list[Alert]:
    """
    Raise alerts for the current state of production.

    Args:
        orders: Orders to check for delivery risk
        machines: Machines to check for breakdowns and overload
        items: Current schedule items
        now: Reference instant
        quality_threshold: Quality score below which an item is flagged

    Returns:
        Alerts sorted by severity (most severe first), then id
    """
    items = list(items)
    threshold = (
        settings.QUALITY_ALERT_THRESHOLD if quality_threshold is None else quality_threshold
    )

    candidates = [_delivery_risk(order, items, now) for order in orders]
    for machine in machines:
        candidates.append(_machine_breakdown(machine, items, now))
        candidates.append(_capacity_overload(machine, items, now))
    candidates.extend(_quality_issue(item, threshold, now) for item in items)

    alerts = sorted((a for a in candidates if a is not None), key=lambda a: a.sort_key)
    logger.debug(
        "Alerts generated",
        alert_count=len(alerts),
        critical_count=sum(1 for a in alerts if a.severity == AlertSeverity.CRITICAL),
    )
    return alerts
