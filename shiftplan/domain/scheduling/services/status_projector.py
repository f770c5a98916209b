"""
Status and Progress Projector

Derives the live status and progress of schedule items, and of whole orders,
from the clock. Pure functions; stored items are never changed.
"""

from collections.abc import Iterable
from datetime import datetime

from ..entities.order import PurchaseOrder
from ..entities.schedule_item import ScheduleItem
from ..value_objects.enums import OrderStatus, ScheduleItemStatus

# stored states that mean the item was running and has not been reported done
DELAY_EVIDENCE = frozenset(
    {
        ScheduleItemStatus.IN_PROGRESS,
        ScheduleItemStatus.PAUSED,
        ScheduleItemStatus.DELAYED,
    }
)


def auto_status(item: ScheduleItem, now: datetime) -> ScheduleItemStatus:
    """
    Status of an item at ``now``.

    A manually managed item keeps its stored status, except that one still
    ``scheduled`` after its end is delayed. Otherwise the status follows the
    clock, preferring actual times over planned ones; a paused item stays
    paused until its planned end.
    """
    if item.is_manual:
        if item.status == ScheduleItemStatus.SCHEDULED and now >= item.effective_end:
            return ScheduleItemStatus.DELAYED
        return item.status

    if item.actual_end_time is not None or item.status == ScheduleItemStatus.COMPLETED:
        return ScheduleItemStatus.COMPLETED
    if now < item.effective_start:
        return ScheduleItemStatus.SCHEDULED
    if now < item.effective_end:
        if item.status == ScheduleItemStatus.PAUSED:
            return ScheduleItemStatus.PAUSED
        return ScheduleItemStatus.IN_PROGRESS
    if item.status in DELAY_EVIDENCE:
        return ScheduleItemStatus.DELAYED
    return ScheduleItemStatus.COMPLETED


def progress(item: ScheduleItem, now: datetime) -> float:
    """
    Percent complete at ``now``, rounded to one decimal.

    Completed items report 100 and a stored non-zero progress wins; otherwise
    progress is interpolated between the effective start and end.
    """
    if item.status == ScheduleItemStatus.COMPLETED or item.actual_end_time is not None:
        return 100.0
    if item.progress:
        return round(item.progress, 1)

    start, end = item.effective_start, item.effective_end
    if end <= start:
        return 100.0 if now >= end else 0.0
    elapsed = (now - start).total_seconds() / (end - start).total_seconds() * 100
    return round(min(100.0, max(0.0, elapsed)), 1)


def project(item: ScheduleItem, now: datetime) -> ScheduleItem:
    """Copy of the item with status and progress projected to ``now``."""
    return item.with_changes(status=auto_status(item, now), progress=progress(item, now))


def order_status(
    order: PurchaseOrder, items: Iterable[ScheduleItem], now: datetime
) -> OrderStatus:
    """
    Status of an order from the projected status of its items.

    Completed and cancelled orders keep their status. An order not finished
    after its delivery date is delayed.
    """
    if order.status in (OrderStatus.COMPLETED, OrderStatus.CANCELLED):
        return order.status

    statuses = [auto_status(item, now) for item in items if item.po_id == order.id]
    if not statuses:
        return order.status

    if all(status == ScheduleItemStatus.COMPLETED for status in statuses):
        return OrderStatus.COMPLETED
    if ScheduleItemStatus.DELAYED in statuses or now.date() > order.delivery_date:
        return OrderStatus.DELAYED
    if any(status != ScheduleItemStatus.SCHEDULED for status in statuses):
        return OrderStatus.IN_PROGRESS
    return OrderStatus.PENDING


def order_progress(order_id: str, items: Iterable[ScheduleItem], now: datetime) -> float:
    """Progress of an order, weighted by each item's allocated time."""
    own = [item for item in items if item.po_id == order_id]
    if not own:
        return 0.0

    total = sum(item.load_minutes for item in own)
    if total <= 0:
        return round(sum(progress(item, now) for item in own) / len(own), 1)
    weighted = sum(progress(item, now) * item.load_minutes for item in own)
    return round(weighted / total, 1)
