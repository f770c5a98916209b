"""
Conflict Detector

Compares each order's projected completion with the date promised to the
customer and explains which order is holding up the late one.
"""

from collections.abc import Iterable, Mapping
from datetime import date, datetime

from pydantic import computed_field

from ....core.observability import get_logger
from ...shared.base import ValueObject
from ...shared.exceptions import ErrorType
from ..entities.order import PurchaseOrder
from ..entities.schedule import ScheduleBook
from ..entities.schedule_item import ScheduleItem

logger = get_logger(__name__)


class ScheduleConflict(ValueObject):
    """A broken delivery promise and the order blocking it."""

    new_order: PurchaseOrder
    conflicting_order: PurchaseOrder
    machine_id: str
    committed_date: date
    computed_completion: datetime
    suggested_end_date: date
    user_message: str

    @computed_field  # type: ignore[prop-decorator]
    @property
    def kind(self) -> ErrorType:
        return ErrorType.CONFLICT

    @property
    def is_self_inflicted(self) -> bool:
        """True when the order is late on its own workload alone."""
        return self.conflicting_order.id == self.new_order.id

    @property
    def days_late(self) -> int:
        return (self.suggested_end_date - self.committed_date).days


def detect_conflicts(
    orders: Iterable[PurchaseOrder],
    items: Iterable[ScheduleItem] | ScheduleBook,
    committed_dates: Mapping[str, date] | None = None,
) -> list[ScheduleConflict]:
    """
    Find orders whose final step completes after their committed date.

    Args:
        orders: Orders to check (completed and cancelled orders are skipped)
        items: Schedule items of all orders, or a schedule book holding them
        committed_dates: Previously promised dates per order id; an order
            without one is held to its delivery date

    Returns:
        Conflicts sorted by committed date, then order id
    """
    committed_dates = committed_dates or {}
    book = items if isinstance(items, ScheduleBook) else ScheduleBook(items)
    orders_by_id = {order.id: order for order in orders}

    conflicts = []
    for order in orders_by_id.values():
        order_items = book.for_order(order.id)
        if not order.is_schedulable or not order_items:
            continue

        final = max(order_items, key=lambda i: (i.effective_end, i.process_step))
        completion = final.effective_end
        committed = committed_dates.get(order.id, order.delivery_date)
        if completion.date() <= committed:
            continue

        blocker = _blocking_order(final, book.for_machine(final.machine_id), orders_by_id) or order
        conflicts.append(
            ScheduleConflict(
                new_order=order,
                conflicting_order=blocker,
                machine_id=final.machine_id,
                committed_date=committed,
                computed_completion=completion,
                suggested_end_date=completion.date(),
                user_message=_message(order, blocker, final.machine_id, committed, completion),
            )
        )

    conflicts.sort(key=lambda c: (c.committed_date, c.new_order.id))
    if conflicts:
        logger.info(
            "Delivery conflicts detected",
            conflict_count=len(conflicts),
            order_ids=[c.new_order.id for c in conflicts],
        )
    return conflicts


def _blocking_order(
    late_item: ScheduleItem,
    machine_items: list[ScheduleItem],
    orders_by_id: Mapping[str, PurchaseOrder],
) -> PurchaseOrder | None:
    """Owner of the item running just before ``late_item`` on its machine."""
    index = next(i for i, item in enumerate(machine_items) if item.id == late_item.id)
    for previous in reversed(machine_items[:index]):
        if previous.po_id != late_item.po_id:
            return orders_by_id.get(previous.po_id)
    return None


def _message(
    order: PurchaseOrder,
    blocker: PurchaseOrder,
    machine_id: str,
    committed: date,
    completion: datetime,
) -> str:
    suggested = completion.date().isoformat()
    if blocker.id == order.id:
        return (
            f"Order {order.display_name} needs machine {machine_id} until "
            f"{completion:%Y-%m-%d %H:%M} and cannot meet {committed.isoformat()}. "
            f"Earliest possible delivery is {suggested}."
        )
    return (
        f"Order {order.display_name} cannot meet {committed.isoformat()}: machine "
        f"{machine_id} is busy with order {blocker.display_name}. "
        f"Earliest possible delivery is {suggested}."
    )


def accept_suggested_date(
    order: PurchaseOrder, conflict: ScheduleConflict
) -> PurchaseOrder:
    """
    Resolve a conflict by moving the order's promised date.

    Raises:
        ValueError: If the conflict belongs to another order
    """
    if conflict.new_order.id != order.id:
        raise ValueError(
            f"Conflict for order {conflict.new_order.id} cannot resolve order {order.id}"
        )
    return order.with_delivery_date(conflict.suggested_end_date)
