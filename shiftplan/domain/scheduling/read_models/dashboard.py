"""
Dashboard read model.

Order, utilization and overtime figures computed from an in-memory snapshot
of orders, schedule items and machines.
"""

from collections.abc import Iterable, Sequence
from datetime import datetime

from pydantic import BaseModel, Field

from ..entities.machine import Machine
from ..entities.order import PurchaseOrder
from ..entities.schedule_item import ScheduleItem
from ..services import capacity_tracker
from ..services.status_projector import order_status
from ..value_objects.enums import OrderStatus


class DashboardMetrics(BaseModel):
    """Headline production figures."""

    total_orders: int = Field(ge=0)
    on_time_orders: int = Field(ge=0)
    delayed_orders: int = Field(ge=0)
    completed_orders: int = Field(ge=0)
    in_progress_orders: int = Field(ge=0, default=0)
    average_utilization: float = Field(ge=0.0, le=100.0)
    machine_utilization: dict[str, float] = Field(default_factory=dict)
    machine_efficiency: dict[str, float | None] = Field(default_factory=dict)
    overloaded_machines: list[str] = Field(default_factory=list)

    @property
    def on_time_rate(self) -> float:
        """Share of orders on time, as a percentage."""
        if self.total_orders <= 0:
            return 0.0
        return round(self.on_time_orders / self.total_orders * 100, 1)


class OvertimeSummary(BaseModel):
    """Overtime totals across schedule items."""

    total_hours: float = Field(ge=0.0)
    record_count: int = Field(ge=0)
    cost_hours: float = Field(ge=0.0)
    items_with_overtime: int = Field(ge=0)
    average_hours_per_item: float = Field(ge=0.0)


def dashboard_metrics(
    orders: Sequence[PurchaseOrder],
    items: Iterable[ScheduleItem],
    machines: Sequence[Machine],
    now: datetime,
) -> DashboardMetrics:
    """
    Compute dashboard figures.

    An order is on time when it is not delayed at ``now`` and its last item
    ends on or before its delivery date. Cancelled orders are not counted.
    """
    items = list(items)
    counted = [order for order in orders if order.status != OrderStatus.CANCELLED]

    on_time = delayed = completed = in_progress = 0
    for order in counted:
        status = order_status(order, items, now)
        if status == OrderStatus.DELAYED:
            delayed += 1
            continue
        if status == OrderStatus.COMPLETED:
            completed += 1
        elif status == OrderStatus.IN_PROGRESS:
            in_progress += 1

        ends = [item.effective_end for item in items if item.po_id == order.id]
        if not ends or max(ends).date() <= order.delivery_date:
            on_time += 1

    utilization = {
        machine.id: capacity_tracker.utilization(machine, items) for machine in machines
    }
    average = round(sum(utilization.values()) / len(utilization), 1) if utilization else 0.0

    return DashboardMetrics(
        total_orders=len(counted),
        on_time_orders=on_time,
        delayed_orders=delayed,
        completed_orders=completed,
        in_progress_orders=in_progress,
        average_utilization=average,
        machine_utilization=utilization,
        machine_efficiency={
            machine.id: capacity_tracker.machine_efficiency(machine.id, items)
            for machine in machines
        },
        overloaded_machines=[
            machine.id
            for machine in machines
            if capacity_tracker.is_overloaded(machine, items)
        ],
    )


def overtime_summary(items: Iterable[ScheduleItem]) -> OvertimeSummary:
    """Total overtime hours, records and weighted cost across items."""
    items = list(items)
    with_overtime = [item for item in items if item.overtime_hours > 0]
    total_hours = sum(item.overtime_hours for item in with_overtime)
    return OvertimeSummary(
        total_hours=round(total_hours, 2),
        record_count=sum(
            1
            for item in items
            for record in item.overtime_records
            if record.counts_towards_cost
        ),
        cost_hours=round(sum(item.overtime_cost_hours for item in with_overtime), 2),
        items_with_overtime=len(with_overtime),
        average_hours_per_item=(
            round(total_hours / len(with_overtime), 2) if with_overtime else 0.0
        ),
    )
