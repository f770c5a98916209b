"""
Tests for dashboard and overtime read models.
"""

from datetime import date, timedelta

from shiftplan.domain.scheduling.entities.schedule_item import OvertimeRecord
from shiftplan.domain.scheduling.read_models.dashboard import (
    dashboard_metrics,
    overtime_summary,
)
from shiftplan.domain.scheduling.value_objects.enums import (
    OrderStatus,
    OvertimeStatus,
    ScheduleItemStatus,
)

from .fixtures import MONDAY, MachineFactory, OrderFactory, ScheduleItemFactory, at

NOW = at(MONDAY, 12)


def overtime(item_id: str, hours: float, multiplier: float = 1.5, **kwargs) -> OvertimeRecord:
    return OvertimeRecord(
        id=f"{item_id}-ot-{hours}",
        schedule_item_id=item_id,
        work_date=MONDAY,
        planned_overtime_hours=hours,
        cost_multiplier=multiplier,
        **kwargs,
    )


class TestDashboardMetrics:
    def test_order_counts(self):
        orders = [
            OrderFactory.create("PO1", delivery_date=date(2024, 1, 5)),
            OrderFactory.create("PO2", delivery_date=MONDAY),
            OrderFactory.create("PO3", status=OrderStatus.COMPLETED),
            OrderFactory.create("PO4", status=OrderStatus.CANCELLED),
        ]
        items = [
            ScheduleItemFactory.create("PO1", start=at(MONDAY, 9), minutes=240),
            ScheduleItemFactory.create(
                "PO2", start=at(MONDAY, 9), minutes=120, status=ScheduleItemStatus.IN_PROGRESS
            ),
        ]

        metrics = dashboard_metrics(orders, items, [MachineFactory.create()], NOW)

        assert metrics.total_orders == 3
        assert metrics.delayed_orders == 1
        assert metrics.completed_orders == 1
        assert metrics.in_progress_orders == 1
        assert metrics.on_time_orders == 2
        assert metrics.on_time_rate == 66.7

    def test_utilization(self):
        machines = MachineFactory.create_line(2)
        items = [ScheduleItemFactory.create(start=at(MONDAY, 9), minutes=240)]

        metrics = dashboard_metrics([], items, machines, NOW)

        assert metrics.machine_utilization == {"M1": 50.0, "M2": 0.0}
        assert metrics.machine_efficiency == {"M1": None, "M2": None}
        assert metrics.average_utilization == 25.0
        assert metrics.overloaded_machines == []
        assert metrics.on_time_rate == 0.0

    def test_live_efficiency_per_machine(self):
        items = [
            ScheduleItemFactory.create(
                start=at(MONDAY, 9),
                minutes=90,
                status=ScheduleItemStatus.COMPLETED,
                actual_start_time=at(MONDAY, 9),
                actual_end_time=at(MONDAY, 11),
            )
        ]

        metrics = dashboard_metrics([], items, MachineFactory.create_line(2), NOW)

        assert metrics.machine_efficiency == {"M1": 75.0, "M2": None}

    def test_overloaded_machines_listed(self):
        items = [
            ScheduleItemFactory.create("PO1", start=at(MONDAY, 9), minutes=400),
            ScheduleItemFactory.create("PO2", start=at(MONDAY, 9), minutes=400),
        ]

        metrics = dashboard_metrics([], items, [MachineFactory.create()], NOW)

        assert metrics.overloaded_machines == ["M1"]
        assert metrics.average_utilization == 100.0


class TestOvertimeSummary:
    def test_totals(self):
        items = [
            ScheduleItemFactory.create(
                "PO1",
                overtime_records=(
                    overtime("PO1-step-1", 2),
                    overtime("PO1-step-1", 1, status=OvertimeStatus.REJECTED),
                ),
            ),
            ScheduleItemFactory.create(
                "PO2",
                overtime_records=(
                    overtime("PO2-step-1", 3, multiplier=1.75, actual_overtime_hours=4),
                ),
            ),
            ScheduleItemFactory.create("PO3"),
        ]

        summary = overtime_summary(items)

        assert summary.total_hours == 6
        assert summary.record_count == 2
        assert summary.cost_hours == 10.0
        assert summary.items_with_overtime == 2
        assert summary.average_hours_per_item == 3.0

    def test_no_overtime(self):
        summary = overtime_summary([ScheduleItemFactory.create(start=at(MONDAY) + timedelta(days=1))])

        assert summary.total_hours == 0
        assert summary.average_hours_per_item == 0.0
