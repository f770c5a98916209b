"""
Test fixtures and factories for scheduling domain entities.

Provides reusable machines, products, orders, shifts and schedule items, both
as pytest fixtures and as configurable factory functions for scenarios that
need several variants.

Reference dates: 2024-01-01 is a Monday, 2024-01-06 a Saturday and
2024-01-07 a Sunday.
"""

from datetime import date, datetime, time, timedelta

import pytest

from shiftplan.domain.scheduling.entities.machine import Machine
from shiftplan.domain.scheduling.entities.order import PurchaseOrder
from shiftplan.domain.scheduling.entities.product import (
    ProcessDelay,
    ProcessStep,
    Product,
)
from shiftplan.domain.scheduling.entities.schedule_item import ScheduleItem
from shiftplan.domain.scheduling.entities.shift import BreakTime, Shift, ShiftTiming
from shiftplan.domain.scheduling.value_objects.enums import (
    MachineStatus,
    OrderStatus,
    Priority,
    ProcessDelayType,
    ScheduleItemStatus,
    SchedulingMode,
    Weekday,
)
from shiftplan.domain.scheduling.value_objects.holiday_calendar import HolidayCalendar

MONDAY = date(2024, 1, 1)
SATURDAY = date(2024, 1, 6)
SUNDAY = date(2024, 1, 7)


def at(day: date, hour: int = 9, minute: int = 0) -> datetime:
    """Datetime on ``day`` at the given clock time."""
    return datetime.combine(day, time(hour, minute))


class MachineFactory:
    """Factory for creating test machines."""

    @staticmethod
    def create(
        machine_id: str = "M1",
        shift_timing: str = "09:00-17:00",
        status: MachineStatus = MachineStatus.ACTIVE,
        efficiency: float = 100.0,
        **kwargs,
    ) -> Machine:
        return Machine(
            id=machine_id,
            name=kwargs.pop("name", f"Machine {machine_id}"),
            shift_timing=shift_timing,
            status=status,
            efficiency=efficiency,
            **kwargs,
        )

    @staticmethod
    def create_line(count: int = 3, **kwargs) -> list[Machine]:
        """Create machines M1..Mn."""
        return [MachineFactory.create(f"M{i}", **kwargs) for i in range(1, count + 1)]


class ProductFactory:
    """Factory for creating test products."""

    @staticmethod
    def step(
        sequence: int = 1,
        machine_id: str = "M1",
        cycle_time: float = 10,
        setup_time: float = 0,
        preferred: tuple[str, ...] = (),
        delay: ProcessDelayType | None = None,
        gap_minutes: float = 0,
    ) -> ProcessStep:
        return ProcessStep(
            sequence=sequence,
            name=f"Step {sequence}",
            machine_id=machine_id,
            preferred_machines=preferred,
            cycle_time_per_part=cycle_time,
            setup_time=setup_time,
            next_process_delay=(
                ProcessDelay(type=delay, gap_minutes=gap_minutes) if delay else None
            ),
        )

    @staticmethod
    def create(product_id: str = "P1", steps: list[ProcessStep] | None = None) -> Product:
        return Product(
            id=product_id,
            name=f"Product {product_id}",
            process_flow=steps if steps is not None else [ProductFactory.step()],
        )

    @staticmethod
    def single_step(
        product_id: str = "P1", machine_id: str = "M1", cycle_time: float = 10, **kwargs
    ) -> Product:
        return ProductFactory.create(
            product_id,
            [ProductFactory.step(1, machine_id, cycle_time=cycle_time, **kwargs)],
        )


class OrderFactory:
    """Factory for creating test purchase orders."""

    @staticmethod
    def create(
        order_id: str = "PO1",
        product_id: str = "P1",
        quantity: int = 50,
        delivery_date: date = date(2024, 1, 31),
        priority: Priority = Priority.MEDIUM,
        status: OrderStatus = OrderStatus.PENDING,
        **kwargs,
    ) -> PurchaseOrder:
        return PurchaseOrder(
            id=order_id,
            order_number=kwargs.pop("order_number", f"SO-{order_id}"),
            product_id=product_id,
            quantity=quantity,
            delivery_date=delivery_date,
            priority=priority,
            status=status,
            **kwargs,
        )


class ShiftFactory:
    """Factory for creating test shifts."""

    @staticmethod
    def create(
        shift_id: str = "S1",
        working_days: frozenset[Weekday] | None = None,
        overtime_allowed: bool = True,
        max_overtime_hours: float | None = None,
        breaks: tuple[BreakTime, ...] = (),
        is_active: bool = True,
    ) -> Shift:
        kwargs = {} if working_days is None else {"working_days": working_days}
        return Shift(
            id=shift_id,
            name=f"Shift {shift_id}",
            timing=ShiftTiming(
                overtime_allowed=overtime_allowed,
                max_overtime_hours=max_overtime_hours,
            ),
            break_times=breaks,
            is_active=is_active,
            **kwargs,
        )

    @staticmethod
    def lunch(start: time = time(12, 0), end: time = time(12, 30), paid: bool = False) -> BreakTime:
        return BreakTime(id="lunch", name="Lunch", start=start, end=end, is_paid=paid)


class ScheduleItemFactory:
    """Factory for creating test schedule items."""

    @staticmethod
    def create(
        po_id: str = "PO1",
        process_step: int = 1,
        machine_id: str = "M1",
        start: datetime | None = None,
        minutes: float = 120,
        status: ScheduleItemStatus = ScheduleItemStatus.SCHEDULED,
        mode: SchedulingMode = SchedulingMode.AUTO,
        **kwargs,
    ) -> ScheduleItem:
        start = start or at(MONDAY)
        return ScheduleItem(
            id=ScheduleItem.make_id(po_id, process_step),
            po_id=po_id,
            product_id=kwargs.pop("product_id", "P1"),
            machine_id=machine_id,
            process_step=process_step,
            quantity=kwargs.pop("quantity", 10),
            allocated_time=kwargs.pop("allocated_time", minutes),
            start_date=start,
            end_date=kwargs.pop("end", start + timedelta(minutes=minutes)),
            status=status,
            scheduling_mode=mode,
            **kwargs,
        )


@pytest.fixture
def machine() -> Machine:
    """Day-shift machine 09:00-17:00."""
    return MachineFactory.create()


@pytest.fixture
def night_machine() -> Machine:
    """Overnight machine 22:00-06:00."""
    return MachineFactory.create("N1", shift_timing="22:00-06:00")


@pytest.fixture
def product() -> Product:
    """Single step, 10 minutes per part on M1."""
    return ProductFactory.single_step()


@pytest.fixture
def order() -> PurchaseOrder:
    return OrderFactory.create()


@pytest.fixture
def shift() -> Shift:
    return ShiftFactory.create()


@pytest.fixture
def no_holidays() -> HolidayCalendar:
    return HolidayCalendar()
