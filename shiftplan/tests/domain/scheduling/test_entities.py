"""
Tests for scheduling entities and the schedule book.
"""

from datetime import date, time, timedelta

import pytest
from pydantic import ValidationError

from shiftplan.domain.scheduling.entities import (
    Machine,
    Product,
    ScheduleBook,
    ScheduleItem,
    Shift,
)
from shiftplan.domain.scheduling.value_objects.enums import Priority
from shiftplan.domain.scheduling.value_objects.shift_window import CustomWindow
from shiftplan.domain.shared.exceptions import ScheduleItemNotFoundError

from .fixtures import (
    MONDAY,
    SUNDAY,
    MachineFactory,
    OrderFactory,
    ProductFactory,
    ScheduleItemFactory,
    ShiftFactory,
    at,
)


class TestMachine:
    def test_working_hours_follow_timing(self):
        machine = MachineFactory.create(shift_timing="22:00-06:00")

        assert machine.working_hours == 8.0
        assert machine.capacity_minutes == 480

    def test_timing_change_recomputes_working_hours(self):
        machine = MachineFactory.create()

        changed = machine.with_changes(shift_timing="06:00-18:00")

        assert changed.working_hours == 12.0
        assert machine.working_hours == 8.0

    def test_custom_start_builds_custom_window(self):
        machine = MachineFactory.create(shift_timing="Custom", custom_start="07:30")

        assert isinstance(machine.shift_timing, CustomWindow)
        assert machine.shift_timing.start == time(7, 30)
        assert machine.shift_timing.end == time(15, 30)

    @pytest.mark.parametrize("efficiency", [0, 120])
    def test_efficiency_bounds(self, efficiency):
        with pytest.raises(ValidationError):
            MachineFactory.create(efficiency=efficiency)

    def test_entities_compare_by_id(self):
        assert MachineFactory.create(efficiency=50) == MachineFactory.create()
        assert not MachineFactory.create(efficiency=50).same_state_as(MachineFactory.create())


class TestProduct:
    def test_flow_sorted_by_sequence(self):
        product = ProductFactory.create(
            steps=[ProductFactory.step(2, "M2"), ProductFactory.step(1, "M1")]
        )

        assert [s.sequence for s in product.process_flow] == [1, 2]
        assert product.final_step.machine_id == "M2"
        assert product.step(2).machine_id == "M2"
        assert product.step(3) is None

    def test_duplicate_sequences_rejected(self):
        with pytest.raises(ValidationError):
            Product(
                id="P1",
                process_flow=(ProductFactory.step(1, "M1"), ProductFactory.step(1, "M2")),
            )

    def test_candidates_start_with_primary(self):
        step = ProductFactory.step(1, "M1", preferred=("M2", "M1", "M3"))

        assert step.candidate_machine_ids == ["M1", "M2", "M3"]

    def test_work_minutes(self):
        step = ProductFactory.step(1, "M1", cycle_time=2, setup_time=30)

        assert step.work_minutes(100) == 230


class TestPurchaseOrder:
    def test_quantity_must_be_positive(self):
        with pytest.raises(ValidationError):
            OrderFactory.create(quantity=0)

    def test_scheduling_key(self):
        orders = [
            OrderFactory.create("PO1", delivery_date=date(2024, 1, 10)),
            OrderFactory.create("PO2", priority=Priority.HIGH, delivery_date=date(2024, 1, 20)),
            OrderFactory.create("PO3", delivery_date=date(2024, 1, 5)),
        ]

        assert [o.id for o in sorted(orders, key=lambda o: o.scheduling_key)] == [
            "PO2",
            "PO3",
            "PO1",
        ]

    def test_display_name(self):
        assert OrderFactory.create().display_name == "SO-PO1"
        assert OrderFactory.create(order_number="").display_name == "PO1"


class TestShift:
    def test_default_shift(self):
        shift = Shift.default()

        assert shift.id == "default"
        assert shift.works_on(MONDAY)
        assert not shift.works_on(SUNDAY)

    def test_only_unpaid_breaks_reduce_time(self):
        shift = ShiftFactory.create(
            breaks=(ShiftFactory.lunch(), ShiftFactory.lunch(time(15, 0), time(15, 15), paid=True))
        )

        assert [b.start for b in shift.unpaid_breaks] == [time(12, 0)]


class TestScheduleItem:
    def test_end_before_start_rejected(self):
        with pytest.raises(ValidationError):
            ScheduleItemFactory.create(end=at(MONDAY, 8))

    def test_id_is_deterministic(self):
        assert ScheduleItem.make_id("PO7", 3) == "PO7-step-3"

    def test_record_action_appends(self):
        item = ScheduleItemFactory.create()

        noted = item.record_action("note", at(MONDAY), "ana", notes="check tooling")

        assert noted.notes == "check tooling"
        assert noted.action_history[0].actor == "ana"
        assert item.action_history == ()


class TestScheduleBook:
    def book(self) -> ScheduleBook:
        return ScheduleBook(
            [
                ScheduleItemFactory.create("PO1", 2, "M2", start=at(MONDAY, 11)),
                ScheduleItemFactory.create("PO1", 1, "M1", start=at(MONDAY, 9)),
                ScheduleItemFactory.create("PO2", 1, "M1", start=at(MONDAY, 7)),
            ]
        )

    def test_views(self):
        book = self.book()

        assert len(book) == 3
        assert [i.id for i in book.for_machine("M1")] == ["PO2-step-1", "PO1-step-1"]
        assert [i.process_step for i in book.for_order("PO1")] == [1, 2]
        assert book.machine_ids == ["M1", "M2"]
        assert book.order_ids == ["PO1", "PO2"]
        assert [i.id for i in book] == ["PO2-step-1", "PO1-step-1", "PO1-step-2"]

    def test_upsert_reindexes(self):
        book = self.book()
        moved = book.get("PO2-step-1").with_changes(machine_id="M3")

        book.upsert(moved)

        assert [i.id for i in book.for_machine("M1")] == ["PO1-step-1"]
        assert book.for_machine("M3") == [moved]

    def test_remove(self):
        book = self.book()

        removed = book.remove("PO2-step-1")

        assert removed.po_id == "PO2"
        assert "PO2-step-1" not in book
        assert book.for_order("PO2") == []

    def test_missing_item(self):
        book = self.book()

        assert book.find("nope") is None
        with pytest.raises(ScheduleItemNotFoundError):
            book.get("nope")
        with pytest.raises(ScheduleItemNotFoundError):
            book.remove("nope")

    def test_replace_all(self):
        book = self.book()

        book.replace_all([ScheduleItemFactory.create("PO9", start=at(MONDAY) + timedelta(days=1))])

        assert book.order_ids == ["PO9"]
