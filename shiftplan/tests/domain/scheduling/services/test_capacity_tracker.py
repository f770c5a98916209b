"""
Tests for machine load, capacity and utilization figures.
"""

from datetime import date, timedelta

import pytest

from shiftplan.domain.scheduling.services import capacity_tracker
from shiftplan.domain.scheduling.services.working_calendar import calendar_for_machine
from shiftplan.domain.scheduling.value_objects.timeslot import TimeSlot

from ..fixtures import MONDAY, SATURDAY, SUNDAY, MachineFactory, ScheduleItemFactory, at

TUESDAY = date(2024, 1, 2)


class TestLoad:
    def test_sums_allocated_time_per_machine(self):
        items = [
            ScheduleItemFactory.create("PO1", minutes=120),
            ScheduleItemFactory.create("PO2", minutes=90),
            ScheduleItemFactory.create("PO3", machine_id="M2", minutes=60),
        ]

        assert capacity_tracker.load("M1", items) == 210
        assert capacity_tracker.load("M2", items) == 60
        assert capacity_tracker.load("M9", items) == 0

    def test_items_without_allocated_time_count_as_zero(self):
        items = [
            ScheduleItemFactory.create("PO1", allocated_time=None),
            ScheduleItemFactory.create("PO2", minutes=30),
        ]

        assert capacity_tracker.load("M1", items) == 30

    def test_bounded_load_uses_work_segments(self):
        item = ScheduleItemFactory.create(
            minutes=500,
            start=at(SATURDAY, 9),
            end=at(date(2024, 1, 8), 9, 20),
            work_segments=(
                TimeSlot(start=at(SATURDAY, 9), end=at(SATURDAY, 17)),
                TimeSlot(start=at(date(2024, 1, 8), 9), end=at(date(2024, 1, 8), 9, 20)),
            ),
        )

        assert capacity_tracker.load("M1", [item], at(SATURDAY, 0), at(SUNDAY, 0)) == 480
        assert capacity_tracker.load("M1", [item], start=at(SUNDAY, 0)) == 20

    def test_capacity_from_working_hours(self):
        assert capacity_tracker.capacity(MachineFactory.create(shift_timing="22:00-06:00")) == 480
        assert capacity_tracker.capacity(MachineFactory.create(shift_timing="06:00-10:30")) == 270


class TestDailyLoads:
    def test_spans_without_segments_split_at_midnight(self):
        item = ScheduleItemFactory.create(
            start=at(MONDAY, 22), minutes=480, end=at(TUESDAY, 6)
        )

        loads = capacity_tracker.daily_loads("M1", [item])

        assert loads == {MONDAY: pytest.approx(120), TUESDAY: pytest.approx(360)}

    def test_overload_detected_on_peak_day(self):
        machine = MachineFactory.create()
        items = [
            ScheduleItemFactory.create("PO1", start=at(MONDAY, 9), minutes=300),
            ScheduleItemFactory.create("PO2", start=at(MONDAY, 14), minutes=300),
        ]

        assert capacity_tracker.peak_load_ratio(machine, items) == pytest.approx(600 / 480)
        assert capacity_tracker.is_overloaded(machine, items)

    def test_full_day_is_not_overloaded(self):
        machine = MachineFactory.create()
        items = [ScheduleItemFactory.create(start=at(MONDAY, 9), minutes=480)]

        assert not capacity_tracker.is_overloaded(machine, items)

    def test_idle_machine(self):
        machine = MachineFactory.create()

        assert capacity_tracker.peak_load_ratio(machine, []) == 0.0
        assert capacity_tracker.utilization(machine, []) == 0.0
        assert capacity_tracker.next_free_slot("M1", []) is None


class TestUtilization:
    def test_average_over_loaded_days(self):
        machine = MachineFactory.create()
        items = [
            ScheduleItemFactory.create("PO1", start=at(MONDAY, 9), minutes=480),
            ScheduleItemFactory.create("PO2", start=at(TUESDAY, 9), minutes=240),
        ]

        assert capacity_tracker.utilization(machine, items) == 75.0

    def test_clamped_to_hundred(self):
        machine = MachineFactory.create()
        items = [ScheduleItemFactory.create(start=at(MONDAY, 9), minutes=900, end=at(MONDAY, 17))]

        assert capacity_tracker.utilization(machine, items) == 100.0

    def test_remaining_capacity_with_calendar(self):
        machine = MachineFactory.create()
        calendar = calendar_for_machine(machine, None)
        items = [ScheduleItemFactory.create(start=at(MONDAY, 9), minutes=180)]

        assert capacity_tracker.remaining_capacity(machine, MONDAY, items, calendar) == 300
        assert capacity_tracker.remaining_capacity(machine, SUNDAY, items, calendar) == 0
        assert capacity_tracker.remaining_capacity(machine, TUESDAY, items) == 480


class TestMachineEfficiency:
    def test_allocated_over_actual_minutes(self):
        items = [
            ScheduleItemFactory.create(
                "PO1",
                minutes=120,
                actual_start_time=at(MONDAY, 9),
                actual_end_time=at(MONDAY, 11, 30),
            ),
            ScheduleItemFactory.create(
                "PO2",
                minutes=60,
                actual_start_time=at(MONDAY, 12),
                actual_end_time=at(MONDAY, 13, 30),
            ),
            ScheduleItemFactory.create("PO3", minutes=600),
        ]

        # 180 planned over 240 recorded
        assert capacity_tracker.machine_efficiency("M1", items) == 75.0

    def test_clamped_to_hundred(self):
        items = [
            ScheduleItemFactory.create(
                minutes=120, actual_start_time=at(MONDAY, 9), actual_end_time=at(MONDAY, 10)
            )
        ]

        assert capacity_tracker.machine_efficiency("M1", items) == 100.0

    def test_none_without_recorded_execution(self):
        items = [
            ScheduleItemFactory.create("PO1", actual_start_time=at(MONDAY, 9)),
            ScheduleItemFactory.create(
                "PO2",
                machine_id="M2",
                actual_start_time=at(MONDAY, 9),
                actual_end_time=at(MONDAY, 10),
            ),
        ]

        assert capacity_tracker.machine_efficiency("M1", items) is None
        assert capacity_tracker.machine_efficiency("M3", items) is None


class TestNextFreeSlot:
    def test_latest_end_on_machine(self):
        items = [
            ScheduleItemFactory.create("PO1", start=at(MONDAY, 9), minutes=60),
            ScheduleItemFactory.create("PO2", start=at(MONDAY, 13), minutes=60),
            ScheduleItemFactory.create("PO3", machine_id="M2", start=at(TUESDAY, 9)),
        ]

        assert capacity_tracker.next_free_slot("M1", items) == at(MONDAY, 14)

    def test_default_when_later(self):
        items = [ScheduleItemFactory.create(start=at(MONDAY, 9), minutes=60)]
        later = at(MONDAY, 9) + timedelta(days=3)

        assert capacity_tracker.next_free_slot("M1", items, default=later) == later
