"""
Tests for item and order status and progress projection.
"""

from datetime import date, timedelta

import pytest
from hypothesis import given, strategies as st

from shiftplan.domain.scheduling.services.status_projector import (
    auto_status,
    order_progress,
    order_status,
    progress,
    project,
)
from shiftplan.domain.scheduling.value_objects.enums import (
    OrderStatus,
    ScheduleItemStatus,
    SchedulingMode,
)

from ..fixtures import MONDAY, OrderFactory, ScheduleItemFactory, at

T = at(MONDAY, 9)


def two_hour_item(**kwargs):
    return ScheduleItemFactory.create(start=T, minutes=120, **kwargs)


class TestAutoStatus:
    def test_halfway_is_in_progress_at_fifty(self):
        item = two_hour_item()
        now = T + timedelta(hours=1)

        assert auto_status(item, now) == ScheduleItemStatus.IN_PROGRESS
        assert progress(item, now) == 50.0

    def test_before_start_is_scheduled(self):
        assert auto_status(two_hour_item(), T - timedelta(minutes=1)) == ScheduleItemStatus.SCHEDULED

    def test_past_end_without_delay_evidence_is_completed(self):
        assert auto_status(two_hour_item(), T + timedelta(hours=3)) == ScheduleItemStatus.COMPLETED

    @pytest.mark.parametrize(
        "stored",
        [ScheduleItemStatus.IN_PROGRESS, ScheduleItemStatus.PAUSED, ScheduleItemStatus.DELAYED],
    )
    def test_past_end_with_delay_evidence_is_delayed(self, stored):
        item = two_hour_item(status=stored)

        assert auto_status(item, T + timedelta(hours=3)) == ScheduleItemStatus.DELAYED

    def test_recorded_completion_wins(self):
        item = two_hour_item(actual_end_time=T + timedelta(minutes=30))

        assert auto_status(item, T + timedelta(minutes=45)) == ScheduleItemStatus.COMPLETED
        assert progress(item, T + timedelta(minutes=45)) == 100.0

    def test_actual_start_takes_precedence(self):
        item = two_hour_item(
            status=ScheduleItemStatus.IN_PROGRESS, actual_start_time=T - timedelta(minutes=30)
        )

        assert auto_status(item, T - timedelta(minutes=10)) == ScheduleItemStatus.IN_PROGRESS

    def test_paused_stays_paused_until_end(self):
        item = two_hour_item(status=ScheduleItemStatus.PAUSED)

        assert auto_status(item, T + timedelta(hours=1)) == ScheduleItemStatus.PAUSED


class TestManualMode:
    def test_stored_status_kept(self):
        item = two_hour_item(mode=SchedulingMode.MANUAL, status=ScheduleItemStatus.PAUSED)

        assert auto_status(item, T + timedelta(hours=5)) == ScheduleItemStatus.PAUSED

    def test_scheduled_past_end_becomes_delayed(self):
        item = two_hour_item(mode=SchedulingMode.MANUAL)

        assert auto_status(item, T + timedelta(hours=1)) == ScheduleItemStatus.SCHEDULED
        assert auto_status(item, T + timedelta(hours=2)) == ScheduleItemStatus.DELAYED


class TestProgress:
    def test_stored_progress_wins(self):
        item = two_hour_item(progress=33.33)

        assert progress(item, T) == 33.3

    def test_zero_stored_progress_is_derived(self):
        item = two_hour_item(progress=0)

        assert progress(item, T + timedelta(minutes=30)) == 25.0

    def test_completed_reports_hundred(self):
        item = two_hour_item(status=ScheduleItemStatus.COMPLETED)

        assert progress(item, T) == 100.0

    def test_project_returns_updated_copy(self):
        item = two_hour_item()

        projected = project(item, T + timedelta(hours=1))

        assert projected.status == ScheduleItemStatus.IN_PROGRESS
        assert projected.progress == 50.0
        assert item.status == ScheduleItemStatus.SCHEDULED

    @given(offset=st.integers(-600, 600))
    def test_progress_clamped(self, offset):
        value = progress(two_hour_item(), T + timedelta(minutes=offset))

        assert 0.0 <= value <= 100.0


class TestOrderProjection:
    def items(self):
        return [
            ScheduleItemFactory.create(process_step=1, start=T, minutes=60),
            ScheduleItemFactory.create(process_step=2, start=T + timedelta(hours=1), minutes=180),
        ]

    def test_order_in_progress(self):
        order = OrderFactory.create(delivery_date=date(2024, 1, 5))

        assert order_status(order, self.items(), T + timedelta(minutes=90)) == OrderStatus.IN_PROGRESS

    def test_order_pending_before_start(self):
        order = OrderFactory.create(delivery_date=date(2024, 1, 5))

        assert order_status(order, self.items(), T - timedelta(hours=1)) == OrderStatus.PENDING

    def test_order_completed(self):
        order = OrderFactory.create(delivery_date=date(2024, 1, 5))

        assert order_status(order, self.items(), T + timedelta(hours=5)) == OrderStatus.COMPLETED

    def test_order_past_delivery_is_delayed(self):
        order = OrderFactory.create(delivery_date=MONDAY)
        items = [ScheduleItemFactory.create(start=T + timedelta(days=1), minutes=60)]

        assert order_status(order, items, T + timedelta(days=1)) == OrderStatus.DELAYED

    def test_cancelled_order_unchanged(self):
        order = OrderFactory.create(status=OrderStatus.CANCELLED)

        assert order_status(order, self.items(), T) == OrderStatus.CANCELLED

    def test_progress_weighted_by_allocated_time(self):
        now = T + timedelta(hours=1)

        # step 1 done (60 min), step 2 not started (180 min)
        assert order_progress("PO1", self.items(), now) == 25.0
        assert order_progress("missing", self.items(), now) == 0.0
