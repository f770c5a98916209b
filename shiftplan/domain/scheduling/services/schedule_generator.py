"""
Schedule Generator

Turns a backlog of orders into time-stamped schedule items. Orders are placed
greedily in priority order; each process step goes on the first suitable
machine at the earliest time its predecessor, the machine and the working
calendar allow. Work already under way, finished, or pinned by a user is kept
as it is and only blocks machine time.
"""

import math
from collections.abc import Iterable, Mapping, Sequence
from datetime import date, datetime, timedelta

from pydantic import Field

from ....core.observability import get_logger
from ...shared.base import ValueObject
from ...shared.exceptions import ErrorType, NoWorkingTimeError
from ..entities.machine import Machine
from ..entities.order import PurchaseOrder
from ..entities.product import ProcessStep, Product
from ..entities.schedule import ScheduleBook
from ..entities.schedule_item import ScheduleItem
from ..entities.shift import Shift
from ..value_objects.enums import OrderStatus, ProcessDelayType, ScheduleItemStatus
from ..value_objects.holiday_calendar import HolidayCalendar
from ..value_objects.issues import SchedulingIssue
from ..value_objects.timeslot import TimeSlot
from . import capacity_tracker
from .conflict_detector import ScheduleConflict, detect_conflicts
from .working_calendar import WorkingCalendar, calendar_for_machine, resolve_shift

logger = get_logger(__name__)

# bounds the search for an immediate-release start that honours the end constraint
MAX_RELEASE_ADJUSTMENTS = 50


def allocated_minutes(step: ProcessStep, quantity: int, machine: Machine) -> int:
    """Machine minutes for a batch: ``ceil((setup + qty * cycle) / (eff / 100))``."""
    return math.ceil(round(step.work_minutes(quantity) * 100 / machine.efficiency, 6))


class ScheduleResult(ValueObject):
    """Outcome of a generation run."""

    items: list[ScheduleItem] = Field(default_factory=list)
    conflicts: list[ScheduleConflict] = Field(default_factory=list)
    issues: list[SchedulingIssue] = Field(default_factory=list)

    @property
    def has_conflicts(self) -> bool:
        return bool(self.conflicts)

    def items_for_order(self, po_id: str) -> list[ScheduleItem]:
        return sorted(
            (item for item in self.items if item.po_id == po_id),
            key=lambda item: item.process_step,
        )

    def items_for_machine(self, machine_id: str) -> list[ScheduleItem]:
        return sorted(
            (item for item in self.items if item.machine_id == machine_id),
            key=lambda item: (item.start_date, item.id),
        )


class _Placement:
    """A tentative placement of one step on one machine."""

    def __init__(self, machine: Machine, allocated: int, slots: list[TimeSlot]) -> None:
        self.machine = machine
        self.allocated = allocated
        self.slots = slots

    @property
    def start(self) -> datetime:
        return self.slots[0].start

    @property
    def end(self) -> datetime:
        return self.slots[-1].end


class SchedulePlanner:
    """
    Greedy placement state shared by generation and feasibility checks.

    Holds the carried items and the items placed so far; a machine is free
    after the latest of them.
    Nothing passed in is modified.
    """

    def __init__(
        self,
        machines: Sequence[Machine],
        shifts: Sequence[Shift],
        holidays: HolidayCalendar | Iterable | None,
        start_from: datetime,
    ) -> None:
        self.machines = {machine.id: machine for machine in machines}
        self.shifts = list(shifts)
        self.holidays = HolidayCalendar.coerce(holidays)
        self.start_from = start_from
        self.issues: list[SchedulingIssue] = []
        self.placed: list[ScheduleItem] = []
        self._carried: dict[str, ScheduleItem] = {}
        self._previous: dict[str, ScheduleItem] = {}
        self._calendars: dict[str, WorkingCalendar] = {}

    def carry(self, items: Iterable[ScheduleItem]) -> None:
        """Keep items as they are; they occupy their machines."""
        for item in items:
            self._carried[item.id] = item

    def remember(self, items: Iterable[ScheduleItem]) -> None:
        """Previous versions of re-placed items, whose annotations are kept."""
        for item in items:
            self._previous[item.id] = item

    @property
    def carried(self) -> list[ScheduleItem]:
        return list(self._carried.values())

    def calendar(self, machine: Machine) -> WorkingCalendar:
        if machine.id not in self._calendars:
            shift, issues = resolve_shift(machine, self.shifts)
            self.issues.extend(issues)
            self._calendars[machine.id] = calendar_for_machine(machine, shift, self.holidays)
        return self._calendars[machine.id]

    def place_order(self, order: PurchaseOrder, product: Product) -> list[ScheduleItem]:
        """
        Place every step of an order not already carried.

        A step whose machine cannot be resolved is reported and skipped; the
        next step is released by the last step that was placed.
        """
        placed: list[ScheduleItem] = []
        previous: ScheduleItem | None = None
        previous_step: ProcessStep | None = None

        for step in product.process_flow:
            carried = self._carried.get(ScheduleItem.make_id(order.id, step.sequence))
            if carried is not None:
                previous, previous_step = carried, step
                continue

            item = self._place_step(order, step, previous, previous_step)
            if item is None:
                continue
            self.placed.append(item)
            placed.append(item)
            previous, previous_step = item, step

        return placed

    def next_free_slot(self, machine: Machine) -> datetime:
        """Earliest instant new work may start on a machine."""
        return capacity_tracker.next_free_slot(
            machine.id, self.carried + self.placed, default=self.start_from
        )

    def _place_step(
        self,
        order: PurchaseOrder,
        step: ProcessStep,
        previous: ScheduleItem | None,
        previous_step: ProcessStep | None,
    ) -> ScheduleItem | None:
        candidates = self._resolve_candidates(order, step)
        if not candidates:
            return None

        placements: dict[str, _Placement | None] = {}

        def placement_on(machine: Machine) -> _Placement | None:
            if machine.id not in placements:
                placements[machine.id] = self._tentative(
                    order, step, machine, previous, previous_step
                )
            return placements[machine.id]

        def fits(machine: Machine) -> bool:
            placement = placement_on(machine)
            return placement is not None and placement.end.date() <= order.delivery_date

        chosen = self._choose(
            self.machines.get(step.machine_id), candidates, placement_on, fits
        )
        if chosen is None:
            return None

        previous_version = self._previous.get(ScheduleItem.make_id(order.id, step.sequence))
        item = ScheduleItem(
            id=ScheduleItem.make_id(order.id, step.sequence),
            po_id=order.id,
            product_id=order.product_id,
            machine_id=chosen.machine.id,
            process_step=step.sequence,
            quantity=order.quantity,
            allocated_time=chosen.allocated,
            start_date=chosen.start,
            end_date=chosen.end,
            work_segments=tuple(chosen.slots),
            status=ScheduleItemStatus.SCHEDULED,
            notes=previous_version.notes if previous_version else "",
            action_history=previous_version.action_history if previous_version else (),
            overtime_records=previous_version.overtime_records if previous_version else (),
            quality_score=previous_version.quality_score if previous_version else None,
        )
        logger.debug(
            "Step placed",
            item_id=item.id,
            machine_id=item.machine_id,
            start=item.start_date.isoformat(),
            end=item.end_date.isoformat(),
            allocated_time=item.allocated_time,
        )
        return item

    def _resolve_candidates(self, order: PurchaseOrder, step: ProcessStep) -> list[Machine]:
        candidates = []
        for machine_id in step.candidate_machine_ids:
            machine = self.machines.get(machine_id)
            if machine is None:
                self._report(
                    ErrorType.UNRESOLVED_MACHINE,
                    f"Machine {machine_id} for step {step.sequence} of order {order.id} does not exist",
                    order,
                    step,
                    machine_id,
                )
                continue
            candidates.append(machine)
        if not candidates:
            self._report(
                ErrorType.UNRESOLVED_MACHINE,
                f"No machine resolves for step {step.sequence} of order {order.id}; step skipped",
                order,
                step,
                step.machine_id,
            )
        return candidates

    def _choose(
        self,
        primary: Machine | None,
        candidates: list[Machine],
        placement_on,
        fits,
    ) -> _Placement | None:
        """
        Pick a machine for a step.

        The primary machine is used when it is available and the order still
        makes its delivery date; otherwise the first preferred machine that is
        both. Failing that, the primary if it is operational, then the first
        operational preferred machine, then the primary regardless.
        """
        preferred = [m for m in candidates if primary is None or m.id != primary.id]
        ordered = [
            [m for m in candidates if m.is_available_for_work and fits(m)],
            [primary] if primary and primary.status.is_operational else [],
            [m for m in preferred if m.status.is_operational],
            [primary] if primary else candidates,
        ]
        for group in ordered:
            for machine in group:
                placement = placement_on(machine)
                if placement is not None:
                    return placement
        return None

    def _tentative(
        self,
        order: PurchaseOrder,
        step: ProcessStep,
        machine: Machine,
        previous: ScheduleItem | None,
        previous_step: ProcessStep | None,
    ) -> _Placement | None:
        allocated = allocated_minutes(step, order.quantity, machine)
        calendar = self.calendar(machine)
        try:
            release, min_end = self._release(step, machine, previous, previous_step)
            earliest = max(release, self.next_free_slot(machine))
            slots = calendar.allocate(earliest, allocated)
            for _ in range(MAX_RELEASE_ADJUSTMENTS):
                if min_end is None or slots[-1].end >= min_end:
                    break
                earliest = slots[0].start + (min_end - slots[-1].end)
                slots = calendar.allocate(earliest, allocated)
        except NoWorkingTimeError as exc:
            self._report(
                ErrorType.INVALID_CONFIGURATION,
                f"Machine {machine.id} has no working time: {exc.message}",
                order,
                step,
                machine.id,
            )
            return None
        return _Placement(machine, allocated, slots)

    def _release(
        self,
        step: ProcessStep,
        machine: Machine,
        previous: ScheduleItem | None,
        previous_step: ProcessStep | None,
    ) -> tuple[datetime, datetime | None]:
        """
        Earliest start for ``step`` and, for immediate release, its earliest end.

        Immediate release waits for the first unit in working time on the
        previous machine; the step may not end before one of its own cycles
        has run on its machine after the previous step ends.
        """
        if previous is None or previous_step is None:
            return self.start_from, None

        policy = previous_step.release_policy
        if policy.type == ProcessDelayType.IMMEDIATE:
            previous_machine = self.machines.get(previous.machine_id)
            first_unit = previous_step.setup_time + previous_step.cycle_time_per_part
            if previous_machine is None:
                first_out = previous.effective_start + timedelta(minutes=first_unit)
            else:
                first_out = self._working_end(
                    previous_machine,
                    previous.effective_start,
                    first_unit / previous_machine.throughput_factor,
                )
            one_cycle = step.cycle_time_per_part / machine.throughput_factor
            return first_out, self._working_end(machine, previous.effective_end, one_cycle)
        if policy.type == ProcessDelayType.FIXED_GAP:
            return previous.effective_end + timedelta(minutes=policy.gap_minutes), None
        return previous.effective_end, None

    def _working_end(self, machine: Machine, start: datetime, minutes: float) -> datetime:
        return self.calendar(machine).allocate(start, minutes)[-1].end

    def _report(
        self,
        kind: ErrorType,
        message: str,
        order: PurchaseOrder,
        step: ProcessStep | None = None,
        machine_id: str | None = None,
    ) -> None:
        logger.warning(
            "Scheduling issue",
            kind=kind.value,
            order_id=order.id,
            process_step=step.sequence if step else None,
            machine_id=machine_id,
            detail=message,
        )
        self.issues.append(
            SchedulingIssue(
                kind=kind,
                message=message,
                order_id=order.id,
                process_step=step.sequence if step else None,
                machine_id=machine_id,
            )
        )

    def report_order(self, kind: ErrorType, message: str, order: PurchaseOrder) -> None:
        self._report(kind, message, order)


class ScheduleGenerator:
    """
    Generates production schedules from an order backlog.

    Args:
        machines: All machines
        shifts: All shifts
        holidays: Holiday calendar, or holiday entries to build one from
    """

    def __init__(
        self,
        machines: Sequence[Machine],
        shifts: Sequence[Shift] = (),
        holidays: HolidayCalendar | Iterable | None = None,
    ) -> None:
        self.machines = list(machines)
        self.shifts = list(shifts)
        self.holidays = HolidayCalendar.coerce(holidays)

    def generate(
        self,
        orders: Sequence[PurchaseOrder],
        products: Sequence[Product],
        existing_items: Iterable[ScheduleItem] = (),
        committed_dates: Mapping[str, date] | None = None,
        start_from: datetime | None = None,
    ) -> ScheduleResult:
        """
        Generate a schedule.

        Args:
            orders: Order backlog
            products: Products with their process flows
            existing_items: Items from the previous run; held ones are kept
            committed_dates: Dates already promised per order id
            start_from: Earliest instant for new work, defaults to now

        Returns:
            ScheduleResult with items, conflicts and issues
        """
        start_from = start_from or datetime.now()
        products_by_id = {product.id: product for product in products}
        orders_by_id = {order.id: order for order in orders}
        existing = list(existing_items)

        planner = SchedulePlanner(self.machines, self.shifts, self.holidays, start_from)
        planner.carry(item for item in existing if _is_carried(item, orders_by_id))
        planner.remember(existing)

        for order in sorted(orders, key=lambda o: o.scheduling_key):
            if not order.is_schedulable:
                continue
            product = products_by_id.get(order.product_id)
            if product is None:
                planner.report_order(
                    ErrorType.NOT_FOUND,
                    f"Order {order.id} references unknown product {order.product_id}; order skipped",
                    order,
                )
                continue
            if not product.process_flow:
                planner.report_order(
                    ErrorType.INVALID_CONFIGURATION,
                    f"Product {product.id} has no process steps; order {order.id} skipped",
                    order,
                )
                continue
            planner.place_order(order, product)

        book = ScheduleBook(planner.carried + planner.placed)
        items = book.items()
        conflicts = detect_conflicts(orders, book, committed_dates)

        logger.info(
            "Schedule generated",
            order_count=len(orders),
            item_count=len(items),
            placed_count=len(planner.placed),
            carried_count=len(planner.carried),
            conflict_count=len(conflicts),
            issue_count=len(planner.issues),
        )
        return ScheduleResult(items=items, conflicts=conflicts, issues=planner.issues)


def _is_carried(item: ScheduleItem, orders_by_id: Mapping[str, PurchaseOrder]) -> bool:
    """Held items, and the items of completed orders, survive regeneration."""
    if item.is_held:
        return True
    order = orders_by_id.get(item.po_id)
    return order is not None and order.status == OrderStatus.COMPLETED


def generate(
    orders: Sequence[PurchaseOrder],
    products: Sequence[Product],
    machines: Sequence[Machine],
    shifts: Sequence[Shift],
    holidays: HolidayCalendar | Iterable | None,
    existing_items: Iterable[ScheduleItem] = (),
    committed_dates: Mapping[str, date] | None = None,
    start_from: datetime | None = None,
) -> ScheduleResult:
    """Generate a schedule; see ``ScheduleGenerator.generate``."""
    return ScheduleGenerator(machines, shifts, holidays).generate(
        orders,
        products,
        existing_items=existing_items,
        committed_dates=committed_dates,
        start_from=start_from,
    )
