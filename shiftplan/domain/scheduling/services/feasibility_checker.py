"""
Feasibility Checker

Answers "can this order be delivered by its requested date?" by placing it
on top of the committed schedule, and finds the earliest date that works when
it cannot.
"""

from collections.abc import Iterable, Sequence
from datetime import date, datetime, timedelta

from pydantic import Field

from ....core.config import settings
from ....core.observability import get_logger
from ...shared.base import ValueObject
from ...shared.exceptions import ErrorType
from ..entities.machine import Machine
from ..entities.order import PurchaseOrder
from ..entities.product import Product
from ..entities.schedule_item import ScheduleItem
from ..entities.shift import Shift
from ..value_objects.holiday_calendar import HolidayCalendar
from ..value_objects.issues import SchedulingIssue
from .schedule_generator import SchedulePlanner

logger = get_logger(__name__)


class FeasibilityResult(ValueObject):
    """Whether an order meets its date, and the first date it could meet."""

    feasible: bool
    suggested_date: date | None = None
    projected_completion: datetime | None = None
    issues: list[SchedulingIssue] = Field(default_factory=list)


def _projected_completion(
    order: PurchaseOrder,
    product: Product,
    machines: Sequence[Machine],
    shifts: Sequence[Shift],
    holidays: HolidayCalendar,
    committed: list[ScheduleItem],
    start_from: datetime,
) -> tuple[datetime | None, list[SchedulingIssue]]:
    planner = SchedulePlanner(machines, shifts, holidays, start_from)
    planner.carry(committed)
    planner.place_order(order, product)

    own = [i for i in planner.carried + planner.placed if i.po_id == order.id]
    if not own:
        return None, planner.issues
    return max(i.effective_end for i in own), planner.issues


def _infeasible(order: PurchaseOrder, reason: str) -> SchedulingIssue:
    return SchedulingIssue(
        kind=ErrorType.INFEASIBLE,
        message=f"Order {order.display_name} {reason}",
        order_id=order.id,
    )


def _committed_items(order: PurchaseOrder, items: Iterable[ScheduleItem]) -> list[ScheduleItem]:
    """Everything already planned, minus the order's own re-placeable items."""
    return [i for i in items if i.po_id != order.id or i.is_held]


def check_feasibility(
    order: PurchaseOrder,
    product: Product,
    machines: Sequence[Machine],
    shifts: Sequence[Shift],
    holidays: HolidayCalendar | Iterable | None,
    existing_items: Iterable[ScheduleItem] = (),
    start_from: datetime | None = None,
    horizon_days: int | None = None,
) -> FeasibilityResult:
    """
    Check whether an order can be completed by its delivery date.

    Args:
        order: Hypothetical or existing order
        product: Product of the order
        machines: All machines
        shifts: All shifts
        holidays: Holiday calendar or holiday entries
        existing_items: The committed schedule
        start_from: Earliest instant for new work, defaults to now
        horizon_days: Days searched past the delivery date when infeasible

    Returns:
        FeasibilityResult; when infeasible ``suggested_date`` is the first
        date within the horizon that can be met, or None
    """
    start_from = start_from or datetime.now()
    horizon_days = settings.FEASIBILITY_HORIZON_DAYS if horizon_days is None else horizon_days
    holidays = HolidayCalendar.coerce(holidays)
    committed = _committed_items(order, existing_items)

    completion, issues = _projected_completion(
        order, product, machines, shifts, holidays, committed, start_from
    )
    if completion is None:
        logger.info("Order cannot be placed", order_id=order.id, issue_count=len(issues))
        return FeasibilityResult(
            feasible=False,
            issues=[*issues, _infeasible(order, "cannot be placed on any machine")],
        )

    if completion.date() <= order.delivery_date:
        return FeasibilityResult(
            feasible=True,
            suggested_date=order.delivery_date,
            projected_completion=completion,
            issues=issues,
        )

    for offset in range(1, horizon_days + 1):
        candidate = order.delivery_date + timedelta(days=offset)
        projected, _ = _projected_completion(
            order.with_delivery_date(candidate),
            product,
            machines,
            shifts,
            holidays,
            committed,
            start_from,
        )
        if projected is not None and projected.date() <= candidate:
            logger.info(
                "Order infeasible, later date found",
                order_id=order.id,
                requested=order.delivery_date.isoformat(),
                suggested=candidate.isoformat(),
            )
            return FeasibilityResult(
                feasible=False,
                suggested_date=candidate,
                projected_completion=completion,
                issues=[
                    *issues,
                    _infeasible(
                        order,
                        f"cannot meet {order.delivery_date.isoformat()}; "
                        f"earliest date is {candidate.isoformat()}",
                    ),
                ],
            )

    logger.info(
        "Order infeasible within horizon",
        order_id=order.id,
        horizon_days=horizon_days,
    )
    return FeasibilityResult(
        feasible=False,
        projected_completion=completion,
        issues=[
            *issues,
            _infeasible(order, f"cannot be completed within {horizon_days} days of its date"),
        ],
    )


def next_feasible_dates(
    order: PurchaseOrder,
    product: Product,
    machines: Sequence[Machine],
    shifts: Sequence[Shift],
    holidays: HolidayCalendar | Iterable | None,
    existing_items: Iterable[ScheduleItem] = (),
    start_from: datetime | None = None,
    count: int = 3,
    horizon_days: int | None = None,
) -> list[date]:
    """
    The next ``count`` delivery dates the order could meet.

    Dates are tried from the start date up to the horizon past the later of
    the start date and the requested delivery date.
    """
    start_from = start_from or datetime.now()
    horizon_days = settings.FEASIBILITY_HORIZON_DAYS if horizon_days is None else horizon_days
    holidays = HolidayCalendar.coerce(holidays)
    committed = _committed_items(order, existing_items)

    first = start_from.date()
    last = max(first, order.delivery_date) + timedelta(days=horizon_days)
    dates: list[date] = []
    candidate = first
    while candidate <= last and len(dates) < count:
        projected, _ = _projected_completion(
            order.with_delivery_date(candidate),
            product,
            machines,
            shifts,
            holidays,
            committed,
            start_from,
        )
        if projected is not None and projected.date() <= candidate:
            dates.append(candidate)
        candidate += timedelta(days=1)
    return dates
