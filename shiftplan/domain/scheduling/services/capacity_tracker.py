"""
Capacity Tracker

Load and utilization figures for machines, measured from schedule items.
Items without an allocated time count as zero load; nothing here raises.
"""

from collections import defaultdict
from collections.abc import Iterable
from datetime import date, datetime, time, timedelta

from ..entities.machine import Machine
from ..entities.schedule_item import ScheduleItem
from .working_calendar import WorkingCalendar


def _machine_items(machine_id: str, items: Iterable[ScheduleItem]) -> list[ScheduleItem]:
    return [item for item in items if item.machine_id == machine_id]


def _weighted_slots(item: ScheduleItem):
    """Yield (slot, weight) so that the weighted slot minutes sum to the load."""
    if not item.load_minutes:
        return
    slots = item.slots()
    total = sum(slot.minutes for slot in slots)
    if total <= 0:
        yield slots[0], None
        return
    weight = item.load_minutes / total
    for slot in slots:
        yield slot, weight


def load(
    machine_id: str,
    items: Iterable[ScheduleItem],
    start: datetime | None = None,
    end: datetime | None = None,
) -> float:
    """
    Minutes of work on a machine, optionally limited to ``[start, end)``.

    Args:
        machine_id: Machine to measure
        items: Schedule items (other machines are ignored)
        start: Lower bound, unbounded when None
        end: Upper bound, unbounded when None

    Returns:
        Load in minutes
    """
    machine_items = _machine_items(machine_id, items)
    if start is None and end is None:
        return float(sum(item.load_minutes for item in machine_items))

    total = 0.0
    for item in machine_items:
        for slot, weight in _weighted_slots(item):
            if weight is None:
                inside = (start is None or slot.start >= start) and (
                    end is None or slot.start < end
                )
                total += item.load_minutes if inside else 0.0
            else:
                total += slot.overlap_minutes(start, end) * weight
    return total


def capacity(machine: Machine) -> float:
    """Nominal capacity of a machine in minutes per working day."""
    return machine.capacity_minutes


def daily_loads(machine_id: str, items: Iterable[ScheduleItem]) -> dict[date, float]:
    """Load per calendar date; slots crossing midnight are split."""
    loads: dict[date, float] = defaultdict(float)
    for item in _machine_items(machine_id, items):
        for slot, weight in _weighted_slots(item):
            if weight is None:
                loads[slot.start.date()] += item.load_minutes
                continue
            day = slot.start.date()
            while datetime.combine(day, time(0, 0)) < slot.end:
                day_start = datetime.combine(day, time(0, 0))
                minutes = slot.overlap_minutes(day_start, day_start + timedelta(days=1))
                if minutes > 0:
                    loads[day] += minutes * weight
                day += timedelta(days=1)
    return dict(sorted(loads.items()))


def remaining_capacity(
    machine: Machine,
    day: date,
    items: Iterable[ScheduleItem],
    calendar: WorkingCalendar | None = None,
) -> float:
    """
    Unused minutes of a machine on a date.

    With a calendar the day's actual working minutes are the capacity (zero on
    holidays), otherwise the nominal daily capacity is used.
    """
    available = calendar.working_minutes_on(day) if calendar else capacity(machine)
    used = daily_loads(machine.id, items).get(day, 0.0)
    return max(0.0, available - used)


def peak_load_ratio(machine: Machine, items: Iterable[ScheduleItem]) -> float:
    """Highest daily load divided by daily capacity."""
    loads = daily_loads(machine.id, items)
    cap = capacity(machine)
    if not loads or cap <= 0:
        return 0.0
    return max(loads.values()) / cap


def is_overloaded(machine: Machine, items: Iterable[ScheduleItem]) -> bool:
    """Check if any day's load exceeds the machine's daily capacity."""
    return peak_load_ratio(machine, items) > 1.0


def utilization(machine: Machine, items: Iterable[ScheduleItem]) -> float:
    """
    Utilization percentage over the days the machine has work.

    Clamped to 100; a machine without work is at 0.
    """
    loads = daily_loads(machine.id, items)
    cap = capacity(machine)
    if not loads or cap <= 0:
        return 0.0
    percent = sum(loads.values()) / (cap * len(loads)) * 100
    return round(min(100.0, percent), 1)


def machine_efficiency(machine_id: str, items: Iterable[ScheduleItem]) -> float | None:
    """
    Live efficiency from recorded execution: allocated over actual minutes.

    Only items with both actual times and an allocated time count. Returns a
    percentage clamped to 100, or None when nothing has been recorded.
    """
    planned = actual = 0.0
    for item in _machine_items(machine_id, items):
        if item.actual_start_time is None or item.actual_end_time is None:
            continue
        elapsed = (item.actual_end_time - item.actual_start_time).total_seconds() / 60
        if elapsed <= 0 or not item.load_minutes:
            continue
        planned += item.load_minutes
        actual += elapsed
    if actual <= 0:
        return None
    return round(min(100.0, planned / actual * 100), 1)


def next_free_slot(
    machine_id: str, items: Iterable[ScheduleItem], default: datetime | None = None
) -> datetime | None:
    """Latest end of the work already on a machine, or ``default`` when idle."""
    ends = [item.effective_end for item in _machine_items(machine_id, items)]
    if not ends:
        return default
    latest = max(ends)
    return latest if default is None else max(latest, default)
