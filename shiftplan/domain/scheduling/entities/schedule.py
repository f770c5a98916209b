"""
Schedule Book

Arena of schedule items keyed by id. Items reference orders and machines by
id only; the per-machine and per-order views are rebuilt from the arena, so
hosts apply a regenerated schedule by replacing it whole.
"""

from collections.abc import Iterable, Iterator

from ...shared.exceptions import ScheduleItemNotFoundError
from .schedule_item import ScheduleItem


class ScheduleBook:
    """Keyed collection of schedule items with machine and order views."""

    def __init__(self, items: Iterable[ScheduleItem] = ()) -> None:
        self._items: dict[str, ScheduleItem] = {}
        self._by_machine: dict[str, list[str]] = {}
        self._by_order: dict[str, list[str]] = {}
        self.replace_all(items)

    def replace_all(self, items: Iterable[ScheduleItem]) -> None:
        """Replace every item in the book."""
        self._items = {item.id: item for item in items}
        self._reindex()

    def upsert(self, item: ScheduleItem) -> None:
        """Add an item, or replace the item with the same id."""
        self._items[item.id] = item
        self._reindex()

    def remove(self, item_id: str) -> ScheduleItem:
        """
        Remove an item from the book.

        Raises:
            ScheduleItemNotFoundError: If no item has this id
        """
        try:
            item = self._items.pop(item_id)
        except KeyError:
            raise ScheduleItemNotFoundError(item_id) from None
        self._reindex()
        return item

    def get(self, item_id: str) -> ScheduleItem:
        """
        Get an item by id.

        Raises:
            ScheduleItemNotFoundError: If no item has this id
        """
        try:
            return self._items[item_id]
        except KeyError:
            raise ScheduleItemNotFoundError(item_id) from None

    def find(self, item_id: str) -> ScheduleItem | None:
        return self._items.get(item_id)

    def for_machine(self, machine_id: str) -> list[ScheduleItem]:
        """Items on a machine, ordered by start."""
        return [self._items[i] for i in self._by_machine.get(machine_id, [])]

    def for_order(self, po_id: str) -> list[ScheduleItem]:
        """Items of an order, ordered by process step."""
        return [self._items[i] for i in self._by_order.get(po_id, [])]

    @property
    def machine_ids(self) -> list[str]:
        return sorted(self._by_machine)

    @property
    def order_ids(self) -> list[str]:
        return sorted(self._by_order)

    def items(self) -> list[ScheduleItem]:
        """All items ordered by start, then id."""
        return sorted(self._items.values(), key=lambda i: (i.start_date, i.id))

    def _reindex(self) -> None:
        by_machine: dict[str, list[ScheduleItem]] = {}
        by_order: dict[str, list[ScheduleItem]] = {}
        for item in self._items.values():
            by_machine.setdefault(item.machine_id, []).append(item)
            by_order.setdefault(item.po_id, []).append(item)

        self._by_machine = {
            machine_id: [i.id for i in sorted(group, key=lambda i: (i.start_date, i.id))]
            for machine_id, group in by_machine.items()
        }
        self._by_order = {
            po_id: [i.id for i in sorted(group, key=lambda i: i.process_step)]
            for po_id, group in by_order.items()
        }

    def __iter__(self) -> Iterator[ScheduleItem]:
        return iter(self.items())

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._items
