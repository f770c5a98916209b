"""Purchase (sales) order entity."""

from datetime import date

from pydantic import Field

from ...shared.base import Entity
from ..value_objects.enums import OrderStatus, Priority


class PurchaseOrder(Entity):
    """
    A customer order for a quantity of one product.

    ``delivery_date`` is the promised date; ``deadline`` is the optional
    hard limit past which a late order becomes critical.
    """

    order_number: str = ""
    product_id: str
    quantity: int = Field(gt=0)
    delivery_date: date
    deadline: date | None = None
    priority: Priority = Priority.MEDIUM
    status: OrderStatus = OrderStatus.PENDING
    customer: str = ""

    @property
    def is_schedulable(self) -> bool:
        return self.status.is_schedulable

    @property
    def scheduling_key(self) -> tuple[int, date, str]:
        """Sort key: priority high first, then earliest delivery, then id."""
        return (-self.priority.numeric_value, self.delivery_date, self.id)

    @property
    def display_name(self) -> str:
        return self.order_number or self.id

    def with_delivery_date(self, delivery_date: date) -> "PurchaseOrder":
        """Copy of the order promising a new delivery date."""
        return self.with_changes(delivery_date=delivery_date)
