"""Order aggregate, as seen by the stock ledger.

The order-management side owns the order lifecycle; stock only reacts to
two transitions: becoming ``delivered`` and being cancelled or returned
after delivery stock was taken.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum

from pharmstock.domain.exceptions import ValidationError
from pharmstock.domain.model.value_objects import Money


class DeliveryStatus(Enum):
    PENDING = "pending"
    PACKING = "packing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"


class OrderStatus(Enum):
    ACTIVE = "active"
    CANCELLED = "cancelled"
    RETURNED = "returned"


@dataclass(frozen=True)
class OrderLineItem:
    """Price snapshot of a product at order time.

    ``product_id`` may be empty for items whose catalog reference was lost
    upstream; stock operations report those as failed items.
    """

    product_id: str | None
    product_name: str
    quantity: int
    unit_price: Money

    @property
    def display_name(self) -> str:
        return self.product_name or self.product_id or "unknown product"

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity


MAX_LINE_ITEMS = 50


@dataclass
class Order:
    """Aggregate root for customer orders.

    Use the ``Order.create()`` factory for new orders. The ``__init__``
    is intentionally simple so the repository can reconstitute persisted
    orders without re-validating.
    """

    id: str | None
    customer_name: str
    items: list[OrderLineItem]
    delivery_status: DeliveryStatus = DeliveryStatus.PENDING
    status: OrderStatus = OrderStatus.ACTIVE
    stock_reduced: bool = False
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def create(customer_name: str, items: list[OrderLineItem]) -> Order:
        if not customer_name or not customer_name.strip():
            raise ValidationError("Customer name is required")
        if not items:
            raise ValidationError("Order must contain at least one item")
        if len(items) > MAX_LINE_ITEMS:
            raise ValidationError(f"Maximum {MAX_LINE_ITEMS} items per order")
        for item in items:
            if item.quantity <= 0:
                raise ValidationError(f"Quantity for {item.display_name} must be positive")
        return Order(id=None, customer_name=customer_name.strip(), items=list(items))

    # --- State transitions ----------------------------------------------------

    def change_delivery_status(self, new_status: DeliveryStatus) -> bool:
        """Move to ``new_status``.

        Returns True when this is a transition *into* ``delivered``,
        which is the signal to take stock.
        """
        if self.status != OrderStatus.ACTIVE:
            raise ValidationError(
                f"Cannot change delivery status of a {self.status.value} order"
            )
        is_being_delivered = (
            new_status == DeliveryStatus.DELIVERED
            and self.delivery_status != DeliveryStatus.DELIVERED
        )
        self.delivery_status = new_status
        return is_being_delivered

    def cancel(self) -> None:
        self._close(OrderStatus.CANCELLED)

    def mark_returned(self) -> None:
        if self.delivery_status != DeliveryStatus.DELIVERED:
            raise ValidationError("Only delivered orders can be returned")
        self._close(OrderStatus.RETURNED)

    # --- Computed properties --------------------------------------------------

    @property
    def total(self) -> Money:
        result = Money(Decimal("0.00"))
        for item in self.items:
            result = result + item.line_total
        return result

    @property
    def reference(self) -> str:
        return f"#{self.id}"

    # --- Internal helpers -----------------------------------------------------

    def _close(self, status: OrderStatus) -> None:
        if self.status != OrderStatus.ACTIVE:
            raise ValidationError(f"Order is already {self.status.value}")
        self.status = status
