"""StockMovement: one immutable, attributable change to a product's stock.

Movements form an append-only ledger per product. ``new_stock`` is always
computed from ``previous_stock``, the movement type and the quantity; a
caller can never set it directly.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from pharmstock.domain.exceptions import ValidationError
from pharmstock.domain.model.value_objects import Actor


class MovementType(Enum):
    IN = "in"
    OUT = "out"
    ADJUSTMENT = "adjustment"
    EXPIRED = "expired"
    DAMAGED = "damaged"
    RETURNED = "returned"

    @property
    def adds_stock(self) -> bool:
        return self in (MovementType.IN, MovementType.RETURNED)

    @property
    def removes_stock(self) -> bool:
        return self in (MovementType.OUT, MovementType.EXPIRED, MovementType.DAMAGED)

    def validate_quantity(self, quantity: int) -> None:
        if not isinstance(quantity, int) or isinstance(quantity, bool):
            raise ValidationError(
                f"Quantity must be an integer, got {type(quantity).__name__}"
            )
        if self is MovementType.ADJUSTMENT:
            if quantity < 0:
                raise ValidationError("Adjustment target cannot be negative")
        elif quantity <= 0:
            raise ValidationError(f"Quantity for '{self.value}' movement must be positive")

    def apply(self, previous_stock: int, quantity: int) -> int:
        """Compute the stock level after this movement.

        Reductions clamp at zero instead of failing.
        """
        self.validate_quantity(quantity)
        if self.adds_stock:
            return previous_stock + quantity
        if self.removes_stock:
            return max(0, previous_stock - quantity)
        return quantity


class ReasonCode(Enum):
    """Machine-readable reason, kept apart from the free-text reason."""

    MANUAL = "manual"
    ORDER_DELIVERED = "order_delivered"
    ORDER_CANCELLED = "order_cancelled"
    ORDER_RETURNED = "order_returned"
    STOCK_COUNT = "stock_count"
    EXPIRY_WRITE_OFF = "expiry_write_off"
    DAMAGE_WRITE_OFF = "damage_write_off"

    @staticmethod
    def default_for(movement_type: MovementType) -> ReasonCode:
        return {
            MovementType.ADJUSTMENT: ReasonCode.STOCK_COUNT,
            MovementType.EXPIRED: ReasonCode.EXPIRY_WRITE_OFF,
            MovementType.DAMAGED: ReasonCode.DAMAGE_WRITE_OFF,
        }.get(movement_type, ReasonCode.MANUAL)


@dataclass(frozen=True)
class StockMovement:
    """Immutable ledger entry.

    Use ``StockMovement.record()`` for new movements. The plain
    constructor is for repositories reconstituting stored entries.
    """

    id: str
    product_id: str
    product_name: str
    type: MovementType
    quantity: int
    reason: str
    reason_code: ReasonCode
    performed_by: str
    performed_by_name: str
    previous_stock: int
    new_stock: int
    timestamp: datetime
    notes: str = ""
    order_id: str | None = None

    @property
    def delta(self) -> int:
        return self.new_stock - self.previous_stock

    @staticmethod
    def record(
        *,
        product_id: str,
        product_name: str,
        movement_type: MovementType,
        quantity: int,
        previous_stock: int,
        reason: str,
        actor: Actor,
        timestamp: datetime,
        reason_code: ReasonCode | None = None,
        notes: str | None = None,
        order_id: str | None = None,
    ) -> StockMovement:
        if not reason or not reason.strip():
            raise ValidationError("Movement reason is required")
        new_stock = movement_type.apply(previous_stock, quantity)
        return StockMovement(
            id=uuid.uuid4().hex,
            product_id=product_id,
            product_name=product_name,
            type=movement_type,
            quantity=quantity,
            reason=reason.strip(),
            reason_code=reason_code or ReasonCode.default_for(movement_type),
            performed_by=actor.actor_id,
            performed_by_name=actor.display_name,
            previous_stock=previous_stock,
            new_stock=new_stock,
            timestamp=timestamp,
            notes=notes or "",
            order_id=order_id,
        )
