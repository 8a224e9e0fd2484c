"""Data Transfer Objects: plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from pharmstock.domain.model.order import Order
from pharmstock.domain.model.product import Product
from pharmstock.domain.model.stock_movement import StockMovement


@dataclass(frozen=True)
class OrderItemSpec:
    """Input: what the customer asked for (product name + quantity)."""

    product_name: str
    quantity: int


@dataclass(frozen=True)
class OrderLineItemDTO:
    product_id: str
    product_name: str
    quantity: int
    unit_price: str
    line_total: str


@dataclass(frozen=True)
class OrderDTO:
    id: str
    customer_name: str
    status: str
    delivery_status: str
    stock_reduced: bool
    items: list[OrderLineItemDTO]
    total: str
    created_at: str

    @staticmethod
    def from_order(order: Order) -> OrderDTO:
        return OrderDTO(
            id=order.id,  # type: ignore[arg-type]
            customer_name=order.customer_name,
            status=order.status.value,
            delivery_status=order.delivery_status.value,
            stock_reduced=order.stock_reduced,
            items=[
                OrderLineItemDTO(
                    product_id=item.product_id or "",
                    product_name=item.product_name,
                    quantity=item.quantity,
                    unit_price=str(item.unit_price),
                    line_total=str(item.line_total),
                )
                for item in order.items
            ],
            total=str(order.total),
            created_at=order.created_at.strftime("%Y-%m-%d %H:%M UTC"),
        )


@dataclass(frozen=True)
class ProductDTO:
    id: str
    name: str
    price: str
    stock_quantity: int
    min_stock_level: int
    stock_status: str
    expiry_date: str

    @staticmethod
    def from_product(product: Product) -> ProductDTO:
        return ProductDTO(
            id=product.id,
            name=product.name,
            price=str(product.price),
            stock_quantity=product.stock_quantity,
            min_stock_level=product.min_stock_level,
            stock_status=product.stock_status.value,
            expiry_date=product.expiry_date.strftime("%Y-%m-%d") if product.expiry_date else "",
        )


@dataclass(frozen=True)
class MovementDTO:
    id: str
    product_id: str
    product_name: str
    type: str
    quantity: int
    previous_stock: int
    new_stock: int
    reason: str
    reason_code: str
    performed_by_name: str
    timestamp: str
    notes: str = ""
    order_id: str = ""

    @staticmethod
    def from_movement(movement: StockMovement) -> MovementDTO:
        return MovementDTO(
            id=movement.id,
            product_id=movement.product_id,
            product_name=movement.product_name,
            type=movement.type.value,
            quantity=movement.quantity,
            previous_stock=movement.previous_stock,
            new_stock=movement.new_stock,
            reason=movement.reason,
            reason_code=movement.reason_code.value,
            performed_by_name=movement.performed_by_name,
            timestamp=movement.timestamp.strftime("%Y-%m-%d %H:%M:%S UTC"),
            notes=movement.notes,
            order_id=movement.order_id or "",
        )


@dataclass(frozen=True)
class DeliveryResultDTO:
    """Outcome of a delivery status change."""

    order: OrderDTO
    stock_reduced: bool
    validation_errors: list[str] = field(default_factory=list)
    stock_errors: list[str] = field(default_factory=list)
