"""JSON-file-backed implementation of OrderRepository."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from pathlib import Path

from pharmstock.domain.model.order import DeliveryStatus, Order, OrderLineItem, OrderStatus
from pharmstock.domain.model.value_objects import Money
from pharmstock.domain.repository.order_repository import OrderRepository
from pharmstock.infrastructure.persistence.file_lock import lock_for
from pharmstock.infrastructure.persistence.json_file import (
    ensure_file,
    load_records,
    persist_records,
)


class JsonOrderRepository(OrderRepository):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._lock = lock_for(file_path)
        ensure_file(file_path, self._lock)

    # --- OrderRepository interface --------------------------------------------

    def next_id(self) -> str:
        numeric = [int(o["id"]) for o in self._load_raw() if str(o["id"]).isdigit()]
        return str(max(numeric, default=0) + 1)

    def get_by_id(self, order_id: str) -> Order | None:
        for raw in self._load_raw():
            if raw["id"] == order_id:
                return self._to_domain(raw)
        return None

    def save(self, order: Order) -> None:
        with self._lock:
            orders = self._load_raw()

            if order.id is None:
                order.id = self.next_id()

            # Upsert: replace if exists, otherwise append
            replaced = False
            for i, raw in enumerate(orders):
                if raw["id"] == order.id:
                    orders[i] = self._to_raw(order)
                    replaced = True
                    break
            if not replaced:
                orders.append(self._to_raw(order))

            persist_records(self._file_path, orders)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(order: Order) -> dict:
        return {
            "id": order.id,
            "customer_name": order.customer_name,
            "status": order.status.value,
            "delivery_status": order.delivery_status.value,
            "stock_reduced": order.stock_reduced,
            "created_at": order.created_at.isoformat(),
            "items": [
                {
                    "product_id": item.product_id,
                    "product_name": item.product_name,
                    "quantity": item.quantity,
                    "unit_price": str(item.unit_price.amount),
                    "currency": item.unit_price.currency,
                }
                for item in order.items
            ],
        }

    @staticmethod
    def _to_domain(raw: dict) -> Order:
        items = [
            OrderLineItem(
                product_id=i.get("product_id"),
                product_name=i.get("product_name", ""),
                quantity=i["quantity"],
                unit_price=Money(Decimal(i["unit_price"]), i.get("currency", "INR")),
            )
            for i in raw["items"]
        ]
        return Order(
            id=raw["id"],
            customer_name=raw["customer_name"],
            items=items,
            delivery_status=DeliveryStatus(raw.get("delivery_status", "pending")),
            status=OrderStatus(raw.get("status", "active")),
            stock_reduced=raw.get("stock_reduced", False),
            created_at=datetime.fromisoformat(raw["created_at"]),
        )

    # --- File helpers ---------------------------------------------------------

    def _load_raw(self) -> list[dict]:
        with self._lock:
            return load_records(self._file_path)
