"""JSON-file-backed implementation of StockLedgerRepository.

A commit rewrites ``products.json`` and then ``stock_movements.json``
while holding both file locks, which other processes honour too. If the
second write fails the first is put back, so a product's stock and its
movement land together or not at all.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable

from pharmstock.domain.exceptions import EntityNotFoundError, StaleStockError
from pharmstock.domain.model.product import Product
from pharmstock.domain.model.stock_movement import MovementType, ReasonCode, StockMovement
from pharmstock.domain.repository.stock_ledger_repository import StockLedgerRepository
from pharmstock.infrastructure.persistence.file_lock import lock_for
from pharmstock.infrastructure.persistence.json_file import (
    dump_dt,
    ensure_file,
    load_dt,
    load_records,
    persist_records,
)
from pharmstock.infrastructure.persistence.json_product_repository import (
    JsonProductRepository,
)


class JsonStockLedgerRepository(StockLedgerRepository):

    def __init__(self, products: JsonProductRepository, file_path: Path) -> None:
        self._products = products
        self._file_path = file_path
        self._lock = lock_for(file_path)
        ensure_file(file_path, self._lock)

    # --- StockLedgerRepository interface --------------------------------------

    def commit(self, product: Product, expected_version: int, movement: StockMovement) -> None:
        # Lock order: products, then movements.
        with self._products.lock, self._lock:
            products = self._products.load()
            stored = products.get(product.id)
            if stored is None:
                raise EntityNotFoundError(f"Product with ID '{product.id}' not found")
            if stored.version != expected_version:
                raise StaleStockError(product.id, expected_version, stored.version)

            previous_products = load_records(self._products.file_path)
            products[product.id] = product
            self._products.persist(products)

            records = self._load_raw()
            records.append(self._to_raw(movement))
            try:
                persist_records(self._file_path, records)
            except OSError:
                persist_records(self._products.file_path, previous_products)
                raise

    def list_movements(self, product_id: str | None = None, limit: int = 50) -> list[StockMovement]:
        movements = self._movements(
            lambda raw: product_id is None or raw["product_id"] == product_id
        )
        return _newest_first(movements)[:limit]

    def history(self, product_id: str) -> list[StockMovement]:
        movements = self._movements(lambda raw: raw["product_id"] == product_id)
        movements.sort(key=lambda m: m.timestamp)
        return movements

    def list_for_order(self, order_id: str) -> list[StockMovement]:
        return _newest_first(self._movements(lambda raw: raw.get("order_id") == order_id))

    # --- Serialization --------------------------------------------------------

    def _movements(self, keep: Callable[[dict], bool]) -> list[StockMovement]:
        return [self._to_domain(raw) for raw in self._load_raw() if keep(raw)]

    @staticmethod
    def _to_raw(m: StockMovement) -> dict:
        return {
            "id": m.id,
            "product_id": m.product_id,
            "product_name": m.product_name,
            "type": m.type.value,
            "quantity": m.quantity,
            "reason": m.reason,
            "reason_code": m.reason_code.value,
            "notes": m.notes,
            "order_id": m.order_id,
            "performed_by": m.performed_by,
            "performed_by_name": m.performed_by_name,
            "previous_stock": m.previous_stock,
            "new_stock": m.new_stock,
            "timestamp": dump_dt(m.timestamp),
        }

    @staticmethod
    def _to_domain(raw: dict) -> StockMovement:
        return StockMovement(
            id=raw["id"],
            product_id=raw["product_id"],
            product_name=raw["product_name"],
            type=MovementType(raw["type"]),
            quantity=raw["quantity"],
            reason=raw["reason"],
            reason_code=ReasonCode(raw.get("reason_code", ReasonCode.MANUAL.value)),
            notes=raw.get("notes", ""),
            order_id=raw.get("order_id"),
            performed_by=raw["performed_by"],
            performed_by_name=raw["performed_by_name"],
            previous_stock=raw["previous_stock"],
            new_stock=raw["new_stock"],
            timestamp=load_dt(raw["timestamp"]),
        )

    # --- File helpers ---------------------------------------------------------

    def _load_raw(self) -> list[dict]:
        with self._lock:
            return load_records(self._file_path)


def _newest_first(movements: list[StockMovement]) -> list[StockMovement]:
    # Ties keep reverse insertion order (sort is stable).
    movements.reverse()
    movements.sort(key=lambda m: m.timestamp, reverse=True)
    return movements
