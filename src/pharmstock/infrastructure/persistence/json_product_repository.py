"""JSON-file-backed implementation of ProductRepository."""

from __future__ import annotations

from decimal import Decimal
from pathlib import Path

from pharmstock.domain.model.product import DEFAULT_MIN_STOCK_LEVEL, Product
from pharmstock.domain.model.value_objects import Money
from pharmstock.domain.repository.product_repository import ProductRepository
from pharmstock.infrastructure.persistence.file_lock import lock_for
from pharmstock.infrastructure.persistence.json_file import (
    dump_dt,
    ensure_file,
    load_dt,
    load_records,
    persist_records,
)


class JsonProductRepository(ProductRepository):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self.lock = lock_for(file_path)
        ensure_file(file_path, self.lock)

    @property
    def file_path(self) -> Path:
        return self._file_path

    # --- ProductRepository interface ------------------------------------------

    def get_by_id(self, product_id: str) -> Product | None:
        return self.load().get(product_id)

    def get_by_name(self, name: str) -> Product | None:
        for product in self.load().values():
            if product.name.lower() == name.lower():
                return product
        return None

    def list_all(self) -> list[Product]:
        return list(self.load().values())

    def save(self, product: Product) -> None:
        with self.lock:
            products = self.load()
            products[product.id] = product
            self.persist(products)

    # --- Serialization helpers ------------------------------------------------

    def load(self) -> dict[str, Product]:
        with self.lock:
            raw = load_records(self._file_path)
        return {item["id"]: self._to_domain(item) for item in raw}

    def persist(self, products: dict[str, Product]) -> None:
        with self.lock:
            persist_records(self._file_path, [self._to_raw(p) for p in products.values()])

    @staticmethod
    def _to_raw(p: Product) -> dict:
        return {
            "id": p.id,
            "name": p.name,
            "price": str(p.price.amount),
            "currency": p.price.currency,
            "stock_quantity": p.stock_quantity,
            "min_stock_level": p.min_stock_level,
            "stock_status": p.stock_status.value,
            "expiry_date": dump_dt(p.expiry_date),
            "last_restocked": dump_dt(p.last_restocked),
            "updated_at": dump_dt(p.updated_at),
            "version": p.version,
        }

    @staticmethod
    def _to_domain(item: dict) -> Product:
        return Product(
            id=item["id"],
            name=item["name"],
            price=Money(Decimal(item["price"]), item.get("currency", "INR")),
            stock_quantity=item.get("stock_quantity", 0),
            min_stock_level=item.get("min_stock_level", DEFAULT_MIN_STOCK_LEVEL),
            expiry_date=load_dt(item.get("expiry_date")),
            last_restocked=load_dt(item.get("last_restocked")),
            updated_at=load_dt(item.get("updated_at")),
            version=item.get("version", 0),
        )
