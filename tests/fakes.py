"""In-memory fake repositories and collaborators for testing.

These implement the same abstract interfaces as the JSON implementations
but keep everything in dicts. No file I/O, no side effects. The stores
hand out copies and guard writes with a lock, like the real ones, so
concurrency tests exercise the same compare-and-swap contract.
"""

from __future__ import annotations

import threading
from dataclasses import replace
from datetime import datetime, timedelta, timezone

from pharmstock.domain.exceptions import EntityNotFoundError, StaleStockError
from pharmstock.domain.model.alerts import LowStockAlert
from pharmstock.domain.model.order import Order
from pharmstock.domain.model.product import Product
from pharmstock.domain.model.stock_movement import StockMovement
from pharmstock.domain.model.value_objects import Actor
from pharmstock.domain.port.identity_provider import IdentityProvider
from pharmstock.domain.port.low_stock_notifier import LowStockNotifier
from pharmstock.domain.repository.order_repository import OrderRepository
from pharmstock.domain.repository.product_repository import ProductRepository
from pharmstock.domain.repository.stock_ledger_repository import StockLedgerRepository


class FakeProductRepository(ProductRepository):

    def __init__(self, products: list[Product] | None = None) -> None:
        self.lock = threading.RLock()
        self._store: dict[str, Product] = {}
        for p in products or []:
            self._store[p.id] = p

    def get_by_id(self, product_id: str) -> Product | None:
        with self.lock:
            product = self._store.get(product_id)
            return replace(product) if product is not None else None

    def get_by_name(self, name: str) -> Product | None:
        with self.lock:
            for p in self._store.values():
                if p.name.lower() == name.lower():
                    return replace(p)
        return None

    def list_all(self) -> list[Product]:
        with self.lock:
            return [replace(p) for p in self._store.values()]

    def save(self, product: Product) -> None:
        with self.lock:
            self._store[product.id] = replace(product)

    def stored(self, product_id: str) -> Product | None:
        """Current stored record, bypassing any test hooks on get_by_id."""
        with self.lock:
            product = self._store.get(product_id)
            return replace(product) if product is not None else None


class FakeStockLedgerRepository(StockLedgerRepository):

    def __init__(self, products: FakeProductRepository) -> None:
        self._products = products
        self.movements: list[StockMovement] = []
        self.fail_next_commit: Exception | None = None

    def commit(self, product: Product, expected_version: int, movement: StockMovement) -> None:
        with self._products.lock:
            if self.fail_next_commit is not None:
                exc, self.fail_next_commit = self.fail_next_commit, None
                raise exc
            stored = self._products.stored(product.id)
            if stored is None:
                raise EntityNotFoundError(f"Product with ID '{product.id}' not found")
            if stored.version != expected_version:
                raise StaleStockError(product.id, expected_version, stored.version)
            self._products.save(product)
            self.movements.append(movement)

    def list_movements(self, product_id: str | None = None, limit: int = 50) -> list[StockMovement]:
        with self._products.lock:
            selected = [m for m in self.movements if product_id is None or m.product_id == product_id]
        selected.reverse()
        selected.sort(key=lambda m: m.timestamp, reverse=True)
        return selected[:limit]

    def history(self, product_id: str) -> list[StockMovement]:
        with self._products.lock:
            selected = [m for m in self.movements if m.product_id == product_id]
        selected.sort(key=lambda m: m.timestamp)
        return selected

    def list_for_order(self, order_id: str) -> list[StockMovement]:
        with self._products.lock:
            selected = [m for m in self.movements if m.order_id == order_id]
        selected.reverse()
        selected.sort(key=lambda m: m.timestamp, reverse=True)
        return selected


class FakeOrderRepository(OrderRepository):

    def __init__(self) -> None:
        self._store: dict[str, Order] = {}
        self._next_id = 1

    def next_id(self) -> str:
        return str(self._next_id)

    def get_by_id(self, order_id: str) -> Order | None:
        return self._store.get(order_id)

    def save(self, order: Order) -> None:
        if order.id is None:
            order.id = self.next_id()
            self._next_id += 1
        self._store[order.id] = order


class FakeIdentityProvider(IdentityProvider):

    def __init__(self, actor: Actor | None = Actor("u-1", "Asha Pharmacist")) -> None:
        self.actor = actor

    def current_actor(self) -> Actor | None:
        return self.actor


class RecordingNotifier(LowStockNotifier):

    def __init__(self, fail: bool = False) -> None:
        self.alerts: list[LowStockAlert] = []
        self._fail = fail

    def notify(self, alert: LowStockAlert) -> None:
        if self._fail:
            raise RuntimeError("notification backend unavailable")
        self.alerts.append(alert)


class TickingClock:
    """Deterministic clock: each call is one second after the previous."""

    def __init__(self, start: datetime | None = None) -> None:
        self._now = start or datetime(2026, 1, 1, 9, 0, tzinfo=timezone.utc)
        self._lock = threading.Lock()

    def __call__(self) -> datetime:
        with self._lock:
            self._now += timedelta(seconds=1)
            return self._now
