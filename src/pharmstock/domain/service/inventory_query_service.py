"""Domain service: Inventory queries (read side).

Everything is recomputed from a full product scan on every call. That is
fine for catalogs in the low thousands of products.
"""

from __future__ import annotations

from dataclasses import dataclass

from pharmstock.domain.clock import Clock, utc_now
from pharmstock.domain.exceptions import InventoryQueryError
from pharmstock.domain.model.product import Product
from pharmstock.domain.model.value_objects import Money
from pharmstock.domain.repository.product_repository import ProductRepository

DEFAULT_EXPIRY_WINDOW_DAYS = 30


@dataclass(frozen=True)
class InventoryStats:
    total_products: int
    total_items: int
    total_value: Money
    low_stock_count: int
    out_of_stock_count: int
    expiring_soon_count: int


class InventoryQueryService:

    def __init__(self, product_repo: ProductRepository, clock: Clock = utc_now) -> None:
        self._product_repo = product_repo
        self._clock = clock

    def list_low_stock(self) -> list[Product]:
        return [p for p in self._all_products() if p.is_low_stock]

    def list_out_of_stock(self) -> list[Product]:
        return [p for p in self._all_products() if p.is_out_of_stock]

    def list_expiring_soon(self, days_threshold: int = DEFAULT_EXPIRY_WINDOW_DAYS) -> list[Product]:
        """Products expiring after now and within ``days_threshold`` days, soonest first."""
        return self._expiring(self._all_products(), days_threshold)

    def get_stats(self) -> InventoryStats:
        products = self._all_products()

        total_value: Money | None = None
        for p in products:
            total_value = p.stock_value if total_value is None else total_value + p.stock_value

        return InventoryStats(
            total_products=len(products),
            total_items=sum(p.stock_quantity for p in products),
            total_value=total_value or Money.zero(),
            low_stock_count=sum(1 for p in products if p.is_low_stock),
            out_of_stock_count=sum(1 for p in products if p.is_out_of_stock),
            expiring_soon_count=len(self._expiring(products, DEFAULT_EXPIRY_WINDOW_DAYS)),
        )

    # --- Internal helpers -----------------------------------------------------

    def _expiring(self, products: list[Product], days: int) -> list[Product]:
        now = self._clock()
        expiring = [p for p in products if p.expires_within(now, days)]
        return sorted(expiring, key=lambda p: p.expiry_date)

    def _all_products(self) -> list[Product]:
        try:
            return self._product_repo.list_all()
        except (OSError, ValueError, KeyError) as exc:
            raise InventoryQueryError(f"Failed to fetch products: {exc}") from exc
