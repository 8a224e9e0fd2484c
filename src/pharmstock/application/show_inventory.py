"""Application service: Show Inventory use cases (queries)."""

from __future__ import annotations

from dataclasses import dataclass

from pharmstock.application.dto import ProductDTO
from pharmstock.domain.service.inventory_query_service import (
    DEFAULT_EXPIRY_WINDOW_DAYS,
    InventoryQueryService,
)


@dataclass(frozen=True)
class InventoryStatsDTO:
    total_products: int
    total_items: int
    total_value: str
    low_stock_count: int
    out_of_stock_count: int
    expiring_soon_count: int


class ShowInventoryHandler:

    def __init__(self, queries: InventoryQueryService) -> None:
        self._queries = queries

    def stats(self) -> InventoryStatsDTO:
        stats = self._queries.get_stats()
        return InventoryStatsDTO(
            total_products=stats.total_products,
            total_items=stats.total_items,
            total_value=str(stats.total_value),
            low_stock_count=stats.low_stock_count,
            out_of_stock_count=stats.out_of_stock_count,
            expiring_soon_count=stats.expiring_soon_count,
        )

    def low_stock(self) -> list[ProductDTO]:
        return [ProductDTO.from_product(p) for p in self._queries.list_low_stock()]

    def out_of_stock(self) -> list[ProductDTO]:
        return [ProductDTO.from_product(p) for p in self._queries.list_out_of_stock()]

    def expiring(self, days: int = DEFAULT_EXPIRY_WINDOW_DAYS) -> list[ProductDTO]:
        return [ProductDTO.from_product(p) for p in self._queries.list_expiring_soon(days)]
