"""Events handed to collaborators outside the ledger."""

from __future__ import annotations

from dataclasses import dataclass

from pharmstock.domain.model.product import Product


@dataclass(frozen=True)
class LowStockAlert:
    """A product is at or below its reorder threshold."""

    product_id: str
    product_name: str
    current_stock: int
    min_stock_level: int

    @staticmethod
    def for_product(product: Product) -> LowStockAlert:
        return LowStockAlert(
            product_id=product.id,
            product_name=product.name,
            current_stock=product.stock_quantity,
            min_stock_level=product.min_stock_level,
        )

    @property
    def message(self) -> str:
        return f"{self.product_name} is running low. Current stock: {self.current_stock}"
