"""Application service: Add Product use case (catalog side)."""

from __future__ import annotations

from datetime import datetime, timezone

from pharmstock.domain.exceptions import ValidationError
from pharmstock.domain.model.product import DEFAULT_MIN_STOCK_LEVEL, Product
from pharmstock.domain.model.value_objects import Money
from pharmstock.domain.repository.product_repository import ProductRepository


class AddProductHandler:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    def handle(
        self,
        name: str,
        price: str,
        stock_quantity: int = 0,
        min_stock_level: int = DEFAULT_MIN_STOCK_LEVEL,
        expiry_date: datetime | None = None,
    ) -> Product:
        """Add a new product to the catalog with its opening stock."""
        if not name or not name.strip():
            raise ValidationError("Product name is required")

        existing = self._product_repo.get_by_name(name.strip())
        if existing is not None:
            raise ValidationError(f"Product '{name}' already exists")

        # Auto-assign ID based on existing products
        numeric_ids = [int(p.id) for p in self._product_repo.list_all() if p.id.isdigit()]
        next_id = str(max(numeric_ids, default=0) + 1)

        if expiry_date is not None and expiry_date.tzinfo is None:
            expiry_date = expiry_date.replace(tzinfo=timezone.utc)

        product = Product(
            id=next_id,
            name=name.strip(),
            price=Money.of(price),
            stock_quantity=stock_quantity,
            min_stock_level=min_stock_level,
            expiry_date=expiry_date,
        )
        self._product_repo.save(product)
        return product
