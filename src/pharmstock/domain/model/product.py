"""Product aggregate (the stock-relevant subset of the catalog entry).

Products are created by the catalog with an initial stock. From then on
``stock_quantity`` is changed only by the stock ledger, which hands back a
new Product via ``with_stock()`` rather than mutating the one it read.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from enum import Enum

from pharmstock.domain.exceptions import ValidationError
from pharmstock.domain.model.value_objects import Money

DEFAULT_MIN_STOCK_LEVEL = 10


class StockStatus(Enum):
    IN_STOCK = "in-stock"
    LOW_STOCK = "low-stock"
    OUT_OF_STOCK = "out-of-stock"

    @staticmethod
    def classify(quantity: int, min_stock_level: int | None) -> StockStatus:
        """Derive the status for a stock level.

        ``0`` is out of stock, anything up to and including the threshold
        is low stock.
        """
        threshold = DEFAULT_MIN_STOCK_LEVEL if min_stock_level is None else min_stock_level
        if quantity == 0:
            return StockStatus.OUT_OF_STOCK
        if quantity <= threshold:
            return StockStatus.LOW_STOCK
        return StockStatus.IN_STOCK


@dataclass
class Product:
    """A product in the pharmacy catalog.

    Invariant: ``stock_quantity`` is never negative. ``version`` goes up by
    one with every ledger write and is what concurrent writers compare.
    """

    id: str
    name: str
    price: Money
    stock_quantity: int = 0
    min_stock_level: int = DEFAULT_MIN_STOCK_LEVEL
    expiry_date: datetime | None = None
    last_restocked: datetime | None = None
    updated_at: datetime | None = None
    version: int = 0

    def __post_init__(self) -> None:
        if not isinstance(self.stock_quantity, int) or self.stock_quantity < 0:
            raise ValidationError(
                f"Stock quantity for {self.name} must be a non-negative integer"
            )
        if self.min_stock_level < 0:
            raise ValidationError("Minimum stock level cannot be negative")

    # --- Derived state --------------------------------------------------------

    @property
    def stock_status(self) -> StockStatus:
        return StockStatus.classify(self.stock_quantity, self.min_stock_level)

    @property
    def is_low_stock(self) -> bool:
        return self.stock_status == StockStatus.LOW_STOCK

    @property
    def is_out_of_stock(self) -> bool:
        return self.stock_quantity == 0

    @property
    def at_or_below_threshold(self) -> bool:
        """True when the product is eligible for a low-stock alert."""
        return self.stock_quantity <= self.min_stock_level

    @property
    def stock_value(self) -> Money:
        return self.price * self.stock_quantity

    def expires_within(self, now: datetime, days: int) -> bool:
        """True if the expiry date falls in ``(now, now + days]``."""
        if self.expiry_date is None:
            return False
        return now < self.expiry_date <= now + timedelta(days=days)

    # --- Ledger support -------------------------------------------------------

    def with_stock(self, new_stock: int, at: datetime, restocked: bool = False) -> Product:
        """Return a copy carrying the new stock level."""
        return replace(
            self,
            stock_quantity=new_stock,
            updated_at=at,
            last_restocked=at if restocked else self.last_restocked,
            version=self.version + 1,
        )
