"""Abstract repository for the stock ledger.

The one write operation pairs the product's new stock with the movement
that explains it, so the two can never drift apart.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from pharmstock.domain.model.product import Product
from pharmstock.domain.model.stock_movement import StockMovement


class StockLedgerRepository(ABC):

    @abstractmethod
    def commit(self, product: Product, expected_version: int, movement: StockMovement) -> None:
        """Atomically store ``product``'s stock fields and append ``movement``.

        Raises StaleStockError (and writes nothing) if the stored product
        is no longer at ``expected_version``. Raises EntityNotFoundError
        if the product has disappeared.
        """

    @abstractmethod
    def list_movements(self, product_id: str | None = None, limit: int = 50) -> list[StockMovement]:
        """Return up to ``limit`` movements, newest first."""

    @abstractmethod
    def history(self, product_id: str) -> list[StockMovement]:
        """Return every movement of one product, oldest first."""

    @abstractmethod
    def list_for_order(self, order_id: str) -> list[StockMovement]:
        """Return every movement recorded for one order, newest first."""
