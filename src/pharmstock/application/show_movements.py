"""Application service: Show Stock Movements use cases (queries)."""

from __future__ import annotations

from pharmstock.application.dto import MovementDTO
from pharmstock.domain.exceptions import EntityNotFoundError
from pharmstock.domain.repository.order_repository import OrderRepository
from pharmstock.domain.service.stock_ledger_service import StockLedgerService


class ShowMovementsHandler:

    def __init__(self, ledger: StockLedgerService) -> None:
        self._ledger = ledger

    def handle(self, product_id: str | None = None, limit: int = 50) -> list[MovementDTO]:
        return [
            MovementDTO.from_movement(m)
            for m in self._ledger.get_movements(product_id, limit)
        ]


class ShowOrderStockHistoryHandler:
    """Movements the stock integration recorded for one order."""

    def __init__(self, ledger: StockLedgerService, order_repo: OrderRepository) -> None:
        self._ledger = ledger
        self._order_repo = order_repo

    def handle(self, order_id: str) -> list[MovementDTO]:
        if self._order_repo.get_by_id(order_id) is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")
        return [MovementDTO.from_movement(m) for m in self._ledger.get_order_movements(order_id)]
