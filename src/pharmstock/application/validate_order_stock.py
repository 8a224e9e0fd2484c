"""Application service: Validate Order Stock use case (query)."""

from __future__ import annotations

from pharmstock.domain.exceptions import EntityNotFoundError
from pharmstock.domain.repository.order_repository import OrderRepository
from pharmstock.domain.service.order_fulfillment_service import (
    OrderFulfillmentService,
    StockValidation,
)


class ValidateOrderStockHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        fulfillment: OrderFulfillmentService,
    ) -> None:
        self._order_repo = order_repo
        self._fulfillment = fulfillment

    def handle(self, order_id: str) -> StockValidation:
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")
        return self._fulfillment.validate_stock_for_delivery(order)
