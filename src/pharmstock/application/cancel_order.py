"""Application service: Cancel / Return Order use case.

If delivery stock had been taken for the order it is put back. The order
is closed first; a restoration that partly fails still leaves the order
closed and surfaces the aggregate error to the caller.
"""

from __future__ import annotations

from pharmstock.application.dto import OrderDTO
from pharmstock.domain.exceptions import EntityNotFoundError
from pharmstock.domain.repository.order_repository import OrderRepository
from pharmstock.domain.service.order_fulfillment_service import OrderFulfillmentService


class CancelOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        fulfillment: OrderFulfillmentService,
    ) -> None:
        self._order_repo = order_repo
        self._fulfillment = fulfillment

    def handle(self, order_id: str, returned: bool = False) -> OrderDTO:
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")

        if returned:
            order.mark_returned()
        else:
            order.cancel()

        restore = order.stock_reduced
        order.stock_reduced = False
        self._order_repo.save(order)

        if restore:
            self._fulfillment.restore_stock_for_order(order, returned=returned)

        return OrderDTO.from_order(order)
