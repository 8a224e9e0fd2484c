"""Application service: Update Delivery Status use case.

Moving an order into ``delivered`` takes its stock:

1. Validate that stock covers the order. By default a shortfall is only
   logged (reductions clamp at zero); in strict mode it refuses the
   transition with InsufficientStockError.
2. Persist the new delivery status.
3. Reduce stock item by item. A partial failure is logged and reported
   in the result rather than raised, because the order is already
   delivered and the successful reductions stand.

Any other transition just persists the order.
"""

from __future__ import annotations

import structlog

from pharmstock.application.dto import DeliveryResultDTO, OrderDTO
from pharmstock.domain.exceptions import (
    EntityNotFoundError,
    InsufficientStockError,
    PartialFailureError,
)
from pharmstock.domain.model.order import DeliveryStatus
from pharmstock.domain.repository.order_repository import OrderRepository
from pharmstock.domain.service.order_fulfillment_service import OrderFulfillmentService

logger = structlog.get_logger(__name__)


class UpdateDeliveryStatusHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        fulfillment: OrderFulfillmentService,
        strict_validation: bool = False,
    ) -> None:
        self._order_repo = order_repo
        self._fulfillment = fulfillment
        self._strict_validation = strict_validation

    def handle(self, order_id: str, new_status: DeliveryStatus) -> DeliveryResultDTO:
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")

        validation_errors: list[str] = []
        if new_status == DeliveryStatus.DELIVERED and order.delivery_status != DeliveryStatus.DELIVERED:
            validation = self._fulfillment.validate_stock_for_delivery(order)
            if not validation.valid:
                logger.warning(
                    "stock_validation_failed",
                    order_id=order.id,
                    errors=validation.errors,
                )
                if self._strict_validation:
                    raise InsufficientStockError(validation.errors)
                validation_errors = validation.errors

        is_being_delivered = order.change_delivery_status(new_status)
        self._order_repo.save(order)

        if not is_being_delivered:
            return DeliveryResultDTO(order=OrderDTO.from_order(order), stock_reduced=False)

        stock_errors: list[str] = []
        try:
            self._fulfillment.reduce_stock_for_order(order)
        except PartialFailureError as exc:
            logger.error("stock_reduction_failed", order_id=order.id, error=str(exc))
            stock_errors = [str(f) for f in exc.failures]

        order.stock_reduced = True
        self._order_repo.save(order)

        return DeliveryResultDTO(
            order=OrderDTO.from_order(order),
            stock_reduced=True,
            validation_errors=validation_errors,
            stock_errors=stock_errors,
        )
