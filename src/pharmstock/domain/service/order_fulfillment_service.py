"""Domain service: Order Fulfillment Integration.

Couples the Order and Product aggregates through the stock ledger. An
order's line items are processed one by one: each item is its own atomic
ledger write, and a failing item never stops the others. Successful
items are not rolled back when a sibling fails; the caller gets one
aggregate error naming every failed item.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace

import structlog

from pharmstock.domain.exceptions import (
    DomainException,
    LineItemFailure,
    PartialFailureError,
    ValidationError,
)
from pharmstock.domain.model.alerts import LowStockAlert
from pharmstock.domain.model.order import Order, OrderLineItem
from pharmstock.domain.model.stock_movement import MovementType, ReasonCode
from pharmstock.domain.port.low_stock_notifier import LowStockNotifier
from pharmstock.domain.repository.product_repository import ProductRepository
from pharmstock.domain.service.stock_ledger_service import StockLedgerService

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class StockValidation:
    valid: bool
    errors: list[str] = field(default_factory=list)


class OrderFulfillmentService:

    def __init__(
        self,
        ledger: StockLedgerService,
        product_repo: ProductRepository,
        notifier: LowStockNotifier,
    ) -> None:
        self._ledger = ledger
        self._product_repo = product_repo
        self._notifier = notifier

    def reduce_stock_for_order(self, order: Order) -> None:
        """Take stock for every line item of a delivered order.

        Low-stock alerts go out for touched products even when some
        items failed, since the successful reductions are permanent.
        """
        if not order.items:
            logger.warning("order_has_no_items", order_id=order.id, action="reduce")
            return

        failures = self._apply_to_items(
            order,
            order.items,
            MovementType.OUT,
            reason=f"Order delivered: {order.reference}",
            reason_code=ReasonCode.ORDER_DELIVERED,
            notes="Automatic stock reduction for delivered order. Product: {name}",
        )
        logger.info(
            "order_stock_reduced",
            order_id=order.id,
            successful=len(order.items) - len(failures),
            failed=len(failures),
        )

        self._notify_low_stock(order.items)

        if failures:
            raise PartialFailureError("reduce stock", failures)

    def restore_stock_for_order(self, order: Order, *, returned: bool = False) -> None:
        """Put back the stock taken for an order that was cancelled or returned.

        Only what the ledger shows as taken for this order and not yet put
        back is restored. Line items whose reduction failed, or that an
        earlier restore already covered, are left alone.
        """
        if not order.items:
            logger.warning("order_has_no_items", order_id=order.id, action="restore")
            return

        items = self._items_to_restore(order)
        if not items:
            logger.info("order_has_nothing_to_restore", order_id=order.id)
            return

        failures = self._apply_to_items(
            order,
            items,
            MovementType.IN,
            reason=f"Order cancelled/returned: {order.reference}",
            reason_code=ReasonCode.ORDER_RETURNED if returned else ReasonCode.ORDER_CANCELLED,
            notes="Stock restored due to order cancellation/return. Product: {name}",
        )
        logger.info(
            "order_stock_restored",
            order_id=order.id,
            successful=len(items) - len(failures),
            failed=len(failures),
        )

        if failures:
            raise PartialFailureError("restore stock", failures)

    def validate_stock_for_delivery(self, order: Order) -> StockValidation:
        """Check that current stock covers every line item.

        Read-only and not atomic with the reduction that follows it:
        concurrent reductions can still deplete stock in between.
        """
        if not order.items:
            return StockValidation(valid=False, errors=["Order has no products"])

        errors: list[str] = []
        for item in order.items:
            if not item.product_id:
                errors.append(f'Product "{item.display_name}" has no product ID')
                continue

            product = self._product_repo.get_by_id(item.product_id)
            if product is None:
                errors.append(f'Product "{item.display_name}" not found in inventory')
                continue

            if product.stock_quantity < item.quantity:
                errors.append(
                    f'Insufficient stock for "{product.name}". '
                    f"Required: {item.quantity}, Available: {product.stock_quantity}"
                )

        return StockValidation(valid=not errors, errors=errors)

    # --- Internal helpers -----------------------------------------------------

    def _apply_to_items(
        self,
        order: Order,
        items: list[OrderLineItem],
        movement_type: MovementType,
        *,
        reason: str,
        reason_code: ReasonCode,
        notes: str,
    ) -> list[LineItemFailure]:
        failures: list[LineItemFailure] = []
        for item in items:
            if item.product_id and item.quantity <= 0:
                logger.warning(
                    "line_item_quantity_skipped",
                    order_id=order.id,
                    product_id=item.product_id,
                    quantity=item.quantity,
                )
                continue
            try:
                if not item.product_id:
                    raise ValidationError(f"Product ID missing for {item.display_name}")
                self._ledger.apply_movement(
                    item.product_id,
                    item.quantity,
                    movement_type,
                    reason,
                    notes.format(name=item.display_name),
                    reason_code=reason_code,
                    order_id=order.id,
                )
            except (DomainException, OSError) as exc:
                logger.error(
                    "line_item_stock_failed",
                    order_id=order.id,
                    product=item.display_name,
                    movement_type=movement_type.value,
                    error=str(exc),
                )
                failures.append(LineItemFailure(item.product_id, item.display_name, exc))
        return failures

    def _items_to_restore(self, order: Order) -> list[OrderLineItem]:
        outstanding: dict[str, int] = {}
        for movement in self._ledger.get_order_movements(order.id):
            if movement.reason_code is ReasonCode.ORDER_DELIVERED:
                delta = movement.quantity
            elif movement.reason_code in (ReasonCode.ORDER_CANCELLED, ReasonCode.ORDER_RETURNED):
                delta = -movement.quantity
            else:
                continue
            outstanding[movement.product_id] = outstanding.get(movement.product_id, 0) + delta

        items: list[OrderLineItem] = []
        for item in order.items:
            taken = min(item.quantity, outstanding.get(item.product_id or "", 0))
            if taken <= 0:
                logger.info(
                    "line_item_not_reduced",
                    order_id=order.id,
                    product=item.display_name,
                )
                continue
            outstanding[item.product_id] -= taken
            items.append(replace(item, quantity=taken))
        return items

    def _notify_low_stock(self, items: list[OrderLineItem]) -> None:
        seen: set[str] = set()
        for item in items:
            if not item.product_id or item.product_id in seen:
                continue
            seen.add(item.product_id)
            try:
                product = self._product_repo.get_by_id(item.product_id)
                if product is not None and product.at_or_below_threshold:
                    self._notifier.notify(LowStockAlert.for_product(product))
            except Exception as exc:
                # Alerts are best-effort; the stock change already happened.
                logger.error(
                    "low_stock_notify_failed",
                    product_id=item.product_id,
                    error=str(exc),
                )
