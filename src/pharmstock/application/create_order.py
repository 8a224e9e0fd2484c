"""Application service: Create Order use case.

Stands in for the order-management side so orders exist for the stock
integration to react to. Resolves product names and snapshots prices.
"""

from __future__ import annotations

from pharmstock.application.dto import OrderDTO, OrderItemSpec
from pharmstock.domain.exceptions import EntityNotFoundError
from pharmstock.domain.model.order import Order, OrderLineItem
from pharmstock.domain.repository.order_repository import OrderRepository
from pharmstock.domain.repository.product_repository import ProductRepository


class CreateOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        product_repo: ProductRepository,
    ) -> None:
        self._order_repo = order_repo
        self._product_repo = product_repo

    def handle(self, customer_name: str, item_specs: list[OrderItemSpec]) -> OrderDTO:
        line_items: list[OrderLineItem] = []

        for spec in item_specs:
            product = self._product_repo.get_by_name(spec.product_name)
            if product is None:
                raise EntityNotFoundError(
                    f"Product not found: '{spec.product_name}'"
                )

            line_items.append(
                OrderLineItem(
                    product_id=product.id,
                    product_name=product.name,
                    quantity=spec.quantity,
                    unit_price=product.price,  # <-- price snapshot
                )
            )

        order = Order.create(customer_name=customer_name, items=line_items)
        self._order_repo.save(order)
        return OrderDTO.from_order(order)
