"""Composition root: wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from pharmstock.domain.service.inventory_query_service import InventoryQueryService
from pharmstock.domain.service.order_fulfillment_service import OrderFulfillmentService
from pharmstock.domain.service.stock_ledger_service import StockLedgerService
from pharmstock.infrastructure.config import Settings
from pharmstock.infrastructure.identity.static_identity_provider import (
    StaticIdentityProvider,
)
from pharmstock.infrastructure.notification.json_low_stock_notifier import (
    JsonLowStockNotifier,
)
from pharmstock.infrastructure.persistence.json_order_repository import (
    JsonOrderRepository,
)
from pharmstock.infrastructure.persistence.json_product_repository import (
    JsonProductRepository,
)
from pharmstock.infrastructure.persistence.json_stock_ledger_repository import (
    JsonStockLedgerRepository,
)


def settings() -> Settings:
    return Settings.from_env()


def product_repository() -> JsonProductRepository:
    return JsonProductRepository(settings().data_dir / "products.json")


def order_repository() -> JsonOrderRepository:
    return JsonOrderRepository(settings().data_dir / "orders.json")


def stock_ledger_repository() -> JsonStockLedgerRepository:
    return JsonStockLedgerRepository(
        product_repository(), settings().data_dir / "stock_movements.json"
    )


def low_stock_notifier() -> JsonLowStockNotifier:
    return JsonLowStockNotifier(settings().data_dir / "notifications.json")


def stock_ledger() -> StockLedgerService:
    cfg = settings()
    return StockLedgerService(
        product_repo=product_repository(),
        ledger_repo=stock_ledger_repository(),
        identity=StaticIdentityProvider(cfg.actor),
        max_attempts=cfg.max_commit_attempts,
    )


def inventory_queries() -> InventoryQueryService:
    return InventoryQueryService(product_repository())


def order_fulfillment() -> OrderFulfillmentService:
    return OrderFulfillmentService(
        ledger=stock_ledger(),
        product_repo=product_repository(),
        notifier=low_stock_notifier(),
    )
