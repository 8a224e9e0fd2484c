"""Domain service: Stock Ledger.

The single write path for stock. Every change reads the product, computes
the new level from the movement type, and commits the new level together
with an immutable movement entry.

Concurrent writers to the same product are serialized optimistically: the
commit only succeeds if the product version is still the one that was
read. A conflicting writer re-reads and tries again a bounded number of
times, so later commits always carry later timestamps.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field

import structlog

from pharmstock.domain.clock import Clock, utc_now
from pharmstock.domain.exceptions import (
    AuthenticationError,
    ConcurrencyError,
    EntityNotFoundError,
    StaleStockError,
    ValidationError,
)
from pharmstock.domain.model.stock_movement import MovementType, ReasonCode, StockMovement
from pharmstock.domain.port.identity_provider import IdentityProvider
from pharmstock.domain.repository.product_repository import ProductRepository
from pharmstock.domain.repository.stock_ledger_repository import StockLedgerRepository

logger = structlog.get_logger(__name__)

DEFAULT_MAX_ATTEMPTS = 5
DEFAULT_BACKOFF_BASE = 0.01
MAX_BACKOFF_SECONDS = 0.5


@dataclass(frozen=True)
class ReconciliationReport:
    product_id: str
    current_stock: int
    replayed_stock: int | None
    movement_count: int
    discrepancies: list[str] = field(default_factory=list)

    @property
    def consistent(self) -> bool:
        return not self.discrepancies


class StockLedgerService:

    def __init__(
        self,
        product_repo: ProductRepository,
        ledger_repo: StockLedgerRepository,
        identity: IdentityProvider,
        clock: Clock = utc_now,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        backoff_base: float = DEFAULT_BACKOFF_BASE,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._product_repo = product_repo
        self._ledger_repo = ledger_repo
        self._identity = identity
        self._clock = clock
        self._max_attempts = max_attempts
        self._backoff_base = backoff_base

    def apply_movement(
        self,
        product_id: str,
        quantity: int,
        movement_type: MovementType,
        reason: str,
        notes: str | None = None,
        *,
        reason_code: ReasonCode | None = None,
        order_id: str | None = None,
    ) -> StockMovement:
        """Apply one stock change and return the recorded movement.

        For ``adjustment`` the quantity is the new absolute stock level.
        Reductions past zero clamp to zero rather than failing.
        """
        if not product_id:
            raise ValidationError("Product ID is required")
        movement_type.validate_quantity(quantity)
        if not reason or not reason.strip():
            raise ValidationError("Movement reason is required")

        actor = self._identity.current_actor()
        if actor is None:
            raise AuthenticationError("User not authenticated")

        for attempt in range(self._max_attempts):
            product = self._product_repo.get_by_id(product_id)
            if product is None:
                raise EntityNotFoundError(f"Product with ID '{product_id}' not found")

            now = self._clock()
            movement = StockMovement.record(
                product_id=product.id,
                product_name=product.name,
                movement_type=movement_type,
                quantity=quantity,
                previous_stock=product.stock_quantity,
                reason=reason,
                actor=actor,
                timestamp=now,
                reason_code=reason_code,
                notes=notes,
                order_id=order_id,
            )
            updated = product.with_stock(
                movement.new_stock, now, restocked=movement_type is MovementType.IN
            )

            try:
                self._ledger_repo.commit(updated, product.version, movement)
            except StaleStockError as exc:
                logger.info(
                    "stock_commit_conflict",
                    product_id=product_id,
                    attempt=attempt + 1,
                    expected_version=exc.expected_version,
                    actual_version=exc.actual_version,
                )
                if attempt < self._max_attempts - 1:
                    time.sleep(min(self._backoff_base * (2 ** attempt), MAX_BACKOFF_SECONDS))
                continue

            logger.info(
                "stock_movement_applied",
                product_id=product_id,
                movement_type=movement_type.value,
                quantity=quantity,
                previous_stock=movement.previous_stock,
                new_stock=movement.new_stock,
                stock_status=updated.stock_status.value,
                performed_by=actor.actor_id,
            )
            return movement

        raise ConcurrencyError(
            f"Could not update stock for product '{product_id}' after "
            f"{self._max_attempts} attempts"
        )

    def get_movements(self, product_id: str | None = None, limit: int = 50) -> list[StockMovement]:
        """Return movements newest first, optionally for one product."""
        if limit <= 0:
            raise ValidationError("Limit must be positive")
        return self._ledger_repo.list_movements(product_id, limit)

    def get_order_movements(self, order_id: str) -> list[StockMovement]:
        """Return every movement recorded for an order, newest first."""
        return self._ledger_repo.list_for_order(order_id)

    def reconcile(self, product_id: str) -> ReconciliationReport:
        """Replay a product's ledger and compare it with the stored stock."""
        product = self._product_repo.get_by_id(product_id)
        if product is None:
            raise EntityNotFoundError(f"Product with ID '{product_id}' not found")

        movements = self._ledger_repo.history(product_id)
        if not movements:
            return ReconciliationReport(
                product_id=product_id,
                current_stock=product.stock_quantity,
                replayed_stock=None,
                movement_count=0,
            )

        discrepancies: list[str] = []
        running = movements[0].previous_stock
        for movement in movements:
            if movement.previous_stock != running:
                discrepancies.append(
                    f"Movement {movement.id} starts at {movement.previous_stock}, "
                    f"ledger was at {running}"
                )
            expected_new = movement.type.apply(movement.previous_stock, movement.quantity)
            if movement.new_stock != expected_new:
                discrepancies.append(
                    f"Movement {movement.id} records {movement.new_stock}, "
                    f"replay gives {expected_new}"
                )
            running = movement.new_stock

        if running != product.stock_quantity:
            discrepancies.append(
                f"Current stock {product.stock_quantity} differs from ledger {running}"
            )

        return ReconciliationReport(
            product_id=product_id,
            current_stock=product.stock_quantity,
            replayed_stock=running,
            movement_count=len(movements),
            discrepancies=discrepancies,
        )
