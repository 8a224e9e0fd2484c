"""Application service: Apply Stock Movement use case.

Manual stock changes from the back office: receipts, write-offs,
returns and stock-count adjustments.
"""

from __future__ import annotations

from pharmstock.application.dto import MovementDTO
from pharmstock.domain.exceptions import ValidationError
from pharmstock.domain.model.stock_movement import MovementType, ReasonCode
from pharmstock.domain.service.stock_ledger_service import StockLedgerService


class ApplyStockMovementHandler:

    def __init__(self, ledger: StockLedgerService) -> None:
        self._ledger = ledger

    def handle(
        self,
        product_id: str,
        movement_type: str,
        quantity: int,
        reason: str,
        notes: str | None = None,
        reason_code: str | None = None,
    ) -> MovementDTO:
        try:
            kind = MovementType(movement_type)
            code = ReasonCode(reason_code) if reason_code else None
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc

        movement = self._ledger.apply_movement(
            product_id, quantity, kind, reason, notes, reason_code=code
        )
        return MovementDTO.from_movement(movement)
