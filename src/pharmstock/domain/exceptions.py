"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI layer can catch them uniformly and display user-friendly messages.
"""

from __future__ import annotations

from dataclasses import dataclass


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or invariant was violated."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class AuthenticationError(DomainException):
    """No actor is available to attribute a stock change to."""


class InsufficientStockError(DomainException):
    """An order cannot be delivered from current stock."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        super().__init__("Insufficient stock: " + "; ".join(self.errors))


class StaleStockError(DomainException):
    """The product was written by someone else between read and write."""

    def __init__(self, product_id: str, expected_version: int, actual_version: int) -> None:
        self.product_id = product_id
        self.expected_version = expected_version
        self.actual_version = actual_version
        super().__init__(
            f"Stock for product '{product_id}' changed concurrently "
            f"(expected version {expected_version}, found {actual_version})"
        )


class ConcurrencyError(DomainException):
    """A stock write kept conflicting and gave up."""


class InventoryQueryError(DomainException):
    """Reading inventory state failed."""


@dataclass(frozen=True)
class LineItemFailure:
    """One failed line item inside a batch stock operation."""

    product_id: str | None
    product_name: str
    cause: Exception

    def __str__(self) -> str:
        return f"{self.product_name}: {self.cause}"


class PartialFailureError(DomainException):
    """Some line items of a batch failed; the rest stay applied."""

    def __init__(self, action: str, failures: list[LineItemFailure]) -> None:
        self.action = action
        self.failures = list(failures)
        details = ", ".join(str(f) for f in self.failures)
        super().__init__(f"Failed to {action} for some products: {details}")

    @property
    def failed_product_ids(self) -> list[str | None]:
        return [f.product_id for f in self.failures]
