"""CLI commands for the stock ledger."""

from __future__ import annotations

import click

from pharmstock.application.apply_stock_movement import ApplyStockMovementHandler
from pharmstock.application.dto import MovementDTO
from pharmstock.application.show_movements import ShowMovementsHandler
from pharmstock.domain.exceptions import DomainException
from pharmstock.domain.model.stock_movement import MovementType, ReasonCode
from pharmstock.infrastructure.bootstrap import stock_ledger


def echo_movements(movements: list[MovementDTO]) -> None:
    """Shared table for movement listings."""
    if not movements:
        click.echo("No stock movements found.")
        return

    click.echo(
        f"{'When':<24} {'Product':<20} {'Type':<11} {'Qty':>5} "
        f"{'Before':>7} {'After':>7}  {'By':<14} Reason"
    )
    click.echo("-" * 110)
    for m in movements:
        click.echo(
            f"{m.timestamp:<24} {m.product_name:<20} {m.type:<11} {m.quantity:>5} "
            f"{m.previous_stock:>7} {m.new_stock:>7}  {m.performed_by_name:<14} {m.reason}"
        )


@click.command("apply")
@click.option("--product-id", required=True, help="Product ID.")
@click.option(
    "--type",
    "movement_type",
    required=True,
    type=click.Choice([t.value for t in MovementType]),
    help="Movement type. For 'adjustment' the quantity is the new stock level.",
)
@click.option("--quantity", required=True, type=int, help="Quantity moved (or target level).")
@click.option("--reason", required=True, help="Why the stock changed.")
@click.option("--notes", default=None, help="Free-text notes.")
@click.option(
    "--reason-code",
    default=None,
    type=click.Choice([c.value for c in ReasonCode]),
    help="Machine-readable reason.",
)
def stock_apply(
    product_id: str,
    movement_type: str,
    quantity: int,
    reason: str,
    notes: str | None,
    reason_code: str | None,
) -> None:
    """Record a stock movement for a product."""
    handler = ApplyStockMovementHandler(ledger=stock_ledger())

    try:
        movement = handler.handle(
            product_id=product_id,
            movement_type=movement_type,
            quantity=quantity,
            reason=reason,
            notes=notes,
            reason_code=reason_code,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(
        f"{movement.product_name}: {movement.type} {movement.quantity} "
        f"({movement.previous_stock} -> {movement.new_stock})"
    )


@click.command("history")
@click.option("--product-id", default=None, help="Only this product.")
@click.option("--limit", default=50, show_default=True, type=int, help="Maximum entries.")
def stock_history(product_id: str | None, limit: int) -> None:
    """Show recent stock movements, newest first."""
    handler = ShowMovementsHandler(ledger=stock_ledger())

    try:
        movements = handler.handle(product_id=product_id, limit=limit)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    echo_movements(movements)


@click.command("reconcile")
@click.option("--product-id", required=True, help="Product ID.")
def stock_reconcile(product_id: str) -> None:
    """Replay a product's ledger and compare it with current stock."""
    try:
        report = stock_ledger().reconcile(product_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(
        f"Product {report.product_id}: current {report.current_stock}, "
        f"ledger {report.replayed_stock if report.replayed_stock is not None else '-'} "
        f"({report.movement_count} movements)"
    )
    if report.consistent:
        click.echo("Ledger is consistent.")
        return
    for line in report.discrepancies:
        click.echo(f"  ! {line}")
    raise click.ClickException("Ledger does not reconcile")
