"""CLI commands for orders and their stock effects."""

from __future__ import annotations

import click

from pharmstock.application.cancel_order import CancelOrderHandler
from pharmstock.application.create_order import CreateOrderHandler
from pharmstock.application.dto import OrderDTO, OrderItemSpec
from pharmstock.application.show_movements import ShowOrderStockHistoryHandler
from pharmstock.application.show_order import ShowOrderHandler
from pharmstock.application.update_delivery_status import UpdateDeliveryStatusHandler
from pharmstock.application.validate_order_stock import ValidateOrderStockHandler
from pharmstock.domain.exceptions import DomainException
from pharmstock.domain.model.order import DeliveryStatus
from pharmstock.infrastructure.bootstrap import (
    order_fulfillment,
    order_repository,
    product_repository,
    settings,
    stock_ledger,
)
from pharmstock.infrastructure.cli.stock_commands import echo_movements


def _parse_items(raw: str) -> list[OrderItemSpec]:
    """Parse 'Paracetamol:3,Cetirizine:5' into OrderItemSpec list."""
    specs: list[OrderItemSpec] = []
    for pair in raw.split(","):
        pair = pair.strip()
        if ":" not in pair:
            raise click.BadParameter(
                f"Invalid item format '{pair}'. Expected 'ProductName:Quantity'."
            )
        name, qty_str = pair.rsplit(":", 1)
        try:
            qty = int(qty_str)
        except ValueError:
            raise click.BadParameter(
                f"Invalid quantity '{qty_str}' for product '{name}'."
            )
        specs.append(OrderItemSpec(product_name=name.strip(), quantity=qty))
    return specs


def _display_order(dto: OrderDTO) -> None:
    """Shared formatting for displaying an order."""
    click.echo(f"Order #{dto.id}  (status={dto.status}, delivery={dto.delivery_status})")
    click.echo(f"Customer: {dto.customer_name}")
    click.echo(f"Created:  {dto.created_at}")
    click.echo(f"Stock taken: {'yes' if dto.stock_reduced else 'no'}")
    click.echo()
    click.echo(f"  {'Product':<20} {'Qty':>5} {'Price':>14} {'Total':>14}")
    click.echo(f"  {'-'*55}")
    for item in dto.items:
        click.echo(
            f"  {item.product_name:<20} {item.quantity:>5} {item.unit_price:>14} {item.line_total:>14}"
        )
    click.echo(f"  {'-'*55}")
    click.echo(f"  {'Order Total':<27} {dto.total:>28}")


def _delivery_handler() -> UpdateDeliveryStatusHandler:
    return UpdateDeliveryStatusHandler(
        order_repo=order_repository(),
        fulfillment=order_fulfillment(),
        strict_validation=settings().strict_delivery_validation,
    )


def _change_status(order_id: str, status: DeliveryStatus) -> None:
    try:
        result = _delivery_handler().handle(order_id, status)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order_id} is now {result.order.delivery_status}.")
    for error in result.validation_errors:
        click.echo(f"Warning: {error}", err=True)
    if result.stock_reduced:
        if result.stock_errors:
            click.echo("Stock reduced with failures:", err=True)
            for error in result.stock_errors:
                click.echo(f"  {error}", err=True)
        else:
            click.echo("Stock reduced for all items.")


@click.command("create")
@click.option("--customer", required=True, help="Customer name.")
@click.option("--items", required=True, help="Items as 'Product:Qty,Product:Qty'.")
def order_create(customer: str, items: str) -> None:
    """Create a new order."""
    specs = _parse_items(items)

    handler = CreateOrderHandler(
        order_repo=order_repository(),
        product_repo=product_repository(),
    )

    try:
        dto = handler.handle(customer_name=customer, item_specs=specs)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{dto.id} created")
    _display_order(dto)


@click.command("show")
@click.option("--id", "order_id", required=True, help="Order ID to display.")
def order_show(order_id: str) -> None:
    """Show details of an existing order."""
    handler = ShowOrderHandler(order_repo=order_repository())

    try:
        dto = handler.handle(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_order(dto)


@click.command("status")
@click.option("--id", "order_id", required=True, help="Order ID.")
@click.option(
    "--to",
    "status",
    required=True,
    type=click.Choice([s.value for s in DeliveryStatus]),
    help="New delivery status.",
)
def order_status(order_id: str, status: str) -> None:
    """Change an order's delivery status (delivered takes stock)."""
    _change_status(order_id, DeliveryStatus(status))


@click.command("deliver")
@click.option("--id", "order_id", required=True, help="Order ID to deliver.")
def order_deliver(order_id: str) -> None:
    """Mark an order delivered and take its stock."""
    _change_status(order_id, DeliveryStatus.DELIVERED)


def _close(order_id: str, returned: bool) -> None:
    handler = CancelOrderHandler(
        order_repo=order_repository(),
        fulfillment=order_fulfillment(),
    )

    try:
        dto = handler.handle(order_id, returned=returned)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order_id} {dto.status}.")


@click.command("cancel")
@click.option("--id", "order_id", required=True, help="Order ID to cancel.")
def order_cancel(order_id: str) -> None:
    """Cancel an order (restores stock if it was taken)."""
    _close(order_id, returned=False)


@click.command("return")
@click.option("--id", "order_id", required=True, help="Order ID to return.")
def order_return(order_id: str) -> None:
    """Record a delivered order as returned and restore its stock."""
    _close(order_id, returned=True)


@click.command("validate")
@click.option("--id", "order_id", required=True, help="Order ID to check.")
def order_validate(order_id: str) -> None:
    """Check whether current stock covers an order."""
    handler = ValidateOrderStockHandler(
        order_repo=order_repository(),
        fulfillment=order_fulfillment(),
    )

    try:
        result = handler.handle(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if result.valid:
        click.echo(f"Order #{order_id} can be delivered from current stock.")
        return
    for error in result.errors:
        click.echo(f"  {error}")
    raise click.ClickException(f"Order #{order_id} cannot be delivered from current stock")


@click.command("stock-history")
@click.option("--id", "order_id", required=True, help="Order ID.")
def order_stock_history(order_id: str) -> None:
    """Show the stock movements recorded for an order."""
    handler = ShowOrderStockHistoryHandler(
        ledger=stock_ledger(),
        order_repo=order_repository(),
    )

    try:
        movements = handler.handle(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    echo_movements(movements)
