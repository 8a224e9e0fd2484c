"""CLI commands for inventory reports."""

from __future__ import annotations

import click

from pharmstock.application.show_inventory import ShowInventoryHandler
from pharmstock.domain.exceptions import DomainException
from pharmstock.infrastructure.bootstrap import inventory_queries, low_stock_notifier
from pharmstock.infrastructure.cli.product_commands import echo_products


def _handler() -> ShowInventoryHandler:
    return ShowInventoryHandler(queries=inventory_queries())


@click.command("stats")
def inventory_stats() -> None:
    """Show inventory summary statistics."""
    try:
        stats = _handler().stats()
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Products:        {stats.total_products}")
    click.echo(f"Items in stock:  {stats.total_items}")
    click.echo(f"Stock value:     {stats.total_value}")
    click.echo(f"Low stock:       {stats.low_stock_count}")
    click.echo(f"Out of stock:    {stats.out_of_stock_count}")
    click.echo(f"Expiring (30d):  {stats.expiring_soon_count}")


@click.command("low")
def inventory_low() -> None:
    """List products at or below their reorder threshold."""
    try:
        echo_products(_handler().low_stock())
    except DomainException as exc:
        raise click.ClickException(str(exc))


@click.command("out")
def inventory_out() -> None:
    """List products that are out of stock."""
    try:
        echo_products(_handler().out_of_stock())
    except DomainException as exc:
        raise click.ClickException(str(exc))


@click.command("expiring")
@click.option("--days", default=30, show_default=True, type=int, help="Expiry window in days.")
def inventory_expiring(days: int) -> None:
    """List products expiring within the window, soonest first."""
    try:
        echo_products(_handler().expiring(days))
    except DomainException as exc:
        raise click.ClickException(str(exc))


@click.command("alerts")
def inventory_alerts() -> None:
    """List unread low-stock alerts, oldest first."""
    alerts = low_stock_notifier().list_unread()
    if not alerts:
        click.echo("No unread alerts.")
        return

    for alert in alerts:
        click.echo(f"{alert['created_at'][:19]}  {alert['message']}")
