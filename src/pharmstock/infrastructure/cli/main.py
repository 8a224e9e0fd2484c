import click

from pharmstock.infrastructure.bootstrap import settings
from pharmstock.infrastructure.cli.inventory_commands import (
    inventory_alerts,
    inventory_expiring,
    inventory_low,
    inventory_out,
    inventory_stats,
)
from pharmstock.infrastructure.cli.order_commands import (
    order_cancel,
    order_create,
    order_deliver,
    order_return,
    order_show,
    order_status,
    order_stock_history,
    order_validate,
)
from pharmstock.infrastructure.cli.product_commands import product_add, product_list
from pharmstock.infrastructure.cli.stock_commands import (
    stock_apply,
    stock_history,
    stock_reconcile,
)
from pharmstock.infrastructure.config import ConfigurationError
from pharmstock.infrastructure.logging import bind_actor, configure_logging


@click.group()
def cli() -> None:
    """pharmstock: pharmacy inventory stock ledger"""
    try:
        cfg = settings()
    except ConfigurationError as exc:
        raise click.ClickException(str(exc))
    configure_logging(cfg.log_level, cfg.log_format)
    bind_actor(cfg.actor_id)


@cli.group()
def product() -> None:
    """Manage the product catalog."""


@cli.group()
def stock() -> None:
    """Record and inspect stock movements."""


@cli.group()
def inventory() -> None:
    """Inventory reports."""


@cli.group()
def order() -> None:
    """Manage orders and their stock effects."""


# Register subcommands
product.add_command(product_add)
product.add_command(product_list)
stock.add_command(stock_apply)
stock.add_command(stock_history)
stock.add_command(stock_reconcile)
inventory.add_command(inventory_stats)
inventory.add_command(inventory_low)
inventory.add_command(inventory_out)
inventory.add_command(inventory_expiring)
inventory.add_command(inventory_alerts)
order.add_command(order_create)
order.add_command(order_show)
order.add_command(order_status)
order.add_command(order_deliver)
order.add_command(order_cancel)
order.add_command(order_return)
order.add_command(order_validate)
order.add_command(order_stock_history)
