"""CLI commands for the product catalog."""

from __future__ import annotations

from datetime import datetime

import click

from pharmstock.application.add_product import AddProductHandler
from pharmstock.application.dto import ProductDTO
from pharmstock.domain.exceptions import DomainException
from pharmstock.infrastructure.bootstrap import product_repository


@click.command("add")
@click.option("--name", required=True, help="Product name.")
@click.option("--price", required=True, help="Unit price (e.g. 15.00).")
@click.option("--stock", "stock_quantity", default=0, show_default=True, type=int, help="Opening stock.")
@click.option("--min-stock", "min_stock_level", default=10, show_default=True, type=int, help="Reorder threshold.")
@click.option("--expiry", type=click.DateTime(formats=["%Y-%m-%d"]), default=None, help="Expiry date (YYYY-MM-DD).")
def product_add(
    name: str,
    price: str,
    stock_quantity: int,
    min_stock_level: int,
    expiry: datetime | None,
) -> None:
    """Add a new product to the catalog."""
    handler = AddProductHandler(product_repo=product_repository())

    try:
        product = handler.handle(
            name=name,
            price=price,
            stock_quantity=stock_quantity,
            min_stock_level=min_stock_level,
            expiry_date=expiry,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(
        f"Product #{product.id} '{product.name}' added at {product.price} "
        f"with {product.stock_quantity} in stock"
    )


def echo_products(products: list[ProductDTO]) -> None:
    """Shared table for product listings."""
    if not products:
        click.echo("No products found.")
        return

    click.echo(f"{'ID':<6} {'Name':<24} {'Price':>14} {'Stock':>7} {'Min':>5} {'Status':<13} {'Expiry':<10}")
    click.echo("-" * 85)
    for p in products:
        click.echo(
            f"{p.id:<6} {p.name:<24} {p.price:>14} {p.stock_quantity:>7} "
            f"{p.min_stock_level:>5} {p.stock_status:<13} {p.expiry_date:<10}"
        )


@click.command("list")
def product_list() -> None:
    """List all products in the catalog."""
    repo = product_repository()
    echo_products([ProductDTO.from_product(p) for p in repo.list_all()])
