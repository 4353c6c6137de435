"""catalogkeeper CLI entry point."""

import asyncio
import logging
from collections.abc import Callable
from typing import Any

import click

from catalogkeeper.bootstrap import open_catalog
from catalogkeeper.config import MIN_PRICE_SETTING, Settings
from catalogkeeper.lifecycle import EntityLifecycle
from catalogkeeper.persistence import DatabaseConfig
from catalogkeeper.validation import Result


def _coerce_number(value: str) -> Any:
    """Turn numeric text into a number; anything else is passed through as-is."""
    try:
        return int(value)
    except ValueError:
        pass
    try:
        return float(value)
    except ValueError:
        return value


def _with_catalog(ctx: click.Context, fn: Callable[[EntityLifecycle], Any]) -> Any:
    lifecycle = open_catalog(ctx.obj)
    try:
        return fn(lifecycle)
    finally:
        lifecycle.close()


def _report(result: Result[Any]) -> Any:
    """Print violations and exit 1 on failure, else return the value."""
    if not result.ok:
        for violation in result.violations:
            prefix = f"{violation.field}: " if violation.field else ""
            click.echo(click.style(f"Error: {prefix}{violation.message}", fg="red"), err=True)
        raise SystemExit(1)
    return result.value


def _echo_record(record: dict[str, Any]) -> None:
    click.echo("  ".join(f"{key}={value}" for key, value in record.items()))


@click.group()
@click.option(
    "--db",
    "db_url",
    default=None,
    help="Database URL or SQLite file path (default: $DATABASE_URL).",
)
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging level (default: $CATALOGKEEPER_LOG_LEVEL or WARNING).",
)
@click.pass_context
def cli(ctx: click.Context, db_url: str | None, log_level: str | None):
    """catalogkeeper: validated Category/Product catalog."""
    settings = Settings.from_env()
    if db_url:
        url = db_url if db_url.startswith("sqlite") else f"sqlite:///{db_url}"
        settings.database = DatabaseConfig(url=url)
    if log_level:
        settings.log_level = log_level.upper()

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = settings


@cli.command()
@click.pass_context
def init(ctx: click.Context):
    """Create tables and seed the minimal price."""

    def run(lifecycle: EntityLifecycle) -> None:
        floor = lifecycle.adapter.get_setting(MIN_PRICE_SETTING)
        click.echo(f"Catalog ready at {ctx.obj.database.url} ({MIN_PRICE_SETTING}={floor})")

    _with_catalog(ctx, run)


# ── Categories ──────────────────────────────────────────────────────────────


@cli.group()
def category():
    """Category commands."""
    pass


@category.command("add")
@click.argument("name")
@click.pass_context
def category_add(ctx: click.Context, name: str):
    """Create a category."""
    record = _with_catalog(
        ctx, lambda lc: _report(asyncio.run(lc.create("Category", {"name": name})))
    )
    click.echo(f"Created {record['id']}")


@category.command("remove")
@click.argument("category_id")
@click.pass_context
def category_remove(ctx: click.Context, category_id: str):
    """Delete a category that no product references."""
    _with_catalog(ctx, lambda lc: _report(asyncio.run(lc.delete("Category", category_id))))
    click.echo(f"Deleted {category_id}")


@category.command("list")
@click.pass_context
def category_list(ctx: click.Context):
    """List categories."""
    for record in _with_catalog(ctx, lambda lc: lc.list_records("Category")):
        _echo_record(record)


# ── Products ────────────────────────────────────────────────────────────────


@cli.group()
def product():
    """Product commands."""
    pass


@product.command("add")
@click.option("--name", required=True)
@click.option("--price", required=True, help="Non-negative integer price.")
@click.option("--category", "category_id", default=None, help="Category id.")
@click.pass_context
def product_add(ctx: click.Context, name: str, price: str, category_id: str | None):
    """Create a product."""
    data: dict[str, Any] = {"name": name, "price": _coerce_number(price)}
    if category_id is not None:
        data["categoryId"] = category_id

    record = _with_catalog(ctx, lambda lc: _report(asyncio.run(lc.create("Product", data))))
    click.echo(f"Created {record['id']}")


@product.command("update")
@click.argument("product_id")
@click.option("--name", default=None)
@click.option("--price", default=None)
@click.option("--category", "category_id", default=None)
@click.pass_context
def product_update(
    ctx: click.Context,
    product_id: str,
    name: str | None,
    price: str | None,
    category_id: str | None,
):
    """Change fields of a product."""
    data: dict[str, Any] = {}
    if name is not None:
        data["name"] = name
    if price is not None:
        data["price"] = _coerce_number(price)
    if category_id is not None:
        data["categoryId"] = category_id
    if not data:
        click.echo("Nothing to update.", err=True)
        raise SystemExit(1)

    _with_catalog(
        ctx, lambda lc: _report(asyncio.run(lc.update("Product", product_id, data)))
    )
    click.echo(f"Updated {product_id}")


@product.command("remove")
@click.argument("product_id")
@click.pass_context
def product_remove(ctx: click.Context, product_id: str):
    """Delete a product."""
    _with_catalog(ctx, lambda lc: _report(asyncio.run(lc.delete("Product", product_id))))
    click.echo(f"Deleted {product_id}")


@product.command("list")
@click.option("--category", "category_id", default=None, help="Only this category.")
@click.pass_context
def product_list(ctx: click.Context, category_id: str | None):
    """List products."""
    filter = None
    if category_id is not None:
        filter = {
            "operator": "and",
            "conditions": [{"field": "categoryId", "operator": "eq", "value": category_id}],
        }
    for record in _with_catalog(ctx, lambda lc: lc.list_records("Product", filter)):
        _echo_record(record)


@product.command("buy")
@click.argument("product_id")
@click.argument("quantity")
@click.pass_context
def product_buy(ctx: click.Context, product_id: str, quantity: str):
    """Buy QUANTITY units of a product."""

    def run(lifecycle: EntityLifecycle) -> dict[str, str]:
        record = lifecycle.get("Product", product_id)
        if record is None:
            click.echo(click.style(f"Error: Product {product_id} not found", fg="red"), err=True)
            raise SystemExit(1)
        return _report(lifecycle.buy(record, _coerce_number(quantity)))

    click.echo(_with_catalog(ctx, run)["status"])


# ── Settings ────────────────────────────────────────────────────────────────


@cli.group()
def settings():
    """Persisted settings."""
    pass


@settings.command("set-min-price")
@click.argument("value", type=int)
@click.pass_context
def set_min_price(ctx: click.Context, value: int):
    """Set the minimal product price."""
    if value < 0:
        click.echo(click.style("Error: minimal price must be non-negative", fg="red"), err=True)
        raise SystemExit(1)
    _with_catalog(ctx, lambda lc: lc.adapter.set_setting(MIN_PRICE_SETTING, value))
    click.echo(f"{MIN_PRICE_SETTING} = {value}")


@settings.command("show")
@click.pass_context
def settings_show(ctx: click.Context):
    """Show persisted settings."""
    floor = _with_catalog(ctx, lambda lc: lc.adapter.get_setting(MIN_PRICE_SETTING))
    click.echo(f"{MIN_PRICE_SETTING} = {floor}")
