"""CLI for the stockroom inventory tracker.

Usage:
    python -m stockroom add "Widget" --qty 10 --price 2.50 -c Hardware
    python -m stockroom list                       # All items, by id
    python -m stockroom list -c hardware           # One category
    python -m stockroom show 1                     # One item
    python -m stockroom adjust 1 -5                # Take 5 out of stock
    python -m stockroom update 1 --price 2.75      # Change fields
    python -m stockroom remove 1 --yes             # Delete (id is never reused)
    python -m stockroom low-stock                  # Items below threshold
    python -m stockroom summary                    # Totals per category

Global options: --db PATH (or STOCKROOM_DB), --verbose.
Exit codes: 0 ok, 1 aborted, 2 usage, 3 not found, 4 invalid input,
5 quantity would go negative, 6 storage failure.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from stockroom.config import Settings
from stockroom.errors import (
    InvalidQuantityError,
    InventoryError,
    ItemNotFoundError,
    StorageIOError,
    ValidationError,
)
from stockroom.models import UNSET
from stockroom.render import render_item, render_items, render_summary
from stockroom.service import Inventory
from stockroom.storage import InventoryStore

EXIT_ABORTED = 1
EXIT_USAGE = 2

# Checked in order; first isinstance match wins.
EXIT_CODES: tuple[tuple[type[InventoryError], int], ...] = (
    (ItemNotFoundError, 3),
    (ValidationError, 4),
    (InvalidQuantityError, 5),
    (StorageIOError, 6),
)

app = typer.Typer(
    name="stockroom",
    help="Track inventory items, quantities and prices",
    no_args_is_help=True,
)
console = Console(stderr=True)
out = Console()
logger = logging.getLogger("stockroom.cli")


@dataclass
class _State:
    settings: Settings
    inventory: Inventory


def exit_code_for(exc: InventoryError) -> int:
    for kind, code in EXIT_CODES:
        if isinstance(exc, kind):
            return code
    return EXIT_ABORTED


@contextmanager
def _reporting_errors() -> Iterator[None]:
    """Turn an InventoryError into a red message and its exit code."""
    try:
        yield
    except InventoryError as e:
        logger.debug("Command failed", exc_info=True)
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(exit_code_for(e)) from e


def _configure_logging(verbose: bool) -> None:
    log = logging.getLogger("stockroom")
    if not verbose:
        return
    if not any(isinstance(h, RichHandler) for h in log.handlers):
        log.addHandler(RichHandler(console=console, show_path=False))
    log.setLevel(logging.DEBUG)


def _state(ctx: typer.Context) -> _State:
    return ctx.obj


@app.callback()
def main(
    ctx: typer.Context,
    db: Optional[str] = typer.Option(
        None, "--db", help="Data file (.json, .db/.sqlite, or :memory:). Env: STOCKROOM_DB"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log storage activity to stderr"),
) -> None:
    """Track inventory items, quantities and prices."""
    _configure_logging(verbose)
    try:
        settings = Settings.from_env(db=db)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(EXIT_USAGE)

    logger.debug("Opening inventory at %s", settings.db)
    with _reporting_errors():
        store = InventoryStore.open(settings.db)
    ctx.obj = _State(settings=settings, inventory=Inventory(store))


@app.command("add")
def cmd_add(
    ctx: typer.Context,
    name: str = typer.Argument(help="Item name"),
    quantity: int = typer.Option(0, "--qty", "-q", help="Starting quantity"),
    price: str = typer.Option("0", "--price", "-p", help="Unit price, e.g. 2.50"),
    category: Optional[str] = typer.Option(None, "--category", "-c", help="Category label"),
) -> None:
    """Add a new item."""
    inventory = _state(ctx).inventory
    with _reporting_errors():
        item = inventory.add_item(name, quantity, category, price)
    logger.debug("Added %r", item)
    console.print(f"Added item {item.id}: [green]{escape(item.name)}[/green]")


@app.command("show")
def cmd_show(
    ctx: typer.Context,
    item_id: int = typer.Argument(help="Item id"),
) -> None:
    """Show one item."""
    inventory = _state(ctx).inventory
    with _reporting_errors():
        item = inventory.get_item(item_id)
    render_item(item, out)


@app.command("list")
def cmd_list(
    ctx: typer.Context,
    category: Optional[str] = typer.Option(None, "--category", "-c", help="Only this category"),
) -> None:
    """List items by ascending id."""
    state = _state(ctx)
    title = f"Inventory: {escape(category)}" if category else "Inventory"
    with _reporting_errors():
        render_items(
            state.inventory.list_items(category),
            out,
            title=title,
            low_stock_threshold=state.settings.low_stock_threshold,
        )


@app.command("update")
def cmd_update(
    ctx: typer.Context,
    item_id: int = typer.Argument(help="Item id"),
    name: Optional[str] = typer.Option(None, "--name", "-n", help="New name"),
    quantity: Optional[int] = typer.Option(None, "--qty", "-q", help="New quantity"),
    price: Optional[str] = typer.Option(None, "--price", "-p", help="New unit price"),
    category: Optional[str] = typer.Option(None, "--category", "-c", help="New category"),
    clear_category: bool = typer.Option(False, "--clear-category", help="Mark as uncategorized"),
) -> None:
    """Change one or more fields of an item."""
    if category is not None and clear_category:
        raise typer.BadParameter("use either --category or --clear-category, not both")
    if clear_category:
        new_category = None
    elif category is not None:
        new_category = category
    else:
        new_category = UNSET

    fields = {
        "name": UNSET if name is None else name,
        "quantity": UNSET if quantity is None else quantity,
        "unit_price": UNSET if price is None else price,
        "category": new_category,
    }
    if all(v is UNSET for v in fields.values()):
        raise typer.BadParameter("nothing to update; pass at least one field option")

    inventory = _state(ctx).inventory
    with _reporting_errors():
        item = inventory.update_item(item_id, **fields)
    console.print(f"Updated item {item.id}")
    render_item(item, out)


@app.command("adjust", context_settings={"ignore_unknown_options": True})
def cmd_adjust(
    ctx: typer.Context,
    item_id: int = typer.Argument(help="Item id"),
    delta: int = typer.Argument(help="Change in quantity; negative takes stock out"),
) -> None:
    """Add to or take from an item's quantity."""
    inventory = _state(ctx).inventory
    with _reporting_errors():
        item = inventory.adjust_quantity(item_id, delta)
    console.print(f"Item {item.id} ({escape(item.name)}): quantity now {item.quantity}")


@app.command("remove")
def cmd_remove(
    ctx: typer.Context,
    item_id: int = typer.Argument(help="Item id"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Delete an item. Its id is never handed out again."""
    inventory = _state(ctx).inventory
    with _reporting_errors():
        if not yes and not typer.confirm(f"Remove item {item_id}?"):
            console.print("Aborted.")
            raise typer.Exit(EXIT_ABORTED)
        inventory.remove_item(item_id)
    console.print(f"Removed item {item_id}")


@app.command("low-stock")
def cmd_low_stock(
    ctx: typer.Context,
    threshold: Optional[int] = typer.Option(
        None, "--threshold", "-t", min=0, help="Quantity limit (default: STOCKROOM_LOW_STOCK or 5)"
    ),
) -> None:
    """List items whose quantity is below the threshold."""
    state = _state(ctx)
    limit = state.settings.low_stock_threshold if threshold is None else threshold
    with _reporting_errors():
        items = state.inventory.low_stock(limit)
    render_items(items, out, title=f"Below {limit} in stock", low_stock_threshold=limit)


@app.command("summary")
def cmd_summary(ctx: typer.Context) -> None:
    """Show totals per category."""
    inventory = _state(ctx).inventory
    with _reporting_errors():
        summary = inventory.summary()
    render_summary(summary, out)


if __name__ == "__main__":
    app()
