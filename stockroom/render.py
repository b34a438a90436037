"""Rich rendering for stockroom output.

Item tables, single-item detail, and the stock summary. Kept apart from the
CLI so commands stay one call into the Mutation API plus one render call.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from stockroom.models import InventoryItem, InventorySummary


def fmt_price(value: Decimal) -> str:
    """Format a price in USD, two decimals."""
    return f"${value:,.2f}"


def fmt_category(category: Optional[str]) -> str:
    return escape(category) if category else "[dim]--[/dim]"


def _qty(item: InventoryItem, threshold: Optional[int]) -> str:
    if item.quantity == 0:
        return "[red]0[/red]"
    if threshold is not None and item.quantity < threshold:
        return f"[yellow]{item.quantity}[/yellow]"
    return str(item.quantity)


def render_items(
    items: Iterable[InventoryItem],
    console: Console,
    title: str = "Inventory",
    low_stock_threshold: Optional[int] = None,
) -> int:
    """Render items as a table. Returns how many rows were shown."""
    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("ID", justify="right", style="dim")
    table.add_column("Name", style="green", min_width=12)
    table.add_column("Category")
    table.add_column("Qty", justify="right")
    table.add_column("Unit price", justify="right")
    table.add_column("Value", justify="right")

    count = 0
    for item in items:
        table.add_row(
            str(item.id),
            escape(item.name),
            fmt_category(item.category),
            _qty(item, low_stock_threshold),
            fmt_price(item.unit_price),
            fmt_price(item.total_value),
        )
        count += 1

    if count == 0:
        console.print("[yellow]No items found.[/yellow]")
        return 0

    console.print()
    console.print(table)
    console.print()
    return count


def render_item(item: InventoryItem, console: Console) -> None:
    """Render one item as a two-column detail table."""
    table = Table(show_header=False, box=None)
    table.add_column("Field", style="dim", min_width=12)
    table.add_column("Value")

    table.add_row("ID", str(item.id))
    table.add_row("Name", f"[green]{escape(item.name)}[/green]")
    table.add_row("Category", fmt_category(item.category))
    table.add_row("Quantity", str(item.quantity))
    table.add_row("Unit price", fmt_price(item.unit_price))
    table.add_row("Value", fmt_price(item.total_value))

    console.print(table)


def render_summary(summary: InventorySummary, console: Console) -> None:
    """Render catalog totals with a per-category breakdown."""
    if summary.items == 0:
        console.print("[yellow]Inventory is empty.[/yellow]")
        return

    table = Table(title="Stock summary", show_header=True, header_style="bold")
    table.add_column("Category", min_width=14)
    table.add_column("Items", justify="right")
    table.add_column("Units", justify="right")
    table.add_column("Value", justify="right")

    for line in summary.by_category:
        table.add_row(
            escape(line.category) if line.category else "[dim]uncategorized[/dim]",
            str(line.items),
            str(line.units),
            fmt_price(line.value),
        )
    table.add_section()
    table.add_row(
        "[bold]Total[/bold]",
        str(summary.items),
        str(summary.units),
        f"[bold]{fmt_price(summary.value)}[/bold]",
    )

    console.print()
    console.print(table)
    console.print()
