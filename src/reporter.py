from __future__ import annotations

from typing import Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from src.domain.models import IngestStats


def print_stats(
    stats: IngestStats, source: Optional[str] = None, console: Optional[Console] = None
) -> None:
    """
    Render ingest statistics as a rich table.
    """
    console = console or Console()

    title = "Price Archive Ingest"
    if source:
        title = f"{title}\n[dim]{escape(source)}[/dim]"

    table = Table(title=title, box=box.ROUNDED, caption="Totals across the whole store")
    table.add_column("Items", justify="right", style="magenta")
    table.add_column("Categories", justify="right", style="cyan")
    table.add_column("Total Price", justify="right", style="bold green")

    table.add_row(
        f"{stats.total_items:,}",
        f"{stats.total_categories:,}",
        f"{stats.total_price:,.2f}",
    )

    console.print(table)


def print_error(message: str, console: Optional[Console] = None) -> None:
    console = console or Console(stderr=True)
    console.print(Text.assemble(("Error: ", "bold red"), message))
