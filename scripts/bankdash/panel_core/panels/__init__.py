"""Panel rendering helpers."""

from __future__ import annotations

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

STATUS_BORDER = {
    "ok": "cyan",
    "warn": "yellow",
    "error": "red",
}


def border_for(status: str) -> str:
    return STATUS_BORDER.get(status, "cyan")


def kv_table(rows: list[tuple[str, str]]) -> Table:
    table = Table(box=None, show_header=False, expand=True, pad_edge=False)
    table.add_column("key", style="bold")
    table.add_column("value", style="default")
    for key, value in rows:
        table.add_row(key, value)
    return table


def message_box(title: str, message: str) -> Panel:
    return Panel(Text(message), title=f"[bold]{title}[/bold]", subtitle="[dim]OK[/dim]", border_style="white")
