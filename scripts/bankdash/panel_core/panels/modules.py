"""Analyser panel renderer: one status-coloured tile per module."""

from __future__ import annotations

from rich.console import Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from panel_core.formatting import badge_style, count_style, state_label
from panel_core.layout import TILE_COLUMNS
from panel_core.models import PanelData
from panel_core.panels import border_for

EXPECTED_FORMAT = (
    '{ "modules": [{ "title": "string", "count": "string", '
    '"status": "pending|complete|flagged|urgent|critical", "statusText": "string" }] }'
)
FALLBACK_NOTICE = (
    "Using fallback data. Check your Python backend is running and the endpoint is correct."
)


def count_text(item: dict) -> Text:
    return Text(str(item.get("count", "-")), style=count_style(item.get("status")))


def status_badge(item: dict) -> Text:
    return Text(f" {item.get('statusText', '')} ", style=badge_style(item.get("status")))


def module_tile(item: dict) -> Panel:
    body = Table.grid(expand=True)
    body.add_column(ratio=1)
    body.add_column(justify="right", no_wrap=True)
    body.add_row(count_text(item), status_badge(item))
    return Panel(
        body,
        title=f"[bold]{item.get('title', '-')}[/bold]",
        title_align="left",
        border_style="grey50",
        padding=(0, 1),
    )


def module_tiles(items: list[dict]) -> list[Panel]:
    return [module_tile(item) for item in items]


def tile_grid(items: list[dict], columns: int = 3) -> Table:
    columns = max(1, columns)
    grid = Table.grid(expand=True, padding=(0, 1))
    for _ in range(columns):
        grid.add_column(ratio=1)
    tiles = module_tiles(items)
    for start in range(0, len(tiles), columns):
        row = tiles[start : start + columns]
        row.extend([""] * (columns - len(row)))
        grid.add_row(*row)
    return grid


def connection_line(data: PanelData) -> Text:
    state = str(data.meta.get("state", "disconnected"))
    if state == "disconnected":
        return Text(f"Built-in data. Expected API response format: {EXPECTED_FORMAT}", style="dim")

    label, style = state_label(state)
    line = Text(f"API Endpoint: {data.meta.get('endpoint', '')}  ")
    line.append(label, style=style)
    if state == "connected":
        line.append(f"  updated {data.meta.get('updated', 'n/a')}", style="dim")
    return line


def error_banner(data: PanelData) -> Panel:
    text = Text(f"Failed to connect to API: {data.errors[0]}", style="red")
    text.append(f"\n{FALLBACK_NOTICE}", style="dim")
    return Panel(text, border_style="red")


def render(data: PanelData, layout_mode: str = "wide"):
    parts = [connection_line(data)]
    if data.errors:
        parts.append(error_banner(data))

    if data.items:
        parts.append(tile_grid(data.items, TILE_COLUMNS.get(layout_mode, 3)))
    else:
        parts.append(Text("No modules", style="dim"))

    title = f"[bold]{data.title}[/bold] [dim]({data.meta.get('count', len(data.items))} modules)[/dim]"
    return Panel(Group(*parts), title=title, border_style=border_for(data.status))
