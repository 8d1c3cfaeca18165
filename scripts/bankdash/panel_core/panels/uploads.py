"""Data connection section renderer."""

from __future__ import annotations

from rich.columns import Columns
from rich.console import Group
from rich.panel import Panel
from rich.text import Text

from panel_core.formatting import join_names
from panel_core.models import PanelData
from panel_core.panels import border_for


def _card(title: str, subtitle: str, body, border: str) -> Panel:
    return Panel(
        Group(Text(subtitle, style="dim"), body),
        title=f"[bold]{title}[/bold]",
        title_align="left",
        border_style=border,
        padding=(0, 1),
    )


def url_card(data: PanelData) -> Panel:
    url = data.meta.get("url") or ""
    body = Text(url) if url else Text("jdbc://server:port/database", style="dim")
    body.append("\n[Connect]", style="bold")
    return _card("URL Connection", "JDBC, APIs, Endpoints", body, "blue")


def upload_card(data: PanelData) -> Panel:
    if data.meta.get("stage") == "files_selected":
        names = [str(item.get("name", "")) for item in data.items]
        body = Text(join_names(names))
        body.append("\n[Download]  [LLM]", style="bold")
    else:
        body = Text("Drop files or click to browse", style="dim")
    return _card("File Upload", "CSV, Excel, JSON", body, "yellow")


def azure_card(data: PanelData) -> Panel:
    resources = data.meta.get("azure_resources") or {}
    selected = data.meta.get("azure_resource") or ""
    if selected in resources:
        body = Text(resources[selected])
    else:
        body = Text("Select Azure Resource", style="dim")
    body.append("\n[Connect Azure]", style="bold")
    return _card("Azure SQL Database", "Cloud Database", body, "cyan")


def render(data: PanelData):
    cards = Columns([url_card(data), upload_card(data), azure_card(data)], equal=True, expand=True)
    parts = [cards]
    message = data.meta.get("message")
    if message:
        parts.append(Text(str(message), justify="center"))
    return Panel(Group(*parts), title=f"[bold]{data.title}[/bold]", border_style=border_for(data.status))
