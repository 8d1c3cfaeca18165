"""Data connection configuration panel renderer."""

from __future__ import annotations

from rich.console import Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from panel_core.models import PanelData
from panel_core.panels import border_for, kv_table, message_box

ACTIONS = "[Refresh]  [Reconnect]  [Next]"


def _sidebar(data: PanelData) -> Table:
    table = Table.grid(padding=(0, 1))
    table.add_column(no_wrap=True)
    selected = data.meta.get("section")
    for name, description in (data.meta.get("sections") or {}).items():
        style = "bold white on blue" if name == selected else "default"
        table.add_row(Text(name, style=style))
        table.add_row(Text(description, style="dim"))
    return table


def _database_type(data: PanelData, current: str) -> Text:
    if data.meta.get("loading"):
        return Text("Loading database types...", style="dim")
    if data.errors:
        return Text(data.errors[0], style="red")
    options = data.meta.get("database_options") or []
    if not options:
        return Text("no database types", style="dim")
    text = Text()
    for index, option in enumerate(options):
        if index:
            text.append("  ")
        text.append(option, style="bold reverse" if option == current else "default")
    return text


def _connector_form(data: PanelData) -> Group:
    values = {item["field"]: item["value"] for item in data.items}
    table = kv_table([])
    for item in data.items:
        if item["field"] == "database_type":
            table.add_row(item["label"], _database_type(data, values.get("database_type", "")))
        else:
            table.add_row(item["label"], item["value"] or Text("-", style="dim"))

    upload_hint = Text("Drag & Drop folder or zip here or Choose file", style="dim")
    return Group(
        upload_hint,
        Text("- or -", style="dim"),
        Text("Connect with Database", style="bold"),
        table,
        Text(ACTIONS, style="bold", justify="right"),
    )


def _placeholder(data: PanelData) -> Group:
    section = str(data.meta.get("section", ""))
    description = (data.meta.get("sections") or {}).get(section, "")
    return Group(Text(section, style="bold"), Text(f"{description} content goes here.", style="dim"))


def render(data: PanelData):
    content = _connector_form(data) if data.meta.get("section") == "Data Connector" else _placeholder(data)

    body = Table.grid(expand=True, padding=(0, 2))
    body.add_column(no_wrap=True)
    body.add_column(ratio=1)
    body.add_row(_sidebar(data), content)

    parts = [body]
    message = data.meta.get("message")
    if message:
        parts.append(message_box("Connection Attempt", str(message)))

    return Panel(Group(*parts), title=f"[bold]{data.title}[/bold]", border_style=border_for(data.status))
