"""Header renderer."""

from __future__ import annotations

from rich.panel import Panel


def render(profile_name: str, sources: dict[str, str], layout_mode: str) -> Panel:
    source_text = "   ".join(f"{key}: [bold]{value}[/bold]" for key, value in sources.items())
    text = f"Profile: [bold]{profile_name}[/bold]   {source_text}   Layout: [bold]{layout_mode}[/bold]"
    return Panel(text, title="[bold]Banking Compliance Dashboard[/bold]", border_style="cyan")
