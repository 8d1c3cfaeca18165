"""Shared text and colour helpers for human-facing panels."""

from __future__ import annotations

COUNT_STYLES = {
    "complete": "bold green",
    "flagged": "bold cyan",
}
DEFAULT_COUNT_STYLE = "bold yellow"

BADGE_STYLES = {
    "pending": "black on yellow",
    "complete": "black on green",
    "flagged": "black on cyan",
    "urgent": "white on dark_orange",
    "critical": "white on red",
}

STATE_LABELS = {
    "disconnected": ("Disconnected", "dim"),
    "connecting": ("Loading...", "blue"),
    "connected": ("Connected", "green"),
    "errored": ("Connection Error", "red"),
}


def count_style(status: str | None) -> str:
    # Only complete and flagged get their own colour; everything else is yellow.
    return COUNT_STYLES.get(str(status or ""), DEFAULT_COUNT_STYLE)


def badge_style(status: str | None) -> str:
    return BADGE_STYLES.get(str(status or ""), "default")


def state_label(state: str) -> tuple[str, str]:
    return STATE_LABELS.get(state, (state.title(), "default"))


def compact_relative_age(age_seconds: float | int | None) -> str:
    if age_seconds is None:
        return "n/a"

    seconds = max(0, int(age_seconds))
    if seconds < 60:
        return f"{seconds}s ago"
    if seconds < 3600:
        return f"{seconds // 60}m ago"
    if seconds < 86400:
        return f"{seconds // 3600}h ago"
    return f"{seconds // 86400}d ago"


def join_names(names: list[str], limit: int = 4) -> str:
    shown = names[:limit]
    text = ", ".join(shown)
    remaining = len(names) - len(shown)
    if remaining > 0:
        text += f" (+{remaining} more)"
    return text
