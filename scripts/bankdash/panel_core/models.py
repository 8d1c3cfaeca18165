"""Shared model contracts for modular panel data flow."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from panel_core.errors import DecodeError

MODULE_STATUSES = ("pending", "complete", "flagged", "urgent", "critical")


@dataclass
class PanelData:
    key: str
    title: str
    status: str = "ok"
    items: list[dict[str, Any]] = field(default_factory=list)
    meta: dict[str, Any] = field(default_factory=dict)
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "title": self.title,
            "status": self.status,
            "items": self.items,
            "meta": self.meta,
            "errors": self.errors,
        }


@dataclass(frozen=True)
class ModuleRecord:
    title: str
    count: str
    status: str
    status_text: str

    def __post_init__(self) -> None:
        if self.status not in MODULE_STATUSES:
            raise DecodeError(f"invalid module status: {self.status!r}")

    def to_dict(self) -> dict[str, str]:
        return {
            "title": self.title,
            "count": self.count,
            "status": self.status,
            "statusText": self.status_text,
        }


@dataclass
class ConnectionForm:
    connection_name: str = ""
    database_type: str = ""
    server_name: str = ""
    database_name: str = ""
    port: str = ""
    username: str = ""

    def clear(self) -> None:
        # database_type is owned by the type list, not the user's text input.
        self.connection_name = ""
        self.server_name = ""
        self.database_name = ""
        self.port = ""
        self.username = ""

    def missing_fields(self) -> list[str]:
        values = {
            "database_type": self.database_type,
            "connection_name": self.connection_name,
            "server_name": self.server_name,
            "database_name": self.database_name,
            "port": self.port,
            "username": self.username,
        }
        return [name for name, value in values.items() if not str(value).strip()]

    def to_payload(self, port: int) -> dict[str, Any]:
        return {
            "connection_name": self.connection_name,
            "database_type": self.database_type,
            "server_name": self.server_name,
            "database_name": self.database_name,
            "port": port,
            "username": self.username,
            "description": f"Connection to {self.database_name} on {self.server_name}",
        }


def _require_str(entry: dict, key: str, index: int) -> str:
    value = entry.get(key)
    if not isinstance(value, str):
        raise DecodeError(f"module {index}: field {key!r} must be a string")
    return value


def decode_module(entry: Any, index: int = 0) -> ModuleRecord:
    if not isinstance(entry, dict):
        raise DecodeError(f"module {index}: expected an object, got {type(entry).__name__}")
    status = _require_str(entry, "status", index)
    if status not in MODULE_STATUSES:
        raise DecodeError(
            f"module {index}: status {status!r} is not one of {', '.join(MODULE_STATUSES)}"
        )
    return ModuleRecord(
        title=_require_str(entry, "title", index),
        count=_require_str(entry, "count", index),
        status=status,
        status_text=_require_str(entry, "statusText", index),
    )


def decode_modules_payload(payload: Any) -> list[ModuleRecord]:
    """Decode a ``{"modules": [...]}`` response body into module records.

    Raises DecodeError naming the first offending field instead of passing
    unverified data through.
    """
    if not isinstance(payload, dict):
        raise DecodeError("expected a JSON object with a 'modules' key")
    if "modules" not in payload:
        raise DecodeError("response is missing the 'modules' key")
    modules = payload["modules"]
    if not isinstance(modules, list):
        raise DecodeError("'modules' must be a list")
    return [decode_module(entry, index) for index, entry in enumerate(modules)]


def decode_database_types(payload: Any) -> list[str]:
    if not isinstance(payload, dict) or not isinstance(payload.get("databases"), list):
        raise DecodeError(
            "Unexpected API response format or missing 'id' property in database objects."
        )
    ids: list[str] = []
    for db in payload["databases"]:
        if not isinstance(db, dict) or "id" not in db:
            raise DecodeError(
                "Unexpected API response format or missing 'id' property in database objects."
            )
        ids.append(str(db["id"]))
    return ids
