"""JSON rows to CSV text."""

from __future__ import annotations

import csv
import io
import json
from typing import Any

from panel_core.errors import DecodeError


def _rows(data: Any) -> list[dict]:
    if isinstance(data, dict):
        return [data]
    if isinstance(data, list) and all(isinstance(row, dict) for row in data):
        return data
    raise DecodeError("expected a JSON array of objects")


def _cell(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return value


def columns_for(rows: list[dict]) -> list[str]:
    """Union of row keys, in the order each key is first seen."""
    columns: dict[str, None] = {}
    for row in rows:
        for key in row:
            columns.setdefault(str(key), None)
    return list(columns)


def convert_to_csv(data: Any) -> str:
    rows = _rows(data)
    if not rows:
        return ""

    fields = columns_for(rows)
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=fields, lineterminator="\n")
    writer.writeheader()
    for row in rows:
        normalised = {str(key): value for key, value in row.items()}
        writer.writerow({field: _cell(normalised.get(field)) for field in fields})
    return buffer.getvalue()
