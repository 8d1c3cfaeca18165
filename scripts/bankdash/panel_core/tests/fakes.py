"""In-memory stand-ins for requests sessions used by the collector tests."""

from __future__ import annotations

import io
from typing import Any

from rich.console import Console


class FakeResponse:
    def __init__(self, payload: Any = None, status_code: int = 200, invalid_json: bool = False):
        self.payload = payload
        self.status_code = status_code
        self.invalid_json = invalid_json

    def json(self) -> Any:
        if self.invalid_json:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self.payload


class FakeSession:
    """Routes GET/POST calls by URL.

    A route value may be a FakeResponse, an exception instance to raise, or a
    callable returning either.
    """

    def __init__(self, routes: dict[str, Any] | None = None):
        self.routes: dict[str, Any] = dict(routes or {})
        self.calls: list[tuple[str, str, Any]] = []

    def _dispatch(self, url: str) -> FakeResponse:
        if url not in self.routes:
            return FakeResponse({"detail": "not found"}, status_code=404)
        result = self.routes[url]
        if callable(result):
            result = result()
        if isinstance(result, Exception):
            raise result
        return result

    def get(self, url: str, headers: dict | None = None, timeout: float | None = None) -> FakeResponse:
        self.calls.append(("GET", url, None))
        return self._dispatch(url)

    def post(
        self,
        url: str,
        json: Any = None,
        headers: dict | None = None,
        timeout: float | None = None,
    ) -> FakeResponse:
        self.calls.append(("POST", url, json))
        return self._dispatch(url)

    def calls_for(self, method: str) -> list[tuple[str, str, Any]]:
        return [call for call in self.calls if call[0] == method]


def render_text(renderable, width: int = 200) -> str:
    console = Console(file=io.StringIO(), width=width, color_system=None, force_terminal=False)
    console.print(renderable)
    return console.file.getvalue()
