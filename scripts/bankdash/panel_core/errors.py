"""Error taxonomy shared by collectors."""

from __future__ import annotations


class FetchError(Exception):
    """A remote call failed before a usable body was received.

    ``kind`` is ``"network"`` for connectivity problems and timeouts, and
    ``"status"`` for non-2xx responses (``status_code`` is then set).
    """

    def __init__(self, message: str, kind: str = "network", status_code: int | None = None):
        super().__init__(message)
        self.kind = kind
        self.status_code = status_code


class DecodeError(ValueError):
    """A response body did not have the expected shape."""


class ValidationError(ValueError):
    """User input was rejected before any request was made."""
