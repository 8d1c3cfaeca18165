"""Collector helpers and package exports."""

from __future__ import annotations

import logging
import threading
from typing import Any

import requests

from panel_core.errors import DecodeError, FetchError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10

JSON_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}


def _response_json(response: requests.Response, url: str) -> Any:
    try:
        return response.json()
    except ValueError as exc:
        raise DecodeError(f"invalid JSON from {url}") from exc


def _check_status(response: requests.Response) -> None:
    if 200 <= response.status_code < 300:
        return
    raise FetchError(
        f"Request failed with status code {response.status_code}",
        kind="status",
        status_code=response.status_code,
    )


def get_json(session: requests.Session, url: str, timeout: float = DEFAULT_TIMEOUT) -> Any:
    """GET ``url`` and return the decoded body.

    Connectivity problems and timeouts become ``FetchError(kind="network")``,
    non-2xx responses ``FetchError(kind="status")``, undecodable bodies
    ``DecodeError``.
    """
    try:
        response = session.get(url, headers={"Accept": "application/json"}, timeout=timeout)
    except requests.Timeout as exc:
        raise FetchError(f"timed out after {timeout}s") from exc
    except requests.RequestException as exc:
        raise FetchError(f"could not reach {url}: {exc}") from exc

    _check_status(response)
    return _response_json(response, url)


def post_json(
    session: requests.Session,
    url: str,
    payload: dict,
    timeout: float = DEFAULT_TIMEOUT,
) -> Any:
    try:
        response = session.post(url, json=payload, headers=JSON_HEADERS, timeout=timeout)
    except requests.Timeout as exc:
        raise FetchError(f"timed out after {timeout}s") from exc
    except requests.RequestException as exc:
        raise FetchError(f"could not reach {url}: {exc}") from exc

    _check_status(response)
    return _response_json(response, url)


class RequestSequence:
    """Monotonic per-key request tokens.

    A response may only be applied while its token is still the latest one
    issued for its key.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._latest: dict[str, int] = {}

    def issue(self, key: str) -> int:
        with self._lock:
            token = self._latest.get(key, 0) + 1
            self._latest[key] = token
            return token

    def is_current(self, key: str, token: int) -> bool:
        with self._lock:
            return self._latest.get(key, 0) == token

    def invalidate(self, key: str) -> None:
        self.issue(key)


def describe_error(exc: Exception) -> str:
    message = str(exc).strip()
    return message or exc.__class__.__name__
