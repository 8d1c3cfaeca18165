"""Remote-or-fallback module collector for the analyser panels."""

from __future__ import annotations

import json
import logging
import threading
import time
from concurrent.futures import Executor, Future
from typing import Any, Callable, Sequence
from urllib.parse import quote

import requests

from panel_core.collectors import DEFAULT_TIMEOUT, RequestSequence, describe_error, get_json
from panel_core.errors import DecodeError, FetchError
from panel_core.formatting import compact_relative_age
from panel_core.models import ModuleRecord, PanelData, decode_modules_payload

logger = logging.getLogger(__name__)

DEFAULT_STALE_SECONDS = 5 * 60

# encodeURIComponent leaves these unescaped as well
DETAIL_SAFE_CHARS = "!~*'()"


class ModuleSource:
    """Module records for one analyser panel, from an API or the fallback set.

    While disconnected no request is ever made and ``modules`` is the
    fallback list. Once connected, each fetch takes a token from the shared
    ``RequestSequence``; only the response to the latest token is applied,
    so a slow superseded request can never overwrite newer state. Failed
    fetches record ``error`` and keep whatever ``data`` was cached before.
    """

    def __init__(
        self,
        key: str,
        title: str,
        fallback: Sequence[ModuleRecord],
        endpoint: str = "",
        session: requests.Session | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        stale_seconds: float = DEFAULT_STALE_SECONDS,
        sequence: RequestSequence | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.key = key
        self.title = title
        self.fallback = list(fallback)
        self.endpoint = (endpoint or "").strip()
        self.enabled = False
        self.session = session or requests.Session()
        self.timeout = timeout
        self.stale_seconds = stale_seconds
        self.data: list[ModuleRecord] | None = None
        self.is_loading = False
        self.error: str | None = None
        self.fetched_at: float | None = None
        self._sequence = sequence or RequestSequence()
        self._clock = clock
        self._lock = threading.Lock()

    @property
    def active(self) -> bool:
        return self.enabled and bool(self.endpoint)

    @property
    def modules(self) -> list[ModuleRecord]:
        data = self.data
        return list(data) if data is not None else list(self.fallback)

    @property
    def state(self) -> str:
        if not self.enabled:
            return "disconnected"
        if self.is_loading:
            return "connecting"
        if self.error:
            return "errored"
        if self.data is not None:
            return "connected"
        return "connecting"

    def connect(self, endpoint: str | None = None) -> bool:
        candidate = (self.endpoint if endpoint is None else endpoint).strip()
        if not candidate:
            return False
        with self._lock:
            if candidate != self.endpoint:
                self.data = None
                self.fetched_at = None
            self.endpoint = candidate
            self.enabled = True
            self.error = None
        logger.info("%s: connecting to %s", self.key, candidate)
        self.refetch()
        return True

    def disconnect(self) -> None:
        self._sequence.invalidate(self.key)
        with self._lock:
            self.enabled = False
            self.is_loading = False
            self.data = None
            self.error = None
            self.fetched_at = None
        logger.info("%s: disconnected, using fallback data", self.key)

    def refetch(self) -> bool:
        """Run one fetch; return True when its result was applied."""
        with self._lock:
            if not self.active:
                return False
            token = self._sequence.issue(self.key)
            endpoint = self.endpoint
            self.is_loading = True

        try:
            modules = decode_modules_payload(get_json(self.session, endpoint, self.timeout))
        except (FetchError, DecodeError) as exc:
            logger.warning("%s: fetch from %s failed: %s", self.key, endpoint, exc)
            return self._resolve(token, error=describe_error(exc))
        return self._resolve(token, modules=modules)

    def refetch_async(self, executor: Executor) -> Future:
        return executor.submit(self.refetch)

    def refetch_if_stale(self, executor: Executor | None = None) -> bool:
        # errored sources wait for an explicit refetch() or connect()
        if not self.active or self.is_loading or self.error is not None or not self.is_stale():
            return False
        if executor is None:
            self.refetch()
        else:
            self.refetch_async(executor)
        return True

    def _resolve(
        self,
        token: int,
        modules: list[ModuleRecord] | None = None,
        error: str | None = None,
    ) -> bool:
        with self._lock:
            if not self._sequence.is_current(self.key, token):
                logger.debug("%s: dropping superseded response (token %d)", self.key, token)
                return False
            self.is_loading = False
            if error is not None:
                self.error = error
            else:
                self.data = modules
                self.error = None
                self.fetched_at = self._clock()
            return True

    def age_seconds(self, now: float | None = None) -> float | None:
        if self.fetched_at is None:
            return None
        current = self._clock() if now is None else now
        return max(0.0, current - self.fetched_at)

    def is_stale(self, now: float | None = None) -> bool:
        age = self.age_seconds(now)
        return age is None or age >= self.stale_seconds

    def detail_url(self, title: str) -> str:
        return f"{self.endpoint.rstrip('/')}/details/{quote(title, safe=DETAIL_SAFE_CHARS)}"

    def fetch_details(self, title: str) -> Any | None:
        logger.info("Opening detailed view for: %s", title)
        if not self.active:
            return None

        url = self.detail_url(title)
        try:
            detail = get_json(self.session, url, self.timeout)
        except (FetchError, DecodeError) as exc:
            logger.warning("Failed to fetch detailed data for %s: %s", title, exc)
            return None
        logger.debug("Detailed data for %s: %s", title, json.dumps(detail, default=str))
        return detail


def collect(source: ModuleSource) -> PanelData:
    state = source.state
    modules = source.modules
    status = "warn" if state == "errored" else "ok"
    age = source.age_seconds()

    return PanelData(
        key=source.key,
        title=source.title,
        status=status,
        items=[module.to_dict() for module in modules],
        meta={
            "count": len(modules),
            "source": "api" if source.data is not None else "fallback",
            "state": state,
            "endpoint": source.endpoint,
            "loading": source.is_loading,
            "updated": compact_relative_age(age) if age is not None else "n/a",
            "stale": source.active and source.is_stale(),
        },
        errors=[source.error] if source.error else [],
    )
