"""In-process response cache with TTL expiry and a bounded entry count.

One instance is created per application and stored on ``app.state.cache``;
routers receive it through :func:`get_cache`. Writes invalidate by key prefix
(see :mod:`crm_api.middleware.cache`), as do the background maintenance jobs.
Entries live in a :class:`cachetools.TTLCache`, which handles expiry and
least-recently-used eviction.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable
from typing import Any

from cachetools import TTLCache
from fastapi import Request

logger = logging.getLogger(__name__)

API_V1_PREFIX = "/api/v1"

_MISSING = object()


class ResponseCache:
    """Cache key -> serialized response payload."""

    def __init__(
        self,
        ttl_seconds: int = 300,
        max_entries: int = 512,
        timer: Callable[[], float] = time.monotonic,
    ):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self._entries: TTLCache = TTLCache(maxsize=max_entries, ttl=ttl_seconds, timer=timer)

    def __len__(self) -> int:
        self._entries.expire()
        return len(self._entries)

    def get(self, key: str) -> Any | None:
        return self._entries.get(key)

    def set(self, key: str, payload: Any) -> None:
        self._entries[key] = payload

    def invalidate(self, prefix: str | None = None) -> int:
        """Drop every key starting with ``prefix`` (all keys when None)."""
        if prefix is None:
            count = len(self)
            self._entries.clear()
            return count
        stale = [k for k in list(self._entries.keys()) if k.startswith(prefix)]
        return sum(1 for key in stale if self._entries.pop(key, _MISSING) is not _MISSING)

    def invalidate_resources(self, resources: Iterable[str]) -> int:
        """Drop cached reads of the given /api/v1 resources (e.g. ``"audits"``)."""
        dropped = sum(self.invalidate(f"{API_V1_PREFIX}/{name}") for name in resources)
        if dropped:
            logger.debug("Invalidated %d cached response(s) for %s", dropped, ", ".join(resources))
        return dropped

    def purge_expired(self) -> int:
        return len(self._entries.expire())

    def clear(self) -> None:
        self._entries.clear()


def cache_key(request: Request, user_id: str | None = None) -> str:
    """Key = path + sorted query string + acting user."""
    query = "&".join(f"{k}={v}" for k, v in sorted(request.query_params.multi_items()))
    return f"{request.url.path}?{query}|{user_id or 'anonymous'}"


def get_cache(request: Request) -> ResponseCache:
    """FastAPI dependency returning the application's cache instance."""
    return request.app.state.cache
