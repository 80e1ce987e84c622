"""Write-logging middleware that also invalidates cached reads.

Any successful POST/PUT/PATCH/DELETE under /api/v1 drops the cached responses
of the resource it touched plus the views derived from it.
"""

import logging
import time
from collections.abc import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from crm_api.core.cache import API_V1_PREFIX

logger = logging.getLogger(__name__)

# Methods that mutate state
_WRITE_METHODS = {"POST", "PUT", "PATCH", "DELETE"}

# Writes to the key resource also make these cached views stale.
_DEPENDENTS: dict[str, tuple[str, ...]] = {
    "companies": ("companies", "audits", "tiers", "meetings"),
    "audits": ("audits",),
    "tiers": ("tiers", "companies"),
    "payments": ("payments", "companies"),
    "notes": ("notes", "companies"),
    "meetings": ("meetings", "companies"),
    "users": ("users",),
    "notifications": ("notifications",),
}


def stale_resources(path: str) -> tuple[str, ...]:
    """Resources whose cached reads are invalidated by a write to ``path``."""
    if not path.startswith(API_V1_PREFIX + "/"):
        return ()
    parts = [p for p in path[len(API_V1_PREFIX):].split("/") if p]
    if not parts:
        return ()
    return _DEPENDENTS.get(parts[0], (parts[0],))


def stale_prefixes(path: str) -> list[str]:
    """Cache key prefixes invalidated by a write to ``path``."""
    return [f"{API_V1_PREFIX}/{resource}" for resource in stale_resources(path)]


class CacheInvalidationMiddleware(BaseHTTPMiddleware):
    """Logs all write operations and invalidates the cache entries they make stale."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start = time.monotonic()
        response = await call_next(request)
        duration_ms = round((time.monotonic() - start) * 1000)

        if request.method in _WRITE_METHODS:
            logger.info(
                "%s %s -> %s (%sms)",
                request.method, request.url.path, response.status_code, duration_ms,
            )
            cache = getattr(request.app.state, "cache", None)
            if cache is not None and response.status_code < 400:
                cache.invalidate_resources(stale_resources(request.url.path))

        return response
