"""Time-bounded cache of discovered routes.

Route discovery fans out into dozens of quoter calls, so a route found for
(token_in, amount_in, token_out) is reused for a fixed window. Expired
entries are dropped lazily when read.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from dataclasses import dataclass

import structlog

from dexswap.constants import ROUTE_CACHE_TTL_SECONDS
from dexswap.models.route import Route
from dexswap.models.types import normalize_address

logger = structlog.get_logger()

RouteKey = tuple[str, int, str]


def route_key(token_in: str, amount_in: int, token_out: str) -> RouteKey:
    """Cache key with addresses normalized to lowercase."""
    return (normalize_address(token_in), int(amount_in), normalize_address(token_out))


@dataclass
class _Entry:
    route: Route
    stored_at: float


class RouteCache:
    """Insert-if-absent route store with a TTL.

    Args:
        ttl_seconds: Lifetime of an entry
        clock: Monotonic time source, injectable for tests
    """

    def __init__(
        self,
        ttl_seconds: float = ROUTE_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[RouteKey, _Entry] = {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def _live(self, key: RouteKey) -> Route | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.stored_at >= self.ttl_seconds:
            del self._entries[key]
            return None
        return entry.route

    async def get(self, key: RouteKey) -> Route | None:
        """The cached route, or None if absent or expired."""
        async with self._lock:
            return self._live(key)

    async def put_if_absent(self, key: RouteKey, route: Route) -> Route:
        """Store route unless a live entry exists; return whichever is stored.

        Two concurrent searches for the same key both end up returning the
        route that was inserted first.
        """
        async with self._lock:
            existing = self._live(key)
            if existing is not None:
                return existing
            self._entries[key] = _Entry(route=route, stored_at=self._clock())
            return route

    async def clear(self) -> None:
        async with self._lock:
            self._entries.clear()


__all__ = ["RouteKey", "RouteCache", "route_key"]
