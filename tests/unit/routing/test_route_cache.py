"""Tests for RouteCache."""

import pytest

from dexswap.models.route import Route
from dexswap.routing.cache import RouteCache, route_key
from tests.conftest import FakeClock
from tests.helpers import USDC, WETH


def _route(amount_out: int) -> Route:
    return Route(amount_out=amount_out, path=(WETH, USDC))


class TestRouteKey:
    def test_normalizes_case(self) -> None:
        upper = "0x" + WETH[2:].upper()
        assert route_key(upper, 10**18, USDC) == route_key(WETH, 10**18, USDC)

    def test_amount_is_part_of_key(self) -> None:
        assert route_key(WETH, 1, USDC) != route_key(WETH, 2, USDC)


class TestRouteCache:
    """Tests for TTL and insert-if-absent semantics."""

    @pytest.mark.asyncio
    async def test_miss(self, clock: FakeClock) -> None:
        cache = RouteCache(ttl_seconds=600, clock=clock)
        assert await cache.get(route_key(WETH, 1, USDC)) is None

    @pytest.mark.asyncio
    async def test_hit_within_ttl(self, clock: FakeClock) -> None:
        cache = RouteCache(ttl_seconds=600, clock=clock)
        key = route_key(WETH, 1, USDC)
        route = _route(100)
        await cache.put_if_absent(key, route)
        clock.advance(599)
        assert await cache.get(key) is route

    @pytest.mark.asyncio
    async def test_expires_at_ttl(self, clock: FakeClock) -> None:
        cache = RouteCache(ttl_seconds=600, clock=clock)
        key = route_key(WETH, 1, USDC)
        await cache.put_if_absent(key, _route(100))
        clock.advance(600)
        assert await cache.get(key) is None
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_first_insert_wins(self, clock: FakeClock) -> None:
        """A second insert for a live key returns the original route."""
        cache = RouteCache(ttl_seconds=600, clock=clock)
        key = route_key(WETH, 1, USDC)
        first = await cache.put_if_absent(key, _route(100))
        second = await cache.put_if_absent(key, _route(200))
        assert second is first
        assert (await cache.get(key)).amount_out == 100  # type: ignore[union-attr]

    @pytest.mark.asyncio
    async def test_replaces_expired_entry(self, clock: FakeClock) -> None:
        cache = RouteCache(ttl_seconds=10, clock=clock)
        key = route_key(WETH, 1, USDC)
        await cache.put_if_absent(key, _route(100))
        clock.advance(11)
        stored = await cache.put_if_absent(key, _route(200))
        assert stored.amount_out == 200

    @pytest.mark.asyncio
    async def test_clear(self, clock: FakeClock) -> None:
        cache = RouteCache(ttl_seconds=600, clock=clock)
        await cache.put_if_absent(route_key(WETH, 1, USDC), _route(100))
        await cache.clear()
        assert len(cache) == 0
