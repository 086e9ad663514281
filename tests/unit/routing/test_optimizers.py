"""Tests for per-venue route optimizers."""

import asyncio
from collections.abc import Sequence

import pytest

from dexswap.chains import BASE, ETHEREUM
from dexswap.models.route import PathSegment, Route
from dexswap.routing.cache import RouteCache
from dexswap.routing.optimizer import (
    AerodromeRouteOptimizer,
    UniswapV2RouteOptimizer,
    UniswapV3RouteOptimizer,
    UniswapV4RouteOptimizer,
    select_best,
)
from tests.conftest import (
    FakeClock,
    MockAerodromeRouter,
    MockUniswapV2Quoter,
    MockUniswapV3Quoter,
    MockUniswapV4Quoter,
    linear_amounts,
)
from tests.helpers import DAI, ETH, USDC, USDC_BASE, USDT, WETH, WETH_BASE

ONE_ETH = 10**18
WETH_TO_USDC = linear_amounts((3000 * 10**6, 10**18))


class TestSelectBest:
    """Winner is highest output, then fewer hops, then first seen."""

    def test_highest_output(self) -> None:
        a = Route(amount_out=100, path=(WETH, USDC))
        b = Route(amount_out=250, path=(WETH, DAI, USDC))
        assert select_best([a, b, None]) is b

    def test_fewer_hops_on_tie(self) -> None:
        a = Route(amount_out=100, path=(WETH, DAI, USDC))
        b = Route(amount_out=100, path=(WETH, USDC))
        assert select_best([a, b]) is b

    def test_first_on_full_tie(self) -> None:
        a = Route(amount_out=100, path=(WETH, USDT, USDC))
        b = Route(amount_out=100, path=(WETH, DAI, USDC))
        assert select_best([a, b]) is a

    def test_empty_routes_skipped(self) -> None:
        assert select_best([None, Route.empty()]) is None


class TestUniswapV2RouteOptimizer:
    """Tests for the constant-product search."""

    @pytest.mark.asyncio
    async def test_direct_route(self, eth_usdc_v2_quoter: MockUniswapV2Quoter) -> None:
        optimizer = UniswapV2RouteOptimizer(ETHEREUM, eth_usdc_v2_quoter)
        route = await optimizer.find_best_route(WETH, USDC, ONE_ETH)
        assert route.path == (WETH, USDC)
        assert route.amount_out == 3000 * 10**6

    @pytest.mark.asyncio
    async def test_native_input_quoted_as_weth(self, eth_usdc_v2_quoter: MockUniswapV2Quoter) -> None:
        optimizer = UniswapV2RouteOptimizer(ETHEREUM, eth_usdc_v2_quoter)
        route = await optimizer.find_best_route(ETH, USDC, ONE_ETH)
        assert route.path == (WETH, USDC)

    @pytest.mark.asyncio
    async def test_second_call_served_from_cache(
        self, eth_usdc_v2_quoter: MockUniswapV2Quoter, clock: FakeClock
    ) -> None:
        """A repeated search within the TTL makes no quoter calls."""
        optimizer = UniswapV2RouteOptimizer(
            ETHEREUM, eth_usdc_v2_quoter, cache=RouteCache(600, clock=clock)
        )
        first = await optimizer.find_best_route(WETH, USDC, ONE_ETH)
        calls_after_first = len(eth_usdc_v2_quoter.calls)

        second = await optimizer.find_best_route(WETH, USDC, ONE_ETH)

        assert second is first
        assert len(eth_usdc_v2_quoter.calls) == calls_after_first

    @pytest.mark.asyncio
    async def test_cache_expiry_requotes(
        self, eth_usdc_v2_quoter: MockUniswapV2Quoter, clock: FakeClock
    ) -> None:
        optimizer = UniswapV2RouteOptimizer(
            ETHEREUM, eth_usdc_v2_quoter, cache=RouteCache(600, clock=clock)
        )
        await optimizer.find_best_route(WETH, USDC, ONE_ETH)
        calls_after_first = len(eth_usdc_v2_quoter.calls)
        clock.advance(601)
        await optimizer.find_best_route(WETH, USDC, ONE_ETH)
        assert len(eth_usdc_v2_quoter.calls) == 2 * calls_after_first

    @pytest.mark.asyncio
    async def test_bridged_route_beats_direct(self) -> None:
        """Direct and bridged paths are compared together."""
        quoter = MockUniswapV2Quoter(
            {
                (WETH, USDC): [ONE_ETH, 100],
                (WETH, USDT, USDC): [ONE_ETH, 90, 150],
            }
        )
        route = await UniswapV2RouteOptimizer(ETHEREUM, quoter).find_best_route(WETH, USDC, ONE_ETH)
        assert route.path == (WETH, USDT, USDC)
        assert route.amount_out == 150

    @pytest.mark.asyncio
    async def test_tie_prefers_fewer_hops(self) -> None:
        quoter = MockUniswapV2Quoter(
            {
                (WETH, USDT, USDC): [ONE_ETH, 90, 100],
                (WETH, USDC): [ONE_ETH, 100],
            }
        )
        route = await UniswapV2RouteOptimizer(ETHEREUM, quoter).find_best_route(WETH, USDC, ONE_ETH)
        assert route.path == (WETH, USDC)

    @pytest.mark.asyncio
    async def test_tie_prefers_earlier_intermediary(self) -> None:
        """USDT is tried before DAI, so it wins an exact tie."""
        quoter = MockUniswapV2Quoter(
            {
                (WETH, DAI, USDC): [ONE_ETH, 90, 100],
                (WETH, USDT, USDC): [ONE_ETH, 90, 100],
            }
        )
        route = await UniswapV2RouteOptimizer(ETHEREUM, quoter).find_best_route(WETH, USDC, ONE_ETH)
        assert route.path == (WETH, USDT, USDC)

    @pytest.mark.asyncio
    async def test_no_liquidity_returns_empty_and_is_not_cached(self) -> None:
        quoter = MockUniswapV2Quoter()
        optimizer = UniswapV2RouteOptimizer(ETHEREUM, quoter)

        route = await optimizer.find_best_route(WETH, USDC, ONE_ETH)

        assert route.is_empty
        assert len(optimizer.cache) == 0
        calls_after_first = len(quoter.calls)
        await optimizer.find_best_route(WETH, USDC, ONE_ETH)
        assert len(quoter.calls) == 2 * calls_after_first

    @pytest.mark.asyncio
    async def test_zero_amount_makes_no_calls(self) -> None:
        quoter = MockUniswapV2Quoter()
        route = await UniswapV2RouteOptimizer(ETHEREUM, quoter).find_best_route(WETH, USDC, 0)
        assert route.is_empty
        assert quoter.calls == []

    @pytest.mark.asyncio
    async def test_truncated_amounts_ignored(self) -> None:
        """An amounts array shorter than the path is not a quote."""
        quoter = MockUniswapV2Quoter({(WETH, USDT, USDC): [ONE_ETH, 90]})
        route = await UniswapV2RouteOptimizer(ETHEREUM, quoter).find_best_route(WETH, USDC, ONE_ETH)
        assert route.is_empty

    @pytest.mark.asyncio
    async def test_concurrency_bounded(self) -> None:
        in_flight = 0
        peak = 0

        class SlowQuoter:
            async def get_amounts_out(self, amount_in: int, path: Sequence[str]) -> list[int] | None:
                nonlocal in_flight, peak
                in_flight += 1
                peak = max(peak, in_flight)
                await asyncio.sleep(0)
                in_flight -= 1
                return None

        optimizer = UniswapV2RouteOptimizer(ETHEREUM, SlowQuoter(), max_concurrency=2)  # type: ignore[arg-type]
        await optimizer.find_best_route(WETH, USDC, ONE_ETH)
        assert 1 <= peak <= 2


class TestUniswapV3RouteOptimizer:
    """Tests for the staged fee-tier search."""

    @pytest.mark.asyncio
    async def test_picks_best_fee_tier(self) -> None:
        quoter = MockUniswapV3Quoter(
            {
                ((WETH, USDC), (500,)): [ONE_ETH, 3001 * 10**6],
                ((WETH, USDC), (3000,)): [ONE_ETH, 2990 * 10**6],
            }
        )
        route = await UniswapV3RouteOptimizer(ETHEREUM, quoter).find_best_route(WETH, USDC, ONE_ETH)
        assert route.fees == (500,)
        assert route.amount_out == 3001 * 10**6
        assert route.encoded_path is not None
        assert len(route.encoded_path) == 43

    @pytest.mark.asyncio
    async def test_direct_liquidity_stops_search(self) -> None:
        """A liquid direct pool means bridged paths are never quoted."""
        quoter = MockUniswapV3Quoter(
            {
                ((WETH, USDC), (3000,)): [ONE_ETH, 100],
                ((WETH, USDT, USDC), (500, 100)): [ONE_ETH, 90, 10**9],
            }
        )
        route = await UniswapV3RouteOptimizer(ETHEREUM, quoter).find_best_route(WETH, USDC, ONE_ETH)
        assert route.amount_out == 100
        assert all(call[0] == "single" for call in quoter.calls)
        assert len(quoter.calls) == 4

    @pytest.mark.asyncio
    async def test_falls_back_to_two_hop(self) -> None:
        quoter = MockUniswapV3Quoter(
            {((WETH, USDT, USDC), (500, 100)): [ONE_ETH, 90, 2950 * 10**6]}
        )
        route = await UniswapV3RouteOptimizer(ETHEREUM, quoter).find_best_route(WETH, USDC, ONE_ETH)
        assert route.path == (WETH, USDT, USDC)
        assert route.fees == (500, 100)
        assert len(route.encoded_path or b"") == 66

    @pytest.mark.asyncio
    async def test_native_output_quoted_as_weth(self) -> None:
        quoter = MockUniswapV3Quoter(
            {((USDC, WETH), (500,)): [3000 * 10**6, ONE_ETH]}
        )
        route = await UniswapV3RouteOptimizer(ETHEREUM, quoter).find_best_route(
            USDC, ETH, 3000 * 10**6
        )
        assert route.path == (USDC, WETH)


class TestUniswapV4RouteOptimizer:
    @pytest.mark.asyncio
    async def test_native_stays_address_zero(self) -> None:
        quoter = MockUniswapV4Quoter({(ETH, USDC): WETH_TO_USDC})
        route = await UniswapV4RouteOptimizer(ETHEREUM, quoter).find_best_route(ETH, USDC, ONE_ETH)

        assert route.amount_out == 3000 * 10**6
        assert route.pool_key is not None
        assert route.pool_key.currency0 == ETH
        assert (route.pool_key.fee, route.pool_key.tick_spacing) == (3000, 60)
        pool_key, zero_for_one, amount_in = quoter.calls[0]
        assert zero_for_one is True
        assert amount_in == ONE_ETH

    @pytest.mark.asyncio
    async def test_reverse_direction(self) -> None:
        quoter = MockUniswapV4Quoter({(USDC, ETH): linear_amounts((10**18, 3000 * 10**6))})
        route = await UniswapV4RouteOptimizer(ETHEREUM, quoter).find_best_route(
            USDC, ETH, 3000 * 10**6
        )
        assert route.amount_out == ONE_ETH
        assert quoter.calls[0][1] is False

    @pytest.mark.asyncio
    async def test_liquid_direct_pool_skips_bridges(self) -> None:
        quoter = MockUniswapV4Quoter({(ETH, USDC): WETH_TO_USDC})
        route = await UniswapV4RouteOptimizer(ETHEREUM, quoter).find_best_route(ETH, USDC, ONE_ETH)
        assert route.path_segments is None
        assert len(quoter.calls) == 1
        assert quoter.path_calls == []

    @pytest.mark.asyncio
    async def test_bridges_when_direct_pool_dry(self) -> None:
        quoter = MockUniswapV4Quoter(
            paths={
                (ETH, USDC, DAI): linear_amounts((3000 * 10**6, 10**18), (10**18, 10**6)),
                (ETH, USDT, DAI): linear_amounts((2990 * 10**6, 10**18), (10**18, 10**6)),
            }
        )
        route = await UniswapV4RouteOptimizer(ETHEREUM, quoter).find_best_route(ETH, DAI, ONE_ETH)

        assert route.amount_out == 3000 * 10**18
        assert route.path == (ETH, USDC, DAI)
        assert route.fees == (3000, 3000)
        assert route.pool_key is None
        assert route.path_segments == (
            PathSegment(intermediate_currency=USDC, fee=3000, tick_spacing=60),
            PathSegment(intermediate_currency=DAI, fee=3000, tick_spacing=60),
        )
        currency_in, _, amount_in = quoter.path_calls[0]
        assert currency_in == ETH
        assert amount_in == ONE_ETH

    @pytest.mark.asyncio
    async def test_nothing_liquid(self) -> None:
        quoter = MockUniswapV4Quoter()
        route = await UniswapV4RouteOptimizer(ETHEREUM, quoter).find_best_route(ETH, USDC, ONE_ETH)
        assert route.is_empty
        assert len(quoter.calls) == 1
        bridges = [t for t in ETHEREUM.intermediary_tokens() if t not in (ETH, USDC)]
        assert len(quoter.path_calls) == len(bridges)


class TestAerodromeRouteOptimizer:
    """Tests for the stable/volatile search."""

    @pytest.mark.asyncio
    async def test_volatile_direct(self) -> None:
        router = MockAerodromeRouter(
            {((WETH_BASE, USDC_BASE), (False,)): WETH_TO_USDC}
        )
        route = await AerodromeRouteOptimizer(BASE, router).find_best_route(
            ETH, USDC_BASE, ONE_ETH
        )
        assert route.amount_out == 3000 * 10**6
        assert route.aero_routes is not None
        (hop,) = route.aero_routes
        assert hop.from_token == WETH_BASE
        assert hop.stable is False
        assert hop.factory == BASE.aerodrome.factory
        assert len(router.calls) == 2

    @pytest.mark.asyncio
    async def test_stable_wins_when_better(self) -> None:
        router = MockAerodromeRouter(
            {
                ((WETH_BASE, USDC_BASE), (True,)): [ONE_ETH, 101],
                ((WETH_BASE, USDC_BASE), (False,)): [ONE_ETH, 100],
            }
        )
        route = await AerodromeRouteOptimizer(BASE, router).find_best_route(
            WETH_BASE, USDC_BASE, ONE_ETH
        )
        assert route.aero_routes is not None
        assert route.aero_routes[0].stable is True

    def test_requires_factory(self) -> None:
        """Chains without Aerodrome fail at construction."""
        from dexswap.errors import ConfigurationError

        with pytest.raises(ConfigurationError):
            AerodromeRouteOptimizer(ETHEREUM, MockAerodromeRouter())
