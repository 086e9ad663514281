"""Per-venue best-route search with caching.

Each optimizer turns (token_in, amount_in, token_out) into the Route with
the highest quoted output on its venue. Candidates within a stage are quoted
concurrently; the winner is chosen in candidate order so the result does not
depend on which quote returns first:

1. Highest amount_out
2. Fewer hops
3. Earlier candidate
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence

import structlog

from dexswap.chains import ChainConfig, require_address
from dexswap.constants import FEE_MEDIUM, TICK_SPACING
from dexswap.encoding.path import encode_path
from dexswap.models.route import AerodromeHop, PathSegment, PoolKey, Route
from dexswap.models.types import is_native, normalize_address
from dexswap.routing.cache import RouteCache, route_key
from dexswap.routing.candidates import (
    Candidate,
    concentrated_liquidity_stages,
    constant_product_stages,
    single_intermediary_paths,
    stable_volatile_stages,
)
from dexswap.venues.aerodrome import AerodromeQuoter
from dexswap.venues.uniswap_v2 import UniswapV2Quoter
from dexswap.venues.uniswap_v3 import UniswapV3Quoter
from dexswap.venues.uniswap_v4 import UniswapV4Quoter

logger = structlog.get_logger()

# Upper bound on in-flight quoter calls for one search
DEFAULT_MAX_CONCURRENCY = 16


def _better(candidate: Route, best: Route | None) -> bool:
    if candidate.is_empty:
        return False
    if best is None:
        return True
    if candidate.amount_out != best.amount_out:
        return candidate.amount_out > best.amount_out
    return candidate.hops < best.hops


def select_best(routes: Sequence[Route | None]) -> Route | None:
    """Deterministic winner among quoted routes (None and empty entries skipped)."""
    best: Route | None = None
    for route in routes:
        if route is not None and _better(route, best):
            best = route
    return best


class RouteOptimizer:
    """Base optimizer: cache lookup, staged candidate evaluation, insert.

    Subclasses provide candidate_stages() and evaluate().

    Args:
        chain: Address table used for bridging tokens and wrapped native
        cache: Route cache; one per optimizer so venues never share entries
        stop_at_first_liquid_stage: Return as soon as a stage finds liquidity
        max_concurrency: Upper bound on concurrent quoter calls
    """

    venue: str = "base"
    stop_at_first_liquid_stage: bool = True

    def __init__(
        self,
        chain: ChainConfig,
        cache: RouteCache | None = None,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    ) -> None:
        self.chain = chain
        self.cache = cache if cache is not None else RouteCache()
        self.max_concurrency = max_concurrency

    def _wrap_native(self, token: str) -> str:
        return normalize_address(self.chain.weth) if is_native(token) else normalize_address(token)

    def candidate_stages(self, token_in: str, token_out: str) -> list[list[Candidate]]:
        raise NotImplementedError

    async def evaluate(self, candidate: Candidate, amount_in: int) -> Route | None:
        raise NotImplementedError

    async def find_best_route(self, token_in: str, token_out: str, amount_in: int) -> Route:
        """Best route for an exact input, served from cache when possible.

        Returns:
            The winning Route, or Route.empty() when nothing is liquid.
            Empty results are not cached.
        """
        key = route_key(token_in, amount_in, token_out)
        cached = await self.cache.get(key)
        if cached is not None:
            logger.debug("route_cache_hit", venue=self.venue, amount_in=amount_in)
            return cached

        route = await self._search(token_in, token_out, amount_in)
        if route.is_empty:
            logger.info(
                "route_not_found",
                venue=self.venue,
                token_in=key[0],
                token_out=key[2],
                amount_in=amount_in,
            )
            return route

        stored = await self.cache.put_if_absent(key, route)
        logger.info(
            "route_found",
            venue=self.venue,
            path=list(stored.path),
            fees=list(stored.fees),
            amount_out=stored.amount_out,
        )
        return stored

    async def _search(self, token_in: str, token_out: str, amount_in: int) -> Route:
        if amount_in <= 0:
            return Route.empty()

        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def bounded(candidate: Candidate) -> Route | None:
            async with semaphore:
                return await self.evaluate(candidate, amount_in)

        best: Route | None = None
        for stage in self.candidate_stages(token_in, token_out):
            if not stage:
                continue
            results = await asyncio.gather(*(bounded(c) for c in stage))
            stage_best = select_best(results)
            if stage_best is not None and _better(stage_best, best):
                best = stage_best
            if best is not None and self.stop_at_first_liquid_stage:
                break
        return best if best is not None else Route.empty()


class UniswapV2RouteOptimizer(RouteOptimizer):
    """Constant-product search: direct and bridged paths compared together."""

    venue = "uniswap_v2"
    stop_at_first_liquid_stage = False

    def __init__(
        self,
        chain: ChainConfig,
        quoter: UniswapV2Quoter,
        cache: RouteCache | None = None,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    ) -> None:
        super().__init__(chain, cache, max_concurrency)
        self.quoter = quoter

    def candidate_stages(self, token_in: str, token_out: str) -> list[list[Candidate]]:
        return constant_product_stages(
            self._wrap_native(token_in),
            self._wrap_native(token_out),
            self.chain.intermediary_tokens(),
            self.chain.intermediary_pairs(),
        )

    async def evaluate(self, candidate: Candidate, amount_in: int) -> Route | None:
        amounts = await self.quoter.get_amounts_out(amount_in, list(candidate.path))
        if not amounts or len(amounts) != len(candidate.path):
            return None
        return Route(amount_out=amounts[-1], path=candidate.path)


class UniswapV3RouteOptimizer(RouteOptimizer):
    """Fee-tier search; bridged paths only when no direct pool is liquid."""

    venue = "uniswap_v3"

    def __init__(
        self,
        chain: ChainConfig,
        quoter: UniswapV3Quoter,
        cache: RouteCache | None = None,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    ) -> None:
        super().__init__(chain, cache, max_concurrency)
        self.quoter = quoter

    def candidate_stages(self, token_in: str, token_out: str) -> list[list[Candidate]]:
        return concentrated_liquidity_stages(
            self._wrap_native(token_in),
            self._wrap_native(token_out),
            self.chain.intermediary_tokens(),
            self.chain.intermediary_pairs(),
        )

    async def evaluate(self, candidate: Candidate, amount_in: int) -> Route | None:
        encoded = encode_path(candidate.path, candidate.fees)
        if candidate.hops == 1:
            result = await self.quoter.quote_exact_input_single(
                candidate.path[0], candidate.path[1], candidate.fees[0], amount_in
            )
        else:
            result = await self.quoter.quote_exact_input(encoded, amount_in)
        if result is None:
            return None
        return Route(
            amount_out=result.amount_out,
            path=candidate.path,
            fees=candidate.fees,
            encoded_path=encoded,
        )


class UniswapV4RouteOptimizer(RouteOptimizer):
    """Default-fee pools only; native ETH stays address(0).

    The direct pool (fee 3000 / tick spacing 60, no hooks) is tried first.
    Only when it is dry are paths through one bridging token quoted, each hop
    on the same default-fee pool shape, as a multi-hop PathKey route.
    """

    venue = "uniswap_v4"

    def __init__(
        self,
        chain: ChainConfig,
        quoter: UniswapV4Quoter,
        cache: RouteCache | None = None,
        fee: int = FEE_MEDIUM,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    ) -> None:
        super().__init__(chain, cache, max_concurrency)
        self.quoter = quoter
        self.fee = fee

    def pool_key(self, token_in: str, token_out: str) -> PoolKey:
        return PoolKey.create(token_in, token_out, self.fee, TICK_SPACING[self.fee])

    def candidate_stages(self, token_in: str, token_out: str) -> list[list[Candidate]]:
        direct = Candidate(
            path=(normalize_address(token_in), normalize_address(token_out)), fees=(self.fee,)
        )
        bridged = [
            Candidate(path=path, fees=(self.fee, self.fee))
            for path in single_intermediary_paths(
                token_in, token_out, self.chain.intermediary_tokens()
            )
        ]
        return [[direct], bridged]

    def path_segments(self, candidate: Candidate) -> tuple[PathSegment, ...]:
        """PathKeys for every hop after the input currency."""
        return tuple(
            PathSegment(intermediate_currency=currency, fee=fee, tick_spacing=TICK_SPACING[fee])
            for currency, fee in zip(candidate.path[1:], candidate.fees, strict=True)
        )

    async def evaluate(self, candidate: Candidate, amount_in: int) -> Route | None:
        if candidate.hops > 1:
            segments = self.path_segments(candidate)
            result = await self.quoter.quote_exact_input(candidate.path[0], segments, amount_in)
            if result is None:
                return None
            return Route(
                amount_out=result.amount_out,
                path=candidate.path,
                fees=candidate.fees,
                path_segments=segments,
            )

        token_in, token_out = candidate.path
        key = self.pool_key(token_in, token_out)
        result = await self.quoter.quote_exact_input_single(
            key, key.zero_for_one(token_in), amount_in
        )
        if result is None:
            return None
        return Route(
            amount_out=result.amount_out,
            path=candidate.path,
            fees=candidate.fees,
            pool_key=key,
        )


class AerodromeRouteOptimizer(RouteOptimizer):
    """Stable/volatile search; longer routes only when shorter ones are dry."""

    venue = "aerodrome"

    def __init__(
        self,
        chain: ChainConfig,
        router: AerodromeQuoter,
        cache: RouteCache | None = None,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    ) -> None:
        super().__init__(chain, cache, max_concurrency)
        self.router = router
        self.factory = require_address(chain.aerodrome.factory, "aerodrome.factory")

    def candidate_stages(self, token_in: str, token_out: str) -> list[list[Candidate]]:
        return stable_volatile_stages(
            self._wrap_native(token_in),
            self._wrap_native(token_out),
            self.chain.intermediary_tokens(),
            self.chain.intermediary_pairs(),
        )

    def hops_for(self, candidate: Candidate) -> tuple[AerodromeHop, ...]:
        return tuple(
            AerodromeHop(
                from_token=candidate.path[i],
                to_token=candidate.path[i + 1],
                stable=candidate.stable[i],
                factory=self.factory,
            )
            for i in range(candidate.hops)
        )

    async def evaluate(self, candidate: Candidate, amount_in: int) -> Route | None:
        hops = self.hops_for(candidate)
        amounts = await self.router.get_amounts_out(amount_in, hops)
        if not amounts or len(amounts) != len(hops) + 1:
            return None
        return Route(amount_out=amounts[-1], path=candidate.path, aero_routes=hops)


__all__ = [
    "DEFAULT_MAX_CONCURRENCY",
    "select_best",
    "RouteOptimizer",
    "UniswapV2RouteOptimizer",
    "UniswapV3RouteOptimizer",
    "UniswapV4RouteOptimizer",
    "AerodromeRouteOptimizer",
]
