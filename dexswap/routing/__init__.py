"""Route discovery: candidate generation, per-venue optimizers and the route cache."""

from dexswap.routing.cache import RouteCache, RouteKey, route_key
from dexswap.routing.candidates import Candidate
from dexswap.routing.optimizer import (
    AerodromeRouteOptimizer,
    RouteOptimizer,
    UniswapV2RouteOptimizer,
    UniswapV3RouteOptimizer,
    UniswapV4RouteOptimizer,
    select_best,
)

__all__ = [
    "RouteCache",
    "RouteKey",
    "route_key",
    "Candidate",
    "RouteOptimizer",
    "UniswapV2RouteOptimizer",
    "UniswapV3RouteOptimizer",
    "UniswapV4RouteOptimizer",
    "AerodromeRouteOptimizer",
    "select_best",
]
