"""UniswapV3 SwapRouter02 adapter."""

from __future__ import annotations

from dexswap.chains import ChainConfig, require_address
from dexswap.encoding.path import encode_path
from dexswap.models.result import TransactionRequest
from dexswap.models.route import Route
from dexswap.models.trade import TradeShape
from dexswap.routing.optimizer import UniswapV3RouteOptimizer
from dexswap.venues.uniswap_v3 import UniswapV3Quoter, encode_exact_input, encode_exact_input_single
from dexswap.wallet import Signer

from .base import SwapRequest


class UniswapV3Adapter:
    """Fee-tier routes through SwapRouter02.

    Native ETH input is sent as value and wrapped by the router; native ETH
    output is unwrapped by the router and forwarded to the recipient.
    """

    name = "UniswapV3"

    def __init__(
        self,
        chain: ChainConfig,
        quoter: UniswapV3Quoter,
        optimizer: UniswapV3RouteOptimizer | None = None,
    ) -> None:
        self.swap_router = require_address(chain.uniswap_v3.swap_router, "uniswap_v3.swap_router")
        self.quoter = quoter
        self.optimizer = optimizer or UniswapV3RouteOptimizer(chain, quoter)

    @property
    def spender(self) -> str:
        return self.swap_router

    async def find_route(self, token_in: str, token_out: str, amount_in: int) -> Route:
        return await self.optimizer.find_best_route(token_in, token_out, amount_in)

    async def spot_amount_out(self, route: Route, amount_in: int) -> int | None:
        if route.hops == 1:
            result = await self.quoter.quote_exact_input_single(
                route.path[0], route.path[1], route.fees[0], amount_in
            )
        else:
            path = route.encoded_path or encode_path(route.path, route.fees)
            result = await self.quoter.quote_exact_input(path, amount_in)
        return result.amount_out if result else None

    async def build_swap(self, request: SwapRequest, wallet: Signer) -> TransactionRequest:
        route = request.route
        unwrap_to = request.recipient if request.shape == TradeShape.TOKEN_TO_ETH else None
        value = request.amount_in if request.shape == TradeShape.ETH_TO_TOKEN else 0

        if route.hops == 1:
            to, data = encode_exact_input_single(
                self.swap_router,
                route.path[0],
                route.path[1],
                route.fees[0],
                request.recipient,
                request.amount_in,
                request.amount_out_min,
                request.deadline,
                unwrap_to=unwrap_to,
            )
        else:
            to, data = encode_exact_input(
                self.swap_router,
                route.encoded_path or encode_path(route.path, route.fees),
                request.recipient,
                request.amount_in,
                request.amount_out_min,
                request.deadline,
                unwrap_to=unwrap_to,
            )
        return {"to": to, "data": data, "value": value}


__all__ = ["UniswapV3Adapter"]
