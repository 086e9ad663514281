"""UniswapV2 Router02 adapter."""

from __future__ import annotations

from dexswap.chains import ChainConfig, require_address
from dexswap.errors import EncodingError
from dexswap.models.result import TransactionRequest
from dexswap.models.route import Route
from dexswap.models.trade import TradeShape
from dexswap.routing.optimizer import UniswapV2RouteOptimizer
from dexswap.venues.uniswap_v2 import (
    UniswapV2Quoter,
    encode_swap_exact_eth_for_tokens,
    encode_swap_exact_tokens_for_eth,
    encode_swap_exact_tokens_for_tokens,
)
from dexswap.wallet import Signer

from .base import SwapRequest


class UniswapV2Adapter:
    """Swaps through Router02 with WETH standing in for native ETH."""

    name = "UniswapV2"

    def __init__(
        self,
        chain: ChainConfig,
        quoter: UniswapV2Quoter,
        optimizer: UniswapV2RouteOptimizer | None = None,
    ) -> None:
        self.router = require_address(chain.uniswap_v2.router, "uniswap_v2.router")
        self.quoter = quoter
        self.optimizer = optimizer or UniswapV2RouteOptimizer(chain, quoter)

    @property
    def spender(self) -> str:
        return self.router

    async def find_route(self, token_in: str, token_out: str, amount_in: int) -> Route:
        return await self.optimizer.find_best_route(token_in, token_out, amount_in)

    async def spot_amount_out(self, route: Route, amount_in: int) -> int | None:
        amounts = await self.quoter.get_amounts_out(amount_in, list(route.path))
        return amounts[-1] if amounts else None

    async def build_swap(self, request: SwapRequest, wallet: Signer) -> TransactionRequest:
        path = list(request.route.path)
        if request.shape == TradeShape.ETH_TO_TOKEN:
            to, data = encode_swap_exact_eth_for_tokens(
                self.router, request.amount_out_min, path, request.recipient, request.deadline
            )
            return {"to": to, "data": data, "value": request.amount_in}
        if request.shape == TradeShape.TOKEN_TO_ETH:
            to, data = encode_swap_exact_tokens_for_eth(
                self.router,
                request.amount_in,
                request.amount_out_min,
                path,
                request.recipient,
                request.deadline,
            )
            return {"to": to, "data": data, "value": 0}
        if request.shape == TradeShape.TOKEN_TO_TOKEN:
            to, data = encode_swap_exact_tokens_for_tokens(
                self.router,
                request.amount_in,
                request.amount_out_min,
                path,
                request.recipient,
                request.deadline,
            )
            return {"to": to, "data": data, "value": 0}
        raise EncodingError("unsupported trade shape", shape=str(request.shape))


__all__ = ["UniswapV2Adapter"]
