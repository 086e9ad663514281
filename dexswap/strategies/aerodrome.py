"""Aerodrome Router adapter (Base only)."""

from __future__ import annotations

from dexswap.chains import ChainConfig, require_address
from dexswap.errors import EncodingError
from dexswap.models.result import TransactionRequest
from dexswap.models.route import Route
from dexswap.models.trade import TradeShape
from dexswap.routing.optimizer import AerodromeRouteOptimizer
from dexswap.venues.aerodrome import (
    AerodromeQuoter,
    encode_swap_exact_eth_for_tokens,
    encode_swap_exact_tokens_for_eth,
    encode_swap_exact_tokens_for_tokens,
)
from dexswap.wallet import Signer

from .base import SwapRequest


class AerodromeAdapter:
    name = "Aerodrome"

    def __init__(
        self,
        chain: ChainConfig,
        router: AerodromeQuoter,
        optimizer: AerodromeRouteOptimizer | None = None,
    ) -> None:
        self.router_address = require_address(chain.aerodrome.router, "aerodrome.router")
        self.router = router
        self.optimizer = optimizer or AerodromeRouteOptimizer(chain, router)

    @property
    def spender(self) -> str:
        return self.router_address

    async def find_route(self, token_in: str, token_out: str, amount_in: int) -> Route:
        return await self.optimizer.find_best_route(token_in, token_out, amount_in)

    async def spot_amount_out(self, route: Route, amount_in: int) -> int | None:
        if not route.aero_routes:
            return None
        amounts = await self.router.get_amounts_out(amount_in, route.aero_routes)
        return amounts[-1] if amounts else None

    async def build_swap(self, request: SwapRequest, wallet: Signer) -> TransactionRequest:
        hops = request.route.aero_routes
        if not hops:
            raise EncodingError("aerodrome route has no hops")

        if request.shape == TradeShape.ETH_TO_TOKEN:
            to, data = encode_swap_exact_eth_for_tokens(
                self.router_address, request.amount_out_min, hops, request.recipient, request.deadline
            )
            return {"to": to, "data": data, "value": request.amount_in}
        if request.shape == TradeShape.TOKEN_TO_ETH:
            encoder = encode_swap_exact_tokens_for_eth
        else:
            encoder = encode_swap_exact_tokens_for_tokens
        to, data = encoder(
            self.router_address,
            request.amount_in,
            request.amount_out_min,
            hops,
            request.recipient,
            request.deadline,
        )
        return {"to": to, "data": data, "value": 0}


__all__ = ["AerodromeAdapter"]
