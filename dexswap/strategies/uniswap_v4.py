"""UniswapV4 adapter: singleton pools through the UniversalRouter.

Token input is authorized through Permit2. The wallet approves Permit2 once
(ERC20 approve), then every swap carries a fresh PermitSingle signature for
the router in the same command batch:

    PERMIT2_PERMIT  (permit, signature)
    V4_SWAP         SWAP_EXACT_IN_SINGLE, SETTLE_ALL, TAKE_ALL

Routes through a bridging token carry path segments and swap with
SWAP_EXACT_IN over a PathKey[] instead of SWAP_EXACT_IN_SINGLE.

Native ETH input skips Permit2 and is paid as transaction value.
"""

from __future__ import annotations

import structlog

from dexswap.chains import ChainConfig, require_address
from dexswap.encoding.commands import CommandType
from dexswap.encoding.permit2 import (
    PermitDetails,
    PermitSingle,
    encode_permit2_permit,
    permit2_domain,
    permit_single_typed_data,
)
from dexswap.encoding.v4_actions import build_exact_in_single_swap, build_exact_in_swap
from dexswap.errors import EncodingError
from dexswap.models.result import TransactionRequest
from dexswap.models.route import Route
from dexswap.models.types import is_native
from dexswap.routing.optimizer import UniswapV4RouteOptimizer
from dexswap.venues.permit2 import Permit2Reader
from dexswap.venues.uniswap_v4 import UniswapV4Quoter, UniversalRouter
from dexswap.wallet import Signer

from .base import SwapRequest

logger = structlog.get_logger()


class UniswapV4Adapter:
    name = "UniswapV4"

    def __init__(
        self,
        chain: ChainConfig,
        quoter: UniswapV4Quoter,
        permit2: Permit2Reader,
        router: UniversalRouter | None = None,
        optimizer: UniswapV4RouteOptimizer | None = None,
    ) -> None:
        self.chain = chain
        self.quoter = quoter
        self.permit2 = permit2
        self.permit2_address = require_address(chain.permit2, "permit2")
        self.router = router or UniversalRouter(
            require_address(chain.uniswap_v4.universal_router, "uniswap_v4.universal_router")
        )
        self.optimizer = optimizer or UniswapV4RouteOptimizer(chain, quoter)

    @property
    def spender(self) -> str:
        """ERC20 allowances go to Permit2; the router is authorized by signature."""
        return self.permit2_address

    async def find_route(self, token_in: str, token_out: str, amount_in: int) -> Route:
        return await self.optimizer.find_best_route(token_in, token_out, amount_in)

    async def spot_amount_out(self, route: Route, amount_in: int) -> int | None:
        if route.path_segments:
            result = await self.quoter.quote_exact_input(
                route.path[0], route.path_segments, amount_in
            )
        elif route.pool_key is not None:
            result = await self.quoter.quote_exact_input_single(
                route.pool_key, route.pool_key.zero_for_one(route.path[0]), amount_in
            )
        else:
            return None
        return result.amount_out if result else None

    async def _permit(self, request: SwapRequest, wallet: Signer) -> bytes:
        # Nonce is read live; a stale nonce makes Permit2 reject the signature
        allowance = await self.permit2.allowance(wallet.address, request.token_in, self.router.address)
        permit = PermitSingle(
            details=PermitDetails(
                token=request.token_in,
                amount=request.amount_in,
                expiration=request.deadline,
                nonce=allowance.nonce,
            ),
            spender=self.router.address,
            sig_deadline=request.deadline,
        )
        typed_data = permit_single_typed_data(
            permit2_domain(self.chain.chain_id, self.permit2_address), permit
        )
        signature = wallet.sign_typed_data(typed_data)
        logger.debug(
            "permit2_signed",
            token=request.token_in,
            spender=self.router.address,
            nonce=allowance.nonce,
            deadline=request.deadline,
        )
        return encode_permit2_permit(permit, signature)

    def _swap_input(self, request: SwapRequest) -> bytes:
        route = request.route
        if route.path_segments:
            return build_exact_in_swap(
                request.token_in,
                route.path_segments[-1].intermediate_currency,
                route.path_segments,
                request.amount_in,
                request.amount_out_min,
            )
        if route.pool_key is not None:
            return build_exact_in_single_swap(
                route.pool_key, request.token_in, request.amount_in, request.amount_out_min
            )
        raise EncodingError("V4 route has neither a pool key nor path segments")

    async def build_swap(self, request: SwapRequest, wallet: Signer) -> TransactionRequest:
        swap_input = self._swap_input(request)

        batch = self.router.new_batch()
        value = 0
        if is_native(request.token_in):
            value = request.amount_in
        else:
            batch.add(CommandType.PERMIT2_PERMIT, await self._permit(request, wallet))

        batch.add(CommandType.V4_SWAP, swap_input)
        return self.router.build_execute(batch, request.deadline, value)


__all__ = ["UniswapV4Adapter"]
