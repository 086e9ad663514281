"""UniswapV3 QuoterV2 client for swap simulation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

import structlog

from dexswap.models.types import checksum_address, normalize_address

from ..base import ContractClient

logger = structlog.get_logger()


@dataclass(frozen=True)
class V3QuoteResult:
    """QuoterV2 output for an exact-input quote."""

    amount_out: int
    sqrt_price_x96_after: tuple[int, ...] = ()
    initialized_ticks_crossed: tuple[int, ...] = ()
    gas_estimate: int = 0


class UniswapV3Quoter(Protocol):
    """Protocol for UniswapV3 quoter implementations.

    This allows swapping between the RPC-based quoter and a mock quoter for
    testing.
    """

    async def quote_exact_input_single(
        self,
        token_in: str,
        token_out: str,
        fee: int,
        amount_in: int,
    ) -> V3QuoteResult | None:
        """Get output amount for exact input through one pool.

        Args:
            token_in: Input token address
            token_out: Output token address
            fee: Pool fee tier (e.g., 3000)
            amount_in: Input amount

        Returns:
            Quote result, or None if the pool is missing or illiquid
        """
        ...

    async def quote_exact_input(self, path: bytes, amount_in: int) -> V3QuoteResult | None:
        """Get output amount for exact input along a packed multi-hop path.

        Returns:
            Quote result, or None if any hop fails
        """
        ...


# QuoterV2 ABI - minimal, just the functions we need
QUOTER_V2_ABI: list[dict[str, Any]] = [
    {
        "name": "quoteExactInputSingle",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            {
                "name": "params",
                "type": "tuple",
                "components": [
                    {"name": "tokenIn", "type": "address"},
                    {"name": "tokenOut", "type": "address"},
                    {"name": "amountIn", "type": "uint256"},
                    {"name": "fee", "type": "uint24"},
                    {"name": "sqrtPriceLimitX96", "type": "uint160"},
                ],
            }
        ],
        "outputs": [
            {"name": "amountOut", "type": "uint256"},
            {"name": "sqrtPriceX96After", "type": "uint160"},
            {"name": "initializedTicksCrossed", "type": "uint32"},
            {"name": "gasEstimate", "type": "uint256"},
        ],
    },
    {
        "name": "quoteExactInput",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "path", "type": "bytes"},
            {"name": "amountIn", "type": "uint256"},
        ],
        "outputs": [
            {"name": "amountOut", "type": "uint256"},
            {"name": "sqrtPriceX96AfterList", "type": "uint160[]"},
            {"name": "initializedTicksCrossedList", "type": "uint32[]"},
            {"name": "gasEstimate", "type": "uint256"},
        ],
    },
]


class Web3UniswapV3Quoter(ContractClient):
    """Real quoter that calls the QuoterV2 contract via RPC.

    QuoterV2 functions are non-view (they revert internally), so they are
    invoked with eth_call and never sent as transactions.
    """

    abi = QUOTER_V2_ABI

    async def quote_exact_input_single(
        self,
        token_in: str,
        token_out: str,
        fee: int,
        amount_in: int,
    ) -> V3QuoteResult | None:
        try:
            result = await self._call(
                "v3_quote_exact_input_single",
                self.contract.functions.quoteExactInputSingle(
                    (
                        checksum_address(token_in),
                        checksum_address(token_out),
                        amount_in,
                        fee,
                        0,  # sqrtPriceLimitX96 = 0 means no limit
                    )
                ).call(),
            )
            # (amountOut, sqrtPriceX96After, initializedTicksCrossed, gasEstimate)
            return V3QuoteResult(
                amount_out=int(result[0]),
                sqrt_price_x96_after=(int(result[1]),),
                initialized_ticks_crossed=(int(result[2]),),
                gas_estimate=int(result[3]),
            )
        except Exception as e:
            logger.debug(
                "v3_quote_exact_input_single_failed",
                token_in=normalize_address(token_in),
                token_out=normalize_address(token_out),
                fee=fee,
                amount_in=amount_in,
                error=str(e),
            )
            return None

    async def quote_exact_input(self, path: bytes, amount_in: int) -> V3QuoteResult | None:
        try:
            result = await self._call(
                "v3_quote_exact_input",
                self.contract.functions.quoteExactInput(path, amount_in).call(),
            )
            return V3QuoteResult(
                amount_out=int(result[0]),
                sqrt_price_x96_after=tuple(int(p) for p in result[1]),
                initialized_ticks_crossed=tuple(int(t) for t in result[2]),
                gas_estimate=int(result[3]),
            )
        except Exception as e:
            logger.debug(
                "v3_quote_exact_input_failed",
                path="0x" + path.hex(),
                amount_in=amount_in,
                error=str(e),
            )
            return None


__all__ = [
    "V3QuoteResult",
    "UniswapV3Quoter",
    "Web3UniswapV3Quoter",
    "QUOTER_V2_ABI",
]
