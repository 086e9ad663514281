"""UniswapV4 Quoter client and UniversalRouter transaction building."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Protocol

import structlog

from dexswap.encoding.commands import CommandBatch, RouterVersion
from dexswap.errors import EncodingError
from dexswap.models.result import TransactionRequest
from dexswap.models.route import PathSegment, PoolKey
from dexswap.models.types import checksum_address, normalize_address

from .base import ContractClient, to_hex

logger = structlog.get_logger()

_POOL_KEY_COMPONENTS = [
    {"name": "currency0", "type": "address"},
    {"name": "currency1", "type": "address"},
    {"name": "fee", "type": "uint24"},
    {"name": "tickSpacing", "type": "int24"},
    {"name": "hooks", "type": "address"},
]

_PATH_KEY_COMPONENTS = [
    {"name": "intermediateCurrency", "type": "address"},
    {"name": "fee", "type": "uint24"},
    {"name": "tickSpacing", "type": "int24"},
    {"name": "hooks", "type": "address"},
    {"name": "hookData", "type": "bytes"},
]

V4_QUOTER_ABI: list[dict[str, Any]] = [
    {
        "name": "quoteExactInputSingle",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            {
                "name": "params",
                "type": "tuple",
                "components": [
                    {"name": "poolKey", "type": "tuple", "components": _POOL_KEY_COMPONENTS},
                    {"name": "zeroForOne", "type": "bool"},
                    {"name": "exactAmount", "type": "uint128"},
                    {"name": "hookData", "type": "bytes"},
                ],
            }
        ],
        "outputs": [
            {"name": "amountOut", "type": "uint256"},
            {"name": "gasEstimate", "type": "uint256"},
        ],
    },
    {
        "name": "quoteExactInput",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            {
                "name": "params",
                "type": "tuple",
                "components": [
                    {"name": "exactCurrency", "type": "address"},
                    {"name": "path", "type": "tuple[]", "components": _PATH_KEY_COMPONENTS},
                    {"name": "exactAmount", "type": "uint128"},
                ],
            }
        ],
        "outputs": [
            {"name": "amountOut", "type": "uint256"},
            {"name": "gasEstimate", "type": "uint256"},
        ],
    },
]


@dataclass(frozen=True)
class V4QuoteResult:
    amount_out: int
    gas_estimate: int = 0


class UniswapV4Quoter(Protocol):
    """Quote interface of the V4 Quoter contract."""

    async def quote_exact_input_single(
        self,
        pool_key: PoolKey,
        zero_for_one: bool,
        amount_in: int,
        hook_data: bytes = b"",
    ) -> V4QuoteResult | None:
        """Exact-input quote through one pool; None if uninitialized or illiquid."""
        ...

    async def quote_exact_input(
        self, currency_in: str, path: Sequence[PathSegment], amount_in: int
    ) -> V4QuoteResult | None: ...


class Web3UniswapV4Quoter(ContractClient):
    """V4 Quoter over RPC."""

    abi = V4_QUOTER_ABI

    async def quote_exact_input_single(
        self,
        pool_key: PoolKey,
        zero_for_one: bool,
        amount_in: int,
        hook_data: bytes = b"",
    ) -> V4QuoteResult | None:
        key = (
            checksum_address(pool_key.currency0),
            checksum_address(pool_key.currency1),
            pool_key.fee,
            pool_key.tick_spacing,
            checksum_address(pool_key.hooks),
        )
        try:
            amount_out, gas_estimate = await self._call(
                "v4_quote_exact_input_single",
                self.contract.functions.quoteExactInputSingle(
                    (key, zero_for_one, amount_in, hook_data)
                ).call(),
            )
            return V4QuoteResult(amount_out=int(amount_out), gas_estimate=int(gas_estimate))
        except Exception as e:
            logger.debug(
                "v4_quote_exact_input_single_failed",
                currency0=pool_key.currency0,
                currency1=pool_key.currency1,
                fee=pool_key.fee,
                zero_for_one=zero_for_one,
                amount_in=amount_in,
                error=str(e),
            )
            return None

    async def quote_exact_input(
        self, currency_in: str, path: Sequence[PathSegment], amount_in: int
    ) -> V4QuoteResult | None:
        path_keys = [
            (
                checksum_address(s.intermediate_currency),
                s.fee,
                s.tick_spacing,
                checksum_address(s.hooks),
                s.hook_data,
            )
            for s in path
        ]
        try:
            amount_out, gas_estimate = await self._call(
                "v4_quote_exact_input",
                self.contract.functions.quoteExactInput(
                    (checksum_address(currency_in), path_keys, amount_in)
                ).call(),
            )
            return V4QuoteResult(amount_out=int(amount_out), gas_estimate=int(gas_estimate))
        except Exception as e:
            logger.debug(
                "v4_quote_exact_input_failed",
                currency_in=normalize_address(currency_in),
                hops=len(path),
                amount_in=amount_in,
                error=str(e),
            )
            return None


class UniversalRouter:
    """Transaction builder for one deployed UniversalRouter.

    The router version decides which command table batches are checked
    against.
    """

    def __init__(self, address: str, version: RouterVersion = RouterVersion.V2) -> None:
        self.address = normalize_address(address, validate=True)
        self.version = version

    def new_batch(self) -> CommandBatch:
        return CommandBatch(version=self.version)

    def build_execute(
        self, batch: CommandBatch, deadline: int | None, value: int = 0
    ) -> TransactionRequest:
        """Wrap a command batch in an execute transaction.

        Raises:
            EncodingError: If the batch was built for another router version
        """
        if batch.version != self.version:
            raise EncodingError(
                "command batch built for a different router version",
                batch_version=batch.version.value,
                router_version=self.version.value,
            )
        return {"to": self.address, "data": to_hex(batch.encode(deadline)), "value": value}


__all__ = [
    "V4_QUOTER_ABI",
    "V4QuoteResult",
    "UniswapV4Quoter",
    "Web3UniswapV4Quoter",
    "UniversalRouter",
]
