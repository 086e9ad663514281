"""Aerodrome Router client (Base): stable/volatile pool routes."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol

import structlog

from dexswap.models.route import AerodromeHop
from dexswap.models.types import address_bytes, checksum_address, normalize_address

from .base import ContractClient, selector, to_hex

logger = structlog.get_logger()

ROUTE_TYPE = "(address,address,bool,address)"

SWAP_EXACT_ETH_FOR_TOKENS_SELECTOR = selector(
    f"swapExactETHForTokens(uint256,{ROUTE_TYPE}[],address,uint256)"
)
SWAP_EXACT_TOKENS_FOR_ETH_SELECTOR = selector(
    f"swapExactTokensForETH(uint256,uint256,{ROUTE_TYPE}[],address,uint256)"
)
SWAP_EXACT_TOKENS_FOR_TOKENS_SELECTOR = selector(
    f"swapExactTokensForTokens(uint256,uint256,{ROUTE_TYPE}[],address,uint256)"
)

AERODROME_ROUTER_ABI: list[dict[str, Any]] = [
    {
        "name": "getAmountsOut",
        "type": "function",
        "stateMutability": "view",
        "inputs": [
            {"name": "amountIn", "type": "uint256"},
            {
                "name": "routes",
                "type": "tuple[]",
                "components": [
                    {"name": "from", "type": "address"},
                    {"name": "to", "type": "address"},
                    {"name": "stable", "type": "bool"},
                    {"name": "factory", "type": "address"},
                ],
            },
        ],
        "outputs": [{"name": "amounts", "type": "uint256[]"}],
    },
]


class AerodromeQuoter(Protocol):
    async def get_amounts_out(
        self, amount_in: int, routes: Sequence[AerodromeHop]
    ) -> list[int] | None:
        """Amounts along the routes; None if any pool is missing or illiquid."""
        ...


class Web3AerodromeRouter(ContractClient):
    """Aerodrome Router quoter over RPC."""

    abi = AERODROME_ROUTER_ABI

    async def get_amounts_out(
        self, amount_in: int, routes: Sequence[AerodromeHop]
    ) -> list[int] | None:
        route_tuples = [
            (
                checksum_address(r.from_token),
                checksum_address(r.to_token),
                r.stable,
                checksum_address(r.factory),
            )
            for r in routes
        ]
        try:
            amounts = await self._call(
                "aerodrome_get_amounts_out",
                self.contract.functions.getAmountsOut(amount_in, route_tuples).call(),
            )
            return [int(a) for a in amounts]
        except Exception as e:
            logger.debug(
                "aerodrome_get_amounts_out_failed",
                routes=[(normalize_address(r.from_token), r.stable) for r in routes],
                amount_in=amount_in,
                error=str(e),
            )
            return None


def _routes_abi(routes: Sequence[AerodromeHop]) -> list[tuple[bytes, bytes, bool, bytes]]:
    return [
        (address_bytes(r.from_token), address_bytes(r.to_token), r.stable, address_bytes(r.factory))
        for r in routes
    ]


def encode_swap_exact_eth_for_tokens(
    router: str,
    amount_out_min: int,
    routes: Sequence[AerodromeHop],
    to: str,
    deadline: int,
) -> tuple[str, str]:
    """Encode swapExactETHForTokens; the input amount travels as tx value.

    Returns:
        Tuple of (router_address, calldata_hex)
    """
    from eth_abi import encode  # type: ignore[attr-defined]

    encoded = encode(
        ["uint256", f"{ROUTE_TYPE}[]", "address", "uint256"],
        [amount_out_min, _routes_abi(routes), address_bytes(to), deadline],
    )
    return normalize_address(router), to_hex(SWAP_EXACT_ETH_FOR_TOKENS_SELECTOR + encoded)


def encode_swap_exact_tokens_for_eth(
    router: str,
    amount_in: int,
    amount_out_min: int,
    routes: Sequence[AerodromeHop],
    to: str,
    deadline: int,
) -> tuple[str, str]:
    from eth_abi import encode  # type: ignore[attr-defined]

    encoded = encode(
        ["uint256", "uint256", f"{ROUTE_TYPE}[]", "address", "uint256"],
        [amount_in, amount_out_min, _routes_abi(routes), address_bytes(to), deadline],
    )
    return normalize_address(router), to_hex(SWAP_EXACT_TOKENS_FOR_ETH_SELECTOR + encoded)


def encode_swap_exact_tokens_for_tokens(
    router: str,
    amount_in: int,
    amount_out_min: int,
    routes: Sequence[AerodromeHop],
    to: str,
    deadline: int,
) -> tuple[str, str]:
    from eth_abi import encode  # type: ignore[attr-defined]

    encoded = encode(
        ["uint256", "uint256", f"{ROUTE_TYPE}[]", "address", "uint256"],
        [amount_in, amount_out_min, _routes_abi(routes), address_bytes(to), deadline],
    )
    return normalize_address(router), to_hex(SWAP_EXACT_TOKENS_FOR_TOKENS_SELECTOR + encoded)


__all__ = [
    "AERODROME_ROUTER_ABI",
    "AerodromeQuoter",
    "Web3AerodromeRouter",
    "encode_swap_exact_eth_for_tokens",
    "encode_swap_exact_tokens_for_eth",
    "encode_swap_exact_tokens_for_tokens",
]
