"""UniswapV2 Router02 client: aggregate quotes and swap calldata."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol

import structlog

from dexswap.models.types import address_bytes, checksum_address, normalize_address

from .base import ContractClient, selector, to_hex

logger = structlog.get_logger()

SWAP_EXACT_ETH_FOR_TOKENS_SELECTOR = selector(
    "swapExactETHForTokens(uint256,address[],address,uint256)"
)
SWAP_EXACT_TOKENS_FOR_ETH_SELECTOR = selector(
    "swapExactTokensForETH(uint256,uint256,address[],address,uint256)"
)
SWAP_EXACT_TOKENS_FOR_TOKENS_SELECTOR = selector(
    "swapExactTokensForTokens(uint256,uint256,address[],address,uint256)"
)

ROUTER_V2_ABI: list[dict[str, Any]] = [
    {
        "name": "getAmountsOut",
        "type": "function",
        "stateMutability": "view",
        "inputs": [
            {"name": "amountIn", "type": "uint256"},
            {"name": "path", "type": "address[]"},
        ],
        "outputs": [{"name": "amounts", "type": "uint256[]"}],
    },
]


class UniswapV2Quoter(Protocol):
    """Quote interface of a V2-style router."""

    async def get_amounts_out(self, amount_in: int, path: Sequence[str]) -> list[int] | None:
        """Amounts along the path for an exact input.

        Returns:
            One amount per path token (first is amount_in), or None if the
            path has no liquidity
        """
        ...


class Web3UniswapV2Router(ContractClient):
    """Router02 quoter over RPC."""

    abi = ROUTER_V2_ABI

    async def get_amounts_out(self, amount_in: int, path: Sequence[str]) -> list[int] | None:
        try:
            amounts = await self._call(
                "v2_get_amounts_out",
                self.contract.functions.getAmountsOut(
                    amount_in, [checksum_address(t) for t in path]
                ).call(),
                path=list(path),
            )
            return [int(a) for a in amounts]
        except Exception as e:
            logger.warning(
                "v2_get_amounts_out_failed",
                path=[normalize_address(t) for t in path],
                amount_in=amount_in,
                error=str(e),
            )
            return None


def _path_bytes(path: Sequence[str]) -> list[bytes]:
    return [address_bytes(t) for t in path]


def encode_swap_exact_eth_for_tokens(
    router: str, amount_out_min: int, path: Sequence[str], to: str, deadline: int
) -> tuple[str, str]:
    """Encode swapExactETHForTokens; the input amount travels as tx value.

    Returns:
        Tuple of (router_address, calldata_hex)
    """
    from eth_abi import encode  # type: ignore[attr-defined]

    encoded = encode(
        ["uint256", "address[]", "address", "uint256"],
        [amount_out_min, _path_bytes(path), address_bytes(to), deadline],
    )
    return normalize_address(router), to_hex(SWAP_EXACT_ETH_FOR_TOKENS_SELECTOR + encoded)


def encode_swap_exact_tokens_for_eth(
    router: str,
    amount_in: int,
    amount_out_min: int,
    path: Sequence[str],
    to: str,
    deadline: int,
) -> tuple[str, str]:
    """Encode swapExactTokensForETH (path must end in WETH)."""
    from eth_abi import encode  # type: ignore[attr-defined]

    encoded = encode(
        ["uint256", "uint256", "address[]", "address", "uint256"],
        [amount_in, amount_out_min, _path_bytes(path), address_bytes(to), deadline],
    )
    return normalize_address(router), to_hex(SWAP_EXACT_TOKENS_FOR_ETH_SELECTOR + encoded)


def encode_swap_exact_tokens_for_tokens(
    router: str,
    amount_in: int,
    amount_out_min: int,
    path: Sequence[str],
    to: str,
    deadline: int,
) -> tuple[str, str]:
    """Encode swapExactTokensForTokens."""
    from eth_abi import encode  # type: ignore[attr-defined]

    encoded = encode(
        ["uint256", "uint256", "address[]", "address", "uint256"],
        [amount_in, amount_out_min, _path_bytes(path), address_bytes(to), deadline],
    )
    return normalize_address(router), to_hex(SWAP_EXACT_TOKENS_FOR_TOKENS_SELECTOR + encoded)


__all__ = [
    "ROUTER_V2_ABI",
    "UniswapV2Quoter",
    "Web3UniswapV2Router",
    "encode_swap_exact_eth_for_tokens",
    "encode_swap_exact_tokens_for_eth",
    "encode_swap_exact_tokens_for_tokens",
]
