"""ERC20 metadata, balance and allowance reads plus approve encoding."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

import structlog

from dexswap.constants import DEFAULT_CALL_TIMEOUT_SECONDS
from dexswap.errors import TradeError, ValidationError
from dexswap.models.types import address_bytes, checksum_address, normalize_address

from .base import call_with_timeout, selector, to_hex

if TYPE_CHECKING:
    from web3 import AsyncWeb3

logger = structlog.get_logger()

APPROVE_SELECTOR = selector("approve(address,uint256)")

ERC20_ABI: list[dict[str, Any]] = [
    {
        "name": "decimals",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint8"}],
    },
    {
        "name": "symbol",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "string"}],
    },
    {
        "name": "name",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "string"}],
    },
    {
        "name": "balanceOf",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "owner", "type": "address"}],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "name": "allowance",
        "type": "function",
        "stateMutability": "view",
        "inputs": [
            {"name": "owner", "type": "address"},
            {"name": "spender", "type": "address"},
        ],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "name": "nonces",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "owner", "type": "address"}],
        "outputs": [{"name": "", "type": "uint256"}],
    },
]


@dataclass(frozen=True)
class TokenInfo:
    """Metadata needed to convert between raw and human amounts."""

    address: str
    symbol: str
    decimals: int


class TokenClient(Protocol):
    """Read access to ERC20 tokens.

    Implemented by Web3TokenClient for RPC use and by mocks in tests.
    """

    async def get_token(self, token: str) -> TokenInfo:
        """Metadata for a token.

        Raises:
            ValidationError: If the token has no readable metadata
        """
        ...

    async def balance_of(self, token: str, owner: str) -> int: ...

    async def allowance(self, token: str, owner: str, spender: str) -> int: ...


def encode_approve(token: str, spender: str, amount: int) -> tuple[str, str]:
    """Encode ERC20.approve(spender, amount).

    Returns:
        Tuple of (token_address, calldata_hex)
    """
    from eth_abi import encode  # type: ignore[attr-defined]

    calldata = APPROVE_SELECTOR + encode(["address", "uint256"], [address_bytes(spender), amount])
    return normalize_address(token), to_hex(calldata)


class Web3TokenClient:
    """ERC20 reads over RPC with a per-address metadata cache.

    Metadata (symbol, decimals) never changes for a deployed token, so it is
    fetched at most once per address.
    """

    def __init__(self, w3: AsyncWeb3, call_timeout: float = DEFAULT_CALL_TIMEOUT_SECONDS) -> None:
        self.w3 = w3
        self.call_timeout = call_timeout
        self._metadata: dict[str, TokenInfo] = {}

    def _contract(self, token: str):  # type: ignore[no-untyped-def]
        return self.w3.eth.contract(address=checksum_address(token), abi=ERC20_ABI)

    async def get_token(self, token: str) -> TokenInfo:
        key = normalize_address(token)
        if key in self._metadata:
            return self._metadata[key]

        contract = self._contract(key)
        try:
            decimals = await call_with_timeout(
                contract.functions.decimals().call(),
                timeout=self.call_timeout,
                operation="erc20_decimals",
                token=key,
            )
            symbol = await call_with_timeout(
                contract.functions.symbol().call(),
                timeout=self.call_timeout,
                operation="erc20_symbol",
                token=key,
            )
        except TradeError:
            raise
        except Exception as e:
            logger.warning("token_metadata_failed", token=key, error=str(e))
            raise ValidationError("token metadata unavailable", token=key) from e

        info = TokenInfo(address=key, symbol=str(symbol), decimals=int(decimals))
        self._metadata[key] = info
        return info

    async def balance_of(self, token: str, owner: str) -> int:
        contract = self._contract(token)
        balance = await call_with_timeout(
            contract.functions.balanceOf(checksum_address(owner)).call(),
            timeout=self.call_timeout,
            operation="erc20_balance_of",
            token=normalize_address(token),
        )
        return int(balance)

    async def allowance(self, token: str, owner: str, spender: str) -> int:
        contract = self._contract(token)
        allowed = await call_with_timeout(
            contract.functions.allowance(checksum_address(owner), checksum_address(spender)).call(),
            timeout=self.call_timeout,
            operation="erc20_allowance",
            token=normalize_address(token),
            spender=normalize_address(spender),
        )
        return int(allowed)

    async def nonces(self, token: str, owner: str) -> int:
        """EIP-2612 permit nonce of owner."""
        contract = self._contract(token)
        nonce = await call_with_timeout(
            contract.functions.nonces(checksum_address(owner)).call(),
            timeout=self.call_timeout,
            operation="erc20_nonces",
            token=normalize_address(token),
        )
        return int(nonce)


__all__ = [
    "ERC20_ABI",
    "APPROVE_SELECTOR",
    "TokenInfo",
    "TokenClient",
    "Web3TokenClient",
    "encode_approve",
]
