"""Permit2 allowance reads.

The nonce embedded in a PermitSingle must equal the current on-chain nonce
for (owner, token, spender), so it is read immediately before signing and
never cached.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

from dexswap.models.types import checksum_address, normalize_address

from .base import ContractClient

PERMIT2_ABI: list[dict[str, Any]] = [
    {
        "name": "allowance",
        "type": "function",
        "stateMutability": "view",
        "inputs": [
            {"name": "owner", "type": "address"},
            {"name": "token", "type": "address"},
            {"name": "spender", "type": "address"},
        ],
        "outputs": [
            {"name": "amount", "type": "uint160"},
            {"name": "expiration", "type": "uint48"},
            {"name": "nonce", "type": "uint48"},
        ],
    },
]


@dataclass(frozen=True)
class Permit2Allowance:
    amount: int
    expiration: int
    nonce: int


class Permit2Reader(Protocol):
    async def allowance(self, owner: str, token: str, spender: str) -> Permit2Allowance: ...


class Web3Permit2(ContractClient):
    """Permit2 contract reads over RPC. Failures propagate to the caller."""

    abi = PERMIT2_ABI

    async def allowance(self, owner: str, token: str, spender: str) -> Permit2Allowance:
        amount, expiration, nonce = await self._call(
            "permit2_allowance",
            self.contract.functions.allowance(
                checksum_address(owner), checksum_address(token), checksum_address(spender)
            ).call(),
            token=normalize_address(token),
            spender=normalize_address(spender),
        )
        return Permit2Allowance(amount=int(amount), expiration=int(expiration), nonce=int(nonce))


__all__ = ["PERMIT2_ABI", "Permit2Allowance", "Permit2Reader", "Web3Permit2"]
