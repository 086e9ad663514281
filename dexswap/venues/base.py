"""Shared plumbing for on-chain venue clients.

Every client wraps a single contract behind an AsyncWeb3 instance that is
injected by the caller. Read calls go through call_with_timeout so no chain
call can hang the trade pipeline.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from typing import TYPE_CHECKING, Any, TypeVar

from eth_utils import function_signature_to_4byte_selector

from dexswap.constants import DEFAULT_CALL_TIMEOUT_SECONDS
from dexswap.errors import ChainCallTimeout
from dexswap.models.types import checksum_address

if TYPE_CHECKING:
    from web3 import AsyncWeb3

T = TypeVar("T")


async def call_with_timeout(
    call: Awaitable[T], *, timeout: float, operation: str, **context: Any
) -> T:
    """Await a chain call, converting a missed deadline into ChainCallTimeout.

    Cancellation of the calling task propagates unchanged.
    """
    try:
        return await asyncio.wait_for(call, timeout=timeout)
    except TimeoutError as err:
        raise ChainCallTimeout(
            f"{operation} timed out", timeout_seconds=timeout, **context
        ) from err


def selector(signature: str) -> bytes:
    """4-byte function selector for a canonical signature."""
    return function_signature_to_4byte_selector(signature)


def to_hex(data: bytes) -> str:
    return "0x" + data.hex()


class ContractClient:
    """Base for clients bound to one deployed contract.

    Attributes:
        w3: Injected AsyncWeb3 instance
        address: Contract address (lowercase)
        call_timeout: Upper bound for each read call, in seconds
    """

    abi: list[dict[str, Any]] = []

    def __init__(
        self,
        w3: AsyncWeb3,
        address: str,
        call_timeout: float = DEFAULT_CALL_TIMEOUT_SECONDS,
    ) -> None:
        self.w3 = w3
        self.address = address.lower()
        self.call_timeout = call_timeout
        self.contract = w3.eth.contract(address=checksum_address(address), abi=self.abi)

    async def _call(self, operation: str, call: Awaitable[T], **context: Any) -> T:
        return await call_with_timeout(
            call,
            timeout=self.call_timeout,
            operation=operation,
            contract=self.address,
            **context,
        )
