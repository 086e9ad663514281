"""Signing wallet bound to one RPC connection.

Submissions from one wallet are serialized by a lock so nonce assignment,
signing and broadcast never interleave between concurrent trades.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Protocol

import structlog
from eth_account import Account
from web3.exceptions import ContractLogicError, TimeExhausted, Web3Exception

from dexswap.constants import DEFAULT_CALL_TIMEOUT_SECONDS
from dexswap.encoding.permit2 import sign_typed_data
from dexswap.encoding.revert import decode_revert, extract_revert_data
from dexswap.errors import ConfirmationError, RpcError, SimulationError, TradeError
from dexswap.models.result import TransactionRequest
from dexswap.models.types import checksum_address, normalize_address
from dexswap.venues.base import call_with_timeout

if TYPE_CHECKING:
    from eth_account.signers.local import LocalAccount
    from web3 import AsyncWeb3

logger = structlog.get_logger()

# Gas limit headroom over the node's estimate, in percent
GAS_LIMIT_BUFFER_PERCENT = 20
DEFAULT_RECEIPT_TIMEOUT_SECONDS = 180.0

Receipt = Mapping[str, Any]


def receipt_gas_cost(receipt: Receipt) -> int:
    """gasUsed * effectiveGasPrice of a mined transaction."""
    return int(receipt.get("gasUsed", 0)) * int(receipt.get("effectiveGasPrice", 0))


class Signer(Protocol):
    """What strategies and the trader need from a wallet.

    Implemented by Wallet over RPC and by MockWallet in tests.
    """

    @property
    def address(self) -> str: ...

    async def chain_id(self) -> int: ...

    async def get_balance(self) -> int: ...

    async def call(self, tx: TransactionRequest) -> bytes:
        """Simulate tx against the latest block.

        Raises:
            SimulationError: If the call reverts
        """
        ...

    async def send(self, tx: TransactionRequest) -> str:
        """Sign and broadcast tx, returning its hash."""
        ...

    async def wait(self, tx_hash: str) -> Receipt:
        """Receipt of a mined transaction.

        Raises:
            ConfirmationError: If no receipt arrives or the transaction reverted
        """
        ...

    def sign_typed_data(self, typed_data: dict[str, Any]) -> bytes: ...


class Wallet:
    """eth_account key plus AsyncWeb3 connection.

    Args:
        w3: Connected AsyncWeb3 instance
        account: Local signing account
        call_timeout: Upper bound on read calls, in seconds
        receipt_timeout: How long to wait for a receipt, in seconds
    """

    def __init__(
        self,
        w3: AsyncWeb3,
        account: LocalAccount,
        call_timeout: float = DEFAULT_CALL_TIMEOUT_SECONDS,
        receipt_timeout: float = DEFAULT_RECEIPT_TIMEOUT_SECONDS,
    ) -> None:
        self.w3 = w3
        self.account = account
        self.call_timeout = call_timeout
        self.receipt_timeout = receipt_timeout
        self._send_lock = asyncio.Lock()

    @classmethod
    def from_private_key(cls, w3: AsyncWeb3, private_key: str, **kwargs: Any) -> Wallet:
        return cls(w3, Account.from_key(private_key), **kwargs)

    @property
    def address(self) -> str:
        return normalize_address(self.account.address)

    async def _read(self, call: Any, operation: str) -> Any:
        try:
            return await call_with_timeout(call, timeout=self.call_timeout, operation=operation)
        except ContractLogicError:
            raise
        except Web3Exception as e:
            raise RpcError("RPC request failed", operation=operation, error=str(e)) from e

    async def chain_id(self) -> int:
        return int(await self._read(self.w3.eth.chain_id, "eth_chain_id"))

    async def get_balance(self) -> int:
        return int(await self._read(self.w3.eth.get_balance(self.account.address), "eth_get_balance"))

    def _tx_params(self, tx: TransactionRequest) -> dict[str, Any]:
        return {
            "from": self.account.address,
            "to": checksum_address(tx["to"]),
            "data": tx["data"],
            "value": int(tx.get("value", 0)),
        }

    def _simulation_error(
        self, message: str, tx: TransactionRequest, error: Exception
    ) -> SimulationError:
        data = extract_revert_data(error)
        if isinstance(error, ContractLogicError) or data is not None:
            decoded = decode_revert(data)
            reason, name = decoded.reason, decoded.name
        else:
            # Node-side rejection (e.g. insufficient funds) carries no revert data
            reason, name = str(error), None
        logger.warning("simulation_reverted", to=tx["to"], reason=reason)
        return SimulationError(message, reason=reason, error_name=name, to=tx["to"])

    async def call(self, tx: TransactionRequest) -> bytes:
        try:
            result = await self._read(self.w3.eth.call(self._tx_params(tx)), "eth_call")
        except ContractLogicError as e:
            raise self._simulation_error("transaction simulation reverted", tx, e) from e
        except RpcError as e:
            cause = e.__cause__ if isinstance(e.__cause__, Exception) else e
            raise self._simulation_error("transaction simulation failed", tx, cause) from e
        return bytes(result)

    async def _fee_params(self) -> dict[str, int]:
        block = await self._read(self.w3.eth.get_block("latest"), "eth_get_block")
        priority_fee = int(await self._read(self.w3.eth.max_priority_fee, "eth_max_priority_fee"))
        base_fee = int(block.get("baseFeePerGas", 0))
        return {
            "maxPriorityFeePerGas": priority_fee,
            "maxFeePerGas": 2 * base_fee + priority_fee,
        }

    async def send(self, tx: TransactionRequest) -> str:
        """Sign and broadcast tx.

        Raises:
            SimulationError: If gas estimation reverts
            ConfirmationError: If the node refuses any step of the submission
        """
        async with self._send_lock:
            try:
                params, tx_hash = await self._submit(tx)
            except ContractLogicError as e:
                raise self._simulation_error("gas estimation reverted", tx, e) from e
            except RpcError as e:
                logger.warning("transaction_rejected", to=tx["to"], **e.context)
                raise ConfirmationError(
                    "transaction submission failed", to=tx["to"], **e.context
                ) from e

        tx_hash_hex = "0x" + bytes(tx_hash).hex()
        logger.info(
            "transaction_sent",
            tx_hash=tx_hash_hex,
            to=tx["to"],
            nonce=params["nonce"],
            gas=params["gas"],
        )
        return tx_hash_hex

    async def _submit(self, tx: TransactionRequest) -> tuple[dict[str, Any], Any]:
        params = self._tx_params(tx)
        if "nonce" in tx:
            params["nonce"] = tx["nonce"]
        else:
            params["nonce"] = await self._read(
                self.w3.eth.get_transaction_count(self.account.address, "pending"),
                "eth_get_transaction_count",
            )
        params["chainId"] = tx.get("chainId") or await self.chain_id()

        if "gas" in tx:
            params["gas"] = tx["gas"]
        else:
            estimate = await self._read(self.w3.eth.estimate_gas(params), "eth_estimate_gas")
            params["gas"] = int(estimate) * (100 + GAS_LIMIT_BUFFER_PERCENT) // 100

        if "maxFeePerGas" in tx and "maxPriorityFeePerGas" in tx:
            params["maxFeePerGas"] = tx["maxFeePerGas"]
            params["maxPriorityFeePerGas"] = tx["maxPriorityFeePerGas"]
        else:
            params.update(await self._fee_params())

        params.pop("from")
        signed = self.account.sign_transaction(params)
        tx_hash = await self._read(
            self.w3.eth.send_raw_transaction(signed.raw_transaction), "eth_send_raw_transaction"
        )
        return params, tx_hash

    async def wait(self, tx_hash: str) -> Receipt:
        try:
            receipt = await self.w3.eth.wait_for_transaction_receipt(
                tx_hash, timeout=self.receipt_timeout
            )
        except TimeExhausted as e:
            raise ConfirmationError(
                "transaction receipt not found", tx_hash=tx_hash, timeout=self.receipt_timeout
            ) from e
        except Web3Exception as e:
            raise ConfirmationError(
                "transaction receipt unavailable", tx_hash=tx_hash, error=str(e)
            ) from e
        if receipt is None:
            raise ConfirmationError("transaction receipt not found", tx_hash=tx_hash)
        if int(receipt["status"]) != 1:
            raise ConfirmationError(
                "transaction reverted", tx_hash=tx_hash, block=receipt.get("blockNumber")
            )
        return receipt

    def sign_typed_data(self, typed_data: dict[str, Any]) -> bytes:
        return sign_typed_data(self.account.key, typed_data)


async def send_and_confirm(wallet: Signer, tx: TransactionRequest) -> tuple[str, Receipt]:
    """Send tx and wait for a successful receipt.

    Raises:
        TradeError: Any failure from sending or confirmation
    """
    tx_hash = await wallet.send(tx)
    try:
        receipt = await wallet.wait(tx_hash)
    except TradeError:
        logger.warning("transaction_not_confirmed", tx_hash=tx_hash)
        raise
    return tx_hash, receipt


__all__ = [
    "GAS_LIMIT_BUFFER_PERCENT",
    "Receipt",
    "Signer",
    "Wallet",
    "receipt_gas_cost",
    "send_and_confirm",
]
