"""Reconcile realized trade amounts from receipt event logs.

Only two events matter:
    Transfer(address indexed from, address indexed to, uint256 value)   ERC20
    Withdrawal(address indexed src, uint256 wad)                         WETH

Amounts reported in a TradeResult come from these logs (and the transaction
value for native input), never from the quote.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

import structlog
from eth_abi import decode  # type: ignore[attr-defined]
from eth_utils import keccak

from dexswap.models.trade import TradeShape
from dexswap.models.types import normalize_address

logger = structlog.get_logger()

TRANSFER_TOPIC = keccak(text="Transfer(address,address,uint256)")
WITHDRAWAL_TOPIC = keccak(text="Withdrawal(address,uint256)")


@dataclass(frozen=True)
class TransferEvent:
    token: str
    sender: str
    recipient: str
    amount: int


@dataclass(frozen=True)
class WithdrawalEvent:
    token: str
    src: str
    amount: int


@dataclass(frozen=True)
class Settlement:
    """Raw amounts moved by one confirmed swap. Zero when not observed."""

    eth_spent: int = 0
    eth_received: int = 0
    tokens_spent: int = 0
    tokens_received: int = 0


def _as_bytes(value: Any) -> bytes:
    if isinstance(value, bytes | bytearray):
        return bytes(value)
    text = str(value)
    if text.startswith("0x"):
        text = text[2:]
    return bytes.fromhex(text)


def _topic_address(topic: bytes) -> str:
    return "0x" + topic[-20:].hex()


def decode_transfer(log: Mapping[str, Any]) -> TransferEvent | None:
    """Decode an ERC20 Transfer log, None for any other log.

    ERC721 Transfer shares the signature but indexes the third argument, so
    only logs with exactly three topics and a 32-byte body are accepted.
    """
    topics = [_as_bytes(t) for t in log.get("topics", [])]
    if len(topics) != 3 or topics[0] != TRANSFER_TOPIC:
        return None
    data = _as_bytes(log.get("data", b""))
    if len(data) != 32:
        return None
    (amount,) = decode(["uint256"], data)
    return TransferEvent(
        token=normalize_address(str(log["address"])),
        sender=_topic_address(topics[1]),
        recipient=_topic_address(topics[2]),
        amount=int(amount),
    )


def decode_withdrawal(log: Mapping[str, Any]) -> WithdrawalEvent | None:
    """Decode a WETH Withdrawal log, None for any other log."""
    topics = [_as_bytes(t) for t in log.get("topics", [])]
    if len(topics) != 2 or topics[0] != WITHDRAWAL_TOPIC:
        return None
    (wad,) = decode(["uint256"], _as_bytes(log.get("data", b"")))
    return WithdrawalEvent(
        token=normalize_address(str(log["address"])),
        src=_topic_address(topics[1]),
        amount=int(wad),
    )


def _last_transfer(
    transfers: Iterable[TransferEvent],
    token: str,
    *,
    sender: str | None = None,
    recipient: str | None = None,
) -> int:
    amount = 0
    for transfer in transfers:
        if transfer.token != token:
            continue
        if sender is not None and transfer.sender != sender:
            continue
        if recipient is not None and transfer.recipient != recipient:
            continue
        amount = transfer.amount
    return amount


def reconcile(
    shape: TradeShape,
    receipt: Mapping[str, Any],
    wallet: str,
    token_in: str,
    token_out: str,
    tx_value: int = 0,
    weth: str | None = None,
) -> Settlement:
    """Extract realized amounts for a swap of the given shape.

    Args:
        shape: Trade direction
        receipt: Mined receipt with its logs
        wallet: Trading wallet address
        token_in: Input token (native sentinel for ETH input)
        token_out: Output token (native sentinel for ETH output)
        tx_value: Native value sent with the swap
        weth: Wrapped native token; restricts Withdrawal logs to it when given

    Returns:
        Settlement with the amounts that were observed
    """
    logs = list(receipt.get("logs", []))
    transfers = [t for t in map(decode_transfer, logs) if t is not None]
    wallet = normalize_address(wallet)

    if shape == TradeShape.ETH_TO_TOKEN:
        received = _last_transfer(transfers, normalize_address(token_out), recipient=wallet)
        if not received:
            logger.warning("no_output_transfer_found", token=token_out, wallet=wallet)
        return Settlement(eth_spent=tx_value, tokens_received=received)

    spent = _last_transfer(transfers, normalize_address(token_in), sender=wallet)
    if not spent:
        logger.warning("no_input_transfer_found", token=token_in, wallet=wallet)

    if shape == TradeShape.TOKEN_TO_ETH:
        withdrawals = [w for w in map(decode_withdrawal, logs) if w is not None]
        if weth is not None:
            withdrawals = [w for w in withdrawals if w.token == normalize_address(weth)]
        eth_received = sum(w.amount for w in withdrawals)
        if not withdrawals:
            logger.warning("no_weth_withdrawal_found", wallet=wallet)
        return Settlement(tokens_spent=spent, eth_received=eth_received)

    received = _last_transfer(transfers, normalize_address(token_out), recipient=wallet)
    if not received:
        logger.warning("no_output_transfer_found", token=token_out, wallet=wallet)
    return Settlement(tokens_spent=spent, tokens_received=received)


__all__ = [
    "TRANSFER_TOPIC",
    "WITHDRAWAL_TOPIC",
    "TransferEvent",
    "WithdrawalEvent",
    "Settlement",
    "decode_transfer",
    "decode_withdrawal",
    "reconcile",
]
