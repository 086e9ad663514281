"""Transaction request and trade result types."""

from __future__ import annotations

from dataclasses import dataclass
from typing import NotRequired, TypedDict


class TransactionRequest(TypedDict):
    """Unsigned transaction as produced by strategies.

    Gas, nonce and fee fields are filled by the wallet at send time.
    """

    to: str
    data: str
    value: int
    gas: NotRequired[int]
    nonce: NotRequired[int]
    chainId: NotRequired[int]
    maxFeePerGas: NotRequired[int]
    maxPriorityFeePerGas: NotRequired[int]


@dataclass
class TradeResult:
    """Realized outcome of a confirmed trade.

    Amounts are derived from the receipt's event logs, never from the
    pre-trade quote. Each amount is reported raw (integer string) and
    formatted (decimal string in token units).
    """

    strategy: str
    transaction_hash: str
    confirmed_block: int
    gas_cost: int
    gas_cost_formatted: str
    eth_price_usd: str
    eth_spent: str = "0"
    eth_spent_formatted: str = "0"
    eth_received: str = "0"
    eth_received_formatted: str = "0"
    tokens_spent: str = "0"
    tokens_spent_formatted: str = "0"
    tokens_received: str = "0"
    tokens_received_formatted: str = "0"

    def to_dict(self) -> dict[str, object]:
        """camelCase view for API responses."""
        return {
            "strategy": self.strategy,
            "transactionHash": self.transaction_hash,
            "confirmedBlock": self.confirmed_block,
            "gasCost": str(self.gas_cost),
            "gasCostFormatted": self.gas_cost_formatted,
            "ethPriceUsd": self.eth_price_usd,
            "ethSpentRaw": self.eth_spent,
            "ethSpentFormatted": self.eth_spent_formatted,
            "ethReceivedRaw": self.eth_received,
            "ethReceivedFormatted": self.eth_received_formatted,
            "tokensSpentRaw": self.tokens_spent,
            "tokensSpentFormatted": self.tokens_spent_formatted,
            "tokensReceivedRaw": self.tokens_received,
            "tokensReceivedFormatted": self.tokens_received_formatted,
        }
