"""Tests for receipt log decoding and settlement reconciliation."""

from dexswap.models.trade import TradeShape
from dexswap.trading.events import (
    TRANSFER_TOPIC,
    Settlement,
    decode_transfer,
    decode_withdrawal,
    reconcile,
)
from tests.helpers import (
    DAI,
    ETH,
    TEST_WALLET,
    USDC,
    WETH,
    make_receipt,
    make_transfer_log,
    make_withdrawal_log,
)

POOL = "0x" + "88" * 20
ROUTER = "0x" + "99" * 20


class TestDecodeTransfer:
    def test_decodes_bytes_log(self) -> None:
        event = decode_transfer(make_transfer_log(USDC, POOL, TEST_WALLET, 42))
        assert event is not None
        assert event.token == USDC
        assert event.sender == POOL
        assert event.recipient == TEST_WALLET
        assert event.amount == 42

    def test_decodes_hex_log(self) -> None:
        """RPC responses may carry topics and data as hex strings."""
        log = make_transfer_log(USDC, POOL, TEST_WALLET, 42)
        hex_log = {
            "address": log["address"].upper().replace("0X", "0x"),
            "topics": ["0x" + t.hex() for t in log["topics"]],
            "data": "0x" + log["data"].hex(),
        }
        event = decode_transfer(hex_log)
        assert event is not None
        assert event.token == USDC
        assert event.amount == 42

    def test_rejects_erc721_transfer(self) -> None:
        """ERC721 indexes the token id as a fourth topic."""
        log = make_transfer_log(USDC, POOL, TEST_WALLET, 42)
        log["topics"] = [*log["topics"], (42).to_bytes(32, "big")]
        log["data"] = b""
        assert decode_transfer(log) is None

    def test_rejects_other_event(self) -> None:
        assert decode_transfer(make_withdrawal_log(WETH, ROUTER, 1)) is None


class TestDecodeWithdrawal:
    def test_decodes(self) -> None:
        event = decode_withdrawal(make_withdrawal_log(WETH, ROUTER, 10**18))
        assert event is not None
        assert event.src == ROUTER
        assert event.amount == 10**18

    def test_rejects_transfer(self) -> None:
        log = make_transfer_log(USDC, POOL, TEST_WALLET, 1)
        assert log["topics"][0] == TRANSFER_TOPIC
        assert decode_withdrawal(log) is None


class TestReconcile:
    """Amounts come from the logs, never from the quote."""

    def test_eth_to_token(self) -> None:
        receipt = make_receipt(
            logs=[
                make_transfer_log(WETH, ROUTER, POOL, 10**18),
                make_transfer_log(USDC, POOL, TEST_WALLET, 2995 * 10**6),
            ]
        )
        settlement = reconcile(TradeShape.ETH_TO_TOKEN, receipt, TEST_WALLET, ETH, USDC, tx_value=10**18)
        assert settlement == Settlement(eth_spent=10**18, tokens_received=2995 * 10**6)

    def test_last_matching_transfer_wins(self) -> None:
        receipt = make_receipt(
            logs=[
                make_transfer_log(USDC, POOL, TEST_WALLET, 1),
                make_transfer_log(USDC, POOL, TEST_WALLET, 2),
            ]
        )
        settlement = reconcile(TradeShape.ETH_TO_TOKEN, receipt, TEST_WALLET, ETH, USDC)
        assert settlement.tokens_received == 2

    def test_transfers_to_others_ignored(self) -> None:
        receipt = make_receipt(logs=[make_transfer_log(USDC, POOL, ROUTER, 5)])
        settlement = reconcile(TradeShape.ETH_TO_TOKEN, receipt, TEST_WALLET, ETH, USDC)
        assert settlement.tokens_received == 0

    def test_token_to_eth_sums_withdrawals(self) -> None:
        receipt = make_receipt(
            logs=[
                make_transfer_log(USDC, TEST_WALLET, POOL, 3000 * 10**6),
                make_withdrawal_log(WETH, ROUTER, 6 * 10**17),
                make_withdrawal_log(WETH, ROUTER, 4 * 10**17),
            ]
        )
        settlement = reconcile(TradeShape.TOKEN_TO_ETH, receipt, TEST_WALLET, USDC, ETH, weth=WETH)
        assert settlement == Settlement(tokens_spent=3000 * 10**6, eth_received=10**18)

    def test_withdrawals_of_other_contracts_ignored(self) -> None:
        receipt = make_receipt(
            logs=[
                make_transfer_log(USDC, TEST_WALLET, POOL, 3000 * 10**6),
                make_withdrawal_log(POOL, ROUTER, 10**18),
            ]
        )
        settlement = reconcile(TradeShape.TOKEN_TO_ETH, receipt, TEST_WALLET, USDC, ETH, weth=WETH)
        assert settlement.eth_received == 0

    def test_input_transfer_must_be_input_token(self) -> None:
        """A different token leaving the wallet is not the amount spent."""
        receipt = make_receipt(
            logs=[
                make_transfer_log(USDC, TEST_WALLET, POOL, 3000 * 10**6),
                make_transfer_log(WETH, TEST_WALLET, POOL, 1),
                make_transfer_log(DAI, POOL, TEST_WALLET, 2990 * 10**18),
            ]
        )
        settlement = reconcile(TradeShape.TOKEN_TO_TOKEN, receipt, TEST_WALLET, USDC, DAI)
        assert settlement == Settlement(tokens_spent=3000 * 10**6, tokens_received=2990 * 10**18)

    def test_empty_receipt(self) -> None:
        settlement = reconcile(TradeShape.TOKEN_TO_TOKEN, make_receipt(), TEST_WALLET, USDC, DAI)
        assert settlement == Settlement()

    def test_checksummed_wallet(self) -> None:
        receipt = make_receipt(logs=[make_transfer_log(USDC, POOL, TEST_WALLET, 7)])
        wallet = "0x" + TEST_WALLET[2:].upper()
        settlement = reconcile(TradeShape.ETH_TO_TOKEN, receipt, wallet, ETH, USDC)
        assert settlement.tokens_received == 7
