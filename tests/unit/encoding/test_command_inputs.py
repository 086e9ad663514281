"""Field layout of UniversalRouter command inputs."""

from eth_abi import decode

from dexswap.encoding.commands import (
    ADDRESS_THIS,
    CONTRACT_BALANCE,
    MSG_SENDER,
    CommandBatch,
    CommandType,
    decode_execute,
    encode_permit2_transfer_from,
    encode_sweep,
    encode_unwrap_weth,
    encode_v2_swap_exact_in,
    encode_v3_swap_exact_in,
    encode_wrap_eth,
)
from dexswap.encoding.path import encode_path
from dexswap.models.types import normalize_address
from tests.helpers import DAI, TEST_WALLET, USDC, WETH

ROUTER_PATH = encode_path([WETH, USDC], [500])


class TestSwapInputs:
    def test_v3_swap_exact_in(self) -> None:
        blob = encode_v3_swap_exact_in(TEST_WALLET, 10**18, 2_900 * 10**6, ROUTER_PATH, True)

        recipient, amount_in, amount_out_min, path, payer_is_user = decode(
            ["address", "uint256", "uint256", "bytes", "bool"], blob
        )
        assert normalize_address(recipient) == TEST_WALLET
        assert amount_in == 10**18
        assert amount_out_min == 2_900 * 10**6
        assert path == ROUTER_PATH
        assert payer_is_user is True

    def test_v3_router_balance_placeholder(self) -> None:
        """A later hop spends whatever the router holds."""
        blob = encode_v3_swap_exact_in(MSG_SENDER, CONTRACT_BALANCE, 0, ROUTER_PATH, False)
        recipient, amount_in, _, _, payer_is_user = decode(
            ["address", "uint256", "uint256", "bytes", "bool"], blob
        )
        assert normalize_address(recipient) == MSG_SENDER
        assert amount_in == 1 << 255
        assert payer_is_user is False

    def test_v2_swap_exact_in(self) -> None:
        blob = encode_v2_swap_exact_in(ADDRESS_THIS, 10**18, 1, [WETH, DAI, USDC], True)

        recipient, amount_in, amount_out_min, path, payer_is_user = decode(
            ["address", "uint256", "uint256", "address[]", "bool"], blob
        )
        assert normalize_address(recipient) == ADDRESS_THIS
        assert (amount_in, amount_out_min) == (10**18, 1)
        assert [normalize_address(t) for t in path] == [WETH, DAI, USDC]
        assert payer_is_user is True


class TestPaymentInputs:
    """WRAP_ETH, UNWRAP_WETH, SWEEP and PERMIT2_TRANSFER_FROM."""

    def test_wrap_eth(self) -> None:
        recipient, amount_min = decode(["address", "uint256"], encode_wrap_eth(ADDRESS_THIS, 10**18))
        assert normalize_address(recipient) == ADDRESS_THIS
        assert amount_min == 10**18

    def test_unwrap_weth(self) -> None:
        recipient, amount_min = decode(
            ["address", "uint256"], encode_unwrap_weth(TEST_WALLET, 99 * 10**16)
        )
        assert normalize_address(recipient) == TEST_WALLET
        assert amount_min == 99 * 10**16

    def test_sweep_token_before_recipient(self) -> None:
        token, recipient, amount_min = decode(
            ["address", "address", "uint256"], encode_sweep(USDC, TEST_WALLET, 5)
        )
        assert normalize_address(token) == USDC
        assert normalize_address(recipient) == TEST_WALLET
        assert amount_min == 5

    def test_permit2_transfer_from(self) -> None:
        amount = 2**160 - 1
        token, recipient, decoded_amount = decode(
            ["address", "address", "uint160"],
            encode_permit2_transfer_from(USDC, ADDRESS_THIS, amount),
        )
        assert normalize_address(token) == USDC
        assert normalize_address(recipient) == ADDRESS_THIS
        assert decoded_amount == amount

    def test_each_blob_is_whole_words(self) -> None:
        blobs = [
            encode_wrap_eth(ADDRESS_THIS, 1),
            encode_unwrap_weth(TEST_WALLET, 1),
            encode_sweep(USDC, TEST_WALLET, 1),
            encode_permit2_transfer_from(USDC, ADDRESS_THIS, 1),
        ]
        assert [len(b) for b in blobs] == [64, 64, 96, 96]


class TestBatchOfInputs:
    def test_wrap_swap_unwrap_sequence(self) -> None:
        """ETH -> USDC through WETH: wrap into the router, then swap from its balance."""
        batch = (
            CommandBatch()
            .add(CommandType.WRAP_ETH, encode_wrap_eth(ADDRESS_THIS, 10**18))
            .add(
                CommandType.V3_SWAP_EXACT_IN,
                encode_v3_swap_exact_in(TEST_WALLET, CONTRACT_BALANCE, 1, ROUTER_PATH, False),
            )
            .add(CommandType.SWEEP, encode_sweep(USDC, TEST_WALLET, 0))
        )

        commands, inputs, deadline = decode_execute(batch.encode(deadline=1_700_001_200))

        assert commands == bytes([0x0B, 0x00, 0x04])
        assert deadline == 1_700_001_200
        (_, amount_min) = decode(["address", "uint256"], inputs[0])
        assert amount_min == 10**18
        (_, amount_in, _, path, _) = decode(
            ["address", "uint256", "uint256", "bytes", "bool"], inputs[1]
        )
        assert amount_in == CONTRACT_BALANCE
        assert path == ROUTER_PATH
