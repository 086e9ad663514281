"""SwapRouter02 calldata encoding for UniswapV3 swaps.

SwapRouter02 structs carry no deadline; deadlines are enforced by wrapping the
swap in multicall(uint256 deadline, bytes[] data).
"""

from __future__ import annotations

from collections.abc import Sequence

from dexswap.models.types import address_bytes, normalize_address

from ..base import selector, to_hex

# exactInputSingle((address,address,uint24,address,uint256,uint256,uint160))
EXACT_INPUT_SINGLE_SELECTOR = bytes.fromhex("04e45aaf")

# exactInput((bytes,address,uint256,uint256))
EXACT_INPUT_SELECTOR = selector("exactInput((bytes,address,uint256,uint256))")

UNWRAP_WETH9_SELECTOR = selector("unwrapWETH9(uint256,address)")
MULTICALL_DEADLINE_SELECTOR = selector("multicall(uint256,bytes[])")

# SwapRouter02 sentinel recipient meaning "the router itself"
ADDRESS_THIS = "0x0000000000000000000000000000000000000002"


def encode_exact_input_single_params(
    token_in: str,
    token_out: str,
    fee: int,
    recipient: str,
    amount_in: int,
    amount_out_minimum: int,
    sqrt_price_limit_x96: int = 0,
) -> bytes:
    """Raw calldata for exactInputSingle (selector included)."""
    from eth_abi import encode  # type: ignore[attr-defined]

    # (address tokenIn, address tokenOut, uint24 fee, address recipient,
    #  uint256 amountIn, uint256 amountOutMinimum, uint160 sqrtPriceLimitX96)
    encoded_params = encode(
        ["(address,address,uint24,address,uint256,uint256,uint160)"],
        [
            (
                address_bytes(token_in),
                address_bytes(token_out),
                fee,
                address_bytes(recipient),
                amount_in,
                amount_out_minimum,
                sqrt_price_limit_x96,
            )
        ],
    )
    return EXACT_INPUT_SINGLE_SELECTOR + encoded_params


def encode_exact_input_params(
    path: bytes, recipient: str, amount_in: int, amount_out_minimum: int
) -> bytes:
    """Raw calldata for exactInput over a packed path (selector included)."""
    from eth_abi import encode  # type: ignore[attr-defined]

    encoded_params = encode(
        ["(bytes,address,uint256,uint256)"],
        [(path, address_bytes(recipient), amount_in, amount_out_minimum)],
    )
    return EXACT_INPUT_SELECTOR + encoded_params


def encode_unwrap_weth9(amount_minimum: int, recipient: str) -> bytes:
    """Raw calldata for unwrapWETH9(amountMinimum, recipient)."""
    from eth_abi import encode  # type: ignore[attr-defined]

    return UNWRAP_WETH9_SELECTOR + encode(
        ["uint256", "address"], [amount_minimum, address_bytes(recipient)]
    )


def encode_multicall(deadline: int, calls: Sequence[bytes]) -> bytes:
    """Raw calldata for multicall(deadline, data[])."""
    from eth_abi import encode  # type: ignore[attr-defined]

    return MULTICALL_DEADLINE_SELECTOR + encode(["uint256", "bytes[]"], [deadline, list(calls)])


def encode_exact_input_single(
    router: str,
    token_in: str,
    token_out: str,
    fee: int,
    recipient: str,
    amount_in: int,
    amount_out_minimum: int,
    deadline: int,
    *,
    unwrap_to: str | None = None,
) -> tuple[str, str]:
    """Encode a single-pool exact-input swap wrapped in a deadline multicall.

    Args:
        router: SwapRouter02 address
        token_in: Input token address
        token_out: Output token address
        fee: Pool fee tier (e.g., 3000 for 0.3%)
        recipient: Address to receive output tokens
        amount_in: Amount of input tokens
        amount_out_minimum: Minimum output amount (slippage protection)
        deadline: Unix timestamp after which the swap reverts
        unwrap_to: If set, the router keeps the WETH output and unwraps it
            to this address as native ETH

    Returns:
        Tuple of (router_address, calldata_hex)
    """
    swap_recipient = ADDRESS_THIS if unwrap_to else recipient
    calls = [
        encode_exact_input_single_params(
            token_in, token_out, fee, swap_recipient, amount_in, amount_out_minimum
        )
    ]
    if unwrap_to:
        calls.append(encode_unwrap_weth9(amount_out_minimum, unwrap_to))
    return normalize_address(router), to_hex(encode_multicall(deadline, calls))


def encode_exact_input(
    router: str,
    path: bytes,
    recipient: str,
    amount_in: int,
    amount_out_minimum: int,
    deadline: int,
    *,
    unwrap_to: str | None = None,
) -> tuple[str, str]:
    """Encode a multi-hop exact-input swap wrapped in a deadline multicall.

    Returns:
        Tuple of (router_address, calldata_hex)
    """
    swap_recipient = ADDRESS_THIS if unwrap_to else recipient
    calls = [encode_exact_input_params(path, swap_recipient, amount_in, amount_out_minimum)]
    if unwrap_to:
        calls.append(encode_unwrap_weth9(amount_out_minimum, unwrap_to))
    return normalize_address(router), to_hex(encode_multicall(deadline, calls))


__all__ = [
    "EXACT_INPUT_SINGLE_SELECTOR",
    "EXACT_INPUT_SELECTOR",
    "UNWRAP_WETH9_SELECTOR",
    "MULTICALL_DEADLINE_SELECTOR",
    "ADDRESS_THIS",
    "encode_exact_input_single_params",
    "encode_exact_input_params",
    "encode_unwrap_weth9",
    "encode_multicall",
    "encode_exact_input_single",
    "encode_exact_input",
]
