"""UniswapV4 router action encoding.

A V4_SWAP command input is abi.encode(bytes actions, bytes[] params): one byte
per action and one ABI-encoded parameter blob per action. A single-pool
exact-input swap is three actions: the swap itself, a settle that pays the
input currency in, and a take that sends the output currency out.
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import IntEnum

from dexswap.encoding.pool_id import POOL_KEY_TYPE
from dexswap.errors import EncodingError
from dexswap.models.route import PathSegment, PoolKey
from dexswap.models.types import address_bytes

# Amount placeholder meaning "the full open delta for this currency"
OPEN_DELTA = 0

EXACT_INPUT_SINGLE_TYPE = f"({POOL_KEY_TYPE},bool,uint128,uint128,bytes)"
PATH_KEY_TYPE = "(address,uint24,int24,address,bytes)"
EXACT_INPUT_TYPE = f"(address,{PATH_KEY_TYPE}[],uint128,uint128)"


class Actions(IntEnum):
    """V4Router action bytes."""

    SWAP_EXACT_IN_SINGLE = 0x06
    SWAP_EXACT_IN = 0x07
    SWAP_EXACT_OUT_SINGLE = 0x08
    SWAP_EXACT_OUT = 0x09
    SETTLE = 0x0B
    SETTLE_ALL = 0x0C
    SETTLE_PAIR = 0x0D
    TAKE = 0x0E
    TAKE_ALL = 0x0F
    TAKE_PORTION = 0x10
    TAKE_PAIR = 0x11
    CLOSE_CURRENCY = 0x12
    SWEEP = 0x14


def _pool_key_tuple(key: PoolKey) -> tuple[bytes, bytes, int, int, bytes]:
    return (
        address_bytes(key.currency0),
        address_bytes(key.currency1),
        key.fee,
        key.tick_spacing,
        address_bytes(key.hooks),
    )


def encode_swap_exact_in_single(
    pool_key: PoolKey,
    zero_for_one: bool,
    amount_in: int,
    amount_out_minimum: int,
    hook_data: bytes = b"",
) -> bytes:
    """Params for SWAP_EXACT_IN_SINGLE (ExactInputSingleParams struct)."""
    from eth_abi import encode  # type: ignore[attr-defined]

    return encode(
        [EXACT_INPUT_SINGLE_TYPE],
        [
            (
                _pool_key_tuple(pool_key),
                zero_for_one,
                amount_in,
                amount_out_minimum,
                hook_data,
            )
        ],
    )


def encode_swap_exact_in(
    currency_in: str,
    path: Sequence[PathSegment],
    amount_in: int,
    amount_out_minimum: int,
) -> bytes:
    """Params for SWAP_EXACT_IN (ExactInputParams struct with PathKey[])."""
    from eth_abi import encode  # type: ignore[attr-defined]

    if not path:
        raise EncodingError("multi-hop swap needs at least one path segment")

    path_keys = [
        (
            address_bytes(segment.intermediate_currency),
            segment.fee,
            segment.tick_spacing,
            address_bytes(segment.hooks),
            segment.hook_data,
        )
        for segment in path
    ]
    return encode(
        [EXACT_INPUT_TYPE],
        [(address_bytes(currency_in), path_keys, amount_in, amount_out_minimum)],
    )


def encode_settle_all(currency: str, max_amount: int) -> bytes:
    """Params for SETTLE_ALL (currency, maxAmount)."""
    from eth_abi import encode  # type: ignore[attr-defined]

    return encode(["address", "uint256"], [address_bytes(currency), max_amount])


def encode_take_all(currency: str, min_amount: int) -> bytes:
    """Params for TAKE_ALL (currency, minAmount)."""
    from eth_abi import encode  # type: ignore[attr-defined]

    return encode(["address", "uint256"], [address_bytes(currency), min_amount])


def encode_settle(currency: str, amount: int, payer_is_user: bool) -> bytes:
    """Params for SETTLE (currency, amount, payerIsUser)."""
    from eth_abi import encode  # type: ignore[attr-defined]

    return encode(
        ["address", "uint256", "bool"], [address_bytes(currency), amount, payer_is_user]
    )


def encode_take(currency: str, recipient: str, amount: int) -> bytes:
    """Params for TAKE (currency, recipient, amount)."""
    from eth_abi import encode  # type: ignore[attr-defined]

    return encode(
        ["address", "address", "uint256"],
        [address_bytes(currency), address_bytes(recipient), amount],
    )


def encode_v4_swap_input(actions: Sequence[Actions], params: Sequence[bytes]) -> bytes:
    """Combine actions and their params into a V4_SWAP command input.

    Raises:
        EncodingError: If actions and params differ in length
    """
    from eth_abi import encode  # type: ignore[attr-defined]

    if len(actions) != len(params):
        raise EncodingError(
            "each action needs exactly one parameter blob",
            action_count=len(actions),
            param_count=len(params),
        )
    action_bytes = bytes(int(a) for a in actions)
    return encode(["bytes", "bytes[]"], [action_bytes, list(params)])


def build_exact_in_single_swap(
    pool_key: PoolKey,
    token_in: str,
    amount_in: int,
    amount_out_minimum: int,
    hook_data: bytes = b"",
) -> bytes:
    """V4_SWAP input for swap + settle-all + take-all on one pool."""
    zero_for_one = pool_key.zero_for_one(token_in)
    currency_in = pool_key.currency0 if zero_for_one else pool_key.currency1
    currency_out = pool_key.currency1 if zero_for_one else pool_key.currency0

    return encode_v4_swap_input(
        [Actions.SWAP_EXACT_IN_SINGLE, Actions.SETTLE_ALL, Actions.TAKE_ALL],
        [
            encode_swap_exact_in_single(
                pool_key, zero_for_one, amount_in, amount_out_minimum, hook_data
            ),
            encode_settle_all(currency_in, amount_in),
            encode_take_all(currency_out, amount_out_minimum),
        ],
    )


def build_exact_in_swap(
    currency_in: str,
    currency_out: str,
    path: Sequence[PathSegment],
    amount_in: int,
    amount_out_minimum: int,
) -> bytes:
    """V4_SWAP input for a multi-hop exact-input swap."""
    return encode_v4_swap_input(
        [Actions.SWAP_EXACT_IN, Actions.SETTLE_ALL, Actions.TAKE_ALL],
        [
            encode_swap_exact_in(currency_in, path, amount_in, amount_out_minimum),
            encode_settle_all(currency_in, amount_in),
            encode_take_all(currency_out, amount_out_minimum),
        ],
    )


__all__ = [
    "OPEN_DELTA",
    "Actions",
    "encode_swap_exact_in_single",
    "encode_swap_exact_in",
    "encode_settle_all",
    "encode_take_all",
    "encode_settle",
    "encode_take",
    "encode_v4_swap_input",
    "build_exact_in_single_swap",
    "build_exact_in_swap",
]
