"""UniswapV4 pool identity derivation."""

from __future__ import annotations

from typing import TYPE_CHECKING

from eth_utils import keccak

from dexswap.models.types import address_bytes

if TYPE_CHECKING:
    from dexswap.models.route import PoolKey

# PoolKey field order and widths as declared by the PoolManager
POOL_KEY_TYPE = "(address,address,uint24,int24,address)"


def encode_pool_key(key: PoolKey) -> bytes:
    """ABI-encode a pool key as a static tuple (5 words)."""
    from eth_abi import encode  # type: ignore[attr-defined]

    return encode(
        [POOL_KEY_TYPE],
        [
            (
                address_bytes(key.currency0),
                address_bytes(key.currency1),
                key.fee,
                key.tick_spacing,
                address_bytes(key.hooks),
            )
        ],
    )


def compute_pool_id(key: PoolKey) -> bytes:
    """keccak256(abi.encode(currency0, currency1, fee, tickSpacing, hooks)).

    The key is expected to be canonical (currency0 < currency1), which
    PoolKey enforces on construction.
    """
    return keccak(encode_pool_key(key))


def pool_id_hex(key: PoolKey) -> str:
    return "0x" + compute_pool_id(key).hex()
