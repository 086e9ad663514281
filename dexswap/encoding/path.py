"""Packed multi-hop path encoding for UniswapV3 routers and quoters."""

from __future__ import annotations

from collections.abc import Sequence

from dexswap.errors import EncodingError
from dexswap.models.types import address_bytes

ADDRESS_SIZE = 20
FEE_SIZE = 3
MAX_FEE = 2 ** (8 * FEE_SIZE) - 1


def encode_path(tokens: Sequence[str], fees: Sequence[int]) -> bytes:
    """Pack a path as token0 ‖ fee0 ‖ token1 ‖ … ‖ tokenN.

    Each fee is a 3-byte big-endian integer.

    Args:
        tokens: Token addresses in swap order (at least two)
        fees: Fee tier of each hop

    Returns:
        Packed path bytes, 20 + 23 * len(fees) long

    Raises:
        EncodingError: If fewer than two tokens are given, the lengths do not
            match, or a fee does not fit in 24 bits
    """
    if len(tokens) <= 1:
        raise EncodingError("path needs at least two tokens", token_count=len(tokens))
    if len(tokens) != len(fees) + 1:
        raise EncodingError(
            "path must have exactly one more token than fees",
            token_count=len(tokens),
            fee_count=len(fees),
        )

    encoded = bytearray()
    for token, fee in zip(tokens[:-1], fees, strict=True):
        if not 0 <= fee <= MAX_FEE:
            raise EncodingError("fee does not fit in uint24", fee=fee)
        encoded += address_bytes(token)
        encoded += fee.to_bytes(FEE_SIZE, "big")
    encoded += address_bytes(tokens[-1])
    return bytes(encoded)


def decode_path(path: bytes) -> tuple[list[str], list[int]]:
    """Split a packed path back into tokens and fees.

    Raises:
        EncodingError: If the length is not 20 + 23k
    """
    hop_size = ADDRESS_SIZE + FEE_SIZE
    if len(path) < ADDRESS_SIZE or (len(path) - ADDRESS_SIZE) % hop_size != 0:
        raise EncodingError("malformed packed path", length=len(path))

    tokens: list[str] = []
    fees: list[int] = []
    offset = 0
    while offset + ADDRESS_SIZE < len(path):
        tokens.append("0x" + path[offset : offset + ADDRESS_SIZE].hex())
        offset += ADDRESS_SIZE
        fees.append(int.from_bytes(path[offset : offset + FEE_SIZE], "big"))
        offset += FEE_SIZE
    tokens.append("0x" + path[offset:].hex())
    return tokens, fees
