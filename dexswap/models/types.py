"""Shared type definitions and address helpers.

These types are used across trade intents, routes and API payloads.
"""

from typing import Annotated, Any

from pydantic import BeforeValidator, Field

from dexswap.constants import MAX_UINT256, NATIVE_ADDRESS

UINT256_MAX = MAX_UINT256
ZERO_ADDRESS = NATIVE_ADDRESS


def validate_decimal_amount(value: Any) -> str:
    """Validate that a value is a non-negative decimal amount string.

    Args:
        value: Value to validate (string, int or float)

    Returns:
        The amount as a decimal string

    Raises:
        ValueError: If value is not a finite non-negative number
    """
    if isinstance(value, bool):
        raise ValueError("Amount must be a decimal string, got bool")
    if isinstance(value, int | float):
        value = str(value)
    if not isinstance(value, str):
        raise ValueError(f"Amount must be a decimal string, got {type(value).__name__}")

    text = value.strip()
    try:
        number = float(text)
    except ValueError as err:
        raise ValueError(f"Amount must be a decimal string: '{value}'") from err

    if number != number or number in (float("inf"), float("-inf")):
        raise ValueError(f"Amount must be finite: '{value}'")
    if number < 0:
        raise ValueError(f"Amount cannot be negative: '{value}'")
    return text


# Ethereum address (40 hex chars after 0x prefix)
Address = Annotated[str, Field(pattern=r"^0x[a-fA-F0-9]{40}$")]

# Human-readable decimal amount (e.g. "1.5")
DecimalAmount = Annotated[
    str,
    BeforeValidator(validate_decimal_amount),
    Field(description="Non-negative decimal amount as string"),
]

# Arbitrary hex bytes
Bytes = Annotated[str, Field(pattern=r"^0x[a-fA-F0-9]*$")]


def normalize_address(address: str, *, validate: bool = False) -> str:
    """Normalize an Ethereum address to lowercase.

    Args:
        address: An Ethereum address (with or without 0x prefix)
        validate: If True, raises ValueError for invalid addresses.

    Returns:
        Lowercase address with 0x prefix

    Raises:
        ValueError: If validate=True and address is not a valid Ethereum address
    """
    addr = address.lower()
    if not addr.startswith("0x"):
        addr = "0x" + addr

    if validate and not is_valid_address(addr):
        raise ValueError(f"Invalid address: {address}")

    return addr


def is_valid_address(address: str) -> bool:
    """Check if a string is a valid Ethereum address.

    Args:
        address: String to validate

    Returns:
        True if valid Ethereum address format
    """
    if not isinstance(address, str):
        return False
    if not address.startswith("0x"):
        return False
    if len(address) != 42:
        return False
    try:
        int(address, 16)
        return True
    except ValueError:
        return False


def is_native(address: str) -> bool:
    """True if the address is the native-asset sentinel."""
    return normalize_address(address) == NATIVE_ADDRESS


def checksum_address(address: str) -> str:
    """Return the EIP-55 checksummed form of an address."""
    from eth_utils import to_checksum_address

    return to_checksum_address(normalize_address(address))


def address_bytes(address: str) -> bytes:
    """Convert an address to its raw 20 bytes."""
    return bytes.fromhex(normalize_address(address, validate=True)[2:])


def sort_addresses(a: str, b: str) -> tuple[str, str]:
    """Order two addresses numerically (currency0 < currency1)."""
    a_norm = normalize_address(a)
    b_norm = normalize_address(b)
    if int(a_norm, 16) <= int(b_norm, 16):
        return a_norm, b_norm
    return b_norm, a_norm
