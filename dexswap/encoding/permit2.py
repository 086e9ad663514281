"""Permit2 and EIP-2612 typed-data authorization.

Permit2 AllowanceTransfer permits grant a spender (the UniversalRouter) the
right to pull a token amount until an expiration, signed off-chain. The nonce
must be read from the Permit2 contract right before signing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from eth_account import Account
from eth_account.messages import encode_typed_data

from dexswap.constants import MAX_UINT48, MAX_UINT160
from dexswap.errors import EncodingError
from dexswap.models.types import address_bytes, checksum_address, normalize_address

PERMIT_SINGLE_TYPE = "((address,uint160,uint48,uint48),address,uint256)"

EIP712_DOMAIN_TYPES = {
    "permit2": [
        {"name": "name", "type": "string"},
        {"name": "chainId", "type": "uint256"},
        {"name": "verifyingContract", "type": "address"},
    ],
    "erc20": [
        {"name": "name", "type": "string"},
        {"name": "version", "type": "string"},
        {"name": "chainId", "type": "uint256"},
        {"name": "verifyingContract", "type": "address"},
    ],
}

PERMIT2_TYPES: dict[str, list[dict[str, str]]] = {
    "PermitDetails": [
        {"name": "token", "type": "address"},
        {"name": "amount", "type": "uint160"},
        {"name": "expiration", "type": "uint48"},
        {"name": "nonce", "type": "uint48"},
    ],
    "PermitSingle": [
        {"name": "details", "type": "PermitDetails"},
        {"name": "spender", "type": "address"},
        {"name": "sigDeadline", "type": "uint256"},
    ],
}

ERC20_PERMIT_TYPES: dict[str, list[dict[str, str]]] = {
    "Permit": [
        {"name": "owner", "type": "address"},
        {"name": "spender", "type": "address"},
        {"name": "value", "type": "uint256"},
        {"name": "nonce", "type": "uint256"},
        {"name": "deadline", "type": "uint256"},
    ],
}


@dataclass(frozen=True)
class PermitDetails:
    token: str
    amount: int
    expiration: int
    nonce: int

    def __post_init__(self) -> None:
        if not 0 <= self.amount <= MAX_UINT160:
            raise EncodingError("permit amount does not fit in uint160", amount=self.amount)
        if not 0 <= self.expiration <= MAX_UINT48:
            raise EncodingError("permit expiration does not fit in uint48", expiration=self.expiration)
        if not 0 <= self.nonce <= MAX_UINT48:
            raise EncodingError("permit nonce does not fit in uint48", nonce=self.nonce)


@dataclass(frozen=True)
class PermitSingle:
    """Permit2 PermitSingle: one token allowance for one spender."""

    details: PermitDetails
    spender: str
    sig_deadline: int

    def to_message(self) -> dict[str, Any]:
        return {
            "details": {
                "token": checksum_address(self.details.token),
                "amount": self.details.amount,
                "expiration": self.details.expiration,
                "nonce": self.details.nonce,
            },
            "spender": checksum_address(self.spender),
            "sigDeadline": self.sig_deadline,
        }

    def as_abi_tuple(self) -> tuple:
        return (
            (
                address_bytes(self.details.token),
                self.details.amount,
                self.details.expiration,
                self.details.nonce,
            ),
            address_bytes(self.spender),
            self.sig_deadline,
        )


@dataclass(frozen=True)
class Erc20Permit:
    """EIP-2612 Permit for tokens that support it natively."""

    owner: str
    spender: str
    value: int
    nonce: int
    deadline: int

    def to_message(self) -> dict[str, Any]:
        return {
            "owner": checksum_address(self.owner),
            "spender": checksum_address(self.spender),
            "value": self.value,
            "nonce": self.nonce,
            "deadline": self.deadline,
        }


def permit2_domain(chain_id: int, permit2_address: str) -> dict[str, Any]:
    """Domain of the Permit2 contract. Permit2 declares no version field."""
    return {
        "name": "Permit2",
        "chainId": chain_id,
        "verifyingContract": checksum_address(permit2_address),
    }


def erc20_permit_domain(
    token_name: str, chain_id: int, token_address: str, version: str = "1"
) -> dict[str, Any]:
    return {
        "name": token_name,
        "version": version,
        "chainId": chain_id,
        "verifyingContract": checksum_address(token_address),
    }


def permit_single_typed_data(domain: dict[str, Any], permit: PermitSingle) -> dict[str, Any]:
    """Full EIP-712 payload for a Permit2 PermitSingle."""
    return {
        "types": {"EIP712Domain": EIP712_DOMAIN_TYPES["permit2"], **PERMIT2_TYPES},
        "primaryType": "PermitSingle",
        "domain": domain,
        "message": permit.to_message(),
    }


def erc20_permit_typed_data(domain: dict[str, Any], permit: Erc20Permit) -> dict[str, Any]:
    """Full EIP-712 payload for an EIP-2612 Permit."""
    return {
        "types": {"EIP712Domain": EIP712_DOMAIN_TYPES["erc20"], **ERC20_PERMIT_TYPES},
        "primaryType": "Permit",
        "domain": domain,
        "message": permit.to_message(),
    }


def sign_typed_data(private_key: str | bytes, typed_data: dict[str, Any]) -> bytes:
    """Sign an EIP-712 payload, returning the 65-byte r‖s‖v signature."""
    signable = encode_typed_data(full_message=typed_data)
    signed = Account.sign_message(signable, private_key=private_key)
    return bytes(signed.signature)


def recover_typed_data_signer(typed_data: dict[str, Any], signature: bytes) -> str:
    signable = encode_typed_data(full_message=typed_data)
    return Account.recover_message(signable, signature=signature)


def sign_permit_single(
    private_key: str | bytes, chain_id: int, permit2_address: str, permit: PermitSingle
) -> bytes:
    """Sign a PermitSingle against the Permit2 domain of a chain."""
    typed_data = permit_single_typed_data(permit2_domain(chain_id, permit2_address), permit)
    return sign_typed_data(private_key, typed_data)


def verify_permit_single(
    chain_id: int,
    permit2_address: str,
    permit: PermitSingle,
    signature: bytes,
    owner: str,
) -> bool:
    """True if the signature over this exact permit recovers to owner.

    Any change to the domain or to a permit field recovers a different
    address, so the comparison fails.
    """
    typed_data = permit_single_typed_data(permit2_domain(chain_id, permit2_address), permit)
    try:
        recovered = recover_typed_data_signer(typed_data, signature)
    except Exception:
        # Malformed signature bytes
        return False
    return normalize_address(recovered) == normalize_address(owner)


def encode_permit2_permit(permit: PermitSingle, signature: bytes) -> bytes:
    """Input for the UniversalRouter PERMIT2_PERMIT command."""
    from eth_abi import encode  # type: ignore[attr-defined]

    return encode([PERMIT_SINGLE_TYPE, "bytes"], [permit.as_abi_tuple(), signature])


__all__ = [
    "PERMIT_SINGLE_TYPE",
    "PERMIT2_TYPES",
    "ERC20_PERMIT_TYPES",
    "PermitDetails",
    "PermitSingle",
    "Erc20Permit",
    "permit2_domain",
    "erc20_permit_domain",
    "permit_single_typed_data",
    "erc20_permit_typed_data",
    "sign_typed_data",
    "recover_typed_data_signer",
    "sign_permit_single",
    "verify_permit_single",
    "encode_permit2_permit",
]
