"""Decoding of revert data into readable reasons.

Revert data is matched against Error(string), Panic(uint256) and the custom
errors of every contract this package calls. Nested reasons (UniversalRouter
ExecutionFailed, PoolManager WrappedError) are decoded recursively.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from eth_utils import function_signature_to_4byte_selector

ERROR_STRING_SIGNATURE = "Error(string)"
PANIC_SIGNATURE = "Panic(uint256)"

PANIC_CODES = {
    0x00: "generic compiler panic",
    0x01: "assertion failed",
    0x11: "arithmetic overflow or underflow",
    0x12: "division or modulo by zero",
    0x21: "invalid enum value",
    0x22: "invalid storage byte array",
    0x31: "pop on empty array",
    0x32: "array index out of bounds",
    0x41: "out of memory",
    0x51: "call to zero-initialized function",
}

# Custom errors per protocol interface
KNOWN_ERRORS: dict[str, list[str]] = {
    "UniversalRouter": [
        "ExecutionFailed(uint256,bytes)",
        "TransactionDeadlinePassed()",
        "LengthMismatch()",
        "InvalidCommandType(uint256)",
        "V2TooLittleReceived()",
        "V2TooMuchRequested()",
        "V2InvalidPath()",
        "V3TooLittleReceived()",
        "V3TooMuchRequested()",
        "V3InvalidSwap()",
        "V3InvalidAmountOut()",
        "V3InvalidCaller()",
        "InsufficientToken()",
        "InsufficientETH()",
        "InvalidEthSender()",
        "InvalidBips()",
        "BalanceTooLow()",
        "SliceOutOfBounds()",
        "ContractLocked()",
    ],
    "UniswapV4Router": [
        "V4TooLittleReceived(uint256,uint256)",
        "V4TooMuchRequested(uint256,uint256)",
        "DeadlinePassed(uint256)",
        "UnsupportedAction(uint256)",
        "InputLengthMismatch()",
        "NotPoolManager()",
        "DeltaNotPositive(address)",
        "DeltaNotNegative(address)",
        "InsufficientBalance()",
    ],
    "UniswapV4PoolManager": [
        "WrappedError(address,bytes4,bytes,bytes)",
        "CurrencyNotSettled()",
        "PoolNotInitialized()",
        "ManagerLocked()",
        "AlreadyUnlocked()",
        "CurrenciesOutOfOrderOrEqual(address,address)",
        "PriceLimitAlreadyExceeded(uint160,uint160)",
        "PriceLimitOutOfBounds(uint160)",
        "SwapAmountCannotBeZero()",
        "NonzeroNativeValue()",
        "TickSpacingTooLarge(int24)",
        "TickSpacingTooSmall(int24)",
        "InvalidCaller()",
    ],
    "UniswapV4Quoter": [
        "NotEnoughLiquidity(bytes32)",
        "UnexpectedRevertBytes(bytes)",
        "QuoteSwap(uint256)",
        "NotSelf()",
    ],
    "Permit2": [
        "AllowanceExpired(uint256)",
        "InsufficientAllowance(uint256)",
        "ExcessiveInvalidation()",
        "InvalidAmount(uint256)",
        "InvalidNonce()",
        "InvalidSignature()",
        "InvalidSigner()",
        "InvalidSignatureLength()",
        "InvalidContractSignature()",
        "SignatureExpired(uint256)",
        "LengthMismatch()",
    ],
    "Aerodrome": [
        "ETHTransferFailed()",
        "Expired()",
        "InsufficientAmount()",
        "InsufficientAmountA()",
        "InsufficientAmountB()",
        "InsufficientAmountADesired()",
        "InsufficientAmountBDesired()",
        "InsufficientAmountAOptimal()",
        "InsufficientLiquidity()",
        "InsufficientOutputAmount()",
        "InvalidAmountInForETHDeposit()",
        "InvalidTokenInForETHDeposit()",
        "InvalidPath()",
        "InvalidRouteA()",
        "InvalidRouteB()",
        "OnlyWETH()",
        "PoolDoesNotExist()",
        "PoolFactoryDoesNotExist()",
        "SameAddresses()",
        "ZeroAddress()",
    ],
}


@dataclass(frozen=True)
class ErrorSignature:
    """A known error ABI."""

    interface: str
    signature: str
    selector: bytes
    arg_types: tuple[str, ...]

    @property
    def name(self) -> str:
        return self.signature.split("(", 1)[0]


@dataclass(frozen=True)
class DecodedRevert:
    """Readable form of revert data.

    Attributes:
        reason: One-line human-readable description
        name: Error name, or None when the selector is unknown
        interface: Which contract declares the error
        args: Decoded arguments
        selector: First four bytes of the data, hex
        inner: Decoded nested reason for wrapping errors
    """

    reason: str
    name: str | None = None
    interface: str | None = None
    args: tuple = ()
    selector: str | None = None
    inner: DecodedRevert | None = field(default=None, repr=False)


def _split_arg_types(signature: str) -> tuple[str, ...]:
    inner = signature[signature.index("(") + 1 : -1]
    return tuple(t for t in inner.split(",") if t)


def _build_registry() -> dict[bytes, ErrorSignature]:
    registry: dict[bytes, ErrorSignature] = {}
    for interface, signatures in KNOWN_ERRORS.items():
        for signature in signatures:
            selector = function_signature_to_4byte_selector(signature)
            # First declaration wins for shared names (e.g. LengthMismatch)
            registry.setdefault(
                selector,
                ErrorSignature(interface, signature, selector, _split_arg_types(signature)),
            )
    return registry


ERROR_REGISTRY = _build_registry()
ERROR_STRING_SELECTOR = function_signature_to_4byte_selector(ERROR_STRING_SIGNATURE)
PANIC_SELECTOR = function_signature_to_4byte_selector(PANIC_SIGNATURE)


def _format_arg(value: object) -> str:
    if isinstance(value, bytes):
        return "0x" + value.hex()
    return str(value)


def decode_revert(data: bytes | str | None) -> DecodedRevert:
    """Decode revert data against every known interface.

    Args:
        data: Raw revert bytes or 0x-prefixed hex

    Returns:
        DecodedRevert; unknown or malformed data still yields a reason
    """
    from eth_abi import decode

    if data is None:
        return DecodedRevert(reason="reverted without data")
    if isinstance(data, str):
        text = data[2:] if data.startswith("0x") else data
        try:
            data = bytes.fromhex(text)
        except ValueError:
            return DecodedRevert(reason=f"unparseable revert data: {data}")
    if len(data) == 0:
        return DecodedRevert(reason="reverted without data")
    if len(data) < 4:
        return DecodedRevert(reason=f"truncated revert data: 0x{data.hex()}")

    selector, body = data[:4], data[4:]
    selector_hex = "0x" + selector.hex()

    try:
        if selector == ERROR_STRING_SELECTOR:
            (message,) = decode(["string"], body)
            return DecodedRevert(
                reason=message, name="Error", args=(message,), selector=selector_hex
            )
        if selector == PANIC_SELECTOR:
            (code,) = decode(["uint256"], body)
            description = PANIC_CODES.get(code, "unknown panic")
            return DecodedRevert(
                reason=f"panic 0x{code:02x}: {description}",
                name="Panic",
                args=(code,),
                selector=selector_hex,
            )

        known = ERROR_REGISTRY.get(selector)
        if known is None:
            return DecodedRevert(
                reason=f"unknown error {selector_hex}", selector=selector_hex
            )

        args = tuple(decode(list(known.arg_types), body)) if known.arg_types else ()
    except Exception:
        # Body does not match the declared argument types
        return DecodedRevert(
            reason=f"malformed revert data for selector {selector_hex}", selector=selector_hex
        )

    inner = None
    if known.name == "ExecutionFailed":
        inner = decode_revert(args[1])
    elif known.name == "WrappedError":
        inner = decode_revert(args[2])

    rendered = ", ".join(_format_arg(a) for a in args)
    reason = f"{known.interface}.{known.name}({rendered})"
    if inner is not None:
        reason = f"{reason}: {inner.reason}"

    return DecodedRevert(
        reason=reason,
        name=known.name,
        interface=known.interface,
        args=args,
        selector=selector_hex,
        inner=inner,
    )


def extract_revert_data(error: BaseException) -> bytes | None:
    """Pull raw revert bytes out of a web3 contract error, if present."""
    data = getattr(error, "data", None)
    if data is None and error.args:
        candidate = error.args[-1]
        if isinstance(candidate, bytes | str):
            data = candidate
    if isinstance(data, bytes):
        return data
    if isinstance(data, str) and data.startswith("0x"):
        try:
            return bytes.fromhex(data[2:])
        except ValueError:
            return None
    return None


__all__ = [
    "KNOWN_ERRORS",
    "ERROR_REGISTRY",
    "ErrorSignature",
    "DecodedRevert",
    "decode_revert",
    "extract_revert_data",
]
