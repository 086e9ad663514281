"""UniversalRouter command batch encoding.

A command batch is one `execute` call carrying a byte string of command types
and a parallel array of ABI-encoded inputs, executed atomically.

Command byte layout:
    bit 7      allow revert (the batch continues if this command fails)
    bits 0-5   command type

Command numbering differs between router versions: the 0x10-0x1f range holds
NFT marketplace commands on the legacy router and V4/position-manager
commands on the current one. Always pick the table matching the deployed
router.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum, IntEnum

from eth_utils import function_signature_to_4byte_selector

from dexswap.errors import EncodingError
from dexswap.models.types import address_bytes

FLAG_ALLOW_REVERT = 0x80
COMMAND_TYPE_MASK = 0x3F

# Special recipients understood by the router
MSG_SENDER = "0x0000000000000000000000000000000000000001"
ADDRESS_THIS = "0x0000000000000000000000000000000000000002"

# amountIn placeholder meaning "use the router's whole balance"
CONTRACT_BALANCE = 1 << 255

EXECUTE_WITH_DEADLINE_SELECTOR = function_signature_to_4byte_selector(
    "execute(bytes,bytes[],uint256)"
)
EXECUTE_SELECTOR = function_signature_to_4byte_selector("execute(bytes,bytes[])")


class RouterVersion(Enum):
    """Deployed UniversalRouter generations."""

    V1 = "v1"  # 1.x, NFT commands in 0x10+
    V2 = "v2"  # 2.x, UniswapV4 support


class CommandType(IntEnum):
    """Current (v2) UniversalRouter command table."""

    V3_SWAP_EXACT_IN = 0x00
    V3_SWAP_EXACT_OUT = 0x01
    PERMIT2_TRANSFER_FROM = 0x02
    PERMIT2_PERMIT_BATCH = 0x03
    SWEEP = 0x04
    TRANSFER = 0x05
    PAY_PORTION = 0x06
    V2_SWAP_EXACT_IN = 0x08
    V2_SWAP_EXACT_OUT = 0x09
    PERMIT2_PERMIT = 0x0A
    WRAP_ETH = 0x0B
    UNWRAP_WETH = 0x0C
    PERMIT2_TRANSFER_FROM_BATCH = 0x0D
    BALANCE_CHECK_ERC20 = 0x0E
    V4_SWAP = 0x10
    V3_POSITION_MANAGER_PERMIT = 0x11
    V3_POSITION_MANAGER_CALL = 0x12
    V4_INITIALIZE_POOL = 0x13
    V4_POSITION_MANAGER_CALL = 0x14
    EXECUTE_SUB_PLAN = 0x21


class LegacyCommandType(IntEnum):
    """Legacy (v1.x) UniversalRouter command table."""

    V3_SWAP_EXACT_IN = 0x00
    V3_SWAP_EXACT_OUT = 0x01
    PERMIT2_TRANSFER_FROM = 0x02
    PERMIT2_PERMIT_BATCH = 0x03
    SWEEP = 0x04
    TRANSFER = 0x05
    PAY_PORTION = 0x06
    V2_SWAP_EXACT_IN = 0x08
    V2_SWAP_EXACT_OUT = 0x09
    PERMIT2_PERMIT = 0x0A
    WRAP_ETH = 0x0B
    UNWRAP_WETH = 0x0C
    PERMIT2_TRANSFER_FROM_BATCH = 0x0D
    BALANCE_CHECK_ERC20 = 0x0E
    SEAPORT_V1_5 = 0x10
    LOOKS_RARE_V2 = 0x11
    NFTX = 0x12
    CRYPTOPUNKS = 0x13
    OWNER_CHECK_721 = 0x15
    OWNER_CHECK_1155 = 0x16
    SWEEP_ERC721 = 0x17
    X2Y2_721 = 0x18
    SUDOSWAP = 0x19
    NFT20 = 0x1A
    X2Y2_1155 = 0x1B
    FOUNDATION = 0x1C
    SWEEP_ERC1155 = 0x1D
    ELEMENT_MARKET = 0x1E
    SEAPORT_V1_4 = 0x20
    EXECUTE_SUB_PLAN = 0x21
    APPROVE_ERC20 = 0x22


COMMAND_TABLES: dict[RouterVersion, type[IntEnum]] = {
    RouterVersion.V1: LegacyCommandType,
    RouterVersion.V2: CommandType,
}


def command_byte(command: IntEnum | int, *, allow_revert: bool = False) -> int:
    """Build a command byte, optionally flagged as allowed to revert."""
    value = int(command)
    if value & ~COMMAND_TYPE_MASK:
        raise EncodingError("command type out of range", command=value)
    return value | FLAG_ALLOW_REVERT if allow_revert else value


def parse_command_byte(
    value: int, version: RouterVersion = RouterVersion.V2
) -> tuple[IntEnum, bool]:
    """Decode a command byte into (command, allow_revert) for a router version.

    Raises:
        EncodingError: If the type is not defined for that router version
    """
    table = COMMAND_TABLES[version]
    command_type = value & COMMAND_TYPE_MASK
    try:
        command = table(command_type)
    except ValueError as err:
        raise EncodingError(
            "unknown command for router version", command=hex(command_type), version=version.value
        ) from err
    return command, bool(value & FLAG_ALLOW_REVERT)


@dataclass
class CommandBatch:
    """Ordered commands and their inputs for one `execute` call.

    Commands are validated against the router version's table when added, so
    a V4_SWAP can never be sent to a legacy router as a Seaport call.
    """

    version: RouterVersion = RouterVersion.V2
    _commands: bytearray = field(default_factory=bytearray)
    _inputs: list[bytes] = field(default_factory=list)

    def add(self, command: IntEnum, command_input: bytes, *, allow_revert: bool = False) -> CommandBatch:
        table = COMMAND_TABLES[self.version]
        if not isinstance(command, table):
            # Resolve by name so a current-table member is checked against this version
            if command.name not in table.__members__:
                raise EncodingError(
                    "command not supported by router version",
                    command=command.name,
                    version=self.version.value,
                )
            if table[command.name].value != command.value:
                raise EncodingError(
                    "command byte differs for router version",
                    command=command.name,
                    version=self.version.value,
                )
        self._commands.append(command_byte(command, allow_revert=allow_revert))
        self._inputs.append(bytes(command_input))
        return self

    @property
    def commands(self) -> bytes:
        return bytes(self._commands)

    @property
    def inputs(self) -> list[bytes]:
        return list(self._inputs)

    def __len__(self) -> int:
        return len(self._commands)

    def encode(self, deadline: int | None = None) -> bytes:
        return encode_execute(self.commands, self.inputs, deadline)


def encode_execute(commands: bytes, inputs: Sequence[bytes], deadline: int | None = None) -> bytes:
    """Encode UniversalRouter.execute calldata.

    Args:
        commands: One byte per command
        inputs: ABI-encoded input per command, same order
        deadline: Unix timestamp; None selects the deadline-less overload

    Returns:
        Selector + ABI-encoded arguments

    Raises:
        EncodingError: If commands and inputs differ in length
    """
    from eth_abi import encode  # type: ignore[attr-defined]

    if len(commands) != len(inputs):
        raise EncodingError(
            "each command needs exactly one input",
            command_count=len(commands),
            input_count=len(inputs),
        )
    if not commands:
        raise EncodingError("command batch is empty")

    if deadline is None:
        return EXECUTE_SELECTOR + encode(["bytes", "bytes[]"], [commands, list(inputs)])
    return EXECUTE_WITH_DEADLINE_SELECTOR + encode(
        ["bytes", "bytes[]", "uint256"], [commands, list(inputs), deadline]
    )


def decode_execute(calldata: bytes) -> tuple[bytes, list[bytes], int | None]:
    """Split execute calldata back into (commands, inputs, deadline)."""
    from eth_abi import decode

    selector, body = calldata[:4], calldata[4:]
    if selector == EXECUTE_WITH_DEADLINE_SELECTOR:
        commands, inputs, deadline = decode(["bytes", "bytes[]", "uint256"], body)
        return commands, list(inputs), deadline
    if selector == EXECUTE_SELECTOR:
        commands, inputs = decode(["bytes", "bytes[]"], body)
        return commands, list(inputs), None
    raise EncodingError("not an execute call", selector="0x" + selector.hex())


# =============================================================================
# Command inputs
# =============================================================================


def encode_v3_swap_exact_in(
    recipient: str, amount_in: int, amount_out_min: int, path: bytes, payer_is_user: bool
) -> bytes:
    """Input for V3_SWAP_EXACT_IN."""
    from eth_abi import encode  # type: ignore[attr-defined]

    return encode(
        ["address", "uint256", "uint256", "bytes", "bool"],
        [address_bytes(recipient), amount_in, amount_out_min, path, payer_is_user],
    )


def encode_v2_swap_exact_in(
    recipient: str,
    amount_in: int,
    amount_out_min: int,
    path: Sequence[str],
    payer_is_user: bool,
) -> bytes:
    """Input for V2_SWAP_EXACT_IN."""
    from eth_abi import encode  # type: ignore[attr-defined]

    return encode(
        ["address", "uint256", "uint256", "address[]", "bool"],
        [
            address_bytes(recipient),
            amount_in,
            amount_out_min,
            [address_bytes(t) for t in path],
            payer_is_user,
        ],
    )


def encode_wrap_eth(recipient: str, amount_min: int) -> bytes:
    """Input for WRAP_ETH."""
    from eth_abi import encode  # type: ignore[attr-defined]

    return encode(["address", "uint256"], [address_bytes(recipient), amount_min])


def encode_unwrap_weth(recipient: str, amount_min: int) -> bytes:
    """Input for UNWRAP_WETH."""
    from eth_abi import encode  # type: ignore[attr-defined]

    return encode(["address", "uint256"], [address_bytes(recipient), amount_min])


def encode_sweep(token: str, recipient: str, amount_min: int) -> bytes:
    """Input for SWEEP."""
    from eth_abi import encode  # type: ignore[attr-defined]

    return encode(
        ["address", "address", "uint256"],
        [address_bytes(token), address_bytes(recipient), amount_min],
    )


def encode_permit2_transfer_from(token: str, recipient: str, amount: int) -> bytes:
    """Input for PERMIT2_TRANSFER_FROM."""
    from eth_abi import encode  # type: ignore[attr-defined]

    return encode(
        ["address", "address", "uint160"],
        [address_bytes(token), address_bytes(recipient), amount],
    )


__all__ = [
    "FLAG_ALLOW_REVERT",
    "COMMAND_TYPE_MASK",
    "MSG_SENDER",
    "ADDRESS_THIS",
    "CONTRACT_BALANCE",
    "RouterVersion",
    "CommandType",
    "LegacyCommandType",
    "COMMAND_TABLES",
    "CommandBatch",
    "command_byte",
    "parse_command_byte",
    "encode_execute",
    "decode_execute",
    "encode_v3_swap_exact_in",
    "encode_v2_swap_exact_in",
    "encode_wrap_eth",
    "encode_unwrap_weth",
    "encode_sweep",
    "encode_permit2_transfer_from",
]
