"""Pure protocol encoders: paths, pool ids, command batches, V4 actions, permits."""

from .commands import (
    CommandBatch,
    CommandType,
    LegacyCommandType,
    RouterVersion,
    encode_execute,
)
from .path import decode_path, encode_path
from .permit2 import (
    PermitDetails,
    PermitSingle,
    encode_permit2_permit,
    permit2_domain,
    sign_permit_single,
    verify_permit_single,
)
from .pool_id import compute_pool_id, encode_pool_key
from .revert import DecodedRevert, decode_revert
from .v4_actions import Actions, build_exact_in_single_swap, encode_v4_swap_input

__all__ = [
    # Paths and pools
    "encode_path",
    "decode_path",
    "compute_pool_id",
    "encode_pool_key",
    # Command batches
    "CommandBatch",
    "CommandType",
    "LegacyCommandType",
    "RouterVersion",
    "encode_execute",
    # V4 actions
    "Actions",
    "build_exact_in_single_swap",
    "encode_v4_swap_input",
    # Permit2
    "PermitDetails",
    "PermitSingle",
    "encode_permit2_permit",
    "permit2_domain",
    "sign_permit_single",
    "verify_permit_single",
    # Reverts
    "DecodedRevert",
    "decode_revert",
]
