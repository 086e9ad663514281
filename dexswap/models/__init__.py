"""Data model for trade intents, routes, quotes and results."""

from dexswap.models.result import TradeResult, TransactionRequest
from dexswap.models.route import AerodromeHop, PathSegment, PoolKey, Quote, Route
from dexswap.models.trade import (
    ALL_BALANCE_SENTINEL,
    InputKind,
    TradeIntent,
    TradeShape,
    classify_trade,
    validate_intent,
)
from dexswap.models.types import (
    NATIVE_ADDRESS,
    Address,
    Bytes,
    DecimalAmount,
    is_native,
    is_valid_address,
    normalize_address,
)

__all__ = [
    # Types
    "Address",
    "Bytes",
    "DecimalAmount",
    "NATIVE_ADDRESS",
    "is_native",
    "is_valid_address",
    "normalize_address",
    # Trade intent
    "ALL_BALANCE_SENTINEL",
    "InputKind",
    "TradeIntent",
    "TradeShape",
    "classify_trade",
    "validate_intent",
    # Routes
    "AerodromeHop",
    "PathSegment",
    "PoolKey",
    "Quote",
    "Route",
    # Results
    "TradeResult",
    "TransactionRequest",
]
