"""Typed errors for quoting and trade execution.

Every failure that reaches the Trader boundary is a TradeError carrying an
ErrorKind, so retry policy is a function of the kind and never of the message.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorKind(Enum):
    """Closed set of failure categories."""

    VALIDATION = "validation"
    QUOTE = "quote"
    APPROVAL = "approval"
    RISK = "risk"
    SIMULATION = "simulation"
    NETWORK = "network"
    CONFIRMATION = "confirmation"
    ENCODING = "encoding"
    CONFIGURATION = "configuration"


# Kinds that may succeed if the same request is repeated later
RETRYABLE_KINDS = frozenset({ErrorKind.QUOTE})


def is_retryable(kind: ErrorKind) -> bool:
    """Whether an error of this kind may be retried without changing the request."""
    return kind in RETRYABLE_KINDS


class TradeError(Exception):
    """Base error for all trading operations.

    Attributes:
        kind: Category of the failure
        message: Human-readable description
        context: Diagnostic values (expected vs actual, addresses involved)
    """

    kind: ErrorKind = ErrorKind.VALIDATION

    def __init__(self, message: str, kind: ErrorKind | None = None, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        if kind is not None:
            self.kind = kind
        self.context = context

    @property
    def retryable(self) -> bool:
        return is_retryable(self.kind)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for API responses and structured logs."""
        return {
            "kind": self.kind.value,
            "message": self.message,
            "context": {k: str(v) for k, v in self.context.items()},
        }

    def __str__(self) -> str:
        if not self.context:
            return self.message
        details = ", ".join(f"{k}={v}" for k, v in self.context.items())
        return f"{self.message} ({details})"


class ValidationError(TradeError):
    """Bad amount or unclassifiable trade shape. Rejected before any chain call."""

    kind = ErrorKind.VALIDATION


class QuoteError(TradeError):
    """A venue (or every venue) could not price the trade."""

    kind = ErrorKind.QUOTE


class ApprovalError(TradeError):
    """Insufficient or failed spending authorization."""

    kind = ErrorKind.APPROVAL


class PriceImpactError(TradeError):
    """Price impact of the real route exceeds the configured ceiling."""

    kind = ErrorKind.RISK


class SimulationError(TradeError):
    """Pre-flight call of the built transaction reverted."""

    kind = ErrorKind.SIMULATION


class NetworkMismatchError(TradeError):
    """Signer is connected to a different chain than requested."""

    kind = ErrorKind.NETWORK


class ChainCallTimeout(TradeError):
    """A chain call exceeded its deadline."""

    kind = ErrorKind.NETWORK


class RpcError(TradeError):
    """The node rejected or failed a JSON-RPC request."""

    kind = ErrorKind.NETWORK


class ConfirmationError(TradeError):
    """Transaction receipt missing or reverted."""

    kind = ErrorKind.CONFIRMATION


class EncodingError(TradeError):
    """Arguments cannot be encoded for the target contract."""

    kind = ErrorKind.ENCODING


class ConfigurationError(TradeError):
    """Required chain or venue configuration is missing."""

    kind = ErrorKind.CONFIGURATION


__all__ = [
    "ErrorKind",
    "RETRYABLE_KINDS",
    "is_retryable",
    "TradeError",
    "ValidationError",
    "QuoteError",
    "ApprovalError",
    "PriceImpactError",
    "SimulationError",
    "NetworkMismatchError",
    "ChainCallTimeout",
    "RpcError",
    "ConfirmationError",
    "EncodingError",
    "ConfigurationError",
]
