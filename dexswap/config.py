"""Trading configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from decimal import Decimal

from dexswap.constants import (
    APPROVAL_BUFFER_DENOMINATOR,
    APPROVAL_BUFFER_NUMERATOR,
    DEFAULT_CALL_TIMEOUT_SECONDS,
    DEFAULT_DEADLINE_SECONDS,
    ROUTE_CACHE_TTL_SECONDS,
)

ENV_PREFIX = "DEXSWAP_"


def _env_bool(value: str) -> bool:
    return value.strip().lower() in ("true", "1", "yes")


@dataclass(frozen=True)
class TradingConfig:
    """Centralized configuration for quoting and execution.

    Attributes:
        slippage_tolerance: Fraction of the quoted output that may be lost
            between quote and mining (0.02 = 2%)
        max_price_impact_percentage: Ceiling on price impact versus the spot
            rate; exceeding it aborts the trade before anything is sent
        price_impact_amount_in: Reference input (in input-token units) used
            to measure the spot rate
        deadline_seconds: Seconds from build time until the swap expires
        infinite_approval: Approve MaxUint256 instead of the trade amount
        approval_buffer: (numerator, denominator) applied to the raw amount
            for non-infinite approvals
        route_cache_ttl_seconds: Lifetime of a cached route
        call_timeout_seconds: Upper bound on any single chain call
        enable_v4: Register the UniswapV4 strategy in the factory
    """

    slippage_tolerance: Decimal = Decimal("0.02")
    max_price_impact_percentage: Decimal = Decimal("5")
    price_impact_amount_in: str = "0.001"
    deadline_seconds: int = DEFAULT_DEADLINE_SECONDS
    infinite_approval: bool = False
    approval_buffer: tuple[int, int] = (APPROVAL_BUFFER_NUMERATOR, APPROVAL_BUFFER_DENOMINATOR)
    route_cache_ttl_seconds: float = ROUTE_CACHE_TTL_SECONDS
    call_timeout_seconds: float = DEFAULT_CALL_TIMEOUT_SECONDS
    enable_v4: bool = False

    def __post_init__(self) -> None:
        if not Decimal(0) < self.slippage_tolerance < Decimal(1):
            raise ValueError(f"slippage_tolerance must be in (0, 1): {self.slippage_tolerance}")
        if self.max_price_impact_percentage < 0:
            raise ValueError(
                f"max_price_impact_percentage cannot be negative: {self.max_price_impact_percentage}"
            )
        if self.deadline_seconds <= 0:
            raise ValueError(f"deadline_seconds must be positive: {self.deadline_seconds}")
        if self.call_timeout_seconds <= 0:
            raise ValueError(f"call_timeout_seconds must be positive: {self.call_timeout_seconds}")

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> TradingConfig:
        """Build a config from DEXSWAP_* environment variables.

        Unset variables keep their defaults:
        - DEXSWAP_SLIPPAGE_TOLERANCE
        - DEXSWAP_MAX_PRICE_IMPACT
        - DEXSWAP_PRICE_IMPACT_AMOUNT_IN
        - DEXSWAP_DEADLINE_SECONDS
        - DEXSWAP_INFINITE_APPROVAL
        - DEXSWAP_ROUTE_CACHE_TTL
        - DEXSWAP_CALL_TIMEOUT
        - DEXSWAP_ENABLE_V4
        """
        env = os.environ if environ is None else environ
        config = cls()
        overrides: dict[str, object] = {}

        if (value := env.get(ENV_PREFIX + "SLIPPAGE_TOLERANCE")) is not None:
            overrides["slippage_tolerance"] = Decimal(value)
        if (value := env.get(ENV_PREFIX + "MAX_PRICE_IMPACT")) is not None:
            overrides["max_price_impact_percentage"] = Decimal(value)
        if (value := env.get(ENV_PREFIX + "PRICE_IMPACT_AMOUNT_IN")) is not None:
            overrides["price_impact_amount_in"] = value
        if (value := env.get(ENV_PREFIX + "DEADLINE_SECONDS")) is not None:
            overrides["deadline_seconds"] = int(value)
        if (value := env.get(ENV_PREFIX + "INFINITE_APPROVAL")) is not None:
            overrides["infinite_approval"] = _env_bool(value)
        if (value := env.get(ENV_PREFIX + "ROUTE_CACHE_TTL")) is not None:
            overrides["route_cache_ttl_seconds"] = float(value)
        if (value := env.get(ENV_PREFIX + "CALL_TIMEOUT")) is not None:
            overrides["call_timeout_seconds"] = float(value)
        if (value := env.get(ENV_PREFIX + "ENABLE_V4")) is not None:
            overrides["enable_v4"] = _env_bool(value)

        return replace(config, **overrides) if overrides else config


def get_rpc_url(chain_name: str, environ: dict[str, str] | None = None) -> str | None:
    """RPC endpoint for a chain from DEXSWAP_RPC_URL_<CHAIN>."""
    env = os.environ if environ is None else environ
    return env.get(f"{ENV_PREFIX}RPC_URL_{chain_name.upper()}")


def get_private_key(environ: dict[str, str] | None = None) -> str | None:
    """Signing key from DEXSWAP_PRIVATE_KEY."""
    env = os.environ if environ is None else environ
    return env.get(ENV_PREFIX + "PRIVATE_KEY")


# Default configuration instance
DEFAULT_TRADING_CONFIG = TradingConfig()
