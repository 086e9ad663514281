"""Route, pool identity and quote value objects.

Routes are immutable so the route cache can hand out the same instance to
every caller without copying.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from dexswap.constants import NATIVE_ADDRESS, TICK_SPACING
from dexswap.errors import ValidationError
from dexswap.models.types import normalize_address, sort_addresses


@dataclass(frozen=True)
class PoolKey:
    """UniswapV4 pool identity.

    currency0 < currency1 numerically. Use PoolKey.create() to build a key
    from an arbitrary token pair.
    """

    currency0: str
    currency1: str
    fee: int
    tick_spacing: int
    hooks: str = NATIVE_ADDRESS

    def __post_init__(self) -> None:
        if int(self.currency0, 16) >= int(self.currency1, 16):
            raise ValidationError(
                "pool key currencies must be sorted",
                currency0=self.currency0,
                currency1=self.currency1,
            )

    @classmethod
    def create(
        cls,
        token_a: str,
        token_b: str,
        fee: int,
        tick_spacing: int | None = None,
        hooks: str = NATIVE_ADDRESS,
    ) -> PoolKey:
        """Build a canonical key, sorting currencies and deriving tick spacing from fee."""
        if tick_spacing is None:
            if fee not in TICK_SPACING:
                raise ValidationError("no tick spacing registered for fee", fee=fee)
            tick_spacing = TICK_SPACING[fee]
        currency0, currency1 = sort_addresses(token_a, token_b)
        return cls(currency0, currency1, fee, tick_spacing, normalize_address(hooks))

    @property
    def pool_id(self) -> bytes:
        """keccak256 of the ABI-encoded key."""
        from dexswap.encoding.pool_id import compute_pool_id

        return compute_pool_id(self)

    def zero_for_one(self, token_in: str) -> bool:
        """True if swapping currency0 for currency1."""
        return normalize_address(token_in) == normalize_address(self.currency0)

    def as_tuple(self) -> tuple[str, str, int, int, str]:
        return (self.currency0, self.currency1, self.fee, self.tick_spacing, self.hooks)


@dataclass(frozen=True)
class PathSegment:
    """One hop of a UniswapV4 multi-hop path (PathKey)."""

    intermediate_currency: str
    fee: int
    tick_spacing: int
    hooks: str = NATIVE_ADDRESS
    hook_data: bytes = b""


@dataclass(frozen=True)
class AerodromeHop:
    """One hop of an Aerodrome route (Route struct)."""

    from_token: str
    to_token: str
    stable: bool
    factory: str


@dataclass(frozen=True)
class Route:
    """Best path found for one venue and its quoted output.

    Exactly one of encoded_path, pool_key, path_segments or aero_routes is
    populated for venues that need it; V2 routes carry only path.

    Attributes:
        amount_out: Quoted output in raw token units
        path: Token addresses in swap order
        fees: Per-hop fee tier (V3/V4) or empty
        encoded_path: Packed V3 path for multi-hop swaps
        pool_key: V4 single-hop pool
        path_segments: V4 multi-hop segments
        aero_routes: Aerodrome hops
    """

    amount_out: int
    path: tuple[str, ...] = ()
    fees: tuple[int, ...] = ()
    encoded_path: bytes | None = None
    pool_key: PoolKey | None = None
    path_segments: tuple[PathSegment, ...] | None = None
    aero_routes: tuple[AerodromeHop, ...] | None = None

    def __post_init__(self) -> None:
        if self.fees and len(self.path) != len(self.fees) + 1:
            raise ValidationError(
                "route path must have one more token than fees",
                path_length=len(self.path),
                fee_count=len(self.fees),
            )

    @classmethod
    def empty(cls) -> Route:
        """A route that found no liquidity."""
        return cls(amount_out=0)

    @property
    def hops(self) -> int:
        if self.aero_routes:
            return len(self.aero_routes)
        return max(len(self.path) - 1, 0)

    @property
    def is_empty(self) -> bool:
        return self.amount_out <= 0


@dataclass(frozen=True)
class Quote:
    """One strategy's answer for a trade intent.

    amount_in is the raw input the route was quoted for.
    """

    strategy: str
    output_amount: str
    route: Route = field(default_factory=Route.empty)
    amount_in: int = 0

    @property
    def amount_out(self) -> int:
        return self.route.amount_out

    def to_dict(self) -> dict[str, object]:
        return {
            "strategy": self.strategy,
            "outputAmount": self.output_amount,
            "amountIn": str(self.amount_in),
            "amountOut": str(self.route.amount_out),
            "path": list(self.route.path),
            "fees": list(self.route.fees),
        }
