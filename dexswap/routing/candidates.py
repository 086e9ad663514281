"""Candidate path generation for route searches.

Candidates are grouped into stages. A search evaluates one stage at a time
and, for venues that prefer short routes, stops at the first stage that
yields any liquidity.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from itertools import product

from dexswap.constants import FEE_LOW, FEE_LOWEST, FEE_MEDIUM, FEE_TIERS
from dexswap.models.types import normalize_address

TWO_HOP_FEE_COMBINATIONS: tuple[tuple[int, int], ...] = tuple(
    product((FEE_LOWEST, FEE_LOW, FEE_MEDIUM), repeat=2)
)

THREE_HOP_FEE_COMBINATIONS: tuple[tuple[int, int, int], ...] = (
    *product((FEE_LOWEST, FEE_LOW), repeat=3),
    (FEE_MEDIUM, FEE_MEDIUM, FEE_MEDIUM),
)

TWO_HOP_STABLE_COMBINATIONS: tuple[tuple[bool, ...], ...] = tuple(
    product((True, False), repeat=2)
)
THREE_HOP_STABLE_COMBINATIONS: tuple[tuple[bool, ...], ...] = tuple(
    product((True, False), repeat=3)
)


@dataclass(frozen=True)
class Candidate:
    """One path to quote.

    Attributes:
        path: Token addresses in swap order
        fees: Per-hop fee tier (concentrated-liquidity venues)
        stable: Per-hop pool type (stable/volatile venues)
    """

    path: tuple[str, ...]
    fees: tuple[int, ...] = ()
    stable: tuple[bool, ...] = ()

    @property
    def hops(self) -> int:
        return len(self.path) - 1


def single_intermediary_paths(
    token_in: str, token_out: str, intermediaries: Sequence[str]
) -> list[tuple[str, str, str]]:
    """token_in -> x -> token_out for every usable bridging token x."""
    token_in, token_out = normalize_address(token_in), normalize_address(token_out)
    paths = []
    for token in intermediaries:
        x = normalize_address(token)
        if x in (token_in, token_out):
            continue
        paths.append((token_in, x, token_out))
    return paths


def double_intermediary_paths(
    token_in: str, token_out: str, pairs: Sequence[tuple[str, str]]
) -> list[tuple[str, str, str, str]]:
    """token_in -> a -> b -> token_out for every usable bridging pair (a, b)."""
    token_in, token_out = normalize_address(token_in), normalize_address(token_out)
    paths = []
    for first, second in pairs:
        a, b = normalize_address(first), normalize_address(second)
        if a == b or {a, b} & {token_in, token_out}:
            continue
        paths.append((token_in, a, b, token_out))
    return paths


def constant_product_stages(
    token_in: str,
    token_out: str,
    intermediaries: Sequence[str],
    pairs: Sequence[tuple[str, str]],
) -> list[list[Candidate]]:
    """Direct, one-bridge and two-bridge paths, all in one stage."""
    direct = (normalize_address(token_in), normalize_address(token_out))
    stage = [Candidate(path=direct)]
    stage.extend(Candidate(path=p) for p in single_intermediary_paths(token_in, token_out, intermediaries))
    stage.extend(Candidate(path=p) for p in double_intermediary_paths(token_in, token_out, pairs))
    return [stage]


def concentrated_liquidity_stages(
    token_in: str,
    token_out: str,
    intermediaries: Sequence[str],
    pairs: Sequence[tuple[str, str]],
) -> list[list[Candidate]]:
    """Every fee tier direct, then two-hop fee combinations, then three-hop."""
    direct = (normalize_address(token_in), normalize_address(token_out))
    stages = [[Candidate(path=direct, fees=(fee,)) for fee in FEE_TIERS]]
    stages.append(
        [
            Candidate(path=path, fees=fees)
            for path in single_intermediary_paths(token_in, token_out, intermediaries)
            for fees in TWO_HOP_FEE_COMBINATIONS
        ]
    )
    stages.append(
        [
            Candidate(path=path, fees=fees)
            for path in double_intermediary_paths(token_in, token_out, pairs)
            for fees in THREE_HOP_FEE_COMBINATIONS
        ]
    )
    return stages


def stable_volatile_stages(
    token_in: str,
    token_out: str,
    intermediaries: Sequence[str],
    pairs: Sequence[tuple[str, str]],
) -> list[list[Candidate]]:
    """Direct stable and volatile, then two-hop and three-hop pool-type combinations."""
    direct = (normalize_address(token_in), normalize_address(token_out))
    stages = [[Candidate(path=direct, stable=(True,)), Candidate(path=direct, stable=(False,))]]
    stages.append(
        [
            Candidate(path=path, stable=combo)
            for path in single_intermediary_paths(token_in, token_out, intermediaries)
            for combo in TWO_HOP_STABLE_COMBINATIONS
        ]
    )
    stages.append(
        [
            Candidate(path=path, stable=combo)
            for path in double_intermediary_paths(token_in, token_out, pairs)
            for combo in THREE_HOP_STABLE_COMBINATIONS
        ]
    )
    return stages


__all__ = [
    "Candidate",
    "TWO_HOP_FEE_COMBINATIONS",
    "THREE_HOP_FEE_COMBINATIONS",
    "TWO_HOP_STABLE_COMBINATIONS",
    "THREE_HOP_STABLE_COMBINATIONS",
    "single_intermediary_paths",
    "double_intermediary_paths",
    "constant_product_stages",
    "concentrated_liquidity_stages",
    "stable_volatile_stages",
]
