"""Price impact, slippage and unit conversion.

All on-chain amounts are integers in the token's smallest unit. Conversions
to and from human-readable decimal strings go through Decimal so no float
rounding ever reaches an amount that is sent on-chain.
"""

from __future__ import annotations

from collections.abc import Iterator
from decimal import ROUND_CEILING, ROUND_DOWN, Decimal, InvalidOperation, localcontext

from dexswap.constants import ETH_DECIMALS, SPOT_FALLBACK_DIVISORS
from dexswap.errors import ValidationError

# Precision large enough for uint256 values with 18 decimals
_PRECISION = 100


def parse_units(amount: str | Decimal, decimals: int) -> int:
    """Convert a decimal amount to raw integer units, truncating extra digits.

    Raises:
        ValidationError: If the amount is not a finite number
    """
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        try:
            value = Decimal(amount)
        except InvalidOperation as err:
            raise ValidationError("amount is not a number", amount=str(amount)) from err
        if not value.is_finite():
            raise ValidationError("amount must be finite", amount=str(amount))
        scaled = (value * (Decimal(10) ** decimals)).to_integral_value(rounding=ROUND_DOWN)
        return int(scaled)


def format_units(raw: int, decimals: int) -> str:
    """Convert raw integer units to a decimal string.

    Trailing zeros are trimmed but at least one fractional digit is kept,
    so 3000 * 10**6 with 6 decimals formats as "3000.0".
    """
    negative = raw < 0
    raw = abs(raw)
    whole, fraction = divmod(raw, 10**decimals)
    fraction_text = str(fraction).rjust(decimals, "0").rstrip("0") if decimals else ""
    text = f"{whole}.{fraction_text or '0'}"
    return f"-{text}" if negative else text


def parse_ether(amount: str | Decimal) -> int:
    return parse_units(amount, ETH_DECIMALS)


def format_ether(raw: int) -> str:
    return format_units(raw, ETH_DECIMALS)


def usd_to_eth(usd_amount: str | Decimal, eth_usd_price: str | Decimal) -> str:
    """Convert a USD amount to ETH at a spot price, formatted to 18 decimals.

    Raises:
        ValidationError: If the price is not positive
    """
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        price = Decimal(eth_usd_price)
        if price <= 0:
            raise ValidationError("ETH/USD price must be positive", price=str(eth_usd_price))
        eth = (Decimal(usd_amount) / price).quantize(
            Decimal(1).scaleb(-ETH_DECIMALS), rounding=ROUND_DOWN
        )
        return format(eth, "f")


def calculate_price_impact(expected: int | Decimal, actual: int | Decimal) -> Decimal:
    """Percentage shortfall of actual output versus the spot-rate expectation.

    impact = max(0, (expected - actual) / expected * 100)

    Args:
        expected: Output the spot rate predicts for the full trade size
        actual: Output the real route quotes

    Returns:
        Impact in percent, never negative; 0 when expected is not positive
    """
    expected_d = Decimal(expected)
    actual_d = Decimal(actual)
    if expected_d <= 0:
        return Decimal(0)
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        impact = (expected_d - actual_d) / expected_d * 100
    return max(Decimal(0), impact)


def calculate_slippage_amount(actual: int, tolerance: Decimal | str | float) -> int:
    """Amount of output that may be lost to slippage.

    Rounded up so the resulting minimum stays strictly below actual for any
    positive actual and tolerance in (0, 1).

    Raises:
        ValidationError: If tolerance is outside (0, 1)
    """
    tol = Decimal(str(tolerance))
    if not Decimal(0) < tol < Decimal(1):
        raise ValidationError("slippage tolerance must be in (0, 1)", tolerance=str(tolerance))
    if actual <= 0:
        return 0
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        slippage = (Decimal(actual) * tol).to_integral_value(rounding=ROUND_CEILING)
    return max(int(slippage), 1)


def minimum_output(actual: int, tolerance: Decimal | str | float) -> int:
    """amountOutMin = actual - actual * tolerance, always 0 <= min < actual."""
    if actual <= 0:
        return 0
    return max(actual - calculate_slippage_amount(actual, tolerance), 0)


def scale_spot_output(spot_out: int, spot_in: int, amount_in: int) -> int:
    """Output the spot rate predicts for amount_in."""
    if spot_in <= 0:
        return 0
    return spot_out * amount_in // spot_in


def spot_amount_candidates(configured: int, amount_in: int) -> Iterator[int]:
    """Reference input sizes for the spot rate, in the order they are tried.

    The configured amount first, then 1%, 2% and 5% of the trade size.
    Non-positive candidates are skipped.
    """
    if configured > 0:
        yield configured
    for divisor in SPOT_FALLBACK_DIVISORS:
        candidate = amount_in // divisor
        if candidate > 0:
            yield candidate


__all__ = [
    "parse_units",
    "format_units",
    "parse_ether",
    "format_ether",
    "usd_to_eth",
    "calculate_price_impact",
    "calculate_slippage_amount",
    "minimum_output",
    "scale_spot_output",
    "spot_amount_candidates",
]
