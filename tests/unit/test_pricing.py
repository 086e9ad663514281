"""Tests for price impact, slippage and unit conversion."""

from decimal import Decimal

import pytest

from dexswap.errors import ValidationError
from dexswap.pricing import (
    calculate_price_impact,
    calculate_slippage_amount,
    format_ether,
    format_units,
    minimum_output,
    parse_ether,
    parse_units,
    scale_spot_output,
    spot_amount_candidates,
    usd_to_eth,
)


class TestUnits:
    """Tests for parse_units/format_units."""

    def test_parse_usdc(self) -> None:
        assert parse_units("3000", 6) == 3_000_000_000

    def test_parse_truncates_extra_digits(self) -> None:
        assert parse_units("1.1234567", 6) == 1_123_456

    def test_parse_ether(self) -> None:
        assert parse_ether("0.001") == 10**15

    def test_parse_rejects_garbage(self) -> None:
        with pytest.raises(ValidationError):
            parse_units("abc", 18)

    def test_parse_rejects_infinity(self) -> None:
        with pytest.raises(ValidationError):
            parse_units("Infinity", 18)

    def test_format_keeps_one_fraction_digit(self) -> None:
        assert format_units(3_000_000_000, 6) == "3000.0"

    def test_format_trims_trailing_zeros(self) -> None:
        assert format_units(1_500_000, 6) == "1.5"

    def test_format_small_fraction(self) -> None:
        assert format_ether(1) == "0.000000000000000001"

    def test_format_zero_decimals(self) -> None:
        assert format_units(42, 0) == "42.0"

    def test_format_large_value_exact(self) -> None:
        """No float rounding on uint256-sized values."""
        raw = 2**200 + 1
        assert parse_ether(format_ether(raw)) == raw


class TestUsdToEth:
    def test_conversion(self) -> None:
        assert Decimal(usd_to_eth("3000", "2000")) == Decimal("1.5")

    def test_non_positive_price_raises(self) -> None:
        with pytest.raises(ValidationError):
            usd_to_eth("100", "0")


class TestPriceImpact:
    """Tests for calculate_price_impact."""

    def test_shortfall_percentage(self) -> None:
        assert calculate_price_impact(1000, 950) == Decimal(5)

    def test_never_negative(self) -> None:
        """A route better than spot reports zero impact."""
        assert calculate_price_impact(1000, 1100) == 0

    def test_zero_expected(self) -> None:
        assert calculate_price_impact(0, 100) == 0

    def test_full_loss(self) -> None:
        assert calculate_price_impact(1000, 0) == Decimal(100)

    def test_scaled_spot_output(self) -> None:
        """Spot measured at 0.001 ETH scaled to a 1 ETH trade."""
        expected = scale_spot_output(3_000_000, 10**15, 10**18)
        assert expected == 3_000_000_000
        assert calculate_price_impact(expected, 2_850_000_000) == Decimal(5)

    def test_scale_with_zero_reference(self) -> None:
        assert scale_spot_output(100, 0, 10**18) == 0

    @pytest.mark.parametrize(
        ("expected", "actuals"),
        [
            (1000, [1000, 999, 950, 500, 1, 0]),
            (3_000_000_000, [3_000_000_000, 2_999_999_999, 2_850_000_000, 10**6, 0]),
            (10**30, [10**30, 10**30 - 1, 10**30 - 2, 10**18, 1, 0]),
        ],
    )
    def test_strictly_increasing_as_actual_falls(self, expected: int, actuals: list[int]) -> None:
        impacts = [calculate_price_impact(expected, actual) for actual in actuals]
        assert impacts[0] == 0
        assert impacts[-1] == Decimal(100)
        assert all(lower < higher for lower, higher in zip(impacts, impacts[1:]))


class TestSlippage:
    """Minimum output is always below the quote and never negative."""

    @pytest.mark.parametrize("actual", [1, 2, 99, 3_000_000_000, 10**30])
    @pytest.mark.parametrize("tolerance", ["0.0001", "0.02", "0.5", "0.9999"])
    def test_minimum_strictly_below_actual(self, actual: int, tolerance: str) -> None:
        minimum = minimum_output(actual, tolerance)
        assert 0 <= minimum < actual

    def test_two_percent(self) -> None:
        assert minimum_output(3_000_000_000, Decimal("0.02")) == 2_940_000_000

    def test_slippage_rounds_up(self) -> None:
        assert calculate_slippage_amount(101, "0.01") == 2

    def test_zero_actual(self) -> None:
        assert minimum_output(0, "0.02") == 0

    @pytest.mark.parametrize("tolerance", ["0", "1", "-0.1", "1.5"])
    def test_tolerance_out_of_range(self, tolerance: str) -> None:
        with pytest.raises(ValidationError):
            calculate_slippage_amount(1000, tolerance)


class TestSpotAmountCandidates:
    def test_configured_then_fractions(self) -> None:
        assert list(spot_amount_candidates(10**15, 10**18)) == [
            10**15,
            10**16,
            2 * 10**16,
            5 * 10**16,
        ]

    def test_skips_non_positive(self) -> None:
        assert list(spot_amount_candidates(0, 30)) == [1]
