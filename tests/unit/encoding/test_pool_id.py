"""Tests for UniswapV4 pool keys and pool ids."""

import pytest
from eth_abi import encode
from eth_utils import keccak

from dexswap.encoding.pool_id import compute_pool_id, encode_pool_key
from dexswap.errors import ValidationError
from dexswap.models.route import PoolKey
from tests.helpers import ETH, USDC, WETH


class TestPoolKey:
    """Tests for PoolKey construction."""

    def test_create_sorts_currencies(self) -> None:
        """currency0 is the numerically smaller address."""
        key = PoolKey.create(WETH, USDC, 3000)
        assert key.currency0 == USDC
        assert key.currency1 == WETH

    def test_create_derives_tick_spacing(self) -> None:
        assert PoolKey.create(WETH, USDC, 100).tick_spacing == 1
        assert PoolKey.create(WETH, USDC, 500).tick_spacing == 10
        assert PoolKey.create(WETH, USDC, 3000).tick_spacing == 60
        assert PoolKey.create(WETH, USDC, 10000).tick_spacing == 200

    def test_unknown_fee_without_spacing_raises(self) -> None:
        with pytest.raises(ValidationError):
            PoolKey.create(WETH, USDC, 1234)

    def test_unsorted_direct_construction_raises(self) -> None:
        with pytest.raises(ValidationError):
            PoolKey(WETH, USDC, 3000, 60)

    def test_native_currency_is_currency0(self) -> None:
        """address(0) always sorts first."""
        key = PoolKey.create(USDC, ETH, 3000)
        assert key.currency0 == ETH
        assert key.zero_for_one(ETH)
        assert not key.zero_for_one(USDC)


class TestPoolId:
    """Tests for compute_pool_id."""

    def test_independent_of_input_order(self) -> None:
        """Either token order yields the same pool id."""
        a = PoolKey.create(WETH, USDC, 3000)
        b = PoolKey.create(USDC, WETH, 3000)
        assert compute_pool_id(a) == compute_pool_id(b)

    def test_matches_abi_encoded_keccak(self) -> None:
        key = PoolKey.create(WETH, USDC, 500)
        expected = keccak(
            encode(
                ["address", "address", "uint24", "int24", "address"],
                [USDC, WETH, 500, 10, ETH],
            )
        )
        assert compute_pool_id(key) == expected

    def test_encoded_key_is_five_words(self) -> None:
        assert len(encode_pool_key(PoolKey.create(WETH, USDC, 3000))) == 5 * 32

    def test_fee_changes_id(self) -> None:
        assert compute_pool_id(PoolKey.create(WETH, USDC, 500)) != compute_pool_id(
            PoolKey.create(WETH, USDC, 3000)
        )

    def test_pool_id_property(self) -> None:
        key = PoolKey.create(WETH, USDC, 3000)
        assert key.pool_id == compute_pool_id(key)
        assert len(key.pool_id) == 32
