"""Test helpers module for shared test utilities.

This module consolidates common test utilities to reduce duplication:
- constants: Token addresses, the test wallet and decimals
- factories: Trade intent and receipt factory functions
"""

from tests.helpers.constants import (
    AERO,
    DAI,
    ETH,
    TEST_PRIVATE_KEY,
    TEST_WALLET,
    TOKEN_DECIMALS,
    UNI,
    USDC,
    USDC_BASE,
    USDT,
    WBTC,
    WETH,
    WETH_BASE,
)
from tests.helpers.factories import (
    make_intent,
    make_receipt,
    make_transfer_log,
    make_withdrawal_log,
)

__all__ = [
    # Constants
    "ETH",
    "WETH",
    "USDC",
    "DAI",
    "USDT",
    "WBTC",
    "UNI",
    "WETH_BASE",
    "USDC_BASE",
    "AERO",
    "TEST_PRIVATE_KEY",
    "TEST_WALLET",
    "TOKEN_DECIMALS",
    # Factories
    "make_intent",
    "make_receipt",
    "make_transfer_log",
    "make_withdrawal_log",
]
