"""Protocol constants shared across venues.

Per-chain addresses live in dexswap.chains; this module holds values that are
identical on every supported chain.
"""

import re

MAX_UINT256 = 2**256 - 1
MAX_UINT160 = 2**160 - 1
MAX_UINT128 = 2**128 - 1
MAX_UINT48 = 2**48 - 1

ETH_DECIMALS = 18


_ADDRESS_RE = re.compile(r"^0x[a-fA-F0-9]{40}$")


def _validate_address(name: str, address: str) -> str:
    """Validate and return a contract address.

    Raises:
        ValueError: If the address is invalid
    """
    if not _ADDRESS_RE.match(address):
        raise ValueError(f"Invalid {name} address: {address} (must be 0x + 40 hex chars)")
    return address


# Reserved sentinel for the chain's native asset (ETH)
NATIVE_ADDRESS = "0x0000000000000000000000000000000000000000"

# Permit2 is deployed at the same address on every chain
PERMIT2_ADDRESS = _validate_address("Permit2", "0x000000000022d473030f116ddee9f6b43ac78ba3")

# UniswapV4 native currency is address(0)
V4_NATIVE_CURRENCY = NATIVE_ADDRESS

# UniswapV3/V4 fee tiers in hundredths of a basis point (3000 = 0.3%)
FEE_LOWEST = 100
FEE_LOW = 500
FEE_MEDIUM = 3000
FEE_HIGH = 10000

FEE_TIERS = [FEE_LOWEST, FEE_LOW, FEE_MEDIUM, FEE_HIGH]

TICK_SPACING = {
    FEE_LOWEST: 1,
    FEE_LOW: 10,
    FEE_MEDIUM: 60,
    FEE_HIGH: 200,
}

# Execution defaults (overridable through TradingConfig)
DEFAULT_DEADLINE_SECONDS = 20 * 60
DEFAULT_CALL_TIMEOUT_SECONDS = 10.0
ROUTE_CACHE_TTL_SECONDS = 10 * 60
APPROVAL_BUFFER_NUMERATOR = 105
APPROVAL_BUFFER_DENOMINATOR = 100

# Fractions of the trade size tried when the reference amount finds no liquidity
SPOT_FALLBACK_DIVISORS = (100, 50, 20)
