"""Trading strategies: one generic Strategy plus a venue adapter per DEX."""

from dexswap.strategies.aerodrome import AerodromeAdapter
from dexswap.strategies.base import Strategy, SwapRequest, VenueAdapter
from dexswap.strategies.uniswap_v2 import UniswapV2Adapter
from dexswap.strategies.uniswap_v3 import UniswapV3Adapter
from dexswap.strategies.uniswap_v4 import UniswapV4Adapter

__all__ = [
    "Strategy",
    "SwapRequest",
    "VenueAdapter",
    "UniswapV2Adapter",
    "UniswapV3Adapter",
    "UniswapV4Adapter",
    "AerodromeAdapter",
]
