"""On-chain venue clients.

Each venue exposes a quoting Protocol (implemented over RPC here and by mocks
in tests) plus pure calldata encoders returning (target, calldata_hex).
"""

from .aerodrome import AerodromeQuoter, Web3AerodromeRouter
from .base import ContractClient, call_with_timeout
from .erc20 import TokenClient, TokenInfo, Web3TokenClient, encode_approve
from .permit2 import Permit2Allowance, Permit2Reader, Web3Permit2
from .uniswap_v2 import UniswapV2Quoter, Web3UniswapV2Router
from .uniswap_v3 import UniswapV3Quoter, V3QuoteResult, Web3UniswapV3Quoter
from .uniswap_v4 import UniswapV4Quoter, UniversalRouter, V4QuoteResult, Web3UniswapV4Quoter

__all__ = [
    # Plumbing
    "ContractClient",
    "call_with_timeout",
    # ERC20
    "TokenClient",
    "TokenInfo",
    "Web3TokenClient",
    "encode_approve",
    # UniswapV2
    "UniswapV2Quoter",
    "Web3UniswapV2Router",
    # UniswapV3
    "UniswapV3Quoter",
    "V3QuoteResult",
    "Web3UniswapV3Quoter",
    # UniswapV4
    "UniswapV4Quoter",
    "V4QuoteResult",
    "Web3UniswapV4Quoter",
    "UniversalRouter",
    # Aerodrome
    "AerodromeQuoter",
    "Web3AerodromeRouter",
    # Permit2
    "Permit2Allowance",
    "Permit2Reader",
    "Web3Permit2",
]
