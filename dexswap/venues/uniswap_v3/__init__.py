"""UniswapV3 venue package.

This package provides the QuoterV2 client (Protocol and Web3-based) and
SwapRouter02 calldata encoding.
"""

from .encoding import (
    EXACT_INPUT_SELECTOR,
    EXACT_INPUT_SINGLE_SELECTOR,
    encode_exact_input,
    encode_exact_input_single,
)
from .quoter import QUOTER_V2_ABI, UniswapV3Quoter, V3QuoteResult, Web3UniswapV3Quoter

__all__ = [
    # Quoter
    "QUOTER_V2_ABI",
    "UniswapV3Quoter",
    "V3QuoteResult",
    "Web3UniswapV3Quoter",
    # Encoding
    "EXACT_INPUT_SELECTOR",
    "EXACT_INPUT_SINGLE_SELECTOR",
    "encode_exact_input",
    "encode_exact_input_single",
]
