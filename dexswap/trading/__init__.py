"""Trade orchestration: best-strategy selection, execution and reconciliation."""

from dexswap.trading.events import Settlement, reconcile
from dexswap.trading.factory import CHAIN_VENUES, TraderFactory
from dexswap.trading.trader import Trader

__all__ = [
    "Trader",
    "TraderFactory",
    "CHAIN_VENUES",
    "Settlement",
    "reconcile",
]
