"""Build Traders wired with the strategies available on each chain."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

import structlog

from dexswap.chains import ChainConfig, ChainType, get_chain_config, require_address
from dexswap.config import DEFAULT_TRADING_CONFIG, TradingConfig, get_private_key, get_rpc_url
from dexswap.errors import ConfigurationError
from dexswap.routing.cache import RouteCache
from dexswap.routing.optimizer import (
    AerodromeRouteOptimizer,
    UniswapV2RouteOptimizer,
    UniswapV3RouteOptimizer,
    UniswapV4RouteOptimizer,
)
from dexswap.strategies import (
    AerodromeAdapter,
    Strategy,
    UniswapV2Adapter,
    UniswapV3Adapter,
    UniswapV4Adapter,
    VenueAdapter,
)
from dexswap.venues import (
    UniversalRouter,
    Web3AerodromeRouter,
    Web3Permit2,
    Web3TokenClient,
    Web3UniswapV2Router,
    Web3UniswapV3Quoter,
    Web3UniswapV4Quoter,
)
from dexswap.wallet import Wallet

from .trader import Trader

if TYPE_CHECKING:
    from web3 import AsyncWeb3

logger = structlog.get_logger()

# Venues registered per chain, in tie-break order
CHAIN_VENUES: dict[ChainType, tuple[str, ...]] = {
    ChainType.ETH: ("uniswap_v2", "uniswap_v3"),
    ChainType.ARB: ("uniswap_v2", "uniswap_v3"),
    ChainType.BASE: ("uniswap_v2", "uniswap_v3", "aerodrome"),
}


class TraderFactory:
    """Creates a Trader per (chain, wallet) with RPC-backed venue clients.

    Args:
        config: Trading configuration shared by every strategy
        clock: Wall-clock source for swap deadlines
    """

    def __init__(
        self,
        config: TradingConfig = DEFAULT_TRADING_CONFIG,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self.config = config
        self.clock = clock
        self._connected: dict[ChainType, Trader] = {}

    def venues_for(self, chain: ChainConfig) -> list[str]:
        venues = list(CHAIN_VENUES[chain.chain])
        if self.config.enable_v4:
            venues.append("uniswap_v4")
        return venues

    def _cache(self) -> RouteCache:
        return RouteCache(ttl_seconds=self.config.route_cache_ttl_seconds)

    def _adapter(self, venue: str, chain: ChainConfig, w3: AsyncWeb3) -> VenueAdapter:
        timeout = self.config.call_timeout_seconds
        if venue == "uniswap_v2":
            quoter = Web3UniswapV2Router(
                w3, require_address(chain.uniswap_v2.router, "uniswap_v2.router"), timeout
            )
            return UniswapV2Adapter(
                chain, quoter, UniswapV2RouteOptimizer(chain, quoter, self._cache())
            )
        if venue == "uniswap_v3":
            v3_quoter = Web3UniswapV3Quoter(
                w3, require_address(chain.uniswap_v3.quoter, "uniswap_v3.quoter"), timeout
            )
            return UniswapV3Adapter(
                chain, v3_quoter, UniswapV3RouteOptimizer(chain, v3_quoter, self._cache())
            )
        if venue == "aerodrome":
            router = Web3AerodromeRouter(
                w3, require_address(chain.aerodrome.router, "aerodrome.router"), timeout
            )
            return AerodromeAdapter(
                chain, router, AerodromeRouteOptimizer(chain, router, self._cache())
            )
        if venue == "uniswap_v4":
            v4_quoter = Web3UniswapV4Quoter(
                w3, require_address(chain.uniswap_v4.quoter, "uniswap_v4.quoter"), timeout
            )
            permit2 = Web3Permit2(w3, require_address(chain.permit2, "permit2"), timeout)
            return UniswapV4Adapter(
                chain,
                v4_quoter,
                permit2,
                UniversalRouter(
                    require_address(chain.uniswap_v4.universal_router, "uniswap_v4.universal_router")
                ),
                UniswapV4RouteOptimizer(chain, v4_quoter, self._cache()),
            )
        raise ConfigurationError("unknown venue", venue=venue)

    def create(self, chain: ChainType | str | int, wallet: Wallet) -> Trader:
        """Trader for chain using wallet's RPC connection.

        The signer's chain is checked on every trade, before any venue call.
        """
        config = get_chain_config(chain)
        tokens = Web3TokenClient(wallet.w3, self.config.call_timeout_seconds)

        kwargs = {"clock": self.clock} if self.clock is not None else {}
        strategies = []
        for venue in self.venues_for(config):
            strategies.append(
                Strategy(
                    self._adapter(venue, config, wallet.w3),
                    config,
                    wallet,
                    tokens,
                    self.config,
                    **kwargs,
                )
            )

        logger.info(
            "trader_created",
            chain=config.chain.name,
            wallet=wallet.address,
            strategies=[s.name for s in strategies],
        )
        return Trader(config, wallet, strategies, tokens)

    def connect(self, chain: ChainType | str | int) -> Trader:
        """Trader from DEXSWAP_RPC_URL_<CHAIN> and DEXSWAP_PRIVATE_KEY.

        Traders are reused per chain so their route caches survive between
        requests.

        Raises:
            ConfigurationError: If the RPC URL or private key is not set
        """
        from web3 import AsyncHTTPProvider, AsyncWeb3

        config = get_chain_config(chain)
        if config.chain in self._connected:
            return self._connected[config.chain]
        rpc_url = get_rpc_url(config.chain.name)
        if not rpc_url:
            raise ConfigurationError("RPC URL not configured", chain=config.chain.name)
        private_key = get_private_key()
        if not private_key:
            raise ConfigurationError("private key not configured")

        w3 = AsyncWeb3(AsyncHTTPProvider(rpc_url))
        wallet = Wallet.from_private_key(
            w3, private_key, call_timeout=self.config.call_timeout_seconds
        )
        trader = self.create(config.chain, wallet)
        self._connected[config.chain] = trader
        return trader


__all__ = ["CHAIN_VENUES", "TraderFactory"]
