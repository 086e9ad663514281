"""Per-chain token and contract address tables.

Addresses are stored lowercase. A blank string means the venue is not
deployed (or not supported) on that chain; require_address() fails fast on
those instead of letting a call go to address(0).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from dexswap.constants import PERMIT2_ADDRESS
from dexswap.errors import ConfigurationError, ValidationError
from dexswap.models.types import is_valid_address, normalize_address


# Bridging tokens tried by route searches, in order
INTERMEDIARY_ORDER = (
    "usdt",
    "usdc",
    "usds",
    "dai",
    "wbtc",
    "weth",
    "wsteth",
    "uni",
    "aero",
    "virtual",
    "arb",
)

# Ordered (first, second) bridging pairs for three-hop searches
INTERMEDIARY_PAIRS = (
    ("usdc", "weth"),
    ("usdt", "weth"),
    ("dai", "weth"),
    ("usds", "weth"),
    ("weth", "usdc"),
    ("weth", "usdt"),
    ("weth", "dai"),
    ("weth", "usds"),
    ("usdc", "usdt"),
    ("usdc", "dai"),
    ("usdt", "dai"),
    ("weth", "wbtc"),
    ("wbtc", "weth"),
    ("usdc", "wbtc"),
    ("wbtc", "usdc"),
    ("virtual", "weth"),
    ("weth", "virtual"),
    ("aero", "weth"),
    ("weth", "aero"),
)


class ChainType(Enum):
    """Supported chains, valued by chain id."""

    ETH = 1
    ARB = 42161
    BASE = 8453

    @classmethod
    def parse(cls, value: ChainType | str | int) -> ChainType:
        """Accept an enum member, a name ("BASE", "base") or a chain id."""
        if isinstance(value, ChainType):
            return value
        if isinstance(value, int):
            return cls(value)
        text = value.strip().upper()
        if text.isdigit():
            return cls(int(text))
        return cls[text]

    @property
    def chain_id(self) -> int:
        return self.value


@dataclass(frozen=True)
class TokenAddresses:
    weth: str
    usdc: str = ""
    usdt: str = ""
    usds: str = ""
    dai: str = ""
    wbtc: str = ""
    wsteth: str = ""
    uni: str = ""
    aero: str = ""
    virtual: str = ""
    arb: str = ""


@dataclass(frozen=True)
class UniswapV2Addresses:
    factory: str = ""
    router: str = ""


@dataclass(frozen=True)
class UniswapV3Addresses:
    factory: str = ""
    quoter: str = ""
    swap_router: str = ""


@dataclass(frozen=True)
class UniswapV4Addresses:
    pool_manager: str = ""
    quoter: str = ""
    universal_router: str = ""


@dataclass(frozen=True)
class AerodromeAddresses:
    router: str = ""
    factory: str = ""


@dataclass(frozen=True)
class ChainConfig:
    """Static address table for one chain."""

    chain: ChainType
    name: str
    native_currency: str
    tokens: TokenAddresses
    uniswap_v2: UniswapV2Addresses = field(default_factory=UniswapV2Addresses)
    uniswap_v3: UniswapV3Addresses = field(default_factory=UniswapV3Addresses)
    uniswap_v4: UniswapV4Addresses = field(default_factory=UniswapV4Addresses)
    aerodrome: AerodromeAddresses = field(default_factory=AerodromeAddresses)
    permit2: str = PERMIT2_ADDRESS

    @property
    def chain_id(self) -> int:
        return self.chain.chain_id

    @property
    def weth(self) -> str:
        return self.tokens.weth

    @property
    def usdc(self) -> str:
        return self.tokens.usdc

    def intermediary_tokens(self) -> list[str]:
        """Configured bridging tokens in search order, blanks skipped."""
        return [
            normalize_address(getattr(self.tokens, name))
            for name in INTERMEDIARY_ORDER
            if getattr(self.tokens, name)
        ]

    def intermediary_pairs(self) -> list[tuple[str, str]]:
        """Configured bridging pairs in search order, pairs with a blank side skipped."""
        pairs = []
        for first, second in INTERMEDIARY_PAIRS:
            a, b = getattr(self.tokens, first), getattr(self.tokens, second)
            if a and b:
                pairs.append((normalize_address(a), normalize_address(b)))
        return pairs

    def token(self, symbol: str) -> str:
        """Address of a configured token by lowercase symbol, blank if absent."""
        return getattr(self.tokens, symbol.lower(), "")


def require_address(value: str, name: str) -> str:
    """Return a normalized address or fail on a blank/invalid one.

    Raises:
        ConfigurationError: If the address is blank or malformed
    """
    if not value:
        raise ConfigurationError("required address is not configured", field=name)
    if not is_valid_address(value):
        raise ConfigurationError("configured address is invalid", field=name, address=value)
    return normalize_address(value)


ETHEREUM = ChainConfig(
    chain=ChainType.ETH,
    name="Ethereum",
    native_currency="ETH",
    tokens=TokenAddresses(
        weth="0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2",
        usdc="0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48",
        usdt="0xdac17f958d2ee523a2206206994597c13d831ec7",
        usds="0xdc035d45d973e3ec169d2276ddab16f1e407384f",
        dai="0x6b175474e89094c44da98b954eedeac495271d0f",
        wbtc="0x2260fac5e5542a773aa44fbcfedf7c193bc2c599",
        wsteth="0x7f39c581f595b53c5cb19bd0b3f8da6c935e2ca0",
        uni="0x1f9840a85d5af5bf1d1762f925bdaddc4201f984",
    ),
    uniswap_v2=UniswapV2Addresses(
        factory="0x5c69bee701ef814a2b6a3edd4b1652cb9cc5aa6f",
        router="0x7a250d5630b4cf539739df2c5dacb4c659f2488d",
    ),
    uniswap_v3=UniswapV3Addresses(
        factory="0x1f98431c8ad98523631ae4a59f267346ea31f984",
        quoter="0x61ffe014ba17989e743c5f6cb21bf9697530b21e",
        swap_router="0x68b3465833fb72a70ecdf485e0e4c7bd8665fc45",
    ),
    uniswap_v4=UniswapV4Addresses(
        pool_manager="0x000000000004444c5dc75cb358380d2e3de08a90",
        quoter="0x52f0e24d1c21c8a0cb1e5a5dd6198556bd9e1203",
        universal_router="0x66a9893cc07d91d95644aedd05d03f95e1dba8af",
    ),
)

ARBITRUM = ChainConfig(
    chain=ChainType.ARB,
    name="Arbitrum One",
    native_currency="ETH",
    tokens=TokenAddresses(
        weth="0x82af49447d8a07e3bd95bd0d56f35241523fbab1",
        usdc="0xaf88d065e77c8cc2239327c5edb3a432268e5831",
        usdt="0xfd086bc7cd5c481dcc9c85ebe478a1c0b69fcbb9",
        dai="0xda10009cbd5d07dd0cecc66161fc93d7c9000da1",
        wbtc="0x2f2a2543b76a4166549f7aab2e75bef0aefc5b0f",
        arb="0x912ce59144191c1204e64559fe8253a0e49e6548",
    ),
    uniswap_v2=UniswapV2Addresses(
        factory="0xf1d7cc64fb4452f05c498126312ebe29f30fbcf9",
        router="0x4752ba5dbc23f44d87826276bf6fd6b1c372ad24",
    ),
    uniswap_v3=UniswapV3Addresses(
        factory="0x1f98431c8ad98523631ae4a59f267346ea31f984",
        quoter="0x61ffe014ba17989e743c5f6cb21bf9697530b21e",
        swap_router="0x68b3465833fb72a70ecdf485e0e4c7bd8665fc45",
    ),
    uniswap_v4=UniswapV4Addresses(
        pool_manager="0x360e68faccca8ca495c1b759fd9eee466db9fb32",
        quoter="0x3972c00f7ed4885e145823eb7c655375d275a1c5",
        universal_router="0xa51afafe0263b40edaef0df8781ea9aa03e381a3",
    ),
)

BASE = ChainConfig(
    chain=ChainType.BASE,
    name="Base",
    native_currency="ETH",
    tokens=TokenAddresses(
        weth="0x4200000000000000000000000000000000000006",
        usdc="0x833589fcd6edb6e08f4c7c32d4f71b54bda02913",
        usdt="0xfde4c96c8593536e31f229ea8f37b2ada2699bb2",
        dai="0x50c5725949a6f0c72e6c4a641f24049a917db0cb",
        wsteth="0xc1cba3fcea344f92d9239c08c0568f6f2f0ee452",
        aero="0x940181a94a35a4569e4529a3cdfb74e38fd98631",
        virtual="0x0b3e328455c4059eeb9e3f84b5543f74e24e7e1b",
    ),
    uniswap_v2=UniswapV2Addresses(
        factory="0x8909dc15e40173ff4699343b6eb8132c65e18ec6",
        router="0x4752ba5dbc23f44d87826276bf6fd6b1c372ad24",
    ),
    uniswap_v3=UniswapV3Addresses(
        factory="0x33128a8fc17869897dce68ed026d694621f6fdfd",
        quoter="0x3d4e44eb1374240ce5f1b871ab261cd16335b76a",
        swap_router="0x2626664c2603336e57b271c5c0b26f421741e481",
    ),
    uniswap_v4=UniswapV4Addresses(
        pool_manager="0x498581ff718922c3f8e6a244956af099b2652b2b",
        quoter="0x0d5e0f971ed27fbff6c2837bf31316121532048d",
        universal_router="0x6ff5693b99212da76ad316178a184ab56d299b43",
    ),
    aerodrome=AerodromeAddresses(
        router="0xcf77a3ba9a5ca399b7c97c74d54e5b1beb874e43",
        factory="0x420dd381b31aef6683db6b902084cb0ffece40da",
    ),
)

CHAIN_CONFIGS: dict[ChainType, ChainConfig] = {
    ChainType.ETH: ETHEREUM,
    ChainType.ARB: ARBITRUM,
    ChainType.BASE: BASE,
}


def parse_chain(chain: ChainType | str | int) -> ChainType:
    """Resolve a caller-supplied chain name or id.

    Raises:
        ValidationError: If the chain is not supported
    """
    try:
        return ChainType.parse(chain)
    except (KeyError, ValueError) as err:
        raise ValidationError(
            "unsupported chain", chain=str(chain), supported=[c.name for c in ChainType]
        ) from err


def get_chain_config(chain: ChainType | str | int) -> ChainConfig:
    """Look up the address table for a chain.

    Raises:
        ConfigurationError: If the chain is not supported
    """
    try:
        chain_type = ChainType.parse(chain)
    except (KeyError, ValueError) as err:
        raise ConfigurationError("unsupported chain", chain=str(chain)) from err
    return CHAIN_CONFIGS[chain_type]


__all__ = [
    "INTERMEDIARY_ORDER",
    "INTERMEDIARY_PAIRS",
    "ChainType",
    "ChainConfig",
    "TokenAddresses",
    "UniswapV2Addresses",
    "UniswapV3Addresses",
    "UniswapV4Addresses",
    "AerodromeAddresses",
    "CHAIN_CONFIGS",
    "get_chain_config",
    "parse_chain",
    "require_address",
]
