"""Pytest configuration and fixtures."""

from collections.abc import Callable, Sequence
from typing import Any

import pytest
from eth_account import Account

from dexswap.chains import BASE, ETHEREUM
from dexswap.config import TradingConfig
from dexswap.encoding.permit2 import sign_typed_data
from dexswap.encoding.path import decode_path
from dexswap.errors import TradeError, ValidationError
from dexswap.models.route import AerodromeHop, PathSegment, PoolKey, Quote, Route
from dexswap.models.trade import TradeIntent
from dexswap.models.types import normalize_address
from dexswap.venues.erc20 import TokenInfo
from dexswap.venues.permit2 import Permit2Allowance
from dexswap.venues.uniswap_v3 import V3QuoteResult
from dexswap.venues.uniswap_v4 import V4QuoteResult
from tests.helpers import TEST_PRIVATE_KEY, TOKEN_DECIMALS, make_receipt

# A quote source is either a fixed answer or a function of amount_in
AmountsSource = Sequence[int] | Callable[[int], Sequence[int]]


def linear_amounts(*rates: tuple[int, int]) -> Callable[[int], list[int]]:
    """Amounts function applying each hop's rate (numerator, denominator) in turn.

    Usage:
        # 1 WETH (1e18) -> 3000 USDC (3000e6)
        linear_amounts((3000 * 10**6, 10**18))
    """

    def amounts(amount_in: int) -> list[int]:
        result = [amount_in]
        for numerator, denominator in rates:
            result.append(result[-1] * numerator // denominator)
        return result

    return amounts


def _resolve(source: AmountsSource, amount_in: int) -> list[int]:
    if callable(source):
        return list(source(amount_in))
    return list(source)


def _key(path: Sequence[str]) -> tuple[str, ...]:
    return tuple(normalize_address(t) for t in path)


# =============================================================================
# Mock venue clients (record .calls for assertions)
# =============================================================================


class MockTokenClient:
    """Mock ERC20 reads.

    Usage:
        tokens = MockTokenClient(balances={(USDC, wallet): 5_000 * 10**6})
    """

    def __init__(
        self,
        decimals: dict[str, int] | None = None,
        balances: dict[tuple[str, str], int] | None = None,
        allowances: dict[tuple[str, str, str], int] | None = None,
    ) -> None:
        self.decimals = {normalize_address(k): v for k, v in (decimals or TOKEN_DECIMALS).items()}
        self.balances = {_key(k): v for k, v in (balances or {}).items()}
        self.allowances = {_key(k): v for k, v in (allowances or {}).items()}
        self.calls: list[tuple[Any, ...]] = []

    async def get_token(self, token: str) -> TokenInfo:
        self.calls.append(("get_token", normalize_address(token)))
        key = normalize_address(token)
        if key not in self.decimals:
            raise ValidationError("token metadata unavailable", token=key)
        return TokenInfo(address=key, symbol="TKN", decimals=self.decimals[key])

    async def balance_of(self, token: str, owner: str) -> int:
        self.calls.append(("balance_of", normalize_address(token), normalize_address(owner)))
        return self.balances.get(_key((token, owner)), 0)

    async def allowance(self, token: str, owner: str, spender: str) -> int:
        self.calls.append(("allowance", *_key((token, owner, spender))))
        return self.allowances.get(_key((token, owner, spender)), 0)


class MockUniswapV2Quoter:
    """Mock Router02.getAmountsOut keyed by path; unknown paths are illiquid."""

    def __init__(self, routes: dict[tuple[str, ...], AmountsSource] | None = None) -> None:
        self.routes = {_key(path): source for path, source in (routes or {}).items()}
        self.calls: list[tuple[int, tuple[str, ...]]] = []

    async def get_amounts_out(self, amount_in: int, path: Sequence[str]) -> list[int] | None:
        self.calls.append((amount_in, _key(path)))
        source = self.routes.get(_key(path))
        if source is None:
            return None
        return _resolve(source, amount_in)


class MockUniswapV3Quoter:
    """Mock QuoterV2 keyed by (path, fees); unknown pools are illiquid."""

    def __init__(
        self,
        pools: dict[tuple[tuple[str, ...], tuple[int, ...]], AmountsSource] | None = None,
    ) -> None:
        self.pools = {(_key(path), tuple(fees)): src for (path, fees), src in (pools or {}).items()}
        self.calls: list[tuple[Any, ...]] = []

    def _quote(self, path: tuple[str, ...], fees: tuple[int, ...], amount_in: int) -> V3QuoteResult | None:
        source = self.pools.get((path, fees))
        if source is None:
            return None
        return V3QuoteResult(amount_out=_resolve(source, amount_in)[-1])

    async def quote_exact_input_single(
        self, token_in: str, token_out: str, fee: int, amount_in: int
    ) -> V3QuoteResult | None:
        self.calls.append(("single", _key((token_in, token_out)), fee, amount_in))
        return self._quote(_key((token_in, token_out)), (fee,), amount_in)

    async def quote_exact_input(self, path: bytes, amount_in: int) -> V3QuoteResult | None:
        tokens, fees = decode_path(path)
        self.calls.append(("multi", _key(tokens), tuple(fees), amount_in))
        return self._quote(_key(tokens), tuple(fees), amount_in)


class MockUniswapV4Quoter:
    """Mock V4 Quoter.

    Single-pool swaps are keyed by (token_in, token_out); multi-hop swaps by
    the full currency path, currency_in first.
    """

    def __init__(
        self,
        pools: dict[tuple[str, str], AmountsSource] | None = None,
        paths: dict[tuple[str, ...], AmountsSource] | None = None,
    ) -> None:
        self.pools = {_key(pair): source for pair, source in (pools or {}).items()}
        self.paths = {_key(path): source for path, source in (paths or {}).items()}
        self.calls: list[tuple[Any, ...]] = []
        self.path_calls: list[tuple[str, tuple[PathSegment, ...], int]] = []

    async def quote_exact_input_single(
        self, pool_key: PoolKey, zero_for_one: bool, amount_in: int, hook_data: bytes = b""
    ) -> V4QuoteResult | None:
        self.calls.append((pool_key, zero_for_one, amount_in))
        pair = (
            (pool_key.currency0, pool_key.currency1)
            if zero_for_one
            else (pool_key.currency1, pool_key.currency0)
        )
        source = self.pools.get(pair)
        if source is None:
            return None
        return V4QuoteResult(amount_out=_resolve(source, amount_in)[-1])

    async def quote_exact_input(
        self, currency_in: str, path: Sequence[PathSegment], amount_in: int
    ) -> V4QuoteResult | None:
        self.path_calls.append((currency_in, tuple(path), amount_in))
        source = self.paths.get(_key([currency_in, *(s.intermediate_currency for s in path)]))
        if source is None:
            return None
        return V4QuoteResult(amount_out=_resolve(source, amount_in)[-1])


class MockAerodromeRouter:
    """Mock Aerodrome getAmountsOut keyed by (path, stable flags)."""

    def __init__(
        self,
        routes: dict[tuple[tuple[str, ...], tuple[bool, ...]], AmountsSource] | None = None,
    ) -> None:
        self.routes = {(_key(p), tuple(s)): src for (p, s), src in (routes or {}).items()}
        self.calls: list[tuple[int, tuple[AerodromeHop, ...]]] = []

    async def get_amounts_out(
        self, amount_in: int, routes: Sequence[AerodromeHop]
    ) -> list[int] | None:
        self.calls.append((amount_in, tuple(routes)))
        path = _key([routes[0].from_token] + [r.to_token for r in routes])
        source = self.routes.get((path, tuple(r.stable for r in routes)))
        if source is None:
            return None
        return _resolve(source, amount_in)


class MockPermit2:
    """Mock Permit2.allowance with a fixed nonce."""

    def __init__(self, nonce: int = 0) -> None:
        self.nonce = nonce
        self.calls: list[tuple[str, ...]] = []

    async def allowance(self, owner: str, token: str, spender: str) -> Permit2Allowance:
        self.calls.append(_key((owner, token, spender)))
        return Permit2Allowance(amount=0, expiration=0, nonce=self.nonce)


class MockWallet:
    """In-memory Signer with a real key for typed-data signatures.

    Usage:
        wallet = MockWallet(chain_id=1)
        wallet.call_error = SimulationError("reverted")  # make simulation fail
    """

    def __init__(
        self,
        chain_id: int = 1,
        receipt: dict[str, Any] | None = None,
        private_key: str = TEST_PRIVATE_KEY,
    ) -> None:
        self.account = Account.from_key(private_key)
        self._chain_id = chain_id
        self.receipt = receipt if receipt is not None else make_receipt()
        self.balance = 10 * 10**18
        self.call_error: TradeError | None = None
        self.send_error: TradeError | None = None
        self.wait_error: TradeError | None = None
        self.calls: list[tuple[str, Any]] = []
        self._sent = 0

    @property
    def address(self) -> str:
        return normalize_address(self.account.address)

    async def chain_id(self) -> int:
        self.calls.append(("chain_id", None))
        return self._chain_id

    async def get_balance(self) -> int:
        return self.balance

    async def call(self, tx: dict[str, Any]) -> bytes:
        self.calls.append(("call", tx))
        if self.call_error is not None:
            raise self.call_error
        return b""

    async def send(self, tx: dict[str, Any]) -> str:
        self.calls.append(("send", tx))
        if self.send_error is not None:
            raise self.send_error
        self._sent += 1
        return "0x" + f"{self._sent:064x}"

    async def wait(self, tx_hash: str) -> dict[str, Any]:
        self.calls.append(("wait", tx_hash))
        if self.wait_error is not None:
            raise self.wait_error
        return self.receipt

    def sign_typed_data(self, typed_data: dict[str, Any]) -> bytes:
        self.calls.append(("sign_typed_data", typed_data))
        return sign_typed_data(self.account.key, typed_data)

    def sent(self) -> list[dict[str, Any]]:
        return [tx for name, tx in self.calls if name == "send"]


class FakeClock:
    """Settable time source for caches and deadlines."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class MockStrategy:
    """Strategy stand-in for Trader tests.

    Usage:
        MockStrategy("UniswapV2-ETH", amount_out=100)
        MockStrategy("Broken-ETH", quote_error=QuoteError("boom"))
    """

    def __init__(
        self,
        name: str,
        amount_out: int = 0,
        amount_in: int = 10**18,
        quote_error: Exception | None = None,
        approval_gas: int | None = None,
        spot_price: str = "3000.0",
        tx: dict[str, Any] | None = None,
    ) -> None:
        self.name = name
        self.amount_out = amount_out
        self.amount_in = amount_in
        self.quote_error = quote_error
        self.approval_gas = approval_gas
        self._spot_price = spot_price
        self.tx = tx or {"to": "0x" + "11" * 20, "data": "0x", "value": amount_in}
        self.calls: list[tuple[str, Any]] = []

    async def quote(self, intent: TradeIntent) -> Quote:
        self.calls.append(("quote", intent))
        if self.quote_error is not None:
            raise self.quote_error
        route = Route(amount_out=self.amount_out) if self.amount_out else Route.empty()
        return Quote(
            strategy=self.name,
            output_amount=str(self.amount_out),
            route=route,
            amount_in=self.amount_in,
        )

    async def ensure_approval(self, token: str, amount: int, spender: str | None = None) -> int | None:
        self.calls.append(("ensure_approval", (token, amount)))
        return self.approval_gas

    async def spot_price(self) -> str:
        self.calls.append(("spot_price", None))
        return self._spot_price

    async def build_transaction(self, intent: TradeIntent) -> dict[str, Any]:
        self.calls.append(("build_transaction", intent))
        return self.tx


# =============================================================================
# Pytest fixtures for mocks
# =============================================================================


@pytest.fixture
def ethereum():
    """Ethereum mainnet address table."""
    return ETHEREUM


@pytest.fixture
def base_chain():
    """Base address table."""
    return BASE


@pytest.fixture
def config() -> TradingConfig:
    """Default trading configuration."""
    return TradingConfig()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def wallet() -> MockWallet:
    """Mock wallet connected to Ethereum mainnet."""
    return MockWallet(chain_id=1)


@pytest.fixture
def tokens() -> MockTokenClient:
    return MockTokenClient()


@pytest.fixture
def eth_usdc_v2_quoter() -> MockUniswapV2Quoter:
    """V2 quoter with a single WETH/USDC pair at 3000 USDC per WETH."""
    from tests.helpers import USDC, WETH

    return MockUniswapV2Quoter(
        {
            (WETH, USDC): linear_amounts((3000 * 10**6, 10**18)),
            (USDC, WETH): linear_amounts((10**18, 3000 * 10**6)),
        }
    )
