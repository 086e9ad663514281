"""Generic trading strategy over a venue adapter.

A Strategy turns a TradeIntent into a Quote or a ready-to-send transaction.
Everything venue-specific (route search, spot-rate quoting, calldata layout,
who pulls the input token) lives behind the VenueAdapter protocol, so one
Strategy class serves every venue.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol

import structlog

from dexswap.chains import ChainConfig, require_address
from dexswap.constants import ETH_DECIMALS, MAX_UINT256, NATIVE_ADDRESS
from dexswap.config import DEFAULT_TRADING_CONFIG, TradingConfig
from dexswap.errors import ApprovalError, PriceImpactError, QuoteError, TradeError, ValidationError
from dexswap.models.result import TransactionRequest
from dexswap.models.route import Quote, Route
from dexswap.models.trade import InputKind, TradeIntent, TradeShape, classify_trade
from dexswap.models.types import is_native, normalize_address
from dexswap.pricing import (
    calculate_price_impact,
    format_units,
    minimum_output,
    parse_ether,
    parse_units,
    scale_spot_output,
    spot_amount_candidates,
    usd_to_eth,
)
from dexswap.venues.erc20 import TokenClient, encode_approve
from dexswap.wallet import Signer, receipt_gas_cost, send_and_confirm

logger = structlog.get_logger()


@dataclass(frozen=True)
class SwapRequest:
    """Everything a venue needs to encode one exact-input swap.

    Attributes:
        shape: Direction relative to the native asset
        token_in: Input token as given by the caller (native sentinel for ETH)
        token_out: Output token as given by the caller
        amount_in: Raw input amount
        amount_out_min: Raw minimum output after slippage
        route: Route chosen by the venue's optimizer
        recipient: Address receiving the output
        deadline: Unix timestamp after which the swap reverts
    """

    shape: TradeShape
    token_in: str
    token_out: str
    amount_in: int
    amount_out_min: int
    route: Route
    recipient: str
    deadline: int


class VenueAdapter(Protocol):
    """Venue-specific half of a strategy.

    Attributes:
        name: Venue label used in strategy names ("UniswapV2")
        spender: Address that must be allowed to pull the input token
    """

    name: str

    @property
    def spender(self) -> str: ...

    async def find_route(self, token_in: str, token_out: str, amount_in: int) -> Route:
        """Best route on this venue; Route.empty() when nothing is liquid."""
        ...

    async def spot_amount_out(self, route: Route, amount_in: int) -> int | None:
        """Output of a small reference trade along the same route."""
        ...

    async def build_swap(self, request: SwapRequest, wallet: Signer) -> TransactionRequest:
        """Encode the swap transaction for this venue."""
        ...


class Strategy:
    """Quote and build swaps on one venue of one chain.

    Args:
        adapter: Venue adapter doing route search and encoding
        chain: Chain address table
        wallet: Signer the trades are built for
        tokens: ERC20 reads (decimals, balances, allowances)
        config: Trading configuration
        clock: Wall-clock source for deadlines, injectable for tests
    """

    def __init__(
        self,
        adapter: VenueAdapter,
        chain: ChainConfig,
        wallet: Signer,
        tokens: TokenClient,
        config: TradingConfig = DEFAULT_TRADING_CONFIG,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.adapter = adapter
        self.chain = chain
        self.wallet = wallet
        self.tokens = tokens
        self.config = config
        self.clock = clock

    @property
    def name(self) -> str:
        return f"{self.adapter.name}-{self.chain.chain.name}"

    def __repr__(self) -> str:
        return f"Strategy({self.name})"

    # ------------------------------------------------------------------
    # Amounts
    # ------------------------------------------------------------------

    async def _decimals(self, token: str) -> int:
        if is_native(token):
            return ETH_DECIMALS
        return (await self.tokens.get_token(token)).decimals

    async def spot_price(self, native: str = NATIVE_ADDRESS, quote_asset: str | None = None) -> str:
        """Units of quote_asset (USDC by default) one native unit buys, formatted.

        Raises:
            QuoteError: If the venue has no liquid route for the pair
        """
        quote_asset = quote_asset or require_address(self.chain.usdc, "tokens.usdc")
        one = 10**ETH_DECIMALS
        route = await self.adapter.find_route(native, quote_asset, one)
        if route.is_empty:
            raise QuoteError(
                "spot price unavailable", strategy=self.name, quote_asset=quote_asset
            )
        return format_units(route.amount_out, await self._decimals(quote_asset))

    async def resolve_amount_in(self, intent: TradeIntent) -> int:
        """Raw input amount for an intent.

        USD input is converted at this venue's spot price; the full-balance
        sentinel reads the wallet's token balance.

        Raises:
            ValidationError: If the amount resolves to zero
        """
        if is_native(intent.input_token):
            if intent.input_kind == InputKind.USD:
                eth_amount = usd_to_eth(intent.input_amount, await self.spot_price())
                amount_in = parse_ether(eth_amount)
            else:
                amount_in = parse_ether(intent.input_amount)
        elif intent.is_all_balance:
            amount_in = await self.tokens.balance_of(intent.input_token, self.wallet.address)
        else:
            amount_in = parse_units(intent.input_amount, await self._decimals(intent.input_token))

        if amount_in <= 0:
            raise ValidationError(
                "input amount resolves to zero",
                input_amount=intent.input_amount,
                input_token=intent.input_token,
            )
        return amount_in

    # ------------------------------------------------------------------
    # Quote
    # ------------------------------------------------------------------

    async def quote(self, intent: TradeIntent) -> Quote:
        """Best output this venue offers for the intent.

        A venue without liquidity returns a zero Quote rather than raising.
        """
        shape = classify_trade(intent)
        amount_in = await self.resolve_amount_in(intent)
        output_decimals = (
            ETH_DECIMALS if shape == TradeShape.TOKEN_TO_ETH else await self._decimals(intent.output_token)
        )

        route = await self.adapter.find_route(intent.input_token, intent.output_token, amount_in)
        if route.is_empty:
            logger.info("quote_no_liquidity", strategy=self.name, amount_in=amount_in)
            return Quote(strategy=self.name, output_amount="0", route=route, amount_in=amount_in)

        output_amount = format_units(route.amount_out, output_decimals)
        logger.info(
            "quote_computed",
            strategy=self.name,
            amount_in=amount_in,
            amount_out=route.amount_out,
            output_amount=output_amount,
            hops=route.hops,
        )
        return Quote(
            strategy=self.name, output_amount=output_amount, route=route, amount_in=amount_in
        )

    # ------------------------------------------------------------------
    # Build
    # ------------------------------------------------------------------

    async def _expected_output(self, route: Route, amount_in: int, input_decimals: int) -> int:
        configured = parse_units(self.config.price_impact_amount_in, input_decimals)
        for spot_in in spot_amount_candidates(configured, amount_in):
            spot_out = await self.adapter.spot_amount_out(route, spot_in)
            if spot_out:
                return scale_spot_output(spot_out, spot_in, amount_in)
            logger.debug("spot_rate_unavailable", strategy=self.name, spot_in=spot_in)
        raise QuoteError("spot rate unavailable for price impact check", strategy=self.name)

    async def build_transaction(self, intent: TradeIntent) -> TransactionRequest:
        """Build a slippage- and impact-bounded swap for the wallet.

        Raises:
            QuoteError: If no route or no spot rate is available
            PriceImpactError: If the route's impact exceeds the configured ceiling
        """
        shape = classify_trade(intent)
        amount_in = await self.resolve_amount_in(intent)
        input_decimals = await self._decimals(intent.input_token)

        route = await self.adapter.find_route(intent.input_token, intent.output_token, amount_in)
        if route.is_empty:
            raise QuoteError("no liquid route", strategy=self.name, amount_in=amount_in)

        expected = await self._expected_output(route, amount_in, input_decimals)
        impact = calculate_price_impact(expected, route.amount_out)
        if impact > self.config.max_price_impact_percentage:
            raise PriceImpactError(
                "price impact too high",
                strategy=self.name,
                impact_percent=impact.quantize(Decimal("0.01")),
                max_percent=self.config.max_price_impact_percentage,
                expected=expected,
                actual=route.amount_out,
            )

        request = SwapRequest(
            shape=shape,
            token_in=normalize_address(intent.input_token),
            token_out=normalize_address(intent.output_token),
            amount_in=amount_in,
            amount_out_min=minimum_output(route.amount_out, self.config.slippage_tolerance),
            route=route,
            recipient=self.wallet.address,
            deadline=int(self.clock()) + self.config.deadline_seconds,
        )
        tx = await self.adapter.build_swap(request, self.wallet)
        logger.info(
            "transaction_built",
            strategy=self.name,
            to=tx["to"],
            value=tx["value"],
            amount_in=amount_in,
            amount_out_min=request.amount_out_min,
            price_impact=str(impact),
            deadline=request.deadline,
        )
        return tx

    # ------------------------------------------------------------------
    # Approval
    # ------------------------------------------------------------------

    async def ensure_approval(
        self, token: str, amount: int, spender: str | None = None
    ) -> int | None:
        """Make sure spender may pull amount of token from the wallet.

        Returns:
            Gas cost (wei) of the approval transaction, or None if none was sent

        Raises:
            ApprovalError: If the approval transaction fails
        """
        if is_native(token):
            return None
        spender = normalize_address(spender or self.adapter.spender)
        owner = self.wallet.address

        allowance = await self.tokens.allowance(token, owner, spender)
        if allowance >= amount:
            logger.debug("approval_sufficient", token=token, spender=spender, allowance=allowance)
            return None

        if self.config.infinite_approval:
            approve_amount = MAX_UINT256
        else:
            numerator, denominator = self.config.approval_buffer
            approve_amount = amount * numerator // denominator

        to, data = encode_approve(token, spender, approve_amount)
        try:
            tx_hash, receipt = await send_and_confirm(self.wallet, {"to": to, "data": data, "value": 0})
        except TradeError as e:
            raise ApprovalError(
                "approval transaction failed", token=token, spender=spender, reason=e.message
            ) from e

        gas_cost = receipt_gas_cost(receipt)
        logger.info(
            "approval_confirmed",
            strategy=self.name,
            token=token,
            spender=spender,
            amount=approve_amount,
            tx_hash=tx_hash,
            gas_cost=gas_cost,
        )
        return gas_cost


__all__ = ["SwapRequest", "VenueAdapter", "Strategy"]
