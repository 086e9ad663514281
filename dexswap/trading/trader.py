"""Trade orchestrator.

A Trader owns one wallet on one chain and a list of strategies. trade() runs
the full pipeline:

    Validate -> NetworkCheck -> QuoteAll -> SelectBest -> EnsureApproval
    -> Build -> Simulate -> Submit -> Confirm -> Reconcile

Nothing state-changing happens before the simulation of the built swap
succeeds, except the approval the swap needs.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence

import structlog

from dexswap.chains import ChainConfig, parse_chain
from dexswap.constants import NATIVE_ADDRESS
from dexswap.errors import ErrorKind, NetworkMismatchError, QuoteError, TradeError
from dexswap.models.result import TradeResult
from dexswap.models.route import Quote
from dexswap.models.trade import TradeIntent, TradeShape, classify_trade, validate_intent
from dexswap.models.types import is_native
from dexswap.pricing import format_ether, format_units
from dexswap.strategies.base import Strategy
from dexswap.venues.erc20 import TokenClient
from dexswap.wallet import Receipt, Signer, receipt_gas_cost, send_and_confirm

from .events import Settlement, reconcile

logger = structlog.get_logger()


class Trader:
    """Quote across strategies and execute on the best one.

    Args:
        chain: Chain the wallet trades on
        wallet: Signing wallet
        strategies: Strategies in registration order (earlier wins ties)
        tokens: ERC20 reads used to format realized amounts
    """

    def __init__(
        self,
        chain: ChainConfig,
        wallet: Signer,
        strategies: Sequence[Strategy],
        tokens: TokenClient,
    ) -> None:
        self.chain = chain
        self.wallet = wallet
        self.strategies = list(strategies)
        self.tokens = tokens

    @property
    def strategy_names(self) -> list[str]:
        return [s.name for s in self.strategies]

    async def check_network(self, intent: TradeIntent | None = None) -> None:
        """Fail unless both the intent and the signer target this trader's chain.

        Raises:
            ValidationError: If the intent names an unsupported chain
            NetworkMismatchError: On any chain mismatch
        """
        if intent is not None:
            requested = parse_chain(intent.chain)
            if requested != self.chain.chain:
                raise NetworkMismatchError(
                    "intent targets a different chain",
                    requested=requested.name,
                    trader=self.chain.chain.name,
                )
        actual = await self.wallet.chain_id()
        if actual != self.chain.chain_id:
            raise NetworkMismatchError(
                "signer is connected to a different chain",
                expected=self.chain.chain_id,
                actual=actual,
            )

    # ------------------------------------------------------------------
    # Quoting
    # ------------------------------------------------------------------

    async def _safe_quote(self, strategy: Strategy, intent: TradeIntent) -> Quote | Exception:
        try:
            return await strategy.quote(intent)
        except Exception as e:
            logger.warning(
                "strategy_quote_failed",
                strategy=strategy.name,
                error=str(e),
                error_type=type(e).__name__,
            )
            return e

    async def _quote_all(
        self, intent: TradeIntent
    ) -> tuple[list[tuple[Strategy, Quote]], dict[str, Exception]]:
        """Quote every strategy concurrently.

        Returns:
            The strategies that answered with their quotes, and the failures
            of the rest keyed by strategy name
        """
        results = await asyncio.gather(*(self._safe_quote(s, intent) for s in self.strategies))
        quoted: list[tuple[Strategy, Quote]] = []
        failures: dict[str, Exception] = {}
        for strategy, result in zip(self.strategies, results, strict=True):
            if isinstance(result, Exception):
                failures[strategy.name] = result
            else:
                quoted.append((strategy, result))
        return quoted, failures

    def _no_quote_error(self, failures: dict[str, Exception]) -> TradeError:
        """Error for a quote round with no usable answer.

        When every strategy failed with the same non-QUOTE kind that error is
        the answer (missing token metadata is not fixed by retrying). Anything
        else is a retryable QuoteError naming each failure's kind.
        """
        typed = [e for e in failures.values() if isinstance(e, TradeError)]
        if typed and len(typed) == len(self.strategies):
            kinds = {e.kind for e in typed}
            if len(kinds) == 1 and ErrorKind.QUOTE not in kinds:
                return typed[0]
        return QuoteError(
            "no viable strategy",
            strategies=self.strategy_names,
            failures={
                name: e.kind.value if isinstance(e, TradeError) else type(e).__name__
                for name, e in failures.items()
            },
        )

    def _select(
        self,
        quoted: list[tuple[Strategy, Quote]],
        failures: dict[str, Exception] | None = None,
    ) -> tuple[Strategy, Quote]:
        best: tuple[Strategy, Quote] | None = None
        for strategy, quote in quoted:
            if quote.route.is_empty:
                continue
            logger.debug("strategy_quoted", strategy=strategy.name, amount_out=quote.amount_out)
            # Strict comparison keeps the first registered strategy on ties
            if best is None or quote.amount_out > best[1].amount_out:
                best = (strategy, quote)

        if best is None:
            raise self._no_quote_error(failures or {})

        logger.info(
            "best_strategy_selected",
            strategy=best[0].name,
            amount_out=best[1].amount_out,
            output_amount=best[1].output_amount,
        )
        return best

    async def _prepare(self, intent: TradeIntent) -> TradeShape:
        validate_intent(intent)
        shape = classify_trade(intent)
        await self.check_network(intent)
        return shape

    async def compare_quotes(self, intent: TradeIntent) -> tuple[Quote, list[Quote]]:
        """Winning quote plus every strategy's answer, in registration order.

        Raises:
            ValidationError: If the intent is malformed
            NetworkMismatchError: If the intent or signer is on another chain
            QuoteError: If no strategy can price the trade
            TradeError: The shared error when every strategy failed the same
                non-retryable way
        """
        await self._prepare(intent)
        quoted, failures = await self._quote_all(intent)
        _, best = self._select(quoted, failures)
        return best, [q for _, q in quoted]

    async def get_best_quote(self, intent: TradeIntent) -> Quote:
        """Quote-only view of the pipeline: the winning strategy's quote."""
        best, _ = await self.compare_quotes(intent)
        return best

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    async def _eth_price_snapshot(self, strategy: Strategy) -> str:
        try:
            return await strategy.spot_price()
        except TradeError as e:
            logger.warning("eth_price_unavailable", strategy=strategy.name, error=str(e))
            return "0"

    async def _format_token(self, token: str, raw: int) -> str:
        if raw == 0:
            return "0"
        if is_native(token):
            return format_ether(raw)
        return format_units(raw, (await self.tokens.get_token(token)).decimals)

    async def _build_result(
        self,
        intent: TradeIntent,
        strategy: Strategy,
        tx_hash: str,
        receipt: Receipt,
        settlement: Settlement,
        gas_cost: int,
        eth_price: str,
    ) -> TradeResult:
        return TradeResult(
            strategy=strategy.name,
            transaction_hash=tx_hash,
            confirmed_block=int(receipt.get("blockNumber", 0)),
            gas_cost=gas_cost,
            gas_cost_formatted=format_ether(gas_cost),
            eth_price_usd=eth_price,
            eth_spent=str(settlement.eth_spent),
            eth_spent_formatted=await self._format_token(NATIVE_ADDRESS, settlement.eth_spent),
            eth_received=str(settlement.eth_received),
            eth_received_formatted=await self._format_token(NATIVE_ADDRESS, settlement.eth_received),
            tokens_spent=str(settlement.tokens_spent),
            tokens_spent_formatted=await self._format_token(
                intent.input_token, settlement.tokens_spent
            ),
            tokens_received=str(settlement.tokens_received),
            tokens_received_formatted=await self._format_token(
                intent.output_token, settlement.tokens_received
            ),
        )

    async def trade(self, intent: TradeIntent) -> TradeResult:
        """Execute the intent on the strategy with the best quote.

        Raises:
            TradeError: Tagged with the kind of the first failing stage
        """
        shape = await self._prepare(intent)
        strategy, quote = self._select(*await self._quote_all(intent))
        log = logger.bind(strategy=strategy.name, shape=shape.value)

        approval_gas = await strategy.ensure_approval(intent.input_token, quote.amount_in) or 0
        eth_price = await self._eth_price_snapshot(strategy)

        tx = await strategy.build_transaction(intent)
        await self.wallet.call(tx)
        log.info("simulation_passed", to=tx["to"])

        tx_hash, receipt = await send_and_confirm(self.wallet, tx)
        settlement = reconcile(
            shape,
            receipt,
            self.wallet.address,
            intent.input_token,
            intent.output_token,
            tx_value=int(tx["value"]) if shape == TradeShape.ETH_TO_TOKEN else 0,
            weth=self.chain.weth,
        )
        gas_cost = receipt_gas_cost(receipt) + approval_gas

        result = await self._build_result(
            intent, strategy, tx_hash, receipt, settlement, gas_cost, eth_price
        )
        log.info(
            "trade_confirmed",
            tx_hash=tx_hash,
            block=result.confirmed_block,
            gas_cost=gas_cost,
            tokens_received=result.tokens_received,
            eth_received=result.eth_received,
        )
        return result


__all__ = ["Trader"]
