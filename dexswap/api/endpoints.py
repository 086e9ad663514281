"""API endpoints for quoting and trading."""

import asyncio
import os
from functools import lru_cache

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from dexswap.chains import parse_chain
from dexswap.config import TradingConfig
from dexswap.errors import ErrorKind, TradeError
from dexswap.models.trade import TradeIntent
from dexswap.trading import TraderFactory

logger = structlog.get_logger()

router = APIRouter()

# Upper bound on one request, covering quotes, approval, submission and confirmation
REQUEST_TIMEOUT_SECONDS = float(os.environ.get("DEXSWAP_REQUEST_TIMEOUT", "300"))

# HTTP status per error kind
STATUS_BY_KIND = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.QUOTE: 404,
    ErrorKind.APPROVAL: 502,
    ErrorKind.RISK: 422,
    ErrorKind.SIMULATION: 422,
    ErrorKind.NETWORK: 503,
    ErrorKind.CONFIRMATION: 502,
    ErrorKind.ENCODING: 500,
    ErrorKind.CONFIGURATION: 500,
}


@lru_cache(maxsize=1)
def _default_factory() -> TraderFactory:
    return TraderFactory(TradingConfig.from_env())


def get_trader_factory() -> TraderFactory:
    """Dependency provider for the trader factory.

    Override this in tests to inject mock traders:
        app.dependency_overrides[get_trader_factory] = lambda: mock_factory
    """
    return _default_factory()


def error_response(error: TradeError) -> JSONResponse:
    return JSONResponse(
        status_code=STATUS_BY_KIND.get(error.kind, 500),
        content={"error": error.to_dict(), "retryable": error.retryable},
    )


def timeout_response(operation: str) -> JSONResponse:
    return JSONResponse(
        status_code=504,
        content={
            "error": {"kind": "timeout", "message": f"{operation} timed out", "context": {}},
            "retryable": True,
        },
    )


@router.post("/quote")
async def quote(
    intent: TradeIntent,
    factory: TraderFactory = Depends(get_trader_factory),
) -> object:
    """Best quote across the chain's strategies, with every strategy's answer.

    Error Handling:
        - Invalid request schema: 422 (Pydantic)
        - TradeError: status from its kind, body carries the kind and context
        - Deadline exceeded: 504
    """
    logger.info(
        "quote_requested",
        chain=intent.chain,
        input_token=intent.input_token,
        output_token=intent.output_token,
        input_amount=intent.input_amount,
    )
    try:
        trader = factory.connect(parse_chain(intent.chain))
        best, quotes = await asyncio.wait_for(
            trader.compare_quotes(intent), timeout=REQUEST_TIMEOUT_SECONDS
        )
    except TradeError as e:
        logger.warning("quote_failed", kind=e.kind.value, error=str(e))
        return error_response(e)
    except TimeoutError:
        logger.warning("quote_timeout", timeout_seconds=REQUEST_TIMEOUT_SECONDS)
        return timeout_response("quote")

    return {"best": best.to_dict(), "quotes": [q.to_dict() for q in quotes]}


@router.post("/trade")
async def trade(
    intent: TradeIntent,
    factory: TraderFactory = Depends(get_trader_factory),
) -> object:
    """Execute an intent on the best strategy and return the realized result."""
    logger.info(
        "trade_requested",
        chain=intent.chain,
        input_kind=intent.input_kind.value,
        input_token=intent.input_token,
        output_token=intent.output_token,
        input_amount=intent.input_amount,
    )
    try:
        trader = factory.connect(parse_chain(intent.chain))
        result = await asyncio.wait_for(trader.trade(intent), timeout=REQUEST_TIMEOUT_SECONDS)
    except TradeError as e:
        logger.warning("trade_failed", kind=e.kind.value, error=str(e))
        return error_response(e)
    except TimeoutError:
        # The transaction may still be mined; the hash is in the logs if it was sent
        logger.warning("trade_timeout", timeout_seconds=REQUEST_TIMEOUT_SECONDS)
        return timeout_response("trade")

    return result.to_dict()
