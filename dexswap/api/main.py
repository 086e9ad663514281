"""FastAPI application for the swap service.

Note: Authentication and rate limiting are not implemented at the application
level. The service holds a signing key and must only be reachable from
trusted callers (private network or an authenticating reverse proxy).
"""

import os

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from dexswap import __version__
from dexswap.api.endpoints import router
from dexswap.logging_config import configure_logging

# Configuration from environment variables with sensible defaults
HOST = os.environ.get("DEXSWAP_HOST", "127.0.0.1")
PORT = int(os.environ.get("DEXSWAP_PORT", "8000"))
DEBUG = os.environ.get("DEXSWAP_DEBUG", "false").lower() in ("true", "1", "yes")
LOG_JSON = os.environ.get("DEXSWAP_LOG_JSON", "false").lower() in ("true", "1", "yes")

# Maximum request body size (64 KB); intents are small
MAX_REQUEST_SIZE = 64 * 1024

app = FastAPI(
    title="dexswap",
    description="Multi-venue DEX swap quoting and execution",
    version=__version__,
)


@app.middleware("http")
async def limit_request_size(request: Request, call_next):  # type: ignore[no-untyped-def]
    """Reject requests with body larger than MAX_REQUEST_SIZE."""
    content_length = request.headers.get("content-length")
    if content_length and int(content_length) > MAX_REQUEST_SIZE:
        return JSONResponse(status_code=413, content={"detail": "Request too large"})
    return await call_next(request)


app.include_router(router)


@app.get("/health")
async def health() -> dict[str, object]:
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


def run() -> None:
    """Run the API server.

    Configuration via environment variables:
    - DEXSWAP_HOST: Host to bind to (default: 127.0.0.1)
    - DEXSWAP_PORT: Port to bind to (default: 8000)
    - DEXSWAP_DEBUG: Enable debug logging and reload mode (default: false)
    - DEXSWAP_LOG_JSON: Render logs as JSON lines (default: false)
    """
    configure_logging("DEBUG" if DEBUG else "INFO", json=LOG_JSON)
    uvicorn.run(
        "dexswap.api.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
    )


if __name__ == "__main__":
    run()
