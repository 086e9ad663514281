"""structlog setup for entrypoints.

Library modules only call structlog.get_logger(); processes that run the
package (API server, scripts) call configure_logging() once at startup.
"""

import logging

import structlog


def configure_logging(level: str | int = "INFO", *, json: bool = False) -> None:
    """Configure structlog rendering and level filtering.

    Args:
        level: Minimum level name or number (e.g. "DEBUG")
        json: Render JSON lines instead of the console format
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    renderer = structlog.processors.JSONRenderer() if json else structlog.dev.ConsoleRenderer()
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
    )
