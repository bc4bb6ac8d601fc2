"""Structured logging configuration for runtime entrypoints."""

from __future__ import annotations

import logging
import sys

import structlog


def observability_configure_logging(level: str = "INFO", fmt: str = "pretty") -> None:
    """Configure stdlib and structlog logging once at process startup.

    Pretty console output is used in development, JSON lines when `fmt="json"`.

    Args:
        level: Root log level name.
        fmt: Renderer selection (`pretty` or `json`).

    Returns:
        None: Configures global logging state as side effect.

    Raises:
        ValueError: Raised when the renderer selection is unknown.
    """

    if fmt not in {"pretty", "json"}:
        raise ValueError("fmt must be 'pretty' or 'json'")

    # stdlib baseline so third-party libs (uvicorn, httpx, web3) show up
    logging.basicConfig(stream=sys.stdout, level=level, format="%(message)s", force=True)

    common_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]

    if fmt == "json":
        processors = common_processors + [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors = common_processors + [structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty(), pad_event=28)]

    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
