"""
Observability Infrastructure

Structured logging for the scheduling engine. The engine performs no I/O of
its own; hosts call ``configure_logging`` once at start-up and every module
obtains its logger through ``get_logger``.
"""

import logging
import sys

import structlog

from .config import Settings, settings


def configure_logging(config: Settings | None = None) -> None:
    """Configure structured logging with JSON or console output."""
    config = config or settings

    log_level = getattr(logging, config.LOG_LEVEL.upper(), logging.INFO)

    processors: list[structlog.typing.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="ISO"),
        structlog.processors.add_log_level,
    ]

    if config.LOG_FORMAT == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(colors=config.ENVIRONMENT == "local")
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )

    # Standard library logging for hosts that mix both
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=log_level,
    )


def get_logger(name: str) -> structlog.typing.FilteringBoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
