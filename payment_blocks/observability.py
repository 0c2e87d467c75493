"""Structured logging setup.

Call ``configure_logging`` once at startup, then log through
``structlog.get_logger()`` anywhere in the package::

    log = structlog.get_logger(__name__)
    log.info("payment_block_created", client_id=str(client_id))

Production output is one JSON object per line; any other environment gets
the coloured console renderer.
"""

import logging

import structlog
from structlog.typing import Processor


def _get_log_level(level_name: str) -> int:
    return getattr(logging, level_name.upper(), logging.INFO)


def configure_logging(environment: str = "production", level: str = "INFO") -> None:
    """Configure structlog for the application.

    Args:
        environment: "production" for JSON output, anything else for console
        level: Minimum level name, e.g. "INFO" or "DEBUG"
    """
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if environment == "production":
        final_processor: Processor = structlog.processors.JSONRenderer()
    else:
        final_processor = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=shared_processors + [final_processor],
        wrapper_class=structlog.make_filtering_bound_logger(_get_log_level(level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
