"""Structured logging configuration."""

import logging
import sys

import structlog
from structlog.types import Processor

from core.config import settings


def _processors(json_output: bool) -> list[Processor]:
    shared: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    if json_output:
        return shared + [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    return shared + [structlog.dev.ConsoleRenderer(colors=False)]


def setup_logging() -> None:
    """Configure stdlib logging and structlog. Call once at startup."""
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    structlog.configure(
        processors=_processors(settings.log_json or settings.is_production),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
