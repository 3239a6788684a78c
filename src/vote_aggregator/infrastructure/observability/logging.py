"""Structured logging configuration with structlog.

Production emits one JSON object per line; any other environment gets
colored console output. Both carry:

    timestamp, level, event, correlation_id (inside requests),
    service (bound by each service), plus event fields

Usage:
    configure_structlog(environment="production", log_level="INFO")

    log = structlog.get_logger().bind(service="aggregation_engine")
    log.info("subject_evaluated", status="SUBMITTED")
"""

import logging
import os
from typing import cast

import structlog
from structlog.typing import Processor

from vote_aggregator.infrastructure.observability.correlation import (
    correlation_id_processor,
)

LOG_LEVEL_ENV = "LOG_LEVEL"
DEFAULT_LOG_LEVEL = "INFO"


def _resolve_log_level(level_name: str | None) -> int:
    name = (level_name or os.getenv(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL)).upper()
    return getattr(logging, name, logging.INFO)


def configure_structlog(
    environment: str = "production",
    log_level: str | None = None,
) -> None:
    """Configure structlog once at startup.

    Args:
        environment: "production" for JSON output, anything else for console.
        log_level: Level name; falls back to LOG_LEVEL, then INFO.
    """
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        cast(Processor, correlation_id_processor),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if environment.lower() == "production":
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(_resolve_log_level(log_level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
