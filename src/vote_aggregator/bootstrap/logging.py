"""Bootstrap wiring for logging configuration."""

from __future__ import annotations

from vote_aggregator.config.infrastructure_config import RuntimeConfig
from vote_aggregator.infrastructure.observability import (
    configure_structlog as _configure_structlog,
)


def configure_logging(runtime: RuntimeConfig) -> None:
    """Configure structlog from runtime settings."""
    _configure_structlog(environment=runtime.environment, log_level=runtime.log_level)


__all__ = ["configure_logging"]
