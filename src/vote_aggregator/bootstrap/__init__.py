"""Bootstrap wiring: configuration loading, logging and the service container."""

from vote_aggregator.bootstrap.container import (
    ServiceContainer,
    build_container,
    load_environment,
)
from vote_aggregator.bootstrap.logging import configure_logging

__all__ = ["ServiceContainer", "build_container", "configure_logging", "load_environment"]
