"""API dependencies."""

from vote_aggregator.api.dependencies.services import (
    get_container,
    get_metrics_collector,
    get_scheduler,
    get_stats_service,
    get_vote_intake_service,
    get_vote_rate_limiter,
)

__all__ = [
    "get_container",
    "get_metrics_collector",
    "get_scheduler",
    "get_stats_service",
    "get_vote_intake_service",
    "get_vote_rate_limiter",
]
