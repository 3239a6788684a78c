"""FastAPI dependencies resolving services from the app's container."""

from fastapi import Request

from vote_aggregator.api.middleware.rate_limiter import VoteRateLimiter
from vote_aggregator.application.services.aggregation_scheduler import (
    AggregationScheduler,
)
from vote_aggregator.application.services.aggregation_stats_service import (
    AggregationStatsService,
)
from vote_aggregator.application.services.vote_intake_service import VoteIntakeService
from vote_aggregator.bootstrap.container import ServiceContainer
from vote_aggregator.infrastructure.monitoring.aggregation_metrics import (
    AggregationMetricsCollector,
)


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


def get_vote_intake_service(request: Request) -> VoteIntakeService:
    return get_container(request).intake


def get_scheduler(request: Request) -> AggregationScheduler:
    return get_container(request).scheduler


def get_stats_service(request: Request) -> AggregationStatsService:
    return get_container(request).stats


def get_metrics_collector(request: Request) -> AggregationMetricsCollector:
    return get_container(request).metrics


def get_vote_rate_limiter(request: Request) -> VoteRateLimiter:
    return request.app.state.vote_rate_limiter
