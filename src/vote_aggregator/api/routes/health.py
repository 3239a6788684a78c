"""Health check endpoint."""

from fastapi import APIRouter, Depends, Response

from vote_aggregator.api.dependencies.services import get_stats_service
from vote_aggregator.api.models.health import DependencyCheckModel, HealthResponse
from vote_aggregator.application.services.aggregation_stats_service import (
    AggregationStatsService,
)

router = APIRouter(prefix="/v1", tags=["health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "A dependency is unhealthy"}},
)
async def health_check(
    response: Response,
    stats: AggregationStatsService = Depends(get_stats_service),
) -> HealthResponse:
    """Return health status; 503 when the vote store is unreachable."""
    health = await stats.check_health()
    if health.status != "healthy":
        response.status_code = 503

    return HealthResponse(
        status=health.status,
        scheduler_state=health.scheduler_state,
        uptime_seconds=health.uptime_seconds,
        checks={
            name: DependencyCheckModel(
                healthy=check.healthy,
                latency_ms=check.latency_ms,
                error=check.error,
            )
            for name, check in health.checks.items()
        },
    )
