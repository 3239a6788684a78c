"""Metrics endpoint for Prometheus scraping."""

from fastapi import APIRouter, Depends, Response

from vote_aggregator.api.dependencies.services import get_metrics_collector
from vote_aggregator.infrastructure.monitoring.aggregation_metrics import (
    METRICS_CONTENT_TYPE,
    AggregationMetricsCollector,
)

router = APIRouter(prefix="/v1", tags=["metrics"])


@router.get(
    "/metrics",
    summary="Prometheus metrics endpoint",
    response_class=Response,
    responses={
        200: {
            "description": "Metrics in Prometheus format",
            "content": {"text/plain": {}},
        }
    },
)
async def get_metrics(
    collector: AggregationMetricsCollector = Depends(get_metrics_collector),
) -> Response:
    """Vote and aggregation metrics in Prometheus exposition format."""
    return Response(content=collector.generate(), media_type=METRICS_CONTENT_TYPE)
