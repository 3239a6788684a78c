"""Monitoring infrastructure (Prometheus metrics)."""

from vote_aggregator.infrastructure.monitoring.aggregation_metrics import (
    METRICS_CONTENT_TYPE,
    AggregationMetricsCollector,
)

__all__ = ["AggregationMetricsCollector", "METRICS_CONTENT_TYPE"]
