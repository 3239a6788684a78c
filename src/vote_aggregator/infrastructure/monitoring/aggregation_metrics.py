"""Prometheus metrics for vote intake and aggregation.

Operational metrics only:
- votes_cast_total{subject_type}
- aggregation_evaluations_total{subject_type, status}
- ledger_submissions_total{result}
- aggregation_sweep_duration_seconds (histogram)
- aggregation_pending_subjects (gauge, as of the last sweep)
"""

from __future__ import annotations

import os

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

from vote_aggregator.domain.models.decision import EvaluationStatus
from vote_aggregator.domain.models.vote import SubjectType

# Content type for Prometheus metrics endpoint
METRICS_CONTENT_TYPE = "text/plain; version=0.0.4; charset=utf-8"

# Sweeps are dominated by ledger round trips (100ms to 5min)
SWEEP_DURATION_BUCKETS = (0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0, 300.0)


class AggregationMetricsCollector:
    """Collects vote aggregation metrics for Prometheus.

    Attributes:
        votes_cast_total: Counter of accepted ballots.
        evaluations_total: Counter of subject evaluations by status.
        ledger_submissions_total: Counter of submission attempts by result.
        sweep_duration_seconds: Histogram of sweep durations.
        pending_subjects: Gauge of pending subjects seen by the last sweep.
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """Initialize the collector.

        Args:
            registry: Optional custom registry for testing isolation.
        """
        self._registry = registry or CollectorRegistry()
        self._environment = os.environ.get("ENVIRONMENT", "development")
        self._service_name = os.environ.get("SERVICE_NAME", "vote-aggregator")

        self.votes_cast_total = Counter(
            name="votes_cast_total",
            documentation="Total ballots accepted by vote intake",
            labelnames=["service", "environment", "subject_type"],
            registry=self._registry,
        )

        self.evaluations_total = Counter(
            name="aggregation_evaluations_total",
            documentation="Total subject evaluations by status",
            labelnames=["service", "environment", "subject_type", "status"],
            registry=self._registry,
        )

        # result: confirmed, race_resolved, retry, rejected, exhausted
        self.ledger_submissions_total = Counter(
            name="ledger_submissions_total",
            documentation="Total ledger submission attempts by result",
            labelnames=["service", "environment", "result"],
            registry=self._registry,
        )

        self.sweep_duration_seconds = Histogram(
            name="aggregation_sweep_duration_seconds",
            documentation="Aggregation sweep duration in seconds",
            labelnames=["service", "environment"],
            buckets=SWEEP_DURATION_BUCKETS,
            registry=self._registry,
        )

        self.pending_subjects = Gauge(
            name="aggregation_pending_subjects",
            documentation="Subjects pending aggregation at the last sweep",
            labelnames=["service", "environment"],
            registry=self._registry,
        )

    def record_vote_cast(self, subject_type: SubjectType) -> None:
        self.votes_cast_total.labels(
            service=self._service_name,
            environment=self._environment,
            subject_type=subject_type.value,
        ).inc()

    def record_evaluation(self, subject_type: SubjectType, status: EvaluationStatus) -> None:
        self.evaluations_total.labels(
            service=self._service_name,
            environment=self._environment,
            subject_type=subject_type.value,
            status=status.value,
        ).inc()

    def record_submission(self, result: str) -> None:
        """Count a submission attempt.

        Args:
            result: confirmed, race_resolved, retry, rejected or exhausted.
        """
        self.ledger_submissions_total.labels(
            service=self._service_name,
            environment=self._environment,
            result=result,
        ).inc()

    def observe_sweep(self, duration_seconds: float, pending_subjects: int) -> None:
        self.sweep_duration_seconds.labels(
            service=self._service_name,
            environment=self._environment,
        ).observe(duration_seconds)
        self.pending_subjects.labels(
            service=self._service_name,
            environment=self._environment,
        ).set(pending_subjects)

    def get_registry(self) -> CollectorRegistry:
        """Get the collector registry."""
        return self._registry

    def generate(self) -> bytes:
        """Render metrics in Prometheus exposition format."""
        return generate_latest(self._registry)
