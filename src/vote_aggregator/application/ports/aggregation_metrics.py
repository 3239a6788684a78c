"""Aggregation Metrics Port.

Operational counters the aggregation services report to. Implemented by
the Prometheus collector in infrastructure; services accept None to run
without metrics.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from vote_aggregator.domain.models.decision import EvaluationStatus
from vote_aggregator.domain.models.vote import SubjectType


@runtime_checkable
class AggregationMetricsProtocol(Protocol):
    """Protocol for aggregation metrics."""

    def record_vote_cast(self, subject_type: SubjectType) -> None:
        """Count an accepted ballot."""
        ...

    def record_evaluation(self, subject_type: SubjectType, status: EvaluationStatus) -> None:
        """Count one subject evaluation by its status."""
        ...

    def record_submission(self, result: str) -> None:
        """Count one ledger submission attempt by result."""
        ...

    def observe_sweep(self, duration_seconds: float, pending_subjects: int) -> None:
        """Record a finished sweep's duration and the pending backlog it saw."""
        ...
