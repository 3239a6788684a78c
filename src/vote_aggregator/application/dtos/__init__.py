"""Application layer DTOs."""

from vote_aggregator.application.dtos.health import (
    AggregationStatsDTO,
    DependencyCheckDTO,
    HealthDTO,
)
from vote_aggregator.application.dtos.sweep_summary import SweepSummary

__all__ = [
    "AggregationStatsDTO",
    "DependencyCheckDTO",
    "HealthDTO",
    "SweepSummary",
]
