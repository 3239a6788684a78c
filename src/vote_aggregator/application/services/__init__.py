"""Application services."""

from vote_aggregator.application.services.aggregation_engine import AggregationEngine
from vote_aggregator.application.services.aggregation_scheduler import (
    AggregationScheduler,
    SchedulerState,
)
from vote_aggregator.application.services.aggregation_stats_service import (
    AggregationStatsService,
    DependencyChecker,
)
from vote_aggregator.application.services.submission_error_handler import (
    ErrorDecision,
    SubmissionAction,
    SubmissionErrorCategory,
    SubmissionErrorHandler,
    categorize_error,
    register_error_category,
)
from vote_aggregator.application.services.vote_intake_service import VoteIntakeService

__all__ = [
    "AggregationEngine",
    "AggregationScheduler",
    "AggregationStatsService",
    "DependencyChecker",
    "ErrorDecision",
    "SchedulerState",
    "SubmissionAction",
    "SubmissionErrorCategory",
    "SubmissionErrorHandler",
    "VoteIntakeService",
    "categorize_error",
    "register_error_category",
]
