"""API request/response models."""

from vote_aggregator.api.models.aggregation import (
    AggregationStatsResponse,
    DecisionModel,
    EvaluationResultModel,
    TriggerResponse,
)
from vote_aggregator.api.models.health import DependencyCheckModel, HealthResponse
from vote_aggregator.api.models.votes import (
    CastVoteRequest,
    CastVoteResponse,
    SubjectTypeEnum,
    TallyResponse,
)

__all__ = [
    "AggregationStatsResponse",
    "CastVoteRequest",
    "CastVoteResponse",
    "DecisionModel",
    "DependencyCheckModel",
    "EvaluationResultModel",
    "HealthResponse",
    "SubjectTypeEnum",
    "TallyResponse",
    "TriggerResponse",
]
