"""Aggregation API response models."""

from datetime import datetime

from pydantic import BaseModel, Field

from vote_aggregator.api.models.votes import DateTimeWithZ, SubjectTypeEnum


class SubjectRefModel(BaseModel):
    subject_type: SubjectTypeEnum
    subject_id: str


class DecisionModel(BaseModel):
    """Decision made for a subject during a sweep."""

    subject_type: SubjectTypeEnum
    subject_id: str
    outcome: str
    approve_weight: float
    reject_weight: float
    total_voters: int
    threshold: float
    evaluated_at: DateTimeWithZ


class ReceiptModel(BaseModel):
    signature: str
    transition: str
    confirmed_at: DateTimeWithZ


class EvaluationResultModel(BaseModel):
    """What happened to one subject."""

    subject_type: SubjectTypeEnum
    subject_id: str
    status: str
    reason: str | None = None
    outcome: str | None = None
    receipt: ReceiptModel | None = None
    error: str | None = None
    attempts: int = 0


class TriggerResponse(BaseModel):
    """Result of POST /v1/aggregation/trigger."""

    started_at: DateTimeWithZ
    finished_at: DateTimeWithZ
    subjects_evaluated: list[SubjectRefModel]
    decisions: list[DecisionModel]
    results: list[EvaluationResultModel]
    counts: dict[str, int] = Field(description="Evaluations per status")


class AggregationStatsResponse(BaseModel):
    """Read-only backlog snapshot."""

    pending_proposals: int
    pending_disputes: int
    total_pending_votes: int
    scheduler_state: str
    interval_seconds: float
    proposal_threshold: float
    dispute_threshold: float
    min_votes_required: int
    last_sweep_at: datetime | None = None
