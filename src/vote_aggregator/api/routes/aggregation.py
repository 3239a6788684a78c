"""Aggregation API routes.

- POST /v1/aggregation/trigger: run a sweep now and report per-subject results
- GET  /v1/aggregation/stats: pending backlog, scheduler state, thresholds
"""

from fastapi import APIRouter, Depends, Request

from vote_aggregator.api.dependencies.services import get_scheduler, get_stats_service
from vote_aggregator.api.models.aggregation import (
    AggregationStatsResponse,
    DecisionModel,
    EvaluationResultModel,
    ReceiptModel,
    SubjectRefModel,
    TriggerResponse,
)
from vote_aggregator.api.models.votes import SubjectTypeEnum
from vote_aggregator.api.routes.problems import problem
from vote_aggregator.application.dtos.sweep_summary import SweepSummary
from vote_aggregator.application.services.aggregation_scheduler import (
    AggregationScheduler,
)
from vote_aggregator.application.services.aggregation_stats_service import (
    AggregationStatsService,
)
from vote_aggregator.domain.errors import StoreUnavailableError
from vote_aggregator.domain.models.decision import SubjectEvaluation

router = APIRouter(prefix="/v1/aggregation", tags=["aggregation"])


def _to_result(evaluation: SubjectEvaluation) -> EvaluationResultModel:
    receipt = evaluation.receipt
    return EvaluationResultModel(
        subject_type=SubjectTypeEnum(evaluation.subject.subject_type.value),
        subject_id=evaluation.subject.subject_id,
        status=evaluation.status.value,
        reason=evaluation.reason.value if evaluation.reason else None,
        outcome=evaluation.decision.outcome.value if evaluation.decision else None,
        receipt=(
            ReceiptModel(
                signature=receipt.signature,
                transition=receipt.transition.value,
                confirmed_at=receipt.confirmed_at,
            )
            if receipt
            else None
        ),
        error=evaluation.error,
        attempts=evaluation.attempts,
    )


def _to_response(summary: SweepSummary) -> TriggerResponse:
    return TriggerResponse(
        started_at=summary.started_at,
        finished_at=summary.finished_at,
        subjects_evaluated=[
            SubjectRefModel(
                subject_type=SubjectTypeEnum(s.subject_type.value),
                subject_id=s.subject_id,
            )
            for s in summary.subjects_evaluated
        ],
        decisions=[
            DecisionModel(
                subject_type=SubjectTypeEnum(d.subject_type.value),
                subject_id=d.subject_id,
                outcome=d.outcome.value,
                approve_weight=d.approve_weight,
                reject_weight=d.reject_weight,
                total_voters=d.total_voters,
                threshold=d.threshold,
                evaluated_at=d.evaluated_at,
            )
            for d in summary.decisions
        ],
        results=[_to_result(r) for r in summary.results],
        counts=summary.counts,
    )


@router.post(
    "/trigger",
    response_model=TriggerResponse,
    responses={503: {"description": "Vote store unavailable"}},
)
async def trigger_aggregation(
    request: Request,
    scheduler: AggregationScheduler = Depends(get_scheduler),
) -> TriggerResponse:
    """Evaluate every pending subject now, independent of the timer."""
    try:
        summary = await scheduler.trigger_now()
    except StoreUnavailableError as e:
        raise problem(
            request,
            503,
            "store-unavailable",
            "Vote Store Unavailable",
            str(e),
            headers={"Retry-After": str(e.retry_after)},
        ) from None
    return _to_response(summary)


@router.get("/stats", response_model=AggregationStatsResponse)
async def get_aggregation_stats(
    request: Request,
    stats: AggregationStatsService = Depends(get_stats_service),
) -> AggregationStatsResponse:
    """Read-only snapshot of the aggregation backlog."""
    try:
        snapshot = await stats.get_stats()
    except StoreUnavailableError as e:
        raise problem(
            request,
            503,
            "store-unavailable",
            "Vote Store Unavailable",
            str(e),
            headers={"Retry-After": str(e.retry_after)},
        ) from None

    return AggregationStatsResponse(
        pending_proposals=snapshot.pending_proposals,
        pending_disputes=snapshot.pending_disputes,
        total_pending_votes=snapshot.total_pending_votes,
        scheduler_state=snapshot.scheduler_state,
        interval_seconds=snapshot.interval_seconds,
        proposal_threshold=snapshot.proposal_threshold,
        dispute_threshold=snapshot.dispute_threshold,
        min_votes_required=snapshot.min_votes_required,
        last_sweep_at=snapshot.last_sweep_at,
    )
