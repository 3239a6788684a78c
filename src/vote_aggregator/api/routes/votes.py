"""Vote intake API routes.

- POST /v1/votes: cast or replace a ballot (rate limited per client IP)
- GET  /v1/votes/{subject_type}/{subject_id}/tally: current tally

Errors are RFC 7807 problem objects: 422 for malformed ids or weights,
503 when the vote store is unreachable (the vote was not recorded).
"""

from fastapi import APIRouter, Depends, Request

from vote_aggregator.api.dependencies.services import (
    get_vote_intake_service,
    get_vote_rate_limiter,
)
from vote_aggregator.api.middleware.rate_limiter import VoteRateLimiter
from vote_aggregator.api.models.votes import (
    CastVoteRequest,
    CastVoteResponse,
    SubjectTypeEnum,
    TallyResponse,
)
from vote_aggregator.api.routes.problems import problem
from vote_aggregator.application.services.vote_intake_service import VoteIntakeService
from vote_aggregator.domain.errors import InvalidVoteError, StoreUnavailableError

router = APIRouter(prefix="/v1", tags=["votes"])


@router.post(
    "/votes",
    response_model=CastVoteResponse,
    status_code=201,
    responses={
        422: {"description": "Malformed subject id, voter id or weight"},
        429: {"description": "Rate limit exceeded"},
        503: {"description": "Vote store unavailable"},
    },
)
async def cast_vote(
    request_data: CastVoteRequest,
    request: Request,
    service: VoteIntakeService = Depends(get_vote_intake_service),
    rate_limiter: VoteRateLimiter = Depends(get_vote_rate_limiter),
) -> CastVoteResponse:
    """Cast a vote; a later vote from the same voter replaces the earlier one."""
    await rate_limiter.check_rate_limit(request)

    try:
        vote = await service.cast_vote(
            subject_type=request_data.subject_type.value,
            subject_id=request_data.subject_id,
            voter_id=request_data.voter_id,
            choice=request_data.choice,
            weight=request_data.weight,
        )
    except InvalidVoteError as e:
        raise problem(
            request, 422, "invalid-vote", "Invalid Vote", str(e), field=e.field
        ) from None
    except StoreUnavailableError as e:
        raise problem(
            request,
            503,
            "store-unavailable",
            "Vote Store Unavailable",
            "Vote was not recorded; retry later",
            headers={"Retry-After": str(e.retry_after)},
        ) from None

    return CastVoteResponse(
        vote_id=vote.vote_id,
        subject_type=SubjectTypeEnum(vote.subject_type.value),
        subject_id=vote.subject_id,
        voter_id=vote.voter_id,
        choice=vote.choice,
        weight=vote.weight,
        cast_at=vote.cast_at,
    )


@router.get("/votes/{subject_type}/{subject_id}/tally", response_model=TallyResponse)
async def get_tally(
    subject_type: SubjectTypeEnum,
    subject_id: str,
    request: Request,
    service: VoteIntakeService = Depends(get_vote_intake_service),
) -> TallyResponse:
    """Current tally, recomputed from live votes."""
    try:
        tally = await service.get_tally(subject_type.value, subject_id)
    except InvalidVoteError as e:
        raise problem(
            request, 422, "invalid-subject", "Invalid Subject", str(e), field=e.field
        ) from None
    except StoreUnavailableError as e:
        raise problem(
            request,
            503,
            "store-unavailable",
            "Vote Store Unavailable",
            str(e),
            headers={"Retry-After": str(e.retry_after)},
        ) from None

    return TallyResponse(
        subject_type=subject_type,
        subject_id=subject_id,
        approve_weight=tally.approve_weight,
        reject_weight=tally.reject_weight,
        total_voters=tally.total_voters,
        approval_ratio=tally.approval_ratio,
    )
