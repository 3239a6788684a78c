"""Decision policy for aggregated votes.

Pure functions: given a tally and the configured thresholds, decide
whether a subject is approved, rejected, or still short of quorum.

Rules:
- total_voters < min_votes_required -> INSUFFICIENT_QUORUM
- approval ratio >= threshold -> APPROVED (ties meet the threshold)
- otherwise -> REJECTED
"""

from __future__ import annotations

from datetime import datetime, timezone

from vote_aggregator.domain.models.decision import (
    AggregationDecision,
    AggregationOutcome,
)
from vote_aggregator.domain.models.vote import SubjectType, Tally

# Absorbs float rounding so a ratio exactly at the threshold counts as meeting it.
RATIO_EPSILON = 1e-9


def meets_threshold(tally: Tally, threshold: float) -> bool:
    """Inclusive approval ratio comparison."""
    if tally.total_weight <= 0:
        return False
    return tally.approval_ratio + RATIO_EPSILON >= threshold


def decide(
    subject_type: SubjectType,
    subject_id: str,
    tally: Tally,
    threshold: float,
    min_votes_required: int,
    evaluated_at: datetime | None = None,
) -> AggregationDecision:
    """Apply the decision policy to a tally.

    Args:
        subject_type: Proposal or dispute.
        subject_id: Ledger address of the subject.
        tally: Current tally for the subject.
        threshold: Approval ratio threshold for this subject type (0-1].
        min_votes_required: Quorum, in distinct voters.
        evaluated_at: Decision timestamp (defaults to now, UTC).

    Returns:
        AggregationDecision for the subject.
    """
    if tally.total_voters < min_votes_required:
        outcome = AggregationOutcome.INSUFFICIENT_QUORUM
    elif meets_threshold(tally, threshold):
        outcome = AggregationOutcome.APPROVED
    else:
        outcome = AggregationOutcome.REJECTED

    return AggregationDecision(
        subject_type=subject_type,
        subject_id=subject_id,
        outcome=outcome,
        approve_weight=tally.approve_weight,
        reject_weight=tally.reject_weight,
        total_voters=tally.total_voters,
        threshold=threshold,
        evaluated_at=evaluated_at or datetime.now(timezone.utc),
    )
