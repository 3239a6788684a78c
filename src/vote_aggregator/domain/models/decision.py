"""Aggregation decision and evaluation result models.

An AggregationDecision is ephemeral: produced by the decision policy,
consumed once to drive a ledger submission, then discarded. The durable
record of a decision is the ledger transaction itself.

A SubjectEvaluation is what one evaluate_subject call reports back to the
scheduler and to operators: whether the subject progressed, stayed pending
for quorum, was skipped, or hard-failed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from vote_aggregator.domain.models.ledger_subject import (
    LedgerTransition,
    TransactionReceipt,
)
from vote_aggregator.domain.models.vote import SubjectRef, SubjectType


class AggregationOutcome(str, Enum):
    """Outcome of applying the decision policy to a tally."""

    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    INSUFFICIENT_QUORUM = "INSUFFICIENT_QUORUM"


_OUTCOME_TRANSITIONS: dict[tuple[SubjectType, AggregationOutcome], LedgerTransition] = {
    (SubjectType.PROPOSAL, AggregationOutcome.APPROVED): LedgerTransition.APPROVE,
    (SubjectType.PROPOSAL, AggregationOutcome.REJECTED): LedgerTransition.REJECT,
    (SubjectType.DISPUTE, AggregationOutcome.APPROVED): LedgerTransition.RESOLVE,
    (SubjectType.DISPUTE, AggregationOutcome.REJECTED): LedgerTransition.DISMISS,
}


@dataclass(frozen=True)
class AggregationDecision:
    """Decision for one subject.

    Attributes:
        subject_type: Proposal or dispute.
        subject_id: Ledger address of the subject.
        outcome: APPROVED, REJECTED or INSUFFICIENT_QUORUM.
        approve_weight: Approving weight at evaluation time.
        reject_weight: Rejecting weight at evaluation time.
        total_voters: Distinct voters at evaluation time.
        threshold: Approval ratio threshold that was applied.
        evaluated_at: When the decision was made (UTC).
    """

    subject_type: SubjectType
    subject_id: str
    outcome: AggregationOutcome
    approve_weight: float
    reject_weight: float
    total_voters: int
    threshold: float
    evaluated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def subject(self) -> SubjectRef:
        return SubjectRef(self.subject_type, self.subject_id)

    @property
    def requires_submission(self) -> bool:
        return self.outcome is not AggregationOutcome.INSUFFICIENT_QUORUM

    @property
    def transition(self) -> LedgerTransition:
        """Ledger transition that commits this decision.

        Raises:
            ValueError: If the outcome does not commit anything.
        """
        try:
            return _OUTCOME_TRANSITIONS[(self.subject_type, self.outcome)]
        except KeyError:
            raise ValueError(
                f"Outcome {self.outcome.value} does not map to a ledger transition"
            ) from None

    def to_dict(self) -> dict[str, Any]:
        return {
            "subject_type": self.subject_type.value,
            "subject_id": self.subject_id,
            "outcome": self.outcome.value,
            "approve_weight": self.approve_weight,
            "reject_weight": self.reject_weight,
            "total_voters": self.total_voters,
            "threshold": self.threshold,
            "evaluated_at": self.evaluated_at.isoformat(),
        }


class EvaluationStatus(str, Enum):
    """What happened to a subject during one evaluation."""

    SUBMITTED = "SUBMITTED"  # Transition committed by this evaluation
    RACE_RESOLVED = "RACE_RESOLVED"  # Another submitter committed it first
    INSUFFICIENT_QUORUM = "INSUFFICIENT_QUORUM"  # Left pending
    NO_ACTION = "NO_ACTION"  # Lock held or subject not eligible
    FAILED = "FAILED"  # Rejected by ledger or retries exhausted

    @property
    def is_failure(self) -> bool:
        return self is EvaluationStatus.FAILED

    @property
    def progressed(self) -> bool:
        return self in (EvaluationStatus.SUBMITTED, EvaluationStatus.RACE_RESOLVED)


class NoActionReason(str, Enum):
    """Why an evaluation took no action."""

    LOCK_HELD = "LOCK_HELD"
    NOT_ELIGIBLE = "NOT_ELIGIBLE"


@dataclass(frozen=True)
class SubjectEvaluation:
    """Result of evaluating one subject.

    Attributes:
        subject: The subject that was evaluated.
        status: Evaluation status.
        decision: Decision made, if the evaluation got that far.
        reason: Why no action was taken (NO_ACTION only).
        receipt: Ledger receipt (SUBMITTED only).
        error: Error description (FAILED only).
        attempts: Ledger submission attempts made.
    """

    subject: SubjectRef
    status: EvaluationStatus
    decision: AggregationDecision | None = None
    reason: NoActionReason | None = None
    receipt: TransactionReceipt | None = None
    error: str | None = None
    attempts: int = 0

    @classmethod
    def no_action(cls, subject: SubjectRef, reason: NoActionReason) -> SubjectEvaluation:
        return cls(subject=subject, status=EvaluationStatus.NO_ACTION, reason=reason)

    @classmethod
    def failed(
        cls,
        subject: SubjectRef,
        error: str,
        decision: AggregationDecision | None = None,
        attempts: int = 0,
    ) -> SubjectEvaluation:
        return cls(
            subject=subject,
            status=EvaluationStatus.FAILED,
            decision=decision,
            error=error,
            attempts=attempts,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.subject.to_dict(),
            "status": self.status.value,
            "decision": self.decision.to_dict() if self.decision else None,
            "reason": self.reason.value if self.reason else None,
            "receipt": self.receipt.to_dict() if self.receipt else None,
            "error": self.error,
            "attempts": self.attempts,
        }
