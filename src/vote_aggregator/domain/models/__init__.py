"""Domain models for votes, ledger subjects, locks and decisions."""

from vote_aggregator.domain.models.decision import (
    AggregationDecision,
    AggregationOutcome,
    EvaluationStatus,
    NoActionReason,
    SubjectEvaluation,
)
from vote_aggregator.domain.models.ledger_subject import (
    ELIGIBLE_STATES,
    SETTLED_STATES,
    LedgerSubject,
    LedgerSubjectState,
    LedgerTransition,
    TransactionReceipt,
)
from vote_aggregator.domain.models.subject_lock import SubjectLock, generate_owner_token
from vote_aggregator.domain.models.vote import (
    DEFAULT_VOTE_WEIGHT,
    SubjectRef,
    SubjectType,
    Tally,
    Vote,
    generate_vote_id,
    is_ledger_address,
    validate_ledger_address,
)

__all__ = [
    "AggregationDecision",
    "AggregationOutcome",
    "DEFAULT_VOTE_WEIGHT",
    "ELIGIBLE_STATES",
    "EvaluationStatus",
    "LedgerSubject",
    "LedgerSubjectState",
    "LedgerTransition",
    "NoActionReason",
    "SETTLED_STATES",
    "SubjectEvaluation",
    "SubjectLock",
    "SubjectRef",
    "SubjectType",
    "Tally",
    "TransactionReceipt",
    "Vote",
    "generate_owner_token",
    "generate_vote_id",
    "is_ledger_address",
    "validate_ledger_address",
]
