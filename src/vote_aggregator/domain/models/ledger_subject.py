"""Ledger subject state and transitions.

The ledger program is treated as an opaque state machine. This module
records the parts of it the aggregator relies on: the market states, which
transitions the aggregator may submit, and which states each subject type
needs before a transition is accepted.

Transition table:
    APPROVE  PROPOSED -> APPROVED
    REJECT   PROPOSED -> CANCELLED
    RESOLVE  DISPUTED -> RESOLVING
    DISMISS  DISPUTED -> FINALIZED
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from vote_aggregator.domain.models.vote import SubjectType


class LedgerSubjectState(str, Enum):
    """On-chain market state."""

    PROPOSED = "PROPOSED"
    APPROVED = "APPROVED"
    ACTIVE = "ACTIVE"
    RESOLVING = "RESOLVING"
    DISPUTED = "DISPUTED"
    FINALIZED = "FINALIZED"
    CANCELLED = "CANCELLED"


class LedgerTransition(str, Enum):
    """State transitions the aggregator submits."""

    APPROVE = "approve"
    REJECT = "reject"
    RESOLVE = "resolve"
    DISMISS = "dismiss"

    @property
    def source_state(self) -> LedgerSubjectState:
        return _TRANSITIONS[self][0]

    @property
    def target_state(self) -> LedgerSubjectState:
        return _TRANSITIONS[self][1]


_TRANSITIONS: dict[LedgerTransition, tuple[LedgerSubjectState, LedgerSubjectState]] = {
    LedgerTransition.APPROVE: (LedgerSubjectState.PROPOSED, LedgerSubjectState.APPROVED),
    LedgerTransition.REJECT: (LedgerSubjectState.PROPOSED, LedgerSubjectState.CANCELLED),
    LedgerTransition.RESOLVE: (LedgerSubjectState.DISPUTED, LedgerSubjectState.RESOLVING),
    LedgerTransition.DISMISS: (LedgerSubjectState.DISPUTED, LedgerSubjectState.FINALIZED),
}

# State a subject must be in for its votes to be aggregated.
ELIGIBLE_STATES: dict[SubjectType, LedgerSubjectState] = {
    SubjectType.PROPOSAL: LedgerSubjectState.PROPOSED,
    SubjectType.DISPUTE: LedgerSubjectState.DISPUTED,
}

# States that show the subject's vote can no longer change anything.
SETTLED_STATES: dict[SubjectType, frozenset[LedgerSubjectState]] = {
    SubjectType.PROPOSAL: frozenset(
        {
            LedgerSubjectState.APPROVED,
            LedgerSubjectState.ACTIVE,
            LedgerSubjectState.RESOLVING,
            LedgerSubjectState.DISPUTED,
            LedgerSubjectState.FINALIZED,
            LedgerSubjectState.CANCELLED,
        }
    ),
    SubjectType.DISPUTE: frozenset(
        {
            LedgerSubjectState.RESOLVING,
            LedgerSubjectState.FINALIZED,
            LedgerSubjectState.CANCELLED,
        }
    ),
}


@dataclass(frozen=True)
class LedgerSubject:
    """Snapshot of a subject's on-chain account.

    Attributes:
        address: Ledger address of the market account.
        state: Current market state.
        fetched_at: When the snapshot was read.
    """

    address: str
    state: LedgerSubjectState
    fetched_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def accepts(self, subject_type: SubjectType) -> bool:
        """True if votes of this subject type may still be committed."""
        return self.state is ELIGIBLE_STATES[subject_type]

    def is_settled_for(self, subject_type: SubjectType) -> bool:
        """True if the subject has moved past the transition this subject type drives."""
        return self.state in SETTLED_STATES[subject_type]


@dataclass(frozen=True)
class TransactionReceipt:
    """Confirmation of a committed ledger transition.

    Attributes:
        signature: Transaction signature returned by the ledger.
        subject_id: Subject the transition applied to.
        transition: The transition that was committed.
        confirmed_at: When confirmation was observed.
    """

    signature: str
    subject_id: str
    transition: LedgerTransition
    confirmed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, str]:
        return {
            "signature": self.signature,
            "subject_id": self.subject_id,
            "transition": self.transition.value,
            "confirmed_at": self.confirmed_at.isoformat(),
        }
