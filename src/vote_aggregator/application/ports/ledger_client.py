"""Ledger Client Port.

Thin adapter over the ledger: read a subject's on-chain state and submit
a signed state-transition transaction. The ledger program itself is an
opaque state machine.

Errors (see vote_aggregator.domain.errors.ledger):
- LedgerNetworkError, LedgerCongestionError: transient
- StaleStateError: state changed since it was read
- RejectedByLedgerError, SubjectNotFoundError: transition is invalid
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from vote_aggregator.domain.models.decision import AggregationDecision
from vote_aggregator.domain.models.ledger_subject import LedgerSubject, TransactionReceipt


@runtime_checkable
class LedgerClientProtocol(Protocol):
    """Protocol for ledger reads and state-transition submissions."""

    async def fetch_state(self, subject_id: str) -> LedgerSubject:
        """Read the subject's current on-chain state.

        Raises:
            SubjectNotFoundError: If no account exists for the subject.
            LedgerNetworkError: If the ledger cannot be reached.
        """
        ...

    async def submit_transition(
        self,
        subject_id: str,
        decision: AggregationDecision,
    ) -> TransactionReceipt:
        """Submit and confirm the transition that commits a decision.

        The transition is `decision.transition`; the final vote weights are
        recorded alongside it.

        Raises:
            StaleStateError: If the subject is no longer in the source state.
            RejectedByLedgerError: If the ledger refuses the transition.
            LedgerNetworkError, LedgerCongestionError: On transient failure.
        """
        ...

    def derive_subject_address(self, market_key: str) -> str:
        """Derive the ledger address of a market account from its key."""
        ...
