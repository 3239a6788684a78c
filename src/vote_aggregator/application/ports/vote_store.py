"""Vote Store Port.

Defines the tally store: per-subject vote sets with last-write-wins per
voter, plus the pending-subject index the scheduler sweeps.

The tally store is separate from the distributed mutex
(SubjectLockManagerProtocol) even when both share one Redis instance.

Contract:
- cast_vote overwrites any earlier ballot from the same voter and never
  touches other voters' ballots
- get_tally is recomputed from the live votes on every call
- mark_processed removes the subject from list_pending_subjects until a
  new vote arrives
- Every method raises StoreUnavailableError if the cache is unreachable
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from vote_aggregator.domain.models.vote import SubjectRef, SubjectType, Tally, Vote


@runtime_checkable
class VoteStoreProtocol(Protocol):
    """Protocol for the off-chain vote staging store."""

    async def cast_vote(
        self,
        subject_type: SubjectType,
        subject_id: str,
        voter_id: str,
        choice: bool,
        weight: float = 1.0,
    ) -> Vote:
        """Record a ballot, replacing any earlier ballot from the same voter.

        Args:
            subject_type: Proposal or dispute.
            subject_id: Ledger address of the subject.
            voter_id: Wallet address of the voter.
            choice: True to approve/support, False to reject.
            weight: Ballot weight (defaults to 1).

        Returns:
            The vote as recorded.

        Raises:
            InvalidVoteError: If the ballot is malformed.
            StoreUnavailableError: If the cache cannot be reached.
        """
        ...

    async def get_votes(self, subject_type: SubjectType, subject_id: str) -> list[Vote]:
        """Return the live votes for a subject (one per voter)."""
        ...

    async def get_tally(self, subject_type: SubjectType, subject_id: str) -> Tally:
        """Compute the tally from the live votes for a subject."""
        ...

    async def list_pending_subjects(self, prune: bool = True) -> list[SubjectRef]:
        """List subjects with live votes that have not been processed.

        Args:
            prune: Drop pending markers whose votes have expired. With
                prune=False the call does not write to the store.
        """
        ...

    async def mark_processed(self, subject_type: SubjectType, subject_id: str) -> None:
        """Evict a subject's votes so sweeps skip it until a new vote arrives."""
        ...

    async def ping(self) -> bool:
        """Return True if the backing cache is reachable."""
        ...
