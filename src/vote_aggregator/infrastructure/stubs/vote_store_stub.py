"""In-memory VoteStoreProtocol implementation.

Used for development without Redis and in unit tests. Supports simulated
outages (set_unavailable) and vote-set expiry (expire).
"""

from __future__ import annotations

from vote_aggregator.domain.errors import StoreUnavailableError
from vote_aggregator.domain.models.vote import (
    DEFAULT_VOTE_WEIGHT,
    SubjectRef,
    SubjectType,
    Tally,
    Vote,
)


class VoteStoreStub:
    """In-memory vote store.

    Attributes:
        _votes: Live votes per subject, keyed by voter id.
        _pending: Subjects with votes not yet processed.
    """

    def __init__(self) -> None:
        self._votes: dict[SubjectRef, dict[str, Vote]] = {}
        self._pending: set[SubjectRef] = set()
        self._unavailable = False
        self.processed: list[SubjectRef] = []

    def set_unavailable(self, unavailable: bool = True) -> None:
        """Make every call raise StoreUnavailableError."""
        self._unavailable = unavailable

    def expire(self, subject_type: SubjectType, subject_id: str) -> None:
        """Drop a subject's votes as if its TTL elapsed (pending marker kept)."""
        self._votes.pop(SubjectRef(subject_type, subject_id), None)

    def clear(self) -> None:
        self._votes.clear()
        self._pending.clear()
        self.processed.clear()

    def _check(self, operation: str) -> None:
        if self._unavailable:
            raise StoreUnavailableError(operation, "simulated outage")

    async def cast_vote(
        self,
        subject_type: SubjectType,
        subject_id: str,
        voter_id: str,
        choice: bool,
        weight: float = DEFAULT_VOTE_WEIGHT,
    ) -> Vote:
        self._check("cast_vote")
        vote = Vote(
            subject_type=subject_type,
            subject_id=subject_id,
            voter_id=voter_id,
            choice=choice,
            weight=weight,
        )
        self._votes.setdefault(vote.subject, {})[voter_id] = vote
        self._pending.add(vote.subject)
        return vote

    async def get_votes(self, subject_type: SubjectType, subject_id: str) -> list[Vote]:
        self._check("get_votes")
        return list(self._votes.get(SubjectRef(subject_type, subject_id), {}).values())

    async def get_tally(self, subject_type: SubjectType, subject_id: str) -> Tally:
        self._check("get_tally")
        return Tally.from_votes(await self.get_votes(subject_type, subject_id))

    async def list_pending_subjects(self, prune: bool = True) -> list[SubjectRef]:
        self._check("list_pending_subjects")
        live = [s for s in self._pending if self._votes.get(s)]
        if prune:
            # Same pruning as the Redis adapter: markers without live votes go
            self._pending.intersection_update(live)
        return sorted(live)

    def has_marker(self, subject_type: SubjectType, subject_id: str) -> bool:
        """Check for a pending marker, live votes or not."""
        return SubjectRef(subject_type, subject_id) in self._pending

    async def mark_processed(self, subject_type: SubjectType, subject_id: str) -> None:
        self._check("mark_processed")
        subject = SubjectRef(subject_type, subject_id)
        self._votes.pop(subject, None)
        self._pending.discard(subject)
        self.processed.append(subject)

    async def ping(self) -> bool:
        return not self._unavailable
