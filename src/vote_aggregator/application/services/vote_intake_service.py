"""Vote intake service.

Accepts ballots from the HTTP surface and stages them in the vote store.
Intake fails closed: if the store is unreachable the caller gets
StoreUnavailableError and the vote is not recorded.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from vote_aggregator.domain.models.vote import (
    DEFAULT_VOTE_WEIGHT,
    SubjectType,
    Tally,
    Vote,
    validate_ledger_address,
)

if TYPE_CHECKING:
    from vote_aggregator.application.ports.aggregation_metrics import (
        AggregationMetricsProtocol,
    )
    from vote_aggregator.application.ports.vote_store import VoteStoreProtocol


class VoteIntakeService:
    """Validates and records ballots."""

    def __init__(
        self,
        vote_store: "VoteStoreProtocol",
        metrics: "AggregationMetricsProtocol | None" = None,
    ) -> None:
        self._votes = vote_store
        self._metrics = metrics
        self._log = structlog.get_logger().bind(service="vote_intake")

    async def cast_vote(
        self,
        subject_type: SubjectType | str,
        subject_id: str,
        voter_id: str,
        choice: bool,
        weight: float | None = None,
    ) -> Vote:
        """Record a ballot (last write per voter wins).

        Args:
            subject_type: "proposal" or "dispute".
            subject_id: Ledger address of the subject.
            voter_id: Wallet address of the voter.
            choice: True to approve/support, False to reject.
            weight: Ballot weight; defaults to 1.

        Returns:
            The recorded vote.

        Raises:
            InvalidVoteError: If the subject type or weight is invalid.
            InvalidSubjectIdError: If an id is not a ledger address.
            StoreUnavailableError: If the vote store is unreachable.
        """
        parsed_type = SubjectType.parse(subject_type)
        validate_ledger_address("subject_id", subject_id)
        validate_ledger_address("voter_id", voter_id)

        vote = await self._votes.cast_vote(
            parsed_type,
            subject_id,
            voter_id,
            choice,
            DEFAULT_VOTE_WEIGHT if weight is None else weight,
        )

        if self._metrics is not None:
            self._metrics.record_vote_cast(parsed_type)
        self._log.info(
            "vote_cast",
            vote_id=vote.vote_id,
            subject_type=parsed_type.value,
            subject_id=subject_id,
            voter_id=voter_id,
            choice=choice,
            weight=vote.weight,
        )
        return vote

    async def get_tally(self, subject_type: SubjectType | str, subject_id: str) -> Tally:
        """Current tally for a subject.

        Raises:
            InvalidVoteError: If the subject type or id is invalid.
            StoreUnavailableError: If the vote store is unreachable.
        """
        parsed_type = SubjectType.parse(subject_type)
        validate_ledger_address("subject_id", subject_id)
        return await self._votes.get_tally(parsed_type, subject_id)
