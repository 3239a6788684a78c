"""Unit tests for VoteIntakeService."""

import pytest
from prometheus_client import CollectorRegistry

from tests.helpers import address
from vote_aggregator.application.services.vote_intake_service import VoteIntakeService
from vote_aggregator.domain.errors import (
    InvalidSubjectIdError,
    InvalidVoteError,
    StoreUnavailableError,
)
from vote_aggregator.domain.models.vote import SubjectType
from vote_aggregator.infrastructure.monitoring.aggregation_metrics import (
    AggregationMetricsCollector,
)
from vote_aggregator.infrastructure.stubs import VoteStoreStub

SUBJECT = address(1)
VOTER = address(2)


@pytest.fixture
def metrics() -> AggregationMetricsCollector:
    return AggregationMetricsCollector(registry=CollectorRegistry())


@pytest.fixture
def service(
    vote_store: VoteStoreStub, metrics: AggregationMetricsCollector
) -> VoteIntakeService:
    return VoteIntakeService(vote_store, metrics=metrics)


class TestCastVote:
    async def test_records_vote_with_default_weight(
        self, service: VoteIntakeService, vote_store: VoteStoreStub
    ) -> None:
        vote = await service.cast_vote("proposal", SUBJECT, VOTER, True)

        assert vote.weight == 1.0
        assert await vote_store.get_votes(SubjectType.PROPOSAL, SUBJECT) == [vote]

    async def test_revote_replaces_previous_ballot(
        self, service: VoteIntakeService
    ) -> None:
        await service.cast_vote("proposal", SUBJECT, VOTER, True)
        await service.cast_vote("proposal", SUBJECT, VOTER, False, weight=2.0)

        tally = await service.get_tally("proposal", SUBJECT)

        assert tally.total_voters == 1
        assert tally.approve_weight == 0
        assert tally.reject_weight == 2.0

    async def test_counts_metric(
        self, service: VoteIntakeService, metrics: AggregationMetricsCollector
    ) -> None:
        await service.cast_vote("dispute", SUBJECT, VOTER, True)
        assert b'votes_cast_total{' in metrics.generate()

    async def test_rejects_unknown_subject_type(self, service: VoteIntakeService) -> None:
        with pytest.raises(InvalidVoteError):
            await service.cast_vote("poll", SUBJECT, VOTER, True)

    async def test_rejects_malformed_subject(self, service: VoteIntakeService) -> None:
        with pytest.raises(InvalidSubjectIdError):
            await service.cast_vote("proposal", "market-1", VOTER, True)

    async def test_rejects_non_positive_weight(self, service: VoteIntakeService) -> None:
        with pytest.raises(InvalidVoteError):
            await service.cast_vote("proposal", SUBJECT, VOTER, True, weight=0)

    async def test_store_outage_fails_closed(
        self, service: VoteIntakeService, vote_store: VoteStoreStub
    ) -> None:
        vote_store.set_unavailable()
        with pytest.raises(StoreUnavailableError):
            await service.cast_vote("proposal", SUBJECT, VOTER, True)
        vote_store.set_unavailable(False)
        assert await vote_store.list_pending_subjects() == []
