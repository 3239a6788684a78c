"""Integration tests for RedisSubjectLockManager against a real Redis."""

import asyncio

import pytest

from tests.helpers import address, voters
from vote_aggregator.application.services.aggregation_engine import AggregationEngine
from vote_aggregator.config.aggregation_config import TEST_AGGREGATION_CONFIG
from vote_aggregator.domain.models.decision import EvaluationStatus
from vote_aggregator.domain.models.ledger_subject import LedgerSubjectState
from vote_aggregator.domain.models.vote import SubjectType
from vote_aggregator.infrastructure.adapters.redis import (
    RedisSubjectLockManager,
    RedisVoteStore,
)
from vote_aggregator.infrastructure.stubs import LedgerClientStub

pytestmark = [pytest.mark.integration, pytest.mark.asyncio]

SUBJECT = address(1)


@pytest.fixture
def locks(redis_client) -> RedisSubjectLockManager:
    return RedisSubjectLockManager(redis_client)


async def test_only_one_holder(locks: RedisSubjectLockManager) -> None:
    results = await asyncio.gather(*(locks.acquire(SUBJECT, 10) for _ in range(10)))

    assert sum(1 for lock in results if lock is not None) == 1


async def test_release_requires_owner_token(locks: RedisSubjectLockManager) -> None:
    lock = await locks.acquire(SUBJECT, 0.1)
    await asyncio.sleep(0.2)
    successor = await locks.acquire(SUBJECT, 10)

    assert successor is not None
    assert not await locks.release(lock)
    assert await locks.is_locked(SUBJECT)
    assert await locks.release(successor)
    assert not await locks.is_locked(SUBJECT)


async def test_two_engines_commit_once(redis_client) -> None:
    store = RedisVoteStore(redis_client, vote_ttl_seconds=60)
    ledger = LedgerClientStub(submit_delay=0.05)
    ledger.set_state(SUBJECT, LedgerSubjectState.PROPOSED)
    for voter in voters(3):
        await store.cast_vote(SubjectType.PROPOSAL, SUBJECT, voter, True)

    engines = [
        AggregationEngine(
            store,
            RedisSubjectLockManager(redis_client),
            ledger,
            config=TEST_AGGREGATION_CONFIG,
        )
        for _ in range(2)
    ]
    results = await asyncio.gather(
        *(engine.evaluate_subject(SubjectType.PROPOSAL, SUBJECT) for engine in engines)
    )

    assert [r.status for r in results].count(EvaluationStatus.SUBMITTED) == 1
    assert len(ledger.submissions) == 1
    assert await store.list_pending_subjects() == []
