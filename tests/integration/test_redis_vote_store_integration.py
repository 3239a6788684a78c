"""Integration tests for RedisVoteStore against a real Redis."""

import asyncio
import json

import pytest

from tests.helpers import address, voters
from vote_aggregator.domain.models.vote import SubjectRef, SubjectType
from vote_aggregator.infrastructure.adapters.redis import RedisVoteStore

pytestmark = [pytest.mark.integration, pytest.mark.asyncio]

SUBJECT = address(1)


@pytest.fixture
def store(redis_client) -> RedisVoteStore:
    return RedisVoteStore(redis_client, vote_ttl_seconds=60)


async def test_cast_vote_stages_ballot_and_pending_marker(
    store: RedisVoteStore, redis_client
) -> None:
    voter = address(2)
    await store.cast_vote(SubjectType.PROPOSAL, SUBJECT, voter, True, 2.0)

    raw = await redis_client.hget(f"votes:proposal:{SUBJECT}", voter)
    assert json.loads(raw)["weight"] == 2.0
    assert await redis_client.ttl(f"votes:proposal:{SUBJECT}") > 0
    assert await store.list_pending_subjects() == [
        SubjectRef(SubjectType.PROPOSAL, SUBJECT)
    ]


async def test_revote_replaces_ballot(store: RedisVoteStore) -> None:
    voter = address(2)
    await store.cast_vote(SubjectType.PROPOSAL, SUBJECT, voter, True)
    await store.cast_vote(SubjectType.PROPOSAL, SUBJECT, voter, False, 3.0)

    tally = await store.get_tally(SubjectType.PROPOSAL, SUBJECT)

    assert tally.total_voters == 1
    assert tally.reject_weight == 3.0


async def test_concurrent_votes_from_distinct_voters_all_count(
    store: RedisVoteStore,
) -> None:
    await asyncio.gather(
        *(
            store.cast_vote(SubjectType.DISPUTE, SUBJECT, voter, True)
            for voter in voters(20)
        )
    )

    tally = await store.get_tally(SubjectType.DISPUTE, SUBJECT)

    assert tally.total_voters == 20


async def test_expired_vote_set_is_pruned(store: RedisVoteStore, redis_client) -> None:
    await store.cast_vote(SubjectType.PROPOSAL, SUBJECT, address(2), True)
    await redis_client.delete(f"votes:proposal:{SUBJECT}")

    assert await store.list_pending_subjects() == []
    assert await redis_client.scard("votes:pending") == 0


async def test_read_only_listing_keeps_expired_marker(
    store: RedisVoteStore, redis_client
) -> None:
    await store.cast_vote(SubjectType.PROPOSAL, SUBJECT, address(2), True)
    await store.cast_vote(SubjectType.DISPUTE, address(3), address(2), True)
    await redis_client.delete(f"votes:proposal:{SUBJECT}")
    await redis_client.sadd("votes:pending", "garbage")

    pending = await store.list_pending_subjects(prune=False)

    assert pending == [SubjectRef(SubjectType.DISPUTE, address(3))]
    assert await redis_client.scard("votes:pending") == 3


async def test_mark_processed_clears_subject(store: RedisVoteStore, redis_client) -> None:
    await store.cast_vote(SubjectType.PROPOSAL, SUBJECT, address(2), True)

    await store.mark_processed(SubjectType.PROPOSAL, SUBJECT)

    assert await redis_client.exists(f"votes:proposal:{SUBJECT}") == 0
    assert await store.list_pending_subjects() == []


async def test_malformed_record_is_skipped(store: RedisVoteStore, redis_client) -> None:
    await store.cast_vote(SubjectType.PROPOSAL, SUBJECT, address(2), True)
    await redis_client.hset(f"votes:proposal:{SUBJECT}", address(3), "not json")

    votes = await store.get_votes(SubjectType.PROPOSAL, SUBJECT)

    assert len(votes) == 1


async def test_ping(store: RedisVoteStore) -> None:
    assert await store.ping()


@pytest.mark.parametrize(
    "ordering",
    [
        [(10, True, 2.0), (11, False, 1.0), (10, False, 1.0), (11, True, 4.0)],
        [(11, True, 4.0), (10, False, 1.0), (11, False, 1.0), (10, True, 2.0)],
    ],
)
async def test_tally_counts_each_voters_latest_ballot(
    store: RedisVoteStore, ordering: list[tuple[int, bool, float]]
) -> None:
    for seed, choice, weight in ordering:
        await store.cast_vote(SubjectType.PROPOSAL, SUBJECT, address(seed), choice, weight)
    latest = {seed: (choice, weight) for seed, choice, weight in ordering}

    tally = await store.get_tally(SubjectType.PROPOSAL, SUBJECT)

    assert tally.total_voters == 2
    assert tally.approve_weight == sum(w for choice, w in latest.values() if choice)
    assert tally.reject_weight == sum(w for choice, w in latest.values() if not choice)
