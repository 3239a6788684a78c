"""Redis-backed VoteStoreProtocol implementation.

Key layout:
    {prefix}:{subject_type}:{subject_id}   hash   voter_id -> JSON ballot
    {prefix}:pending                       set    "{subject_type}:{subject_id}"

Every cast_vote refreshes the vote-set TTL and re-adds the pending
marker in one MULTI/EXEC. Markers whose vote set has expired are pruned
by list_pending_subjects unless it is called with prune=False.
"""

from __future__ import annotations

import json
from typing import Any

import structlog

from vote_aggregator.config.infrastructure_config import SEVEN_DAYS_SECONDS
from vote_aggregator.domain.errors import InvalidVoteError
from vote_aggregator.domain.models.vote import (
    DEFAULT_VOTE_WEIGHT,
    SubjectRef,
    SubjectType,
    Tally,
    Vote,
)
from vote_aggregator.infrastructure.adapters.redis.client import (
    store_unavailable_on_io_error,
)

# Drop a pending marker only if its vote set is gone, atomically with the check
PRUNE_PENDING_SCRIPT = """
if redis.call('EXISTS', KEYS[2]) == 0 then
    return redis.call('SREM', KEYS[1], ARGV[1])
end
return 0
"""


class RedisVoteStore:
    """Vote store on Redis hashes plus a pending-subject set."""

    def __init__(
        self,
        client: Any,
        vote_ttl_seconds: int = SEVEN_DAYS_SECONDS,
        key_prefix: str = "votes",
    ) -> None:
        """Initialize the store.

        Args:
            client: redis.asyncio client created with decode_responses=True.
            vote_ttl_seconds: Expiry refreshed on every vote.
            key_prefix: Prefix for all keys.
        """
        self._client = client
        self._ttl = vote_ttl_seconds
        self._prefix = key_prefix
        self._prune_script = client.register_script(PRUNE_PENDING_SCRIPT)
        self._log = structlog.get_logger().bind(service="redis_vote_store")

    @property
    def pending_key(self) -> str:
        return f"{self._prefix}:pending"

    def votes_key(self, subject_type: SubjectType, subject_id: str) -> str:
        return f"{self._prefix}:{subject_type.value}:{subject_id}"

    async def cast_vote(
        self,
        subject_type: SubjectType,
        subject_id: str,
        voter_id: str,
        choice: bool,
        weight: float = DEFAULT_VOTE_WEIGHT,
    ) -> Vote:
        vote = Vote(
            subject_type=subject_type,
            subject_id=subject_id,
            voter_id=voter_id,
            choice=choice,
            weight=weight,
        )
        key = self.votes_key(subject_type, subject_id)

        with store_unavailable_on_io_error("cast_vote"):
            async with self._client.pipeline(transaction=True) as pipe:
                pipe.hset(key, voter_id, json.dumps(vote.to_record()))
                pipe.expire(key, self._ttl)
                pipe.sadd(self.pending_key, vote.subject.key)
                await pipe.execute()
        return vote

    async def get_votes(self, subject_type: SubjectType, subject_id: str) -> list[Vote]:
        with store_unavailable_on_io_error("get_votes"):
            records = await self._client.hgetall(self.votes_key(subject_type, subject_id))

        votes = []
        for voter_id, raw in records.items():
            try:
                votes.append(
                    Vote.from_record(subject_type, subject_id, voter_id, json.loads(raw))
                )
            except (ValueError, KeyError, TypeError, InvalidVoteError) as e:
                self._log.warning(
                    "malformed_vote_record_skipped",
                    subject_type=subject_type.value,
                    subject_id=subject_id,
                    voter_id=voter_id,
                    error=str(e),
                )
        return votes

    async def get_tally(self, subject_type: SubjectType, subject_id: str) -> Tally:
        return Tally.from_votes(await self.get_votes(subject_type, subject_id))

    async def list_pending_subjects(self, prune: bool = True) -> list[SubjectRef]:
        with store_unavailable_on_io_error("list_pending_subjects"):
            members = await self._client.smembers(self.pending_key)

            pending: list[SubjectRef] = []
            for member in members:
                try:
                    subject = SubjectRef.from_key(member)
                except (ValueError, InvalidVoteError):
                    self._log.warning("malformed_pending_marker", marker=member, pruned=prune)
                    if prune:
                        await self._client.srem(self.pending_key, member)
                    continue

                votes_key = self.votes_key(subject.subject_type, subject.subject_id)
                if prune:
                    expired = await self._prune_script(
                        keys=[self.pending_key, votes_key], args=[member]
                    )
                    if expired:
                        self._log.debug("expired_pending_marker_pruned", marker=member)
                else:
                    expired = not await self._client.exists(votes_key)
                if expired:
                    continue
                pending.append(subject)

        return sorted(pending)

    async def mark_processed(self, subject_type: SubjectType, subject_id: str) -> None:
        subject = SubjectRef(subject_type, subject_id)
        with store_unavailable_on_io_error("mark_processed"):
            async with self._client.pipeline(transaction=True) as pipe:
                pipe.delete(self.votes_key(subject_type, subject_id))
                pipe.srem(self.pending_key, subject.key)
                await pipe.execute()

    async def ping(self) -> bool:
        with store_unavailable_on_io_error("ping"):
            return bool(await self._client.ping())
