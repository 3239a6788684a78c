"""Redis-backed SubjectLockManagerProtocol implementation.

acquire is SET key token NX PX ttl; release is a compare-and-delete Lua
script on the owner token, so a holder whose lock expired and was taken
over cannot delete the new holder's lock.
"""

from __future__ import annotations

from typing import Any

from vote_aggregator.domain.models.subject_lock import SubjectLock, generate_owner_token
from vote_aggregator.infrastructure.adapters.redis.client import (
    store_unavailable_on_io_error,
)

RELEASE_SCRIPT = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
end
return 0
"""


class RedisSubjectLockManager:
    """Per-subject distributed mutex on Redis."""

    def __init__(self, client: Any, key_prefix: str = "lock:subject") -> None:
        self._client = client
        self._prefix = key_prefix
        self._release_script = client.register_script(RELEASE_SCRIPT)

    def lock_key(self, subject_id: str) -> str:
        return f"{self._prefix}:{subject_id}"

    async def acquire(self, subject_id: str, ttl_seconds: float) -> SubjectLock | None:
        lock = SubjectLock(
            subject_id=subject_id,
            owner_token=generate_owner_token(),
            ttl_seconds=ttl_seconds,
        )
        with store_unavailable_on_io_error("acquire_lock"):
            acquired = await self._client.set(
                self.lock_key(subject_id),
                lock.owner_token,
                nx=True,
                px=max(1, int(ttl_seconds * 1000)),
            )
        return lock if acquired else None

    async def release(self, lock: SubjectLock) -> bool:
        with store_unavailable_on_io_error("release_lock"):
            deleted = await self._release_script(
                keys=[self.lock_key(lock.subject_id)], args=[lock.owner_token]
            )
        return bool(deleted)

    async def is_locked(self, subject_id: str) -> bool:
        with store_unavailable_on_io_error("is_locked"):
            return bool(await self._client.exists(self.lock_key(subject_id)))
