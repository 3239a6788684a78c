"""In-memory SubjectLockManagerProtocol implementation.

Set-if-absent with TTL against an injectable monotonic clock, so tests
can expire locks without sleeping.
"""

from __future__ import annotations

import time
from collections.abc import Callable

from vote_aggregator.domain.errors import StoreUnavailableError
from vote_aggregator.domain.models.subject_lock import SubjectLock, generate_owner_token


class SubjectLockStub:
    """In-memory per-subject lock manager."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._locks: dict[str, tuple[str, float]] = {}
        self._unavailable = False
        self.acquire_attempts = 0

    def set_unavailable(self, unavailable: bool = True) -> None:
        self._unavailable = unavailable

    def _live(self, subject_id: str) -> tuple[str, float] | None:
        held = self._locks.get(subject_id)
        if held is None:
            return None
        if held[1] <= self._clock():
            del self._locks[subject_id]
            return None
        return held

    async def acquire(self, subject_id: str, ttl_seconds: float) -> SubjectLock | None:
        if self._unavailable:
            raise StoreUnavailableError("acquire_lock", "simulated outage")
        self.acquire_attempts += 1
        if self._live(subject_id) is not None:
            return None
        lock = SubjectLock(
            subject_id=subject_id,
            owner_token=generate_owner_token(),
            ttl_seconds=ttl_seconds,
        )
        self._locks[subject_id] = (lock.owner_token, self._clock() + ttl_seconds)
        return lock

    async def release(self, lock: SubjectLock) -> bool:
        if self._unavailable:
            raise StoreUnavailableError("release_lock", "simulated outage")
        held = self._live(lock.subject_id)
        if held is None or held[0] != lock.owner_token:
            return False
        del self._locks[lock.subject_id]
        return True

    async def is_locked(self, subject_id: str) -> bool:
        return self._live(subject_id) is not None
