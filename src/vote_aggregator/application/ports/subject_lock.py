"""Subject Lock Manager Port.

Distributed mutex keyed by subject id. It is the only mechanism that
stops two concurrent evaluations (timer sweep + manual trigger, or two
service replicas) from double-submitting for the same subject.

Contract:
- acquire is an atomic set-if-absent with TTL: it fails when a live lock
  exists and never overwrites it
- release only deletes the lock if the caller still owns it
- the TTL is the deadlock safety net if a holder crashes mid-evaluation
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from vote_aggregator.domain.models.subject_lock import SubjectLock


@runtime_checkable
class SubjectLockManagerProtocol(Protocol):
    """Protocol for per-subject mutual exclusion."""

    async def acquire(self, subject_id: str, ttl_seconds: float) -> SubjectLock | None:
        """Try to acquire the lock for a subject.

        Args:
            subject_id: Subject to lock.
            ttl_seconds: Lock lifetime.

        Returns:
            The held lock, or None if another holder has it.

        Raises:
            StoreUnavailableError: If the lock backend cannot be reached.
        """
        ...

    async def release(self, lock: SubjectLock) -> bool:
        """Release a held lock.

        Returns:
            True if the lock was deleted, False if it had expired or
            belongs to another holder.
        """
        ...

    async def is_locked(self, subject_id: str) -> bool:
        """Return True if a live lock exists for the subject."""
        ...
