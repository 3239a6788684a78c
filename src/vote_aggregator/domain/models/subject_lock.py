"""Subject lock model.

A SubjectLock is the short-lived mutual-exclusion marker held while one
evaluation of a subject is in flight. The owner token makes release safe:
only the holder that acquired the lock can delete it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from uuid import uuid4


def generate_owner_token() -> str:
    """Generate a unique lock owner token."""
    return uuid4().hex


@dataclass(frozen=True)
class SubjectLock:
    """A held per-subject lock.

    Attributes:
        subject_id: Subject the lock guards.
        owner_token: Random token identifying the holder.
        ttl_seconds: Lifetime after which the lock expires on its own.
        acquired_at: When the lock was acquired (UTC).
    """

    subject_id: str
    owner_token: str
    ttl_seconds: float
    acquired_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        if self.ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive, got {self.ttl_seconds}")

    @property
    def expires_at(self) -> datetime:
        return self.acquired_at + timedelta(seconds=self.ttl_seconds)
