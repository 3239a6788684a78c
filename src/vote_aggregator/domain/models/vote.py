"""Vote domain models.

This module defines the ballot and tally models:
- SubjectType: what a vote is about (proposal or dispute)
- SubjectRef: identifies one subject awaiting aggregation
- Vote: one voter's live ballot on a subject
- Tally: weights derived from the live vote set

Invariants:
- At most one live Vote per (subject_type, subject_id, voter_id); a later
  ballot from the same voter replaces the earlier one (last-write-wins)
- Tally is never stored, only recomputed from the live votes
"""

from __future__ import annotations

import base64
import hashlib
import math
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from vote_aggregator.domain.errors import InvalidSubjectIdError, InvalidVoteError

# Base58 alphabet (no 0, O, I, l); ledger addresses encode 32 bytes.
LEDGER_ADDRESS_PATTERN = re.compile(r"^[1-9A-HJ-NP-Za-km-z]{32,44}$")

DEFAULT_VOTE_WEIGHT = 1.0


class SubjectType(str, Enum):
    """Kind of subject a vote is cast on."""

    PROPOSAL = "proposal"
    DISPUTE = "dispute"

    @classmethod
    def parse(cls, value: str | SubjectType) -> SubjectType:
        """Parse a subject type, accepting either case.

        Raises:
            InvalidVoteError: If the value is not a known subject type.
        """
        if isinstance(value, SubjectType):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise InvalidVoteError(
                "subject_type",
                f"subject_type must be one of {[t.value for t in cls]}, got {value!r}",
            ) from None


def is_ledger_address(value: str) -> bool:
    """Return True if value looks like a base58 ledger address."""
    return bool(LEDGER_ADDRESS_PATTERN.match(value))


def validate_ledger_address(field_name: str, value: str) -> str:
    """Validate a subject or voter identifier.

    Raises:
        InvalidSubjectIdError: If value is not a base58 ledger address.
    """
    if not isinstance(value, str) or not is_ledger_address(value):
        raise InvalidSubjectIdError(field_name, str(value))
    return value


@dataclass(frozen=True, order=True)
class SubjectRef:
    """Reference to one subject (proposal or dispute) awaiting aggregation.

    Attributes:
        subject_type: Proposal or dispute.
        subject_id: Ledger address of the market account.
    """

    subject_type: SubjectType
    subject_id: str

    @property
    def key(self) -> str:
        """Stable string key, e.g. "proposal:<subject_id>"."""
        return f"{self.subject_type.value}:{self.subject_id}"

    @classmethod
    def from_key(cls, key: str) -> SubjectRef:
        """Parse a key produced by `key`."""
        type_part, _, subject_id = key.partition(":")
        if not subject_id:
            raise ValueError(f"Malformed subject key: {key!r}")
        return cls(subject_type=SubjectType.parse(type_part), subject_id=subject_id)

    def to_dict(self) -> dict[str, str]:
        return {"subject_type": self.subject_type.value, "subject_id": self.subject_id}


def generate_vote_id(subject_type: SubjectType, subject_id: str, voter_id: str) -> str:
    """Deterministic vote id: a re-vote from the same voter keeps its id.

    Format: "PV-<hash>" for proposals, "DV-<hash>" for disputes.
    """
    prefix = "PV" if subject_type is SubjectType.PROPOSAL else "DV"
    digest = base64.urlsafe_b64encode(
        hashlib.sha256(f"{subject_id}-{voter_id}".encode("utf-8")).digest()
    )
    return f"{prefix}-{digest.decode('ascii')[:16]}"


@dataclass(frozen=True)
class Vote:
    """A voter's live ballot on a subject.

    Attributes:
        subject_type: Proposal or dispute.
        subject_id: Ledger address of the subject.
        voter_id: Wallet address of the voter.
        choice: True to approve/support, False to reject.
        weight: Ballot weight (positive, finite). Defaults to 1.
        cast_at: When the ballot was cast (UTC timezone-aware).
    """

    subject_type: SubjectType
    subject_id: str
    voter_id: str
    choice: bool
    weight: float = DEFAULT_VOTE_WEIGHT
    cast_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        """Validate ballot fields.

        Raises:
            InvalidSubjectIdError: If subject_id or voter_id is malformed.
            InvalidVoteError: If weight is not a positive finite number.
        """
        validate_ledger_address("subject_id", self.subject_id)
        validate_ledger_address("voter_id", self.voter_id)

        if isinstance(self.weight, bool) or not isinstance(self.weight, (int, float)):
            raise InvalidVoteError("weight", f"weight must be numeric, got {self.weight!r}")
        if not math.isfinite(self.weight) or self.weight <= 0:
            raise InvalidVoteError(
                "weight", f"weight must be a positive finite number, got {self.weight}"
            )
        if self.cast_at.tzinfo is None:
            raise InvalidVoteError("cast_at", "cast_at must be timezone-aware (UTC)")

    @property
    def subject(self) -> SubjectRef:
        return SubjectRef(self.subject_type, self.subject_id)

    @property
    def vote_id(self) -> str:
        return generate_vote_id(self.subject_type, self.subject_id, self.voter_id)

    def to_record(self) -> dict[str, Any]:
        """Serialize the per-voter payload stored in the vote cache."""
        return {
            "choice": self.choice,
            "weight": self.weight,
            "cast_at": self.cast_at.isoformat(),
        }

    @classmethod
    def from_record(
        cls,
        subject_type: SubjectType,
        subject_id: str,
        voter_id: str,
        record: dict[str, Any],
    ) -> Vote:
        """Rebuild a vote from its cached payload."""
        return cls(
            subject_type=subject_type,
            subject_id=subject_id,
            voter_id=voter_id,
            choice=bool(record["choice"]),
            weight=float(record.get("weight", DEFAULT_VOTE_WEIGHT)),
            cast_at=datetime.fromisoformat(record["cast_at"]),
        )


@dataclass(frozen=True)
class Tally:
    """Weights derived from the live votes on one subject.

    Attributes:
        approve_weight: Sum of weights of approving ballots.
        reject_weight: Sum of weights of rejecting ballots.
        total_voters: Number of distinct voters with a live ballot.
    """

    approve_weight: float = 0.0
    reject_weight: float = 0.0
    total_voters: int = 0

    @classmethod
    def from_votes(cls, votes: Iterable[Vote]) -> Tally:
        """Compute a tally from live votes (one per voter)."""
        approve = 0.0
        reject = 0.0
        voters: set[str] = set()
        for vote in votes:
            voters.add(vote.voter_id)
            if vote.choice:
                approve += vote.weight
            else:
                reject += vote.weight
        return cls(approve_weight=approve, reject_weight=reject, total_voters=len(voters))

    @property
    def total_weight(self) -> float:
        return self.approve_weight + self.reject_weight

    @property
    def approval_ratio(self) -> float:
        """approve / (approve + reject); 0.0 when no weight has been cast."""
        total = self.total_weight
        if total <= 0:
            return 0.0
        return self.approve_weight / total

    def to_dict(self) -> dict[str, Any]:
        return {
            "approve_weight": self.approve_weight,
            "reject_weight": self.reject_weight,
            "total_voters": self.total_voters,
            "approval_ratio": self.approval_ratio,
        }
