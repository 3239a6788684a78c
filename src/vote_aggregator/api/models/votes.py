"""Vote intake API request/response models.

Pydantic rejects structurally invalid bodies (422); ledger address format
is checked here as well so callers get a field-level error.
"""

from datetime import datetime
from enum import Enum
from typing import Annotated

from pydantic import BaseModel, Field, PlainSerializer

from vote_aggregator.domain.models.vote import LEDGER_ADDRESS_PATTERN

# ISO 8601 with Z suffix
DateTimeWithZ = Annotated[
    datetime,
    PlainSerializer(lambda v: v.isoformat().replace("+00:00", "Z"), return_type=str),
]

LedgerAddress = Annotated[
    str,
    Field(
        min_length=32,
        max_length=44,
        pattern=LEDGER_ADDRESS_PATTERN.pattern,
        examples=["7h3gXfBfYFueFVLYyfL5Qo1QGsf4GQUfW96FKVgnUsJS"],
    ),
]


class SubjectTypeEnum(str, Enum):
    """What the vote is about."""

    PROPOSAL = "proposal"
    DISPUTE = "dispute"


class CastVoteRequest(BaseModel):
    """Body of POST /v1/votes.

    A later vote from the same voter on the same subject replaces the
    earlier one.
    """

    subject_type: SubjectTypeEnum
    subject_id: LedgerAddress
    voter_id: LedgerAddress
    choice: bool = Field(description="true to approve/support, false to reject")
    weight: float | None = Field(
        default=None,
        gt=0,
        allow_inf_nan=False,
        description="Ballot weight (default 1)",
    )


class CastVoteResponse(BaseModel):
    """Recorded vote."""

    vote_id: str
    subject_type: SubjectTypeEnum
    subject_id: str
    voter_id: str
    choice: bool
    weight: float
    cast_at: DateTimeWithZ


class TallyResponse(BaseModel):
    """Current tally for one subject."""

    subject_type: SubjectTypeEnum
    subject_id: str
    approve_weight: float
    reject_weight: float
    total_voters: int
    approval_ratio: float
