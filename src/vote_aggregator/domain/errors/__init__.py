"""Domain errors for the vote aggregator.

All exceptions inherit from VoteAggregatorError.
"""

from vote_aggregator.domain.errors.configuration import ConfigurationError
from vote_aggregator.domain.errors.ledger import (
    LedgerCongestionError,
    LedgerError,
    LedgerNetworkError,
    RejectedByLedgerError,
    StaleStateError,
    SubjectNotFoundError,
)
from vote_aggregator.domain.errors.submission import SubmissionExhaustedError
from vote_aggregator.domain.errors.vote_store import (
    InvalidSubjectIdError,
    InvalidVoteError,
    StoreUnavailableError,
)

__all__: list[str] = [
    "ConfigurationError",
    "InvalidSubjectIdError",
    "InvalidVoteError",
    "LedgerCongestionError",
    "LedgerError",
    "LedgerNetworkError",
    "RejectedByLedgerError",
    "StaleStateError",
    "StoreUnavailableError",
    "SubjectNotFoundError",
    "SubmissionExhaustedError",
]
