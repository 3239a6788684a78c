"""Vote store and intake errors.

Vote intake fails closed: when the backing cache cannot be reached the
caller gets StoreUnavailableError and must not assume the vote was
recorded.
"""

from __future__ import annotations

from vote_aggregator.domain.exceptions import VoteAggregatorError


class StoreUnavailableError(VoteAggregatorError):
    """Raised when the vote cache cannot be reached.

    HTTP Status: 503 Service Unavailable

    Attributes:
        operation: The store operation that failed (e.g. "cast_vote").
        retry_after: Suggested seconds before the caller retries.
    """

    def __init__(
        self,
        operation: str,
        reason: str = "",
        retry_after: int = 5,
    ) -> None:
        """Initialize the error.

        Args:
            operation: The store operation that failed.
            reason: Underlying failure description.
            retry_after: Suggested retry delay in seconds.
        """
        self.operation = operation
        self.reason = reason
        self.retry_after = retry_after
        message = f"Vote store unavailable during {operation}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class InvalidVoteError(VoteAggregatorError):
    """Raised when a ballot is malformed (bad weight, unknown subject type).

    HTTP Status: 422 Unprocessable Entity

    Attributes:
        field: The offending field name.
    """

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        super().__init__(message)


class InvalidSubjectIdError(InvalidVoteError):
    """Raised when a subject or voter identifier is not a valid ledger address."""

    def __init__(self, field: str, value: str) -> None:
        self.value = value
        super().__init__(
            field,
            f"{field} must be a base58 ledger address, got {value!r}",
        )
