"""Errors raised by the submit-with-retry protocol."""

from __future__ import annotations

from vote_aggregator.domain.exceptions import VoteAggregatorError


class SubmissionExhaustedError(VoteAggregatorError):
    """Raised when every submission attempt failed with a retryable error.

    Attributes:
        subject_id: Subject whose transition could not be committed.
        attempts: Number of attempts made.
        last_error: The error from the final attempt.
    """

    def __init__(
        self,
        subject_id: str,
        attempts: int,
        last_error: Exception | None = None,
    ) -> None:
        self.subject_id = subject_id
        self.attempts = attempts
        self.last_error = last_error
        message = f"Ledger submission for {subject_id} failed after {attempts} attempts"
        if last_error is not None:
            message = f"{message}: {last_error}"
        super().__init__(message)
