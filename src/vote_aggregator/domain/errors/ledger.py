"""Ledger errors surfaced by LedgerClient implementations.

The taxonomy drives the submit-with-retry protocol:

- LedgerNetworkError / LedgerCongestionError: transient, retried
- StaleStateError: on-chain state changed since it was read; verified
  and usually treated as a benign race
- RejectedByLedgerError: the transition is invalid per the ledger's own
  rules; retrying cannot succeed
"""

from __future__ import annotations

from vote_aggregator.domain.exceptions import VoteAggregatorError


class LedgerError(VoteAggregatorError):
    """Base error for ledger interactions.

    Attributes:
        subject_id: Subject the failing call targeted, if known.
    """

    def __init__(self, message: str, subject_id: str | None = None) -> None:
        self.subject_id = subject_id
        super().__init__(message)


class LedgerNetworkError(LedgerError):
    """Ledger RPC unreachable or timed out (transient)."""

    pass


class LedgerCongestionError(LedgerError):
    """Ledger is congested or rate limiting (transient).

    Attributes:
        retry_after: Seconds suggested by the ledger gateway, if any.
    """

    def __init__(
        self,
        message: str,
        subject_id: str | None = None,
        retry_after: float | None = None,
    ) -> None:
        self.retry_after = retry_after
        super().__init__(message, subject_id)


class StaleStateError(LedgerError):
    """Subject state changed on-chain since it was last read.

    Attributes:
        observed_state: State reported by the ledger, if included.
    """

    def __init__(
        self,
        message: str,
        subject_id: str | None = None,
        observed_state: str | None = None,
    ) -> None:
        self.observed_state = observed_state
        super().__init__(message, subject_id)


class RejectedByLedgerError(LedgerError):
    """The ledger refused the transition (fatal for this evaluation).

    Attributes:
        code: Program error code returned by the ledger, if any.
    """

    def __init__(
        self,
        message: str,
        subject_id: str | None = None,
        code: str | None = None,
    ) -> None:
        self.code = code
        super().__init__(message, subject_id)


class SubjectNotFoundError(RejectedByLedgerError):
    """No ledger account exists for the subject."""

    def __init__(self, subject_id: str) -> None:
        super().__init__(
            f"Subject account {subject_id} not found on ledger",
            subject_id=subject_id,
            code="AccountNotFound",
        )
