"""Category-specific error handling for ledger submissions.

Every failed ledger call in the submit-with-retry protocol is classified
into a tagged ErrorDecision that tells the aggregation engine what to do:

- RETRY: Transient errors that may succeed on retry (network, timeout,
  congestion, unknown)
- VERIFY_STATE: The ledger reports stale state; re-read the subject to
  tell a lost race (benign) from a transition that is still needed
- FAIL: The ledger rejected the transition, or the retry budget is spent
"""

from __future__ import annotations

import asyncio
import random
from dataclasses import dataclass
from enum import Enum
from typing import Any

import structlog

from vote_aggregator.domain.errors import (
    LedgerCongestionError,
    LedgerNetworkError,
    RejectedByLedgerError,
    StaleStateError,
)


class SubmissionErrorCategory(Enum):
    """Categories of errors encountered while submitting to the ledger."""

    # Transient - may succeed on retry
    NETWORK = "network"
    TIMEOUT = "timeout"
    CONGESTION = "congestion"

    # Race - needs a state re-read before deciding
    STALE_STATE = "stale_state"

    # Permanent - the ledger refused the transition
    REJECTED = "rejected"

    # Unknown - retried within budget
    UNKNOWN = "unknown"


class SubmissionAction(Enum):
    """Action to take when a submission attempt fails."""

    RETRY = "retry"
    VERIFY_STATE = "verify_state"
    FAIL = "fail"


@dataclass(frozen=True)
class ErrorDecision:
    """Decision about how to handle a failed submission attempt.

    Attributes:
        action: The action to take.
        category: The error category.
        attempt: Attempt number that failed (1-based).
        can_retry: Whether another attempt fits in the budget.
        log_level: Logging level for the failure.
        retry_delay_seconds: Delay before the next attempt.
        context: Additional context for logging.
    """

    action: SubmissionAction
    category: SubmissionErrorCategory
    attempt: int = 1
    can_retry: bool = False
    log_level: str = "warning"
    retry_delay_seconds: float = 0.0
    context: dict[str, Any] | None = None

    @property
    def is_terminal(self) -> bool:
        """Check if this decision ends the submission."""
        return self.action is SubmissionAction.FAIL

    @property
    def exhausted(self) -> bool:
        """True if the submission failed only because the budget ran out."""
        return (
            self.action is SubmissionAction.FAIL
            and self.category is not SubmissionErrorCategory.REJECTED
        )


# Error type to category mapping
ERROR_CATEGORIES: dict[type[BaseException], SubmissionErrorCategory] = {}


def register_error_category(
    error_type: type[BaseException],
    category: SubmissionErrorCategory,
) -> None:
    """Register an error type with its category."""
    ERROR_CATEGORIES[error_type] = category


def categorize_error(error: BaseException) -> SubmissionErrorCategory:
    """Determine the category of an error.

    Registered types win; anything else falls back to name patterns.
    """
    for error_type, category in ERROR_CATEGORIES.items():
        if isinstance(error, error_type):
            return category

    error_name = type(error).__name__.lower()
    error_msg = str(error).lower()

    if "timeout" in error_name or "timed out" in error_msg:
        return SubmissionErrorCategory.TIMEOUT

    if any(p in error_name for p in ["connection", "network", "socket"]):
        return SubmissionErrorCategory.NETWORK

    if "429" in error_msg or "rate limit" in error_msg or "congest" in error_msg:
        return SubmissionErrorCategory.CONGESTION

    return SubmissionErrorCategory.UNKNOWN


class SubmissionErrorHandler:
    """Decides how the submit-with-retry loop reacts to a failed attempt.

    Usage:
        handler = SubmissionErrorHandler(max_attempts=3)

        try:
            receipt = await ledger.submit_transition(subject_id, decision)
        except Exception as e:
            decision = handler.handle(e, attempt=attempt)

            if decision.action is SubmissionAction.VERIFY_STATE:
                ...  # re-read state, success-by-race or retry
            elif decision.action is SubmissionAction.RETRY:
                await asyncio.sleep(decision.retry_delay_seconds)
            else:
                ...  # FAIL
    """

    # Base delay per category; others use the configured base delay
    RETRY_DELAYS: dict[SubmissionErrorCategory, float] = {
        SubmissionErrorCategory.CONGESTION: 2.0,
    }

    RETRYABLE_CATEGORIES: set[SubmissionErrorCategory] = {
        SubmissionErrorCategory.NETWORK,
        SubmissionErrorCategory.TIMEOUT,
        SubmissionErrorCategory.CONGESTION,
        SubmissionErrorCategory.UNKNOWN,
    }

    def __init__(
        self,
        max_attempts: int = 3,
        base_delay_seconds: float = 1.0,
        max_delay_seconds: float = 10.0,
    ) -> None:
        """Initialize the error handler.

        Args:
            max_attempts: Maximum submission attempts.
            base_delay_seconds: Base delay for exponential backoff.
            max_delay_seconds: Maximum delay cap.
        """
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")
        self._max_attempts = max_attempts
        self._base_delay = base_delay_seconds
        self._max_delay = max_delay_seconds
        self._log = structlog.get_logger().bind(service="submission_error_handler")

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    def handle(
        self,
        error: BaseException,
        attempt: int = 1,
        context: dict[str, Any] | None = None,
    ) -> ErrorDecision:
        """Classify a failed attempt and decide the action.

        Args:
            error: The exception raised by the ledger call.
            attempt: Attempt number that failed (1-based).
            context: Optional context for logging.

        Returns:
            ErrorDecision with action and details.
        """
        category = categorize_error(error)
        can_retry = attempt < self._max_attempts

        if category is SubmissionErrorCategory.REJECTED:
            self._log.error(
                "ledger_submission_rejected",
                error=str(error),
                attempt=attempt,
                **(context or {}),
            )
            return ErrorDecision(
                action=SubmissionAction.FAIL,
                category=category,
                attempt=attempt,
                can_retry=False,
                log_level="error",
                context=context,
            )

        delay = self._calculate_delay(category, attempt, error) if can_retry else 0.0

        # Stale state is verified even on the last attempt; a lost race is success
        if category is SubmissionErrorCategory.STALE_STATE:
            self._log.info(
                "ledger_state_stale",
                error=str(error),
                attempt=attempt,
                max_attempts=self._max_attempts,
                **(context or {}),
            )
            return ErrorDecision(
                action=SubmissionAction.VERIFY_STATE,
                category=category,
                attempt=attempt,
                can_retry=can_retry,
                log_level="info",
                retry_delay_seconds=delay,
                context=context,
            )

        if category in self.RETRYABLE_CATEGORIES and can_retry:
            self._log.warning(
                "ledger_submit_retry",
                error=str(error),
                category=category.value,
                attempt=attempt,
                max_attempts=self._max_attempts,
                retry_delay_seconds=round(delay, 3),
                **(context or {}),
            )
            return ErrorDecision(
                action=SubmissionAction.RETRY,
                category=category,
                attempt=attempt,
                can_retry=True,
                log_level="warning",
                retry_delay_seconds=delay,
                context=context,
            )

        self._log.error(
            "ledger_submit_retries_exhausted",
            error=str(error),
            category=category.value,
            attempts=attempt,
            **(context or {}),
        )
        return ErrorDecision(
            action=SubmissionAction.FAIL,
            category=category,
            attempt=attempt,
            can_retry=False,
            log_level="error",
            context=context,
        )

    def _calculate_delay(
        self,
        category: SubmissionErrorCategory,
        attempt: int,
        error: BaseException | None = None,
    ) -> float:
        """Calculate retry delay with decorrelated jitter.

        Grows roughly as base * 2**(attempt - 1), capped at the max delay.
        A congestion hint from the ledger raises the floor.
        """
        base = self.RETRY_DELAYS.get(category, self._base_delay)

        if attempt <= 1:
            delay = base
        else:
            previous = base * (2 ** (attempt - 2))
            delay = random.uniform(base, previous * 3)

        if isinstance(error, LedgerCongestionError) and error.retry_after:
            delay = max(delay, error.retry_after)

        return min(delay, self._max_delay)


register_error_category(StaleStateError, SubmissionErrorCategory.STALE_STATE)
register_error_category(RejectedByLedgerError, SubmissionErrorCategory.REJECTED)
register_error_category(LedgerCongestionError, SubmissionErrorCategory.CONGESTION)
register_error_category(LedgerNetworkError, SubmissionErrorCategory.NETWORK)
register_error_category(asyncio.TimeoutError, SubmissionErrorCategory.TIMEOUT)
register_error_category(TimeoutError, SubmissionErrorCategory.TIMEOUT)
register_error_category(ConnectionError, SubmissionErrorCategory.NETWORK)
