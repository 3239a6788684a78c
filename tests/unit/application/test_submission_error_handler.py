"""Unit tests for SubmissionErrorHandler."""

import asyncio

import pytest

from vote_aggregator.application.services.submission_error_handler import (
    SubmissionAction,
    SubmissionErrorCategory,
    SubmissionErrorHandler,
    categorize_error,
)
from vote_aggregator.domain.errors import (
    LedgerCongestionError,
    LedgerNetworkError,
    RejectedByLedgerError,
    StaleStateError,
    SubjectNotFoundError,
)


class TestCategorizeError:
    @pytest.mark.parametrize(
        ("error", "category"),
        [
            (LedgerNetworkError("down"), SubmissionErrorCategory.NETWORK),
            (LedgerCongestionError("busy"), SubmissionErrorCategory.CONGESTION),
            (StaleStateError("moved"), SubmissionErrorCategory.STALE_STATE),
            (RejectedByLedgerError("no"), SubmissionErrorCategory.REJECTED),
            (SubjectNotFoundError("x"), SubmissionErrorCategory.REJECTED),
            (asyncio.TimeoutError(), SubmissionErrorCategory.TIMEOUT),
            (ConnectionResetError(), SubmissionErrorCategory.NETWORK),
            (RuntimeError("request timed out"), SubmissionErrorCategory.TIMEOUT),
            (RuntimeError("HTTP 429"), SubmissionErrorCategory.CONGESTION),
            (RuntimeError("mystery"), SubmissionErrorCategory.UNKNOWN),
        ],
    )
    def test_categories(self, error: Exception, category: SubmissionErrorCategory) -> None:
        assert categorize_error(error) is category


class TestHandle:
    def test_transient_error_retries_within_budget(self) -> None:
        handler = SubmissionErrorHandler(max_attempts=3, base_delay_seconds=0.5)

        decision = handler.handle(LedgerNetworkError("down"), attempt=1)

        assert decision.action is SubmissionAction.RETRY
        assert decision.can_retry
        assert decision.retry_delay_seconds == 0.5

    def test_transient_error_on_last_attempt_is_exhausted(self) -> None:
        handler = SubmissionErrorHandler(max_attempts=3)

        decision = handler.handle(LedgerNetworkError("down"), attempt=3)

        assert decision.action is SubmissionAction.FAIL
        assert decision.exhausted
        assert decision.is_terminal

    def test_rejection_fails_immediately(self) -> None:
        handler = SubmissionErrorHandler(max_attempts=3)

        decision = handler.handle(RejectedByLedgerError("no"), attempt=1)

        assert decision.action is SubmissionAction.FAIL
        assert not decision.exhausted

    def test_stale_state_verifies_even_on_last_attempt(self) -> None:
        handler = SubmissionErrorHandler(max_attempts=2)

        decision = handler.handle(StaleStateError("moved"), attempt=2)

        assert decision.action is SubmissionAction.VERIFY_STATE
        assert not decision.can_retry

    def test_delay_is_capped(self) -> None:
        handler = SubmissionErrorHandler(
            max_attempts=10, base_delay_seconds=1.0, max_delay_seconds=4.0
        )
        for attempt in range(1, 10):
            decision = handler.handle(LedgerNetworkError("down"), attempt=attempt)
            assert decision.retry_delay_seconds <= 4.0

    def test_congestion_hint_raises_delay(self) -> None:
        handler = SubmissionErrorHandler(
            max_attempts=3, base_delay_seconds=0.1, max_delay_seconds=10.0
        )

        decision = handler.handle(LedgerCongestionError("busy", retry_after=7), attempt=1)

        assert decision.retry_delay_seconds == 7

    def test_context_is_carried(self) -> None:
        handler = SubmissionErrorHandler()
        decision = handler.handle(
            LedgerNetworkError("down"), attempt=1, context={"subject_id": "abc"}
        )
        assert decision.context == {"subject_id": "abc"}

    def test_rejects_zero_attempts(self) -> None:
        with pytest.raises(ValueError):
            SubmissionErrorHandler(max_attempts=0)
