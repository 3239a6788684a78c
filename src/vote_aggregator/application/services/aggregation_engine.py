"""Aggregation engine: turns a subject's staged votes into one ledger commit.

evaluate_subject runs the whole protocol for one subject:

1. Acquire the subject lock (held -> NO_ACTION/LOCK_HELD)
2. Read the ledger state (not eligible -> NO_ACTION/NOT_ELIGIBLE; a
   settled subject is also evicted from the vote store)
3. Read the tally and apply the decision policy
4. Submit the transition with retry; a stale-state error is verified
   against a fresh read and a lost race counts as success
5. On success mark the subject processed; on failure leave it pending
6. Release the lock

Store and ledger errors are classified here and reported as FAILED
evaluations; evaluate_subject does not raise for them.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, TypeVar

import structlog

from vote_aggregator.application.services.submission_error_handler import (
    SubmissionAction,
    SubmissionErrorHandler,
)
from vote_aggregator.config.aggregation_config import AggregationConfig
from vote_aggregator.domain.errors import (
    LedgerError,
    LedgerNetworkError,
    StoreUnavailableError,
    SubmissionExhaustedError,
)
from vote_aggregator.domain.models.decision import (
    AggregationDecision,
    EvaluationStatus,
    NoActionReason,
    SubjectEvaluation,
)
from vote_aggregator.domain.models.ledger_subject import TransactionReceipt
from vote_aggregator.domain.models.subject_lock import SubjectLock
from vote_aggregator.domain.models.vote import SubjectRef, SubjectType
from vote_aggregator.domain.services.decision_policy import decide

if TYPE_CHECKING:
    from vote_aggregator.application.ports.aggregation_metrics import (
        AggregationMetricsProtocol,
    )
    from vote_aggregator.application.ports.ledger_client import LedgerClientProtocol
    from vote_aggregator.application.ports.subject_lock import (
        SubjectLockManagerProtocol,
    )
    from vote_aggregator.application.ports.vote_store import VoteStoreProtocol

T = TypeVar("T")


@dataclass(frozen=True)
class _SubmissionResult:
    status: EvaluationStatus
    attempts: int
    receipt: TransactionReceipt | None = None
    error: str | None = None


class AggregationEngine:
    """Evaluates one subject at a time under its distributed lock.

    Example:
        >>> engine = AggregationEngine(vote_store, lock_manager, ledger_client)
        >>> evaluation = await engine.evaluate_subject(SubjectType.PROPOSAL, market)
        >>> evaluation.status
        <EvaluationStatus.SUBMITTED: 'SUBMITTED'>
    """

    def __init__(
        self,
        vote_store: "VoteStoreProtocol",
        lock_manager: "SubjectLockManagerProtocol",
        ledger_client: "LedgerClientProtocol",
        config: AggregationConfig | None = None,
        error_handler: SubmissionErrorHandler | None = None,
        metrics: "AggregationMetricsProtocol | None" = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialize the engine.

        Args:
            vote_store: Tally store.
            lock_manager: Per-subject distributed mutex.
            ledger_client: Ledger reads and submissions.
            config: Thresholds, quorum and retry budget.
            error_handler: Submission error classifier (built from config if None).
            metrics: Optional metrics sink.
            sleep: Backoff sleep, injectable for tests.
        """
        self._votes = vote_store
        self._locks = lock_manager
        self._ledger = ledger_client
        self._config = config or AggregationConfig()
        self._errors = error_handler or SubmissionErrorHandler(
            max_attempts=self._config.max_submit_attempts,
            base_delay_seconds=self._config.retry_base_delay_seconds,
            max_delay_seconds=self._config.retry_max_delay_seconds,
        )
        self._metrics = metrics
        self._sleep = sleep
        self._log = structlog.get_logger().bind(service="aggregation_engine")

    @property
    def config(self) -> AggregationConfig:
        return self._config

    async def evaluate_subject(
        self,
        subject_type: SubjectType | str,
        subject_id: str,
    ) -> SubjectEvaluation:
        """Evaluate a subject and commit its decision to the ledger if due.

        Args:
            subject_type: Proposal or dispute.
            subject_id: Ledger address of the subject.

        Returns:
            SubjectEvaluation describing what happened.
        """
        subject = SubjectRef(SubjectType.parse(subject_type), subject_id)
        log = self._log.bind(subject_type=subject.subject_type.value, subject_id=subject_id)

        try:
            lock = await self._locks.acquire(subject_id, self._config.lock_ttl_seconds)
        except StoreUnavailableError as e:
            return self._finish(SubjectEvaluation.failed(subject, str(e)), log)

        if lock is None:
            log.debug("subject_lock_held")
            return self._finish(
                SubjectEvaluation.no_action(subject, NoActionReason.LOCK_HELD), log
            )

        try:
            evaluation = await self._evaluate_locked(subject, log)
        finally:
            await self._release(lock, log)

        return self._finish(evaluation, log)

    async def _evaluate_locked(
        self,
        subject: SubjectRef,
        log: structlog.stdlib.BoundLogger,
    ) -> SubjectEvaluation:
        subject_type = subject.subject_type
        subject_id = subject.subject_id

        try:
            ledger_subject = await self._call_ledger(
                lambda: self._ledger.fetch_state(subject_id), subject_id
            )
        except LedgerError as e:
            return SubjectEvaluation.failed(subject, f"Ledger state read failed: {e}")

        if not ledger_subject.accepts(subject_type):
            if ledger_subject.is_settled_for(subject_type):
                log.info("subject_already_settled", state=ledger_subject.state.value)
                try:
                    await self._votes.mark_processed(subject_type, subject_id)
                except StoreUnavailableError as e:
                    return SubjectEvaluation.failed(subject, str(e))
            else:
                log.debug("subject_not_yet_eligible", state=ledger_subject.state.value)
            return SubjectEvaluation.no_action(subject, NoActionReason.NOT_ELIGIBLE)

        try:
            tally = await self._votes.get_tally(subject_type, subject_id)
        except StoreUnavailableError as e:
            return SubjectEvaluation.failed(subject, str(e))

        decision = decide(
            subject_type=subject_type,
            subject_id=subject_id,
            tally=tally,
            threshold=self._config.threshold_for(subject_type),
            min_votes_required=self._config.min_votes_required,
        )

        if not decision.requires_submission:
            log.debug(
                "subject_quorum_not_met",
                total_voters=tally.total_voters,
                min_votes_required=self._config.min_votes_required,
            )
            return SubjectEvaluation(
                subject=subject,
                status=EvaluationStatus.INSUFFICIENT_QUORUM,
                decision=decision,
            )

        try:
            result = await self._submit_with_retry(decision, log)
        except SubmissionExhaustedError as e:
            return SubjectEvaluation.failed(
                subject, str(e), decision=decision, attempts=e.attempts
            )

        if result.status.is_failure:
            return SubjectEvaluation.failed(
                subject, result.error or "", decision=decision, attempts=result.attempts
            )

        try:
            await self._votes.mark_processed(subject_type, subject_id)
        except StoreUnavailableError as e:
            # The next sweep sees a settled subject and evicts it
            log.warning("mark_processed_failed", error=str(e))

        return SubjectEvaluation(
            subject=subject,
            status=result.status,
            decision=decision,
            receipt=result.receipt,
            attempts=result.attempts,
        )

    async def _submit_with_retry(
        self,
        decision: AggregationDecision,
        log: structlog.stdlib.BoundLogger,
    ) -> _SubmissionResult:
        """Submit a decision, retrying transient failures.

        A transition the ledger refuses comes back as a FAILED result.

        Raises:
            SubmissionExhaustedError: If every attempt failed.
        """
        subject_id = decision.subject_id
        max_attempts = self._errors.max_attempts
        last_error: Exception | None = None

        for attempt in range(1, max_attempts + 1):
            try:
                receipt = await self._call_ledger(
                    lambda: self._ledger.submit_transition(subject_id, decision),
                    subject_id,
                )
            except Exception as exc:
                last_error = exc
            else:
                self._record_submission("confirmed")
                log.info(
                    "ledger_transition_confirmed",
                    transition=receipt.transition.value,
                    signature=receipt.signature,
                    attempt=attempt,
                )
                return _SubmissionResult(EvaluationStatus.SUBMITTED, attempt, receipt)

            handling = self._errors.handle(
                last_error,
                attempt=attempt,
                context={"subject_id": subject_id},
            )

            if handling.action is SubmissionAction.VERIFY_STATE:
                if await self._race_resolved(decision, log):
                    self._record_submission("race_resolved")
                    return _SubmissionResult(EvaluationStatus.RACE_RESOLVED, attempt)
                if not handling.can_retry:
                    break
            elif handling.action is SubmissionAction.FAIL:
                if handling.exhausted:
                    break
                self._record_submission("rejected")
                return _SubmissionResult(
                    EvaluationStatus.FAILED,
                    attempt,
                    error=f"Rejected by ledger: {last_error}",
                )

            self._record_submission("retry")
            await self._sleep(handling.retry_delay_seconds)

        self._record_submission("exhausted")
        raise SubmissionExhaustedError(
            subject_id,
            attempts=max_attempts,
            last_error=last_error,
        )

    async def _race_resolved(
        self,
        decision: AggregationDecision,
        log: structlog.stdlib.BoundLogger,
    ) -> bool:
        """Re-read state after a stale-state error.

        Returns:
            True if the target state was reached or the subject is otherwise
            settled; False if the transition is still needed.
        """
        try:
            current = await self._call_ledger(
                lambda: self._ledger.fetch_state(decision.subject_id),
                decision.subject_id,
            )
        except LedgerError as e:
            log.warning("ledger_state_verify_failed", error=str(e))
            return False

        target = decision.transition.target_state
        if current.state is target or current.is_settled_for(decision.subject_type):
            log.info(
                "ledger_race_resolved",
                observed_state=current.state.value,
                expected_state=target.value,
            )
            return True
        return False

    async def _call_ledger(
        self,
        call: Callable[[], Awaitable[T]],
        subject_id: str,
    ) -> T:
        """Await a ledger call bounded by the configured timeout.

        Raises:
            LedgerNetworkError: If the call times out.
        """
        timeout = self._config.ledger_timeout_seconds
        try:
            return await asyncio.wait_for(call(), timeout=timeout)
        except asyncio.TimeoutError:
            raise LedgerNetworkError(
                f"Ledger call timed out after {timeout}s", subject_id=subject_id
            ) from None

    async def _release(self, lock: SubjectLock, log: structlog.stdlib.BoundLogger) -> None:
        try:
            released = await self._locks.release(lock)
        except StoreUnavailableError as e:
            # Lock TTL reclaims it
            log.warning("subject_lock_release_failed", error=str(e))
            return
        if not released:
            log.warning("subject_lock_lost_before_release", ttl_seconds=lock.ttl_seconds)

    def _record_submission(self, result: str) -> None:
        if self._metrics is not None:
            self._metrics.record_submission(result)

    def _finish(
        self,
        evaluation: SubjectEvaluation,
        log: structlog.stdlib.BoundLogger,
    ) -> SubjectEvaluation:
        if self._metrics is not None:
            self._metrics.record_evaluation(evaluation.subject.subject_type, evaluation.status)

        fields = {
            "status": evaluation.status.value,
            "outcome": evaluation.decision.outcome.value if evaluation.decision else None,
            "reason": evaluation.reason.value if evaluation.reason else None,
            "attempts": evaluation.attempts,
        }
        if evaluation.status.is_failure:
            log.error("subject_evaluation_failed", error=evaluation.error, **fields)
        else:
            log.info("subject_evaluated", **fields)
        return evaluation
