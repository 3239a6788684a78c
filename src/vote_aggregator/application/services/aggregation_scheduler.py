"""Aggregation scheduler background service.

Sweeps the pending-subject index on a fixed interval and evaluates each
subject with bounded concurrency. A manual trigger runs the same sweep
immediately, independent of the timer and of the scheduler state.

Note:
    Start the scheduler with the application lifecycle and stop it on
    shutdown. stop() waits for an in-flight sweep instead of cancelling
    it, so no evaluation is interrupted mid-submission.
"""

from __future__ import annotations

import asyncio
import time
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING

import structlog

from vote_aggregator.application.dtos.sweep_summary import SweepSummary
from vote_aggregator.config.aggregation_config import SchedulerConfig
from vote_aggregator.domain.models.decision import SubjectEvaluation
from vote_aggregator.domain.models.vote import SubjectRef

if TYPE_CHECKING:
    from vote_aggregator.application.ports.aggregation_metrics import (
        AggregationMetricsProtocol,
    )
    from vote_aggregator.application.ports.vote_store import VoteStoreProtocol
    from vote_aggregator.application.services.aggregation_engine import (
        AggregationEngine,
    )


class SchedulerState(str, Enum):
    """Lifecycle state of the scheduler."""

    STOPPED = "STOPPED"
    RUNNING = "RUNNING"
    STOPPING = "STOPPING"


class AggregationScheduler:
    """Periodic aggregation sweeps.

    Attributes:
        state: STOPPED, RUNNING or STOPPING.
        interval_seconds: Seconds between timer sweeps.
        last_summary: Summary of the most recent sweep, if any.

    Example:
        >>> scheduler = AggregationScheduler(engine, vote_store)
        >>> await scheduler.start()
        >>> summary = await scheduler.trigger_now()
        >>> await scheduler.stop()
    """

    def __init__(
        self,
        engine: "AggregationEngine",
        vote_store: "VoteStoreProtocol",
        config: SchedulerConfig | None = None,
        metrics: "AggregationMetricsProtocol | None" = None,
    ) -> None:
        """Initialize the scheduler.

        Args:
            engine: Evaluates one subject.
            vote_store: Source of pending subjects.
            config: Interval, concurrency and run-on-start.
            metrics: Optional metrics sink.
        """
        self._engine = engine
        self._votes = vote_store
        self._config = config or SchedulerConfig()
        self._metrics = metrics
        self._state = SchedulerState.STOPPED
        self._stop_event: asyncio.Event | None = None
        self._task: asyncio.Task[None] | None = None
        self._last_summary: SweepSummary | None = None
        self._log = structlog.get_logger().bind(service="aggregation_scheduler")

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def running(self) -> bool:
        """Check if the timer loop is running."""
        return self._state is SchedulerState.RUNNING

    @property
    def interval_seconds(self) -> float:
        return self._config.interval_seconds

    @property
    def last_summary(self) -> SweepSummary | None:
        return self._last_summary

    async def start(self) -> None:
        """Start the timer loop.

        Note:
            Calling start while running is a no-op.
        """
        if self._state is not SchedulerState.STOPPED:
            return

        self._stop_event = asyncio.Event()
        self._state = SchedulerState.RUNNING
        self._task = asyncio.create_task(self._run_loop())
        self._log.info(
            "aggregation_scheduler_started",
            interval_seconds=self._config.interval_seconds,
            max_concurrency=self._config.max_concurrency,
            run_on_start=self._config.run_on_start,
        )

    async def stop(self) -> None:
        """Stop the timer loop, waiting for an in-flight sweep to finish.

        Note:
            Calling stop when not running is safe.
        """
        if self._state is SchedulerState.STOPPED:
            return

        self._state = SchedulerState.STOPPING
        if self._stop_event is not None:
            self._stop_event.set()
        if self._task is not None:
            await self._task
            self._task = None
        self._state = SchedulerState.STOPPED
        self._log.info("aggregation_scheduler_stopped")

    async def trigger_now(self) -> SweepSummary:
        """Run a sweep immediately, regardless of the timer.

        Raises:
            StoreUnavailableError: If pending subjects cannot be listed.
        """
        self._log.info("aggregation_manual_trigger", scheduler_state=self._state.value)
        return await self.run_sweep(trigger="manual")

    async def run_sweep(self, trigger: str = "timer") -> SweepSummary:
        """List pending subjects and evaluate each one.

        Evaluations run concurrently up to max_concurrency. An evaluation
        that raises is reported as FAILED; the rest of the sweep continues.

        Raises:
            StoreUnavailableError: If pending subjects cannot be listed.
        """
        started_at = datetime.now(timezone.utc)
        started = time.monotonic()

        pending = await self._votes.list_pending_subjects()
        semaphore = asyncio.Semaphore(self._config.max_concurrency)

        async def evaluate(subject: SubjectRef) -> SubjectEvaluation:
            async with semaphore:
                return await self._engine.evaluate_subject(
                    subject.subject_type, subject.subject_id
                )

        outcomes = await asyncio.gather(
            *(evaluate(subject) for subject in pending),
            return_exceptions=True,
        )

        results: list[SubjectEvaluation] = []
        for subject, outcome in zip(pending, outcomes):
            if isinstance(outcome, asyncio.CancelledError):
                raise outcome
            if isinstance(outcome, BaseException):
                self._log.error(
                    "subject_evaluation_crashed",
                    subject_type=subject.subject_type.value,
                    subject_id=subject.subject_id,
                    error=str(outcome),
                    error_type=type(outcome).__name__,
                )
                results.append(SubjectEvaluation.failed(subject, str(outcome)))
            else:
                results.append(outcome)

        summary = SweepSummary(
            started_at=started_at,
            finished_at=datetime.now(timezone.utc),
            subjects_evaluated=list(pending),
            results=results,
            trigger=trigger,
        )
        self._last_summary = summary

        elapsed = time.monotonic() - started
        if self._metrics is not None:
            self._metrics.observe_sweep(elapsed, len(pending))

        self._log.info(
            "aggregation_sweep_complete",
            trigger=trigger,
            subjects=len(pending),
            elapsed_seconds=round(elapsed, 3),
            **summary.counts,
        )
        return summary

    async def _run_loop(self) -> None:
        """Timer loop.

        A failing sweep is logged and the loop continues with the next tick.
        """
        assert self._stop_event is not None
        stop_event = self._stop_event

        if self._config.run_on_start:
            await self._timer_sweep()

        while not stop_event.is_set():
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=self._config.interval_seconds)
            except asyncio.TimeoutError:
                await self._timer_sweep()

    async def _timer_sweep(self) -> None:
        try:
            await self.run_sweep(trigger="timer")
        except Exception as e:
            self._log.error(
                "aggregation_sweep_failed",
                error=str(e),
                error_type=type(e).__name__,
            )
