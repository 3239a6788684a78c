"""Aggregation stats and health service.

Read-only views for operators: the pending backlog, scheduler state and
thresholds, and dependency health.

Uses application-layer DTOs; API routes map them to Pydantic models.
"""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from vote_aggregator.application.dtos.health import (
    AggregationStatsDTO,
    DependencyCheckDTO,
    HealthDTO,
)
from vote_aggregator.domain.models.vote import SubjectType

if TYPE_CHECKING:
    from vote_aggregator.application.ports.vote_store import VoteStoreProtocol
    from vote_aggregator.application.services.aggregation_engine import (
        AggregationEngine,
    )
    from vote_aggregator.application.services.aggregation_scheduler import (
        AggregationScheduler,
    )


class DependencyChecker:
    """Connectivity checker around an injected async ping function."""

    def __init__(self, ping_fn: Callable[[], Awaitable[bool]], name: str) -> None:
        """Initialize the checker.

        Args:
            ping_fn: Async function that returns True if the dependency is healthy.
            name: Name for the dependency check.
        """
        self._ping_fn = ping_fn
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    async def check(self) -> DependencyCheckDTO:
        start_time = time.perf_counter()
        try:
            healthy = await self._ping_fn()
            latency_ms = (time.perf_counter() - start_time) * 1000
            return DependencyCheckDTO(name=self._name, healthy=healthy, latency_ms=latency_ms)
        except Exception as e:
            latency_ms = (time.perf_counter() - start_time) * 1000
            return DependencyCheckDTO(
                name=self._name,
                healthy=False,
                latency_ms=latency_ms,
                error=str(e),
            )


class AggregationStatsService:
    """Stats and health for the aggregation service."""

    def __init__(
        self,
        vote_store: "VoteStoreProtocol",
        engine: "AggregationEngine",
        scheduler: "AggregationScheduler",
        checkers: list[DependencyChecker] | None = None,
    ) -> None:
        self._votes = vote_store
        self._engine = engine
        self._scheduler = scheduler
        self._checkers = checkers if checkers is not None else [
            DependencyChecker(vote_store.ping, "vote_store")
        ]
        self._started_at = time.monotonic()

    async def get_stats(self) -> AggregationStatsDTO:
        """Read-only snapshot of the pending backlog.

        Raises:
            StoreUnavailableError: If the vote store is unreachable.
        """
        pending = await self._votes.list_pending_subjects(prune=False)
        total_votes = 0
        for subject in pending:
            tally = await self._votes.get_tally(subject.subject_type, subject.subject_id)
            total_votes += tally.total_voters

        config = self._engine.config
        last = self._scheduler.last_summary
        return AggregationStatsDTO(
            pending_proposals=sum(1 for s in pending if s.subject_type is SubjectType.PROPOSAL),
            pending_disputes=sum(1 for s in pending if s.subject_type is SubjectType.DISPUTE),
            total_pending_votes=total_votes,
            scheduler_state=self._scheduler.state.value,
            interval_seconds=self._scheduler.interval_seconds,
            proposal_threshold=config.proposal_threshold,
            dispute_threshold=config.dispute_threshold,
            min_votes_required=config.min_votes_required,
            last_sweep_at=last.finished_at if last else None,
        )

    async def check_health(self) -> HealthDTO:
        """Dependency checks plus scheduler state."""
        checks = {}
        for checker in self._checkers:
            result = await checker.check()
            checks[result.name] = result

        status = "healthy" if all(c.healthy for c in checks.values()) else "degraded"
        return HealthDTO(
            status=status,
            scheduler_state=self._scheduler.state.value,
            checks=checks,
            uptime_seconds=time.monotonic() - self._started_at,
        )
