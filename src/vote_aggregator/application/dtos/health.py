"""Health and stats DTOs for the application layer.

Used by AggregationStatsService and mapped to API Pydantic models by
the routes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class DependencyCheckDTO:
    """Individual dependency health check result.

    Attributes:
        name: Dependency name (e.g., "vote_store").
        healthy: Whether the dependency is healthy.
        latency_ms: Check latency in milliseconds.
        error: Error message if unhealthy.
    """

    name: str
    healthy: bool
    latency_ms: float | None = None
    error: str | None = None


@dataclass(frozen=True)
class HealthDTO:
    """Service health.

    Attributes:
        status: "healthy" or "degraded".
        scheduler_state: STOPPED, RUNNING or STOPPING.
        checks: Dependency checks by name.
        uptime_seconds: Seconds since service startup.
    """

    status: str
    scheduler_state: str
    checks: dict[str, DependencyCheckDTO] = field(default_factory=dict)
    uptime_seconds: float = 0.0


@dataclass(frozen=True)
class AggregationStatsDTO:
    """Read-only snapshot of the aggregation backlog.

    Attributes:
        pending_proposals: Proposal subjects awaiting aggregation.
        pending_disputes: Dispute subjects awaiting aggregation.
        total_pending_votes: Live votes across all pending subjects.
        scheduler_state: STOPPED, RUNNING or STOPPING.
        interval_seconds: Sweep interval.
        proposal_threshold: Approval ratio a proposal needs.
        dispute_threshold: Support ratio a dispute needs.
        min_votes_required: Quorum in distinct voters.
        last_sweep_at: When the last sweep finished, if any.
    """

    pending_proposals: int
    pending_disputes: int
    total_pending_votes: int
    scheduler_state: str
    interval_seconds: float
    proposal_threshold: float
    dispute_threshold: float
    min_votes_required: int
    last_sweep_at: datetime | None = None
