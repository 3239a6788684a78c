"""Aggregation and scheduler configuration.

Environment Variables (Aggregation):
- PROPOSAL_APPROVAL_THRESHOLD: Proposal approval ratio (default: 0.70)
- DISPUTE_THRESHOLD: Dispute support ratio (default: 0.60)
- MIN_PROPOSAL_VOTES: Quorum in distinct voters (default: 10)
- AGGREGATION_LOCK_TTL: Subject lock TTL in seconds (default: 300)
- LEDGER_SUBMIT_ATTEMPTS: Submission attempts per evaluation (default: 3)
- LEDGER_RETRY_BASE_DELAY: Base backoff delay in seconds (default: 1.0)
- LEDGER_RETRY_MAX_DELAY: Backoff cap in seconds (default: 10.0)
- LEDGER_TIMEOUT_SECONDS: Timeout per ledger call in seconds (default: 30)

Thresholds accept a fraction (0.7), a percentage (70) or basis points
(7000).

Environment Variables (Scheduler):
- VOTE_AGGREGATION_INTERVAL: Seconds between sweeps (default: 300)
- AGGREGATION_MAX_CONCURRENCY: Subjects evaluated at once (default: 4)
- AGGREGATION_RUN_ON_START: Sweep immediately on start (default: true)
"""

from __future__ import annotations

from dataclasses import dataclass

from vote_aggregator.config._env import _get_bool_env, _get_float_env, _get_int_env
from vote_aggregator.domain.errors import ConfigurationError
from vote_aggregator.domain.models.vote import SubjectType


def normalize_threshold(value: float) -> float:
    """Normalize a threshold given as fraction, percentage or basis points.

    Examples:
        >>> normalize_threshold(0.7)
        0.7
        >>> normalize_threshold(70)
        0.7
        >>> normalize_threshold(7000)
        0.7
    """
    if value > 100:
        return value / 10_000
    if value > 1:
        return value / 100
    return value


@dataclass(frozen=True)
class AggregationConfig:
    """Configuration for the aggregation engine.

    Attributes:
        proposal_threshold: Approval ratio a proposal needs (0-1].
        dispute_threshold: Support ratio a dispute needs (0-1].
        min_votes_required: Quorum in distinct voters.
        lock_ttl_seconds: Subject lock TTL. Must exceed the retry budget so
                          a lock never expires under a live evaluation.
        max_submit_attempts: Ledger submission attempts per evaluation.
        retry_base_delay_seconds: Base delay for exponential backoff.
        retry_max_delay_seconds: Backoff cap.
        ledger_timeout_seconds: Bound on every single ledger call.
    """

    proposal_threshold: float = 0.70
    dispute_threshold: float = 0.60
    min_votes_required: int = 10
    lock_ttl_seconds: float = 300.0
    max_submit_attempts: int = 3
    retry_base_delay_seconds: float = 1.0
    retry_max_delay_seconds: float = 10.0
    ledger_timeout_seconds: float = 30.0

    def __post_init__(self) -> None:
        """Validate configuration values."""
        for name in ("proposal_threshold", "dispute_threshold"):
            value = getattr(self, name)
            if not 0 < value <= 1:
                raise ConfigurationError(f"{name} must be in (0, 1], got {value}")
        if self.min_votes_required < 1:
            raise ConfigurationError(
                f"min_votes_required must be positive, got {self.min_votes_required}"
            )
        if self.max_submit_attempts < 1:
            raise ConfigurationError(
                f"max_submit_attempts must be at least 1, got {self.max_submit_attempts}"
            )
        if self.retry_base_delay_seconds < 0:
            raise ConfigurationError(
                "retry_base_delay_seconds must be non-negative, "
                f"got {self.retry_base_delay_seconds}"
            )
        if self.retry_max_delay_seconds < self.retry_base_delay_seconds:
            raise ConfigurationError(
                f"retry_max_delay_seconds ({self.retry_max_delay_seconds}) must be at "
                f"least retry_base_delay_seconds ({self.retry_base_delay_seconds})"
            )
        if self.ledger_timeout_seconds <= 0:
            raise ConfigurationError(
                f"ledger_timeout_seconds must be positive, got {self.ledger_timeout_seconds}"
            )
        if self.lock_ttl_seconds <= self.retry_budget_seconds:
            raise ConfigurationError(
                f"lock_ttl_seconds ({self.lock_ttl_seconds}) must exceed the retry "
                f"budget ({self.retry_budget_seconds}s)"
            )

    @property
    def retry_budget_seconds(self) -> float:
        """Worst-case time one evaluation can spend on the ledger.

        One state read, then per attempt a submission plus a verifying
        re-read, plus the capped backoff between attempts.
        """
        return (
            self.ledger_timeout_seconds * (1 + 2 * self.max_submit_attempts)
            + (self.max_submit_attempts - 1) * self.retry_max_delay_seconds
        )

    def threshold_for(self, subject_type: SubjectType) -> float:
        if subject_type is SubjectType.PROPOSAL:
            return self.proposal_threshold
        return self.dispute_threshold

    @classmethod
    def from_environment(cls) -> "AggregationConfig":
        """Create config from environment variables with defaults.

        Returns:
            AggregationConfig with values from environment or defaults.
        """
        return cls(
            proposal_threshold=normalize_threshold(
                _get_float_env("PROPOSAL_APPROVAL_THRESHOLD", 0.70)
            ),
            dispute_threshold=normalize_threshold(_get_float_env("DISPUTE_THRESHOLD", 0.60)),
            min_votes_required=_get_int_env("MIN_PROPOSAL_VOTES", 10),
            lock_ttl_seconds=_get_float_env("AGGREGATION_LOCK_TTL", 300.0),
            max_submit_attempts=_get_int_env("LEDGER_SUBMIT_ATTEMPTS", 3),
            retry_base_delay_seconds=_get_float_env("LEDGER_RETRY_BASE_DELAY", 1.0),
            retry_max_delay_seconds=_get_float_env("LEDGER_RETRY_MAX_DELAY", 10.0),
            ledger_timeout_seconds=_get_float_env("LEDGER_TIMEOUT_SECONDS", 30.0),
        )


@dataclass(frozen=True)
class SchedulerConfig:
    """Configuration for the aggregation scheduler.

    Attributes:
        interval_seconds: Seconds between timer sweeps.
        max_concurrency: Subjects evaluated concurrently within one sweep.
        run_on_start: Whether start() sweeps immediately.
    """

    interval_seconds: float = 300.0
    max_concurrency: int = 4
    run_on_start: bool = True

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.interval_seconds <= 0:
            raise ConfigurationError(
                f"interval_seconds must be positive, got {self.interval_seconds}"
            )
        if self.max_concurrency < 1:
            raise ConfigurationError(
                f"max_concurrency must be at least 1, got {self.max_concurrency}"
            )

    @classmethod
    def from_environment(cls) -> "SchedulerConfig":
        """Create config from environment variables with defaults."""
        return cls(
            interval_seconds=_get_float_env("VOTE_AGGREGATION_INTERVAL", 300.0),
            max_concurrency=_get_int_env("AGGREGATION_MAX_CONCURRENCY", 4),
            run_on_start=_get_bool_env("AGGREGATION_RUN_ON_START", True),
        )


# Testing config with no backoff and tiny timeouts
TEST_AGGREGATION_CONFIG = AggregationConfig(
    min_votes_required=3,
    lock_ttl_seconds=30.0,
    retry_base_delay_seconds=0.0,
    retry_max_delay_seconds=0.0,
    ledger_timeout_seconds=1.0,
)
