"""Sweep summary DTO.

One SweepSummary is produced per scheduler sweep, timer-driven or manual.
API routes convert it to the trigger response model.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from vote_aggregator.domain.models.decision import (
    AggregationDecision,
    EvaluationStatus,
    SubjectEvaluation,
)
from vote_aggregator.domain.models.vote import SubjectRef


@dataclass(frozen=True)
class SweepSummary:
    """Result of one aggregation sweep.

    Attributes:
        started_at: When the sweep began (UTC).
        finished_at: When the last evaluation completed (UTC).
        subjects_evaluated: Pending subjects the sweep picked up.
        results: One evaluation per subject, in the same order.
        trigger: "timer" or "manual".
    """

    started_at: datetime
    finished_at: datetime
    subjects_evaluated: list[SubjectRef] = field(default_factory=list)
    results: list[SubjectEvaluation] = field(default_factory=list)
    trigger: str = "timer"

    @property
    def decisions(self) -> list[AggregationDecision]:
        """Decisions that were made (quorum misses included)."""
        return [r.decision for r in self.results if r.decision is not None]

    @property
    def counts(self) -> dict[str, int]:
        """Evaluation count per status, every status present."""
        tally = Counter(r.status for r in self.results)
        return {status.value: tally.get(status, 0) for status in EvaluationStatus}

    @property
    def failures(self) -> list[SubjectEvaluation]:
        return [r for r in self.results if r.status.is_failure]

    @property
    def duration_seconds(self) -> float:
        return (self.finished_at - self.started_at).total_seconds()

    def to_dict(self) -> dict[str, Any]:
        return {
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat(),
            "trigger": self.trigger,
            "subjects_evaluated": [s.to_dict() for s in self.subjects_evaluated],
            "decisions": [d.to_dict() for d in self.decisions],
            "results": [r.to_dict() for r in self.results],
            "counts": self.counts,
        }
