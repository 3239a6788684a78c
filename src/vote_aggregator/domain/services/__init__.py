"""Pure domain services."""

from vote_aggregator.domain.services.decision_policy import decide, meets_threshold

__all__ = ["decide", "meets_threshold"]
