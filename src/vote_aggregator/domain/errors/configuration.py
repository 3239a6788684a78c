"""Configuration errors."""

from __future__ import annotations

from vote_aggregator.domain.exceptions import VoteAggregatorError


class ConfigurationError(VoteAggregatorError, ValueError):
    """Raised by config dataclasses when a value is invalid."""

    pass
