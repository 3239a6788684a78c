"""API middleware."""

from vote_aggregator.api.middleware.logging_middleware import (
    CORRELATION_HEADER,
    LoggingMiddleware,
)
from vote_aggregator.api.middleware.rate_limiter import VoteRateLimiter

__all__ = ["CORRELATION_HEADER", "LoggingMiddleware", "VoteRateLimiter"]
