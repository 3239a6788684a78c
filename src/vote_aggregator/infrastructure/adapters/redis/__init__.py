"""Redis adapters for the vote store and subject locks."""

from vote_aggregator.infrastructure.adapters.redis.client import (
    create_redis_client,
    store_unavailable_on_io_error,
)
from vote_aggregator.infrastructure.adapters.redis.subject_lock import (
    RedisSubjectLockManager,
)
from vote_aggregator.infrastructure.adapters.redis.vote_store import RedisVoteStore

__all__ = [
    "RedisSubjectLockManager",
    "RedisVoteStore",
    "create_redis_client",
    "store_unavailable_on_io_error",
]
