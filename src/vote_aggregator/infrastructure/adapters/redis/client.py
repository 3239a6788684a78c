"""Redis client construction and error mapping."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import redis.asyncio as aioredis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from vote_aggregator.config.infrastructure_config import RedisConfig
from vote_aggregator.domain.errors import StoreUnavailableError


def create_redis_client(config: RedisConfig) -> "aioredis.Redis[Any]":
    """Build an asyncio Redis client that returns str responses."""
    return aioredis.from_url(config.url, decode_responses=True)


@contextmanager
def store_unavailable_on_io_error(operation: str) -> Iterator[None]:
    """Translate Redis connectivity failures into StoreUnavailableError."""
    try:
        yield
    except (RedisConnectionError, RedisTimeoutError) as e:
        raise StoreUnavailableError(operation, str(e)) from e
