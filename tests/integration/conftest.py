"""
Integration test configuration with testcontainers.

Provides a session-scoped Redis 7 container and a per-test asyncio client.
Redis state is flushed after each test.

Usage:
    @pytest.mark.integration
    async def test_example(redis_client: Redis) -> None:
        ...

Note: Docker must be running for these fixtures to work.
"""

from collections.abc import AsyncGenerator, Generator
from typing import Any

import pytest
import redis.asyncio as aioredis
from testcontainers.redis import RedisContainer


@pytest.fixture(scope="session")
def redis_container() -> Generator[RedisContainer, None, None]:
    """Session-scoped Redis 7 container, started once per test session."""
    with RedisContainer("redis:7-alpine") as redis_cont:
        yield redis_cont


@pytest.fixture
async def redis_client(
    redis_container: RedisContainer,
) -> AsyncGenerator[aioredis.Redis, None]:  # type: ignore[type-arg]
    """Per-test Redis client (str responses) with FLUSHDB isolation."""
    host = redis_container.get_container_host_ip()
    port = redis_container.get_exposed_port(6379)

    client: aioredis.Redis[Any] = aioredis.Redis(
        host=host, port=int(port), decode_responses=True
    )

    yield client

    await client.flushdb()
    await client.aclose()
