"""
Pytest configuration and shared fixtures for vote aggregator tests.

Testing Standards:
- Async tests run under pytest-asyncio (auto mode enabled in pyproject.toml)
- Unit tests use the in-memory stubs from vote_aggregator.infrastructure.stubs
- Unit tests go in tests/unit/
- Integration tests go in tests/integration/ and need Docker
"""

import pytest

from vote_aggregator.config.aggregation_config import TEST_AGGREGATION_CONFIG
from vote_aggregator.infrastructure.stubs import (
    LedgerClientStub,
    SubjectLockStub,
    VoteStoreStub,
)


@pytest.fixture
def anyio_backend() -> str:
    """Use asyncio as the async backend."""
    return "asyncio"


@pytest.fixture
def project_version() -> str:
    """Provide the current project version for tests."""
    from vote_aggregator import __version__

    return __version__


@pytest.fixture
def vote_store() -> VoteStoreStub:
    return VoteStoreStub()


@pytest.fixture
def lock_manager() -> SubjectLockStub:
    return SubjectLockStub()


@pytest.fixture
def ledger() -> LedgerClientStub:
    return LedgerClientStub()


@pytest.fixture
def aggregation_config():
    return TEST_AGGREGATION_CONFIG
