"""In-memory port implementations for development and tests."""

from vote_aggregator.infrastructure.stubs.ledger_client_stub import LedgerClientStub
from vote_aggregator.infrastructure.stubs.subject_lock_stub import SubjectLockStub
from vote_aggregator.infrastructure.stubs.vote_store_stub import VoteStoreStub

__all__ = ["LedgerClientStub", "SubjectLockStub", "VoteStoreStub"]
