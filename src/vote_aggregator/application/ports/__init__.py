"""Application ports (abstract interfaces implemented by infrastructure)."""

from vote_aggregator.application.ports.aggregation_metrics import AggregationMetricsProtocol
from vote_aggregator.application.ports.ledger_client import LedgerClientProtocol
from vote_aggregator.application.ports.subject_lock import SubjectLockManagerProtocol
from vote_aggregator.application.ports.vote_store import VoteStoreProtocol

__all__ = [
    "AggregationMetricsProtocol",
    "LedgerClientProtocol",
    "SubjectLockManagerProtocol",
    "VoteStoreProtocol",
]
