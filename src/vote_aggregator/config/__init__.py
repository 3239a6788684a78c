"""Configuration module for the vote aggregator.

Available Configurations:
- AggregationConfig: Thresholds, quorum and retry budget
- SchedulerConfig: Sweep interval and concurrency
- RedisConfig: Vote cache connection and expiry
- LedgerGatewayConfig: Ledger gateway connection
- RuntimeConfig: Logging and rate limits
"""

from vote_aggregator.config.aggregation_config import (
    TEST_AGGREGATION_CONFIG,
    AggregationConfig,
    SchedulerConfig,
    normalize_threshold,
)
from vote_aggregator.config.infrastructure_config import (
    LedgerGatewayConfig,
    RedisConfig,
    RuntimeConfig,
)

__all__ = [
    "AggregationConfig",
    "LedgerGatewayConfig",
    "RedisConfig",
    "RuntimeConfig",
    "SchedulerConfig",
    "TEST_AGGREGATION_CONFIG",
    "normalize_threshold",
]
