"""Service container: builds and owns every long-lived component.

One container is built per process (or per test) and handed to the API
through app.state; nothing here is a module-level singleton.

Adapter selection:
- REDIS_URL set -> Redis vote store and locks, otherwise in-memory stubs
- LEDGER_GATEWAY_URL set -> HTTP gateway client, otherwise in-memory ledger
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from dotenv import load_dotenv
from structlog import get_logger

from vote_aggregator.application.ports.ledger_client import LedgerClientProtocol
from vote_aggregator.application.ports.subject_lock import SubjectLockManagerProtocol
from vote_aggregator.application.ports.vote_store import VoteStoreProtocol
from vote_aggregator.application.services.aggregation_engine import AggregationEngine
from vote_aggregator.application.services.aggregation_scheduler import (
    AggregationScheduler,
)
from vote_aggregator.application.services.aggregation_stats_service import (
    AggregationStatsService,
    DependencyChecker,
)
from vote_aggregator.application.services.vote_intake_service import VoteIntakeService
from vote_aggregator.config.aggregation_config import AggregationConfig, SchedulerConfig
from vote_aggregator.config.infrastructure_config import (
    LedgerGatewayConfig,
    RedisConfig,
    RuntimeConfig,
)
from vote_aggregator.domain.models.ledger_subject import LedgerSubjectState
from vote_aggregator.infrastructure.adapters.ledger.gateway_client import (
    LedgerGatewayClient,
)
from vote_aggregator.infrastructure.adapters.redis.client import create_redis_client
from vote_aggregator.infrastructure.adapters.redis.subject_lock import (
    RedisSubjectLockManager,
)
from vote_aggregator.infrastructure.adapters.redis.vote_store import RedisVoteStore
from vote_aggregator.infrastructure.monitoring.aggregation_metrics import (
    AggregationMetricsCollector,
)
from vote_aggregator.infrastructure.stubs.ledger_client_stub import LedgerClientStub
from vote_aggregator.infrastructure.stubs.subject_lock_stub import SubjectLockStub
from vote_aggregator.infrastructure.stubs.vote_store_stub import VoteStoreStub

logger = get_logger()


@dataclass
class ServiceContainer:
    """Every long-lived component of the service."""

    aggregation_config: AggregationConfig
    scheduler_config: SchedulerConfig
    redis_config: RedisConfig
    ledger_config: LedgerGatewayConfig
    runtime_config: RuntimeConfig
    vote_store: VoteStoreProtocol
    lock_manager: SubjectLockManagerProtocol
    ledger_client: LedgerClientProtocol
    metrics: AggregationMetricsCollector
    engine: AggregationEngine
    scheduler: AggregationScheduler
    intake: VoteIntakeService
    stats: AggregationStatsService
    redis_client: Any = None

    async def aclose(self) -> None:
        """Stop the scheduler, then release network clients."""
        await self.scheduler.stop()
        if isinstance(self.ledger_client, LedgerGatewayClient):
            await self.ledger_client.aclose()
        if self.redis_client is not None:
            await self.redis_client.aclose()
        logger.info("service_container_closed")


def load_environment() -> None:
    """Load a .env file into os.environ (existing variables win)."""
    load_dotenv(override=False)


def build_container(
    aggregation_config: AggregationConfig | None = None,
    scheduler_config: SchedulerConfig | None = None,
    redis_config: RedisConfig | None = None,
    ledger_config: LedgerGatewayConfig | None = None,
    runtime_config: RuntimeConfig | None = None,
    vote_store: VoteStoreProtocol | None = None,
    lock_manager: SubjectLockManagerProtocol | None = None,
    ledger_client: LedgerClientProtocol | None = None,
    metrics: AggregationMetricsCollector | None = None,
) -> ServiceContainer:
    """Build the service container.

    Configs default to the environment; adapters default to what the
    configs select. Tests pass stubs or configs explicitly.
    """
    aggregation_config = aggregation_config or AggregationConfig.from_environment()
    scheduler_config = scheduler_config or SchedulerConfig.from_environment()
    redis_config = redis_config or RedisConfig.from_environment()
    ledger_config = ledger_config or LedgerGatewayConfig.from_environment()
    runtime_config = runtime_config or RuntimeConfig.from_environment()
    metrics = metrics or AggregationMetricsCollector()

    redis_client = None
    if vote_store is None or lock_manager is None:
        if redis_config.enabled:
            redis_client = create_redis_client(redis_config)
            logger.info("vote_store_initialized", store_type="Redis")
        else:
            logger.warning(
                "vote_store_initialized",
                store_type="InMemoryStub",
                message="REDIS_URL not set - votes will not persist",
            )
    if vote_store is None:
        vote_store = (
            RedisVoteStore(
                redis_client,
                vote_ttl_seconds=redis_config.vote_ttl_seconds,
                key_prefix=redis_config.key_prefix,
            )
            if redis_client is not None
            else VoteStoreStub()
        )
    if lock_manager is None:
        lock_manager = (
            RedisSubjectLockManager(redis_client)
            if redis_client is not None
            else SubjectLockStub()
        )

    if ledger_client is None:
        if ledger_config.enabled:
            ledger_client = LedgerGatewayClient(ledger_config)
            logger.info("ledger_client_initialized", client_type="Gateway")
        else:
            ledger_client = LedgerClientStub(
                program_id=ledger_config.program_id,
                default_state=LedgerSubjectState.PROPOSED,
            )
            logger.warning(
                "ledger_client_initialized",
                client_type="InMemoryStub",
                message="LEDGER_GATEWAY_URL not set - transitions are not committed",
            )

    engine = AggregationEngine(
        vote_store=vote_store,
        lock_manager=lock_manager,
        ledger_client=ledger_client,
        config=aggregation_config,
        metrics=metrics,
    )
    scheduler = AggregationScheduler(
        engine=engine,
        vote_store=vote_store,
        config=scheduler_config,
        metrics=metrics,
    )
    checkers = [DependencyChecker(vote_store.ping, "vote_store")]
    if isinstance(ledger_client, LedgerGatewayClient):
        checkers.append(DependencyChecker(ledger_client.health_check, "ledger_gateway"))

    return ServiceContainer(
        aggregation_config=aggregation_config,
        scheduler_config=scheduler_config,
        redis_config=redis_config,
        ledger_config=ledger_config,
        runtime_config=runtime_config,
        vote_store=vote_store,
        lock_manager=lock_manager,
        ledger_client=ledger_client,
        metrics=metrics,
        engine=engine,
        scheduler=scheduler,
        intake=VoteIntakeService(vote_store, metrics=metrics),
        stats=AggregationStatsService(vote_store, engine, scheduler, checkers=checkers),
        redis_client=redis_client,
    )
