"""Unit tests for the HTTP surface, backed by in-memory stubs.

Key Test Scenarios:
1. Vote intake: 201 on success, 422 on malformed input, 503 when the store is down
2. Tally reflects last-write-wins ballots
3. Manual trigger returns per-subject results
4. Stats, health, metrics
5. Correlation id echo and vote rate limiting
"""

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient
from prometheus_client import CollectorRegistry

from tests.helpers import address, voters
from vote_aggregator.api.main import create_app
from vote_aggregator.bootstrap.container import ServiceContainer, build_container
from vote_aggregator.config import (
    TEST_AGGREGATION_CONFIG,
    LedgerGatewayConfig,
    RedisConfig,
    RuntimeConfig,
    SchedulerConfig,
)
from vote_aggregator.infrastructure.monitoring.aggregation_metrics import (
    AggregationMetricsCollector,
)
from vote_aggregator.infrastructure.stubs import VoteStoreStub

SUBJECT = address(1)
VOTER = address(2)


@pytest.fixture
def container() -> ServiceContainer:
    return build_container(
        aggregation_config=TEST_AGGREGATION_CONFIG,
        scheduler_config=SchedulerConfig(interval_seconds=3600, run_on_start=False),
        redis_config=RedisConfig(),
        ledger_config=LedgerGatewayConfig(),
        runtime_config=RuntimeConfig(environment="test", vote_rate_limit_per_minute=50),
        metrics=AggregationMetricsCollector(registry=CollectorRegistry()),
    )


@pytest.fixture
def client(container: ServiceContainer) -> Iterator[TestClient]:
    with TestClient(create_app(container)) as test_client:
        yield test_client


def _vote(voter: str = VOTER, choice: bool = True, **extra) -> dict:
    return {
        "subject_type": "proposal",
        "subject_id": SUBJECT,
        "voter_id": voter,
        "choice": choice,
        **extra,
    }


class TestCastVote:
    def test_accepts_vote(self, client: TestClient) -> None:
        response = client.post("/v1/votes", json=_vote(weight=2.5))

        assert response.status_code == 201
        body = response.json()
        assert body["vote_id"].startswith("PV-")
        assert body["weight"] == 2.5
        assert body["cast_at"].endswith("Z")

    def test_default_weight(self, client: TestClient) -> None:
        response = client.post("/v1/votes", json=_vote())
        assert response.json()["weight"] == 1.0

    @pytest.mark.parametrize(
        "overrides",
        [
            {"subject_id": "market-1"},
            {"voter_id": "0OIl" * 10},
            {"subject_type": "poll"},
            {"weight": 0},
            {"weight": -1},
        ],
    )
    def test_rejects_malformed_vote(self, client: TestClient, overrides: dict) -> None:
        response = client.post("/v1/votes", json={**_vote(), **overrides})
        assert response.status_code == 422

    def test_store_outage_returns_503(
        self, client: TestClient, container: ServiceContainer
    ) -> None:
        assert isinstance(container.vote_store, VoteStoreStub)
        container.vote_store.set_unavailable()

        response = client.post("/v1/votes", json=_vote())

        assert response.status_code == 503
        assert response.headers["Retry-After"] == "5"
        assert response.json()["detail"]["type"] == "urn:vote-aggregator:store-unavailable"

    def test_rate_limited(self) -> None:
        container = build_container(
            aggregation_config=TEST_AGGREGATION_CONFIG,
            scheduler_config=SchedulerConfig(run_on_start=False),
            redis_config=RedisConfig(),
            ledger_config=LedgerGatewayConfig(),
            runtime_config=RuntimeConfig(environment="test", vote_rate_limit_per_minute=2),
            metrics=AggregationMetricsCollector(registry=CollectorRegistry()),
        )
        with TestClient(create_app(container)) as limited:
            statuses = [
                limited.post("/v1/votes", json=_vote(voter)).status_code
                for voter in voters(3)
            ]
            last = limited.post("/v1/votes", json=_vote())

        assert statuses == [201, 201, 429]
        assert last.headers["X-RateLimit-Remaining"] == "0"


class TestTally:
    def test_tally_uses_latest_ballot(self, client: TestClient) -> None:
        client.post("/v1/votes", json=_vote(choice=True))
        client.post("/v1/votes", json=_vote(choice=False))
        client.post("/v1/votes", json=_vote(address(3), choice=True))

        response = client.get(f"/v1/votes/proposal/{SUBJECT}/tally")

        assert response.status_code == 200
        body = response.json()
        assert body["total_voters"] == 2
        assert body["approve_weight"] == 1.0
        assert body["reject_weight"] == 1.0
        assert body["approval_ratio"] == 0.5

    def test_malformed_subject(self, client: TestClient) -> None:
        response = client.get("/v1/votes/proposal/market-1/tally")

        assert response.status_code == 422
        assert response.json()["detail"]["field"] == "subject_id"


class TestAggregation:
    def test_trigger_commits_ready_subjects(self, client: TestClient) -> None:
        for voter in voters(3):
            client.post("/v1/votes", json=_vote(voter))

        response = client.post("/v1/aggregation/trigger")

        assert response.status_code == 200
        body = response.json()
        assert body["counts"]["SUBMITTED"] == 1
        assert body["results"][0]["outcome"] == "APPROVED"
        assert body["results"][0]["receipt"]["transition"] == "approve"
        assert body["subjects_evaluated"] == [
            {"subject_type": "proposal", "subject_id": SUBJECT}
        ]

        again = client.post("/v1/aggregation/trigger").json()
        assert again["results"] == []

    def test_trigger_below_quorum(self, client: TestClient) -> None:
        client.post("/v1/votes", json=_vote())

        body = client.post("/v1/aggregation/trigger").json()

        assert body["results"][0]["status"] == "INSUFFICIENT_QUORUM"
        assert body["decisions"][0]["total_voters"] == 1

    def test_trigger_store_outage(
        self, client: TestClient, container: ServiceContainer
    ) -> None:
        container.vote_store.set_unavailable()
        assert client.post("/v1/aggregation/trigger").status_code == 503

    def test_stats(self, client: TestClient) -> None:
        client.post("/v1/votes", json=_vote())

        body = client.get("/v1/aggregation/stats").json()

        assert body["pending_proposals"] == 1
        assert body["pending_disputes"] == 0
        assert body["scheduler_state"] == "RUNNING"
        assert body["proposal_threshold"] == 0.7


class TestHealthAndMetrics:
    def test_healthy(self, client: TestClient) -> None:
        response = client.get("/v1/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["checks"]["vote_store"]["healthy"] is True

    def test_degraded(self, client: TestClient, container: ServiceContainer) -> None:
        container.vote_store.set_unavailable()

        response = client.get("/v1/health")

        assert response.status_code == 503
        assert response.json()["status"] == "degraded"

    def test_metrics(self, client: TestClient) -> None:
        client.post("/v1/votes", json=_vote())

        response = client.get("/v1/metrics")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert "votes_cast_total{" in response.text

    def test_correlation_id_is_echoed(self, client: TestClient) -> None:
        response = client.get("/v1/health", headers={"X-Correlation-ID": "req-42"})
        assert response.headers["X-Correlation-ID"] == "req-42"

    def test_correlation_id_is_generated(self, client: TestClient) -> None:
        response = client.get("/v1/health")
        assert response.headers["X-Correlation-ID"]
