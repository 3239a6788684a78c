"""FastAPI application entry point for the vote aggregator."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from structlog import get_logger

from vote_aggregator import __version__
from vote_aggregator.api.middleware.logging_middleware import LoggingMiddleware
from vote_aggregator.api.middleware.rate_limiter import VoteRateLimiter
from vote_aggregator.api.routes import (
    aggregation_router,
    health_router,
    metrics_router,
    votes_router,
)
from vote_aggregator.bootstrap.container import (
    ServiceContainer,
    build_container,
    load_environment,
)
from vote_aggregator.bootstrap.logging import configure_logging

logger = get_logger()


def create_app(container: ServiceContainer | None = None) -> FastAPI:
    """Create the application.

    Args:
        container: Prebuilt services. If None, one is built from the
            environment (and an optional .env file) at startup.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        services = container
        if services is None:
            load_environment()
            services = build_container()
        configure_logging(services.runtime_config)

        app.state.container = services
        app.state.vote_rate_limiter = VoteRateLimiter(
            requests_per_minute=services.runtime_config.vote_rate_limit_per_minute,
            trust_forwarded_for=services.runtime_config.trust_forwarded_for,
        )

        await services.scheduler.start()
        logger.info(
            "vote_aggregator_started",
            version=__version__,
            environment=services.runtime_config.environment,
        )
        try:
            yield
        finally:
            await services.aclose()
            logger.info("vote_aggregator_stopped")

    app = FastAPI(
        title="Vote Aggregator API",
        description="Off-chain vote staging and on-chain decision commits",
        version=__version__,
        lifespan=lifespan,
    )
    app.add_middleware(LoggingMiddleware)

    app.include_router(health_router)
    app.include_router(votes_router)
    app.include_router(aggregation_router)
    app.include_router(metrics_router)

    return app
