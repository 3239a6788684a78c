"""API routers."""

from vote_aggregator.api.routes.aggregation import router as aggregation_router
from vote_aggregator.api.routes.health import router as health_router
from vote_aggregator.api.routes.metrics import router as metrics_router
from vote_aggregator.api.routes.votes import router as votes_router

__all__ = ["aggregation_router", "health_router", "metrics_router", "votes_router"]
