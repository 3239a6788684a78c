"""
API layer - FastAPI routes and HTTP concerns for the vote aggregator.

This layer contains:
- FastAPI route definitions
- Request/Response models
- HTTP middleware (request logging, vote rate limiting)

Services are resolved from the ServiceContainer on app.state.
"""

__all__: list[str] = []
