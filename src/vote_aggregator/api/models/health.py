"""Health API response models."""

from pydantic import BaseModel


class DependencyCheckModel(BaseModel):
    healthy: bool
    latency_ms: float | None = None
    error: str | None = None


class HealthResponse(BaseModel):
    """Health status with dependency checks."""

    status: str
    scheduler_state: str
    uptime_seconds: float
    checks: dict[str, DependencyCheckModel]
