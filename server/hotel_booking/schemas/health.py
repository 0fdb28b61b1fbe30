"""Health-related Pydantic schemas."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class HealthStatus(str, Enum):
    """Health status enumeration."""
    HEALTHY = "healthy"
    READY = "ready"
    UNAVAILABLE = "unavailable"


class HealthResponse(BaseModel):
    """Liveness response schema."""

    status: HealthStatus = Field(..., description="Service status")
    timestamp: datetime = Field(..., description="Current server time (ISO 8601)")
    version: str = Field(..., description="API version")


class ReadinessResponse(BaseModel):
    """Readiness response schema with per-dependency results."""

    status: HealthStatus = Field(..., description="Overall readiness")
    checks: dict[str, str] = Field(default_factory=dict, description="Dependency name to 'ok' or error")
