"""Pydantic schemas for health check responses."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

CheckStatus = Literal["ok", "error"]


class HealthResponse(BaseModel):
    """Response body for GET /health."""

    status: Literal["ok"] = Field(default="ok", description="Service status")
    timestamp: datetime
    uptime: float = Field(description="Seconds since the process started")
    environment: str = Field(description="Current app environment (e.g. dev, prod)")
    version: str


class ReadinessChecks(BaseModel):
    database: CheckStatus
    configuration: CheckStatus


class ReadinessResponse(BaseModel):
    """Response body for GET /health/ready; 503 when status is not_ready."""

    status: Literal["ready", "not_ready"]
    timestamp: datetime
    checks: ReadinessChecks


class LivenessResponse(BaseModel):
    status: Literal["alive"] = "alive"
    timestamp: datetime
