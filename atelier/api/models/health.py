"""Health check response model."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: Literal["healthy", "degraded"]
    version: str
    provider: str = Field(..., description="Active model provider")
    jobs_available: bool = Field(..., description="Whether background jobs are queued remotely")
    timestamp: datetime
