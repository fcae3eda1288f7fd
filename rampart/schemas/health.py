"""Pydantic schemas for health check responses."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response body for the health check endpoint."""

    status: Literal["ok"] = Field(default="ok", description="Service status")
    environment: str = Field(description="Current app environment (e.g. dev, prod)")
    database: Literal["connected", "disconnected"] | None = Field(
        default=None,
        description="Database connectivity status when check is performed",
    )
    duplicate_key_algorithm: Literal["sha256", "legacy32"] = Field(
        description="Hash used for derived record keys; changing it re-keys derived records",
    )
    last_ingestion_status: str | None = Field(
        default=None,
        description="Status of the most recent ingestion attempt (SUCCESS, PARTIAL, FAILED, PENDING)",
    )
    last_ingestion_at: datetime | None = None
