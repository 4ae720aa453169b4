"""Pydantic schemas for the API status and health check responses."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response body for the health check endpoint."""

    status: Literal["ok"] = Field(default="ok", description="Service status")
    environment: str = Field(description="Current app environment (dev, test or prod)")
    database: Literal["connected", "disconnected"] | None = Field(
        default=None,
        description="Database connectivity status when check is performed",
    )


class ApiStatusResponse(BaseModel):
    """Response body for GET on the API prefix root."""

    message: str = "API is live"
    status: Literal["OK"] = "OK"
    version: str
    timestamp: datetime = Field(serialization_alias="timeStamp")
