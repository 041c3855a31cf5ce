"""Pydantic schemas for health check responses."""

from typing import Literal

from pydantic import Field

from accounts_api.schemas.common import CamelModel


class HealthResponse(CamelModel):
    """Payload of the health check endpoint."""

    status: Literal["ok"] = Field(default="ok", description="Service status")
    environment: str = Field(description="Current app environment (dev or prod)")
    database: Literal["connected", "disconnected"] = Field(
        description="Database connectivity status",
    )
    media_configured: bool = Field(
        default=False,
        description="True when media host credentials are set",
    )
