"""
Metadata API endpoints for version and build information.

Exposes the build identity together with the set of bank layouts this
build can decode, so a client can tell which banks a deployment supports.
"""

import os
from datetime import datetime, timezone
from typing import List

from fastapi import APIRouter
from pydantic import BaseModel, Field

from app.core.config import settings
from app.services.bank.returns import registered_layouts


class VersionResponse(BaseModel):
    """
    Response model for version information.

    Attributes:
        app_name: Configured application name.
        git_sha: The Git commit SHA of the current build, or "unknown" if not available.
        build_time: The timestamp when the application was built, or current time as fallback.
        env_name: The environment name (e.g., "production", "development").
        bank_codes: Bank codes with a registered layout, in detection order.
    """

    app_name: str = Field(description="Configured application name")
    git_sha: str = Field(
        description="Git commit SHA identifying the current build version"
    )
    build_time: str = Field(
        description="ISO 8601 formatted timestamp of when the application was built"
    )
    env_name: str = Field(description="Environment name (production/development)")
    bank_codes: List[str] = Field(description="Bank codes the decoder recognizes")

    class Config:
        """Pydantic model configuration."""

        json_schema_extra = {
            "example": {
                "app_name": "Bank Return Decoder",
                "git_sha": "abc123def456",
                "build_time": "2025-08-13T10:30:00+00:00",
                "env_name": "production",
                "bank_codes": ["001", "341", "237"],
            }
        }


router = APIRouter(prefix="/meta", tags=["metadata"])


@router.get(
    "/version",
    response_model=VersionResponse,
    summary="Get application version information",
)
async def get_version() -> VersionResponse:
    """
    Retrieve version and build information for the application.

    Example:
        GET /api/v1/meta/version
    """
    git_sha = os.getenv("GIT_SHA", "unknown")
    build_time = os.getenv("BUILD_TIME") or datetime.now(timezone.utc).isoformat()

    return VersionResponse(
        app_name=settings.APP_NAME,
        git_sha=git_sha,
        build_time=build_time,
        env_name=settings.ENV,
        bank_codes=[layout.bank_code for layout in registered_layouts()],
    )
