# =============================================================================
# app/routers/health.py - Health and Configuration Status Endpoints
# =============================================================================
# Provides status endpoints for monitoring and for checking the mail setup.
# Credentials are only ever reported as present or missing.
# =============================================================================

from datetime import datetime, timezone
from typing import Literal

from fastapi import APIRouter
from pydantic import BaseModel

from app.dependencies import SettingsDep

router = APIRouter()


# =============================================================================
# Response Models
# =============================================================================

class StatusResponse(BaseModel):
    """Root status response."""
    status: str
    timestamp: str
    endpoints: list[str]


class ConfigStatusResponse(BaseModel):
    """Mail credential presence flags."""
    emailConfigured: bool
    emailUser: Literal["Configured", "Missing"]
    emailPass: Literal["Configured", "Missing"]


def _presence(value: str | None) -> Literal["Configured", "Missing"]:
    return "Configured" if value else "Missing"


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/", response_model=StatusResponse)
async def root_status():
    """
    Health check endpoint.

    Returns server status, current time and the available endpoints.
    """
    return StatusResponse(
        status="Server is running",
        timestamp=datetime.now(timezone.utc).isoformat(),
        endpoints=["/send-message"],
    )


@router.get("/test", response_model=ConfigStatusResponse)
async def config_status(config: SettingsDep):
    """
    Report whether the mail credentials are set.

    Never returns the values themselves.
    """
    return ConfigStatusResponse(
        emailConfigured=config.email_configured,
        emailUser=_presence(config.EMAIL_USER),
        emailPass=_presence(config.EMAIL_PASS),
    )
