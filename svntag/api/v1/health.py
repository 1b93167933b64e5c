"""Health check endpoints."""

import shutil
from datetime import datetime

from fastapi import APIRouter
from pydantic import BaseModel

from svntag import __version__
from svntag.config import settings

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "healthy"
    version: str
    environment: str
    svn_available: bool
    timestamp: datetime


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Check API health status."""
    return HealthResponse(
        status="healthy",
        version=__version__,
        environment=settings.app_env,
        svn_available=shutil.which(settings.svn_binary) is not None,
        timestamp=datetime.utcnow(),
    )
