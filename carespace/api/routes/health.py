"""
Health Check Endpoint

Reports process status, uptime and the size of the loaded data set.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, status
from pydantic import BaseModel

from carespace import __version__
from carespace.config import settings
from carespace.infra.store import get_entity_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["Health"])

# Track application start time for uptime calculation
_start_time: Optional[datetime] = None


def set_start_time() -> None:
    """Set application start time. Called once on startup."""
    global _start_time
    _start_time = datetime.now(timezone.utc)


def get_uptime_seconds() -> Optional[float]:
    """Get application uptime in seconds."""
    if _start_time is None:
        return None
    return (datetime.now(timezone.utc) - _start_time).total_seconds()


class HealthResponse(BaseModel):
    """Health check response with data set sizes."""
    status: str
    timestamp: datetime
    version: str
    environment: str
    uptime_seconds: Optional[float] = None
    data: dict[str, int]


@router.get(
    "",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check",
    description="Returns 200 if the application is running, with the loaded entity counts.",
)
def health() -> HealthResponse:
    """
    Basic health check.

    Always returns 200 if the application is running. An empty data
    set is reported in `data`, not as a failure.
    """
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
        version=__version__,
        environment=settings.app_env,
        uptime_seconds=get_uptime_seconds(),
        data=get_entity_store().stats(),
    )
