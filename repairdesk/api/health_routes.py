"""
Health Check Routes

- Basic service health (/api/health)
- Readiness probe (/api/health/ready), pings MongoDB
- Liveness probe (/api/health/live)
"""

import logging
import time
from typing import Dict, Optional

from fastapi import APIRouter, Response, status
from pydantic import BaseModel

from repairdesk import __version__
from repairdesk.config import settings
from repairdesk.database import get_client as get_mongo_client
from repairdesk.utils.clock import utcnow


logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["health"])

# Track service start time
SERVICE_START_TIME = time.time()


class HealthStatus(BaseModel):
    """Health check response model"""
    status: str  # "healthy" | "unhealthy"
    timestamp: str
    uptime_seconds: float
    version: str
    environment: Optional[str] = None


@router.get("/health", response_model=HealthStatus)
async def health_check() -> HealthStatus:
    """
    Basic health check endpoint

    Returns 200 if service is running.
    """
    uptime = time.time() - SERVICE_START_TIME

    return HealthStatus(
        status="healthy",
        timestamp=utcnow().isoformat(),
        uptime_seconds=round(uptime, 2),
        version=__version__,
        environment=settings.environment,
    )


@router.get("/health/ready")
async def readiness_check(response: Response) -> Dict[str, str]:
    """
    Readiness probe

    Returns:
        200: MongoDB answers a ping
        503: Not ready (don't send traffic)
    """
    if not await _mongodb_is_up():
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return {
            "status": "not_ready",
            "reason": "MongoDB unavailable"
        }

    return {"status": "ready"}


@router.get("/health/live")
async def liveness_check() -> Dict[str, str]:
    """Liveness probe: if this endpoint responds, the service is alive"""
    return {"status": "alive"}


async def _mongodb_is_up() -> bool:
    start_time = time.time()
    try:
        await get_mongo_client().admin.command('ping')
    except Exception as e:
        logger.error(f"MongoDB health check failed: {e}")
        return False

    response_time = (time.time() - start_time) * 1000
    if response_time > 500:
        logger.warning(f"MongoDB ping took {response_time:.0f}ms")
    return True
