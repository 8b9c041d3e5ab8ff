"""
Health check endpoint.
"""
from fastapi import APIRouter, Depends
from datetime import datetime
import logging

from rankify import __version__
from rankify.dependencies.auth import get_platform
from rankify.models.schemas import HealthCheckResponse
from rankify.platform.client import PlatformClient

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=HealthCheckResponse)
async def health_check(platform: PlatformClient = Depends(get_platform)):
    """
    Health check endpoint to verify platform status.

    Returns:
        HealthCheckResponse with platform readiness, the last platform error
        and whether a user is signed in
    """
    overall_status = "healthy" if platform.ready and not platform.global_error else "degraded"
    if not platform.ready:
        logger.warning("Health check: platform not ready (%s)", platform.global_error)

    return HealthCheckResponse(
        status=overall_status,
        platform_ready=platform.ready,
        global_error=platform.global_error,
        is_authenticated=platform.auth.is_authenticated,
        timestamp=datetime.utcnow(),
        version=__version__,
    )
