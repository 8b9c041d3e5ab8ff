"""
Platform and authentication dependencies for FastAPI routes.

The PlatformClient is created once in the application lifespan and stored on
``app.state.platform``; routes receive it through ``get_platform``.
"""
from __future__ import annotations

import logging

from fastapi import Depends, HTTPException, Request, status

from rankify.platform.client import PlatformClient
from rankify.platform.types import PlatformUser

logger = logging.getLogger(__name__)


async def get_platform(request: Request) -> PlatformClient:
    """Return the process-wide PlatformClient. Raises 503 if startup has not created it."""
    platform = getattr(request.app.state, "platform", None)
    if platform is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Platform client is not initialised.",
        )
    return platform


async def get_current_user(
    platform: PlatformClient = Depends(get_platform),
) -> PlatformUser:
    """Return the signed-in user. Raises 401 if the session is not authenticated."""
    auth = platform.auth
    if not auth.is_authenticated or auth.user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not signed in. POST /api/auth/sign-in first.",
        )
    return auth.user
