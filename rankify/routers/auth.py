"""
Authentication endpoints.

GET  /status      — current session (user, authenticated, loading, last error)
POST /sign-in     — platform sign-in, then a status check
POST /sign-out    — platform sign-out; the local session is always cleared
POST /refresh     — re-fetch the signed-in user
POST /clear-error — reset the platform error channel
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from rankify.dependencies.auth import get_platform
from rankify.models.schemas import AuthStatusResponse, UserResponse
from rankify.platform.client import PlatformClient

logger = logging.getLogger(__name__)

router = APIRouter()


def _auth_status(platform: PlatformClient) -> AuthStatusResponse:
    user = platform.auth.user
    return AuthStatusResponse(
        user=UserResponse(uid=user.uid, username=user.username, email=user.email) if user else None,
        is_authenticated=platform.auth.is_authenticated,
        is_loading=platform.auth.is_loading,
        error=platform.global_error,
    )


@router.get("/status", response_model=AuthStatusResponse)
async def auth_status(platform: PlatformClient = Depends(get_platform)) -> AuthStatusResponse:
    return _auth_status(platform)


@router.post("/sign-in", response_model=AuthStatusResponse)
async def sign_in(platform: PlatformClient = Depends(get_platform)) -> AuthStatusResponse:
    """
    Sign in on the platform.

    Failures are not raised: the response carries ``is_authenticated=false``
    and the platform's error message.
    """
    await platform.auth.sign_in()
    if not platform.auth.is_authenticated:
        logger.warning("sign_in: still unauthenticated (%s)", platform.global_error)
    return _auth_status(platform)


@router.post("/sign-out", response_model=AuthStatusResponse)
async def sign_out(platform: PlatformClient = Depends(get_platform)) -> AuthStatusResponse:
    await platform.auth.sign_out()
    return _auth_status(platform)


@router.post("/refresh", response_model=AuthStatusResponse)
async def refresh_user(platform: PlatformClient = Depends(get_platform)) -> AuthStatusResponse:
    await platform.auth.refresh_user()
    return _auth_status(platform)


@router.post("/clear-error", response_model=AuthStatusResponse)
async def clear_error(platform: PlatformClient = Depends(get_platform)) -> AuthStatusResponse:
    platform.clear_error()
    return _auth_status(platform)
