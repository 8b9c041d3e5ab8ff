"""
Identity slice: the current user plus authenticated / loading flags.

``is_loading`` starts ``True`` and stays there until the first status check
(triggered by the readiness detector) or a load timeout clears it.
"""
from __future__ import annotations

import dataclasses
import logging
from typing import Optional

from rankify.platform.gateway import OperationGateway
from rankify.platform.types import PlatformHandle, PlatformUser

logger = logging.getLogger(__name__)


@dataclasses.dataclass
class Session:
    user: Optional[PlatformUser] = None
    is_authenticated: bool = False
    is_loading: bool = True


class AuthSession:
    """Sign-in state backed by the platform's auth namespace."""

    def __init__(self, gateway: OperationGateway) -> None:
        self._gateway = gateway
        self.session = Session()

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def user(self) -> Optional[PlatformUser]:
        return self.session.user

    @property
    def is_authenticated(self) -> bool:
        return self.session.is_authenticated

    @property
    def is_loading(self) -> bool:
        return self.session.is_loading

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def check_auth_status(self) -> bool:
        """Query sign-in status, populate the identity, and return the outcome."""
        self.session.is_loading = True

        async def _check(platform: PlatformHandle) -> bool:
            signed_in = await platform.auth.is_signed_in()
            if signed_in:
                self._set_user(await platform.auth.get_user())
            else:
                self._clear_user()
            return signed_in

        signed_in = await self._gateway.invoke(_check)
        self.session.is_loading = False
        return bool(signed_in)

    async def sign_in(self) -> None:
        """
        Run the platform sign-in, then reconcile with ``check_auth_status``.

        The status check runs whether or not sign-in succeeded; it is the one
        that clears the loading flag.
        """
        self.session.is_loading = True
        await self._gateway.invoke(lambda p: p.auth.sign_in())
        await self.check_auth_status()

    async def sign_out(self) -> None:
        """Sign out on the platform; locally the session is always reset."""
        self.session.is_loading = True
        await self._gateway.invoke(lambda p: p.auth.sign_out())
        self.session = Session(user=None, is_authenticated=False, is_loading=False)
        logger.info("Signed out")

    async def refresh_user(self) -> None:
        self.session.is_loading = True
        user = await self._gateway.invoke(lambda p: p.auth.get_user())
        if user is not None:
            self._set_user(user)
        self.session.is_loading = False

    def stop_loading(self) -> None:
        self.session.is_loading = False

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _set_user(self, user: PlatformUser) -> None:
        self.session.user = user
        self.session.is_authenticated = True
        logger.info("Authenticated as %s", user.username)

    def _clear_user(self) -> None:
        self.session.user = None
        self.session.is_authenticated = False
