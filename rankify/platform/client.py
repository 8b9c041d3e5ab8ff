"""
The platform client: one explicit context object per process.

Owns the error channel, the handle locator, the operation gateway, the
readiness detector and the four capability slices.  It is constructed once
(at application startup, or per test) and passed to whatever needs it.
"""
from __future__ import annotations

import logging
from typing import Optional

from rankify.platform.auth import AuthSession
from rankify.platform.errors import ErrorChannel
from rankify.platform.files import FileStore
from rankify.platform.gateway import OperationGateway
from rankify.platform.inference import InferenceClient
from rankify.platform.kv import KeyValueStore
from rankify.platform.locator import PlatformLocator
from rankify.platform.readiness import ReadinessDetector

logger = logging.getLogger(__name__)


class PlatformClient:
    def __init__(
        self,
        locator: Optional[PlatformLocator] = None,
        poll_interval_ms: Optional[int] = None,
        timeout_ms: Optional[int] = None,
        feedback_model: Optional[str] = None,
    ) -> None:
        self.errors = ErrorChannel()
        self.locator = locator or PlatformLocator()
        self.gateway = OperationGateway(self.locator, self.errors)

        self.auth = AuthSession(self.gateway)
        self.fs = FileStore(self.gateway)
        self.ai = InferenceClient(self.gateway, feedback_model=feedback_model)
        self.kv = KeyValueStore(self.gateway)

        self.readiness = ReadinessDetector(
            self.locator,
            self.errors,
            on_ready=self.auth.check_auth_status,
            on_timeout=self.auth.stop_loading,
            poll_interval_ms=poll_interval_ms,
            timeout_ms=timeout_ms,
        )

    @property
    def ready(self) -> bool:
        return self.readiness.ready

    @property
    def global_error(self) -> Optional[str]:
        return self.errors.message

    def clear_error(self) -> None:
        self.errors.clear()

    def initialize(self) -> None:
        self.readiness.initialize()

    async def close(self) -> None:
        await self.readiness.close()
