"""
Readiness detection for the late-binding platform handle.

The handle is polled on a fixed interval inside a single asyncio task bounded
by ``asyncio.wait_for``; when either the handle appears or the timeout fires,
the one task ends, so there is never a poll loop left running on its own.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

from rankify.config import settings
from rankify.platform.errors import ErrorChannel, ErrorKind, platform_load_timeout_message
from rankify.platform.locator import PlatformLocator

logger = logging.getLogger(__name__)


class ReadinessDetector:
    """
    Waits for the platform handle and hands over to the auth status check.

    * ``initialize()`` is idempotent: it does nothing while a wait is active or
      once the platform is ready.  After a timeout it may be called again to
      start a fresh wait.
    * ``on_ready`` is awaited exactly once per successful detection.
    * ``on_timeout`` runs after the load-timeout message has been recorded.
    """

    def __init__(
        self,
        locator: PlatformLocator,
        errors: ErrorChannel,
        on_ready: Callable[[], Awaitable[Any]],
        on_timeout: Callable[[], None],
        poll_interval_ms: Optional[int] = None,
        timeout_ms: Optional[int] = None,
    ) -> None:
        self._locator = locator
        self._errors = errors
        self._on_ready = on_ready
        self._on_timeout = on_timeout
        self.poll_interval_ms = (
            settings.PLATFORM_POLL_INTERVAL_MS if poll_interval_ms is None else poll_interval_ms
        )
        self.timeout_ms = settings.PLATFORM_LOAD_TIMEOUT_MS if timeout_ms is None else timeout_ms
        self.ready = False
        self.poll_ticks = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def is_waiting(self) -> bool:
        return self._task is not None and not self._task.done()

    def initialize(self) -> None:
        if self.ready or self.is_waiting:
            logger.debug("initialize: already ready or waiting, ignoring")
            return

        loop = asyncio.get_running_loop()
        if self._locator.resolve() is not None:
            self._mark_ready()
            self._task = loop.create_task(self._on_ready())
            return

        logger.info(
            "Waiting for platform (poll every %d ms, timeout %d ms)",
            self.poll_interval_ms,
            self.timeout_ms,
        )
        self._task = loop.create_task(self._wait_for_platform())

    async def wait(self) -> bool:
        """Block until the current wait (and any status check it triggered) finishes."""
        if self._task is not None:
            await self._task
        return self.ready

    async def close(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _wait_for_platform(self) -> None:
        self.poll_ticks = 0
        try:
            await asyncio.wait_for(self._poll(), timeout=self.timeout_ms / 1000)
        except asyncio.TimeoutError:
            if self._locator.resolve() is None:
                message = platform_load_timeout_message(self.timeout_ms)
                logger.error("%s (%d polls)", message, self.poll_ticks)
                self._errors.set(message, ErrorKind.TIMEOUT)
                self._on_timeout()
                return

        self._mark_ready()
        await self._on_ready()

    async def _poll(self) -> None:
        while True:
            await asyncio.sleep(self.poll_interval_ms / 1000)
            self.poll_ticks += 1
            if self._locator.resolve() is not None:
                return

    def _mark_ready(self) -> None:
        self.ready = True
        logger.info("Platform ready after %d poll(s)", self.poll_ticks)
