"""
Late-binding holder for the platform handle.

The handle appears asynchronously (after the host answers its first probe);
consumers only ever ask ``resolve()`` and treat ``None`` as "not loaded yet".
"""
from __future__ import annotations

import logging
from typing import Optional

from rankify.platform.types import PlatformHandle

logger = logging.getLogger(__name__)


class PlatformLocator:
    def __init__(self, handle: Optional[PlatformHandle] = None) -> None:
        self._handle = handle

    def resolve(self) -> Optional[PlatformHandle]:
        return self._handle

    def bind(self, handle: PlatformHandle) -> None:
        logger.info("Platform handle bound: %s", type(handle).__name__)
        self._handle = handle

    def unbind(self) -> None:
        if self._handle is not None:
            logger.info("Platform handle unbound")
        self._handle = None
