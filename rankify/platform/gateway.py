"""
Operation gateway: the single chokepoint for every platform call.

Public API
----------
OperationGateway.invoke(operation) -> value | None
    Resolve the handle, clear the error channel, run *operation*; faults are
    recorded in the channel and turned into ``None``.

OperationGateway.call(operation) -> GatewayResult
    Same flow, but returns a result object carrying either the value or a
    ``PlatformError`` so callers can tell "returned nothing" from "failed".
"""
from __future__ import annotations

import dataclasses
import logging
from typing import Awaitable, Callable, Generic, Optional, TypeVar

from rankify.platform.errors import (
    PLATFORM_UNAVAILABLE_MESSAGE,
    UNKNOWN_PLATFORM_ERROR_MESSAGE,
    ErrorChannel,
    ErrorKind,
    PlatformError,
)
from rankify.platform.locator import PlatformLocator
from rankify.platform.types import PlatformHandle

logger = logging.getLogger(__name__)

T = TypeVar("T")

Operation = Callable[[PlatformHandle], Awaitable[T]]


@dataclasses.dataclass
class GatewayResult(Generic[T]):
    value: Optional[T] = None
    error: Optional[PlatformError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class OperationGateway:
    """Wraps platform calls with an availability check and fault capture."""

    def __init__(self, locator: PlatformLocator, errors: ErrorChannel) -> None:
        self._locator = locator
        self._errors = errors

    async def call(self, operation: Operation[T]) -> GatewayResult[T]:
        platform = self._locator.resolve()
        if platform is None:
            error = self._errors.set(PLATFORM_UNAVAILABLE_MESSAGE, ErrorKind.UNAVAILABLE)
            return GatewayResult(error=error)

        self._errors.clear()
        try:
            value = await operation(platform)
        except Exception as exc:
            message = str(exc) or UNKNOWN_PLATFORM_ERROR_MESSAGE
            logger.warning("Platform call failed: %s", message)
            return GatewayResult(error=self._errors.set(message))

        return GatewayResult(value=value)

    async def invoke(self, operation: Operation[T]) -> Optional[T]:
        result = await self.call(operation)
        return result.value
