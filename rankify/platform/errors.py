"""
Process-wide error channel for platform calls.

Every gateway call overwrites the channel: success clears it, failure sets it,
so the stored message always describes the most recent call.
"""
from __future__ import annotations

import dataclasses
import enum
from typing import Optional

PLATFORM_UNAVAILABLE_MESSAGE = "Platform SDK is not available."
UNKNOWN_PLATFORM_ERROR_MESSAGE = "An unknown platform error occurred."


def platform_load_timeout_message(timeout_ms: int) -> str:
    """Message recorded when the platform handle never appears."""
    return f"Platform failed to load within {timeout_ms / 1000:g} seconds"


class ErrorKind(str, enum.Enum):
    UNAVAILABLE = "unavailable"
    OPERATION = "operation"
    TIMEOUT = "timeout"


@dataclasses.dataclass(frozen=True)
class PlatformError:
    kind: ErrorKind
    message: str


class PlatformRequestError(RuntimeError):
    """Raised by a platform handle when the host rejects a request."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ErrorChannel:
    """Holds the last platform error message (``None`` when the last call succeeded)."""

    def __init__(self) -> None:
        self._error: Optional[PlatformError] = None

    @property
    def message(self) -> Optional[str]:
        return self._error.message if self._error else None

    @property
    def last_error(self) -> Optional[PlatformError]:
        return self._error

    def set(self, message: str, kind: ErrorKind = ErrorKind.OPERATION) -> PlatformError:
        self._error = PlatformError(kind=kind, message=message)
        return self._error

    def clear(self) -> None:
        self._error = None
