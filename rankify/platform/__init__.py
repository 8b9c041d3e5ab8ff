"""Client-side integration layer for the hosted platform."""
from rankify.platform.auth import AuthSession, Session
from rankify.platform.client import PlatformClient
from rankify.platform.errors import ErrorChannel, ErrorKind, PlatformError, PlatformRequestError
from rankify.platform.files import FileStore
from rankify.platform.gateway import GatewayResult, OperationGateway
from rankify.platform.inference import InferenceClient
from rankify.platform.kv import KeyValueStore
from rankify.platform.locator import PlatformLocator
from rankify.platform.readiness import ReadinessDetector

__all__ = [
    "AuthSession",
    "Session",
    "PlatformClient",
    "ErrorChannel",
    "ErrorKind",
    "PlatformError",
    "PlatformRequestError",
    "FileStore",
    "GatewayResult",
    "OperationGateway",
    "InferenceClient",
    "KeyValueStore",
    "PlatformLocator",
    "ReadinessDetector",
]
