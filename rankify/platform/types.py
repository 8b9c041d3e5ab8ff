"""
Types describing the hosted platform's capability surface.

The platform handle is never owned by this package; it is observed through a
``PlatformLocator`` and every call on it goes through the ``OperationGateway``.
"""
from __future__ import annotations

import dataclasses
from typing import Any, Dict, List, Optional, Protocol, Sequence, Union

# A chat message's content is either plain text or a list of typed parts,
# e.g. {"type": "text", "text": "..."} or {"type": "file", "puter_path": "..."}.
ContentPart = Dict[str, Any]
MessageContent = Union[str, List[ContentPart]]


# ---------------------------------------------------------------------------
# Value objects
# ---------------------------------------------------------------------------

@dataclasses.dataclass
class PlatformUser:
    """Identity returned by ``auth.get_user``."""

    uid: str
    username: str
    email: Optional[str] = None


@dataclasses.dataclass
class FSItem:
    name: str
    path: str
    type: str = "file"  # "file" | "directory"
    size: Optional[int] = None


@dataclasses.dataclass
class KVItem:
    key: str
    value: str


@dataclasses.dataclass
class UploadedFile:
    """In-memory file or blob handed to the platform's file system."""

    name: str
    content: bytes
    content_type: str = "application/octet-stream"

    @property
    def size(self) -> int:
        return len(self.content)


@dataclasses.dataclass
class ChatMessage:
    role: str  # "user" | "assistant" | "system"
    content: MessageContent


@dataclasses.dataclass
class ChatOptions:
    model: Optional[str] = None


@dataclasses.dataclass
class AIResponse:
    message: ChatMessage


FileData = Union[str, bytes, UploadedFile]
ChatPrompt = Union[str, Sequence[ChatMessage]]


# ---------------------------------------------------------------------------
# Capability protocols
# ---------------------------------------------------------------------------

class AuthAPI(Protocol):
    async def is_signed_in(self) -> bool: ...

    async def get_user(self) -> PlatformUser: ...

    async def sign_in(self) -> None: ...

    async def sign_out(self) -> None: ...


class FileSystemAPI(Protocol):
    async def upload(self, files: Sequence[UploadedFile]) -> FSItem: ...

    async def write(self, path: str, data: FileData) -> FSItem: ...

    async def read(self, path: str) -> bytes: ...

    async def delete(self, path: str) -> None: ...

    async def readdir(self, path: str) -> List[FSItem]: ...


class AIAPI(Protocol):
    async def chat(
        self, prompt: ChatPrompt, options: Optional[ChatOptions] = None
    ) -> AIResponse: ...

    async def img2txt(self, image: FileData) -> str: ...


class KVAPI(Protocol):
    async def get(self, key: str) -> Optional[str]: ...

    async def set(self, key: str, value: str) -> bool: ...

    async def delete(self, key: str) -> bool: ...

    async def list(
        self, pattern: str, return_values: bool = False
    ) -> Union[List[str], List[KVItem]]: ...

    async def flush(self) -> bool: ...


class PlatformHandle(Protocol):
    """The hosted platform's capability object."""

    auth: AuthAPI
    fs: FileSystemAPI
    ai: AIAPI
    kv: KVAPI
