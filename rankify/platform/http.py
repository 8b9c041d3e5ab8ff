"""
HTTP implementation of the platform handle.

Talks to the host's REST API with a single ``httpx.AsyncClient``:

* auth  — GET /whoami, POST /login, POST /logout
* fs    — POST /up (multipart), POST /write (multipart), GET /read,
          POST /delete, POST /readdir
* ai/kv — POST /drivers/call with the ``puter-chat-completion``,
          ``puter-ocr`` and ``puter-kvstore`` driver interfaces

Every failure surfaces as ``PlatformRequestError``; nothing here swallows
errors, that is the operation gateway's job.
"""
from __future__ import annotations

import base64
import dataclasses
import json
import logging
import posixpath
from typing import Any, Dict, List, Optional, Sequence, Union

import httpx

from rankify.config import settings
from rankify.platform.errors import PlatformRequestError
from rankify.platform.types import (
    AIResponse,
    ChatMessage,
    ChatOptions,
    ChatPrompt,
    FileData,
    FSItem,
    KVItem,
    PlatformUser,
    UploadedFile,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _error_message(resp: httpx.Response) -> str:
    """Best-effort human-readable message from an error response."""
    try:
        body = resp.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if error:
            return str(error)
        if body.get("message"):
            return str(body["message"])

    return resp.text[:300] or f"Platform returned HTTP {resp.status_code}"


def _to_item(data: Dict[str, Any]) -> FSItem:
    return FSItem(
        name=data.get("name") or posixpath.basename(data.get("path", "")),
        path=data.get("path", ""),
        type="directory" if data.get("is_dir") else "file",
        size=data.get("size"),
    )


def _as_file(data: FileData, name: str) -> UploadedFile:
    if isinstance(data, UploadedFile):
        return data
    if isinstance(data, str):
        return UploadedFile(name=name, content=data.encode("utf-8"), content_type="text/plain")
    return UploadedFile(name=name, content=data)


def _data_url(file: UploadedFile) -> str:
    encoded = base64.b64encode(file.content).decode("ascii")
    return f"data:{file.content_type};base64,{encoded}"


# ---------------------------------------------------------------------------
# Capability namespaces
# ---------------------------------------------------------------------------

class _HttpAuth:
    def __init__(self, platform: "HttpPlatform") -> None:
        self._platform = platform

    async def is_signed_in(self) -> bool:
        if not self._platform.token:
            return False
        try:
            await self._platform.request("GET", "/whoami")
        except PlatformRequestError as exc:
            if exc.status_code == 401:
                return False
            raise
        return True

    async def get_user(self) -> PlatformUser:
        resp = await self._platform.request("GET", "/whoami")
        body = resp.json()
        return PlatformUser(
            uid=str(body.get("uuid", "")),
            username=body.get("username", ""),
            email=body.get("email"),
        )

    async def sign_in(self) -> None:
        username = self._platform.username
        password = self._platform.password
        if not username or not password:
            raise PlatformRequestError(
                "Sign-in requires PLATFORM_USERNAME and PLATFORM_PASSWORD."
            )

        resp = await self._platform.request(
            "POST", "/login", json={"username": username, "password": password}
        )
        token = resp.json().get("token")
        if not token:
            raise PlatformRequestError("Login response did not include a token.")
        self._platform.token = token
        logger.info("Signed in to platform as %s", username)

    async def sign_out(self) -> None:
        try:
            if self._platform.token:
                await self._platform.request("POST", "/logout")
        finally:
            self._platform.token = None


class _HttpFileSystem:
    def __init__(self, platform: "HttpPlatform") -> None:
        self._platform = platform

    async def upload(self, files: Sequence[UploadedFile]) -> FSItem:
        multipart = [
            ("file", (f.name, f.content, f.content_type)) for f in files
        ]
        resp = await self._platform.request("POST", "/up", files=multipart)
        body = resp.json()
        if isinstance(body, list):
            if not body:
                raise PlatformRequestError("Upload returned no items.")
            body = body[0]
        return _to_item(body)

    async def write(self, path: str, data: FileData) -> FSItem:
        file = _as_file(data, posixpath.basename(path) or "file")
        resp = await self._platform.request(
            "POST",
            "/write",
            data={"path": path},
            files={"file": (file.name, file.content, file.content_type)},
        )
        return _to_item(resp.json())

    async def read(self, path: str) -> bytes:
        resp = await self._platform.request("GET", "/read", params={"file": path})
        return resp.content

    async def delete(self, path: str) -> None:
        await self._platform.request("POST", "/delete", json={"paths": [path]})

    async def readdir(self, path: str) -> List[FSItem]:
        resp = await self._platform.request("POST", "/readdir", json={"path": path})
        return [_to_item(item) for item in resp.json()]


class _HttpAI:
    def __init__(self, platform: "HttpPlatform") -> None:
        self._platform = platform

    async def chat(
        self, prompt: ChatPrompt, options: Optional[ChatOptions] = None
    ) -> AIResponse:
        if isinstance(prompt, str):
            messages = [{"role": "user", "content": prompt}]
        else:
            messages = [dataclasses.asdict(m) for m in prompt]

        args: Dict[str, Any] = {"messages": messages}
        if options is not None and options.model:
            args["model"] = options.model

        result = await self._platform.call_driver("puter-chat-completion", "complete", args)
        message = result.get("message", result) if isinstance(result, dict) else result
        if isinstance(message, str):
            message = {"content": message}
        elif not isinstance(message, dict):
            message = {}
        return AIResponse(
            message=ChatMessage(
                role=message.get("role", "assistant"),
                content=message.get("content", ""),
            )
        )

    async def img2txt(self, image: FileData) -> str:
        if isinstance(image, str):
            source = image
        else:
            source = _data_url(_as_file(image, "image"))

        result = await self._platform.call_driver("puter-ocr", "recognize", {"source": source})
        if isinstance(result, dict):
            blocks = result.get("blocks") or []
            return "\n".join(block.get("text", "") for block in blocks)
        return str(result or "")


class _HttpKV:
    INTERFACE = "puter-kvstore"

    def __init__(self, platform: "HttpPlatform") -> None:
        self._platform = platform

    async def get(self, key: str) -> Optional[str]:
        value = await self._platform.call_driver(self.INTERFACE, "get", {"key": key})
        if value is None or isinstance(value, str):
            return value
        return json.dumps(value)

    async def set(self, key: str, value: str) -> bool:
        result = await self._platform.call_driver(
            self.INTERFACE, "set", {"key": key, "value": value}
        )
        return bool(result)

    async def delete(self, key: str) -> bool:
        result = await self._platform.call_driver(self.INTERFACE, "del", {"key": key})
        return bool(result)

    async def list(
        self, pattern: str, return_values: bool = False
    ) -> Union[List[str], List[KVItem]]:
        result = await self._platform.call_driver(
            self.INTERFACE,
            "list",
            {"pattern": pattern, "as": "entries" if return_values else "keys"},
        )
        if not return_values:
            return [str(key) for key in result or []]

        items: List[KVItem] = []
        for entry in result or []:
            value = entry.get("value")
            if not isinstance(value, str):
                value = json.dumps(value)
            items.append(KVItem(key=entry.get("key", ""), value=value))
        return items

    async def flush(self) -> bool:
        result = await self._platform.call_driver(self.INTERFACE, "flush", {})
        return bool(result)


# ---------------------------------------------------------------------------
# Platform handle
# ---------------------------------------------------------------------------

class HttpPlatform:
    """Platform handle backed by the host's HTTP API."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = (base_url or settings.PLATFORM_BASE_URL).rstrip("/")
        self.token = token if token is not None else settings.PLATFORM_API_TOKEN
        self.username = username or settings.PLATFORM_USERNAME
        self.password = password or settings.PLATFORM_PASSWORD
        self.timeout = httpx.Timeout(
            float(timeout or settings.PLATFORM_TIMEOUT), connect=10.0
        )
        self._client = httpx.AsyncClient(
            base_url=self.base_url, timeout=self.timeout, transport=transport
        )

        self.auth = _HttpAuth(self)
        self.fs = _HttpFileSystem(self)
        self.ai = _HttpAI(self)
        self.kv = _HttpKV(self)

    async def request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        headers = {"Authorization": f"Bearer {self.token}"} if self.token else {}
        try:
            resp = await self._client.request(method, path, headers=headers, **kwargs)
        except httpx.TimeoutException:
            raise PlatformRequestError(f"{method} {path} timed out")
        except httpx.HTTPError as exc:
            raise PlatformRequestError(f"{method} {path} failed: {exc}")

        if resp.status_code >= 400:
            logger.error(
                "Platform %s %s returned HTTP %d: %s",
                method,
                path,
                resp.status_code,
                resp.text[:300],
            )
            raise PlatformRequestError(_error_message(resp), resp.status_code)
        return resp

    async def call_driver(
        self, interface: str, method: str, args: Dict[str, Any]
    ) -> Any:
        resp = await self.request(
            "POST",
            "/drivers/call",
            json={"interface": interface, "method": method, "args": args},
        )
        body = resp.json()
        if isinstance(body, dict):
            if body.get("success") is False:
                raise PlatformRequestError(_error_message(resp))
            if "result" in body:
                return body["result"]
        return body

    async def ping(self) -> bool:
        """Return ``True`` if the host answers GET /version with HTTP 200.  Never raises."""
        try:
            resp = await self._client.get("/version", timeout=5.0)
            return resp.status_code == 200
        except Exception as exc:
            logger.error("Platform health check failed: %s", exc)
            return False

    async def aclose(self) -> None:
        await self._client.aclose()
