"""
In-memory stand-in for the hosted platform handle.

Every call is appended to ``FakePlatform.calls`` as ``"<namespace>.<method>"``.
Failures and canned return values can be injected per operation, optionally
only on its n-th call:

    platform.fail("fs.upload", "disk full", on_call=2)
    platform.override("kv.set", False)
"""
from __future__ import annotations

import fnmatch
import json
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from rankify.platform.types import (
    AIResponse,
    ChatMessage,
    ChatOptions,
    FSItem,
    KVItem,
    PlatformUser,
    UploadedFile,
)

SAMPLE_FEEDBACK: Dict[str, Any] = {
    "overallScore": 78,
    "ATS": {"score": 82, "tips": [{"type": "good", "tip": "Clear section headings"}]},
    "toneAndStyle": {"score": 75, "tips": []},
    "content": {"score": 70, "tips": []},
    "structure": {"score": 85, "tips": []},
    "skills": {"score": 68, "tips": []},
}

_UNSET = object()


class _Namespace:
    def __init__(self, platform: "FakePlatform", name: str) -> None:
        self._platform = platform
        self._name = name

    def _enter(self, method: str) -> Tuple[bool, Any]:
        return self._platform.record(f"{self._name}.{method}")


class FakeAuth(_Namespace):
    def __init__(self, platform: "FakePlatform") -> None:
        super().__init__(platform, "auth")
        self.signed_in = False
        self.user = PlatformUser(uid="user-1", username="alice", email="alice@example.com")

    async def is_signed_in(self) -> bool:
        hit, value = self._enter("is_signed_in")
        return value if hit else self.signed_in

    async def get_user(self) -> PlatformUser:
        hit, value = self._enter("get_user")
        return value if hit else self.user

    async def sign_in(self) -> None:
        hit, _ = self._enter("sign_in")
        if not hit:
            self.signed_in = True

    async def sign_out(self) -> None:
        hit, _ = self._enter("sign_out")
        if not hit:
            self.signed_in = False


class FakeFileSystem(_Namespace):
    def __init__(self, platform: "FakePlatform") -> None:
        super().__init__(platform, "fs")
        self.files: Dict[str, bytes] = {}

    async def upload(self, files: Sequence[UploadedFile]) -> FSItem:
        hit, value = self._enter("upload")
        if hit:
            return value
        item = None
        for f in files:
            path = f"/alice/{f.name}"
            self.files[path] = f.content
            item = FSItem(name=f.name, path=path, size=f.size)
        return item

    async def write(self, path: str, data: Any) -> FSItem:
        hit, value = self._enter("write")
        if hit:
            return value
        content = data.encode("utf-8") if isinstance(data, str) else data
        self.files[path] = content
        return FSItem(name=path.rsplit("/", 1)[-1], path=path, size=len(content))

    async def read(self, path: str) -> bytes:
        hit, value = self._enter("read")
        if hit:
            return value
        if path not in self.files:
            raise FileNotFoundError(f"No such file: {path}")
        return self.files[path]

    async def delete(self, path: str) -> None:
        hit, _ = self._enter("delete")
        if not hit:
            self.files.pop(path, None)

    async def readdir(self, path: str) -> List[FSItem]:
        hit, value = self._enter("readdir")
        if hit:
            return value
        prefix = path.rstrip("/") + "/"
        return [
            FSItem(name=p[len(prefix):], path=p, size=len(c))
            for p, c in self.files.items()
            if p.startswith(prefix)
        ]


class FakeAI(_Namespace):
    def __init__(self, platform: "FakePlatform") -> None:
        super().__init__(platform, "ai")
        self.reply: Union[str, List[Dict[str, Any]]] = json.dumps(SAMPLE_FEEDBACK)
        self.last_prompt: Any = None
        self.last_options: Optional[ChatOptions] = None

    async def chat(self, prompt: Any, options: Optional[ChatOptions] = None) -> AIResponse:
        self.last_prompt = prompt
        self.last_options = options
        hit, value = self._enter("chat")
        if hit:
            return value
        return AIResponse(message=ChatMessage(role="assistant", content=self.reply))

    async def img2txt(self, image: Any) -> str:
        hit, value = self._enter("img2txt")
        return value if hit else "Jane Doe, Software Engineer"


class FakeKV(_Namespace):
    def __init__(self, platform: "FakePlatform") -> None:
        super().__init__(platform, "kv")
        self.store: Dict[str, str] = {}

    async def get(self, key: str) -> Optional[str]:
        hit, value = self._enter("get")
        return value if hit else self.store.get(key)

    async def set(self, key: str, value: str) -> bool:
        hit, override = self._enter("set")
        if hit:
            return override
        self.store[key] = value
        return True

    async def delete(self, key: str) -> bool:
        hit, value = self._enter("delete")
        if hit:
            return value
        return self.store.pop(key, None) is not None

    async def list(self, pattern: str, return_values: bool = False):
        hit, value = self._enter("list")
        if hit:
            return value
        keys = [k for k in self.store if fnmatch.fnmatchcase(k, pattern)]
        if return_values:
            return [KVItem(key=k, value=self.store[k]) for k in keys]
        return keys

    async def flush(self) -> bool:
        hit, value = self._enter("flush")
        if hit:
            return value
        self.store.clear()
        return True


class FakePlatform:
    def __init__(self) -> None:
        self.calls: List[str] = []
        self._counts: Dict[str, int] = {}
        self._failures: Dict[str, Tuple[Exception, Optional[int]]] = {}
        self._overrides: Dict[str, Tuple[Any, Optional[int]]] = {}

        self.auth = FakeAuth(self)
        self.fs = FakeFileSystem(self)
        self.ai = FakeAI(self)
        self.kv = FakeKV(self)

    def fail(
        self,
        name: str,
        exc: Union[str, Exception] = "boom",
        on_call: Optional[int] = None,
    ) -> None:
        if isinstance(exc, str):
            exc = RuntimeError(exc)
        self._failures[name] = (exc, on_call)

    def override(self, name: str, value: Any, on_call: Optional[int] = None) -> None:
        self._overrides[name] = (value, on_call)

    def record(self, name: str) -> Tuple[bool, Any]:
        self.calls.append(name)
        count = self._counts.get(name, 0) + 1
        self._counts[name] = count

        if name in self._failures:
            exc, on_call = self._failures[name]
            if on_call is None or on_call == count:
                raise exc

        if name in self._overrides:
            value, on_call = self._overrides[name]
            if on_call is None or on_call == count:
                return True, value

        return False, _UNSET

    def count(self, name: str) -> int:
        return self._counts.get(name, 0)
