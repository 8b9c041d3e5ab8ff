"""File storage slice: thin forwards over the platform file system."""
from __future__ import annotations

from typing import List, Optional, Sequence

from rankify.platform.gateway import OperationGateway
from rankify.platform.types import FileData, FSItem, UploadedFile


class FileStore:
    def __init__(self, gateway: OperationGateway) -> None:
        self._gateway = gateway

    async def write(self, path: str, data: FileData) -> Optional[FSItem]:
        return await self._gateway.invoke(lambda p: p.fs.write(path, data))

    async def read(self, path: str) -> Optional[bytes]:
        return await self._gateway.invoke(lambda p: p.fs.read(path))

    async def upload(self, files: Sequence[UploadedFile]) -> Optional[FSItem]:
        return await self._gateway.invoke(lambda p: p.fs.upload(files))

    async def delete(self, path: str) -> None:
        await self._gateway.invoke(lambda p: p.fs.delete(path))

    async def read_dir(self, path: str) -> Optional[List[FSItem]]:
        return await self._gateway.invoke(lambda p: p.fs.readdir(path))
