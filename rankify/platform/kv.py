"""Key-value slice: thin forwards over the platform record store."""
from __future__ import annotations

from typing import List, Optional, Union

from rankify.platform.gateway import OperationGateway
from rankify.platform.types import KVItem


class KeyValueStore:
    def __init__(self, gateway: OperationGateway) -> None:
        self._gateway = gateway

    async def get(self, key: str) -> Optional[str]:
        return await self._gateway.invoke(lambda p: p.kv.get(key))

    async def set(self, key: str, value: str) -> Optional[bool]:
        return await self._gateway.invoke(lambda p: p.kv.set(key, value))

    async def delete(self, key: str) -> Optional[bool]:
        return await self._gateway.invoke(lambda p: p.kv.delete(key))

    async def list(
        self, pattern: str, return_values: bool = False
    ) -> Optional[Union[List[str], List[KVItem]]]:
        return await self._gateway.invoke(lambda p: p.kv.list(pattern, return_values))

    async def flush(self) -> Optional[bool]:
        return await self._gateway.invoke(lambda p: p.kv.flush())
