"""
Resume records in the platform key-value store.

Every record lives under ``<RESUME_KEY_PREFIX><id>`` (``resume:<uuid>`` by
default) as a JSON string, so ``resume:*`` lists them all.
"""
from __future__ import annotations

import logging
from typing import List, Optional

from pydantic import ValidationError

from rankify.config import settings
from rankify.models.schemas import ResumeRecord
from rankify.platform.kv import KeyValueStore
from rankify.platform.types import KVItem

logger = logging.getLogger(__name__)


class ResumeRepository:
    def __init__(self, kv: KeyValueStore, prefix: Optional[str] = None) -> None:
        self._kv = kv
        self.prefix = prefix or settings.RESUME_KEY_PREFIX

    def key_for(self, resume_id: str) -> str:
        return f"{self.prefix}{resume_id}"

    async def save(self, record: ResumeRecord) -> bool:
        """Write *record* under its key.  ``False`` if the store call failed."""
        result = await self._kv.set(self.key_for(record.id), record.to_json())
        return result is not None and result is not False

    async def get(self, resume_id: str) -> Optional[ResumeRecord]:
        raw = await self._kv.get(self.key_for(resume_id))
        if not raw:
            return None
        return self._parse(self.key_for(resume_id), raw)

    async def list(self) -> List[ResumeRecord]:
        """All parseable records; malformed values are logged and skipped."""
        items = await self._kv.list(f"{self.prefix}*", True)
        if not items:
            return []

        records: List[ResumeRecord] = []
        for item in items:
            if not isinstance(item, KVItem):
                continue
            record = self._parse(item.key, item.value)
            if record is not None:
                records.append(record)
        return records

    @staticmethod
    def _parse(key: str, raw: str) -> Optional[ResumeRecord]:
        try:
            return ResumeRecord.model_validate_json(raw)
        except ValidationError as exc:
            logger.warning("Skipping malformed resume record %s: %s", key, exc)
            return None
