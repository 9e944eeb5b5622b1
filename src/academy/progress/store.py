"""
ProgressStore contract plus an in-memory implementation.

The contract mirrors a managed key/value collection with no atomic upsert:

  create(fields)       -> record | None
  update(id, fields)   -> record | None
  list(user_id, module_id=None) -> [records]

None means the write was rejected (authorization or store-level failure); it is
not an exception. Two concurrent creators for the same (user_id, module_id)
both succeed, so list() may return several rows for one logical key.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import replace
from datetime import datetime
from typing import Any, Callable, Optional
from uuid import uuid4

from academy.progress.records import WRITABLE_FIELDS, ModuleStatus, ProgressRecord, utcnow

logger = logging.getLogger(__name__)


class ProgressStore(ABC):
    @abstractmethod
    async def create(self, fields: dict[str, Any]) -> Optional[ProgressRecord]:
        raise NotImplementedError

    @abstractmethod
    async def update(self, record_id: str, fields: dict[str, Any]) -> Optional[ProgressRecord]:
        raise NotImplementedError

    @abstractmethod
    async def list(self, user_id: str, module_id: Optional[str] = None) -> list[ProgressRecord]:
        raise NotImplementedError


def writable(fields: dict[str, Any]) -> dict[str, Any]:
    """Drop store-owned and unknown keys; normalize status and bookmarks."""
    out = {k: v for k, v in fields.items() if k in WRITABLE_FIELDS}
    if "status" in out and out["status"] is not None:
        out["status"] = ModuleStatus(out["status"])
    if "bookmarks" in out:
        out["bookmarks"] = list(out["bookmarks"] or [])
    return out


class InMemoryProgressStore(ProgressStore):
    """
    Process-local store. Every call yields to the event loop first, so
    concurrent callers interleave the same way they would against a remote
    store (and can create duplicates).
    """

    def __init__(self, clock: Callable[[], datetime] = utcnow):
        self._records: dict[str, ProgressRecord] = {}
        self._clock = clock
        self.reject_writes = False

    async def create(self, fields: dict[str, Any]) -> Optional[ProgressRecord]:
        await asyncio.sleep(0)
        data = writable(fields)
        if self.reject_writes or not data.get("user_id") or not data.get("module_id"):
            logger.warning("progress create rejected user_id=%s module_id=%s", data.get("user_id"), data.get("module_id"))
            return None
        now = self._clock()
        record = ProgressRecord(id=str(uuid4()), created_at=now, updated_at=now, **data)
        self._records[record.id] = record
        return _copy(record)

    async def update(self, record_id: str, fields: dict[str, Any]) -> Optional[ProgressRecord]:
        await asyncio.sleep(0)
        current = self._records.get(record_id)
        if self.reject_writes or current is None:
            logger.warning("progress update rejected id=%s", record_id)
            return None
        data = writable(fields)
        data.pop("user_id", None)
        data.pop("module_id", None)
        record = replace(current, updated_at=self._clock(), **data)
        self._records[record_id] = record
        return _copy(record)

    async def list(self, user_id: str, module_id: Optional[str] = None) -> list[ProgressRecord]:
        await asyncio.sleep(0)
        return [
            _copy(r)
            for r in self._records.values()
            if r.user_id == user_id and (module_id is None or r.module_id == module_id)
        ]

    def __len__(self) -> int:
        return len(self._records)


def _copy(record: ProgressRecord) -> ProgressRecord:
    return replace(record, bookmarks=list(record.bookmarks))
