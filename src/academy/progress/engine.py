"""
Progress engine: gating, idempotent completion and dedup-on-read over a
ProgressStore that has no transactional read-modify-write.

Concurrent writers (two browser tabs, say) can each create a record for the
same (user_id, module_id). No write path prevents that; instead every read
goes through resolve_authoritative(), which picks one winner deterministically
and leaves the losing rows in place.
"""

from __future__ import annotations

import logging
import math
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Iterable, Optional

from academy.curriculum.catalog import CurriculumCatalog, Module
from academy.errors import InvalidUserError
from academy.progress.records import ModuleStatus, ProgressRecord, utcnow
from academy.progress.store import ProgressStore

logger = logging.getLogger(__name__)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _ts(value: Optional[datetime]) -> datetime:
    if value is None:
        return _EPOCH
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def resolve_authoritative(records: Iterable[ProgressRecord]) -> Optional[ProgressRecord]:
    """
    Pick the one record that represents a logical (user_id, module_id) key.

    Any COMPLETED record wins over the rest (latest completed_at first);
    otherwise the most recently updated record wins. Ties fall back to id so
    the choice never depends on store ordering.
    """
    records = list(records)
    if not records:
        return None
    completed = [r for r in records if r.status == ModuleStatus.COMPLETED]
    if completed:
        return max(completed, key=lambda r: (_ts(r.completed_at), _ts(r.updated_at), r.id))
    return max(records, key=lambda r: (_ts(r.updated_at or r.created_at), _ts(r.created_at), r.id))


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def progress_percent(record: Optional[ProgressRecord], module: Optional[Module]) -> int:
    if record is None or record.status == ModuleStatus.NOT_STARTED:
        return 0
    if record.status == ModuleStatus.COMPLETED:
        return 100
    if module is None or not module.lessons or not record.current_lesson_id:
        return 0
    idx = module.lesson_index(record.current_lesson_id)
    if idx < 0:
        return 0
    # Being on a lesson counts it: lesson 1 of 3 is 33%.
    return round_half_up((idx + 1) / len(module.lessons) * 100)


@dataclass
class CurrentModule:
    id: str
    title: str
    current_lesson_id: str
    progress: int


@dataclass
class ProgressSummary:
    completed_modules: int
    total_modules: int
    overall_progress: int
    current_module: Optional[CurrentModule] = None
    modules: dict[str, ProgressRecord] = field(default_factory=dict)


def _require_user(user_id: Optional[str]) -> str:
    if not user_id or not str(user_id).strip():
        raise InvalidUserError("user id is required")
    return user_id


class ProgressEngine:
    def __init__(
        self,
        store: ProgressStore,
        catalog: CurriculumCatalog,
        *,
        clock: Callable[[], datetime] = utcnow,
        preserve_first_completion: bool = False,
    ):
        self.store = store
        self.catalog = catalog
        self._clock = clock
        self.preserve_first_completion = preserve_first_completion

    # ----- reads -----

    async def get_module_progress(self, user_id: str, module_id: str) -> Optional[ProgressRecord]:
        """Authoritative record for (user_id, module_id), or None."""
        _require_user(user_id)
        records = await self.store.list(user_id, module_id)
        if len(records) > 1:
            logger.debug("duplicate progress rows user_id=%s module_id=%s count=%s", user_id, module_id, len(records))
        return resolve_authoritative(records)

    async def get_user_progress(self, user_id: str) -> dict[str, ProgressRecord]:
        """One authoritative record per module the user has touched."""
        _require_user(user_id)
        grouped: dict[str, list[ProgressRecord]] = defaultdict(list)
        for record in await self.store.list(user_id):
            grouped[record.module_id].append(record)
        return {module_id: resolve_authoritative(rows) for module_id, rows in grouped.items()}

    async def get_module_status(self, user_id: str, module_id: str) -> ModuleStatus:
        record = await self.get_module_progress(user_id, module_id)
        return record.status if record else ModuleStatus.NOT_STARTED

    async def get_module_progress_percent(self, user_id: str, module_id: str) -> int:
        record = await self.get_module_progress(user_id, module_id)
        return progress_percent(record, self.catalog.get_module(module_id))

    async def is_lesson_bookmarked(self, user_id: str, module_id: str, lesson_id: str) -> bool:
        record = await self.get_module_progress(user_id, module_id)
        return bool(record and record.has_bookmark(lesson_id))

    async def is_unlocked(self, user_id: str, module_index: int) -> bool:
        """Module 0 is always open; module i opens once module i-1 is COMPLETED."""
        _require_user(user_id)
        if module_index == 0:
            return True
        if module_index < 0 or module_index >= len(self.catalog):
            return False
        prev = self.catalog.modules[module_index - 1]
        return await self.get_module_status(user_id, prev.id) == ModuleStatus.COMPLETED

    async def is_module_unlocked(self, user_id: str, module_id: str) -> bool:
        return await self.is_unlocked(user_id, self.catalog.module_index(module_id))

    async def get_progress_summary(self, user_id: str) -> ProgressSummary:
        progress = await self.get_user_progress(user_id)
        percents = {m.id: progress_percent(progress.get(m.id), m) for m in self.catalog.modules}
        total = len(self.catalog)
        completed = sum(
            1
            for m in self.catalog.modules
            if progress.get(m.id) and progress[m.id].status == ModuleStatus.COMPLETED
        )
        overall = round_half_up(sum(percents.values()) / total) if total else 0

        current = None
        for m in self.catalog.modules:
            record = progress.get(m.id)
            if record and record.status == ModuleStatus.IN_PROGRESS:
                current = CurrentModule(
                    id=m.id,
                    title=m.title,
                    current_lesson_id=record.current_lesson_id or "",
                    progress=percents[m.id],
                )
                break

        return ProgressSummary(
            completed_modules=completed,
            total_modules=total,
            overall_progress=overall,
            current_module=current,
            modules=progress,
        )

    # ----- writes -----

    async def start_module(self, user_id: str, module_id: str, first_lesson_id: str) -> Optional[ProgressRecord]:
        existing = await self.get_module_progress(user_id, module_id)
        now = self._clock()

        if existing is not None:
            fields = {
                "current_lesson_id": first_lesson_id,
                "started_at": existing.started_at or now,
            }
            if existing.status != ModuleStatus.COMPLETED:
                fields["status"] = ModuleStatus.IN_PROGRESS
            record = await self.store.update(existing.id, fields)
        else:
            logger.info("starting module user_id=%s module_id=%s", user_id, module_id)
            record = await self.store.create(
                {
                    "user_id": user_id,
                    "module_id": module_id,
                    "status": ModuleStatus.IN_PROGRESS,
                    "current_lesson_id": first_lesson_id,
                    "started_at": now,
                    "bookmarks": [],
                }
            )

        if record is None:
            logger.warning("start_module not saved user_id=%s module_id=%s", user_id, module_id)
        return record

    async def update_current_lesson(self, user_id: str, module_id: str, lesson_id: str) -> bool:
        existing = await self.get_module_progress(user_id, module_id)

        if existing is None:
            saved = await self.start_module(user_id, module_id, lesson_id) is not None
        else:
            fields: dict = {"current_lesson_id": lesson_id}
            if existing.status == ModuleStatus.NOT_STARTED:
                fields["status"] = ModuleStatus.IN_PROGRESS
            saved = await self.store.update(existing.id, fields) is not None
            if not saved:
                logger.warning("update_current_lesson not saved user_id=%s module_id=%s", user_id, module_id)

        module = self.catalog.get_module(module_id)
        if module is not None and module.is_last_lesson(lesson_id):
            # Re-read so a completion already written by another tab is not repeated.
            current = await self.get_module_progress(user_id, module_id)
            if current is not None and current.status != ModuleStatus.COMPLETED:
                logger.info("last lesson reached user_id=%s module_id=%s", user_id, module_id)
                saved = await self.complete_module(user_id, module_id) and saved
        return saved

    async def complete_module(self, user_id: str, module_id: str) -> bool:
        existing = await self.get_module_progress(user_id, module_id)
        now = self._clock()

        if existing is None:
            record = await self.store.create(
                {
                    "user_id": user_id,
                    "module_id": module_id,
                    "status": ModuleStatus.COMPLETED,
                    "started_at": now,
                    "completed_at": now,
                    "bookmarks": [],
                }
            )
        else:
            completed_at = now
            if (
                self.preserve_first_completion
                and existing.status == ModuleStatus.COMPLETED
                and existing.completed_at is not None
            ):
                completed_at = existing.completed_at
            record = await self.store.update(
                existing.id,
                {"status": ModuleStatus.COMPLETED, "completed_at": completed_at},
            )

        if record is None:
            logger.warning("complete_module not saved user_id=%s module_id=%s", user_id, module_id)
            return False
        logger.info("module completed user_id=%s module_id=%s", user_id, module_id)
        return True

    async def toggle_bookmark(self, user_id: str, module_id: str, lesson_id: str) -> bool:
        existing = await self.get_module_progress(user_id, module_id)
        if existing is None:
            existing = await self.start_module(user_id, module_id, lesson_id)
            if existing is None:
                return False

        bookmarks = list(existing.bookmarks)
        if lesson_id in bookmarks:
            bookmarks.remove(lesson_id)
        else:
            bookmarks.append(lesson_id)

        record = await self.store.update(existing.id, {"bookmarks": bookmarks})
        if record is None:
            logger.warning("toggle_bookmark not saved user_id=%s module_id=%s", user_id, module_id)
        return record is not None
