"""
SQLAlchemy-backed ProgressStore.

Honors the store contract literally: create always inserts (no upsert), update
touches one row by id, list returns every matching row. SQL failures are
rolled back, logged and reported as None, never raised. Session work runs in a
worker thread so a slow database does not stall other streams on the loop.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Any, Optional
from uuid import uuid4

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from academy.progress.records import ModuleStatus, ProgressRecord
from academy.progress.store import ProgressStore, writable
from api.models.models import ModuleProgress
from api.utils.logger import configure_logging

logger = configure_logging()


def _aware(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite drops tzinfo on the way back; all stored times are UTC.
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def _to_record(row: ModuleProgress) -> ProgressRecord:
    return ProgressRecord(
        id=row.id,
        user_id=row.user_id,
        module_id=row.module_id,
        status=ModuleStatus(row.status or ModuleStatus.NOT_STARTED.value),
        started_at=_aware(row.started_at),
        completed_at=_aware(row.completed_at),
        current_lesson_id=row.current_lesson_id,
        bookmarks=[b for b in (row.bookmarks or []) if isinstance(b, str)],
        created_at=_aware(row.created_at),
        updated_at=_aware(row.updated_at),
    )


def _column_values(fields: dict[str, Any]) -> dict[str, Any]:
    values = writable(fields)
    if isinstance(values.get("status"), ModuleStatus):
        values["status"] = values["status"].value
    return values


class SqlProgressStore(ProgressStore):
    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    async def create(self, fields: dict[str, Any]) -> Optional[ProgressRecord]:
        return await asyncio.to_thread(self._create, fields)

    async def update(self, record_id: str, fields: dict[str, Any]) -> Optional[ProgressRecord]:
        return await asyncio.to_thread(self._update, record_id, fields)

    async def list(self, user_id: str, module_id: Optional[str] = None) -> list[ProgressRecord]:
        return await asyncio.to_thread(self._list, user_id, module_id)

    def _create(self, fields: dict[str, Any]) -> Optional[ProgressRecord]:
        values = _column_values(fields)
        if not values.get("user_id") or not values.get("module_id"):
            logger.warning("progress create rejected: user_id and module_id are required")
            return None
        now = datetime.now(timezone.utc)
        with self._session_factory() as db:
            try:
                row = ModuleProgress(id=str(uuid4()), created_at=now, updated_at=now, **values)
                db.add(row)
                db.commit()
                db.refresh(row)
                return _to_record(row)
            except SQLAlchemyError:
                db.rollback()
                logger.exception("progress create failed user_id=%s module_id=%s", values["user_id"], values["module_id"])
                return None

    def _update(self, record_id: str, fields: dict[str, Any]) -> Optional[ProgressRecord]:
        values = _column_values(fields)
        values.pop("user_id", None)
        values.pop("module_id", None)
        with self._session_factory() as db:
            try:
                row = db.query(ModuleProgress).filter(ModuleProgress.id == record_id).first()
                if row is None:
                    logger.warning("progress update rejected: no row id=%s", record_id)
                    return None
                for key, value in values.items():
                    setattr(row, key, value)
                row.updated_at = datetime.now(timezone.utc)
                db.add(row)
                db.commit()
                db.refresh(row)
                return _to_record(row)
            except SQLAlchemyError:
                db.rollback()
                logger.exception("progress update failed id=%s", record_id)
                return None

    def _list(self, user_id: str, module_id: Optional[str]) -> list[ProgressRecord]:
        with self._session_factory() as db:
            try:
                q = db.query(ModuleProgress).filter(ModuleProgress.user_id == user_id)
                if module_id is not None:
                    q = q.filter(ModuleProgress.module_id == module_id)
                return [_to_record(row) for row in q.all()]
            except SQLAlchemyError:
                logger.exception("progress list failed user_id=%s module_id=%s", user_id, module_id)
                return []
