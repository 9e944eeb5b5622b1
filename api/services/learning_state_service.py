"""
Learning state service: tutor-owned topics/gaps per (user, module).
Only the tutor routes write here; the context assembler reads snapshots.
"""

from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session as DBSession

from academy.tutor.learning_state import LearningState
from api.models.models import LearningState as LearningStateRow
from api.utils.logger import configure_logging

logger = configure_logging()


def _snapshot(row: Optional[LearningStateRow]) -> LearningState:
    if row is None:
        return LearningState()
    return LearningState.of(row.topics_explained or [], row.identified_gaps or [])


class LearningStateService:
    def __init__(self, db: DBSession):
        self.db = db

    def _row(self, user_id: str, module_id: str) -> Optional[LearningStateRow]:
        return (
            self.db.query(LearningStateRow)
            .filter(LearningStateRow.user_id == user_id, LearningStateRow.module_id == module_id)
            .first()
        )

    def get(self, user_id: str, module_id: str) -> LearningState:
        return _snapshot(self._row(user_id, module_id))

    def record_topics(self, user_id: str, module_id: str, topics: list[str]) -> LearningState:
        return self._apply(user_id, module_id, lambda s: s.with_topics(*topics))

    def record_gaps(self, user_id: str, module_id: str, gaps: list[str]) -> LearningState:
        return self._apply(user_id, module_id, lambda s: s.with_gaps(*gaps))

    def _apply(self, user_id: str, module_id: str, change) -> LearningState:
        row = self._row(user_id, module_id)
        if row is None:
            row = LearningStateRow(id=str(uuid4()), user_id=user_id, module_id=module_id, topics_explained=[], identified_gaps=[])
            self.db.add(row)
            try:
                self.db.flush()
            except IntegrityError:
                # Another request created the row first; append to that one.
                self.db.rollback()
                row = self._row(user_id, module_id)
                if row is None:
                    raise

        updated = change(_snapshot(row))
        row.topics_explained = list(updated.topics_explained)
        row.identified_gaps = list(updated.identified_gaps)
        row.updated_at = datetime.now(timezone.utc)
        self.db.add(row)
        self.db.commit()
        logger.info(
            "learning state updated user_id=%s module_id=%s topics=%s gaps=%s",
            user_id,
            module_id,
            len(updated.topics_explained),
            len(updated.identified_gaps),
        )
        return updated
