from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


class ModuleStatus(str, Enum):
    """Module progress status. Transitions only move forward."""
    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


# Fields a caller may set through ProgressStore.create/update.
# id, created_at and updated_at are owned by the store.
WRITABLE_FIELDS = frozenset(
    {
        "user_id",
        "module_id",
        "status",
        "started_at",
        "completed_at",
        "current_lesson_id",
        "bookmarks",
    }
)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ProgressRecord:
    """One physical progress row. Several may exist for one (user_id, module_id)."""
    id: str
    user_id: str
    module_id: str
    status: ModuleStatus = ModuleStatus.NOT_STARTED
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    current_lesson_id: Optional[str] = None
    bookmarks: list[str] = field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def has_bookmark(self, lesson_id: str) -> bool:
        return lesson_id in self.bookmarks
