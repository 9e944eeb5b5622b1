from api.config import Base
from sqlalchemy import Column, String, JSON, DateTime, Index
from datetime import datetime, timezone


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ModuleProgress(Base):
    """
    Progress row per (user_id, module_id).
    Deliberately no unique constraint on the pair: concurrent first writes may
    create duplicates and the progress engine reconciles them on read.
    """
    __tablename__ = "module_progress"
    id = Column(String, primary_key=True, index=True)  # uuid
    user_id = Column(String, nullable=False)
    module_id = Column(String, nullable=False)
    status = Column(String, nullable=False, default="NOT_STARTED")  # NOT_STARTED|IN_PROGRESS|COMPLETED
    started_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    current_lesson_id = Column(String, nullable=True)
    bookmarks = Column(JSON, nullable=False, default=list)  # list[str] lesson ids
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    __table_args__ = (Index("ix_module_progress_user_module", "user_id", "module_id"),)


class LearningState(Base):
    """What the tutor has covered with a learner in one module. Lists only grow."""
    __tablename__ = "learning_states"
    id = Column(String, primary_key=True, index=True)  # uuid
    user_id = Column(String, nullable=False)
    module_id = Column(String, nullable=False)
    last_context = Column(String, nullable=True)
    topics_explained = Column(JSON, nullable=False, default=list)  # list[str]
    identified_gaps = Column(JSON, nullable=False, default=list)  # list[str]
    updated_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    __table_args__ = (Index("ix_learning_states_user_module", "user_id", "module_id", unique=True),)
