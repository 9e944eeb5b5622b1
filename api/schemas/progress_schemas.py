"""
User learning progress schemas (dashboard summary and per-module state).
"""

from pydantic import BaseModel
from typing import Optional


class ModuleProgressResponse(BaseModel):
    """Per-module progress for the dashboard and the lesson page."""
    module_id: str
    status: str
    unlocked: bool
    progress: int  # percent, 0-100
    current_lesson_id: Optional[str] = None
    bookmarks: list[str] = []
    started_at: Optional[str] = None  # ISO
    completed_at: Optional[str] = None  # ISO


class CurrentModuleResponse(BaseModel):
    id: str
    title: str
    current_lesson_id: str
    progress: int


class ProgressSummaryResponse(BaseModel):
    completed_modules: int
    total_modules: int
    overall_progress: int
    current_module: Optional[CurrentModuleResponse] = None
    modules: list[ModuleProgressResponse]


class ProgressWriteResponse(BaseModel):
    """saved=False means the store rejected the write; progress is the state re-read afterwards."""
    saved: bool
    progress: ModuleProgressResponse
