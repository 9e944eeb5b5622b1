"""
Common utility functions used across multiple routes.
"""

from datetime import datetime, timezone
from typing import Optional

from academy.curriculum.catalog import CurriculumCatalog, Lesson, Module
from academy.errors import NotFoundError


def iso_format(dt: Optional[datetime]) -> Optional[str]:
    """Format datetime as ISO string with Z suffix. Naive values are taken as UTC."""
    if dt is None:
        return None
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt.isoformat() + "Z"


def require_module(catalog: CurriculumCatalog, module_id: str) -> Module:
    module = catalog.get_module(module_id)
    if module is None:
        raise NotFoundError(f"Unknown module: {module_id}")
    return module


def require_lesson(catalog: CurriculumCatalog, module_id: str, lesson_id: str) -> Lesson:
    lesson = require_module(catalog, module_id).get_lesson(lesson_id)
    if lesson is None:
        raise NotFoundError(f"Unknown lesson: {module_id}/{lesson_id}")
    return lesson
