from academy.curriculum.catalog import CurriculumCatalog, Lesson, Module
from academy.curriculum.exercises import Exercise, load_exercise, modules_with_exercises
from academy.curriculum.knowledge import (
    FALLBACK_DOCUMENT,
    FALLBACK_KNOWLEDGE_TEXT,
    KnowledgeBase,
    KnowledgeDocument,
    KnowledgeSelector,
)
from academy.curriculum.lessons import LessonContent, load_lesson_content

__all__ = [
    "CurriculumCatalog",
    "Exercise",
    "Lesson",
    "LessonContent",
    "Module",
    "FALLBACK_DOCUMENT",
    "FALLBACK_KNOWLEDGE_TEXT",
    "KnowledgeBase",
    "KnowledgeDocument",
    "KnowledgeSelector",
    "load_exercise",
    "load_lesson_content",
    "modules_with_exercises",
]
