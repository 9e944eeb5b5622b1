"""
Curriculum schemas: modules, lessons, lesson content and module exercises.
"""

from typing import Any, Optional

from pydantic import BaseModel


class LessonSummary(BaseModel):
    id: str
    title: str
    order_index: int


class ModuleResponse(BaseModel):
    id: str
    title: str
    order_index: int
    lessons: list[LessonSummary]
    has_exercise: bool = False


class CurriculumResponse(BaseModel):
    modules: list[ModuleResponse]


class LessonContentResponse(BaseModel):
    module_id: str
    lesson_id: str
    title: str
    objectives: list[str]
    content: str
    placeholder: bool  # True when the "Coming Soon" fallback was served


class FieldOptionResponse(BaseModel):
    value: str
    label: str


class ExerciseFieldResponse(BaseModel):
    name: str
    label: str
    type: str
    placeholder: Optional[str] = None
    required: bool = False
    help_text: Optional[str] = None
    min_length: Optional[int] = None
    min_items: Optional[int] = None
    max_items: Optional[int] = None
    options: list[FieldOptionResponse] = []
    language: Optional[str] = None


class DeliverableResponse(BaseModel):
    type: str
    fields: list[ExerciseFieldResponse]


class ExerciseResponse(BaseModel):
    module_id: str
    exercise_id: str
    title: str
    estimated_time: str
    overview: str
    objectives: list[str]
    context: str
    instructions: str
    deliverable: DeliverableResponse
    success_criteria: list[str]
    example_submission: Optional[dict[str, Any]] = None
    tutor_prompt: Optional[str] = None
