"""
Curriculum routes: the static module/lesson catalog, lesson content and module exercises.
"""

from dataclasses import asdict
from pathlib import Path
from typing import Callable

from fastapi import APIRouter, Depends

from academy.curriculum.catalog import CurriculumCatalog, Module
from academy.curriculum.exercises import has_exercise, load_exercise, modules_with_exercises
from academy.curriculum.lessons import LessonContent
from academy.errors import NotFoundError
from api.bootstrap import get_catalog, get_exercises_dir, get_lesson_loader
from api.schemas.curriculum_schemas import (
    CurriculumResponse,
    ExerciseResponse,
    LessonContentResponse,
    LessonSummary,
    ModuleResponse,
)
from api.utils.common import require_lesson, require_module

curriculum_routes = APIRouter()


def _module_response(module: Module, order_index: int, exercise: bool = False) -> ModuleResponse:
    return ModuleResponse(
        id=module.id,
        title=module.title,
        order_index=order_index,
        has_exercise=exercise,
        lessons=[LessonSummary(id=l.id, title=l.title, order_index=i) for i, l in enumerate(module.lessons)],
    )


@curriculum_routes.get("/curriculum", response_model=CurriculumResponse)
def list_modules(
    catalog: CurriculumCatalog = Depends(get_catalog),
    exercises_dir: Path = Depends(get_exercises_dir),
):
    with_exercises = set(modules_with_exercises(exercises_dir))
    return CurriculumResponse(modules=[_module_response(m, i, m.id in with_exercises) for i, m in enumerate(catalog.modules)])


@curriculum_routes.get("/curriculum/{module_id}", response_model=ModuleResponse)
def get_module(
    module_id: str,
    catalog: CurriculumCatalog = Depends(get_catalog),
    exercises_dir: Path = Depends(get_exercises_dir),
):
    module = require_module(catalog, module_id)
    return _module_response(module, catalog.module_index(module_id), has_exercise(exercises_dir, module_id))


@curriculum_routes.get("/curriculum/{module_id}/lessons/{lesson_id}", response_model=LessonContentResponse)
def get_lesson_content(
    module_id: str,
    lesson_id: str,
    catalog: CurriculumCatalog = Depends(get_catalog),
    lesson_loader: Callable[[str, str], LessonContent] = Depends(get_lesson_loader),
):
    require_lesson(catalog, module_id, lesson_id)
    lesson = lesson_loader(module_id, lesson_id)
    return LessonContentResponse(
        module_id=module_id,
        lesson_id=lesson_id,
        title=lesson.title,
        objectives=list(lesson.objectives),
        content=lesson.content,
        placeholder=lesson.placeholder,
    )


@curriculum_routes.get("/curriculum/{module_id}/exercise", response_model=ExerciseResponse)
def get_exercise(
    module_id: str,
    catalog: CurriculumCatalog = Depends(get_catalog),
    exercises_dir: Path = Depends(get_exercises_dir),
):
    require_module(catalog, module_id)
    exercise = load_exercise(exercises_dir, module_id)
    if exercise is None:
        raise NotFoundError(f"No exercise for module: {module_id}")
    return ExerciseResponse.model_validate(asdict(exercise))
