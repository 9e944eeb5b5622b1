"""
Progress routes: dashboard summary, per-module state and the learner's writes
(start, lesson view, completion, bookmarks). Writes on a locked module are
refused with 403; everything else reports whether the store accepted it.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status

from academy.curriculum.catalog import CurriculumCatalog, Module
from academy.progress.engine import ProgressEngine, progress_percent
from academy.progress.records import ModuleStatus, ProgressRecord
from api.bootstrap import get_catalog, get_progress_engine
from api.schemas.progress_schemas import (
    CurrentModuleResponse,
    ModuleProgressResponse,
    ProgressSummaryResponse,
    ProgressWriteResponse,
)
from api.utils.auth import get_current_user_id
from api.utils.common import iso_format, require_lesson, require_module
from api.utils.logger import configure_logging

logger = configure_logging()

progress_routes = APIRouter()


def module_progress_response(module: Module, record: Optional[ProgressRecord], unlocked: bool) -> ModuleProgressResponse:
    return ModuleProgressResponse(
        module_id=module.id,
        status=(record.status if record else ModuleStatus.NOT_STARTED).value,
        unlocked=unlocked,
        progress=progress_percent(record, module),
        current_lesson_id=record.current_lesson_id if record else None,
        bookmarks=list(record.bookmarks) if record else [],
        started_at=iso_format(record.started_at) if record else None,
        completed_at=iso_format(record.completed_at) if record else None,
    )


async def _module_view(engine: ProgressEngine, user_id: str, module: Module) -> ModuleProgressResponse:
    record = await engine.get_module_progress(user_id, module.id)
    unlocked = await engine.is_module_unlocked(user_id, module.id)
    return module_progress_response(module, record, unlocked)


async def _require_unlocked(engine: ProgressEngine, user_id: str, module: Module) -> None:
    if not await engine.is_module_unlocked(user_id, module.id):
        logger.warning("write on locked module refused user_id=%s module_id=%s", user_id, module.id)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Module is locked")


async def _write_response(engine: ProgressEngine, user_id: str, module: Module, saved: bool) -> ProgressWriteResponse:
    return ProgressWriteResponse(saved=saved, progress=await _module_view(engine, user_id, module))


@progress_routes.get("/progress", response_model=ProgressSummaryResponse)
async def get_progress_summary(
    user_id: str = Depends(get_current_user_id),
    engine: ProgressEngine = Depends(get_progress_engine),
    catalog: CurriculumCatalog = Depends(get_catalog),
):
    summary = await engine.get_progress_summary(user_id)
    modules = []
    for i, module in enumerate(catalog.modules):
        # Unlock state follows directly from the previous module's record.
        prev = summary.modules.get(catalog.modules[i - 1].id) if i > 0 else None
        unlocked = i == 0 or (prev is not None and prev.status == ModuleStatus.COMPLETED)
        modules.append(module_progress_response(module, summary.modules.get(module.id), unlocked))

    current = summary.current_module
    return ProgressSummaryResponse(
        completed_modules=summary.completed_modules,
        total_modules=summary.total_modules,
        overall_progress=summary.overall_progress,
        current_module=CurrentModuleResponse(**vars(current)) if current else None,
        modules=modules,
    )


@progress_routes.get("/progress/{module_id}", response_model=ModuleProgressResponse)
async def get_module_progress(
    module_id: str,
    user_id: str = Depends(get_current_user_id),
    engine: ProgressEngine = Depends(get_progress_engine),
    catalog: CurriculumCatalog = Depends(get_catalog),
):
    return await _module_view(engine, user_id, require_module(catalog, module_id))


@progress_routes.post("/progress/{module_id}/start", response_model=ProgressWriteResponse)
async def start_module(
    module_id: str,
    user_id: str = Depends(get_current_user_id),
    engine: ProgressEngine = Depends(get_progress_engine),
    catalog: CurriculumCatalog = Depends(get_catalog),
):
    module = require_module(catalog, module_id)
    await _require_unlocked(engine, user_id, module)
    first = module.first_lesson
    record = await engine.start_module(user_id, module_id, first.id if first else "")
    return await _write_response(engine, user_id, module, record is not None)


@progress_routes.post("/progress/{module_id}/lessons/{lesson_id}/view", response_model=ProgressWriteResponse)
async def view_lesson(
    module_id: str,
    lesson_id: str,
    user_id: str = Depends(get_current_user_id),
    engine: ProgressEngine = Depends(get_progress_engine),
    catalog: CurriculumCatalog = Depends(get_catalog),
):
    module = require_module(catalog, module_id)
    require_lesson(catalog, module_id, lesson_id)
    await _require_unlocked(engine, user_id, module)
    saved = await engine.update_current_lesson(user_id, module_id, lesson_id)
    return await _write_response(engine, user_id, module, saved)


@progress_routes.post("/progress/{module_id}/complete", response_model=ProgressWriteResponse)
async def complete_module(
    module_id: str,
    user_id: str = Depends(get_current_user_id),
    engine: ProgressEngine = Depends(get_progress_engine),
    catalog: CurriculumCatalog = Depends(get_catalog),
):
    module = require_module(catalog, module_id)
    await _require_unlocked(engine, user_id, module)
    saved = await engine.complete_module(user_id, module_id)
    return await _write_response(engine, user_id, module, saved)


@progress_routes.post("/progress/{module_id}/bookmarks/{lesson_id}", response_model=ProgressWriteResponse)
async def toggle_bookmark(
    module_id: str,
    lesson_id: str,
    user_id: str = Depends(get_current_user_id),
    engine: ProgressEngine = Depends(get_progress_engine),
    catalog: CurriculumCatalog = Depends(get_catalog),
):
    module = require_module(catalog, module_id)
    require_lesson(catalog, module_id, lesson_id)
    await _require_unlocked(engine, user_id, module)
    saved = await engine.toggle_bookmark(user_id, module_id, lesson_id)
    return await _write_response(engine, user_id, module, saved)
