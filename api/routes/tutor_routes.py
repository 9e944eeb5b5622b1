"""
Tutor routes: streamed tutor answers and the tutor-owned learning state.
"""

from typing import Callable, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session as DBSession

from academy.curriculum.catalog import CurriculumCatalog
from academy.curriculum.knowledge import KnowledgeSelector
from academy.curriculum.lessons import LessonContent
from academy.tutor.learning_state import LearningState
from academy.tutor.streamer import TutorStreamer
from api.bootstrap import get_catalog, get_knowledge_selector, get_lesson_loader, get_tutor_streamer
from api.config import Settings, get_db, get_settings
from api.schemas.tutor_schemas import LearningStateResponse, LearningStateUpdate, TutorSubmission
from api.services.learning_state_service import LearningStateService
from api.services.tutor_service import TutorService
from api.utils.auth import get_current_user_id, get_optional_user_id
from api.utils.common import require_module

tutor_routes = APIRouter()


def _state_response(module_id: str, state: LearningState) -> LearningStateResponse:
    return LearningStateResponse(
        module_id=module_id,
        topics_explained=list(state.topics_explained),
        identified_gaps=list(state.identified_gaps),
    )


@tutor_routes.post("/tutor/stream")
async def tutor_stream(
    submission: TutorSubmission,
    request: Request,
    streamer: TutorStreamer = Depends(get_tutor_streamer),
    selector: KnowledgeSelector = Depends(get_knowledge_selector),
    catalog: CurriculumCatalog = Depends(get_catalog),
    settings: Settings = Depends(get_settings),
    user_id: Optional[str] = Depends(get_optional_user_id),
    lesson_loader: Callable[[str, str], LessonContent] = Depends(get_lesson_loader),
    db: DBSession = Depends(get_db),
) -> StreamingResponse:
    """
    Stream the tutor's answer as text/event-stream:
    data: {"text": ...} per chunk, then data: [DONE] or data: {"error": ...}.
    """
    service = TutorService(
        streamer,
        selector,
        catalog,
        learning_states=LearningStateService(db),
        lesson_loader=lesson_loader,
        max_input_tokens=settings.max_input_tokens,
    )
    return await service.stream_response(submission, user_id=user_id, request=request)


@tutor_routes.get("/tutor/{module_id}/learning-state", response_model=LearningStateResponse)
def get_learning_state(
    module_id: str,
    user_id: str = Depends(get_current_user_id),
    catalog: CurriculumCatalog = Depends(get_catalog),
    db: DBSession = Depends(get_db),
):
    require_module(catalog, module_id)
    return _state_response(module_id, LearningStateService(db).get(user_id, module_id))


@tutor_routes.post("/tutor/{module_id}/learning-state/topics", response_model=LearningStateResponse)
def record_topics(
    module_id: str,
    body: LearningStateUpdate,
    user_id: str = Depends(get_current_user_id),
    catalog: CurriculumCatalog = Depends(get_catalog),
    db: DBSession = Depends(get_db),
):
    require_module(catalog, module_id)
    return _state_response(module_id, LearningStateService(db).record_topics(user_id, module_id, body.items))


@tutor_routes.post("/tutor/{module_id}/learning-state/gaps", response_model=LearningStateResponse)
def record_gaps(
    module_id: str,
    body: LearningStateUpdate,
    user_id: str = Depends(get_current_user_id),
    catalog: CurriculumCatalog = Depends(get_catalog),
    db: DBSession = Depends(get_db),
):
    require_module(catalog, module_id)
    return _state_response(module_id, LearningStateService(db).record_gaps(user_id, module_id, body.items))
