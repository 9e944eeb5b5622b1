"""
Tutor chat: validate the submission, ground it (knowledge, lesson, learning
state), fit history to the input budget and stream the model's answer as SSE.

Everything that can be rejected is rejected before the response starts. After
the first byte the only way to report a failure is an in-band error event,
which the streamer guarantees.
"""

import asyncio
from typing import Callable, Optional

from fastapi import Request
from fastapi.responses import StreamingResponse

from academy.curriculum.catalog import CurriculumCatalog
from academy.curriculum.knowledge import KnowledgeSelector
from academy.curriculum.lessons import LessonContent
from academy.errors import SubmissionError
from academy.tutor.events import ChatMessage, encode_event
from academy.tutor.learning_state import LearningState
from academy.tutor.streamer import TutorStreamer
from api.prompt_builders import BASE_SYSTEM_PROMPT, assemble_tutor_context
from api.schemas.tutor_schemas import TutorSubmission
from api.services.learning_state_service import LearningStateService
from api.utils.logger import configure_logging
from api.utils.token_budget import fit_history

logger = configure_logging()

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}

DISCONNECT_POLL_SECONDS = 0.5


async def watch_disconnect(request: Request, cancel: asyncio.Event, interval: float = DISCONNECT_POLL_SECONDS) -> None:
    """Set cancel once the client goes away so the provider call is aborted."""
    while not cancel.is_set():
        if await request.is_disconnected():
            logger.info("client disconnected; cancelling tutor stream")
            cancel.set()
            return
        await asyncio.sleep(interval)


class TutorService:
    def __init__(
        self,
        streamer: TutorStreamer,
        selector: KnowledgeSelector,
        catalog: CurriculumCatalog,
        *,
        learning_states: Optional[LearningStateService] = None,
        lesson_loader: Optional[Callable[[str, str], LessonContent]] = None,
        max_input_tokens: int = 24000,
        base_instructions: str = BASE_SYSTEM_PROMPT,
    ):
        self.streamer = streamer
        self.selector = selector
        self.catalog = catalog
        self.learning_states = learning_states
        self.lesson_loader = lesson_loader
        self.max_input_tokens = max_input_tokens
        self.base_instructions = base_instructions

    def validate(self, submission: TutorSubmission) -> list[ChatMessage]:
        missing = [
            name
            for name, value in (
                ("messages", submission.messages),
                ("moduleId", submission.module_id.strip()),
                ("lessonId", submission.lesson_id.strip()),
            )
            if not value
        ]
        if missing:
            raise SubmissionError(f"Missing required fields: {', '.join(missing)}")
        return [ChatMessage(role=m.role, content=m.content) for m in submission.messages]

    def _learning_state(self, submission: TutorSubmission, user_id: Optional[str]) -> LearningState:
        state = submission.context.user_state
        if state is not None:
            return LearningState.of(state.topics_explained, state.identified_gaps)
        if user_id and self.learning_states is not None:
            return self.learning_states.get(user_id, submission.module_id)
        return LearningState()

    def _lesson_content(self, submission: TutorSubmission) -> str:
        content = (submission.context.lesson_content or "").strip()
        if content or self.lesson_loader is None:
            return content
        # Only catalog ids reach the filesystem.
        if self.catalog.get_lesson(submission.module_id, submission.lesson_id) is None:
            logger.info("no catalog lesson module_id=%r lesson_id=%r; sending no lesson content", submission.module_id, submission.lesson_id)
            return ""
        lesson = self.lesson_loader(submission.module_id, submission.lesson_id)
        return "" if lesson.placeholder else lesson.content

    def prepare(self, submission: TutorSubmission, user_id: Optional[str] = None) -> tuple[str, list[ChatMessage]]:
        """System prompt plus the history that fits the input budget."""
        messages = self.validate(submission)
        docs = self.selector.select(submission.module_id, submission.lesson_id)
        system_prompt = assemble_tutor_context(
            self.base_instructions,
            docs,
            self._lesson_content(submission),
            self._learning_state(submission, user_id),
        )
        history = fit_history(system_prompt, messages, self.max_input_tokens)
        if len(history) < len(messages):
            logger.info("history trimmed to fit budget kept=%s of=%s", len(history), len(messages))
        logger.info(
            "tutor request module_id=%s lesson_id=%s messages=%s knowledge_docs=%s",
            submission.module_id,
            submission.lesson_id,
            len(history),
            len(docs),
        )
        return system_prompt, history

    async def stream_response(
        self,
        submission: TutorSubmission,
        user_id: Optional[str] = None,
        request: Optional[Request] = None,
    ) -> StreamingResponse:
        # Learning state and lesson files are read with blocking I/O.
        system_prompt, history = await asyncio.to_thread(self.prepare, submission, user_id)

        async def event_stream():
            cancel = asyncio.Event()
            watcher = asyncio.ensure_future(watch_disconnect(request, cancel)) if request is not None else None
            events = self.streamer.stream(system_prompt, history, cancel=cancel)
            try:
                async for event in events:
                    yield encode_event(event)
            finally:
                cancel.set()
                if watcher is not None:
                    watcher.cancel()
                await events.aclose()

        return StreamingResponse(event_stream(), media_type="text/event-stream", headers=SSE_HEADERS)
