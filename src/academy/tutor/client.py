"""
Chat client: rebuilds the assistant message from a tutor event stream.

    IDLE --submit--> STREAMING
    STREAMING --delta--> STREAMING   (text appended to the transient buffer)
    STREAMING --done--> IDLE         (buffer committed as an assistant message)
    STREAMING --error--> IDLE        (apology committed as the assistant turn)
    STREAMING --cancel--> IDLE       (buffer discarded, nothing committed)

One client drives one conversation; a second submit while a stream is in
flight is refused.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Any, Optional, Sequence

import httpx

from academy.errors import AcademyError, SubmissionError
from academy.tutor.events import (
    ChatMessage,
    DeltaEvent,
    DoneEvent,
    ErrorEvent,
    StreamEvent,
    decode_line,
    is_terminal,
)

logger = logging.getLogger(__name__)

ERROR_REPLY = "I apologize, but I encountered an error. Please try again."


class ChatState(str, Enum):
    IDLE = "idle"
    STREAMING = "streaming"


class StreamInFlightError(AcademyError):
    """submit() called while the previous response is still streaming."""


class ChatClient:
    def __init__(
        self,
        module_id: str,
        lesson_id: str,
        *,
        history: Optional[Sequence[ChatMessage]] = None,
        error_reply: str = ERROR_REPLY,
    ):
        self.module_id = module_id
        self.lesson_id = lesson_id
        self.history: list[ChatMessage] = list(history or [])
        self.error_reply = error_reply
        self.state = ChatState.IDLE
        self.last_error: Optional[str] = None
        self._buffer: list[str] = []

    @property
    def streaming_content(self) -> str:
        return "".join(self._buffer)

    @property
    def in_progress_message(self) -> Optional[ChatMessage]:
        """What the UI renders while streaming; None when idle or nothing arrived yet."""
        if self.state != ChatState.STREAMING or not self._buffer:
            return None
        return ChatMessage(role="assistant", content=self.streaming_content, streaming=True)

    def submit(self, content: str) -> list[dict]:
        """Append the user turn, enter STREAMING and return the history to send."""
        if self.state == ChatState.STREAMING:
            raise StreamInFlightError("a response is already streaming for this conversation")
        content = (content or "").strip()
        if not content:
            raise SubmissionError("message is empty")
        self.history.append(ChatMessage(role="user", content=content))
        self._buffer = []
        self.last_error = None
        self.state = ChatState.STREAMING
        return [m.to_wire() for m in self.history]

    def handle_event(self, event: StreamEvent) -> None:
        if self.state != ChatState.STREAMING:
            logger.debug("event ignored while idle: %r", event)
            return
        if isinstance(event, DeltaEvent):
            self._buffer.append(event.text)
        elif isinstance(event, DoneEvent):
            self._commit(self.streaming_content)
        elif isinstance(event, ErrorEvent):
            self.fail(event.message)

    def handle_line(self, line: str) -> Optional[StreamEvent]:
        event = decode_line(line)
        if event is not None:
            self.handle_event(event)
        return event

    def fail(self, reason: str) -> None:
        """Close the turn with the user-visible apology instead of partial text."""
        if self.state != ChatState.STREAMING:
            return
        logger.warning("tutor stream failed: %s", reason)
        self.last_error = reason
        self._commit(self.error_reply)

    def cancel(self) -> None:
        if self.state == ChatState.STREAMING:
            logger.info("tutor stream cancelled by client; discarding %s chars", len(self.streaming_content))
        self._buffer = []
        self.state = ChatState.IDLE

    def _commit(self, content: str) -> None:
        self.history.append(ChatMessage(role="assistant", content=content))
        self._buffer = []
        self.state = ChatState.IDLE

    def build_request(
        self,
        messages: list[dict],
        *,
        lesson_content: str = "",
        module_context: str = "",
        user_state: Optional[dict[str, Any]] = None,
    ) -> dict:
        context: dict[str, Any] = {}
        if module_context:
            context["moduleContext"] = module_context
        if lesson_content:
            context["lessonContent"] = lesson_content
        if user_state is not None:
            context["userState"] = {
                "topicsExplained": list(user_state.get("topicsExplained") or []),
                "identifiedGaps": list(user_state.get("identifiedGaps") or []),
            }
        return {
            "messages": messages,
            "moduleId": self.module_id,
            "lessonId": self.lesson_id,
            "context": context,
        }

    async def send(
        self,
        http: httpx.AsyncClient,
        url: str,
        content: str,
        *,
        lesson_content: str = "",
        user_state: Optional[dict[str, Any]] = None,
    ) -> ChatMessage:
        """
        Submit one message and consume the event stream until its terminal
        event. Always returns the committed assistant message.
        """
        body = self.build_request(self.submit(content), lesson_content=lesson_content, user_state=user_state)
        try:
            async with http.stream("POST", url, json=body) as response:
                if response.status_code != 200:
                    await response.aread()
                    self.fail(f"HTTP {response.status_code}: {response.text}")
                    return self.history[-1]
                async for line in response.aiter_lines():
                    event = self.handle_line(line)
                    if event is not None and is_terminal(event):
                        break
        except asyncio.CancelledError:
            self.cancel()
            raise
        except httpx.HTTPError as e:
            self.fail(str(e) or type(e).__name__)

        if self.state == ChatState.STREAMING:
            self.fail("stream ended without a terminal event")
        return self.history[-1]
