"""
Stream events and their line-oriented wire framing.

    data: {"text": "<delta chunk>"}\n\n     zero or more
    data: [DONE]\n\n                        success terminal
    data: {"error": "<message>"}\n\n        failure terminal

A stream carries any number of DeltaEvents followed by exactly one terminal
event (DoneEvent or ErrorEvent). Delta texts concatenate in emission order.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Literal, Optional, Union

DATA_PREFIX = "data:"
DONE_SENTINEL = "[DONE]"

Role = Literal["user", "assistant"]


@dataclass(frozen=True)
class ChatMessage:
    role: Role
    content: str
    # UI-only marker for the in-progress assistant message; never sent upstream.
    streaming: bool = False

    def to_wire(self) -> dict:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class DeltaEvent:
    text: str


@dataclass(frozen=True)
class DoneEvent:
    pass


@dataclass(frozen=True)
class ErrorEvent:
    message: str


StreamEvent = Union[DeltaEvent, DoneEvent, ErrorEvent]


def is_terminal(event: StreamEvent) -> bool:
    return isinstance(event, (DoneEvent, ErrorEvent))


def encode_event(event: StreamEvent) -> str:
    if isinstance(event, DeltaEvent):
        body = json.dumps({"text": event.text}, ensure_ascii=False)
    elif isinstance(event, ErrorEvent):
        body = json.dumps({"error": event.message}, ensure_ascii=False)
    elif isinstance(event, DoneEvent):
        body = DONE_SENTINEL
    else:
        raise TypeError(f"not a stream event: {event!r}")
    return f"{DATA_PREFIX} {body}\n\n"


def decode_line(line: str) -> Optional[StreamEvent]:
    """
    Parse one wire line. Blank lines, comments/keep-alives and anything that
    is not the expected JSON envelope return None and should be skipped.
    """
    line = line.strip()
    if not line.startswith(DATA_PREFIX):
        return None
    payload = line[len(DATA_PREFIX):].strip()
    if payload == DONE_SENTINEL:
        return DoneEvent()
    try:
        data = json.loads(payload)
    except (json.JSONDecodeError, ValueError):
        return None
    if not isinstance(data, dict):
        return None
    if isinstance(data.get("error"), str):
        return ErrorEvent(message=data["error"])
    if isinstance(data.get("text"), str):
        return DeltaEvent(text=data["text"])
    return None
