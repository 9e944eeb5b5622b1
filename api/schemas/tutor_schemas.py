"""
Tutor chat submission envelope. Keys are camelCase on the wire.

Required-ness of messages/moduleId/lessonId is checked by the tutor service
so a missing field gets the same 400 as an empty one; only wrongly typed
payloads fail here (422).
"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class WireMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str


class UserState(_CamelModel):
    topics_explained: list[str] = Field(default_factory=list, alias="topicsExplained")
    identified_gaps: list[str] = Field(default_factory=list, alias="identifiedGaps")


class TutorContext(_CamelModel):
    # Accepted for compatibility; grounding comes from the knowledge selector.
    module_context: Optional[str] = Field(None, alias="moduleContext")
    lesson_content: Optional[str] = Field(None, alias="lessonContent")
    user_state: Optional[UserState] = Field(None, alias="userState")


class TutorSubmission(_CamelModel):
    messages: list[WireMessage] = Field(default_factory=list)
    module_id: str = Field("", alias="moduleId")
    lesson_id: str = Field("", alias="lessonId")
    context: TutorContext = Field(default_factory=TutorContext)


class LearningStateUpdate(BaseModel):
    items: list[str] = Field(..., min_length=1)


class LearningStateResponse(_CamelModel):
    module_id: str = Field(..., alias="moduleId")
    topics_explained: list[str] = Field(default_factory=list, alias="topicsExplained")
    identified_gaps: list[str] = Field(default_factory=list, alias="identifiedGaps")
