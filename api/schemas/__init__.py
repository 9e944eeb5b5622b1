"""
API schemas package. Import from submodules or from this package.

Example:
    from api.schemas import TutorSubmission, ProgressSummaryResponse
    from api.schemas.progress_schemas import ModuleProgressResponse
"""

from api.schemas.auth_schemas import AuthTokenPayload
from api.schemas.curriculum_schemas import (
    CurriculumResponse,
    ExerciseResponse,
    LessonContentResponse,
    LessonSummary,
    ModuleResponse,
)
from api.schemas.progress_schemas import (
    CurrentModuleResponse,
    ModuleProgressResponse,
    ProgressSummaryResponse,
    ProgressWriteResponse,
)
from api.schemas.tutor_schemas import (
    LearningStateResponse,
    LearningStateUpdate,
    TutorContext,
    TutorSubmission,
    UserState,
    WireMessage,
)

__all__ = [
    "AuthTokenPayload",
    "CurriculumResponse",
    "ExerciseResponse",
    "LessonContentResponse",
    "LessonSummary",
    "ModuleResponse",
    "CurrentModuleResponse",
    "ModuleProgressResponse",
    "ProgressSummaryResponse",
    "ProgressWriteResponse",
    "LearningStateResponse",
    "LearningStateUpdate",
    "TutorContext",
    "TutorSubmission",
    "UserState",
    "WireMessage",
]
