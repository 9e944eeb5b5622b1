"""
Lesson content files: <root>/<module_id>/<lesson_id>.json with
{"title", "objectives", "content"}. A missing or unreadable file yields a
placeholder lesson so the page and the tutor still have something to show.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

COMING_SOON_CONTENT = (
    "# Coming Soon\n\n"
    "This lesson content is being developed. "
    "Use the AI Tutor on the right to explore this topic interactively!"
)

_ORDINAL_PREFIX = re.compile(r"^\d+-")


@dataclass(frozen=True)
class LessonContent:
    title: str
    content: str
    objectives: tuple[str, ...] = field(default_factory=tuple)
    placeholder: bool = False


def placeholder_title(lesson_id: str) -> str:
    """'01-what-is-agentcore' -> 'what is agentcore'"""
    return _ORDINAL_PREFIX.sub("", lesson_id).replace("-", " ")


def placeholder_lesson(lesson_id: str) -> LessonContent:
    return LessonContent(
        title=placeholder_title(lesson_id),
        content=COMING_SOON_CONTENT,
        objectives=("Complete this lesson",),
        placeholder=True,
    )


def lesson_path(root: str | Path, module_id: str, lesson_id: str) -> Path:
    return Path(root) / module_id / f"{lesson_id}.json"


def load_lesson_content(root: str | Path, module_id: str, lesson_id: str) -> LessonContent:
    path = lesson_path(root, module_id, lesson_id)
    if not path.resolve().is_relative_to(Path(root).resolve()):
        logger.warning("lesson path escapes content root module_id=%r lesson_id=%r", module_id, lesson_id)
        return placeholder_lesson(lesson_id)
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("could not load lesson content module_id=%s lesson_id=%s: %s", module_id, lesson_id, e)
        return placeholder_lesson(lesson_id)

    if not isinstance(data, dict) or not isinstance(data.get("content"), str):
        logger.warning("lesson file has no content module_id=%s lesson_id=%s", module_id, lesson_id)
        return placeholder_lesson(lesson_id)

    objectives = data.get("objectives") or []
    return LessonContent(
        title=str(data.get("title") or placeholder_title(lesson_id)),
        content=data["content"],
        objectives=tuple(str(o) for o in objectives if isinstance(o, str)),
    )

