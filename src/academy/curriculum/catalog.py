"""
Curriculum catalog: immutable description of modules and their ordered lessons.

Loaded once at process start (see api.bootstrap.get_catalog) and shared by all
request handlers. Everything here is frozen; there is no mutation API.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Lesson:
    id: str
    title: str


@dataclass(frozen=True)
class Module:
    id: str
    title: str
    lessons: tuple[Lesson, ...] = ()

    def lesson_index(self, lesson_id: str) -> int:
        """0-based position of lesson_id in this module, -1 if absent."""
        for i, lesson in enumerate(self.lessons):
            if lesson.id == lesson_id:
                return i
        return -1

    def get_lesson(self, lesson_id: str) -> Optional[Lesson]:
        idx = self.lesson_index(lesson_id)
        return self.lessons[idx] if idx >= 0 else None

    @property
    def first_lesson(self) -> Optional[Lesson]:
        return self.lessons[0] if self.lessons else None

    def is_last_lesson(self, lesson_id: str) -> bool:
        return bool(self.lessons) and self.lessons[-1].id == lesson_id


@dataclass(frozen=True)
class CurriculumCatalog:
    modules: tuple[Module, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CurriculumCatalog":
        """
        Build from {"modules": [{"id", "title", "lessons": [{"id", "title"}]}]}.
        Entries without an id are skipped; duplicate module ids keep the first.
        """
        modules: list[Module] = []
        seen: set[str] = set()
        for raw in data.get("modules") or []:
            if not isinstance(raw, dict):
                continue
            module_id = str(raw.get("id") or "").strip()
            if not module_id or module_id in seen:
                continue
            seen.add(module_id)
            lessons = tuple(
                Lesson(id=str(l["id"]).strip(), title=str(l.get("title") or l["id"]))
                for l in raw.get("lessons") or []
                if isinstance(l, dict) and str(l.get("id") or "").strip()
            )
            modules.append(Module(id=module_id, title=str(raw.get("title") or module_id), lessons=lessons))
        return cls(modules=tuple(modules))

    @classmethod
    def load(cls, path: str | Path) -> "CurriculumCatalog":
        with open(path, encoding="utf-8") as f:
            catalog = cls.from_dict(json.load(f))
        logger.info("curriculum loaded path=%s modules=%s", path, len(catalog.modules))
        return catalog

    def __len__(self) -> int:
        return len(self.modules)

    def module_index(self, module_id: str) -> int:
        for i, module in enumerate(self.modules):
            if module.id == module_id:
                return i
        return -1

    def get_module(self, module_id: str) -> Optional[Module]:
        idx = self.module_index(module_id)
        return self.modules[idx] if idx >= 0 else None

    def get_lesson(self, module_id: str, lesson_id: str) -> Optional[Lesson]:
        module = self.get_module(module_id)
        return module.get_lesson(lesson_id) if module else None
