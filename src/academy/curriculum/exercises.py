"""
Module exercises: <root>/<module_id>/<any>.json, at most one per module.

An exercise describes a hands-on deliverable (form, code or checklist fields),
the criteria it is judged by and an optional prompt that seeds the tutor.
Modules without a readable exercise file simply have no exercise.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)

FIELD_TYPES = ("text", "textarea", "list", "code", "select", "checklist")
DELIVERABLE_TYPES = ("form", "code", "checklist")


@dataclass(frozen=True)
class FieldOption:
    value: str
    label: str


@dataclass(frozen=True)
class ExerciseField:
    name: str
    label: str
    type: str = "text"
    placeholder: Optional[str] = None
    required: bool = False
    help_text: Optional[str] = None
    min_length: Optional[int] = None
    min_items: Optional[int] = None
    max_items: Optional[int] = None
    options: tuple[FieldOption, ...] = field(default_factory=tuple)
    language: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ExerciseField":
        options = []
        for o in data.get("options") or []:
            if isinstance(o, str):
                options.append(FieldOption(value=o, label=o))
            elif isinstance(o, dict) and "value" in o:
                options.append(FieldOption(value=str(o["value"]), label=str(o.get("label") or o["value"])))
        field_type = data.get("type") if data.get("type") in FIELD_TYPES else "text"
        return cls(
            name=str(data["name"]),
            label=str(data.get("label") or data["name"]),
            type=field_type,
            placeholder=data.get("placeholder"),
            required=bool(data.get("required", False)),
            help_text=data.get("helpText"),
            min_length=data.get("minLength"),
            min_items=data.get("minItems"),
            max_items=data.get("maxItems"),
            options=tuple(options),
            language=data.get("language"),
        )


@dataclass(frozen=True)
class Deliverable:
    type: str
    fields: tuple[ExerciseField, ...]


@dataclass(frozen=True)
class Exercise:
    module_id: str
    exercise_id: str
    title: str
    estimated_time: str
    overview: str
    objectives: tuple[str, ...]
    context: str
    instructions: str
    deliverable: Deliverable
    success_criteria: tuple[str, ...]
    example_submission: Optional[dict[str, Any]] = None
    tutor_prompt: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any], module_id: str) -> "Exercise":
        """Raises KeyError/TypeError/ValueError on a malformed document."""
        deliverable = data["deliverable"]
        fields = tuple(ExerciseField.from_dict(f) for f in deliverable["fields"])
        deliverable_type = deliverable.get("type")
        if deliverable_type not in DELIVERABLE_TYPES:
            raise ValueError(f"unknown deliverable type {deliverable_type!r}")
        example = data.get("exampleSubmission")
        return cls(
            module_id=str(data.get("moduleId") or module_id),
            exercise_id=str(data["exerciseId"]),
            title=str(data["title"]),
            estimated_time=str(data.get("estimatedTime") or ""),
            overview=str(data.get("overview") or ""),
            objectives=tuple(str(o) for o in data.get("objectives") or []),
            context=str(data.get("context") or ""),
            instructions=str(data.get("instructions") or ""),
            deliverable=Deliverable(type=deliverable_type, fields=fields),
            success_criteria=tuple(str(c) for c in data.get("successCriteria") or []),
            example_submission=example if isinstance(example, dict) else None,
            tutor_prompt=data.get("tutorPrompt"),
        )


def _module_dir(root: str | Path, module_id: str) -> Optional[Path]:
    base = Path(root).resolve()
    module_dir = (base / module_id).resolve()
    if module_dir == base or not module_dir.is_relative_to(base):
        logger.warning("exercise path escapes content root module_id=%r", module_id)
        return None
    return module_dir


def load_exercise(root: str | Path, module_id: str) -> Optional[Exercise]:
    """First *.json (by name) in the module's exercise directory, or None."""
    module_dir = _module_dir(root, module_id)
    if module_dir is None or not module_dir.is_dir():
        return None
    files = sorted(module_dir.glob("*.json"))
    if not files:
        return None
    try:
        with open(files[0], encoding="utf-8") as f:
            data = json.load(f)
        return Exercise.from_dict(data, module_id)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("could not read exercise module_id=%s path=%s: %s", module_id, files[0], e)
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        logger.warning("malformed exercise module_id=%s path=%s: %r", module_id, files[0], e)
    return None


def has_exercise(root: str | Path, module_id: str) -> bool:
    return load_exercise(root, module_id) is not None


def modules_with_exercises(root: str | Path) -> list[str]:
    base = Path(root)
    if not base.is_dir():
        return []
    return sorted(p.name for p in base.iterdir() if p.is_dir() and has_exercise(base, p.name))
