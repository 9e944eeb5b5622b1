"""
Core prompt builder: template-based prompt construction for use by the app.
The app defines template strings and passes kwargs; the library fills them.
"""

from __future__ import annotations

from typing import Any, Iterable


class _SafeFormatDict(dict):
    """Mapping that returns empty string for missing keys (for str.format_map)."""

    def __missing__(self, key: str) -> str:
        return ""


def build_from_template(template: str, **kwargs: Any) -> str:
    """
    Fill a template with the given keyword arguments.
    Missing keys and None values render as empty string.
    """
    if not template:
        return ""
    safe = {k: ("" if v is None else v) for k, v in kwargs.items()}
    return template.format_map(_SafeFormatDict(safe))


def join_or_placeholder(items: Iterable[str], placeholder: str, sep: str = ", ") -> str:
    """Join non-blank items; return placeholder when nothing is left."""
    cleaned = [s.strip() for s in items if s and s.strip()]
    return sep.join(cleaned) if cleaned else placeholder
