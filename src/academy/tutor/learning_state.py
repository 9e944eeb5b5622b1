from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable


def _append_unique(items: tuple[str, ...], values: Iterable[str]) -> tuple[str, ...]:
    out = list(items)
    for v in values:
        v = (v or "").strip()
        if v and v not in out:
            out.append(v)
    return tuple(out)


@dataclass(frozen=True)
class LearningState:
    """
    Per (user, module) tutoring memory. Both lists are append-only and keep
    first-seen order; re-adding an existing entry is a no-op.
    """
    topics_explained: tuple[str, ...] = ()
    identified_gaps: tuple[str, ...] = ()

    @classmethod
    def of(cls, topics_explained: Iterable[str] = (), identified_gaps: Iterable[str] = ()) -> "LearningState":
        return cls(_append_unique((), topics_explained), _append_unique((), identified_gaps))

    def with_topics(self, *topics: str) -> "LearningState":
        return replace(self, topics_explained=_append_unique(self.topics_explained, topics))

    def with_gaps(self, *gaps: str) -> "LearningState":
        return replace(self, identified_gaps=_append_unique(self.identified_gaps, gaps))
