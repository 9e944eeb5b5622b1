from academy.progress.engine import (
    CurrentModule,
    ProgressEngine,
    ProgressSummary,
    progress_percent,
    resolve_authoritative,
)
from academy.progress.records import ModuleStatus, ProgressRecord
from academy.progress.store import InMemoryProgressStore, ProgressStore

__all__ = [
    "CurrentModule",
    "InMemoryProgressStore",
    "ModuleStatus",
    "ProgressEngine",
    "ProgressRecord",
    "ProgressStore",
    "ProgressSummary",
    "progress_percent",
    "resolve_authoritative",
]
