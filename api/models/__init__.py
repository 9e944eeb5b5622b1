"""
API data models. Single import surface for DB entities.

- ModuleProgress: physical progress rows (duplicates allowed per user/module)
- LearningState: tutor-owned topics/gaps per user/module
"""

from api.models.models import LearningState, ModuleProgress

__all__ = [
    "LearningState",
    "ModuleProgress",
]
