"""
Process-wide wiring: curriculum, knowledge base, progress store/engine and the
model provider. Each is built once on first use and shared by all requests.
Routes reach them through FastAPI dependencies so tests can override them.
"""

from functools import lru_cache
from pathlib import Path
from typing import Callable

from academy.core.llm import LLM
from academy.curriculum.catalog import CurriculumCatalog
from academy.curriculum.knowledge import KnowledgeBase, KnowledgeSelector
from academy.curriculum.lessons import LessonContent, load_lesson_content
from academy.errors import ConfigurationError
from academy.progress.engine import ProgressEngine
from academy.progress.store import InMemoryProgressStore, ProgressStore
from academy.tutor.streamer import TutorStreamer
from api.config import SessionLocal, Settings, get_settings
from api.knowledge_map import LESSON_TO_KNOWLEDGE_FILES, MODULE_TO_KNOWLEDGE_DIRS
from api.services.progress_store import SqlProgressStore
from api.utils.logger import configure_logging, log_request

logger = configure_logging()


@lru_cache
def get_catalog() -> CurriculumCatalog:
    settings = get_settings()
    path = settings.curriculum_path
    if not path.is_file():
        logger.warning("curriculum file missing path=%s; serving an empty catalog", path)
        return CurriculumCatalog()
    return CurriculumCatalog.load(path)


@lru_cache
def get_knowledge_selector() -> KnowledgeSelector:
    settings = get_settings()
    with log_request(logger, "load knowledge base"):
        knowledge_base = KnowledgeBase.load(settings.knowledge_dir)
    return KnowledgeSelector(knowledge_base, LESSON_TO_KNOWLEDGE_FILES, MODULE_TO_KNOWLEDGE_DIRS)


@lru_cache
def get_progress_store() -> ProgressStore:
    settings = get_settings()
    if settings.progress_backend == "memory":
        logger.warning("progress backend is in-memory; progress is lost on restart")
        return InMemoryProgressStore()
    return SqlProgressStore(SessionLocal)


def get_progress_engine() -> ProgressEngine:
    return ProgressEngine(
        get_progress_store(),
        get_catalog(),
        preserve_first_completion=get_settings().preserve_first_completion,
    )


def build_llm(settings: Settings) -> LLM:
    if not settings.model_access_configured:
        raise ConfigurationError("AI tutor not configured - missing API key")

    if settings.llm_provider == "ollama":
        from infra.llm.ollama import OllamaLLM

        return OllamaLLM(
            model=settings.ollama_model,
            temperature=settings.llm_temperature,
            base_url=settings.ollama_base_url,
            num_predict=settings.max_output_tokens,
        )

    from infra.llm.openrouter import OpenRouterLLM

    return OpenRouterLLM(
        api_key=settings.openrouter_api_key,
        model=settings.openrouter_model,
        url=settings.openrouter_url,
        temperature=settings.llm_temperature,
        max_tokens=settings.max_output_tokens,
        referer=settings.app_url,
    )


@lru_cache
def _cached_llm() -> LLM:
    return build_llm(get_settings())


def get_tutor_streamer() -> TutorStreamer:
    settings = get_settings()
    return TutorStreamer(
        _cached_llm(),
        idle_timeout=settings.llm_idle_timeout_seconds,
        total_timeout=settings.llm_total_timeout_seconds,
    )


def load_lesson(module_id: str, lesson_id: str) -> LessonContent:
    return load_lesson_content(get_settings().lessons_dir, module_id, lesson_id)


def get_lesson_loader() -> Callable[[str, str], LessonContent]:
    return load_lesson


def get_exercises_dir() -> Path:
    return get_settings().exercises_dir
