from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

load_dotenv()

PROJECT_ROOT = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    database_url: str = "sqlite:///./academy.db"
    content_dir: Path = PROJECT_ROOT / "content"

    llm_provider: Literal["openrouter", "ollama"] = "openrouter"
    openrouter_api_key: Optional[str] = None
    openrouter_url: str = "https://openrouter.ai/api/v1/chat/completions"
    openrouter_model: str = "z-ai/glm-4.7"
    app_url: str = "https://agentcore.academy"
    ollama_base_url: Optional[str] = "http://localhost:11434"
    ollama_model: str = "qwen:latest"
    llm_temperature: float = 0.7
    max_output_tokens: int = 4096

    # Streaming: wait for the next chunk / whole response before giving up.
    llm_idle_timeout_seconds: float = 60.0
    llm_total_timeout_seconds: float = 300.0
    # Input budget for system prompt + conversation history.
    max_input_tokens: int = 24000

    progress_backend: Literal["sql", "memory"] = "sql"
    preserve_first_completion: bool = False

    jwt_secret: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"

    log_level: str = "INFO"
    log_dir: Path = Path("logs")
    log_to_console: bool = False

    # Computed once at construction; see _check_model_access.
    model_access_configured: bool = False

    @model_validator(mode="after")
    def _check_model_access(self) -> "Settings":
        if self.llm_provider == "openrouter":
            configured = bool((self.openrouter_api_key or "").strip())
        else:
            configured = bool((self.ollama_base_url or "").strip())
        self.model_access_configured = configured
        return self

    @property
    def curriculum_path(self) -> Path:
        return self.content_dir / "curriculum.json"

    @property
    def knowledge_dir(self) -> Path:
        return self.content_dir / "knowledge-base"

    @property
    def lessons_dir(self) -> Path:
        return self.content_dir / "lessons"

    @property
    def exercises_dir(self) -> Path:
        return self.content_dir / "exercises"


@lru_cache
def get_settings() -> Settings:
    return Settings()


def _connect_args(url: str) -> dict:
    return {"check_same_thread": False} if url.startswith("sqlite") else {}


settings = get_settings()
engine = create_engine(settings.database_url, connect_args=_connect_args(settings.database_url))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def create_db():
    # Register tables on Base before create_all.
    import api.models  # noqa: F401

    Base.metadata.create_all(bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
