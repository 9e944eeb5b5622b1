"""
Pytest configuration and shared fixtures for the test suite.
Ensures proper Python path and provides common fixtures for unit and integration tests.
"""
import os
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Add project root and src to Python path for imports
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))
src_path = project_root / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

# Settings are read once on first import of api.config; keep tests off the real
# database and without model credentials.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["LLM_PROVIDER"] = "openrouter"
os.environ["OPENROUTER_API_KEY"] = ""


class FakeClock:
    """Deterministic clock: every call advances one second."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2025, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.now = self.now + timedelta(seconds=1)
        return self.now


# ----- Curriculum -----
@pytest.fixture
def catalog():
    """Three modules; the first has three lessons."""
    from academy.curriculum.catalog import CurriculumCatalog
    return CurriculumCatalog.from_dict(
        {
            "modules": [
                {
                    "id": "01-introduction",
                    "title": "Introduction",
                    "lessons": [
                        {"id": "01-what-is-agentcore", "title": "What is AgentCore?"},
                        {"id": "02-architecture-overview", "title": "Architecture"},
                        {"id": "03-key-concepts", "title": "Key Concepts"},
                    ],
                },
                {
                    "id": "02-core-services",
                    "title": "Core Services",
                    "lessons": [
                        {"id": "01-service-overview", "title": "Overview"},
                        {"id": "02-runtime-service", "title": "Runtime"},
                    ],
                },
                {
                    "id": "03-agent-patterns",
                    "title": "Agent Patterns",
                    "lessons": [{"id": "01-tool-selection", "title": "Tool Selection"}],
                },
            ]
        }
    )


# ----- Progress -----
@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    from academy.progress.store import InMemoryProgressStore
    return InMemoryProgressStore(clock=clock)


@pytest.fixture
def engine(store, catalog, clock):
    from academy.progress.engine import ProgressEngine
    return ProgressEngine(store, catalog, clock=clock)


# ----- In-memory DB (for tests that need DB without touching real DB) -----
@pytest.fixture
def in_memory_engine():
    """In-memory SQLite shared across sessions (one connection)."""
    return create_engine(
        "sqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


@pytest.fixture
def session_factory(in_memory_engine):
    """Session factory bound to the in-memory engine. Uses api.config.Base for schema."""
    from api.config import Base
    import api.models  # noqa: F401
    Base.metadata.create_all(in_memory_engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=in_memory_engine)


@pytest.fixture
def db_session(session_factory):
    """Create an in-memory database session."""
    session = session_factory()
    yield session
    session.close()
