"""
Integration test fixtures. Overrides app dependencies with in-memory stores,
a fixed catalog and a scripted model.
"""
import pytest

from academy.progress.engine import ProgressEngine
from academy.progress.store import InMemoryProgressStore


@pytest.fixture
def override_get_db(session_factory):
    """get_db bound to the shared in-memory engine."""

    def _get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    return _get_db


@pytest.fixture
def progress_store():
    return InMemoryProgressStore()


@pytest.fixture
def api_client(override_get_db, catalog, progress_store):
    """FastAPI TestClient with in-memory DB, progress store and test catalog."""
    from fastapi.testclient import TestClient
    from api.api import app
    from api.bootstrap import get_catalog, get_progress_engine
    from api.config import get_db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_catalog] = lambda: catalog
    app.dependency_overrides[get_progress_engine] = lambda: ProgressEngine(progress_store, catalog)
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    """Bearer token for user-1, signed with the configured secret."""
    from api.utils.jwt import create_access_token
    return {"Authorization": f"Bearer {create_access_token('user-1')}"}
