"""
SqlProgressStore against in-memory SQLite, driven through the ProgressEngine.
"""
import threading

import pytest

from academy.progress.engine import ProgressEngine
from academy.progress.records import ModuleStatus
from api.models.models import ModuleProgress
from api.services.progress_store import SqlProgressStore

USER = "user-1"


@pytest.fixture
def sql_store(session_factory):
    return SqlProgressStore(session_factory)


@pytest.mark.integration
class TestSqlProgressStore:
    @pytest.mark.asyncio
    async def test_create_update_list(self, sql_store):
        created = await sql_store.create(
            {"user_id": USER, "module_id": "m1", "status": ModuleStatus.IN_PROGRESS, "bookmarks": ["l1"], "id": "ignored"}
        )
        assert created is not None
        assert created.id != "ignored"
        assert created.status == ModuleStatus.IN_PROGRESS
        assert created.bookmarks == ["l1"]
        assert created.created_at.tzinfo is not None

        updated = await sql_store.update(created.id, {"current_lesson_id": "l2", "module_id": "other"})
        assert updated.current_lesson_id == "l2"
        assert updated.module_id == "m1"
        assert updated.updated_at >= created.updated_at

        assert [r.id for r in await sql_store.list(USER, "m1")] == [created.id]
        assert await sql_store.list(USER, "m2") == []
        assert await sql_store.list("someone-else") == []

    @pytest.mark.asyncio
    async def test_create_never_upserts(self, sql_store):
        await sql_store.create({"user_id": USER, "module_id": "m1"})
        await sql_store.create({"user_id": USER, "module_id": "m1"})
        assert len(await sql_store.list(USER, "m1")) == 2

    @pytest.mark.asyncio
    async def test_rejections_return_none(self, sql_store):
        assert await sql_store.create({"module_id": "m1"}) is None
        assert await sql_store.update("missing-id", {"status": ModuleStatus.COMPLETED}) is None

    @pytest.mark.asyncio
    async def test_database_failure_returns_none(self, sql_store, in_memory_engine):
        ModuleProgress.__table__.drop(in_memory_engine)
        assert await sql_store.create({"user_id": USER, "module_id": "m1"}) is None
        assert await sql_store.list(USER) == []

    @pytest.mark.asyncio
    async def test_session_work_runs_off_the_event_loop_thread(self, session_factory):
        loop_thread = threading.get_ident()
        session_threads = []

        def recording_factory():
            session_threads.append(threading.get_ident())
            return session_factory()

        store = SqlProgressStore(recording_factory)
        created = await store.create({"user_id": USER, "module_id": "m1"})
        await store.update(created.id, {"status": ModuleStatus.COMPLETED})
        await store.list(USER)

        assert len(session_threads) == 3
        assert loop_thread not in session_threads


@pytest.mark.integration
class TestEngineOnSql:
    @pytest.mark.asyncio
    async def test_full_module_walkthrough(self, sql_store, catalog):
        engine = ProgressEngine(sql_store, catalog)

        assert await engine.is_module_unlocked(USER, "02-core-services") is False
        await engine.update_current_lesson(USER, "01-introduction", "01-what-is-agentcore")
        await engine.toggle_bookmark(USER, "01-introduction", "01-what-is-agentcore")
        await engine.update_current_lesson(USER, "01-introduction", "03-key-concepts")

        record = await engine.get_module_progress(USER, "01-introduction")
        assert record.status == ModuleStatus.COMPLETED
        assert record.bookmarks == ["01-what-is-agentcore"]
        assert await engine.is_module_unlocked(USER, "02-core-services") is True
        assert len(await sql_store.list(USER)) == 1

    @pytest.mark.asyncio
    async def test_duplicate_rows_resolve_to_completed(self, sql_store, catalog):
        engine = ProgressEngine(sql_store, catalog)
        await sql_store.create({"user_id": USER, "module_id": "01-introduction", "status": ModuleStatus.IN_PROGRESS})
        await sql_store.create({"user_id": USER, "module_id": "01-introduction", "status": ModuleStatus.COMPLETED})
        await engine.start_module(USER, "01-introduction", "01-what-is-agentcore")

        assert await engine.get_module_status(USER, "01-introduction") == ModuleStatus.COMPLETED
        assert await engine.get_module_progress_percent(USER, "01-introduction") == 100
