"""
API integration tests using FastAPI TestClient with in-memory DB and stores.
"""
import json
from functools import partial
from typing import AsyncIterator, Sequence

import pytest
from fastapi.testclient import TestClient

from academy.core.llm import LLM
from academy.curriculum.knowledge import KnowledgeBase, KnowledgeSelector
from academy.curriculum.lessons import load_lesson_content
from academy.tutor.events import ChatMessage, DeltaEvent, DoneEvent, ErrorEvent, decode_line
from academy.tutor.streamer import TutorStreamer
from api.api import app
from api.bootstrap import get_exercises_dir, get_knowledge_selector, get_lesson_loader, get_tutor_streamer

MOD1 = "01-introduction"
MOD2 = "02-core-services"


class RecordingLLM(LLM):
    def __init__(self, chunks, error=None):
        self.chunks = chunks
        self.error = error
        self.system_prompts: list[str] = []
        self.histories: list[list[ChatMessage]] = []

    async def stream(self, system_prompt: str, messages: Sequence[ChatMessage]) -> AsyncIterator[str]:
        self.system_prompts.append(system_prompt)
        self.histories.append(list(messages))
        for c in self.chunks:
            yield c
        if self.error is not None:
            raise self.error


def use_llm(llm: LLM) -> None:
    app.dependency_overrides[get_tutor_streamer] = lambda: TutorStreamer(llm, idle_timeout=5, total_timeout=10)


def events_of(response) -> list:
    return [e for e in (decode_line(line) for line in response.text.splitlines()) if e is not None]


def submission(**overrides):
    body = {
        "messages": [{"role": "user", "content": "What is AgentCore?"}],
        "moduleId": MOD1,
        "lessonId": "01-what-is-agentcore",
        "context": {},
    }
    body.update(overrides)
    return body


@pytest.fixture
def tutor_client(api_client, tmp_path):
    """api_client with a small knowledge base and lesson files."""
    kb = KnowledgeBase(documents={"01-introduction/what-is-agentcore.md": "AgentCore hosts agents in Runtime."})
    selector = KnowledgeSelector(kb, {"01-what-is-agentcore": ["01-introduction/what-is-agentcore.md"]}, {})
    (tmp_path / MOD1).mkdir()
    (tmp_path / MOD1 / "01-what-is-agentcore.json").write_text(
        json.dumps({"title": "What is AgentCore?", "objectives": ["Explain it"], "content": "LESSON BODY"}),
        encoding="utf-8",
    )
    app.dependency_overrides[get_knowledge_selector] = lambda: selector
    app.dependency_overrides[get_lesson_loader] = lambda: partial(load_lesson_content, tmp_path)
    return api_client


@pytest.fixture
def exercise_client(api_client, tmp_path):
    """api_client with one exercise for the first module."""
    exercises = tmp_path / "exercises"
    (exercises / MOD1).mkdir(parents=True)
    (exercises / MOD1 / "first-agent.json").write_text(
        json.dumps(
            {
                "exerciseId": "first-agent",
                "title": "First Agent",
                "objectives": ["Plan an agent"],
                "deliverable": {"type": "form", "fields": [{"name": "purpose", "label": "Purpose", "type": "textarea"}]},
                "successCriteria": ["Uses Runtime"],
                "tutorPrompt": "Guide the plan",
            }
        ),
        encoding="utf-8",
    )
    app.dependency_overrides[get_exercises_dir] = lambda: exercises
    return api_client


@pytest.mark.integration
class TestHealthRoutes:
    """Health and root endpoints (no auth)."""

    def test_root_returns_healthy(self, api_client: TestClient):
        response = api_client.get("/")
        assert response.status_code == 200
        assert "Healthy" in response.json()["message"]

    def test_request_id_echoed(self, api_client: TestClient):
        response = api_client.get("/", headers={"x-request-id": "rid-123"})
        assert response.headers["x-request-id"] == "rid-123"


@pytest.mark.integration
class TestTutorStream:
    def test_streams_deltas_then_done(self, tutor_client: TestClient):
        llm = RecordingLLM(["Hel", "lo world"])
        use_llm(llm)

        response = tutor_client.post("/academy/tutor/stream", json=submission())

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")
        assert response.headers["cache-control"] == "no-cache"
        assert events_of(response) == [DeltaEvent("Hel"), DeltaEvent("lo world"), DoneEvent()]
        assert response.text.endswith("data: [DONE]\n\n")

    def test_prompt_is_grounded(self, tutor_client: TestClient):
        llm = RecordingLLM(["ok"])
        use_llm(llm)

        tutor_client.post(
            "/academy/tutor/stream",
            json=submission(context={"userState": {"topicsExplained": ["runtime"], "identifiedGaps": []}}),
        )

        prompt = llm.system_prompts[0]
        assert "AgentCore hosts agents in Runtime." in prompt
        assert "LESSON BODY" in prompt
        assert "Topics already explained: runtime" in prompt
        assert "Identified knowledge gaps: None identified" in prompt

    def test_request_lesson_content_wins_over_file(self, tutor_client: TestClient):
        llm = RecordingLLM(["ok"])
        use_llm(llm)

        tutor_client.post("/academy/tutor/stream", json=submission(context={"lessonContent": "FROM PAGE"}))

        assert "FROM PAGE" in llm.system_prompts[0]
        assert "LESSON BODY" not in llm.system_prompts[0]

    def test_unknown_lesson_uses_fallback_knowledge(self, tutor_client: TestClient):
        llm = RecordingLLM(["ok"])
        use_llm(llm)

        response = tutor_client.post("/academy/tutor/stream", json=submission(moduleId="99-x", lessonId="99-y"))

        assert response.status_code == 200
        assert "general knowledge" in llm.system_prompts[0]

    def test_lesson_ids_outside_catalog_load_no_file(self, tutor_client: TestClient):
        llm = RecordingLLM(["ok"])
        use_llm(llm)

        response = tutor_client.post(
            "/academy/tutor/stream",
            json=submission(lessonId=f"../{MOD1}/01-what-is-agentcore"),
        )

        assert response.status_code == 200
        assert "LESSON BODY" not in llm.system_prompts[0]

    def test_mid_stream_failure_is_in_band(self, tutor_client: TestClient):
        use_llm(RecordingLLM(["partial"], error=RuntimeError("upstream reset")))

        response = tutor_client.post("/academy/tutor/stream", json=submission())

        assert response.status_code == 200
        assert events_of(response) == [DeltaEvent("partial"), ErrorEvent("upstream reset")]

    def test_stored_learning_state_used_for_signed_in_user(self, tutor_client: TestClient, auth_headers):
        tutor_client.post(
            f"/academy/tutor/{MOD1}/learning-state/gaps", json={"items": ["session isolation"]}, headers=auth_headers
        )
        llm = RecordingLLM(["ok"])
        use_llm(llm)

        tutor_client.post("/academy/tutor/stream", json=submission(), headers=auth_headers)

        assert "Identified knowledge gaps: session isolation" in llm.system_prompts[0]

    @pytest.mark.parametrize(
        "overrides, missing",
        [
            ({"messages": []}, "messages"),
            ({"moduleId": ""}, "moduleId"),
            ({"lessonId": "  "}, "lessonId"),
        ],
    )
    def test_missing_fields_rejected_before_streaming(self, tutor_client: TestClient, overrides, missing):
        llm = RecordingLLM(["never"])
        use_llm(llm)

        response = tutor_client.post("/academy/tutor/stream", json=submission(**overrides))

        assert response.status_code == 400
        assert missing in response.json()["error"]
        assert llm.system_prompts == []

    def test_wrongly_typed_payload_is_422(self, tutor_client: TestClient):
        use_llm(RecordingLLM(["never"]))
        response = tutor_client.post("/academy/tutor/stream", json=submission(messages="hello"))
        assert response.status_code == 422
        assert "detail" in response.json()

    def test_unconfigured_model_is_503(self, tutor_client: TestClient):
        response = tutor_client.post("/academy/tutor/stream", json=submission())
        assert response.status_code == 503
        assert "not configured" in response.json()["error"]


@pytest.mark.integration
class TestLearningStateRoutes:
    def test_requires_auth(self, api_client: TestClient):
        assert api_client.get(f"/academy/tutor/{MOD1}/learning-state").status_code == 401

    def test_record_and_read(self, api_client: TestClient, auth_headers):
        api_client.post(
            f"/academy/tutor/{MOD1}/learning-state/topics", json={"items": ["runtime", "memory"]}, headers=auth_headers
        )
        response = api_client.post(
            f"/academy/tutor/{MOD1}/learning-state/topics", json={"items": ["memory", "gateway"]}, headers=auth_headers
        )
        assert response.status_code == 200
        assert response.json()["topicsExplained"] == ["runtime", "memory", "gateway"]

        data = api_client.get(f"/academy/tutor/{MOD1}/learning-state", headers=auth_headers).json()
        assert data == {"moduleId": MOD1, "topicsExplained": ["runtime", "memory", "gateway"], "identifiedGaps": []}

    def test_empty_items_rejected(self, api_client: TestClient, auth_headers):
        response = api_client.post(f"/academy/tutor/{MOD1}/learning-state/gaps", json={"items": []}, headers=auth_headers)
        assert response.status_code == 422

    def test_unknown_module(self, api_client: TestClient, auth_headers):
        assert api_client.get("/academy/tutor/99-x/learning-state", headers=auth_headers).status_code == 404


@pytest.mark.integration
class TestCurriculumRoutes:
    def test_list(self, api_client: TestClient):
        data = api_client.get("/academy/curriculum").json()
        assert [m["id"] for m in data["modules"]] == [MOD1, MOD2, "03-agent-patterns"]
        assert data["modules"][0]["lessons"][2] == {"id": "03-key-concepts", "title": "Key Concepts", "order_index": 2}

    def test_module(self, api_client: TestClient):
        data = api_client.get(f"/academy/curriculum/{MOD2}").json()
        assert data["order_index"] == 1
        assert data["title"] == "Core Services"

    def test_unknown_module_404(self, api_client: TestClient):
        response = api_client.get("/academy/curriculum/99-x")
        assert response.status_code == 404
        assert "99-x" in response.json()["detail"]

    def test_lesson_content(self, tutor_client: TestClient):
        data = tutor_client.get(f"/academy/curriculum/{MOD1}/lessons/01-what-is-agentcore").json()
        assert data["content"] == "LESSON BODY"
        assert data["objectives"] == ["Explain it"]
        assert data["placeholder"] is False

    def test_lesson_without_file_is_coming_soon(self, tutor_client: TestClient):
        data = tutor_client.get(f"/academy/curriculum/{MOD1}/lessons/03-key-concepts").json()
        assert data["placeholder"] is True
        assert data["content"].startswith("# Coming Soon")

    def test_unknown_lesson_404(self, api_client: TestClient):
        assert api_client.get(f"/academy/curriculum/{MOD1}/lessons/99-x").status_code == 404

    def test_exercise(self, exercise_client: TestClient):
        data = exercise_client.get(f"/academy/curriculum/{MOD1}/exercise").json()
        assert data["module_id"] == MOD1
        assert data["exercise_id"] == "first-agent"
        assert data["deliverable"]["fields"][0]["name"] == "purpose"
        assert data["success_criteria"] == ["Uses Runtime"]
        assert data["tutor_prompt"] == "Guide the plan"

    def test_module_without_exercise_404(self, exercise_client: TestClient):
        response = exercise_client.get(f"/academy/curriculum/{MOD2}/exercise")
        assert response.status_code == 404
        assert MOD2 in response.json()["detail"]

    def test_exercise_for_unknown_module_404(self, exercise_client: TestClient):
        assert exercise_client.get("/academy/curriculum/99-x/exercise").status_code == 404

    def test_modules_flag_exercises(self, exercise_client: TestClient):
        modules = exercise_client.get("/academy/curriculum").json()["modules"]
        assert [m["has_exercise"] for m in modules] == [True, False, False]
        assert exercise_client.get(f"/academy/curriculum/{MOD1}").json()["has_exercise"] is True
        assert exercise_client.get(f"/academy/curriculum/{MOD2}").json()["has_exercise"] is False


@pytest.mark.integration
class TestProgressRoutes:
    def test_requires_auth(self, api_client: TestClient):
        assert api_client.get("/academy/progress").status_code == 401

    def test_invalid_token(self, api_client: TestClient):
        response = api_client.get("/academy/progress", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    def test_cookie_token_accepted(self, api_client: TestClient):
        from api.utils.jwt import create_access_token
        cookie = {"Cookie": f"access_token={create_access_token('user-cookie')}"}
        assert api_client.get("/academy/progress", headers=cookie).status_code == 200

    def test_empty_summary(self, api_client: TestClient, auth_headers):
        data = api_client.get("/academy/progress", headers=auth_headers).json()
        assert data["completed_modules"] == 0
        assert data["total_modules"] == 3
        assert data["current_module"] is None
        assert [m["unlocked"] for m in data["modules"]] == [True, False, False]

    def test_lesson_walkthrough_unlocks_next_module(self, api_client: TestClient, auth_headers):
        response = api_client.post(f"/academy/progress/{MOD1}/lessons/01-what-is-agentcore/view", headers=auth_headers)
        assert response.status_code == 200
        body = response.json()
        assert body["saved"] is True
        assert body["progress"]["status"] == "IN_PROGRESS"
        assert body["progress"]["progress"] == 33

        summary = api_client.get("/academy/progress", headers=auth_headers).json()
        assert summary["current_module"]["id"] == MOD1
        assert summary["current_module"]["progress"] == 33

        body = api_client.post(f"/academy/progress/{MOD1}/lessons/03-key-concepts/view", headers=auth_headers).json()
        assert body["progress"]["status"] == "COMPLETED"
        assert body["progress"]["completed_at"].endswith("Z")

        assert api_client.get(f"/academy/progress/{MOD2}", headers=auth_headers).json()["unlocked"] is True

    def test_locked_module_view_forbidden(self, api_client: TestClient, auth_headers):
        response = api_client.post(f"/academy/progress/{MOD2}/lessons/01-service-overview/view", headers=auth_headers)
        assert response.status_code == 403

    def test_start_and_complete(self, api_client: TestClient, auth_headers):
        body = api_client.post(f"/academy/progress/{MOD1}/start", headers=auth_headers).json()
        assert body["progress"]["current_lesson_id"] == "01-what-is-agentcore"

        body = api_client.post(f"/academy/progress/{MOD1}/complete", headers=auth_headers).json()
        assert body["saved"] is True
        assert body["progress"]["progress"] == 100

        summary = api_client.get("/academy/progress", headers=auth_headers).json()
        assert summary["completed_modules"] == 1
        assert summary["overall_progress"] == 33

    def test_bookmark_toggle(self, api_client: TestClient, auth_headers):
        url = f"/academy/progress/{MOD1}/bookmarks/02-architecture-overview"
        assert api_client.post(url, headers=auth_headers).json()["progress"]["bookmarks"] == ["02-architecture-overview"]
        assert api_client.post(url, headers=auth_headers).json()["progress"]["bookmarks"] == []

    def test_store_rejection_reported(self, api_client: TestClient, auth_headers, progress_store):
        progress_store.reject_writes = True
        body = api_client.post(f"/academy/progress/{MOD1}/complete", headers=auth_headers).json()
        assert body["saved"] is False
        assert body["progress"]["status"] == "NOT_STARTED"

    def test_unknown_module_404(self, api_client: TestClient, auth_headers):
        assert api_client.post("/academy/progress/99-x/start", headers=auth_headers).status_code == 404
