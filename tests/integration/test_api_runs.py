"""
생성 파이프라인(runs) API 통합 테스트.
실행 시작, 사전 질문, 재생성, 추가 생성, 편집, 내보내기, 리셋, 에러 응답을 확인합니다.
생성 클라이언트는 mock으로 교체합니다.
"""

import io
import zipfile

import pytest
from httpx import AsyncClient, ASGITransport

from app.api.endpoints.text import get_generation_client
from app.exceptions import ClaudeClientError, ConfigurationError
from app.ingestion import ContentIngestor
from app.main import app
from app.services.orchestrator import PipelineOrchestrator
from app.services.run_store import RunStore, get_run_store


@pytest.fixture
def store(mock_generation_client):
    return RunStore(
        factory=lambda events: PipelineOrchestrator(
            generation_client=mock_generation_client,
            ingestor=ContentIngestor(),
            events=events,
            timeout_seconds=0,
        )
    )


@pytest.fixture
async def client(store, mock_generation_client):
    app.dependency_overrides[get_run_store] = lambda: store
    app.dependency_overrides[get_generation_client] = lambda: mock_generation_client
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


async def _start(client, types=("release-notes", "faq", "manual"), text="Feature X launched"):
    response = await client.post(
        "/api/v1/runs",
        data={"selected_types": list(types), "text": text},
    )
    assert response.status_code == 200, response.text
    return response.json()


async def test_start_with_file_upload(client: AsyncClient):
    """txt 파일과 2종 선택 → reviewing 상태로 문서 2개를 반환해야 한다."""
    response = await client.post(
        "/api/v1/runs",
        data={"selected_types": ["release-notes", "faq"]},
        files=[("files", ("notes.txt", b"Feature X launched", "text/plain"))],
    )

    assert response.status_code == 200
    data = response.json()
    assert data["state"] == "reviewing"
    assert [doc["type"] for doc in data["results"]] == ["release-notes", "faq"]
    assert [doc["index"] for doc in data["results"]] == [0, 1]
    assert all(doc["content"] and doc["error"] is None for doc in data["results"])
    assert data["export_selection"] == [0, 1]
    assert data["progress"]["completed_documents"] == 2
    assert data["run_id"] != data["pipeline_run_id"]


async def test_get_run_and_events(client: AsyncClient):
    started = await _start(client, types=["faq"])
    run_id = started["run_id"]

    response = await client.get(f"/api/v1/runs/{run_id}")
    assert response.status_code == 200
    assert response.json()["state"] == "reviewing"

    events = (await client.get(f"/api/v1/runs/{run_id}/events")).json()
    assert events["count"] > 0
    assert events["events"][-1]["state"] == "reviewing"

    later = (await client.get(f"/api/v1/runs/{run_id}/events", params={"since": events["next"]})).json()
    assert later["count"] == 0


async def test_unknown_run_returns_404(client: AsyncClient):
    assert (await client.get("/api/v1/runs/missing")).status_code == 404
    assert (await client.get("/api/v1/runs/missing/events")).status_code == 404
    assert (await client.delete("/api/v1/runs/missing")).status_code == 404


async def test_invalid_input_returns_400(client: AsyncClient, store):
    response = await client.post(
        "/api/v1/runs",
        data={"selected_types": ["faq"], "text": "   "},
    )

    assert response.status_code == 400
    assert response.json()["error_code"] == "ERR_INPUT_001"
    assert len(store) == 0


async def test_unknown_document_type_returns_400(client: AsyncClient):
    response = await client.post(
        "/api/v1/runs",
        data={"selected_types": ["press-release"], "text": "notes"},
    )
    assert response.status_code == 400
    assert response.json()["details"]["doc_type"] == "press-release"


async def test_missing_api_key_fails_fast(client: AsyncClient, mock_generation_client, store):
    mock_generation_client.check_configuration.side_effect = ConfigurationError("ANTHROPIC_API_KEY is not configured")

    response = await client.post(
        "/api/v1/runs",
        data={"selected_types": ["faq"], "text": "notes"},
    )

    assert response.status_code == 500
    assert response.json()["error_code"] == "ERR_CONFIG_001"
    mock_generation_client.generate.assert_not_called()
    assert len(store) == 0


async def test_question_flow(client: AsyncClient, mock_generation_client):
    mock_generation_client.clarifying_questions.return_value = ["Who is the audience?"]

    started = await _start(client, types=["faq"], text="notes")
    run_id = started["run_id"]
    assert started["state"] == "awaiting_answers"
    assert started["clarifying_questions"] == [{"question": "Who is the audience?", "answer": ""}]

    answered = await client.put(f"/api/v1/runs/{run_id}/questions/0", json={"answer": "Support"})
    assert answered.status_code == 200
    assert answered.json()["answer"] == "Support"

    submitted = await client.post(f"/api/v1/runs/{run_id}/questions/submit")
    assert submitted.status_code == 200
    data = submitted.json()
    assert data["state"] == "reviewing"
    assert "**Who is the audience?**\nSupport" in data["source_content"]


async def test_skip_questions(client: AsyncClient, mock_generation_client):
    mock_generation_client.clarifying_questions.return_value = ["Audience?"]
    run_id = (await _start(client, types=["faq"], text="notes"))["run_id"]

    response = await client.post(f"/api/v1/runs/{run_id}/questions/skip")

    assert response.status_code == 200
    assert response.json()["source_content"] == "notes"


async def test_action_in_wrong_state_returns_409(client: AsyncClient):
    run_id = (await _start(client, types=["faq"]))["run_id"]

    response = await client.post(f"/api/v1/runs/{run_id}/questions/skip")

    assert response.status_code == 409
    assert response.json()["error_code"] == "ERR_STATE_001"


async def test_generate_more(client: AsyncClient):
    run_id = (await _start(client, types=["release-notes", "faq"]))["run_id"]

    available = (await client.get(f"/api/v1/runs/{run_id}/available-types")).json()
    assert "faq" not in available["types"]
    assert available["count"] == 5

    response = await client.post(f"/api/v1/runs/{run_id}/generate-more", json={"types": ["manual", "faq"]})
    assert response.status_code == 200
    data = response.json()
    assert data["added"] == 1
    assert [doc["type"] for doc in data["results"]] == ["release-notes", "faq", "manual"]

    rejected = await client.post(f"/api/v1/runs/{run_id}/generate-more", json={"types": ["faq"]})
    assert rejected.status_code == 400


async def test_regenerate_and_failure(client: AsyncClient, mock_generation_client):
    started = await _start(client)
    run_id = started["run_id"]
    mock_generation_client.generate.side_effect = None
    mock_generation_client.generate.return_value = "<p>Fresh</p>"

    response = await client.post(f"/api/v1/runs/{run_id}/documents/1/regenerate")
    assert response.status_code == 200
    assert response.json()["document"]["content"] == "<p>Fresh</p>"

    run = (await client.get(f"/api/v1/runs/{run_id}")).json()
    assert run["results"][0]["content"] == started["results"][0]["content"]
    assert run["results"][2]["content"] == started["results"][2]["content"]

    mock_generation_client.generate.side_effect = ClaudeClientError("API down")
    failed = await client.post(f"/api/v1/runs/{run_id}/documents/0/regenerate")
    assert failed.status_code == 502
    assert failed.json()["message"] == "API down"

    missing = await client.post(f"/api/v1/runs/{run_id}/documents/9/regenerate")
    assert missing.status_code == 400


async def test_edit_and_cleanup(client: AsyncClient):
    run_id = (await _start(client, types=["faq"]))["run_id"]

    edited = await client.put(f"/api/v1/runs/{run_id}/documents/0", json={"content": "<p>Mine</p>"})
    assert edited.json()["document"]["content"] == "<p>Mine</p>"

    cleaned = await client.post(f"/api/v1/runs/{run_id}/documents/0/cleanup")
    assert cleaned.status_code == 200
    assert cleaned.json()["document"]["content"] == "<p>Cleaned</p>"


async def test_export_archive(client: AsyncClient):
    run_id = (await _start(client))["run_id"]

    toggled = await client.post(f"/api/v1/runs/{run_id}/selection/1/toggle")
    assert toggled.json()["export_selection"] == [0, 2]

    response = await client.get(f"/api/v1/runs/{run_id}/export", params={"project_name": "Billing Update"})

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/zip"
    assert 'filename="Billing_Update-documents.zip"' in response.headers["content-disposition"]
    with zipfile.ZipFile(io.BytesIO(response.content)) as archive:
        assert archive.namelist() == ["Release_Notes.html", "User_Manual.html"]


async def test_export_with_empty_selection(client: AsyncClient):
    run_id = (await _start(client, types=["faq"]))["run_id"]

    cleared = await client.put(f"/api/v1/runs/{run_id}/selection", json={"indices": []})
    assert cleared.json()["export_selection"] == []

    response = await client.get(f"/api/v1/runs/{run_id}/export")
    assert response.status_code == 400
    assert response.json()["error_code"] == "ERR_EXPORT_001"


async def test_single_download(client: AsyncClient):
    run_id = (await _start(client, types=["faq"]))["run_id"]

    response = await client.get(f"/api/v1/runs/{run_id}/documents/0/download")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert 'filename="FAQ_Document.html"' in response.headers["content-disposition"]
    assert b"<!DOCTYPE html>" in response.content


async def test_reset_keeps_session(client: AsyncClient):
    started = await _start(client, types=["faq"])
    run_id = started["run_id"]

    response = await client.post(f"/api/v1/runs/{run_id}/reset")

    data = response.json()
    assert data["run_id"] == run_id
    assert data["pipeline_run_id"] != started["pipeline_run_id"]
    assert data["state"] == "idle"
    assert data["results"] == []


async def test_delete_run(client: AsyncClient, store):
    run_id = (await _start(client, types=["faq"]))["run_id"]

    response = await client.delete(f"/api/v1/runs/{run_id}")

    assert response.json() == {"run_id": run_id, "deleted": True}
    assert store.get(run_id) is None


class TestEnhanceText:
    async def test_enhance(self, client: AsyncClient, mock_generation_client):
        response = await client.post("/api/v1/text/enhance", json={"text": "rough notes"})

        assert response.status_code == 200
        assert response.json() == {"text": "Enhanced text"}
        mock_generation_client.enhance.assert_awaited_once_with("rough notes")

    async def test_blank_text(self, client: AsyncClient):
        response = await client.post("/api/v1/text/enhance", json={"text": "  "})
        assert response.status_code == 400
