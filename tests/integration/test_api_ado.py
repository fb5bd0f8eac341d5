"""
Azure DevOps 가져오기 API 통합 테스트.
ADO 클라이언트는 httpx.MockTransport를 쓰는 인스턴스로 교체합니다.
"""

import json

import httpx
import pytest
from httpx import AsyncClient, ASGITransport

from app.main import app
from app.services.ado_client import AzureDevOpsClient, get_ado_client


def ado_handler(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    if path.endswith("/_apis/projects"):
        return httpx.Response(200, json={"value": [
            {"id": "b", "name": "Web"},
            {"id": "a", "name": "api"},
        ]})
    if path.endswith("/_apis/wit/wiql"):
        query = json.loads(request.content)["query"]
        if "broken" in query:
            return httpx.Response(400, json={"message": "TF51005: bad field"})
        return httpx.Response(200, json={"workItems": [{"id": 12}, {"id": 7}]})
    if path.endswith("/_apis/wit/workitems"):
        ids = [int(i) for i in request.url.params["ids"].split(",")]
        return httpx.Response(200, json={"value": [
            {
                "id": i,
                "fields": {"System.Title": f"Story {i}", "System.Description": f"<p>Details {i}</p>"},
            }
            for i in ids
        ]})
    return httpx.Response(404, json={"message": "not found"})


@pytest.fixture
async def client():
    ado = AzureDevOpsClient(organization="contoso", pat="pat", transport=httpx.MockTransport(ado_handler))
    app.dependency_overrides[get_ado_client] = lambda: ado
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


async def test_list_projects(client: AsyncClient):
    response = await client.get("/api/v1/ado/projects")

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert [p["name"] for p in data["projects"]] == ["api", "Web"]
    assert data["count"] == 2


async def test_search_uses_camel_case(client: AsyncClient):
    response = await client.post(
        "/api/v1/ado/search",
        json={"searchText": "login", "workItemTypes": ["User Story"]},
    )

    assert response.status_code == 200
    data = response.json()
    assert [item["id"] for item in data["workItems"]] == [12, 7]
    assert data["workItems"][0]["fields"]["Title"] == "Story 12"


async def test_search_error_includes_remote_details(client: AsyncClient):
    response = await client.post("/api/v1/ado/search", json={"searchText": "broken"})

    assert response.status_code == 502
    body = response.json()
    assert body["error_code"] == "ERR_ADO_001"
    assert body["message"] == "TF51005: bad field"
    assert body["details"] == {"message": "TF51005: bad field"}


async def test_import_formats_text(client: AsyncClient):
    response = await client.post("/api/v1/ado/import", json={"ids": [7]})

    assert response.status_code == 200
    assert response.json()["text"] == "Imported from ADO #7\n\nTitle: Story 7\n\nDescription:\nDetails 7"


async def test_import_requires_ids(client: AsyncClient):
    response = await client.post("/api/v1/ado/import", json={"ids": []})
    assert response.status_code == 422


async def test_missing_configuration():
    app.dependency_overrides[get_ado_client] = lambda: AzureDevOpsClient(organization="", pat="")
    try:
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            response = await ac.get("/api/v1/ado/projects")
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 500
    assert "ADO_ORGANIZATION" in response.json()["message"]
