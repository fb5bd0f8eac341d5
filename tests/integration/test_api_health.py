"""
API 헬스 체크 및 루트 엔드포인트 통합 테스트.
서버의 기본 응답, 문서 페이지, 문서 종류 목록을 확인합니다.
"""

import pytest
from httpx import AsyncClient, ASGITransport
from app.main import app


@pytest.fixture
async def client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def test_root_endpoint(client: AsyncClient):
    """GET / 는 서버 기본 정보(name, version, docs)를 200으로 반환해야 한다."""
    response = await client.get("/")

    assert response.status_code == 200

    data = response.json()
    assert data["name"] == "Communications Builder"
    assert "version" in data
    assert "docs" in data


async def test_docs_endpoint(client: AsyncClient):
    """GET /docs 는 Swagger UI 페이지를 200으로 반환해야 한다."""
    response = await client.get("/docs")

    assert response.status_code == 200


async def test_health(client: AsyncClient):
    response = await client.get("/api/v1/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


async def test_health_detail_hides_secrets(client: AsyncClient):
    """상세 헬스 체크는 설정 여부만 알려주고 키 값은 노출하지 않아야 한다."""
    response = await client.get("/api/v1/health/detail")

    assert response.status_code == 200
    config = response.json()["config"]
    assert set(config) == {
        "claude_model", "api_key_configured", "ado_configured", "generation_timeout_seconds",
    }
    assert isinstance(config["api_key_configured"], bool)


async def test_document_types(client: AsyncClient):
    """GET /api/v1/document-types 는 카탈로그 순서대로 7종을 반환해야 한다."""
    response = await client.get("/api/v1/document-types")

    assert response.status_code == 200
    data = response.json()
    assert data["count"] == 7
    assert data["document_types"][0]["id"] == "release-notes"
    assert data["document_types"][0]["label"] == "Release Notes"
