"""공유 pytest fixture 모음."""

import pytest
from unittest.mock import AsyncMock, MagicMock

from app.ingestion import ContentIngestor
from app.models import DocumentFormat, DocumentTypeId, GeneratedDoc
from app.services.events import EventEmitter
from app.services.generation_client import CategorizationResult
from app.services.orchestrator import PipelineOrchestrator


def fake_document(doc_type: DocumentTypeId, source_content: str, run_id=None) -> str:
    """생성 클라이언트 대역이 돌려주는 기본 HTML."""
    return f"<h3>{doc_type.value}</h3><p>{source_content[:40]}</p>"


@pytest.fixture
def mock_claude_client():
    """ClaudeClient mock fixture."""
    client = AsyncMock()
    client.complete = AsyncMock(return_value="mocked response")
    client.complete_json = AsyncMock(return_value={})
    client.check_configuration = MagicMock()
    return client


@pytest.fixture
def mock_generation_client():
    """
    GenerationClient mock fixture.
    기본 동작: 기능 분류 없음, 사전 질문 없음, 문서 종류별 고정 HTML 생성.
    """
    client = MagicMock()
    client.check_configuration = MagicMock()
    client.generate = AsyncMock(side_effect=fake_document)
    client.categorize = AsyncMock(
        return_value=CategorizationResult(has_multiple_features=False, organized_content="")
    )
    client.clarifying_questions = AsyncMock(return_value=[])
    client.enhance = AsyncMock(return_value="Enhanced text")
    client.cleanup = AsyncMock(return_value="<p>Cleaned</p>")
    return client


@pytest.fixture
def orchestrator(mock_generation_client):
    """mock 생성 클라이언트를 쓰는 오케스트레이터 (타임아웃 없음)."""
    return PipelineOrchestrator(
        generation_client=mock_generation_client,
        ingestor=ContentIngestor(),
        events=EventEmitter(),
        timeout_seconds=0,
    )


@pytest.fixture
def sample_docs():
    """GeneratedDoc 3개 (HTML 2개, 실패 문서 1개)."""
    return [
        GeneratedDoc(
            filename="Release Notes",
            content="<h3>Feature X</h3><p>Now available.</p>",
            type=DocumentTypeId.RELEASE_NOTES,
        ),
        GeneratedDoc(
            filename="FAQ Document",
            content="<h3>What changed?</h3><p>Feature X.</p>",
            type=DocumentTypeId.FAQ,
        ),
        GeneratedDoc(
            filename="User Manual",
            content="# Error generating User Manual\n\nNetwork error",
            type=DocumentTypeId.MANUAL,
            format=DocumentFormat.MARKDOWN,
            error="Network error",
        ),
    ]


@pytest.fixture
def async_client():
    """httpx AsyncClient fixture (FastAPI 테스트용)."""
    from httpx import AsyncClient, ASGITransport
    from app.main import app

    transport = ASGITransport(app=app)
    return AsyncClient(transport=transport, base_url="http://test")
