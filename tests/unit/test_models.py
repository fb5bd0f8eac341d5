"""Unit tests for Pydantic data models.

Tests defaults, computed progress, and the camelCase aliases used by the
Azure DevOps search API.
"""

import dataclasses
from datetime import date

import pytest
from pydantic import ValidationError

from app.models import (
    DocStatus,
    DocumentTypeId,
    GeneratedDoc,
    GenerationRequest,
    GenerationResult,
    PipelineRun,
    PipelineState,
    UploadedFile,
    WorkItem,
    WorkItemImportRequest,
    WorkItemSearch,
)


class TestPipelineRun:
    def test_defaults(self):
        run = PipelineRun()
        assert run.state == PipelineState.IDLE
        assert run.results == []
        assert run.run_id != PipelineRun().run_id

    def test_progress(self):
        run = PipelineRun(
            doc_status={
                DocumentTypeId.FAQ: DocStatus.COMPLETE,
                DocumentTypeId.EMAIL: DocStatus.PROCESSING,
            },
            results=[
                GeneratedDoc(filename="FAQ Document", content="x", type=DocumentTypeId.FAQ, error="boom"),
            ],
        )
        progress = run.get_progress()
        assert progress["completed_documents"] == 1
        assert progress["total_documents"] == 2
        assert progress["progress_percent"] == 50
        assert progress["failed_documents"] == 1

    def test_progress_without_documents(self):
        assert PipelineRun().get_progress()["progress_percent"] == 0

    def test_serialization_uses_enum_values(self):
        run = PipelineRun(doc_status={DocumentTypeId.FAQ: DocStatus.PENDING})
        dumped = run.model_dump(mode="json")
        assert dumped["state"] == "idle"
        assert dumped["doc_status"] == {"faq": "pending"}


def test_generation_result_succeeded():
    assert GenerationResult(type=DocumentTypeId.FAQ, content="x").succeeded
    assert not GenerationResult(type=DocumentTypeId.FAQ, error="boom").succeeded


def test_generation_request_is_frozen_value():
    request = GenerationRequest(DocumentTypeId.FAQ, "notes")

    assert request == GenerationRequest(DocumentTypeId.FAQ, "notes")
    with pytest.raises(dataclasses.FrozenInstanceError):
        request.source_content = "changed"


def test_uploaded_file_size():
    assert UploadedFile(filename="a.txt", content=b"abc").size == 3


class TestWorkItemModels:
    def test_search_accepts_camel_case(self):
        search = WorkItemSearch.model_validate({
            "searchText": "login",
            "workItemTypes": ["Bug"],
            "createdDateFrom": "2024-01-31",
            "maxResults": 10,
        })
        assert search.search_text == "login"
        assert search.work_item_types == ["Bug"]
        assert search.created_date_from == date(2024, 1, 31)

    def test_search_accepts_snake_case(self):
        assert WorkItemSearch(search_text="x").search_text == "x"

    def test_max_results_bounds(self):
        with pytest.raises(ValidationError):
            WorkItemSearch(max_results=0)

    def test_import_requires_ids(self):
        with pytest.raises(ValidationError):
            WorkItemImportRequest(ids=[])

    def test_work_item_properties(self):
        item = WorkItem(id=1, fields={"Title": "Login", "Description": None})
        assert item.title == "Login"
        assert item.description == ""
