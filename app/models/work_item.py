"""
Azure DevOps 작업 항목(Work Item) 관련 데이터 모델입니다.
API 요청/응답은 camelCase 키를 사용합니다 (예: searchText, workItems).
"""

from datetime import date
from typing import Optional, Any
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class AdoProject(BaseModel):
    """Azure DevOps 프로젝트 요약 정보입니다."""

    id: str
    name: str
    description: str = ""


class WorkItem(BaseModel):
    """
    작업 항목 하나입니다.
    fields의 키는 "System." 접두어를 뗀 이름입니다 (Title, Description, State ...).
    """

    id: int
    url: str = ""
    fields: dict[str, Any] = Field(default_factory=dict)

    @property
    def title(self) -> str:
        return str(self.fields.get("Title") or "")

    @property
    def description(self) -> str:
        return str(self.fields.get("Description") or "")


class WorkItemSearch(BaseModel):
    """작업 항목 검색 조건입니다. 모든 필터는 선택 사항입니다."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    search_text: Optional[str] = None
    work_item_types: list[str] = Field(default_factory=list)
    states: list[str] = Field(default_factory=list)
    projects: list[str] = Field(default_factory=list)
    iteration_path: Optional[str] = None
    assigned_to: Optional[str] = None
    created_by: Optional[str] = None
    created_date_from: Optional[date] = None
    created_date_to: Optional[date] = None
    changed_date_from: Optional[date] = None
    changed_date_to: Optional[date] = None
    max_results: Optional[int] = Field(default=None, ge=1, le=1000)


class WorkItemImportRequest(BaseModel):
    """선택한 작업 항목 ID들을 원본 텍스트로 가져오는 요청입니다."""

    ids: list[int] = Field(..., min_length=1)
