"""
생성 문서 관련 데이터 모델입니다.
문서 종류(DocumentTypeId), 생성 요청/결과, 최종 문서(GeneratedDoc)를 정의합니다.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class DocumentTypeId(str, Enum):
    """생성 가능한 문서 종류입니다. 실제 목록/라벨은 document_options에서 관리합니다."""

    RELEASE_NOTES = "release-notes"
    TRAINING_GUIDE = "training-guide"
    EMAIL = "email"
    QUICK_REF = "quick-ref"
    FAQ = "faq"
    MANUAL = "manual"
    TECH_GUIDE = "tech-guide"


class DocumentFormat(str, Enum):
    """생성 문서의 형식. 내보내기 시 확장자와 MIME 타입을 결정합니다."""

    HTML = "html"
    MARKDOWN = "markdown"
    TXT = "txt"


class DocumentOption(BaseModel):
    """
    문서 종류 하나의 설정 레코드입니다.
    새 문서 종류는 이 레코드와 프롬프트 프로필만 추가하면 됩니다.
    """

    id: DocumentTypeId
    label: str  # 화면 표시 이름이자 파일명
    description: str
    prompt_profile: str  # prompts.document_prompts의 키
    icon: str
    format: DocumentFormat = DocumentFormat.HTML


@dataclass(frozen=True)
class GenerationRequest:
    """문서 1건 생성 요청. 입력값 외의 식별자는 없습니다."""

    doc_type: DocumentTypeId
    source_content: str


class GenerationResult(BaseModel):
    """
    문서 1건의 생성 결과입니다.
    실패해도 예외를 던지지 않고 error 필드에 담아서 반환합니다.
    """

    type: DocumentTypeId
    content: str = ""
    error: Optional[str] = None
    generated_at: datetime = Field(default_factory=datetime.now)
    duration_ms: int = 0

    @property
    def succeeded(self) -> bool:
        return self.error is None


class GeneratedDoc(BaseModel):
    """
    사용자가 검토/편집/내보내기 하는 최종 문서입니다.
    내보내기 선택 여부는 문서가 아니라 오케스트레이터가 관리합니다.
    """

    filename: str
    content: str
    type: DocumentTypeId
    format: DocumentFormat = DocumentFormat.HTML
    generated_at: datetime = Field(default_factory=datetime.now)
    duration_ms: int = 0
    error: Optional[str] = None
