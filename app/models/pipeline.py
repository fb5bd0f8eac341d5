"""
생성 파이프라인 관련 데이터 모델입니다.
파이프라인 상태, 문서별 진행 상태, 사전 질문, 이벤트 등을 정의합니다.
"""

from enum import Enum
from datetime import datetime
from typing import Optional, Any
from pydantic import BaseModel, Field
import uuid

from .document import DocumentTypeId, GeneratedDoc


class PipelineState(str, Enum):
    """파이프라인 진행 단계입니다."""

    IDLE = "idle"                          # 대기 (초기 상태, 리셋 후)
    ANALYZING = "analyzing"                # 기능 분류 + 사전 질문 생성 중
    AWAITING_ANSWERS = "awaiting_answers"  # 사용자 답변 대기 중
    GENERATING = "generating"              # 문서 병렬 생성 중
    REVIEWING = "reviewing"                # 결과 검토/편집 중


class PipelineTrigger(str, Enum):
    """상태 전이를 일으키는 이벤트입니다."""

    START = "start"
    QUESTIONS_READY = "questions_ready"
    NO_QUESTIONS = "no_questions"
    ANALYSIS_FAILED = "analysis_failed"
    SKIP = "skip"
    CONTINUE = "continue"
    BATCH_SETTLED = "batch_settled"
    ABORT = "abort"
    GENERATE_MORE = "generate_more"
    REGENERATE = "regenerate"
    RESET = "reset"


class DocStatus(str, Enum):
    """문서 종류별 생성 상태입니다. 실패해도 complete로 끝납니다."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETE = "complete"


class ClarifyingQuestion(BaseModel):
    """생성 전에 사용자에게 묻는 질문과 답변입니다."""

    question: str
    answer: str = ""


class PipelineRun(BaseModel):
    """
    한 번의 생성 작업(세션)의 전체 상태입니다.
    리셋하면 새 인스턴스로 교체되며, 이전 상태는 버려집니다.
    """

    run_id: str = Field(
        default_factory=lambda: str(uuid.uuid4()),
        description="실행 고유 ID"
    )
    state: PipelineState = PipelineState.IDLE
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    # 생성에 사용하는 원본 콘텐츠 (답변 추가 시 뒤에 덧붙이기만 함)
    source_content: str = ""
    has_multiple_features: bool = False

    selected_types: list[DocumentTypeId] = Field(default_factory=list)
    doc_status: dict[DocumentTypeId, DocStatus] = Field(default_factory=dict)
    results: list[GeneratedDoc] = Field(default_factory=list)
    clarifying_questions: list[ClarifyingQuestion] = Field(default_factory=list)

    error_message: Optional[str] = None

    def touch(self):
        self.updated_at = datetime.now()

    def generated_types(self) -> list[DocumentTypeId]:
        """이미 결과가 있는 문서 종류 (결과 순서대로)"""
        return [doc.type for doc in self.results]

    def completed_types(self) -> set[DocumentTypeId]:
        return {
            doc_type for doc_type, status in self.doc_status.items()
            if status == DocStatus.COMPLETE
        }

    def get_progress(self) -> dict:
        """현재 진행률 정보를 계산하여 반환합니다."""
        total = len(self.doc_status)
        completed = len(self.completed_types())
        return {
            "state": self.state.value,
            "completed_documents": completed,
            "total_documents": total,
            "progress_percent": int((completed / total) * 100) if total else 0,
            "failed_documents": sum(1 for doc in self.results if doc.error),
        }


class PipelineEvent(BaseModel):
    """
    파이프라인 진행 상황을 구독자(UI, 로거, 테스트)에게 알리는 이벤트입니다.
    """

    run_id: str
    event_type: str = Field(
        ..., description="이벤트 종류: state_changed, started, progress, settled, error"
    )
    doc_type: Optional[DocumentTypeId] = None
    state: Optional[PipelineState] = None
    message: str = ""
    timestamp: datetime = Field(default_factory=datetime.now)
    data: Optional[dict[str, Any]] = None
