"""
문서 생성/분석용 LLM 호출 모음입니다.

ClaudeClient(전송)를 감싸서 호출 종류별 프롬프트와 파라미터를 고릅니다.
호출 하나당 요청은 정확히 한 번이며, 재시도하지 않습니다.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from app.config import get_settings
from app.document_options import get_document_option
from app.exceptions import ClaudeClientError, GenerationError
from app.models import DocumentTypeId, PipelineEvent
from app.prompts import (
    DOCUMENT_PROMPTS,
    CATEGORIZE_SYSTEM_PROMPT,
    CLARIFY_SYSTEM_PROMPT,
    ENHANCE_SYSTEM_PROMPT,
    CLEANUP_SYSTEM_PROMPT,
    build_document_user_prompt,
    build_categorize_user_prompt,
    build_clarify_user_prompt,
    build_enhance_user_prompt,
    build_cleanup_user_prompt,
)
from app.services.claude_client import ClaudeClient, get_claude_client, strip_code_fences
from app.services.events import EventEmitter, PROGRESS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CallProfile:
    """호출 종류별 샘플링 온도와 최대 토큰 수."""

    temperature: float
    max_tokens: int


CALL_PROFILES: dict[str, CallProfile] = {
    "generate": CallProfile(temperature=0.7, max_tokens=2500),
    "enhance": CallProfile(temperature=0.7, max_tokens=2000),
    "cleanup": CallProfile(temperature=0.3, max_tokens=4000),
    "categorize": CallProfile(temperature=0.3, max_tokens=4000),
    "clarify": CallProfile(temperature=0.5, max_tokens=1000),
}


@dataclass(frozen=True)
class CategorizationResult:
    has_multiple_features: bool
    organized_content: str


class GenerationClient:
    """
    생성/분석 작업별 진입점.

    progress 이벤트는 run_id를 넘긴 호출에 대해서만 발행합니다.
    """

    def __init__(
        self,
        claude_client: Optional[ClaudeClient] = None,
        events: Optional[EventEmitter] = None,
        max_questions: Optional[int] = None,
    ):
        self.claude_client = claude_client or get_claude_client()
        self.events = events or EventEmitter()
        self.max_questions = (
            max_questions if max_questions is not None
            else get_settings().max_clarifying_questions
        )

    def check_configuration(self) -> None:
        """API 키가 없으면 ConfigurationError. 네트워크 호출은 하지 않습니다."""
        self.claude_client.check_configuration()

    async def _progress(
        self,
        run_id: Optional[str],
        message: str,
        doc_type: Optional[DocumentTypeId] = None,
    ):
        if run_id is None:
            return
        await self.events.emit(PipelineEvent(
            run_id=run_id,
            event_type=PROGRESS,
            doc_type=doc_type,
            message=message,
        ))

    async def generate(
        self,
        doc_type: DocumentTypeId,
        source_content: str,
        run_id: Optional[str] = None,
    ) -> str:
        """문서 1건을 생성해서 HTML 본문을 반환합니다."""
        option = get_document_option(doc_type)
        profile = CALL_PROFILES["generate"]

        await self._progress(run_id, f"Generating {option.label}...", doc_type)

        text = await self.claude_client.complete(
            system_prompt=DOCUMENT_PROMPTS[option.prompt_profile],
            user_prompt=build_document_user_prompt(option.label, source_content),
            max_tokens=profile.max_tokens,
            temperature=profile.temperature,
        )
        content = strip_code_fences(text)
        if not content:
            raise GenerationError(
                f"No content generated for {option.label}",
                details={"doc_type": doc_type.value},
            )

        await self._progress(run_id, f"{option.label} complete", doc_type)
        return content

    async def enhance(self, raw_text: str) -> str:
        """거친 메모를 정리된 원본 텍스트로 다듬습니다."""
        profile = CALL_PROFILES["enhance"]
        text = await self.claude_client.complete(
            system_prompt=ENHANCE_SYSTEM_PROMPT,
            user_prompt=build_enhance_user_prompt(raw_text),
            max_tokens=profile.max_tokens,
            temperature=profile.temperature,
        )
        return strip_code_fences(text)

    async def cleanup(self, html_fragment: str) -> str:
        """사용자가 편집한 문서를 마크업은 유지한 채 다듬습니다."""
        profile = CALL_PROFILES["cleanup"]
        text = await self.claude_client.complete(
            system_prompt=CLEANUP_SYSTEM_PROMPT,
            user_prompt=build_cleanup_user_prompt(html_fragment),
            max_tokens=profile.max_tokens,
            temperature=profile.temperature,
        )
        content = strip_code_fences(text)
        if not content:
            raise GenerationError("Cleanup returned no content")
        return content

    async def categorize(
        self,
        source_content: str,
        run_id: Optional[str] = None,
    ) -> CategorizationResult:
        """
        원본에 여러 기능이 섞여 있는지 판단하고, 그렇다면 기능별로 재구성합니다.
        응답 형식이 맞지 않으면 ClaudeClientError를 발생시킵니다.
        """
        profile = CALL_PROFILES["categorize"]
        await self._progress(run_id, "Analyzing content for multiple features...")

        data = await self.claude_client.complete_json(
            system_prompt=CATEGORIZE_SYSTEM_PROMPT,
            user_prompt=build_categorize_user_prompt(source_content),
            max_tokens=profile.max_tokens,
            temperature=profile.temperature,
        )
        if not isinstance(data, dict):
            raise ClaudeClientError(
                "Categorization response is not a JSON object",
                details={"type": type(data).__name__},
            )

        has_multiple = bool(data.get("hasMultipleFeatures", False))
        organized = data.get("organizedContent")
        if not isinstance(organized, str) or not organized.strip():
            organized = source_content

        return CategorizationResult(
            has_multiple_features=has_multiple,
            organized_content=organized if has_multiple else source_content,
        )

    async def clarifying_questions(
        self,
        source_content: str,
        selected_types: list[DocumentTypeId],
        run_id: Optional[str] = None,
    ) -> list[str]:
        """선택한 문서 종류에 맞는 사전 질문 목록을 만듭니다 (최대 max_questions개)."""
        profile = CALL_PROFILES["clarify"]
        labels = [get_document_option(t).label for t in selected_types]
        await self._progress(run_id, "Generating clarifying questions...")

        data = await self.claude_client.complete_json(
            system_prompt=CLARIFY_SYSTEM_PROMPT.replace(
                "{max_questions}", str(self.max_questions)
            ),
            user_prompt=build_clarify_user_prompt(source_content, labels),
            max_tokens=profile.max_tokens,
            temperature=profile.temperature,
        )
        if isinstance(data, dict):
            data = data.get("questions", [])
        if not isinstance(data, list):
            raise ClaudeClientError(
                "Clarifying questions response is not a JSON array",
                details={"type": type(data).__name__},
            )

        questions = [str(q).strip() for q in data if isinstance(q, str) and q.strip()]
        logger.info(f"[Claude] 사전 질문 {len(questions)}개 수신")
        return questions[: self.max_questions]
