"""
문서 생성 파이프라인의 전체 흐름을 관리하는 오케스트레이터입니다.

처리 단계(파이프라인):
1. 수집 (Ingestion): 파일/텍스트를 하나의 원본 콘텐츠로 만듭니다.
2. 분석 (Analyzing): 기능 분류 후 사전 질문을 생성합니다.
3. 답변 대기 (Awaiting answers): 질문이 있으면 사용자의 답변/건너뛰기를 기다립니다.
4. 생성 (Generating): 선택한 문서 종류별로 동시에 생성합니다.
5. 검토 (Reviewing): 편집, AI 다듬기, 재생성, 추가 생성, 내보내기를 합니다.

상태 전이는 state_machine.TRANSITIONS로만 일어납니다.
오케스트레이터 하나가 실행(PipelineRun) 하나를 소유하며, 리셋하면 실행 객체를 새로 만듭니다.
리셋 전에 시작된 호출의 결과는 버려집니다.
"""

import asyncio
import logging
import time
import uuid
from typing import Awaitable, Iterable, Optional

from app.config import get_settings
from app.document_options import DOCUMENT_OPTIONS, get_document_option, parse_document_types
from app.exceptions import (
    DocGeneratorError,
    ConfigurationError,
    GenerationError,
    InputValidationError,
    InvalidTransitionError,
)
from app.export import DownloadFile, archive_filename, build_archive, build_single_file_download
from app.ingestion import ContentIngestor, get_content_ingestor
from app.models import (
    ClarifyingQuestion,
    DocStatus,
    DocumentFormat,
    DocumentTypeId,
    GeneratedDoc,
    GenerationRequest,
    GenerationResult,
    PipelineRun,
    PipelineState,
    PipelineTrigger,
    UploadedFile,
)
from app.services.events import EventEmitter, STATE_CHANGED, STARTED, SETTLED, ERROR
from app.services.generation_client import GenerationClient
from app.services.state_machine import transition

logger = logging.getLogger(__name__)

ADDITIONAL_CONTEXT_HEADER = "\n\n## Additional Context\n\n"


def append_answers(source_content: str, questions: Iterable[ClarifyingQuestion]) -> str:
    """
    답변이 있는 질문들을 "Additional Context" 섹션으로 원본 뒤에 덧붙입니다.
    답변이 하나도 없으면 원본을 그대로 반환합니다.
    """
    answered = [q for q in questions if q.answer.strip()]
    if not answered:
        return source_content

    section = "".join(f"**{q.question}**\n{q.answer}\n\n" for q in answered)
    return source_content + ADDITIONAL_CONTEXT_HEADER + section


def error_placeholder(label: str, error: str) -> str:
    return f"# Error generating {label}\n\n{error}"


def to_generated_doc(result: GenerationResult) -> GeneratedDoc:
    """생성 결과를 검토용 문서로 변환합니다. 실패한 결과는 에러 안내 문서가 됩니다."""
    option = get_document_option(result.type)
    if result.succeeded:
        return GeneratedDoc(
            filename=option.label,
            content=result.content,
            type=result.type,
            format=option.format,
            generated_at=result.generated_at,
            duration_ms=result.duration_ms,
        )
    return GeneratedDoc(
        filename=option.label,
        content=error_placeholder(option.label, result.error),
        type=result.type,
        format=DocumentFormat.MARKDOWN,
        generated_at=result.generated_at,
        duration_ms=result.duration_ms,
        error=result.error,
    )


class PipelineOrchestrator:
    """
    생성 파이프라인 하나를 조율하는 클래스입니다.
    각 단계 처리기를 실행하고 상태를 전이시키며 진행 이벤트를 발행합니다.
    """

    def __init__(
        self,
        generation_client: Optional[GenerationClient] = None,
        ingestor: Optional[ContentIngestor] = None,
        events: Optional[EventEmitter] = None,
        timeout_seconds: Optional[float] = None,
    ):
        self.events = events or EventEmitter()
        self.generation_client = generation_client or GenerationClient(events=self.events)
        self.ingestor = ingestor or get_content_ingestor()

        if timeout_seconds is None:
            timeout_seconds = get_settings().generation_timeout_seconds
        # 0 이하면 제한 없음
        self.timeout_seconds = timeout_seconds if timeout_seconds > 0 else None

        # 세션 ID는 리셋해도 유지되고, 실행 ID는 리셋할 때마다 바뀝니다
        self.session_id = str(uuid.uuid4())
        self.run = PipelineRun()
        self.export_selection: set[int] = set()
        self._regenerating_index: Optional[int] = None

    @property
    def run_id(self) -> str:
        return self.run.run_id

    @property
    def state(self) -> PipelineState:
        return self.run.state

    @property
    def regenerating_index(self) -> Optional[int]:
        return self._regenerating_index

    # ------------------------------------------------------------------
    # 상태 전이 / 이벤트
    # ------------------------------------------------------------------

    def _is_current(self, run: PipelineRun) -> bool:
        return run is self.run

    async def _apply(self, run: PipelineRun, trigger: PipelineTrigger) -> PipelineState:
        previous = run.state
        run.state = transition(run.state, trigger)
        run.touch()
        logger.info(f"[Pipeline] {run.run_id[:8]}: {previous.value} -({trigger.value})-> {run.state.value}")
        await self.events.publish(
            run.run_id,
            STATE_CHANGED,
            message=f"{previous.value} -> {run.state.value}",
            state=run.state,
            data={"trigger": trigger.value, "previous": previous.value},
        )
        return run.state

    def _require_state(self, *states: PipelineState) -> None:
        if self.run.state not in states:
            raise InvalidTransitionError(
                f"This action is not allowed while the pipeline is '{self.run.state.value}'",
                details={
                    "state": self.run.state.value,
                    "expected": [s.value for s in states],
                },
            )

    def _require_document(self, index: int) -> GeneratedDoc:
        if index < 0 or index >= len(self.run.results):
            raise InputValidationError(
                f"Document index {index} does not exist",
                details={"index": index, "document_count": len(self.run.results)},
            )
        return self.run.results[index]

    def _require_not_regenerating(self, index: Optional[int] = None) -> None:
        """재생성 중이면 거부합니다. index를 주면 그 문서에 대해서만 확인합니다."""
        busy = self._regenerating_index
        if busy is None or (index is not None and index != busy):
            return
        raise InvalidTransitionError(
            f"Document {busy} is being regenerated",
            details={"regenerating_index": busy},
        )

    async def _with_timeout(self, call: Awaitable[str], label: str) -> str:
        """AI 호출 1건에 호출별 제한 시간을 적용합니다."""
        if not self.timeout_seconds:
            return await call
        try:
            return await asyncio.wait_for(call, timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            raise GenerationError(
                f"Generation timed out after {self.timeout_seconds:g} seconds",
                details={"operation": label, "timeout_seconds": self.timeout_seconds},
            )

    async def _fail(self, run: PipelineRun, trigger: PipelineTrigger, error: DocGeneratorError):
        """단계 전체가 실패했을 때 상태를 되돌리고 에러 이벤트를 발행합니다."""
        run.error_message = error.message
        await self._apply(run, trigger)
        await self.events.publish(
            run.run_id, ERROR, message=error.message,
            state=run.state, data={"error_code": error.error_code},
        )

    # ------------------------------------------------------------------
    # 시작 / 분석
    # ------------------------------------------------------------------

    async def start(
        self,
        selected_types: Iterable[str],
        files: Optional[list[UploadedFile]] = None,
        text: Optional[str] = None,
    ) -> PipelineRun:
        """
        파이프라인을 시작합니다.

        기능 분류는 품질 향상용이므로 실패하면 원본을 그대로 씁니다.
        사전 질문 생성이 실패하면 idle로 돌아가고 에러를 그대로 전달합니다.
        질문이 없으면 바로 문서 생성까지 진행합니다.
        """
        transition(self.run.state, PipelineTrigger.START)

        types = parse_document_types(selected_types)
        if not types:
            raise InputValidationError("Please select at least one output type")
        source_content = self.ingestor.ingest(files=files, text=text)

        run = self.run
        run.selected_types = types
        run.source_content = source_content
        run.error_message = None
        await self._apply(run, PipelineTrigger.START)

        try:
            self.generation_client.check_configuration()
        except ConfigurationError as e:
            await self._fail(run, PipelineTrigger.ANALYSIS_FAILED, e)
            raise

        # 1. 기능 분류 (실패해도 계속)
        try:
            categorized = await self.generation_client.categorize(source_content, run_id=run.run_id)
        except DocGeneratorError as e:
            logger.warning(f"[Pipeline] 기능 분류 실패, 원본 콘텐츠 사용: {e.message}")
            categorized = None

        if not self._is_current(run):
            return run

        if categorized is not None and categorized.has_multiple_features:
            run.has_multiple_features = True
            run.source_content = categorized.organized_content
            logger.info("[Pipeline] 여러 기능 감지: 기능별로 재구성된 콘텐츠 사용")

        # 2. 사전 질문
        try:
            questions = await self.generation_client.clarifying_questions(
                run.source_content, types, run_id=run.run_id
            )
        except DocGeneratorError as e:
            if self._is_current(run):
                await self._fail(run, PipelineTrigger.ANALYSIS_FAILED, e)
            raise

        if not self._is_current(run):
            return run

        if questions:
            run.clarifying_questions = [ClarifyingQuestion(question=q) for q in questions]
            await self._apply(run, PipelineTrigger.QUESTIONS_READY)
            return run

        await self._apply(run, PipelineTrigger.NO_QUESTIONS)
        await self._run_batch(run, types)
        return run

    # ------------------------------------------------------------------
    # 사전 질문 답변
    # ------------------------------------------------------------------

    def answer_question(self, index: int, answer: str) -> ClarifyingQuestion:
        self._require_state(PipelineState.AWAITING_ANSWERS)
        questions = self.run.clarifying_questions
        if index < 0 or index >= len(questions):
            raise InputValidationError(
                f"Question index {index} does not exist",
                details={"index": index, "question_count": len(questions)},
            )
        questions[index].answer = answer
        self.run.touch()
        return questions[index]

    async def skip_questions(self) -> PipelineRun:
        """답변 없이 원본 그대로 생성합니다."""
        run = self.run
        await self._apply(run, PipelineTrigger.SKIP)
        await self._run_batch(run, run.selected_types)
        return run

    async def submit_answers(self, answers: Optional[list[str]] = None) -> PipelineRun:
        """답변을 원본 뒤에 덧붙이고 생성합니다. answers를 주면 질문 순서대로 먼저 반영합니다."""
        self._require_state(PipelineState.AWAITING_ANSWERS)
        run = self.run

        if answers is not None:
            if len(answers) > len(run.clarifying_questions):
                raise InputValidationError(
                    "More answers than questions",
                    details={
                        "answer_count": len(answers),
                        "question_count": len(run.clarifying_questions),
                    },
                )
            for question, answer in zip(run.clarifying_questions, answers):
                question.answer = answer or ""

        run.source_content = append_answers(run.source_content, run.clarifying_questions)
        await self._apply(run, PipelineTrigger.CONTINUE)
        await self._run_batch(run, run.selected_types)
        return run

    # ------------------------------------------------------------------
    # 문서 생성 (병렬)
    # ------------------------------------------------------------------

    async def _request_document(self, run: PipelineRun, request: GenerationRequest) -> str:
        """생성 요청 1건을 제한 시간 안에 실행합니다. 실패는 예외로 전달됩니다."""
        return await self._with_timeout(
            self.generation_client.generate(
                request.doc_type, request.source_content, run_id=run.run_id
            ),
            request.doc_type.value,
        )

    async def _generate_one(self, run: PipelineRun, request: GenerationRequest) -> GenerationResult:
        """문서 1건 생성. 어떤 실패도 예외로 던지지 않고 결과의 error에 담습니다."""
        doc_type = request.doc_type
        start_time = time.perf_counter()
        try:
            content = await self._request_document(run, request)
            result = GenerationResult(
                type=doc_type,
                content=content,
                duration_ms=int((time.perf_counter() - start_time) * 1000),
            )
        except Exception as e:
            message = e.message if isinstance(e, DocGeneratorError) else str(e)
            result = GenerationResult(
                type=doc_type,
                error=message or "Generation failed",
                duration_ms=int((time.perf_counter() - start_time) * 1000),
            )

        if result.error:
            logger.error(f"[Pipeline] {doc_type.value} 생성 실패: {result.error}")

        if self._is_current(run):
            run.doc_status[doc_type] = DocStatus.COMPLETE
            await self.events.publish(
                run.run_id, SETTLED, doc_type=doc_type,
                message=result.error or f"{doc_type.value} complete",
                data={"succeeded": result.succeeded, "duration_ms": result.duration_ms},
            )
        return result

    async def _run_batch(self, run: PipelineRun, types: list[DocumentTypeId]) -> list[GeneratedDoc]:
        """
        선택한 문서들을 동시에 생성하고 모두 끝날 때까지 기다립니다.
        결과는 완료 순서와 상관없이 선택 순서대로 추가됩니다.
        """
        try:
            self.generation_client.check_configuration()
        except ConfigurationError as e:
            await self._fail(run, PipelineTrigger.ABORT, e)
            raise

        source_content = run.source_content
        for doc_type in types:
            run.doc_status[doc_type] = DocStatus.PENDING
        for doc_type in types:
            run.doc_status[doc_type] = DocStatus.PROCESSING
            await self.events.publish(
                run.run_id, STARTED, doc_type=doc_type,
                message=f"{doc_type.value} started",
            )

        logger.info(f"[Pipeline] 문서 {len(types)}개 병렬 생성 시작: {[t.value for t in types]}")
        results = await asyncio.gather(
            *(
                self._generate_one(run, GenerationRequest(doc_type, source_content))
                for doc_type in types
            )
        )

        if not self._is_current(run):
            logger.info(f"[Pipeline] {run.run_id[:8]}: 리셋된 실행의 결과 {len(results)}건 폐기")
            return []

        new_docs = [to_generated_doc(result) for result in results]
        first_index = len(run.results)
        run.results.extend(new_docs)
        self.export_selection.update(range(first_index, first_index + len(new_docs)))

        failed = sum(1 for doc in new_docs if doc.error)
        logger.info(f"[Pipeline] 생성 완료: 성공 {len(new_docs) - failed}개, 실패 {failed}개")

        await self._apply(run, PipelineTrigger.BATCH_SETTLED)
        return new_docs

    # ------------------------------------------------------------------
    # 검토 단계
    # ------------------------------------------------------------------

    def available_types(self) -> list[DocumentTypeId]:
        """아직 생성하지 않은 문서 종류 (카탈로그 순서)."""
        generated = set(self.run.generated_types())
        return [option.id for option in DOCUMENT_OPTIONS if option.id not in generated]

    async def generate_more(self, selected_types: Iterable[str]) -> list[GeneratedDoc]:
        """
        문서 종류를 추가로 생성합니다. 같은 원본 콘텐츠를 사용하고, 이미 생성한 종류는 제외합니다.
        기존 문서는 건드리지 않고 새 문서를 뒤에 추가합니다.
        """
        self._require_state(PipelineState.REVIEWING)
        self._require_not_regenerating()
        requested = parse_document_types(selected_types)
        available = set(self.available_types())
        types = [t for t in requested if t in available]
        if not types:
            raise InputValidationError(
                "No new document types to generate",
                details={
                    "requested": [t.value for t in requested],
                    "available": [t.value for t in self.available_types()],
                },
            )

        # 설정 오류면 검토 상태를 유지한 채 중단
        self.generation_client.check_configuration()

        run = self.run
        run.selected_types = run.selected_types + types
        await self._apply(run, PipelineTrigger.GENERATE_MORE)
        return await self._run_batch(run, types)

    async def regenerate(self, index: int) -> GeneratedDoc:
        """
        문서 하나를 같은 원본으로 다시 생성해서 같은 자리에 교체합니다.
        실패하거나 제한 시간을 넘기면 에러를 그대로 전달하고 기존 문서는 바뀌지 않습니다.
        재생성 중에는 추가 생성과 해당 문서의 편집/다듬기를 받지 않습니다.
        """
        self._require_state(PipelineState.REVIEWING)
        doc = self._require_document(index)
        if self._regenerating_index is not None:
            raise InvalidTransitionError(
                "Another document is already being regenerated",
                details={"regenerating_index": self._regenerating_index},
            )
        transition(self.run.state, PipelineTrigger.REGENERATE)

        run = self.run
        self._regenerating_index = index
        await self.events.publish(
            run.run_id, STARTED, doc_type=doc.type,
            message=f"{doc.type.value} regeneration started",
            data={"index": index},
        )
        start_time = time.perf_counter()
        try:
            content = await self._request_document(run, GenerationRequest(doc.type, run.source_content))
        except DocGeneratorError as e:
            if self._is_current(run):
                await self.events.publish(
                    run.run_id, SETTLED, doc_type=doc.type, message=e.message,
                    data={"index": index, "succeeded": False},
                )
            raise
        finally:
            if self._is_current(run):
                self._regenerating_index = None

        if not self._is_current(run):
            return doc

        # 교체 전에 전이 가능 여부부터 확인
        transition(run.state, PipelineTrigger.REGENERATE)
        option = get_document_option(doc.type)
        new_doc = GeneratedDoc(
            filename=option.label,
            content=content,
            type=doc.type,
            format=option.format,
            duration_ms=int((time.perf_counter() - start_time) * 1000),
        )
        run.results[index] = new_doc
        await self.events.publish(
            run.run_id, SETTLED, doc_type=doc.type,
            message=f"{doc.type.value} regenerated",
            data={"index": index, "succeeded": True, "duration_ms": new_doc.duration_ms},
        )
        await self._apply(run, PipelineTrigger.REGENERATE)
        return new_doc

    def update_document(self, index: int, content: str) -> GeneratedDoc:
        """사용자가 편집한 내용으로 교체합니다."""
        self._require_state(PipelineState.REVIEWING)
        self._require_not_regenerating(index)
        doc = self._require_document(index)
        updated = doc.model_copy(update={"content": content})
        self.run.results[index] = updated
        self.run.touch()
        return updated

    async def cleanup_document(self, index: int) -> GeneratedDoc:
        """
        AI로 문서를 다듬어서 같은 자리에 교체합니다.
        다듬는 동안 문서가 바뀌었으면(재생성/편집) 결과를 버리고 409로 알립니다.
        """
        self._require_state(PipelineState.REVIEWING)
        self._require_not_regenerating(index)
        doc = self._require_document(index)
        run = self.run

        cleaned = await self._with_timeout(self.generation_client.cleanup(doc.content), "cleanup")
        if not self._is_current(run):
            return doc

        if index >= len(run.results) or run.results[index] is not doc:
            raise InvalidTransitionError(
                f"Document {index} changed while it was being cleaned up",
                details={"index": index},
            )

        updated = doc.model_copy(update={"content": cleaned})
        run.results[index] = updated
        run.touch()
        return updated

    # ------------------------------------------------------------------
    # 내보내기
    # ------------------------------------------------------------------

    def set_export_selection(self, indices: Iterable[int]) -> set[int]:
        selection = set(indices)
        for index in selection:
            self._require_document(index)
        self.export_selection = selection
        return self.export_selection

    def toggle_export_selection(self, index: int) -> set[int]:
        self._require_document(index)
        if index in self.export_selection:
            self.export_selection.discard(index)
        else:
            self.export_selection.add(index)
        return self.export_selection

    def export_archive(self, project_name: Optional[str] = None) -> DownloadFile:
        data = build_archive(self.run.results, self.export_selection)
        return DownloadFile(
            filename=archive_filename(project_name),
            media_type="application/zip",
            data=data,
        )

    def export_document(self, index: int) -> DownloadFile:
        return build_single_file_download(self._require_document(index))

    # ------------------------------------------------------------------
    # 리셋
    # ------------------------------------------------------------------

    async def reset(self) -> PipelineRun:
        """실행 상태를 모두 버리고 새 실행으로 교체합니다. 진행 중인 호출의 결과는 무시됩니다."""
        previous = self.run
        self.run = PipelineRun(state=transition(previous.state, PipelineTrigger.RESET))
        self.export_selection = set()
        self._regenerating_index = None

        logger.info(f"[Pipeline] 리셋: {previous.run_id[:8]} -> {self.run.run_id[:8]}")
        await self.events.publish(
            self.run.run_id, STATE_CHANGED,
            message=f"{previous.state.value} -> {self.run.state.value}",
            state=self.run.state,
            data={"trigger": PipelineTrigger.RESET.value, "previous_run_id": previous.run_id},
        )
        return self.run
