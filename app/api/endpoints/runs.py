"""
생성 파이프라인 제어 API입니다.

실행(run) 하나를 만들고, 사전 질문에 답하고, 생성된 문서를 검토/편집/재생성하고,
문서 종류를 추가로 생성하고, 내보낼 수 있습니다.
경로의 run_id는 세션 ID이며 리셋해도 바뀌지 않습니다.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile
from fastapi.responses import Response
from pydantic import BaseModel

from app.exceptions import DocGeneratorError
from app.export import DownloadFile
from app.models import UploadedFile
from app.services.orchestrator import PipelineOrchestrator
from app.services.run_store import RunStore, get_run_store
from app.utils import clean_upload_filename, validate_uploads

logger = logging.getLogger(__name__)

router = APIRouter()


class AnswerRequest(BaseModel):
    answer: str


class SubmitAnswersRequest(BaseModel):
    answers: Optional[list[str]] = None


class GenerateMoreRequest(BaseModel):
    types: list[str]


class UpdateDocumentRequest(BaseModel):
    content: str


class ExportSelectionRequest(BaseModel):
    indices: list[int]


def run_response(orchestrator: PipelineOrchestrator) -> dict:
    """오케스트레이터 상태를 API 응답 형태로 변환합니다."""
    run = orchestrator.run
    data = run.model_dump(mode="json")
    data["pipeline_run_id"] = data.pop("run_id")
    data["run_id"] = orchestrator.session_id
    data["results"] = [
        {"index": index, **doc} for index, doc in enumerate(data["results"])
    ]
    data["export_selection"] = sorted(orchestrator.export_selection)
    data["regenerating_index"] = orchestrator.regenerating_index
    data["progress"] = run.get_progress()
    return data


def document_response(orchestrator: PipelineOrchestrator, index: int) -> dict:
    return {
        "run_id": orchestrator.session_id,
        "index": index,
        "document": orchestrator.run.results[index].model_dump(mode="json"),
        "selected_for_export": index in orchestrator.export_selection,
    }


def download_response(download: DownloadFile) -> Response:
    return Response(
        content=download.data,
        media_type=download.media_type,
        headers={"Content-Disposition": f'attachment; filename="{download.filename}"'},
    )


def get_orchestrator(
    run_id: str,
    store: RunStore = Depends(get_run_store),
) -> PipelineOrchestrator:
    orchestrator = store.get(run_id)
    if orchestrator is None:
        raise HTTPException(
            status_code=404,
            detail=f"실행을 찾을 수 없습니다: {run_id}"
        )
    return orchestrator


@router.post("")
async def start_run(
    selected_types: list[str] = Form(...),
    text: Optional[str] = Form(None),
    files: Optional[list[UploadFile]] = File(None),
    store: RunStore = Depends(get_run_store),
) -> dict:
    """
    새 실행을 만들고 파이프라인을 시작합니다.

    - 파일이 있으면 파일 내용을, 없으면 text를 원본으로 사용합니다.
    - 사전 질문이 생성되면 awaiting_answers 상태로 응답합니다.
    - 질문이 없으면 문서 생성까지 마치고 reviewing 상태로 응답합니다.
    """
    uploads = []
    for upload in files or []:
        uploads.append(UploadedFile(
            filename=clean_upload_filename(upload.filename),
            content=await upload.read(),
            content_type=upload.content_type,
        ))
    validate_uploads(uploads)

    orchestrator = store.create()
    try:
        await orchestrator.start(selected_types, files=uploads, text=text)
    except DocGeneratorError:
        # 시작하지 못한 실행은 남겨두지 않음
        store.delete(orchestrator.session_id)
        raise

    logger.info(
        f"[Pipeline] 실행 시작 {orchestrator.session_id}: "
        f"{orchestrator.state.value}, 문서 {len(orchestrator.run.results)}개"
    )
    return run_response(orchestrator)


@router.get("/{run_id}")
async def get_run(orchestrator: PipelineOrchestrator = Depends(get_orchestrator)) -> dict:
    return run_response(orchestrator)


@router.get("/{run_id}/events")
async def get_run_events(
    run_id: str,
    since: int = Query(0, ge=0),
    store: RunStore = Depends(get_run_store),
) -> dict:
    """since 이후에 발생한 이벤트 목록 (진행 상황 폴링용)."""
    if store.get(run_id) is None:
        raise HTTPException(status_code=404, detail=f"실행을 찾을 수 없습니다: {run_id}")
    events = store.events(run_id, since=since)
    return {
        "run_id": run_id,
        "events": [event.model_dump(mode="json") for event in events],
        "count": len(events),
        "next": since + len(events),
    }


@router.delete("/{run_id}")
async def delete_run(run_id: str, store: RunStore = Depends(get_run_store)) -> dict:
    if not store.delete(run_id):
        raise HTTPException(status_code=404, detail=f"실행을 찾을 수 없습니다: {run_id}")
    return {"run_id": run_id, "deleted": True}


@router.post("/{run_id}/reset")
async def reset_run(orchestrator: PipelineOrchestrator = Depends(get_orchestrator)) -> dict:
    await orchestrator.reset()
    return run_response(orchestrator)


# ---------------------------------------------------------------------------
# 사전 질문
# ---------------------------------------------------------------------------

@router.put("/{run_id}/questions/{index}")
async def answer_question(
    index: int,
    request: AnswerRequest,
    orchestrator: PipelineOrchestrator = Depends(get_orchestrator),
) -> dict:
    question = orchestrator.answer_question(index, request.answer)
    return {"run_id": orchestrator.session_id, "index": index, **question.model_dump()}


@router.post("/{run_id}/questions/skip")
async def skip_questions(orchestrator: PipelineOrchestrator = Depends(get_orchestrator)) -> dict:
    await orchestrator.skip_questions()
    return run_response(orchestrator)


@router.post("/{run_id}/questions/submit")
async def submit_answers(
    request: Optional[SubmitAnswersRequest] = None,
    orchestrator: PipelineOrchestrator = Depends(get_orchestrator),
) -> dict:
    answers = request.answers if request else None
    await orchestrator.submit_answers(answers)
    return run_response(orchestrator)


# ---------------------------------------------------------------------------
# 추가 생성 / 재생성 / 편집
# ---------------------------------------------------------------------------

@router.get("/{run_id}/available-types")
async def available_types(orchestrator: PipelineOrchestrator = Depends(get_orchestrator)) -> dict:
    types = orchestrator.available_types()
    return {"run_id": orchestrator.session_id, "types": [t.value for t in types], "count": len(types)}


@router.post("/{run_id}/generate-more")
async def generate_more(
    request: GenerateMoreRequest,
    orchestrator: PipelineOrchestrator = Depends(get_orchestrator),
) -> dict:
    new_docs = await orchestrator.generate_more(request.types)
    data = run_response(orchestrator)
    data["added"] = len(new_docs)
    return data


@router.post("/{run_id}/documents/{index}/regenerate")
async def regenerate_document(
    index: int,
    orchestrator: PipelineOrchestrator = Depends(get_orchestrator),
) -> dict:
    await orchestrator.regenerate(index)
    return document_response(orchestrator, index)


@router.put("/{run_id}/documents/{index}")
async def update_document(
    index: int,
    request: UpdateDocumentRequest,
    orchestrator: PipelineOrchestrator = Depends(get_orchestrator),
) -> dict:
    orchestrator.update_document(index, request.content)
    return document_response(orchestrator, index)


@router.post("/{run_id}/documents/{index}/cleanup")
async def cleanup_document(
    index: int,
    orchestrator: PipelineOrchestrator = Depends(get_orchestrator),
) -> dict:
    await orchestrator.cleanup_document(index)
    return document_response(orchestrator, index)


# ---------------------------------------------------------------------------
# 내보내기
# ---------------------------------------------------------------------------

@router.put("/{run_id}/selection")
async def set_export_selection(
    request: ExportSelectionRequest,
    orchestrator: PipelineOrchestrator = Depends(get_orchestrator),
) -> dict:
    selection = orchestrator.set_export_selection(request.indices)
    return {"run_id": orchestrator.session_id, "export_selection": sorted(selection)}


@router.post("/{run_id}/selection/{index}/toggle")
async def toggle_export_selection(
    index: int,
    orchestrator: PipelineOrchestrator = Depends(get_orchestrator),
) -> dict:
    selection = orchestrator.toggle_export_selection(index)
    return {"run_id": orchestrator.session_id, "export_selection": sorted(selection)}


@router.get("/{run_id}/export")
async def export_archive(
    project_name: Optional[str] = Query(None),
    orchestrator: PipelineOrchestrator = Depends(get_orchestrator),
) -> Response:
    """선택한 문서들을 ZIP으로 내려받습니다."""
    return download_response(orchestrator.export_archive(project_name))


@router.get("/{run_id}/documents/{index}/download")
async def download_document(
    index: int,
    orchestrator: PipelineOrchestrator = Depends(get_orchestrator),
) -> Response:
    return download_response(orchestrator.export_document(index))
