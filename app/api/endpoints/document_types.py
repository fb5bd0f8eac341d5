"""생성 가능한 문서 종류 목록 API."""

from fastapi import APIRouter

from app.document_options import DOCUMENT_OPTIONS

router = APIRouter()


@router.get("")
async def list_document_types() -> dict:
    return {
        "document_types": [option.model_dump(mode="json") for option in DOCUMENT_OPTIONS],
        "count": len(DOCUMENT_OPTIONS),
    }
