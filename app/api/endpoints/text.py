"""
텍스트 도우미 API입니다.
붙여넣은 메모를 생성에 쓰기 좋은 원본 텍스트로 다듬습니다.
"""

import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from app.services.generation_client import GenerationClient
from app.utils import validate_text_input

logger = logging.getLogger(__name__)

router = APIRouter()


class EnhanceTextRequest(BaseModel):
    text: str


def get_generation_client() -> GenerationClient:
    return GenerationClient()


@router.post("/enhance")
async def enhance_text(
    request: EnhanceTextRequest,
    generation_client: GenerationClient = Depends(get_generation_client),
) -> dict:
    """메모를 정리된 원본 텍스트로 변환합니다. 키가 없으면 호출 전에 실패합니다."""
    text = validate_text_input(request.text)
    generation_client.check_configuration()

    enhanced = await generation_client.enhance(text)
    logger.info(f"[Claude] 텍스트 다듬기: {len(text)} -> {len(enhanced)} chars")
    return {"text": enhanced}
