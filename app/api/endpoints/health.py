"""
헬스 체크(Health Check) 엔드포인트입니다.
서버가 살아서 정상적으로 응답하는지 확인하는 용도입니다.
"""

from fastapi import APIRouter

from app.config import get_settings

router = APIRouter()


@router.get("")
async def health_check():
    """
    기본 상태 확인 함수.
    서버가 켜져 있으면 {"status": "healthy"}를 반환합니다.
    """
    return {"status": "healthy"}


@router.get("/detail")
async def health_check_detail():
    """
    상세 상태 확인 함수.
    사용 중인 모델과 외부 서비스 설정 여부를 같이 보여줍니다 (키 값은 노출하지 않음).
    """
    settings = get_settings()
    return {
        "status": "healthy",
        "config": {
            "claude_model": settings.claude_model,
            "api_key_configured": bool(settings.anthropic_api_key),
            "ado_configured": bool(settings.ado_organization and settings.ado_pat),
            "generation_timeout_seconds": settings.generation_timeout_seconds,
        }
    }
