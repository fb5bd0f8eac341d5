"""
API 라우터 설정 파일입니다.
각 기능별로 나누어진 API 주소들을 하나로 모으는 역할을 합니다.
"""

from fastapi import APIRouter

from app.api.endpoints import health, document_types, text, runs, ado

# 메인 API 라우터 생성
api_router = APIRouter()

# 헬스 체크 엔드포인트: 서버 상태 확인용 (/health)
api_router.include_router(
    health.router,
    prefix="/health",
    tags=["health"]
)

# 문서 종류 카탈로그 (/document-types)
api_router.include_router(
    document_types.router,
    prefix="/document-types",
    tags=["document-types"]
)

# 텍스트 도우미: 메모 다듬기 (/text)
api_router.include_router(
    text.router,
    prefix="/text",
    tags=["text"]
)

# 생성 파이프라인: 시작, 질문 답변, 생성, 검토, 내보내기 (/runs)
api_router.include_router(
    runs.router,
    prefix="/runs",
    tags=["runs"]
)

# Azure DevOps 작업 항목 가져오기 (/ado)
api_router.include_router(
    ado.router,
    prefix="/ado",
    tags=["ado"]
)
