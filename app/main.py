"""
Communications Builder 문서 생성 서비스의 메인 진입점 파일입니다.
웹 서버 애플리케이션을 생성하고 설정하는 역할을 담당합니다.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import get_settings
from app.api.router import api_router
from app.exceptions import (
    DocGeneratorError,
    ConfigurationError,
    IngestionError,
    GenerationError,
    ClaudeClientError,
    IssueTrackerError,
    ExportError,
    InputValidationError,
    InvalidTransitionError,
)
from app.models import ErrorResponse

logger = logging.getLogger(__name__)

# 예외 종류 → HTTP 상태 코드
ERROR_STATUS_CODES: dict[type, int] = {
    ConfigurationError: 500,
    IngestionError: 500,
    GenerationError: 502,
    ClaudeClientError: 502,
    IssueTrackerError: 502,
    ExportError: 400,
    InputValidationError: 400,
    InvalidTransitionError: 409,
}


def status_code_for(exc: DocGeneratorError) -> int:
    for error_type, status_code in ERROR_STATUS_CODES.items():
        if isinstance(exc, error_type):
            return status_code
    return 500


def configure_logging():
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    애플리케이션의 생명주기(시작과 종료)를 관리하는 함수입니다.
    시작할 때 설정 상태를 로그로 남깁니다.
    """
    settings = get_settings()
    logger.info(f"Communications Builder가 다음 주소에서 시작됩니다: {settings.host}:{settings.port}")
    logger.info(f"문서 생성 모델: {settings.claude_model}")
    if not settings.anthropic_api_key:
        logger.warning("ANTHROPIC_API_KEY가 설정되지 않았습니다. 문서 생성 요청은 실패합니다")
    if not (settings.ado_organization and settings.ado_pat):
        logger.info("Azure DevOps 설정이 없습니다. 작업 항목 가져오기는 비활성화됩니다")

    yield

    logger.info("Communications Builder가 종료됩니다")


def create_app() -> FastAPI:
    """
    FastAPI 웹 애플리케이션을 생성하고 설정하는 함수입니다.

    주요 기능:
    1. 기본 앱 정보 설정 (제목, 설명 등)
    2. CORS 설정 (프론트엔드와의 통신 허용 설정)
    3. 커스텀 예외 → 구조화된 JSON 에러 응답
    4. API 라우터 연결 (/api/v1)
    """
    configure_logging()
    settings = get_settings()

    app = FastAPI(
        title="Communications Builder",
        description="원본 자료로부터 릴리스 노트, 교육 가이드, FAQ 등 배포용 문서를 생성합니다",
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # 글로벌 예외 핸들러: 커스텀 예외를 구조화된 JSON 응답으로 변환
    @app.exception_handler(DocGeneratorError)
    async def doc_generator_error_handler(request: Request, exc: DocGeneratorError):
        status_code = status_code_for(exc)
        if status_code >= 500:
            logger.error(f"{exc.error_code} {request.method} {request.url.path}: {exc.message}")
        body = ErrorResponse(
            error_code=exc.error_code,
            message=exc.message,
            details=exc.details,
        )
        return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))

    @app.exception_handler(Exception)
    async def general_error_handler(request: Request, exc: Exception):
        logger.error(f"처리되지 않은 예외: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error_code": "ERR_INTERNAL",
                "message": "내부 서버 오류가 발생했습니다",
                "details": None,
                "timestamp": datetime.now().isoformat(),
            },
        )

    app.include_router(api_router, prefix="/api/v1")

    @app.get("/")
    async def root():
        """서버 기본 정보."""
        return {
            "name": "Communications Builder",
            "version": "1.0.0",
            "description": "원본 자료를 배포용 문서 묶음으로 변환",
            "docs": "/docs",
            "api": "/api/v1",
        }

    return app


# 애플리케이션 인스턴스 생성
app = create_app()


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=True,
    )
