"""
문서 생성 시스템 커스텀 예외 계층입니다.
각 단계/서비스별 구조화된 에러 코드와 메시지를 제공합니다.
"""

from typing import Optional, Any


class DocGeneratorError(Exception):
    """문서 생성 시스템 기본 예외 클래스."""

    def __init__(
        self,
        message: str,
        error_code: str = "ERR_UNKNOWN",
        details: Optional[Any] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details
        super().__init__(self.message)


class ConfigurationError(DocGeneratorError):
    """API 키 등 필수 설정 누락. 호출 전에 즉시 중단합니다."""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message, error_code="ERR_CONFIG_001", details=details)


class IngestionError(DocGeneratorError):
    """원본 콘텐츠 수집 단계 에러."""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message, error_code="ERR_INGEST_001", details=details)


class GenerationError(DocGeneratorError):
    """문서 생성 단계 에러 (빈 응답 등)."""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message, error_code="ERR_GEN_001", details=details)


class ClaudeClientError(DocGeneratorError):
    """Claude API 통신 에러."""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message, error_code="ERR_CLAUDE_001", details=details)


class IssueTrackerError(DocGeneratorError):
    """Azure DevOps 조회 실패. 원격 서버의 진단 정보를 details에 담습니다."""

    def __init__(
        self,
        message: str,
        details: Optional[Any] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message, error_code="ERR_ADO_001", details=details)
        self.status_code = status_code


class ExportError(DocGeneratorError):
    """ZIP/단일 파일 내보내기 에러."""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message, error_code="ERR_EXPORT_001", details=details)


class InputValidationError(DocGeneratorError):
    """입력 유효성 검증 에러 (400 응답)."""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message, error_code="ERR_INPUT_001", details=details)


class InvalidTransitionError(DocGeneratorError):
    """현재 파이프라인 상태에서 허용되지 않는 동작 (409 응답)."""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message, error_code="ERR_STATE_001", details=details)
