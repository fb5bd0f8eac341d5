from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """
    애플리케이션의 설정을 관리하는 클래스입니다.
    환경 변수(.env 파일)에서 설정값을 읽어옵니다.
    """

    # AI 설정: 문서 생성에 사용할 Claude API 키와 모델
    anthropic_api_key: str = ""
    claude_model: str = "claude-sonnet-4-20250514"

    # 문서 1건 생성 호출의 최대 대기 시간(초). 0이면 제한 없음
    generation_timeout_seconds: float = 180.0
    max_clarifying_questions: int = 5  # 사전 질문 최대 개수

    # Azure DevOps 설정: 작업 항목(Work Item) 가져오기에 사용
    ado_organization: str = ""
    ado_pat: str = ""  # Personal Access Token
    ado_api_version: str = "7.1"
    ado_default_lookback_months: int = 12  # 필터가 없을 때 조회할 최근 기간
    ado_default_max_results: int = 50

    # 업로드 제한
    max_file_size_mb: int = 10
    max_total_upload_mb: int = 50
    max_document_count: int = 20
    max_filename_length: int = 255

    # 서버 설정: 서버가 실행될 주소와 포트 번호
    host: str = "0.0.0.0"  # 모든 외부 접속 허용
    port: int = 8000
    allowed_origins: list[str] = ["*"]
    log_level: str = "INFO"

    class Config:
        # 설정을 읽어올 파일 지정
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache()
def get_settings() -> Settings:
    """
    설정을 가져오는 함수입니다.
    @lru_cache를 사용하여 한 번 읽은 설정은 메모리에 저장해두고 재사용합니다.
    """
    return Settings()
