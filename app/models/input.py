"""
입력 파일 관련 데이터 모델입니다.
사용자가 업로드하는 파일과 파일별 추출 결과를 정의합니다.
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class FileCategory(str, Enum):
    """업로드 파일 분류입니다. 텍스트만 실제로 내용을 읽습니다."""

    TEXT = "text"
    PDF = "pdf"
    WORD = "word"
    EXCEL = "excel"
    IMAGE = "image"
    OTHER = "other"


class UploadedFile(BaseModel):
    """업로드된 원본 파일 하나입니다."""

    filename: str
    content: bytes = b""
    content_type: Optional[str] = None  # 브라우저가 보낸 MIME 타입

    @property
    def size(self) -> int:
        return len(self.content)


class FileContent(BaseModel):
    """파일 하나에서 추출한 텍스트(또는 안내 문구)입니다."""

    filename: str
    content: str = Field(..., description="추출된 텍스트 또는 미지원 형식 안내 문구")
    category: FileCategory
    content_type: str = "application/octet-stream"
    size: int = 0
    extracted: bool = True  # False면 content는 안내 문구
