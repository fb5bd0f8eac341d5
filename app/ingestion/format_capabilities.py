"""
파일 형식별 처리 능력 표입니다.

형식마다 {텍스트 추출 가능 여부, 안내 문구}를 데이터로 관리합니다.
특정 형식에 실제 추출기를 붙이려면 이 표의 extractable만 바꾸고
ContentIngestor에 해당 분기를 추가하면 됩니다.
"""

from dataclasses import dataclass
from typing import Optional

from app.models import FileCategory


@dataclass(frozen=True)
class FormatCapability:
    extractable: bool
    stub_message: str = ""  # {filename} 자리표시자 사용

    def render_stub(self, filename: str) -> str:
        return self.stub_message.format(filename=filename)


FORMAT_CAPABILITIES: dict[FileCategory, FormatCapability] = {
    FileCategory.TEXT: FormatCapability(extractable=True),
    FileCategory.PDF: FormatCapability(
        extractable=False,
        stub_message=(
            "[PDF Document: {filename}]\n\n"
            "Note: PDF text extraction is not available. "
            "Please copy and paste the PDF content or upload it as a .txt file."
        ),
    ),
    FileCategory.WORD: FormatCapability(
        extractable=False,
        stub_message=(
            "[Word Document: {filename}]\n\n"
            "Note: Word document extraction is not available. "
            "Please copy and paste the document content or upload it as a .txt file."
        ),
    ),
    FileCategory.EXCEL: FormatCapability(
        extractable=False,
        stub_message=(
            "[Excel Spreadsheet: {filename}]\n\n"
            "Note: Spreadsheet extraction is not available. "
            "Please copy and paste the spreadsheet content or upload it as a .txt/.csv file."
        ),
    ),
    FileCategory.IMAGE: FormatCapability(
        extractable=False,
        stub_message=(
            "[Image: {filename}]\n\n"
            "Note: Text recognition for images is not available. "
            "Please provide a text description of the image content."
        ),
    ),
    FileCategory.OTHER: FormatCapability(
        extractable=False,
        stub_message=(
            "[Unsupported File: {filename}]\n\n"
            "Note: This file type cannot be read. "
            "Please copy and paste its content as text."
        ),
    ),
}

READ_ERROR_STUB = "Error reading file: {filename}"

# 확장자 → 분류
EXTENSION_MAP: dict[str, FileCategory] = {
    "txt": FileCategory.TEXT,
    "md": FileCategory.TEXT,
    "markdown": FileCategory.TEXT,
    "csv": FileCategory.TEXT,
    "json": FileCategory.TEXT,
    "log": FileCategory.TEXT,
    "pdf": FileCategory.PDF,
    "doc": FileCategory.WORD,
    "docx": FileCategory.WORD,
    "xls": FileCategory.EXCEL,
    "xlsx": FileCategory.EXCEL,
    "png": FileCategory.IMAGE,
    "jpg": FileCategory.IMAGE,
    "jpeg": FileCategory.IMAGE,
    "gif": FileCategory.IMAGE,
    "bmp": FileCategory.IMAGE,
    "webp": FileCategory.IMAGE,
}

# MIME 타입 부분 문자열 → 분류 (위에서부터 순서대로 검사)
# Office Open XML 스프레드시트 MIME에도 "officedocument"가 들어있으므로
# 스프레드시트를 워드보다 먼저 확인해야 합니다.
# 프레젠테이션(pptx) MIME도 "document"를 포함하므로 기타로 먼저 분류합니다.
CONTENT_TYPE_RULES: list[tuple[str, FileCategory]] = [
    ("text", FileCategory.TEXT),
    ("pdf", FileCategory.PDF),
    ("spreadsheet", FileCategory.EXCEL),
    ("excel", FileCategory.EXCEL),
    ("presentation", FileCategory.OTHER),
    ("powerpoint", FileCategory.OTHER),
    ("word", FileCategory.WORD),
    ("document", FileCategory.WORD),
    ("image", FileCategory.IMAGE),
]

# 파일명만 있을 때 추정하는 MIME 타입
EXTENSION_CONTENT_TYPES: dict[str, str] = {
    "txt": "text/plain",
    "md": "text/markdown",
    "csv": "text/csv",
    "pdf": "application/pdf",
    "doc": "application/msword",
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "xls": "application/vnd.ms-excel",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
}

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def _extension(filename: str) -> str:
    return filename.lower().rsplit(".", 1)[-1] if "." in filename else ""


def resolve_content_type(filename: str, content_type: Optional[str] = None) -> str:
    """선언된 MIME 타입이 없거나 기본값이면 확장자로 추정합니다."""
    if content_type and content_type != DEFAULT_CONTENT_TYPE:
        return content_type
    return EXTENSION_CONTENT_TYPES.get(_extension(filename), DEFAULT_CONTENT_TYPE)


def detect_category(filename: str, content_type: Optional[str] = None) -> FileCategory:
    """
    MIME 타입 또는 확장자를 보고 파일 분류를 결정합니다.
    MIME 타입 힌트를 우선 확인하고, 판단이 안 되면 확장자를 봅니다.
    """
    mime = (content_type or "").lower()
    if mime and mime != DEFAULT_CONTENT_TYPE:
        for needle, category in CONTENT_TYPE_RULES:
            if needle in mime:
                return category

    return EXTENSION_MAP.get(_extension(filename), FileCategory.OTHER)
