"""
생성 문서 내보내기 (ZIP 묶음, 단일 파일 다운로드).

네트워크나 외부 상태 없이 이미 생성된 문서만 변환합니다.
같은 입력이면 항상 같은 바이트가 나옵니다.
"""

import io
import logging
import re
import zipfile
from dataclasses import dataclass
from typing import Iterable, Optional

from app.exceptions import ExportError
from app.models import GeneratedDoc, DocumentFormat

logger = logging.getLogger(__name__)

# ZIP 엔트리 고정 타임스탬프 (ZIP 형식이 표현할 수 있는 가장 이른 시각)
FIXED_ZIP_TIMESTAMP = (1980, 1, 1, 0, 0, 0)
DEFAULT_PROJECT_NAME = "training-project"

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")
_REPEATED_UNDERSCORES = re.compile(r"_+")

FORMAT_EXTENSIONS: dict[DocumentFormat, str] = {
    DocumentFormat.HTML: ".html",
    DocumentFormat.MARKDOWN: ".md",
    DocumentFormat.TXT: ".txt",
}

FORMAT_MEDIA_TYPES: dict[DocumentFormat, str] = {
    DocumentFormat.HTML: "text/html; charset=utf-8",
    DocumentFormat.MARKDOWN: "text/markdown; charset=utf-8",
    DocumentFormat.TXT: "text/plain; charset=utf-8",
}

HTML_PAGE_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>{title}</title>
</head>
<body>
{body}
</body>
</html>
"""


@dataclass(frozen=True)
class DownloadFile:
    filename: str
    media_type: str
    data: bytes


def sanitize_filename(name: str, fallback: str = "document") -> str:
    """
    파일 시스템에 안전한 이름으로 바꿉니다.
    허용 문자(영문, 숫자, . _ -) 외에는 "_"로 바꾸고 연속된 "_"는 하나로 줄입니다.
    """
    cleaned = _UNSAFE_CHARS.sub("_", name or "")
    cleaned = _REPEATED_UNDERSCORES.sub("_", cleaned).strip("_")
    if not cleaned or set(cleaned) == {"."}:
        return fallback
    return cleaned


def document_filename(doc: GeneratedDoc) -> str:
    """문서 라벨과 형식으로 파일명을 만듭니다 (예: Release_Notes.html)."""
    return sanitize_filename(doc.filename) + FORMAT_EXTENSIONS[doc.format]


def archive_filename(project_name: Optional[str] = None) -> str:
    base = sanitize_filename(project_name or "", fallback=DEFAULT_PROJECT_NAME)
    return f"{base}-documents.zip"


def render_document(doc: GeneratedDoc) -> str:
    """HTML 조각은 독립 실행 가능한 HTML 페이지로 감쌉니다. 이미 페이지면 그대로 둡니다."""
    if doc.format != DocumentFormat.HTML:
        return doc.content

    head = doc.content.lstrip()[:15].lower()
    if head.startswith("<!doctype") or head.startswith("<html"):
        return doc.content

    return HTML_PAGE_TEMPLATE.format(title=doc.filename, body=doc.content)


def _unique_name(name: str, used: set[str]) -> str:
    if name not in used:
        return name
    stem, dot, ext = name.rpartition(".")
    if not dot:
        stem, ext = name, ""
    counter = 2
    while True:
        candidate = f"{stem}_{counter}.{ext}" if dot else f"{stem}_{counter}"
        if candidate not in used:
            return candidate
        counter += 1


def build_archive(docs: list[GeneratedDoc], selected_indices: Iterable[int]) -> bytes:
    """
    선택한 문서들을 ZIP으로 묶습니다.

    Args:
        docs: 생성된 문서 전체 목록
        selected_indices: 포함할 문서 인덱스 (순서와 무관하게 오름차순으로 기록)

    Returns:
        ZIP 파일 바이트

    Raises:
        ExportError: 선택이 비어있거나 범위를 벗어난 인덱스가 있는 경우
    """
    indices = sorted(set(selected_indices))
    if not indices:
        raise ExportError("Please select at least one document to download")

    invalid = [i for i in indices if i < 0 or i >= len(docs)]
    if invalid:
        raise ExportError(
            "Selected document does not exist",
            details={"invalid_indices": invalid, "document_count": len(docs)},
        )

    buffer = io.BytesIO()
    used_names: set[str] = set()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for index in indices:
            doc = docs[index]
            name = _unique_name(document_filename(doc), used_names)
            used_names.add(name)

            info = zipfile.ZipInfo(name, date_time=FIXED_ZIP_TIMESTAMP)
            info.compress_type = zipfile.ZIP_DEFLATED
            info.external_attr = 0o644 << 16
            archive.writestr(info, render_document(doc).encode("utf-8"))

    data = buffer.getvalue()
    logger.info(f"[Export] ZIP 생성: 문서 {len(indices)}개, {len(data)} bytes")
    return data


def build_single_file_download(doc: GeneratedDoc) -> DownloadFile:
    """문서 하나를 형식에 맞는 확장자/MIME 타입의 파일로 만듭니다."""
    return DownloadFile(
        filename=document_filename(doc),
        media_type=FORMAT_MEDIA_TYPES[doc.format],
        data=render_document(doc).encode("utf-8"),
    )
