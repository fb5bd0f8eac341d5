"""입력 유효성 검증 유틸리티.

업로드 요청 단위의 제한(파일 수, 크기)을 검사합니다.
지원하지 않는 형식은 거부하지 않고 수집 단계에서 안내 문구로 대체하므로,
여기서는 확장자를 검사하지 않습니다.
"""

import os
import re
from typing import Iterable, Optional

from app.config import get_settings
from app.exceptions import InputValidationError
from app.models import UploadedFile


# 파일명에서 제거할 제어 문자와 경로 구분자
UNSAFE_FILENAME_CHARS = re.compile(r"[\x00-\x1f<>:\"|?*]")


def clean_upload_filename(filename: Optional[str]) -> str:
    """
    업로드 파일명 정리.

    - 경로 부분 제거 (브라우저/클라이언트가 전체 경로를 보내는 경우)
    - 제어 문자와 위험 문자 제거
    - 길이 제한 (확장자는 유지)

    Returns:
        정리된 파일명. 남는 것이 없으면 "untitled"
    """
    settings = get_settings()

    name = (filename or "").replace("\\", "/")
    name = os.path.basename(name)
    name = UNSAFE_FILENAME_CHARS.sub("", name).strip()

    if not name or name in (".", ".."):
        return "untitled"

    if len(name) > settings.max_filename_length:
        stem, ext = os.path.splitext(name)
        keep = max(settings.max_filename_length - len(ext), 1)
        name = stem[:keep] + ext

    return name


def validate_text_input(text: Optional[str]) -> str:
    """붙여넣은 텍스트가 비어있으면 InputValidationError."""
    if text is None or not text.strip():
        raise InputValidationError("입력 텍스트가 비어있습니다")
    return text


def validate_file_size(
    file_size: int,
    total_size: Optional[int] = None,
) -> None:
    """
    파일 크기 검증.

    Args:
        file_size: 개별 파일 크기 (bytes)
        total_size: 전체 업로드 누적 크기 (bytes, 선택)

    Raises:
        InputValidationError: 크기 제한 초과
    """
    settings = get_settings()
    max_bytes = settings.max_file_size_mb * 1024 * 1024

    if file_size > max_bytes:
        raise InputValidationError(
            f"파일 크기가 제한을 초과했습니다 (최대 {settings.max_file_size_mb}MB)",
            details={
                "file_size_bytes": file_size,
                "max_size_bytes": max_bytes,
            },
        )

    if total_size is not None:
        max_total = settings.max_total_upload_mb * 1024 * 1024
        if total_size > max_total:
            raise InputValidationError(
                f"전체 업로드 크기가 제한을 초과했습니다 (최대 {settings.max_total_upload_mb}MB)",
                details={
                    "total_size_bytes": total_size,
                    "max_total_bytes": max_total,
                },
            )


def validate_document_count(count: int) -> None:
    """업로드 파일 수 상한 검증. 0개는 호출자가 텍스트 입력으로 처리합니다."""
    settings = get_settings()

    if count > settings.max_document_count:
        raise InputValidationError(
            f"한 번에 업로드 가능한 최대 파일 수를 초과했습니다 (최대 {settings.max_document_count}개)",
            details={
                "count": count,
                "max_count": settings.max_document_count,
            },
        )


def validate_uploads(files: Iterable[UploadedFile]) -> list[UploadedFile]:
    """업로드 묶음 전체를 검사하고 목록으로 반환합니다."""
    files = list(files)
    validate_document_count(len(files))

    total = 0
    for upload in files:
        total += upload.size
        try:
            validate_file_size(upload.size, total_size=total)
        except InputValidationError as e:
            e.details = {**(e.details or {}), "filename": upload.filename}
            raise

    return files
