"""생성 문서 내보내기."""

from .exporter import (
    DownloadFile,
    build_archive,
    build_single_file_download,
    archive_filename,
    document_filename,
    sanitize_filename,
)

__all__ = [
    "DownloadFile",
    "build_archive",
    "build_single_file_download",
    "archive_filename",
    "document_filename",
    "sanitize_filename",
]
