"""유틸리티 모듈."""

from .validation import (
    clean_upload_filename,
    validate_text_input,
    validate_file_size,
    validate_document_count,
    validate_uploads,
)

__all__ = [
    "clean_upload_filename",
    "validate_text_input",
    "validate_file_size",
    "validate_document_count",
    "validate_uploads",
]
