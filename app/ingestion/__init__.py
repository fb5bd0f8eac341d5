"""원본 콘텐츠 수집 (파일, 텍스트, 작업 항목)."""

from .content_ingestor import ContentIngestor, get_content_ingestor, frame_file_content
from .format_capabilities import (
    FormatCapability,
    FORMAT_CAPABILITIES,
    detect_category,
    resolve_content_type,
)
from .work_item_formatter import format_work_items, strip_html

__all__ = [
    "ContentIngestor",
    "get_content_ingestor",
    "frame_file_content",
    "FormatCapability",
    "FORMAT_CAPABILITIES",
    "detect_category",
    "resolve_content_type",
    "format_work_items",
    "strip_html",
]
