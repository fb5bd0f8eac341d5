"""Prompt templates for document generation and content analysis."""

from .document_prompts import DOCUMENT_PROMPTS, BASE_WRITER_PROMPT, build_document_user_prompt
from .analysis_prompts import (
    CATEGORIZE_SYSTEM_PROMPT,
    CLARIFY_SYSTEM_PROMPT,
    ENHANCE_SYSTEM_PROMPT,
    CLEANUP_SYSTEM_PROMPT,
    build_categorize_user_prompt,
    build_clarify_user_prompt,
    build_enhance_user_prompt,
    build_cleanup_user_prompt,
)

__all__ = [
    "DOCUMENT_PROMPTS",
    "BASE_WRITER_PROMPT",
    "build_document_user_prompt",
    "CATEGORIZE_SYSTEM_PROMPT",
    "CLARIFY_SYSTEM_PROMPT",
    "ENHANCE_SYSTEM_PROMPT",
    "CLEANUP_SYSTEM_PROMPT",
    "build_categorize_user_prompt",
    "build_clarify_user_prompt",
    "build_enhance_user_prompt",
    "build_cleanup_user_prompt",
]
