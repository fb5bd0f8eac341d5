"""
생성 가능한 문서 종류 목록(카탈로그)입니다.

문서 종류를 추가하려면 DOCUMENT_OPTIONS에 레코드 하나를,
prompts.document_prompts.DOCUMENT_PROMPTS에 같은 prompt_profile 키의 지침을 추가합니다.
오케스트레이터 코드는 바꿀 필요가 없습니다.
"""

from typing import Iterable

from app.models import DocumentTypeId, DocumentOption, DocumentFormat
from app.exceptions import InputValidationError


DOCUMENT_OPTIONS: list[DocumentOption] = [
    DocumentOption(
        id=DocumentTypeId.RELEASE_NOTES,
        label="Release Notes",
        description="Professional release notes for stakeholders",
        prompt_profile="release-notes",
        icon="megaphone",
    ),
    DocumentOption(
        id=DocumentTypeId.TRAINING_GUIDE,
        label="Training Guide",
        description="Step-by-step training documentation",
        prompt_profile="training-guide",
        icon="graduation-cap",
    ),
    DocumentOption(
        id=DocumentTypeId.EMAIL,
        label="Email Announcement",
        description="Ready-to-send email template",
        prompt_profile="email",
        icon="mail",
    ),
    DocumentOption(
        id=DocumentTypeId.QUICK_REF,
        label="Quick Reference Card",
        description="One-page cheat sheet",
        prompt_profile="quick-ref",
        icon="bookmark",
    ),
    DocumentOption(
        id=DocumentTypeId.FAQ,
        label="FAQ Document",
        description="Frequently asked questions and answers",
        prompt_profile="faq",
        icon="help-circle",
    ),
    DocumentOption(
        id=DocumentTypeId.MANUAL,
        label="User Manual",
        description="Comprehensive user documentation",
        prompt_profile="manual",
        icon="book-open",
    ),
    DocumentOption(
        id=DocumentTypeId.TECH_GUIDE,
        label="App Support Technical Guide",
        description="Technical details for app support teams",
        prompt_profile="tech-guide",
        icon="wrench",
        format=DocumentFormat.HTML,
    ),
]

_OPTIONS_BY_ID: dict[DocumentTypeId, DocumentOption] = {
    option.id: option for option in DOCUMENT_OPTIONS
}


def get_document_option(doc_type: DocumentTypeId) -> DocumentOption:
    """문서 종류 ID로 설정 레코드를 찾습니다."""
    option = _OPTIONS_BY_ID.get(doc_type)
    if option is None:
        raise InputValidationError(
            f"지원하지 않는 문서 종류입니다: {doc_type}",
            details={"doc_type": str(doc_type)},
        )
    return option


def parse_document_types(values: Iterable[str]) -> list[DocumentTypeId]:
    """
    문자열 목록을 DocumentTypeId 목록으로 변환합니다.
    중복은 처음 나온 순서만 남기고, 알 수 없는 값은 InputValidationError를 발생시킵니다.
    """
    parsed: list[DocumentTypeId] = []
    for value in values:
        try:
            doc_type = DocumentTypeId(value)
        except ValueError:
            raise InputValidationError(
                f"알 수 없는 문서 종류입니다: {value}",
                details={
                    "doc_type": value,
                    "allowed": [option.id.value for option in DOCUMENT_OPTIONS],
                },
            )
        if doc_type not in parsed:
            parsed.append(doc_type)
    return parsed
