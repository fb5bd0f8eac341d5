"""Azure DevOps 작업 항목을 원본 텍스트로 변환합니다."""

import html
import re
from typing import Iterable

from app.models import WorkItem

_TAG_PATTERN = re.compile(r"<[^>]*>")
ITEM_SEPARATOR = "\n\n---\n\n"


def strip_html(value: str) -> str:
    """HTML 태그를 제거하고 &nbsp; 등 엔티티를 일반 문자로 바꿉니다."""
    text = _TAG_PATTERN.sub("", value or "")
    text = text.replace("&nbsp;", " ")
    text = html.unescape(text).replace("\xa0", " ")
    return text.strip()


def format_work_items(work_items: Iterable[WorkItem]) -> str:
    """
    작업 항목 목록을 SourceContent로 쓸 텍스트로 만듭니다.

    1건이면 제목/설명을 나눠서, 여러 건이면 "ADO #id: 제목" 블록을 구분선으로 이어 붙입니다.
    빈 목록이면 빈 문자열을 반환합니다.
    """
    items = list(work_items)
    if not items:
        return ""

    if len(items) == 1:
        item = items[0]
        return (
            f"Imported from ADO #{item.id}\n\n"
            f"Title: {item.title}\n\n"
            f"Description:\n{strip_html(item.description)}"
        )

    combined = ITEM_SEPARATOR.join(
        f"ADO #{item.id}: {item.title}\n{strip_html(item.description)}"
        for item in items
    )
    return f"Imported {len(items)} work items from ADO:\n\n{combined}"
