"""
원본 콘텐츠 수집기입니다.

업로드 파일, 붙여넣은 텍스트, (work_item_formatter를 거친) 작업 항목을
생성에 사용할 하나의 SourceContent 문자열로 만듭니다.

파일 하나를 읽지 못해도 전체 수집은 실패하지 않습니다.
해당 파일만 안내 문구로 대체됩니다.
"""

import logging
import mimetypes
from pathlib import Path
from typing import Iterable, Optional, Union

import aiofiles

from app.exceptions import IngestionError, InputValidationError
from app.models import UploadedFile, FileContent
from .format_capabilities import (
    FORMAT_CAPABILITIES,
    READ_ERROR_STUB,
    detect_category,
    resolve_content_type,
)

logger = logging.getLogger(__name__)

FILE_SEPARATOR = "\n---\n\n"


def frame_file_content(file_content: FileContent) -> str:
    """파일 하나를 "=== 파일명 ===" 머리말로 감쌉니다."""
    return f"=== {file_content.filename} ===\n\n{file_content.content}\n\n"


class ContentIngestor:
    """파일/텍스트 입력을 SourceContent로 변환합니다."""

    def process_file(self, upload: UploadedFile) -> FileContent:
        """
        파일 하나를 분류하고 텍스트를 추출합니다.
        텍스트가 아닌 형식은 형식별 안내 문구를, 읽기 실패 시 에러 안내 문구를 반환합니다.
        """
        content_type = resolve_content_type(upload.filename, upload.content_type)
        category = detect_category(upload.filename, content_type)
        capability = FORMAT_CAPABILITIES[category]

        if not capability.extractable:
            logger.info(f"[Ingest] {upload.filename}: {category.value} 형식은 안내 문구로 대체")
            return FileContent(
                filename=upload.filename,
                content=capability.render_stub(upload.filename),
                category=category,
                content_type=content_type,
                size=upload.size,
                extracted=False,
            )

        try:
            text = self._decode_text(upload.content)
        except (UnicodeDecodeError, ValueError) as e:
            logger.warning(f"[Ingest] {upload.filename} 읽기 실패: {type(e).__name__}: {e}")
            return FileContent(
                filename=upload.filename,
                content=READ_ERROR_STUB.format(filename=upload.filename),
                category=category,
                content_type=content_type,
                size=upload.size,
                extracted=False,
            )

        return FileContent(
            filename=upload.filename,
            content=text,
            category=category,
            content_type=content_type,
            size=upload.size,
        )

    def process_files(self, files: Iterable[UploadedFile]) -> tuple[str, list[FileContent]]:
        """
        여러 파일을 처리하고 하나의 문자열로 합칩니다.

        Returns:
            (합쳐진 콘텐츠, 파일별 추출 결과)
        """
        file_contents = [self.process_file(upload) for upload in files]
        combined = FILE_SEPARATOR.join(frame_file_content(fc) for fc in file_contents)

        extracted = sum(1 for fc in file_contents if fc.extracted)
        logger.info(
            f"[Ingest] 파일 {len(file_contents)}개 처리 "
            f"(텍스트 {extracted}개, 안내 문구 {len(file_contents) - extracted}개)"
        )
        return combined, file_contents

    def ingest(
        self,
        files: Optional[list[UploadedFile]] = None,
        text: Optional[str] = None,
    ) -> str:
        """
        입력을 SourceContent로 변환합니다. 파일이 있으면 파일이 우선합니다.

        Raises:
            InputValidationError: 파일도 텍스트도 없는 경우
        """
        if files:
            combined, _ = self.process_files(files)
            return combined

        if text is not None and text.strip():
            return text

        raise InputValidationError("파일을 업로드하거나 텍스트를 입력해주세요")

    async def ingest_paths(self, paths: Iterable[Union[str, Path]]) -> str:
        """
        디스크의 파일들을 읽어서 SourceContent로 변환합니다 (개발용 스크립트에서 사용).
        경로 자체를 열 수 없으면 IngestionError를 던집니다.
        """
        uploads = []
        for path in paths:
            path = Path(path)
            try:
                async with aiofiles.open(path, "rb") as f:
                    data = await f.read()
            except OSError as e:
                raise IngestionError(
                    f"Cannot read input file: {path}",
                    details={"path": str(path), "reason": e.strerror or str(e)},
                )
            guessed, _ = mimetypes.guess_type(path.name)
            uploads.append(UploadedFile(filename=path.name, content=data, content_type=guessed))

        return self.ingest(files=uploads)

    @staticmethod
    def _decode_text(data: bytes) -> str:
        # utf-8-sig가 BOM을 제거합니다
        return data.decode("utf-8-sig")


# 싱글톤 인스턴스
_content_ingestor: Optional[ContentIngestor] = None


def get_content_ingestor() -> ContentIngestor:
    global _content_ingestor
    if _content_ingestor is None:
        _content_ingestor = ContentIngestor()
    return _content_ingestor
