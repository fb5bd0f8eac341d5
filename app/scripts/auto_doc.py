#!/usr/bin/env python3
"""Generate a document bundle from local files without the web server.

Usage:
    python -m app.scripts.auto_doc notes.txt --types release-notes faq
    python -m app.scripts.auto_doc notes.txt design.md --types manual --output-dir workspace/outputs
    python -m app.scripts.auto_doc notes.txt --types email --project "Billing Update"
"""

import asyncio
import argparse
import logging
import sys
from pathlib import Path

import aiofiles

logger = logging.getLogger(__name__)


async def main() -> int:
    parser = argparse.ArgumentParser(
        description="원본 파일로 배포용 문서 묶음(ZIP)을 생성합니다"
    )
    parser.add_argument("inputs", nargs="+", help="입력 파일 경로")
    parser.add_argument(
        "--types",
        nargs="+",
        default=["release-notes"],
        help="생성할 문서 종류 (예: release-notes faq manual)"
    )
    parser.add_argument(
        "--project",
        type=str,
        default=None,
        help="ZIP 파일 이름에 쓸 프로젝트명 (기본: 첫 입력 파일명)"
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        default="workspace/outputs",
        help="출력 디렉토리"
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="상세 로그 숨기기"
    )

    args = parser.parse_args()
    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    from app.exceptions import DocGeneratorError
    from app.models import PipelineState
    from app.services.orchestrator import PipelineOrchestrator

    orchestrator = PipelineOrchestrator()

    try:
        source_content = await orchestrator.ingestor.ingest_paths(args.inputs)
        await orchestrator.start(args.types, text=source_content)
        # CLI에서는 사전 질문에 답할 수 없으므로 건너뜀
        if orchestrator.state == PipelineState.AWAITING_ANSWERS:
            logger.info(f"[CLI] 사전 질문 {len(orchestrator.run.clarifying_questions)}개 건너뜀")
            await orchestrator.skip_questions()
        project_name = args.project or Path(args.inputs[0]).stem
        download = orchestrator.export_archive(project_name)
    except DocGeneratorError as e:
        logger.error(f"[CLI] {e.error_code}: {e.message}")
        return 1

    output_dir = Path(args.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    output_path = output_dir / download.filename
    async with aiofiles.open(output_path, "wb") as f:
        await f.write(download.data)

    failed = [doc.filename for doc in orchestrator.run.results if doc.error]
    print(f"저장 완료: {output_path} (문서 {len(orchestrator.run.results)}개, 실패 {len(failed)}개)")

    # 종료 코드: 실패한 문서가 있으면 1
    return 1 if failed else 0


def run_auto_doc():
    """CLI 진입점."""
    exit_code = asyncio.run(main())
    sys.exit(exit_code)


if __name__ == "__main__":
    run_auto_doc()
