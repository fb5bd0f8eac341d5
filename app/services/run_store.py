"""
세션별 파이프라인 오케스트레이터 저장소 (메모리).

세션 하나가 오케스트레이터 하나를 가지며, 발생한 이벤트를 순서대로 기록해서
진행 상황 조회(GET /runs/{id}/events)에 사용합니다.
"""

import logging
from typing import Callable, Optional

from app.models import PipelineEvent
from app.services.events import EventEmitter
from app.services.generation_client import GenerationClient
from app.services.orchestrator import PipelineOrchestrator

logger = logging.getLogger(__name__)

# 세션당 보관할 최대 이벤트 수
MAX_EVENTS_PER_SESSION = 500

OrchestratorFactory = Callable[[EventEmitter], PipelineOrchestrator]


def default_orchestrator_factory(events: EventEmitter) -> PipelineOrchestrator:
    return PipelineOrchestrator(
        generation_client=GenerationClient(events=events),
        events=events,
    )


class RunStore:
    """session_id → 오케스트레이터 매핑과 이벤트 기록을 관리합니다."""

    def __init__(self, factory: Optional[OrchestratorFactory] = None):
        self._factory = factory or default_orchestrator_factory
        self._orchestrators: dict[str, PipelineOrchestrator] = {}
        self._events: dict[str, list[PipelineEvent]] = {}

    def create(self) -> PipelineOrchestrator:
        events = EventEmitter()
        orchestrator = self._factory(events)
        session_id = orchestrator.session_id

        recorded: list[PipelineEvent] = []

        def record(event: PipelineEvent):
            recorded.append(event)
            if len(recorded) > MAX_EVENTS_PER_SESSION:
                del recorded[0]

        orchestrator.events.subscribe(record)
        self._orchestrators[session_id] = orchestrator
        self._events[session_id] = recorded

        logger.info(f"[Pipeline] 세션 생성: {session_id}")
        return orchestrator

    def get(self, session_id: str) -> Optional[PipelineOrchestrator]:
        return self._orchestrators.get(session_id)

    def events(self, session_id: str, since: int = 0) -> list[PipelineEvent]:
        return self._events.get(session_id, [])[since:]

    def delete(self, session_id: str) -> bool:
        """세션을 삭제합니다. 없으면 False."""
        if session_id not in self._orchestrators:
            return False
        del self._orchestrators[session_id]
        del self._events[session_id]
        logger.info(f"[Pipeline] 세션 삭제: {session_id}")
        return True

    def __len__(self) -> int:
        return len(self._orchestrators)


# 싱글톤 인스턴스
_run_store: Optional[RunStore] = None


def get_run_store() -> RunStore:
    global _run_store
    if _run_store is None:
        _run_store = RunStore()
    return _run_store
