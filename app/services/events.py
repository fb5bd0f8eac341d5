"""
파이프라인 이벤트 발행/구독.

오케스트레이터와 생성 클라이언트는 진행 상황을 문자열 콜백 대신
PipelineEvent로 발행하고, UI/로거/테스트는 필요한 만큼 구독합니다.
"""

import inspect
import logging
from typing import Awaitable, Callable, Optional, Union

from app.models import PipelineEvent, PipelineState, DocumentTypeId

logger = logging.getLogger(__name__)

EventCallback = Callable[[PipelineEvent], Union[None, Awaitable[None]]]

# 이벤트 종류
STATE_CHANGED = "state_changed"
STARTED = "started"
PROGRESS = "progress"
SETTLED = "settled"
ERROR = "error"


class EventEmitter:
    """구독자 목록을 관리하고 이벤트를 순서대로 전달합니다."""

    def __init__(self):
        self._subscribers: list[EventCallback] = []

    def subscribe(self, callback: EventCallback) -> Callable[[], None]:
        """콜백을 등록하고, 등록 해제 함수를 반환합니다."""
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    async def emit(self, event: PipelineEvent) -> None:
        """
        모든 구독자에게 이벤트를 전달합니다.
        구독자 예외는 로그만 남기고 파이프라인 진행에는 영향을 주지 않습니다.
        """
        for callback in list(self._subscribers):
            try:
                result = callback(event)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.warning(
                    f"[Events] 구독자 처리 실패 ({event.event_type}): {type(e).__name__}: {e}"
                )

    async def publish(
        self,
        run_id: str,
        event_type: str,
        message: str = "",
        doc_type: Optional[DocumentTypeId] = None,
        state: Optional[PipelineState] = None,
        data: Optional[dict] = None,
    ) -> PipelineEvent:
        """PipelineEvent를 만들어 발행하고 반환합니다."""
        event = PipelineEvent(
            run_id=run_id,
            event_type=event_type,
            doc_type=doc_type,
            state=state,
            message=message,
            data=data,
        )
        await self.emit(event)
        return event
