"""
파이프라인 상태 전이 표.

전이는 (현재 상태, 트리거) → 다음 상태의 순수 함수이며,
허용되지 않은 전이는 InvalidTransitionError를 발생시킵니다.
"""

from app.exceptions import InvalidTransitionError
from app.models import PipelineState, PipelineTrigger


TRANSITIONS: dict[PipelineState, dict[PipelineTrigger, PipelineState]] = {
    PipelineState.IDLE: {
        PipelineTrigger.START: PipelineState.ANALYZING,
    },
    PipelineState.ANALYZING: {
        PipelineTrigger.QUESTIONS_READY: PipelineState.AWAITING_ANSWERS,
        PipelineTrigger.NO_QUESTIONS: PipelineState.GENERATING,
        PipelineTrigger.ANALYSIS_FAILED: PipelineState.IDLE,
    },
    PipelineState.AWAITING_ANSWERS: {
        PipelineTrigger.SKIP: PipelineState.GENERATING,
        PipelineTrigger.CONTINUE: PipelineState.GENERATING,
    },
    PipelineState.GENERATING: {
        PipelineTrigger.BATCH_SETTLED: PipelineState.REVIEWING,
        PipelineTrigger.ABORT: PipelineState.IDLE,
    },
    PipelineState.REVIEWING: {
        PipelineTrigger.GENERATE_MORE: PipelineState.GENERATING,
        PipelineTrigger.REGENERATE: PipelineState.REVIEWING,
    },
}


def can_transition(state: PipelineState, trigger: PipelineTrigger) -> bool:
    if trigger == PipelineTrigger.RESET:
        return True
    return trigger in TRANSITIONS.get(state, {})


def transition(state: PipelineState, trigger: PipelineTrigger) -> PipelineState:
    """다음 상태를 반환합니다. reset은 어느 상태에서나 idle로 갑니다."""
    if trigger == PipelineTrigger.RESET:
        return PipelineState.IDLE

    next_state = TRANSITIONS.get(state, {}).get(trigger)
    if next_state is None:
        raise InvalidTransitionError(
            f"'{trigger.value}' is not allowed while the pipeline is '{state.value}'",
            details={
                "state": state.value,
                "trigger": trigger.value,
                "allowed": [t.value for t in allowed_triggers(state)],
            },
        )
    return next_state


def allowed_triggers(state: PipelineState) -> list[PipelineTrigger]:
    return list(TRANSITIONS.get(state, {})) + [PipelineTrigger.RESET]
