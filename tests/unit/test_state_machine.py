"""Pipeline state transition table tests."""

import pytest

from app.exceptions import InvalidTransitionError
from app.models import PipelineState as S, PipelineTrigger as T
from app.services.state_machine import TRANSITIONS, allowed_triggers, can_transition, transition


@pytest.mark.parametrize(
    "state, trigger, expected",
    [
        (S.IDLE, T.START, S.ANALYZING),
        (S.ANALYZING, T.QUESTIONS_READY, S.AWAITING_ANSWERS),
        (S.ANALYZING, T.NO_QUESTIONS, S.GENERATING),
        (S.ANALYZING, T.ANALYSIS_FAILED, S.IDLE),
        (S.AWAITING_ANSWERS, T.SKIP, S.GENERATING),
        (S.AWAITING_ANSWERS, T.CONTINUE, S.GENERATING),
        (S.GENERATING, T.BATCH_SETTLED, S.REVIEWING),
        (S.GENERATING, T.ABORT, S.IDLE),
        (S.REVIEWING, T.GENERATE_MORE, S.GENERATING),
        (S.REVIEWING, T.REGENERATE, S.REVIEWING),
    ],
)
def test_legal_transitions(state, trigger, expected):
    assert transition(state, trigger) == expected
    assert can_transition(state, trigger)


@pytest.mark.parametrize("state", list(S))
def test_reset_is_legal_from_every_state(state):
    assert transition(state, T.RESET) == S.IDLE


@pytest.mark.parametrize(
    "state, trigger",
    [
        (S.IDLE, T.GENERATE_MORE),
        (S.IDLE, T.SKIP),
        (S.ANALYZING, T.START),
        (S.AWAITING_ANSWERS, T.BATCH_SETTLED),
        (S.GENERATING, T.GENERATE_MORE),
        (S.GENERATING, T.REGENERATE),
        (S.REVIEWING, T.START),
    ],
)
def test_illegal_transitions_raise(state, trigger):
    assert not can_transition(state, trigger)
    with pytest.raises(InvalidTransitionError) as exc_info:
        transition(state, trigger)
    assert exc_info.value.details["state"] == state.value
    assert exc_info.value.details["trigger"] == trigger.value


def test_every_state_has_an_entry():
    assert set(TRANSITIONS) == set(S)


def test_allowed_triggers_include_reset():
    assert allowed_triggers(S.AWAITING_ANSWERS) == [T.SKIP, T.CONTINUE, T.RESET]
