"""Transition graph lookups and move classification."""

import pytest

from mockexam_lifecycle.constants import ALLOWED_TRANSITIONS, STATUS_ORDER
from mockexam_lifecycle.errors import TransitionNotAllowedError
from mockexam_lifecycle.models.enums import MockExamStatus, MoveDirection
from mockexam_lifecycle.policy import (
    TERMINAL_STAGES,
    allowed_stages,
    can_transition,
    classify_move,
    completion_signal,
    is_terminal,
    require_transition,
)

S = MockExamStatus


def test_every_status_has_rank_and_edges():
    assert set(STATUS_ORDER) == set(MockExamStatus)
    assert set(ALLOWED_TRANSITIONS) == set(MockExamStatus)
    assert sorted(STATUS_ORDER.values()) == list(range(1, 11)), "Ranks must be 1..10"


@pytest.mark.parametrize("status", list(MockExamStatus))
def test_allowed_stages_include_current(status):
    assert status in allowed_stages(status), "A stage can always be updated in place"


def test_allowed_from_scheduled():
    assert allowed_stages(S.SCHEDULED) == {
        S.SCHEDULED,
        S.PLANNED,
        S.MATERIALS_READY,
        S.IN_PROGRESS,
        S.CANCELLED,
    }


def test_allowed_accepts_raw_values():
    assert allowed_stages("grading") == allowed_stages(S.GRADING)


def test_terminal_stages():
    assert TERMINAL_STAGES == {S.COMPLETED, S.CANCELLED}
    assert allowed_stages(S.COMPLETED) == {S.COMPLETED}
    assert allowed_stages(S.CANCELLED) == {S.CANCELLED}
    assert is_terminal("completed")
    assert not is_terminal(S.MODERATION)


@pytest.mark.parametrize(
    "current,target",
    [
        (S.DRAFT, S.PLANNED),
        (S.PLANNED, S.DRAFT),
        (S.SCHEDULED, S.IN_PROGRESS),
        (S.MODERATION, S.GRADING),
        (S.GRADING, S.ANALYTICS_RELEASED),
        (S.ANALYTICS_RELEASED, S.COMPLETED),
    ],
)
def test_can_transition_listed_edges(current, target):
    assert can_transition(current, target)


@pytest.mark.parametrize(
    "current,target",
    [
        (S.DRAFT, S.SCHEDULED),
        (S.IN_PROGRESS, S.SCHEDULED),
        (S.ANALYTICS_RELEASED, S.GRADING),
        (S.COMPLETED, S.DRAFT),
        (S.CANCELLED, S.DRAFT),
    ],
)
def test_cannot_transition_unlisted_edges(current, target):
    assert not can_transition(current, target)
    with pytest.raises(TransitionNotAllowedError) as exc_info:
        require_transition(current, target)
    assert exc_info.value.current is current
    assert exc_info.value.target is target
    assert "Transition not allowed" in str(exc_info.value)


def test_every_non_terminal_stage_can_cancel():
    for status in MockExamStatus:
        if status in TERMINAL_STAGES:
            continue
        assert can_transition(status, S.CANCELLED), f"{status.value} should allow cancel"


def test_classify_move():
    assert classify_move(S.SCHEDULED, S.MATERIALS_READY) is MoveDirection.FORWARD
    assert classify_move(S.SCHEDULED, S.PLANNED) is MoveDirection.BACKWARD
    assert classify_move(S.SCHEDULED, S.SCHEDULED) is MoveDirection.LATERAL
    # Works for unreachable pairs as well
    assert classify_move(S.DRAFT, S.COMPLETED) is MoveDirection.FORWARD


def test_completion_signal():
    assert completion_signal(MoveDirection.FORWARD) is True
    assert completion_signal(MoveDirection.BACKWARD) is False
    assert completion_signal(MoveDirection.LATERAL) is None
