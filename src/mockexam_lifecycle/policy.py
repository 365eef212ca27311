"""Transition policy — which stages are reachable, and in which direction.

The graph is a fixed adjacency list (``constants.ALLOWED_TRANSITIONS``).
This is a lookup, not a search: a stage is reachable only if it is the
current stage or one of its listed neighbours.
"""

from __future__ import annotations

from mockexam_lifecycle.constants import ALLOWED_TRANSITIONS, STATUS_ORDER
from mockexam_lifecycle.errors import TransitionNotAllowedError
from mockexam_lifecycle.models.enums import MockExamStatus, MoveDirection

TERMINAL_STAGES: frozenset[MockExamStatus] = frozenset(
    status for status, targets in ALLOWED_TRANSITIONS.items() if not targets
)


def allowed_stages(current: MockExamStatus | str) -> frozenset[MockExamStatus]:
    """Return ``{current}`` plus every stage listed as a next stage."""
    current = MockExamStatus(current)
    return frozenset((current, *ALLOWED_TRANSITIONS.get(current, ())))


def can_transition(current: MockExamStatus | str, target: MockExamStatus | str) -> bool:
    return MockExamStatus(target) in allowed_stages(current)


def require_transition(current: MockExamStatus | str, target: MockExamStatus | str) -> None:
    """Raise :class:`TransitionNotAllowedError` if *target* is unreachable."""
    if not can_transition(current, target):
        raise TransitionNotAllowedError(MockExamStatus(current), MockExamStatus(target))


def is_terminal(status: MockExamStatus | str) -> bool:
    return MockExamStatus(status) in TERMINAL_STAGES


def classify_move(current: MockExamStatus | str, target: MockExamStatus | str) -> MoveDirection:
    """Compare the stages' ranks.

    Works for any pair of stages, reachable or not.
    """
    current_rank = STATUS_ORDER[MockExamStatus(current)]
    target_rank = STATUS_ORDER[MockExamStatus(target)]
    if target_rank > current_rank:
        return MoveDirection.FORWARD
    if target_rank < current_rank:
        return MoveDirection.BACKWARD
    return MoveDirection.LATERAL


def completion_signal(direction: MoveDirection) -> bool | None:
    """Map a move direction to the stage-data ``completed`` flag.

    Forward marks the target stage complete, backward re-opens it, and a
    lateral update leaves completion untouched (None).
    """
    if direction is MoveDirection.FORWARD:
        return True
    if direction is MoveDirection.BACKWARD:
        return False
    return None
