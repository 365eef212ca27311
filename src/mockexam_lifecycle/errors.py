"""Exception types and submission-failure classification.

Expected validation failures are returned as data (see ``validation``);
the exceptions here cover the abnormal paths.  They subclass ``ValueError``
so the HTTP layer's global handlers can map them by message.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass

from mockexam_lifecycle.models.enums import MockExamStatus

logger = logging.getLogger(__name__)


class LifecycleError(ValueError):
    """Base class for lifecycle SDK errors."""


class TransitionNotAllowedError(LifecycleError):
    """Raised when a target stage is not reachable from the current one."""

    def __init__(self, current: MockExamStatus, target: MockExamStatus) -> None:
        self.current = current
        self.target = target
        super().__init__(
            f"Transition not allowed: {current.value} -> {target.value}"
        )


class ContextLoadError(LifecycleError):
    """The wizard context could not be loaded (or the exam does not exist)."""


class DuplicateQuestionError(LifecycleError):
    """A bank question that is already on the paper was added again."""

    def __init__(self, question_id: str) -> None:
        self.question_id = question_id
        super().__init__("This question is already selected")


class StatusConflictError(LifecycleError):
    """The exam's persisted status differs from the one the caller saw."""

    def __init__(self, expected: MockExamStatus, actual: MockExamStatus) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Status conflict: exam is '{actual.value}', "
            f"caller expected '{expected.value}' (already changed)"
        )


# ---------------------------------------------------------------------------
# Submission-failure classification
# ---------------------------------------------------------------------------

class SubmissionErrorKind(str, enum.Enum):
    """Coarse category of a failed transition submission."""

    PERMISSION = "permission"
    NETWORK = "network"
    VALIDATION = "validation"
    UNKNOWN = "unknown"


# Backend error code that signals an expired/invalid session token.
NETWORK_ERROR_CODE = "PGRST301"

# --- Keyword patterns in error messages and their category ---
# Checked in order; first match wins.
_SUBMISSION_PATTERNS: list[tuple[tuple[str, ...], SubmissionErrorKind]] = [
    (("permission", "policy"), SubmissionErrorKind.PERMISSION),
    (("network",), SubmissionErrorKind.NETWORK),
    (("validation",), SubmissionErrorKind.VALIDATION),
]

_KIND_MESSAGES: dict[SubmissionErrorKind, str] = {
    SubmissionErrorKind.PERMISSION: (
        "Permission denied. You may not have access to modify this exam."
    ),
    SubmissionErrorKind.NETWORK: (
        "Network error. Please check your connection and try again."
    ),
    SubmissionErrorKind.VALIDATION: (
        "Validation failed. Please check all required fields."
    ),
}

GENERIC_SUBMISSION_MESSAGE = "Unable to update status. Please try again."


@dataclass(frozen=True)
class SubmissionFailure:
    """A classified submission failure with a user-facing message."""

    kind: SubmissionErrorKind
    message: str


def classify_submission_error(exc: BaseException) -> SubmissionFailure:
    """Map a persistence error to a user-facing message.

    The message is matched against known substrings; an error carrying the
    network error code is treated as a network failure.  Unrecognised
    errors fall back to their own message, or a generic notice when empty.
    """
    raw = str(exc) or ""
    lowered = raw.lower()
    code = getattr(exc, "code", None)

    for patterns, kind in _SUBMISSION_PATTERNS:
        if any(p in lowered for p in patterns):
            return SubmissionFailure(kind=kind, message=_KIND_MESSAGES[kind])
        if kind is SubmissionErrorKind.NETWORK and code == NETWORK_ERROR_CODE:
            return SubmissionFailure(kind=kind, message=_KIND_MESSAGES[kind])

    return SubmissionFailure(
        kind=SubmissionErrorKind.UNKNOWN,
        message=raw or GENERIC_SUBMISSION_MESSAGE,
    )
