"""Submission-failure classification."""

import pytest

from mockexam_lifecycle.errors import (
    GENERIC_SUBMISSION_MESSAGE,
    NETWORK_ERROR_CODE,
    StatusConflictError,
    SubmissionErrorKind,
    TransitionNotAllowedError,
    classify_submission_error,
)
from mockexam_lifecycle.models.enums import MockExamStatus


class CodedError(Exception):
    """Backend error carrying a machine-readable code."""

    def __init__(self, message, code):
        super().__init__(message)
        self.code = code


@pytest.mark.parametrize(
    "message,kind",
    [
        ("permission denied for table mock_exams", SubmissionErrorKind.PERMISSION),
        ("new row violates row-level security policy", SubmissionErrorKind.PERMISSION),
        ("Network request failed", SubmissionErrorKind.NETWORK),
        ("Validation error on field marks", SubmissionErrorKind.VALIDATION),
    ],
)
def test_known_patterns(message, kind):
    failure = classify_submission_error(RuntimeError(message))
    assert failure.kind is kind
    assert failure.message != message, "Known failures get a friendly message"


def test_first_pattern_wins():
    failure = classify_submission_error(RuntimeError("network policy rejected the request"))
    assert failure.kind is SubmissionErrorKind.PERMISSION


def test_network_error_code():
    failure = classify_submission_error(CodedError("JWT expired", NETWORK_ERROR_CODE))
    assert NETWORK_ERROR_CODE == "PGRST301"
    assert failure.kind is SubmissionErrorKind.NETWORK
    assert "Network error" in failure.message


def test_unknown_error_keeps_its_message():
    failure = classify_submission_error(RuntimeError("disk full"))
    assert failure.kind is SubmissionErrorKind.UNKNOWN
    assert failure.message == "disk full"


def test_empty_message_falls_back_to_generic():
    failure = classify_submission_error(RuntimeError())
    assert failure.message == GENERIC_SUBMISSION_MESSAGE


def test_lifecycle_errors_are_value_errors():
    conflict = StatusConflictError(MockExamStatus.SCHEDULED, MockExamStatus.PLANNED)
    assert isinstance(conflict, ValueError)
    assert "status conflict" in str(conflict).lower()

    blocked = TransitionNotAllowedError(MockExamStatus.DRAFT, MockExamStatus.COMPLETED)
    assert str(blocked) == "Transition not allowed: draft -> completed"
