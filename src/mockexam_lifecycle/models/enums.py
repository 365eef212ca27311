"""Enumerations shared by the SDK, the ORM models and the API."""

import enum


class MockExamStatus(str, enum.Enum):
    """Lifecycle stages of a mock exam.

    The graph is almost entirely forward-moving; see
    ``constants.ALLOWED_TRANSITIONS`` for the exact edges.
    ``completed`` and ``cancelled`` are terminal.
    """

    DRAFT = "draft"
    PLANNED = "planned"
    SCHEDULED = "scheduled"
    MATERIALS_READY = "materials_ready"
    IN_PROGRESS = "in_progress"
    GRADING = "grading"
    MODERATION = "moderation"
    ANALYTICS_RELEASED = "analytics_released"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class InstructionAudience(str, enum.Enum):
    """Who an instruction block is written for."""

    STUDENTS = "students"
    INVIGILATORS = "invigilators"
    MARKERS = "markers"
    TEACHERS = "teachers"
    ADMINS = "admins"
    OTHER = "other"


class SourceType(str, enum.Enum):
    """Where a selected exam question comes from."""

    BANK = "bank"
    CUSTOM = "custom"


class MoveDirection(str, enum.Enum):
    """Classification of a proposed stage change by rank."""

    FORWARD = "forward"
    LATERAL = "lateral"
    BACKWARD = "backward"
