"""Lifecycle constants shared across the SDK.

These values are referenced by the transition policy, the editors, and the
payload builder.  The stage graph itself is fixed; only UI-facing limits
can be overridden via environment variables.
"""

import os

from mockexam_lifecycle.models.enums import InstructionAudience, MockExamStatus

# Fixed rank per stage.  Only used to classify a proposed move as forward,
# backward, or lateral; never to decide whether the move is allowed.
STATUS_ORDER: dict[MockExamStatus, int] = {
    MockExamStatus.DRAFT: 1,
    MockExamStatus.PLANNED: 2,
    MockExamStatus.SCHEDULED: 3,
    MockExamStatus.MATERIALS_READY: 4,
    MockExamStatus.IN_PROGRESS: 5,
    MockExamStatus.GRADING: 6,
    MockExamStatus.MODERATION: 7,
    MockExamStatus.ANALYTICS_RELEASED: 8,
    MockExamStatus.COMPLETED: 9,
    MockExamStatus.CANCELLED: 10,
}

# Outgoing edges per stage (self-loops are implicit).
# Terminal stages have no outgoing edges.
ALLOWED_TRANSITIONS: dict[MockExamStatus, tuple[MockExamStatus, ...]] = {
    MockExamStatus.DRAFT: (
        MockExamStatus.PLANNED,
        MockExamStatus.CANCELLED,
    ),
    MockExamStatus.PLANNED: (
        MockExamStatus.DRAFT,
        MockExamStatus.SCHEDULED,
        MockExamStatus.CANCELLED,
    ),
    MockExamStatus.SCHEDULED: (
        MockExamStatus.PLANNED,
        MockExamStatus.MATERIALS_READY,
        MockExamStatus.IN_PROGRESS,
        MockExamStatus.CANCELLED,
    ),
    MockExamStatus.MATERIALS_READY: (
        MockExamStatus.SCHEDULED,
        MockExamStatus.IN_PROGRESS,
        MockExamStatus.CANCELLED,
    ),
    MockExamStatus.IN_PROGRESS: (
        MockExamStatus.GRADING,
        MockExamStatus.CANCELLED,
    ),
    MockExamStatus.GRADING: (
        MockExamStatus.MODERATION,
        MockExamStatus.ANALYTICS_RELEASED,
        MockExamStatus.CANCELLED,
    ),
    MockExamStatus.MODERATION: (
        MockExamStatus.GRADING,
        MockExamStatus.ANALYTICS_RELEASED,
        MockExamStatus.CANCELLED,
    ),
    MockExamStatus.ANALYTICS_RELEASED: (
        MockExamStatus.COMPLETED,
        MockExamStatus.CANCELLED,
    ),
    MockExamStatus.COMPLETED: (),
    MockExamStatus.CANCELLED: (),
}

# Audiences the instruction editor always offers, in display order.
DEFAULT_INSTRUCTION_AUDIENCES: tuple[InstructionAudience, ...] = (
    InstructionAudience.STUDENTS,
    InstructionAudience.INVIGILATORS,
    InstructionAudience.MARKERS,
    InstructionAudience.TEACHERS,
)

# Upper bound for marks on custom-authored questions.
# Overridable via MAX_CUSTOM_QUESTION_MARKS env var.
MAX_CUSTOM_QUESTION_MARKS = int(os.getenv("MAX_CUSTOM_QUESTION_MARKS", "100"))

# Error keys used by stage validation for the non-field checks.
INSTRUCTIONS_ERROR_KEY = "instructions"
QUESTION_SELECTIONS_ERROR_KEY = "questionSelections"

# Debounce delay (seconds) for the draft auto-saver.
# Overridable via DRAFT_AUTOSAVE_DELAY env var.
DRAFT_AUTOSAVE_DELAY = float(os.getenv("DRAFT_AUTOSAVE_DELAY", "2.0"))
