"""Public model re-exports for mockexam_lifecycle.

Consumers should import from ``mockexam_lifecycle.models`` rather than
reaching into sub-modules directly.
"""

# --- Enums ---
from mockexam_lifecycle.models.enums import (
    InstructionAudience,
    MockExamStatus,
    MoveDirection,
    SourceType,
)

# --- Stage schema ---
from mockexam_lifecycle.models.stage import (
    BaseStageField,
    CheckboxField,
    DateField,
    DateTimeField,
    NumberField,
    StageDefinition,
    StageField,
    TextareaField,
    TextField,
    TimeField,
)

# --- Editor records ---
from mockexam_lifecycle.models.records import (
    InstructionEntry,
    QuestionSelection,
    resolve_custom_prompt,
)

# --- Wizard context ---
from mockexam_lifecycle.models.context import (
    ExamSummary,
    InstructionRecord,
    QuestionBankItem,
    QuestionSelectionRecord,
    StageProgressRecord,
    StatusHistoryEntry,
    WizardContext,
)

# --- Transition payload ---
from mockexam_lifecycle.models.payload import (
    InstructionUpsert,
    QuestionSelectionBundle,
    SelectedQuestionSubmission,
    StageDataPayload,
    TransitionPayload,
)

# --- External services ---
from mockexam_lifecycle.models.services import (
    ConflictCheckRequest,
    ConflictReport,
    DifficultyDistribution,
    RandomSelectionRequest,
    RandomSelectionResult,
    SchedulingConflict,
    SchedulingWarning,
)

__all__ = [
    # Enums
    "InstructionAudience",
    "MockExamStatus",
    "MoveDirection",
    "SourceType",
    # Stage schema
    "BaseStageField",
    "CheckboxField",
    "DateField",
    "DateTimeField",
    "NumberField",
    "StageDefinition",
    "StageField",
    "TextareaField",
    "TextField",
    "TimeField",
    # Editor records
    "InstructionEntry",
    "QuestionSelection",
    "resolve_custom_prompt",
    # Context
    "ExamSummary",
    "InstructionRecord",
    "QuestionBankItem",
    "QuestionSelectionRecord",
    "StageProgressRecord",
    "StatusHistoryEntry",
    "WizardContext",
    # Payload
    "InstructionUpsert",
    "QuestionSelectionBundle",
    "SelectedQuestionSubmission",
    "StageDataPayload",
    "TransitionPayload",
    # Services
    "ConflictCheckRequest",
    "ConflictReport",
    "DifficultyDistribution",
    "RandomSelectionRequest",
    "RandomSelectionResult",
    "SchedulingConflict",
    "SchedulingWarning",
]
