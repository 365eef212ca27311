"""mockexam_lifecycle — Mock exam lifecycle state-machine SDK.

Public API:
    StatusTransitionWizard — orchestrates one stage change for one exam
    StageRegistry          — loads the stage catalog (YAML) into typed models
    WizardState            — immutable editing state of the wizard
    reduce                 — pure (state, action) -> state transition
    build_transition_payload — assembles the request for a stage change
    validate_stage         — checks a stage's checklist and sub-forms

Transition policy:
    allowed_stages, can_transition, require_transition, classify_move

Service interfaces:
    WizardRepository  — ABC for context loading and transition persistence
    QuestionSampler   — ABC for random question selection
    ConflictDetector  — ABC for scheduling-conflict detection
"""

from mockexam_lifecycle.custom_questions import (
    CustomQuestionDraft,
    validate_custom_question,
)
from mockexam_lifecycle.drafts import AutoSaver, DraftStore
from mockexam_lifecycle.errors import (
    ContextLoadError,
    DuplicateQuestionError,
    LifecycleError,
    StatusConflictError,
    TransitionNotAllowedError,
    classify_submission_error,
)
from mockexam_lifecycle.interfaces import (
    ConflictDetector,
    QuestionSampler,
    WizardRepository,
)
from mockexam_lifecycle.models import (
    MockExamStatus,
    StageDefinition,
    TransitionPayload,
    WizardContext,
)
from mockexam_lifecycle.payload import PayloadBuildResult, build_transition_payload
from mockexam_lifecycle.policy import (
    allowed_stages,
    can_transition,
    classify_move,
    require_transition,
)
from mockexam_lifecycle.reducer import WizardAction, WizardState, parse_action, reduce
from mockexam_lifecycle.registry import StageRegistry, default_registry
from mockexam_lifecycle.validation import ValidationResult, validate_stage
from mockexam_lifecycle.wizard import (
    StageOverview,
    StatusTransitionWizard,
    SubmitOutcome,
    SubmitStatus,
)

__all__ = [
    # Orchestration
    "StatusTransitionWizard",
    "StageOverview",
    "SubmitOutcome",
    "SubmitStatus",
    # State
    "WizardAction",
    "WizardState",
    "parse_action",
    "reduce",
    # Catalog & policy
    "StageRegistry",
    "default_registry",
    "allowed_stages",
    "can_transition",
    "classify_move",
    "require_transition",
    # Validation & payload
    "ValidationResult",
    "validate_stage",
    "PayloadBuildResult",
    "build_transition_payload",
    # Custom questions & drafts
    "CustomQuestionDraft",
    "validate_custom_question",
    "AutoSaver",
    "DraftStore",
    # Interfaces
    "ConflictDetector",
    "QuestionSampler",
    "WizardRepository",
    # Models
    "MockExamStatus",
    "StageDefinition",
    "TransitionPayload",
    "WizardContext",
    # Errors
    "ContextLoadError",
    "DuplicateQuestionError",
    "LifecycleError",
    "StatusConflictError",
    "TransitionNotAllowedError",
    "classify_submission_error",
]
