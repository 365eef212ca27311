"""Transition payload models — the contract between the wizard and persistence.

A ``TransitionPayload`` is built fresh on every submission attempt and handed
to ``WizardRepository.submit_transition``.  It is never stored client-side.

Field names are snake_case in Python and camelCase on the wire (``examId``,
``stageData``, ``formData`` ...), so existing clients can post the same JSON
they always have.  Both spellings are accepted on input.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from mockexam_lifecycle.models.enums import (
    InstructionAudience,
    MockExamStatus,
    SourceType,
)


class _WireModel(BaseModel):
    """Base with camelCase aliases; dump with ``by_alias=True`` for the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class InstructionUpsert(_WireModel):
    """An instruction block to insert (no id) or update (with id)."""

    id: Optional[str] = None
    audience: InstructionAudience
    instructions: str


class SelectedQuestionSubmission(_WireModel):
    """A question slot to insert (no id) or update (with id)."""

    id: Optional[str] = None
    source_type: SourceType
    question_id: Optional[str] = None
    custom_question: Optional[dict[str, Any]] = None
    marks: Optional[float] = None
    sequence: int
    is_optional: bool = False


class QuestionSelectionBundle(_WireModel):
    """The full question list for the paper plus rows to delete."""

    selected_questions: list[SelectedQuestionSubmission] = []
    removed_question_ids: list[str] = []


class StageDataPayload(_WireModel):
    """Per-stage data attached to a transition.

    ``completed`` is tri-state: True for a forward move, False for a
    backward move, None for a lateral update that should not reinterpret
    completion.  ``instructions`` and ``question_selections`` are None for
    stages that do not show those sub-forms.
    """

    form_data: dict[str, Any] = {}
    notes: Optional[str] = None
    completed: Optional[bool] = None
    instructions: Optional[list[InstructionUpsert]] = None
    removed_instruction_ids: Optional[list[str]] = None
    question_selections: Optional[QuestionSelectionBundle] = None


class TransitionPayload(_WireModel):
    """A proposed stage change for one exam."""

    exam_id: str
    current_status: MockExamStatus
    target_status: MockExamStatus
    reason: Optional[str] = None
    stage_data: Optional[StageDataPayload] = None
