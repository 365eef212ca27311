"""Transition payload builder — assembles the request for a stage change.

``build_transition_payload`` is a pure assembly function: no I/O and no
mutation of its inputs.  Precondition failures (no wizard context, no stage
definition for the target) are programming defects rather than user
errors; they are logged with diagnostic context and reported through
``PayloadBuildResult.failure`` instead of being raised.

Assembly rules:
  - the stage's notes field is lifted out of the field bag into ``notes``
    (trimmed; blank becomes None)
  - ``completed`` follows the move direction (forward True, backward
    False, lateral None)
  - instructions are sent only for stages that show the instruction
    sub-form; blank entries that were persisted are deleted instead of
    upserted
  - question slots are sent only for stages that show the question
    sub-form, and only the valid ones
  - ``reason`` is set only when the target is ``cancelled``
"""

from __future__ import annotations

import enum
import logging
from typing import Any, Mapping

from pydantic import BaseModel

from mockexam_lifecycle.editors.instructions import InstructionSet
from mockexam_lifecycle.editors.questions import QuestionSet
from mockexam_lifecycle.models.context import WizardContext
from mockexam_lifecycle.models.enums import MockExamStatus, SourceType
from mockexam_lifecycle.models.payload import (
    InstructionUpsert,
    QuestionSelectionBundle,
    SelectedQuestionSubmission,
    StageDataPayload,
    TransitionPayload,
)
from mockexam_lifecycle.models.records import QuestionSelection
from mockexam_lifecycle.policy import classify_move, completion_signal
from mockexam_lifecycle.registry import StageRegistry

logger = logging.getLogger(__name__)

BUILD_FAILURE_NOTICE = "Unable to build status update payload."


class BuildFailure(str, enum.Enum):
    """Why a payload could not be assembled."""

    MISSING_CONTEXT = "missing_context"
    MISSING_STAGE_DEFINITION = "missing_stage_definition"


class PayloadBuildResult(BaseModel):
    """Either a payload or the reason there is none."""

    payload: TransitionPayload | None = None
    failure: BuildFailure | None = None

    @property
    def ok(self) -> bool:
        return self.payload is not None


def _trimmed_or_none(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _dedupe(*groups: list[str]) -> list[str]:
    return list(dict.fromkeys(i for group in groups for i in group))


def _to_submission(selection: QuestionSelection) -> SelectedQuestionSubmission:
    """Map a valid editor slot to its wire shape."""
    custom: dict[str, Any] | None = None
    if selection.source_type is SourceType.CUSTOM:
        custom = {
            **(selection.custom_question or {}),
            "prompt": selection.prompt,
            "marks": selection.marks,
        }
    return SelectedQuestionSubmission(
        id=selection.id,
        source_type=selection.source_type,
        question_id=selection.question_id if selection.source_type is SourceType.BANK else None,
        custom_question=custom,
        marks=selection.marks,
        sequence=selection.sequence,
        is_optional=selection.is_optional,
    )


def build_transition_payload(
    *,
    exam_id: str,
    current_status: MockExamStatus,
    target_status: MockExamStatus,
    context: WizardContext | None,
    registry: StageRegistry,
    form_state: Mapping[MockExamStatus, Mapping[str, Any]],
    instructions: InstructionSet,
    questions: QuestionSet,
) -> PayloadBuildResult:
    """Assemble a :class:`TransitionPayload` for moving to *target_status*.

    Args:
        exam_id: the exam being transitioned
        current_status: the exam's status when the wizard was opened
        target_status: the stage the user selected
        context: the loaded wizard context (None if loading failed)
        registry: stage catalog used to look up the target's checklist
        form_state: per-stage field values held by the wizard
        instructions: the instruction editor's state
        questions: the question editor's state

    Returns:
        A :class:`PayloadBuildResult` with ``payload`` set on success or
        ``failure`` set when a precondition does not hold.
    """
    if context is None:
        logger.error(
            "Payload build failed: wizard context not loaded (exam_id=%s)", exam_id
        )
        return PayloadBuildResult(failure=BuildFailure.MISSING_CONTEXT)

    definition = registry.get(target_status)
    if definition is None:
        logger.error(
            "Payload build failed: no stage definition for %s (available: %s)",
            target_status.value,
            ", ".join(s.value for s in registry.stages),
        )
        return PayloadBuildResult(failure=BuildFailure.MISSING_STAGE_DEFINITION)

    logger.debug(
        "Building payload exam_id=%s %s -> %s",
        exam_id, current_status.value, target_status.value,
    )

    # --- Field bag and notes ---
    form_data = dict(form_state.get(target_status) or {})
    stage_data: dict[str, Any] = {}
    notes: str | None = None
    if definition.notes_field_key and definition.notes_field_key in form_data:
        notes = _trimmed_or_none(form_data.pop(definition.notes_field_key))
        # Only sent when the field was present, so an untouched notes
        # column is left alone by the repository.
        stage_data["notes"] = notes
    stage_data["form_data"] = form_data

    stage_data["completed"] = completion_signal(
        classify_move(current_status, target_status)
    )

    # --- Instructions ---
    blank_ids: list[str] = []
    if definition.show_instructions_setup:
        stage_data["instructions"] = [
            InstructionUpsert(
                id=entry.id,
                audience=entry.audience,
                instructions=entry.instructions.strip(),
            )
            for entry in instructions.entries
            if not entry.is_blank
        ]
        blank_ids = [e.id for e in instructions.entries if e.is_blank and e.id]

    removed_instruction_ids = _dedupe(list(instructions.removed_ids), blank_ids)
    if removed_instruction_ids:
        stage_data["removed_instruction_ids"] = removed_instruction_ids

    # --- Question selections ---
    if definition.show_question_selection:
        stage_data["question_selections"] = QuestionSelectionBundle(
            selected_questions=[_to_submission(s) for s in questions.valid_items],
            removed_question_ids=list(questions.removed_ids),
        )

    reason = notes if target_status is MockExamStatus.CANCELLED else None

    payload = TransitionPayload(
        exam_id=exam_id,
        current_status=current_status,
        target_status=target_status,
        reason=reason,
        stage_data=StageDataPayload(**stage_data),
    )
    return PayloadBuildResult(payload=payload)
