"""Stage validation — is the checklist for a stage filled in?

Validation is synchronous and local: it performs no backend round-trip and
never judges business legality beyond "the checklist is complete".  Failures
are returned as a mapping from field key (or category key) to a message;
no exception is raised for an incomplete stage.

Error keys:
  - ``<field key>``               — a required field is empty
  - ``instructions``              — no instruction block has text
  - ``questionSelections``        — no valid question slot on the paper
  - ``questionSelections.<i>``    — custom slot *i* has no prompt
"""

from __future__ import annotations

from typing import Any, Mapping, Sequence

from pydantic import BaseModel

from mockexam_lifecycle.constants import (
    INSTRUCTIONS_ERROR_KEY,
    QUESTION_SELECTIONS_ERROR_KEY,
)
from mockexam_lifecycle.models.enums import SourceType
from mockexam_lifecycle.models.payload import StageDataPayload
from mockexam_lifecycle.models.records import InstructionEntry, QuestionSelection
from mockexam_lifecycle.models.stage import StageDefinition

REQUIRED_MESSAGE = "Required"
MISSING_INSTRUCTIONS_MESSAGE = "Add at least one instruction set."
MISSING_SELECTIONS_MESSAGE = "Select questions or add a custom item."
MISSING_PROMPT_MESSAGE = "Enter a prompt for this custom question."
INCOMPLETE_STAGE_NOTICE = "Please resolve the highlighted items."


class ValidationResult(BaseModel):
    """Outcome of validating one stage."""

    valid: bool
    errors: dict[str, str] = {}


def selection_error_key(index: int) -> str:
    """Error key for the custom question card at *index*."""
    return f"{QUESTION_SELECTIONS_ERROR_KEY}.{index}"


def validate_fields(
    definition: StageDefinition, values: Mapping[str, Any]
) -> dict[str, str]:
    """Check every required field of *definition* against *values*."""
    errors: dict[str, str] = {}
    for field in definition.required_fields:
        if not field.is_filled(values.get(field.key)):
            errors[field.key] = REQUIRED_MESSAGE
    return errors


def validate_instructions(instructions: Sequence[InstructionEntry]) -> dict[str, str]:
    if any(not entry.is_blank for entry in instructions):
        return {}
    return {INSTRUCTIONS_ERROR_KEY: MISSING_INSTRUCTIONS_MESSAGE}


def validate_selections(selections: Sequence[QuestionSelection]) -> dict[str, str]:
    errors: dict[str, str] = {}
    for index, selection in enumerate(selections):
        if selection.source_type is SourceType.CUSTOM and not selection.is_valid:
            errors[selection_error_key(index)] = MISSING_PROMPT_MESSAGE
    if not any(selection.is_valid for selection in selections):
        errors[QUESTION_SELECTIONS_ERROR_KEY] = MISSING_SELECTIONS_MESSAGE
    return errors


def validate_stage(
    definition: StageDefinition,
    values: Mapping[str, Any] | None,
    instructions: Sequence[InstructionEntry] = (),
    selections: Sequence[QuestionSelection] = (),
) -> ValidationResult:
    """Validate a stage's checklist and, where shown, its sub-forms.

    Args:
        definition: the stage being submitted
        values: the stage's current field values (may be None if untouched)
        instructions: the instruction editor's entries
        selections: the question editor's slots

    Returns:
        A :class:`ValidationResult`; ``valid`` is True iff ``errors`` is empty.
    """
    errors = validate_fields(definition, values or {})
    if definition.show_instructions_setup:
        errors.update(validate_instructions(instructions))
    if definition.show_question_selection:
        errors.update(validate_selections(selections))
    return ValidationResult(valid=not errors, errors=errors)


def validate_stage_data(
    definition: StageDefinition, stage_data: StageDataPayload | None
) -> ValidationResult:
    """Validate a submitted payload's stage data against *definition*.

    Used server side, where the editor state is not available: the notes
    value is put back under the stage's notes field, and the submitted
    instruction and question lists stand in for the editors' entries.
    """
    stage_data = stage_data or StageDataPayload()
    values = dict(stage_data.form_data)
    if definition.notes_field_key and stage_data.notes is not None:
        values[definition.notes_field_key] = stage_data.notes

    instructions = [
        InstructionEntry(id=i.id, audience=i.audience, instructions=i.instructions)
        for i in stage_data.instructions or []
    ]
    bundle = stage_data.question_selections
    selections = [
        QuestionSelection(**s.model_dump())
        for s in (bundle.selected_questions if bundle else [])
    ]
    return validate_stage(definition, values, instructions, selections)
