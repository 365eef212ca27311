"""Wizard state container — pure ``(state, action) -> state`` transitions.

All of the wizard's local editing state lives in one immutable
:class:`WizardState`.  UI events become :data:`WizardAction` values and
:func:`reduce` returns the next state, so every editing path can be tested
deterministically without a UI or a backend.

The discriminated ``WizardAction`` union uses the ``type`` field as its
discriminator so Pydantic can deserialise JSON actions directly into the
correct class.
"""

from __future__ import annotations

from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from mockexam_lifecycle.editors import instructions as instruction_editor
from mockexam_lifecycle.editors import questions as question_editor
from mockexam_lifecycle.editors.instructions import InstructionSet
from mockexam_lifecycle.editors.questions import QuestionSet
from mockexam_lifecycle.errors import DuplicateQuestionError
from mockexam_lifecycle.models.context import QuestionBankItem
from mockexam_lifecycle.models.enums import InstructionAudience, MockExamStatus
from mockexam_lifecycle.policy import allowed_stages

STAGE_NOT_ALLOWED_NOTICE = "This stage cannot be reached from the current status."


# ---------------------------------------------------------------------------
# State
# ---------------------------------------------------------------------------

class WizardState(BaseModel):
    """Everything the user is editing in the status wizard.

    ``form_state`` is keyed by stage, independent of ``active_stage``, so
    revisiting an earlier stage never loses entries made for a later one.
    ``notice`` carries a one-off user-facing message from the last action.
    """

    model_config = ConfigDict(frozen=True)

    exam_id: str
    current_status: MockExamStatus
    active_stage: MockExamStatus
    form_state: dict[MockExamStatus, dict[str, Any]] = {}
    errors: dict[MockExamStatus, dict[str, str]] = {}
    instructions: InstructionSet = InstructionSet()
    questions: QuestionSet = QuestionSet()
    question_bank: list[QuestionBankItem] = []
    notice: Optional[str] = None

    @property
    def active_values(self) -> dict[str, Any]:
        return self.form_state.get(self.active_stage, {})

    @property
    def active_errors(self) -> dict[str, str]:
        return self.errors.get(self.active_stage, {})


def initial_state(exam_id: str, current_status: MockExamStatus | str) -> WizardState:
    """Empty state for an exam, with the active stage on the current status."""
    status = MockExamStatus(current_status)
    return WizardState(
        exam_id=exam_id,
        current_status=status,
        active_stage=status,
        instructions=InstructionSet(entries=instruction_editor.blank_defaults()),
    )


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------

class SelectStage(BaseModel):
    """Make *stage* the active stage (ignored if unreachable)."""

    type: Literal["select_stage"] = "select_stage"
    stage: MockExamStatus


class SetField(BaseModel):
    """Store a field value for a stage and clear that field's error."""

    type: Literal["set_field"] = "set_field"
    stage: MockExamStatus
    key: str
    value: Any = None


class SetErrors(BaseModel):
    """Replace the recorded validation errors for a stage."""

    type: Literal["set_errors"] = "set_errors"
    stage: MockExamStatus
    errors: dict[str, str] = {}


class AddInstruction(BaseModel):
    type: Literal["add_instruction"] = "add_instruction"


class UpdateInstruction(BaseModel):
    type: Literal["update_instruction"] = "update_instruction"
    index: int
    audience: Optional[InstructionAudience] = None
    instructions: Optional[str] = None


class RemoveInstruction(BaseModel):
    type: Literal["remove_instruction"] = "remove_instruction"
    index: int


class SelectBankQuestions(BaseModel):
    """New value of the bank multi-select."""

    type: Literal["select_bank_questions"] = "select_bank_questions"
    question_ids: List[str]


class AddBankQuestion(BaseModel):
    type: Literal["add_bank_question"] = "add_bank_question"
    question_id: str


class AddRandomSelection(BaseModel):
    """Bank questions returned by an external sampler."""

    type: Literal["add_random_selection"] = "add_random_selection"
    items: List[QuestionBankItem]


class AddCustomQuestion(BaseModel):
    type: Literal["add_custom_question"] = "add_custom_question"
    payload: Optional[dict[str, Any]] = None


class EditCustomQuestion(BaseModel):
    type: Literal["edit_custom_question"] = "edit_custom_question"
    index: int
    payload: dict[str, Any]


class UpdateQuestion(BaseModel):
    """Change marks and/or the optional flag.

    ``marks`` is applied only when it was explicitly given, so ``None`` can
    clear it.
    """

    type: Literal["update_question"] = "update_question"
    index: int
    marks: Optional[float] = None
    is_optional: Optional[bool] = None


class RemoveQuestion(BaseModel):
    type: Literal["remove_question"] = "remove_question"
    index: int


class ReorderQuestion(BaseModel):
    """Drag-and-drop move."""

    type: Literal["reorder_question"] = "reorder_question"
    from_index: int
    to_index: int


class MoveQuestion(BaseModel):
    """Up/down step control."""

    type: Literal["move_question"] = "move_question"
    index: int
    direction: Literal["up", "down"]


WizardAction = Annotated[
    Union[
        SelectStage,
        SetField,
        SetErrors,
        AddInstruction,
        UpdateInstruction,
        RemoveInstruction,
        SelectBankQuestions,
        AddBankQuestion,
        AddRandomSelection,
        AddCustomQuestion,
        EditCustomQuestion,
        UpdateQuestion,
        RemoveQuestion,
        ReorderQuestion,
        MoveQuestion,
    ],
    Field(discriminator="type"),
]

_ACTION_ADAPTER: TypeAdapter[WizardAction] = TypeAdapter(WizardAction)


def parse_action(data: Any) -> WizardAction:
    """Validate a raw dict (e.g. decoded JSON) into the matching action class."""
    return _ACTION_ADAPTER.validate_python(data)


# ---------------------------------------------------------------------------
# Reducer
# ---------------------------------------------------------------------------

def _set_field(state: WizardState, action: SetField) -> WizardState:
    form_state = dict(state.form_state)
    form_state[action.stage] = {**form_state.get(action.stage, {}), action.key: action.value}

    errors = state.errors
    stage_errors = errors.get(action.stage)
    if stage_errors and action.key in stage_errors:
        errors = dict(errors)
        errors[action.stage] = {k: v for k, v in stage_errors.items() if k != action.key}

    return state.model_copy(update={"form_state": form_state, "errors": errors})


def _with_questions(state: WizardState, questions: QuestionSet) -> WizardState:
    return state.model_copy(update={"questions": questions})


def _with_instructions(state: WizardState, instructions: InstructionSet) -> WizardState:
    return state.model_copy(update={"instructions": instructions})


def reduce(state: WizardState, action: WizardAction) -> WizardState:
    """Apply *action* to *state* and return the next state.

    Pure: *state* is never modified.  Out-of-range indexes raise
    ``IndexError``; a duplicate bank question leaves the state unchanged
    apart from ``notice``.
    """
    # A notice only survives until the next action.
    if state.notice is not None:
        state = state.model_copy(update={"notice": None})

    if isinstance(action, SelectStage):
        if action.stage not in allowed_stages(state.current_status):
            return state.model_copy(update={"notice": STAGE_NOT_ALLOWED_NOTICE})
        return state.model_copy(update={"active_stage": action.stage})

    elif isinstance(action, SetField):
        return _set_field(state, action)

    elif isinstance(action, SetErrors):
        return state.model_copy(
            update={"errors": {**state.errors, action.stage: dict(action.errors)}}
        )

    # --- Instructions ---
    elif isinstance(action, AddInstruction):
        return _with_instructions(state, instruction_editor.add_instruction(state.instructions))

    elif isinstance(action, UpdateInstruction):
        return _with_instructions(
            state,
            instruction_editor.update_instruction(
                state.instructions,
                action.index,
                audience=action.audience,
                instructions=action.instructions,
            ),
        )

    elif isinstance(action, RemoveInstruction):
        return _with_instructions(
            state, instruction_editor.remove_instruction(state.instructions, action.index)
        )

    # --- Questions ---
    elif isinstance(action, SelectBankQuestions):
        return _with_questions(
            state,
            question_editor.select_bank_questions(
                state.questions, action.question_ids, state.question_bank
            ),
        )

    elif isinstance(action, AddBankQuestion):
        try:
            questions = question_editor.add_bank_question(
                state.questions, action.question_id, state.question_bank
            )
        except DuplicateQuestionError as exc:
            return state.model_copy(update={"notice": str(exc)})
        return _with_questions(state, questions)

    elif isinstance(action, AddRandomSelection):
        return _with_questions(
            state, question_editor.add_random_selection(state.questions, action.items)
        )

    elif isinstance(action, AddCustomQuestion):
        return _with_questions(
            state, question_editor.add_custom_question(state.questions, action.payload)
        )

    elif isinstance(action, EditCustomQuestion):
        return _with_questions(
            state,
            question_editor.edit_custom_question(state.questions, action.index, action.payload),
        )

    elif isinstance(action, UpdateQuestion):
        kwargs: dict[str, Any] = {"is_optional": action.is_optional}
        if "marks" in action.model_fields_set:
            kwargs["marks"] = action.marks
        return _with_questions(
            state, question_editor.update_question(state.questions, action.index, **kwargs)
        )

    elif isinstance(action, RemoveQuestion):
        return _with_questions(
            state, question_editor.remove_question(state.questions, action.index)
        )

    elif isinstance(action, ReorderQuestion):
        return _with_questions(
            state,
            question_editor.reorder(state.questions, action.from_index, action.to_index),
        )

    elif isinstance(action, MoveQuestion):
        return _with_questions(
            state,
            question_editor.move_question(state.questions, action.index, action.direction),
        )

    else:
        raise ValueError(f"Unknown wizard action: {action!r}")
