"""Wizard reducer: pure (state, action) -> state transitions and action parsing."""

import pytest
from pydantic import ValidationError

from mockexam_lifecycle.models.enums import InstructionAudience, MockExamStatus, SourceType
from mockexam_lifecycle.reducer import (
    STAGE_NOT_ALLOWED_NOTICE,
    AddBankQuestion,
    AddCustomQuestion,
    AddInstruction,
    AddRandomSelection,
    EditCustomQuestion,
    MoveQuestion,
    RemoveInstruction,
    RemoveQuestion,
    ReorderQuestion,
    SelectBankQuestions,
    SelectStage,
    SetErrors,
    SetField,
    UpdateInstruction,
    UpdateQuestion,
    initial_state,
    parse_action,
    reduce,
)

from test_wizard import EXAM_ID, SAMPLE_BANK

S = MockExamStatus


@pytest.fixture
def state():
    """Fresh scheduled-exam state with the sample bank loaded."""
    return initial_state(EXAM_ID, S.SCHEDULED).model_copy(
        update={"question_bank": list(SAMPLE_BANK)}
    )


def _run(state, *actions):
    for action in actions:
        state = reduce(state, action)
    return state


# =====================================================================
# Stage selection & form values
# =====================================================================


class TestStageAndFields:

    def test_initial_state(self):
        state = initial_state(EXAM_ID, "planned")
        assert state.current_status is S.PLANNED
        assert state.active_stage is S.PLANNED
        assert len(state.instructions.entries) == 4
        assert state.questions.items == []
        assert state.notice is None

    def test_select_reachable_stage(self, state):
        new = reduce(state, SelectStage(stage=S.MATERIALS_READY))
        assert new.active_stage is S.MATERIALS_READY
        assert state.active_stage is S.SCHEDULED, "Input state is not modified"

    def test_select_unreachable_stage_sets_notice(self, state):
        new = reduce(state, SelectStage(stage=S.COMPLETED))
        assert new.active_stage is S.SCHEDULED
        assert new.notice == STAGE_NOT_ALLOWED_NOTICE

    def test_notice_cleared_by_next_action(self, state):
        new = _run(state, SelectStage(stage=S.COMPLETED), AddInstruction())
        assert new.notice is None

    def test_form_values_survive_stage_switches(self, state):
        new = _run(
            state,
            SelectStage(stage=S.CANCELLED),
            SetField(stage=S.CANCELLED, key="cancellationReason", value="Snow"),
            SelectStage(stage=S.MATERIALS_READY),
            SetField(stage=S.MATERIALS_READY, key="paperVersion", value="v2"),
            SelectStage(stage=S.CANCELLED),
        )
        assert new.active_values == {"cancellationReason": "Snow"}
        assert new.form_state[S.MATERIALS_READY] == {"paperVersion": "v2"}

    def test_set_field_clears_only_that_error(self, state):
        new = _run(
            state,
            SetErrors(stage=S.SCHEDULED, errors={"venueConfirmed": "Required", "invigilatorsAssigned": "Required"}),
            SetField(stage=S.SCHEDULED, key="venueConfirmed", value=True),
        )
        assert new.active_errors == {"invigilatorsAssigned": "Required"}


# =====================================================================
# Instructions & questions through the reducer
# =====================================================================


class TestEditorActions:

    def test_instruction_actions(self, state):
        new = _run(
            state,
            AddInstruction(),
            UpdateInstruction(index=4, audience=InstructionAudience.ADMINS, instructions="Keys"),
            RemoveInstruction(index=0),
        )
        assert [e.audience for e in new.instructions.entries] == [
            InstructionAudience.INVIGILATORS,
            InstructionAudience.MARKERS,
            InstructionAudience.TEACHERS,
            InstructionAudience.ADMINS,
        ]
        assert new.instructions.entries[-1].instructions == "Keys"

    def test_duplicate_bank_question_sets_notice(self, state):
        once = reduce(state, AddBankQuestion(question_id="q1"))
        twice = reduce(once, AddBankQuestion(question_id="q1"))
        assert twice.notice == "This question is already selected"
        assert twice.questions == once.questions

    def test_bank_multiselect_and_random(self, state):
        new = _run(
            state,
            SelectBankQuestions(question_ids=["q2"]),
            AddRandomSelection(items=[SAMPLE_BANK[0], SAMPLE_BANK[1]]),
        )
        assert new.questions.selected_bank_ids == ["q2", "q1"]
        assert [i.marks for i in new.questions.items] == [3, 2], "Marks taken from the bank"

    def test_question_edit_sequence(self, state):
        new = _run(
            state,
            AddBankQuestion(question_id="q1"),
            AddCustomQuestion(payload={"prompt": "Describe mitosis", "marks": 6}),
            AddBankQuestion(question_id="q2"),
            ReorderQuestion(from_index=2, to_index=0),
            MoveQuestion(index=1, direction="down"),
            UpdateQuestion(index=0, is_optional=True),
            EditCustomQuestion(index=2, payload={"prompt": "Describe meiosis"}),
            RemoveQuestion(index=1),
        )
        items = new.questions.items
        assert [i.question_id or i.prompt for i in items] == ["q2", "Describe meiosis"]
        assert [i.sequence for i in items] == [1, 2]
        assert items[0].is_optional
        assert items[1].source_type is SourceType.CUSTOM

    def test_update_question_marks_only_when_given(self, state):
        new = _run(state, AddBankQuestion(question_id="q1"), UpdateQuestion(index=0, is_optional=True))
        assert new.questions.items[0].marks == 2, "Omitted marks are left alone"

        cleared = reduce(new, UpdateQuestion(index=0, marks=None))
        assert cleared.questions.items[0].marks is None

    def test_custom_payload_with_unparseable_marks(self, state):
        new = reduce(state, AddCustomQuestion(payload={"prompt": "p", "marks": "five"}))
        item = new.questions.items[0]
        assert item.marks is None
        assert item.custom_question["marks"] == "five", "Payload stored as given"

        edited = reduce(new, EditCustomQuestion(index=0, payload={"prompt": "p", "marks": "?"}))
        assert edited.questions.items[0].marks is None

    def test_out_of_range_index_raises(self, state):
        with pytest.raises(IndexError):
            reduce(state, RemoveQuestion(index=0))

    def test_unknown_action_raises(self, state):
        with pytest.raises(ValueError, match="Unknown wizard action"):
            reduce(state, object())


# =====================================================================
# Parsing raw actions
# =====================================================================


class TestParseAction:

    def test_parses_by_type(self):
        action = parse_action({"type": "reorder_question", "from_index": 3, "to_index": 0})
        assert isinstance(action, ReorderQuestion)
        assert (action.from_index, action.to_index) == (3, 0)

    def test_parses_stage_values(self):
        action = parse_action({"type": "set_field", "stage": "grading", "key": "markersAssigned", "value": True})
        assert isinstance(action, SetField)
        assert action.stage is S.GRADING

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError):
            parse_action({"type": "launch_rocket"})

    def test_invalid_direction_rejected(self):
        with pytest.raises(ValidationError):
            parse_action({"type": "move_question", "index": 0, "direction": "left"})
