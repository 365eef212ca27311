"""build_transition_payload: pure assembly of the stage-change request."""

import pytest

from mockexam_lifecycle.editors.instructions import InstructionSet
from mockexam_lifecycle.editors.questions import QuestionSet
from mockexam_lifecycle.models.enums import InstructionAudience, MockExamStatus, SourceType
from mockexam_lifecycle.models.records import InstructionEntry, QuestionSelection
from mockexam_lifecycle.payload import BuildFailure, build_transition_payload
from mockexam_lifecycle.registry import StageRegistry

from test_wizard import EXAM_ID, make_context

S = MockExamStatus


def _build(registry, current, target, form_state=None, instructions=None, questions=None,
           context="default"):
    return build_transition_payload(
        exam_id=EXAM_ID,
        current_status=current,
        target_status=target,
        context=make_context(current) if context == "default" else context,
        registry=registry,
        form_state=form_state or {},
        instructions=instructions or InstructionSet(),
        questions=questions or QuestionSet(),
    )


# =====================================================================
# Notes, completion, reason
# =====================================================================


class TestStageData:

    def test_notes_lifted_out_of_form_data(self, registry):
        form_state = {S.PLANNED: {"scopeConfirmed": True, "notes": "  Check with HoD  "}}
        payload = _build(registry, S.DRAFT, S.PLANNED, form_state).payload

        assert payload.stage_data.notes == "Check with HoD"
        assert payload.stage_data.form_data == {"scopeConfirmed": True}
        assert "notes" in payload.stage_data.model_fields_set

    def test_blank_notes_sent_as_none(self, registry):
        form_state = {S.PLANNED: {"scopeConfirmed": True, "notes": "   "}}
        stage_data = _build(registry, S.DRAFT, S.PLANNED, form_state).payload.stage_data
        assert stage_data.notes is None
        assert "notes" in stage_data.model_fields_set, "Explicit clear of the notes column"

    def test_untouched_notes_not_sent(self, registry):
        form_state = {S.PLANNED: {"scopeConfirmed": True}}
        stage_data = _build(registry, S.DRAFT, S.PLANNED, form_state).payload.stage_data
        assert "notes" not in stage_data.model_fields_set

    def test_form_state_not_mutated(self, registry):
        values = {"scopeConfirmed": True, "notes": "keep me"}
        form_state = {S.PLANNED: values}
        _build(registry, S.DRAFT, S.PLANNED, form_state)
        assert values == {"scopeConfirmed": True, "notes": "keep me"}

    def test_only_target_stage_values_sent(self, registry):
        form_state = {
            S.SCHEDULED: {"venueConfirmed": True},
            S.IN_PROGRESS: {"examStartTime": "2026-05-12T09:00"},
        }
        payload = _build(registry, S.SCHEDULED, S.IN_PROGRESS, form_state).payload
        assert payload.stage_data.form_data == {"examStartTime": "2026-05-12T09:00"}

    @pytest.mark.parametrize(
        "current,target,expected",
        [
            (S.SCHEDULED, S.IN_PROGRESS, True),
            (S.SCHEDULED, S.PLANNED, False),
            (S.SCHEDULED, S.SCHEDULED, None),
        ],
    )
    def test_completed_follows_direction(self, registry, current, target, expected):
        payload = _build(registry, current, target).payload
        assert payload.stage_data.completed is expected

    def test_cancellation_reason(self, registry):
        form_state = {S.CANCELLED: {"cancellationReason": "Venue unavailable"}}
        payload = _build(registry, S.SCHEDULED, S.CANCELLED, form_state).payload

        assert payload.reason == "Venue unavailable"
        assert payload.stage_data.notes == "Venue unavailable"
        assert payload.stage_data.form_data == {}

    def test_reason_only_for_cancellation(self, registry):
        form_state = {S.PLANNED: {"scopeConfirmed": True, "notes": "Moved back"}}
        payload = _build(registry, S.SCHEDULED, S.PLANNED, form_state).payload
        assert payload.reason is None

    def test_wire_shape_is_camel_case(self, registry):
        payload = _build(registry, S.SCHEDULED, S.IN_PROGRESS).payload
        wire = payload.model_dump(mode="json", by_alias=True, exclude_none=True)
        assert wire["examId"] == EXAM_ID
        assert wire["currentStatus"] == "scheduled"
        assert wire["targetStatus"] == "in_progress"
        assert wire["stageData"]["formData"] == {}
        assert wire["stageData"]["completed"] is True


# =====================================================================
# Sub-forms
# =====================================================================


class TestSubForms:

    def _instructions(self):
        return InstructionSet(
            entries=[
                InstructionEntry(id="i1", audience=InstructionAudience.STUDENTS, instructions=" No phones "),
                InstructionEntry(id="i2", audience=InstructionAudience.MARKERS, instructions="  "),
                InstructionEntry(audience=InstructionAudience.TEACHERS, instructions=""),
                InstructionEntry(audience=InstructionAudience.OTHER, instructions="Parking at gate 2"),
            ],
            removed_ids=["i0", "i2"],
        )

    def _questions(self):
        return QuestionSet(
            items=[
                QuestionSelection(
                    id="s1", source_type=SourceType.BANK, question_id="q1", marks=2, sequence=1,
                ),
                QuestionSelection(
                    source_type=SourceType.CUSTOM,
                    custom_question={"question": "Legacy prompt", "answer": "x"},
                    marks=5,
                    sequence=2,
                    is_optional=True,
                ),
                QuestionSelection(
                    source_type=SourceType.CUSTOM, custom_question={"prompt": ""}, sequence=3,
                ),
            ],
            removed_ids=["s9"],
        )

    def test_instructions_for_materials_ready(self, registry):
        stage_data = _build(
            registry, S.SCHEDULED, S.MATERIALS_READY, instructions=self._instructions(),
        ).payload.stage_data

        assert [(i.id, i.instructions) for i in stage_data.instructions] == [
            ("i1", "No phones"),
            (None, "Parking at gate 2"),
        ]
        assert stage_data.removed_instruction_ids == ["i0", "i2"], (
            "Persisted blank entries are deleted, without duplicates"
        )

    def test_blank_persisted_entry_merged_into_removed(self, registry):
        instructions = InstructionSet(
            entries=[
                InstructionEntry(id="i3", audience=InstructionAudience.STUDENTS, instructions=""),
                InstructionEntry(audience=InstructionAudience.MARKERS, instructions="Rubric"),
            ],
            removed_ids=["i1"],
        )
        stage_data = _build(
            registry, S.SCHEDULED, S.MATERIALS_READY, instructions=instructions,
        ).payload.stage_data
        assert stage_data.removed_instruction_ids == ["i1", "i3"]

    def test_instructions_omitted_for_other_stages(self, registry):
        stage_data = _build(
            registry, S.SCHEDULED, S.IN_PROGRESS, instructions=self._instructions(),
        ).payload.stage_data
        assert stage_data.instructions is None
        assert stage_data.removed_instruction_ids == ["i0", "i2"], (
            "Pending deletions are still sent"
        )

    def test_only_valid_questions_sent(self, registry):
        bundle = _build(
            registry, S.SCHEDULED, S.MATERIALS_READY, questions=self._questions(),
        ).payload.stage_data.question_selections

        assert [s.sequence for s in bundle.selected_questions] == [1, 2]
        bank, custom = bundle.selected_questions
        assert bank.id == "s1"
        assert bank.question_id == "q1"
        assert bank.custom_question is None
        assert custom.question_id is None
        assert custom.is_optional
        assert custom.custom_question == {
            "question": "Legacy prompt",
            "answer": "x",
            "prompt": "Legacy prompt",
            "marks": 5,
        }
        assert bundle.removed_question_ids == ["s9"]

    def test_questions_omitted_for_other_stages(self, registry):
        stage_data = _build(
            registry, S.SCHEDULED, S.IN_PROGRESS, questions=self._questions(),
        ).payload.stage_data
        assert stage_data.question_selections is None


# =====================================================================
# Preconditions
# =====================================================================


class TestFailures:

    def test_missing_context(self, registry):
        result = _build(registry, S.SCHEDULED, S.IN_PROGRESS, context=None)
        assert not result.ok
        assert result.payload is None
        assert result.failure is BuildFailure.MISSING_CONTEXT

    def test_missing_stage_definition(self, tmp_path):
        (tmp_path / "stages.yaml").write_text("[]\n", encoding="utf-8")
        empty = StageRegistry(tmp_path)
        empty.load()
        result = _build(empty, S.SCHEDULED, S.IN_PROGRESS)
        assert result.failure is BuildFailure.MISSING_STAGE_DEFINITION
