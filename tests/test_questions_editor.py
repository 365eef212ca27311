"""Question selection editor: sequence contiguity, bank/custom slots, ordering."""

import pytest

from mockexam_lifecycle.constants import MAX_CUSTOM_QUESTION_MARKS
from mockexam_lifecycle.editors.questions import (
    QuestionSet,
    add_bank_question,
    add_custom_question,
    add_random_selection,
    edit_custom_question,
    hydrate_questions,
    move_question,
    normalize_sequences,
    remove_question,
    reorder,
    select_bank_questions,
    update_question,
)
from mockexam_lifecycle.errors import DuplicateQuestionError
from mockexam_lifecycle.models.context import QuestionBankItem
from mockexam_lifecycle.models.enums import SourceType
from mockexam_lifecycle.models.records import QuestionSelection

BANK = [
    QuestionBankItem(id="q1", marks=2),
    QuestionBankItem(id="q2", marks=3),
    QuestionBankItem(id="q3"),
]


def _bank(question_id, sequence, record_id=None, marks=None):
    return QuestionSelection(
        id=record_id, source_type=SourceType.BANK, question_id=question_id,
        sequence=sequence, marks=marks,
    )


def _custom(prompt, sequence, record_id=None):
    return QuestionSelection(
        id=record_id, source_type=SourceType.CUSTOM,
        custom_question={"prompt": prompt}, sequence=sequence,
    )


def _sequences(state):
    return [item.sequence for item in state.items]


def _labels(state):
    return [item.question_id or item.prompt for item in state.items]


def _assert_contiguous(state):
    assert _sequences(state) == list(range(1, len(state.items) + 1)), (
        f"Sequences not contiguous: {_sequences(state)}"
    )


# =====================================================================
# Sequence normalisation
# =====================================================================


class TestNormalize:

    def test_sorts_and_renumbers(self):
        items = normalize_sequences([_bank("a", 10), _bank("b", 3), _bank("c", 3)])
        assert [i.question_id for i in items] == ["b", "c", "a"], "Stable for ties"
        assert [i.sequence for i in items] == [1, 2, 3]

    def test_idempotent(self):
        once = normalize_sequences([_bank("a", 4), _bank("b", 9)])
        assert normalize_sequences(once) == once

    def test_hydrate_normalizes(self):
        state = hydrate_questions([_bank("a", 5, "s1"), _custom("Why?", 2, "s2")])
        assert _labels(state) == ["Why?", "a"]
        _assert_contiguous(state)


# =====================================================================
# Bank selections
# =====================================================================


class TestBankSelection:

    def test_select_appends_with_bank_marks(self):
        state = select_bank_questions(QuestionSet(), ["q1", "q3"], BANK)
        assert state.selected_bank_ids == ["q1", "q3"]
        assert [i.marks for i in state.items] == [2, None]
        _assert_contiguous(state)

    def test_deselect_drops_slot_and_records_id(self):
        state = QuestionSet(
            items=[_bank("q1", 1, "s1"), _custom("Why?", 2, "s2"), _bank("q2", 3, "s3")]
        )
        state = select_bank_questions(state, ["q2", "q3"], BANK)

        assert _labels(state) == ["Why?", "q2", "q3"], "Custom slots are untouched"
        assert state.removed_ids == ["s1"]
        _assert_contiguous(state)

    def test_select_ignores_duplicate_ids(self):
        state = select_bank_questions(QuestionSet(), ["q1", "q1"], BANK)
        assert state.selected_bank_ids == ["q1"]

    def test_add_bank_question(self):
        state = add_bank_question(QuestionSet(), "q2", BANK)
        state = add_bank_question(state, "q1", BANK)
        assert state.selected_bank_ids == ["q2", "q1"]
        assert state.items[0].marks == 3

    def test_add_duplicate_raises(self):
        state = add_bank_question(QuestionSet(), "q1", BANK)
        with pytest.raises(DuplicateQuestionError) as exc_info:
            add_bank_question(state, "q1", BANK)
        assert exc_info.value.question_id == "q1"
        assert str(exc_info.value) == "This question is already selected"

    def test_random_selection_skips_chosen(self):
        state = add_bank_question(QuestionSet(), "q1", BANK)
        state = add_random_selection(state, [BANK[0], BANK[1]])
        assert state.selected_bank_ids == ["q1", "q2"]
        assert state.items[1].marks == 3

    def test_selected_ids_follow_items(self):
        state = QuestionSet(items=[_bank("q2", 1), _custom("x", 2), _bank("q1", 3)])
        state = reorder(state, 2, 0)
        assert state.selected_bank_ids == ["q1", "q2"]


# =====================================================================
# Custom questions
# =====================================================================


class TestCustomQuestions:

    def test_add_blank_template(self):
        state = add_custom_question(QuestionSet(items=[_bank("q1", 1)]))
        item = state.items[-1]
        assert item.source_type is SourceType.CUSTOM
        assert item.custom_question["prompt"] == ""
        assert item.sequence == 2
        assert not item.is_valid

    def test_add_with_payload_clamps_marks(self):
        state = add_custom_question(QuestionSet(), {"prompt": "Why?", "marks": 500})
        assert state.items[0].marks == MAX_CUSTOM_QUESTION_MARKS
        state = add_custom_question(state, {"prompt": "How?", "marks": -3})
        assert state.items[1].marks == 0

    @pytest.mark.parametrize("marks", ["five", "", [], True, float("nan")])
    def test_unparseable_marks_become_none(self, marks):
        state = add_custom_question(QuestionSet(), {"prompt": "Why?", "marks": marks})
        assert state.items[0].marks is None
        state = edit_custom_question(state, 0, {"prompt": "Why?", "marks": marks})
        assert state.items[0].marks is None

    def test_edit_replaces_slot_in_place(self):
        state = QuestionSet(items=[_bank("q1", 1, "s1"), _bank("q2", 2, "s2")])
        state = update_question(state, 0, is_optional=True)

        state = edit_custom_question(state, 0, {"prompt": "Rewritten", "marks": 6})

        item = state.items[0]
        assert item.id == "s1", "Slot keeps its id"
        assert item.sequence == 1
        assert item.is_optional
        assert item.source_type is SourceType.CUSTOM
        assert item.question_id is None
        assert item.prompt == "Rewritten"
        assert item.marks == 6
        assert state.selected_bank_ids == ["q2"]


# =====================================================================
# Updates, removal, ordering
# =====================================================================


class TestUpdateAndOrder:

    def test_update_marks_and_optional(self):
        state = QuestionSet(items=[_bank("q1", 1, marks=2)])
        state = update_question(state, 0, marks="4.5")
        assert state.items[0].marks == 4.5
        state = update_question(state, 0, marks=None)
        assert state.items[0].marks is None, "None clears the marks"
        state = update_question(state, 0, is_optional=True)
        assert state.items[0].is_optional
        assert state.items[0].marks is None, "Marks untouched when not given"

    def test_bank_marks_are_not_capped(self):
        state = select_bank_questions(
            QuestionSet(), ["big"], [QuestionBankItem(id="big", marks=150)]
        )
        assert state.items[0].marks == 150
        state = update_question(state, 0, marks=MAX_CUSTOM_QUESTION_MARKS + 20)
        assert state.items[0].marks == MAX_CUSTOM_QUESTION_MARKS + 20
        state = update_question(state, 0, marks=-1)
        assert state.items[0].marks == 0

    def test_custom_marks_capped_on_update(self):
        state = add_custom_question(QuestionSet(), {"prompt": "Why?", "marks": 2})
        state = update_question(state, 0, marks=MAX_CUSTOM_QUESTION_MARKS + 20)
        assert state.items[0].marks == MAX_CUSTOM_QUESTION_MARKS

    def test_update_with_unparseable_marks_clears_them(self):
        state = QuestionSet(items=[_bank("q1", 1, marks=2)])
        state = update_question(state, 0, marks="five")
        assert state.items[0].marks is None

    def test_remove_renumbers_and_records_id(self):
        state = QuestionSet(items=[_bank("q1", 1, "s1"), _bank("q2", 2, "s2"), _bank("q3", 3)])
        state = remove_question(state, 0)
        assert _labels(state) == ["q2", "q3"]
        assert state.removed_ids == ["s1"]
        _assert_contiguous(state)

        state = remove_question(state, 1)
        assert state.removed_ids == ["s1"], "Unsaved slot has no id"

    def test_reorder_is_positional(self):
        state = QuestionSet(items=[_bank("a", 1), _bank("b", 2), _bank("c", 3), _bank("d", 4)])

        moved = reorder(state, 0, 2)
        assert _labels(moved) == ["b", "c", "a", "d"]
        _assert_contiguous(moved)

        moved = reorder(state, 3, 1)
        assert _labels(moved) == ["a", "d", "b", "c"]
        _assert_contiguous(moved)

    def test_reorder_same_index_is_noop(self):
        state = QuestionSet(items=[_bank("a", 1), _bank("b", 2)])
        assert reorder(state, 1, 1) is state

    def test_reorder_out_of_range(self):
        state = QuestionSet(items=[_bank("a", 1)])
        with pytest.raises(IndexError):
            reorder(state, 0, 1)

    def test_move_up_and_down(self):
        state = QuestionSet(items=[_bank("a", 1), _bank("b", 2), _bank("c", 3)])
        assert _labels(move_question(state, 1, "up")) == ["b", "a", "c"]
        assert _labels(move_question(state, 1, "down")) == ["a", "c", "b"]

    def test_move_at_edges_is_noop(self):
        state = QuestionSet(items=[_bank("a", 1), _bank("b", 2)])
        assert move_question(state, 0, "up") is state
        assert move_question(state, 1, "down") is state

    def test_valid_items_filters_blank_custom(self):
        state = QuestionSet(items=[_bank("q1", 1), _custom(" ", 2), _custom("Why?", 3)])
        assert [i.sequence for i in state.valid_items] == [1, 3]
