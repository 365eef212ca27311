"""Custom question drafts: validation and conversion to a question slot."""

import pytest

from mockexam_lifecycle.constants import MAX_CUSTOM_QUESTION_MARKS
from mockexam_lifecycle.custom_questions import (
    MISSING_ANSWER_ERROR,
    MISSING_PROMPT_ERROR,
    NO_CORRECT_OPTION_ERROR,
    TOO_FEW_OPTIONS_ERROR,
    ChoiceOption,
    CustomQuestionDraft,
    CustomQuestionType,
    validate_custom_question,
)
from mockexam_lifecycle.editors.questions import QuestionSet, add_custom_question


def _mcq(**overrides):
    data = {
        "prompt": "Which organelle releases energy?",
        "options": [
            ChoiceOption(text="Mitochondrion", is_correct=True),
            ChoiceOption(text="Ribosome"),
            ChoiceOption(text=""),
        ],
        "marks": 1,
    }
    data.update(overrides)
    return CustomQuestionDraft(**data)


def test_blank_draft_has_four_options():
    draft = CustomQuestionDraft.blank()
    assert draft.question_type is CustomQuestionType.MCQ
    assert len(draft.options) == 4
    assert draft.difficulty_level == "medium"


def test_valid_mcq():
    assert validate_custom_question(_mcq()) == {}


def test_blank_draft_errors():
    errors = validate_custom_question(CustomQuestionDraft.blank())
    assert errors == {
        "prompt": MISSING_PROMPT_ERROR,
        "options": TOO_FEW_OPTIONS_ERROR,
        "correctAnswer": NO_CORRECT_OPTION_ERROR,
    }


def test_correct_flag_on_blank_option_does_not_count():
    draft = _mcq(
        options=[
            ChoiceOption(text="A"),
            ChoiceOption(text="B"),
            ChoiceOption(text=" ", is_correct=True),
        ]
    )
    assert validate_custom_question(draft) == {"correctAnswer": NO_CORRECT_OPTION_ERROR}


@pytest.mark.parametrize(
    "question_type",
    [CustomQuestionType.SHORT_ANSWER, CustomQuestionType.LONG_ANSWER, CustomQuestionType.CALCULATION],
)
def test_written_answer_types_need_expected_answer(question_type):
    draft = CustomQuestionDraft(prompt="Calculate the magnification", question_type=question_type)
    assert validate_custom_question(draft) == {"correctAnswer": MISSING_ANSWER_ERROR}

    draft = draft.model_copy(update={"correct_answer": "x400"})
    assert validate_custom_question(draft) == {}


@pytest.mark.parametrize("marks", [0, -1, MAX_CUSTOM_QUESTION_MARKS + 1])
def test_marks_out_of_range(marks):
    errors = validate_custom_question(_mcq(marks=marks))
    assert errors == {"marks": f"Marks must be between 1 and {MAX_CUSTOM_QUESTION_MARKS}"}


def test_marks_optional():
    assert validate_custom_question(_mcq(marks=None)) == {}


def test_selection_payload_for_mcq():
    data = _mcq(hint="  Think about respiration ", explanation="").to_selection_payload()
    assert data == {
        "prompt": "Which organelle releases energy?",
        "questionType": "mcq",
        "options": [
            {"text": "Mitochondrion", "isCorrect": True},
            {"text": "Ribosome", "isCorrect": False},
        ],
        "marks": 1,
        "hint": "Think about respiration",
        "difficultyLevel": "medium",
    }


def test_selection_payload_for_written_answer():
    draft = CustomQuestionDraft(
        prompt=" Define osmosis ",
        question_type=CustomQuestionType.SHORT_ANSWER,
        correct_answer=" Movement of water ",
        options=[ChoiceOption(text="ignored")],
        difficulty_level=None,
    )
    assert draft.to_selection_payload() == {
        "prompt": "Define osmosis",
        "questionType": "short_answer",
        "correctAnswer": "Movement of water",
    }


def test_from_stored_accepts_legacy_prompt_and_camel_case():
    draft = CustomQuestionDraft.from_stored(
        {
            "question": "Old prompt",
            "questionType": "true_false",
            "options": [{"text": "True", "isCorrect": True}, {"text": "False"}],
            "marks": 2,
            "hint": None,
            "unknownKey": "dropped",
        }
    )
    assert draft.prompt == "Old prompt"
    assert draft.question_type is CustomQuestionType.TRUE_FALSE
    assert draft.options[0].is_correct
    assert draft.hint == ""
    assert validate_custom_question(draft) == {}


def test_saved_draft_becomes_valid_slot():
    draft = _mcq(marks=3)
    state = add_custom_question(QuestionSet(), draft.to_selection_payload())
    item = state.items[0]
    assert item.is_valid
    assert item.prompt == "Which organelle releases energy?"
    assert item.marks == 3
