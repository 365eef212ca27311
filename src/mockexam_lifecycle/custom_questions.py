"""Custom question authoring — drafts written by hand instead of drawn from the bank.

A :class:`CustomQuestionDraft` is what the custom-question dialog edits.
Once it validates, :meth:`CustomQuestionDraft.to_selection_payload` turns it
into the ``custom_question`` dict stored on a question slot (see
``editors.questions.add_custom_question`` / ``edit_custom_question``).

Stored dicts use camelCase keys (``questionType``, ``correctAnswer`` ...),
matching rows already in the database.
"""

from __future__ import annotations

import enum
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from mockexam_lifecycle.constants import MAX_CUSTOM_QUESTION_MARKS
from mockexam_lifecycle.models.records import resolve_custom_prompt

MISSING_PROMPT_ERROR = "Question prompt is required"
TOO_FEW_OPTIONS_ERROR = "At least 2 options with text are required"
NO_CORRECT_OPTION_ERROR = "At least one correct answer must be marked"
MISSING_ANSWER_ERROR = "Expected answer is required for review purposes"

# Minimum number of non-blank options for choice questions
MIN_CHOICE_OPTIONS = 2


class CustomQuestionType(str, enum.Enum):
    MCQ = "mcq"
    TRUE_FALSE = "true_false"
    SHORT_ANSWER = "short_answer"
    LONG_ANSWER = "long_answer"
    CALCULATION = "calculation"

    @property
    def is_choice(self) -> bool:
        return self in (CustomQuestionType.MCQ, CustomQuestionType.TRUE_FALSE)


class _DraftModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ChoiceOption(_DraftModel):
    text: str = ""
    is_correct: bool = False


def _blank_options() -> list[ChoiceOption]:
    return [ChoiceOption() for _ in range(4)]


class CustomQuestionDraft(_DraftModel):
    """A hand-written question being edited in the custom-question dialog."""

    prompt: str = ""
    question_type: CustomQuestionType = CustomQuestionType.MCQ
    options: list[ChoiceOption] = []
    correct_answer: str = ""
    marks: Optional[float] = None
    hint: str = ""
    explanation: str = ""
    difficulty_level: Optional[Literal["easy", "medium", "hard"]] = "medium"

    @classmethod
    def blank(cls) -> CustomQuestionDraft:
        """A fresh MCQ draft with four empty options."""
        return cls(options=_blank_options())

    @classmethod
    def from_stored(cls, data: dict[str, Any]) -> CustomQuestionDraft:
        """Rebuild a draft from a stored ``custom_question`` dict.

        Unknown keys are ignored; older rows whose prompt is stored under
        ``question`` or ``text`` are accepted.
        """
        known = {k: v for k, v in data.items() if k in _STORED_KEYS and v is not None}
        known["prompt"] = resolve_custom_prompt(data) or ""
        return cls.model_validate(known)

    @property
    def filled_options(self) -> list[ChoiceOption]:
        return [opt for opt in self.options if opt.text.strip()]

    def to_selection_payload(self) -> dict[str, Any]:
        """The ``custom_question`` dict for a question slot.

        Text is trimmed, blank options are dropped, and choice-only or
        answer-only fields are omitted for question types that do not use
        them.
        """
        data: dict[str, Any] = {
            "prompt": self.prompt.strip(),
            "questionType": self.question_type.value,
        }
        if self.question_type.is_choice:
            data["options"] = [
                {"text": opt.text.strip(), "isCorrect": opt.is_correct}
                for opt in self.filled_options
            ]
        else:
            data["correctAnswer"] = self.correct_answer.strip()
        if self.marks is not None:
            data["marks"] = self.marks
        if self.hint.strip():
            data["hint"] = self.hint.strip()
        if self.explanation.strip():
            data["explanation"] = self.explanation.strip()
        if self.difficulty_level:
            data["difficultyLevel"] = self.difficulty_level
        return data


_STORED_KEYS = frozenset(
    {
        "questionType", "question_type",
        "options",
        "correctAnswer", "correct_answer",
        "marks", "hint", "explanation",
        "difficultyLevel", "difficulty_level",
    }
)


def marks_error(marks: float | None) -> str | None:
    if marks is None:
        return None
    if not 1 <= marks <= MAX_CUSTOM_QUESTION_MARKS:
        return f"Marks must be between 1 and {MAX_CUSTOM_QUESTION_MARKS}"
    return None


def validate_custom_question(draft: CustomQuestionDraft) -> dict[str, str]:
    """Check a draft before it is saved onto the paper.

    Returns:
        A mapping of camelCase field key to message; empty when valid.
    """
    errors: dict[str, str] = {}

    if not draft.prompt.strip():
        errors["prompt"] = MISSING_PROMPT_ERROR

    if draft.question_type.is_choice:
        filled = draft.filled_options
        if len(filled) < MIN_CHOICE_OPTIONS:
            errors["options"] = TOO_FEW_OPTIONS_ERROR
        if not any(opt.is_correct for opt in filled):
            errors["correctAnswer"] = NO_CORRECT_OPTION_ERROR
    elif not draft.correct_answer.strip():
        errors["correctAnswer"] = MISSING_ANSWER_ERROR

    message = marks_error(draft.marks)
    if message:
        errors["marks"] = message

    return errors
