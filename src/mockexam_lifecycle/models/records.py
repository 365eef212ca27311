"""Editor-side records — what the wizard holds while the user is editing.

These models are intentionally decoupled from the ORM models in
``mockexam_db`` so that the state machine can be driven and tested without
a database.  They are frozen: editors return updated copies instead of
mutating in place.

  - InstructionEntry: one audience-tagged instruction block
  - QuestionSelection: one question slot on the paper (bank or custom)
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict

from mockexam_lifecycle.models.enums import InstructionAudience, SourceType

# Keys under which a custom question's prompt may be stored.  ``prompt`` is
# canonical; the others come from older rows.
CUSTOM_PROMPT_KEYS: tuple[str, ...] = ("prompt", "question", "text")


def resolve_custom_prompt(custom_question: dict[str, Any] | None) -> str | None:
    """Return the first non-empty prompt stored in a custom question dict.

    Older rows stored the prompt under ``question`` or ``text``; ``prompt``
    wins when more than one is present.
    """
    if not custom_question:
        return None
    for key in CUSTOM_PROMPT_KEYS:
        value = custom_question.get(key)
        if value:
            return str(value)
    return None


class InstructionEntry(BaseModel):
    """An instruction block in the editor.

    ``id`` is None until the entry has been persisted.
    """

    model_config = ConfigDict(frozen=True)

    id: Optional[str] = None
    audience: InstructionAudience = InstructionAudience.OTHER
    instructions: str = ""

    @property
    def is_blank(self) -> bool:
        return not self.instructions.strip()


class QuestionSelection(BaseModel):
    """A question slot on the exam paper.

    Bank selections reference ``question_id``; custom selections carry the
    authored question in ``custom_question``.  ``sequence`` is 1-based and
    kept contiguous by the question editor.
    """

    model_config = ConfigDict(frozen=True)

    id: Optional[str] = None
    source_type: SourceType
    question_id: Optional[str] = None
    custom_question: Optional[dict[str, Any]] = None
    marks: Optional[float] = None
    sequence: int
    is_optional: bool = False

    @property
    def prompt(self) -> str | None:
        """Resolved prompt for custom selections, None for bank ones."""
        if self.source_type is not SourceType.CUSTOM:
            return None
        return resolve_custom_prompt(self.custom_question)

    @property
    def is_valid(self) -> bool:
        """Whether this slot can be submitted.

        A bank slot needs a question id; a custom slot needs a non-blank
        prompt.
        """
        if self.source_type is SourceType.BANK:
            return bool(self.question_id)
        prompt = self.prompt
        return bool(prompt and prompt.strip())
