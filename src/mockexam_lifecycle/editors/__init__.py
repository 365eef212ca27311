"""Editors for the wizard's sub-forms: instruction blocks and question slots."""

from mockexam_lifecycle.editors.instructions import (
    InstructionSet,
    add_instruction,
    hydrate_instructions,
    remove_instruction,
    update_instruction,
)
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

__all__ = [
    "InstructionSet",
    "add_instruction",
    "hydrate_instructions",
    "remove_instruction",
    "update_instruction",
    "QuestionSet",
    "add_bank_question",
    "add_custom_question",
    "add_random_selection",
    "edit_custom_question",
    "hydrate_questions",
    "move_question",
    "normalize_sequences",
    "remove_question",
    "reorder",
    "select_bank_questions",
    "update_question",
]
