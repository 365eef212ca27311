"""Question selection editor — the ordered list of questions on the paper.

Pure functions over an immutable :class:`QuestionSet`.  Slots are either
bank-sourced (``question_id``) or custom-authored (``custom_question``).

Invariant: after every operation the ``sequence`` values of the slots are
exactly ``1..N`` with no gaps or duplicates, and the list is ordered by
``sequence``.  Structural edits end with :func:`normalize_sequences` (when
the existing sequence order is authoritative) or a positional renumber
(when the caller has just moved a slot).

Only :func:`add_bank_question` can fail, with
:class:`~mockexam_lifecycle.errors.DuplicateQuestionError`; everything else
is total over the in-memory list.
"""

from __future__ import annotations

import math
from typing import Any, Literal, Sequence

from pydantic import BaseModel, ConfigDict

from mockexam_lifecycle.constants import MAX_CUSTOM_QUESTION_MARKS
from mockexam_lifecycle.errors import DuplicateQuestionError
from mockexam_lifecycle.models.context import QuestionBankItem
from mockexam_lifecycle.models.enums import SourceType
from mockexam_lifecycle.models.records import QuestionSelection

# Sentinel for "argument not given" where None is a meaningful value.
_UNSET: Any = object()


def default_custom_question() -> dict[str, Any]:
    """Blank template for a new custom question card."""
    return {"prompt": "", "type": "descriptive", "answer": "", "guidance": ""}


class QuestionSet(BaseModel):
    """Editor state: the slots on the paper plus persisted ids to delete."""

    model_config = ConfigDict(frozen=True)

    items: list[QuestionSelection] = []
    removed_ids: list[str] = []

    @property
    def selected_bank_ids(self) -> list[str]:
        """Bank question ids currently on the paper, in sequence order.

        Derived from ``items`` so the multi-select widget can never drift
        out of sync with the list.
        """
        return [
            item.question_id
            for item in self.items
            if item.source_type is SourceType.BANK and item.question_id
        ]

    @property
    def valid_items(self) -> list[QuestionSelection]:
        return [item for item in self.items if item.is_valid]


# ------------------------------------------------------------------
# Sequence helpers
# ------------------------------------------------------------------

def normalize_sequences(items: Sequence[QuestionSelection]) -> list[QuestionSelection]:
    """Sort by current sequence (stable), then renumber ``1..N``.

    Idempotent: a normalised list is returned unchanged.
    """
    ordered = sorted(items, key=lambda item: item.sequence)
    return _renumber(ordered)


def _renumber(items: Sequence[QuestionSelection]) -> list[QuestionSelection]:
    """Assign ``sequence = position + 1`` keeping the given order."""
    return [
        item if item.sequence == position else item.model_copy(update={"sequence": position})
        for position, item in enumerate(items, start=1)
    ]


def _max_sequence(items: Sequence[QuestionSelection]) -> int:
    return max((item.sequence for item in items), default=0)


def _check_index(items: Sequence[QuestionSelection], index: int) -> None:
    if not 0 <= index < len(items):
        raise IndexError(f"Question index out of range: {index}")


def _with_removed(removed_ids: Sequence[str], *ids: str | None) -> list[str]:
    merged = list(removed_ids)
    for record_id in ids:
        if record_id and record_id not in merged:
            merged.append(record_id)
    return merged


def _parse_marks(marks: Any) -> float | None:
    """Marks as a non-negative float; None when blank or not a number."""
    if marks is None or isinstance(marks, bool):
        return None
    try:
        value = float(marks)
    except (TypeError, ValueError):
        return None
    if math.isnan(value):
        return None
    return max(0.0, value)


def _clamp_marks(marks: Any) -> float | None:
    """Parsed marks capped at MAX_CUSTOM_QUESTION_MARKS (custom slots only)."""
    value = _parse_marks(marks)
    if value is None:
        return None
    return min(value, float(MAX_CUSTOM_QUESTION_MARKS))


def _bank_marks(bank: Sequence[QuestionBankItem], question_id: str) -> float | None:
    for item in bank:
        if item.id == question_id:
            return item.marks
    return None


# ------------------------------------------------------------------
# Hydration
# ------------------------------------------------------------------

def hydrate_questions(items: Sequence[QuestionSelection]) -> QuestionSet:
    """Build the editor state from persisted slots (any order)."""
    return QuestionSet(items=normalize_sequences(items))


# ------------------------------------------------------------------
# Bank selections
# ------------------------------------------------------------------

def select_bank_questions(
    state: QuestionSet,
    question_ids: Sequence[str],
    bank: Sequence[QuestionBankItem] = (),
) -> QuestionSet:
    """Make the bank slots match *question_ids* (the multi-select value).

    Bank slots whose question is no longer selected are dropped (persisted
    ids recorded for deletion); newly selected questions are appended after
    the current last slot with the bank item's default marks.
    Custom slots are untouched.
    """
    wanted = list(dict.fromkeys(question_ids))
    wanted_set = set(wanted)

    current_bank_ids = set(state.selected_bank_ids)
    dropped: list[QuestionSelection] = []
    kept: list[QuestionSelection] = []
    for item in state.items:
        if (
            item.source_type is SourceType.BANK
            and item.question_id
            and item.question_id not in wanted_set
        ):
            dropped.append(item)
        else:
            kept.append(item)

    next_sequence = _max_sequence(kept)
    for offset, question_id in enumerate(
        (qid for qid in wanted if qid not in current_bank_ids), start=1
    ):
        kept.append(
            QuestionSelection(
                source_type=SourceType.BANK,
                question_id=question_id,
                marks=_bank_marks(bank, question_id),
                sequence=next_sequence + offset,
                is_optional=False,
            )
        )

    return QuestionSet(
        items=normalize_sequences(kept),
        removed_ids=_with_removed(state.removed_ids, *(item.id for item in dropped)),
    )


def add_bank_question(
    state: QuestionSet,
    question_id: str,
    bank: Sequence[QuestionBankItem] = (),
) -> QuestionSet:
    """Append one bank question.

    Raises:
        DuplicateQuestionError: if the question is already on the paper.
    """
    if question_id in state.selected_bank_ids:
        raise DuplicateQuestionError(question_id)
    return select_bank_questions(state, [*state.selected_bank_ids, question_id], bank)


def add_random_selection(
    state: QuestionSet, sampled: Sequence[QuestionBankItem]
) -> QuestionSet:
    """Append externally sampled bank questions, skipping ones already chosen."""
    ids = [*state.selected_bank_ids, *(item.id for item in sampled)]
    return select_bank_questions(state, ids, sampled)


# ------------------------------------------------------------------
# Custom questions
# ------------------------------------------------------------------

def add_custom_question(
    state: QuestionSet, payload: dict[str, Any] | None = None
) -> QuestionSet:
    """Append a custom slot; a blank template is used when *payload* is None."""
    custom = dict(payload) if payload is not None else default_custom_question()
    item = QuestionSelection(
        source_type=SourceType.CUSTOM,
        custom_question=custom,
        marks=_clamp_marks(custom.get("marks")),
        sequence=_max_sequence(state.items) + 1,
        is_optional=False,
    )
    return state.model_copy(update={"items": normalize_sequences([*state.items, item])})


def edit_custom_question(
    state: QuestionSet, index: int, payload: dict[str, Any]
) -> QuestionSet:
    """Overwrite the slot at *index* with a custom question.

    The slot keeps its id, position and optional flag; marks are taken
    from the payload.
    """
    _check_index(state.items, index)
    custom = dict(payload)
    items = list(state.items)
    items[index] = items[index].model_copy(
        update={
            "source_type": SourceType.CUSTOM,
            "question_id": None,
            "custom_question": custom,
            "marks": _clamp_marks(custom.get("marks")),
        }
    )
    return state.model_copy(update={"items": normalize_sequences(items)})


def update_question(
    state: QuestionSet,
    index: int,
    *,
    marks: Any = _UNSET,
    is_optional: bool | None = None,
) -> QuestionSet:
    """Change the marks and/or optional flag of the slot at *index*."""
    _check_index(state.items, index)
    changes: dict[str, Any] = {}
    if marks is not _UNSET:
        if state.items[index].source_type is SourceType.CUSTOM:
            changes["marks"] = _clamp_marks(marks)
        else:
            changes["marks"] = _parse_marks(marks)
    if is_optional is not None:
        changes["is_optional"] = is_optional
    if not changes:
        return state

    items = list(state.items)
    items[index] = items[index].model_copy(update=changes)
    return state.model_copy(update={"items": normalize_sequences(items)})


# ------------------------------------------------------------------
# Removal & ordering
# ------------------------------------------------------------------

def remove_question(state: QuestionSet, index: int) -> QuestionSet:
    """Delete the slot at *index*, remembering its id for deletion."""
    _check_index(state.items, index)
    items = list(state.items)
    removed = items.pop(index)
    return QuestionSet(
        items=normalize_sequences(items),
        removed_ids=_with_removed(state.removed_ids, removed.id),
    )


def reorder(state: QuestionSet, from_index: int, to_index: int) -> QuestionSet:
    """Move the slot at *from_index* so it ends up at *to_index*.

    Serves both drag-and-drop and the up/down step controls.  Sequences
    are renumbered from the new positions.
    """
    _check_index(state.items, from_index)
    _check_index(state.items, to_index)
    if from_index == to_index:
        return state

    items = list(state.items)
    moved = items.pop(from_index)
    items.insert(to_index, moved)
    return state.model_copy(update={"items": _renumber(items)})


def move_question(
    state: QuestionSet, index: int, direction: Literal["up", "down"]
) -> QuestionSet:
    """Step a slot one place up or down; a no-op at either end."""
    _check_index(state.items, index)
    target = index - 1 if direction == "up" else index + 1
    if not 0 <= target < len(state.items):
        return state
    return reorder(state, index, target)
