"""Instruction set editor — audience-tagged instruction blocks.

Pure functions over an immutable :class:`InstructionSet`.  Every operation
returns a new set; the input is never mutated.

Invariants:
  - the entry list is never empty (removing the last entry re-inserts a
    blank ``students`` placeholder)
  - ``removed_ids`` holds each persisted id at most once
"""

from __future__ import annotations

from typing import Sequence

from pydantic import BaseModel, ConfigDict

from mockexam_lifecycle.constants import DEFAULT_INSTRUCTION_AUDIENCES
from mockexam_lifecycle.models.context import InstructionRecord
from mockexam_lifecycle.models.enums import InstructionAudience
from mockexam_lifecycle.models.records import InstructionEntry


class InstructionSet(BaseModel):
    """Editor state: the visible entries plus persisted ids to delete."""

    model_config = ConfigDict(frozen=True)

    entries: list[InstructionEntry] = []
    removed_ids: list[str] = []


def _check_index(entries: Sequence[InstructionEntry], index: int) -> None:
    if not 0 <= index < len(entries):
        raise IndexError(f"Instruction index out of range: {index}")


def blank_defaults() -> list[InstructionEntry]:
    """One empty entry per default audience, in display order."""
    return [InstructionEntry(audience=a) for a in DEFAULT_INSTRUCTION_AUDIENCES]


def hydrate_instructions(records: Sequence[InstructionRecord]) -> InstructionSet:
    """Build the editor state from persisted instructions.

    Default audiences come first in their fixed order, then every other
    audience in original order.  Default audiences missing from *records*
    are synthesised as blank entries at the end so each one is always
    offered as an editable slot.
    """
    if not records:
        return InstructionSet(entries=blank_defaults())

    default_rank = {a: i for i, a in enumerate(DEFAULT_INSTRUCTION_AUDIENCES)}
    fallback = len(DEFAULT_INSTRUCTION_AUDIENCES)

    # Non-default audiences keep their original relative order.
    indexed = list(enumerate(records))
    indexed.sort(
        key=lambda pair: (
            default_rank.get(pair[1].audience, fallback + pair[0]),
            pair[0],
        )
    )
    entries = [
        InstructionEntry(
            id=record.id,
            audience=record.audience,
            instructions=record.instructions or "",
        )
        for _, record in indexed
    ]

    present = {entry.audience for entry in entries}
    entries.extend(
        InstructionEntry(audience=a)
        for a in DEFAULT_INSTRUCTION_AUDIENCES
        if a not in present
    )
    return InstructionSet(entries=entries)


def add_instruction(state: InstructionSet) -> InstructionSet:
    """Append a blank entry tagged ``other``."""
    entries = [*state.entries, InstructionEntry(audience=InstructionAudience.OTHER)]
    return state.model_copy(update={"entries": entries})


def update_instruction(
    state: InstructionSet,
    index: int,
    *,
    audience: InstructionAudience | str | None = None,
    instructions: str | None = None,
) -> InstructionSet:
    """Merge the given changes into the entry at *index*."""
    _check_index(state.entries, index)
    changes: dict = {}
    if audience is not None:
        changes["audience"] = InstructionAudience(audience)
    if instructions is not None:
        changes["instructions"] = instructions
    if not changes:
        return state

    entries = list(state.entries)
    entries[index] = entries[index].model_copy(update=changes)
    return state.model_copy(update={"entries": entries})


def remove_instruction(state: InstructionSet, index: int) -> InstructionSet:
    """Remove the entry at *index*, remembering its id for deletion."""
    _check_index(state.entries, index)
    entries = list(state.entries)
    removed = entries.pop(index)

    removed_ids = list(state.removed_ids)
    if removed.id and removed.id not in removed_ids:
        removed_ids.append(removed.id)

    if not entries:
        entries = [InstructionEntry(audience=InstructionAudience.STUDENTS)]

    return InstructionSet(entries=entries, removed_ids=removed_ids)
