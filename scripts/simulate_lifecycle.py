#!/usr/bin/env python3
"""Simulate a mock exam's lifecycle end-to-end with a mocked repository.

Opens the StatusTransitionWizard on a draft exam and walks it stage by
stage to ``completed``: each stage's required checklist fields are filled
with mock values, the materials stage gets instructions and a sampled
question paper, and every submission is printed as a rich audit log.

By default the main forward path is taken.  ``--random`` picks a random
forward neighbour at each step instead (e.g. skipping moderation), and
``--cancel-at`` cancels the exam once it reaches the given stage.

Usage::

    # Main path: draft -> ... -> completed
    python scripts/simulate_lifecycle.py

    # Random forward path, reproducible
    python scripts/simulate_lifecycle.py --random --seed 7

    # Cancel once the exam is scheduled
    python scripts/simulate_lifecycle.py --cancel-at scheduled

    # Verbose mode (print each payload as JSON)
    python scripts/simulate_lifecycle.py -v
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import random
import sys
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.table import Table

# ---------------------------------------------------------------------------
# Ensure project root is on sys.path so we can import both the SDK and
# test mock infrastructure.
# ---------------------------------------------------------------------------
_SCRIPT_DIR = Path(__file__).resolve().parent
_REPO_ROOT = _SCRIPT_DIR.parent
sys.path.insert(0, str(_REPO_ROOT / "tests"))
sys.path.insert(0, str(_REPO_ROOT / "src"))

from test_wizard import (  # noqa: E402
    EXAM_ID,
    SAMPLE_BANK,
    FakeSampler,
    MockWizardRepository,
    make_context,
)

from mockexam_lifecycle.custom_questions import (  # noqa: E402
    ChoiceOption,
    CustomQuestionDraft,
    validate_custom_question,
)
from mockexam_lifecycle.models.enums import MockExamStatus, MoveDirection  # noqa: E402
from mockexam_lifecycle.models.services import RandomSelectionRequest  # noqa: E402
from mockexam_lifecycle.models.stage import StageDefinition  # noqa: E402
from mockexam_lifecycle.policy import allowed_stages, classify_move, is_terminal  # noqa: E402
from mockexam_lifecycle.reducer import (  # noqa: E402
    AddCustomQuestion,
    SelectStage,
    SetField,
    UpdateInstruction,
)
from mockexam_lifecycle.registry import StageRegistry  # noqa: E402
from mockexam_lifecycle.wizard import StatusTransitionWizard, SubmitOutcome  # noqa: E402

# ---------------------------------------------------------------------------
# Constants for the simulation
# ---------------------------------------------------------------------------

MAIN_PATH: list[MockExamStatus] = [
    MockExamStatus.DRAFT,
    MockExamStatus.PLANNED,
    MockExamStatus.SCHEDULED,
    MockExamStatus.MATERIALS_READY,
    MockExamStatus.IN_PROGRESS,
    MockExamStatus.GRADING,
    MockExamStatus.MODERATION,
    MockExamStatus.ANALYTICS_RELEASED,
    MockExamStatus.COMPLETED,
]

# Mock answers per field kind; text kinds get the field label instead.
_MOCK_VALUES: dict[str, Any] = {
    "checkbox": True,
    "date": "2026-05-12",
    "datetime": "2026-05-12T09:00",
    "time": "09:00",
    "number": 1,
}

_INSTRUCTIONS = [
    "Arrive 15 minutes early. Calculators allowed.",
    "Collect phones before the start and keep the seating plan.",
]

_MAX_STEPS = 20

console = Console()
_quiet = False


def _print(*args, **kwargs) -> None:
    """Print wrapper that respects the --quiet flag."""
    if not _quiet:
        console.print(*args, **kwargs)


# ---------------------------------------------------------------------------
# Mock answers
# ---------------------------------------------------------------------------

def mock_field_values(definition: StageDefinition) -> dict[str, Any]:
    """Values for every required field plus the notes field."""
    values: dict[str, Any] = {}
    for f in definition.fields:
        if not f.required and f.key != definition.notes_field_key:
            continue
        if f.type in _MOCK_VALUES:
            values[f.key] = _MOCK_VALUES[f.type]
        else:
            values[f.key] = f"{f.label} (simulated)"
    return values


def mock_custom_question() -> dict[str, Any]:
    draft = CustomQuestionDraft(
        prompt="Which gas is produced at the anode during electrolysis of brine?",
        options=[
            ChoiceOption(text="Chlorine", is_correct=True),
            ChoiceOption(text="Hydrogen"),
            ChoiceOption(text="Oxygen"),
        ],
        marks=2,
    )
    errors = validate_custom_question(draft)
    if errors:
        raise RuntimeError(f"Simulated custom question is invalid: {errors}")
    return draft.to_selection_payload()


async def prepare_stage(wizard: StatusTransitionWizard, definition: StageDefinition) -> None:
    """Fill the active stage's checklist and sub-forms."""
    for key, value in mock_field_values(definition).items():
        wizard.dispatch(SetField(stage=definition.status, key=key, value=value))
        _print(f"    [dim]{key}:[/] {value}")

    if definition.show_instructions_setup:
        for index, text in enumerate(_INSTRUCTIONS):
            wizard.dispatch(UpdateInstruction(index=index, instructions=text))
        _print(f"    [dim]instructions:[/] {len(_INSTRUCTIONS)} blocks")

    if definition.show_question_selection:
        await wizard.add_random_questions(
            RandomSelectionRequest(subject_id="chemistry", total_questions=2)
        )
        wizard.dispatch(AddCustomQuestion(payload=mock_custom_question()))
        for item in wizard.state.questions.items:
            label = item.question_id or item.prompt
            _print(f"    [dim]Q{item.sequence}:[/] {label} ({item.marks or 0:g} marks)")


# ---------------------------------------------------------------------------
# Path selection
# ---------------------------------------------------------------------------

def next_stage(current: MockExamStatus, random_mode: bool) -> MockExamStatus:
    if not random_mode:
        return MAIN_PATH[MAIN_PATH.index(current) + 1]
    forward = sorted(
        (
            s for s in allowed_stages(current)
            if s is not MockExamStatus.CANCELLED
            and classify_move(current, s) is MoveDirection.FORWARD
        ),
        key=lambda s: s.value,
    )
    return random.choice(forward)


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

def log_outcome(outcome: SubmitOutcome, verbose: bool) -> None:
    if outcome.ok:
        _print(f"  [green]✓[/] {outcome.message}")
    else:
        _print(f"  [red]✗[/] {outcome.status.value}: {outcome.message}")
        for key, message in outcome.errors.items():
            _print(f"    [red]{key}[/]: {message}")
    if verbose and outcome.payload is not None:
        wire = outcome.payload.model_dump(mode="json", by_alias=True, exclude_none=True)
        _print(json.dumps(wire, indent=2, ensure_ascii=False))


def print_summary(repo: MockWizardRepository, registry: StageRegistry, trail: list[tuple]) -> None:
    console.print()
    console.rule("[bold]Lifecycle Summary")

    table = Table(title="Transitions", show_lines=True)
    table.add_column("#", style="dim", width=4)
    table.add_column("From", min_width=18)
    table.add_column("To", min_width=18)
    table.add_column("Direction", width=10)
    table.add_column("Result", width=10)
    for i, (current, target, outcome) in enumerate(trail, 1):
        table.add_row(
            str(i),
            registry.label_for(current),
            registry.label_for(target),
            classify_move(current, target).value,
            "[green]OK[/]" if outcome.ok else f"[red]{outcome.status.value}[/]",
        )
    console.print(table)

    context = repo.contexts[EXAM_ID]
    progress = Table(title="Stage progress")
    progress.add_column("Stage", min_width=18)
    progress.add_column("Completed", width=10)
    progress.add_column("Notes")
    for record in context.stage_progress:
        progress.add_row(
            registry.label_for(record.stage),
            "yes" if record.completed else "no",
            record.notes or "",
        )
    console.print(progress)
    console.print(
        f"  Final status: [bold]{registry.label_for(context.exam.status)}[/]"
        f"  questions: {len(context.question_selections)}"
        f"  instructions: {len(context.instructions)}"
    )


# ---------------------------------------------------------------------------
# Simulation
# ---------------------------------------------------------------------------

async def run_simulation(
    random_mode: bool,
    cancel_at: MockExamStatus | None,
    verbose: bool,
    quiet: bool,
) -> bool:
    """Walk the exam to a terminal stage; returns True if every step succeeded."""
    global _quiet
    _quiet = quiet

    registry = StageRegistry()
    registry.load()
    repo = MockWizardRepository(make_context(MockExamStatus.DRAFT, bank=list(SAMPLE_BANK)))
    wizard = StatusTransitionWizard(repo, registry, sampler=FakeSampler(SAMPLE_BANK))

    await wizard.open(EXAM_ID, MockExamStatus.DRAFT)
    trail: list[tuple] = []

    for _ in range(_MAX_STEPS):
        current = wizard.state.current_status
        if is_terminal(current):
            break
        if cancel_at is not None and current is cancel_at:
            target = MockExamStatus.CANCELLED
        else:
            target = next_stage(current, random_mode)

        definition = registry.require(target)
        _print(
            f"\n[bold cyan]{registry.label_for(current)} → {definition.label}[/]"
            f" [dim]({classify_move(current, target).value})[/]"
        )
        wizard.dispatch(SelectStage(stage=target))
        await prepare_stage(wizard, definition)

        outcome = await wizard.submit()
        trail.append((current, target, outcome))
        log_outcome(outcome, verbose)
        if not outcome.ok:
            break

    if not quiet:
        print_summary(repo, registry, trail)
    return all(outcome.ok for _, _, outcome in trail) and is_terminal(
        wizard.state.current_status
    )


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Simulate a mock exam lifecycle with a mocked repository.",
    )
    parser.add_argument(
        "--random",
        action=argparse.BooleanOptionalAction,
        default=False,
        help="Pick a random forward stage at each step (default: main path).",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="RNG seed for --random.",
    )
    parser.add_argument(
        "--cancel-at",
        choices=[s.value for s in MockExamStatus if not is_terminal(s)],
        default=None,
        help="Cancel the exam once it reaches this stage.",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Print every transition payload as JSON",
    )
    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress all output (exit code still reflects success/failure)",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    seed = args.seed if args.seed is not None else random.randrange(1_000_000)
    random.seed(seed)
    if args.random and not args.quiet:
        console.print(f"[dim]RNG seed: {seed}[/]")

    cancel_at = MockExamStatus(args.cancel_at) if args.cancel_at else None
    ok = asyncio.run(run_simulation(args.random, cancel_at, args.verbose, args.quiet))
    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
