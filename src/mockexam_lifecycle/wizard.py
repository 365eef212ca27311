"""StatusTransitionWizard — orchestrates one stage change for one exam.

The wizard is the stateful shell around the pure pieces of the SDK:

  1. ``open`` loads the :class:`WizardContext` through the injected
     :class:`WizardRepository` and hydrates a :class:`WizardState`
  2. ``dispatch`` applies editing actions through the reducer
  3. ``submit`` validates the active stage, builds the transition payload
     and hands it to the repository

Every failure path is non-fatal: the wizard records what went wrong and
stays usable so the caller can correct and retry.

Usage::

    wizard = StatusTransitionWizard(repository, registry)
    await wizard.open(exam_id, MockExamStatus.SCHEDULED)
    wizard.dispatch(SelectStage(stage=MockExamStatus.MATERIALS_READY))
    wizard.dispatch(SetField(stage=..., key="papersPrinted", value=True))
    outcome = await wizard.submit()
"""

from __future__ import annotations

import enum
import logging
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel

from mockexam_lifecycle.editors.instructions import hydrate_instructions
from mockexam_lifecycle.editors.questions import hydrate_questions
from mockexam_lifecycle.errors import (
    ContextLoadError,
    LifecycleError,
    SubmissionErrorKind,
    classify_submission_error,
)
from mockexam_lifecycle.interfaces import ConflictDetector, QuestionSampler, WizardRepository
from mockexam_lifecycle.models.context import QuestionSelectionRecord, WizardContext
from mockexam_lifecycle.models.enums import MockExamStatus
from mockexam_lifecycle.models.payload import TransitionPayload
from mockexam_lifecycle.models.records import QuestionSelection
from mockexam_lifecycle.models.services import (
    ConflictCheckRequest,
    ConflictReport,
    RandomSelectionRequest,
)
from mockexam_lifecycle.payload import BUILD_FAILURE_NOTICE, build_transition_payload
from mockexam_lifecycle.policy import allowed_stages
from mockexam_lifecycle.reducer import (
    AddRandomSelection,
    SetErrors,
    WizardAction,
    WizardState,
    initial_state,
    parse_action,
    reduce,
)
from mockexam_lifecycle.registry import StageRegistry
from mockexam_lifecycle.validation import INCOMPLETE_STAGE_NOTICE, validate_stage

logger = logging.getLogger(__name__)

LOADING_NOTICE = "Wizard data is still loading. Please wait..."
LOAD_FAILED_NOTICE = "Failed to load exam data. Please close and reopen the wizard."
EXAM_MISSING_NOTICE = (
    "Exam data is incomplete. Please check your permissions and try again."
)
SUBMITTING_NOTICE = "A status update is already in progress."
NOT_OPEN_NOTICE = "The wizard has not been opened for an exam."

# Field key that receives persisted notes when a stage has no notes field.
FALLBACK_NOTES_KEY = "notes"


class SubmitStatus(str, enum.Enum):
    """How a submit attempt ended."""

    SUCCESS = "success"
    BLOCKED = "blocked"          # loading, already submitting, or load failed
    INVALID = "invalid"          # stage checklist incomplete
    BUILD_FAILED = "build_failed"
    FAILED = "failed"            # the repository rejected the transition


class SubmitOutcome(BaseModel):
    """Result of :meth:`StatusTransitionWizard.submit`.

    ``message`` is the user-facing notice; ``errors`` carries field-level
    messages when ``status`` is ``invalid``.
    """

    status: SubmitStatus
    message: str
    errors: dict[str, str] = {}
    payload: Optional[TransitionPayload] = None
    failure_kind: Optional[SubmissionErrorKind] = None

    @property
    def ok(self) -> bool:
        return self.status is SubmitStatus.SUCCESS


class StageOverview(BaseModel):
    """One row of the stage picker."""

    status: MockExamStatus
    label: str
    description: str = ""
    emphasis: list[str] = []
    allowed: bool
    active: bool
    current: bool
    completed: bool = False
    completed_at: Optional[datetime] = None


def _selection_from_record(record: QuestionSelectionRecord) -> QuestionSelection:
    # Slots without explicit marks fall back to the bank item's marks.
    marks = record.marks if record.marks is not None else record.bank_marks
    return QuestionSelection(
        id=record.id,
        source_type=record.source_type,
        question_id=record.question_id,
        custom_question=record.custom_question,
        marks=marks,
        sequence=record.sequence,
        is_optional=record.is_optional,
    )


class StatusTransitionWizard:
    """Stateful orchestrator for moving one exam to another stage.

    Args:
        repository: persistence for context loading and submission
        registry: loaded stage catalog
        sampler: optional random question sampler
        detector: optional scheduling-conflict detector
    """

    def __init__(
        self,
        repository: WizardRepository,
        registry: StageRegistry,
        sampler: QuestionSampler | None = None,
        detector: ConflictDetector | None = None,
    ) -> None:
        self._repo = repository
        self._registry = registry
        self._sampler = sampler
        self._detector = detector

        self.state: WizardState | None = None
        self.context: WizardContext | None = None
        self.load_error: ContextLoadError | None = None
        self.is_loading = False
        self.is_submitting = False
        self.conflict_report: ConflictReport | None = None

    # ------------------------------------------------------------------
    # Loading & hydration
    # ------------------------------------------------------------------

    async def open(self, exam_id: str, current_status: MockExamStatus | str) -> WizardState:
        """Load the exam's context and reset the editing state.

        A failed load is recorded in :attr:`load_error` (and blocks
        submission) rather than raised.
        """
        status = MockExamStatus(current_status)
        self.state = initial_state(exam_id, status)
        self.context = None
        self.load_error = None
        self.conflict_report = None
        self.is_loading = True
        try:
            context = await self._repo.load_wizard_context(exam_id)
        except Exception as exc:
            logger.exception("Failed to load wizard context for exam %s", exam_id)
            self.load_error = ContextLoadError(LOAD_FAILED_NOTICE)
            self.load_error.__cause__ = exc
            return self.state
        finally:
            self.is_loading = False

        if context is None:
            logger.warning("Wizard context for exam %s returned no exam", exam_id)
            self.load_error = ContextLoadError(EXAM_MISSING_NOTICE)
            return self.state

        self.context = context
        self.state = self._hydrate(self.state, context)
        logger.info(
            "Wizard opened: exam=%s status=%s instructions=%d selections=%d",
            exam_id, status.value,
            len(context.instructions), len(context.question_selections),
        )
        return self.state

    def _hydrate(self, state: WizardState, context: WizardContext) -> WizardState:
        form_state: dict[MockExamStatus, dict[str, Any]] = {}
        for record in context.stage_progress:
            values = dict(record.requirements or {})
            if record.notes:
                definition = self._registry.get(record.stage)
                notes_key = (
                    definition.notes_field_key
                    if definition and definition.notes_field_key
                    else FALLBACK_NOTES_KEY
                )
                values[notes_key] = record.notes
            form_state[record.stage] = values

        return state.model_copy(
            update={
                "form_state": form_state,
                "errors": {},
                "instructions": hydrate_instructions(context.instructions),
                "questions": hydrate_questions(
                    [_selection_from_record(r) for r in context.question_selections]
                ),
                "question_bank": list(context.question_bank),
            }
        )

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    def _require_state(self) -> WizardState:
        if self.state is None:
            raise LifecycleError(NOT_OPEN_NOTICE)
        return self.state

    def dispatch(self, action: WizardAction | dict) -> WizardState:
        """Apply one editing action; raw dicts are parsed first."""
        state = self._require_state()
        if isinstance(action, dict):
            action = parse_action(action)
        self.state = reduce(state, action)
        return self.state

    async def add_random_questions(self, request: RandomSelectionRequest) -> WizardState:
        """Ask the sampler for bank questions and append them to the paper."""
        state = self._require_state()
        if self._sampler is None:
            raise LifecycleError("No question sampler is configured")
        request = request.model_copy(
            update={
                "exclude_question_ids": list(
                    dict.fromkeys(
                        [*request.exclude_question_ids, *state.questions.selected_bank_ids]
                    )
                )
            }
        )
        result = await self._sampler.sample(request)
        logger.debug("Sampler returned %d questions", len(result.items))
        return self.dispatch(AddRandomSelection(items=result.items))

    async def check_conflicts(self, request: ConflictCheckRequest) -> ConflictReport:
        """Check a proposed slot for this exam against the calendar.

        The report is kept on :attr:`conflict_report` for display; it does
        not block submission.
        """
        state = self._require_state()
        if self._detector is None:
            raise LifecycleError("No conflict detector is configured")
        if request.exclude_exam_id is None:
            request = request.model_copy(update={"exclude_exam_id": state.exam_id})
        report = await self._detector.detect(request)
        logger.info(
            "Conflict check for exam %s: %d conflicts, %d warnings",
            state.exam_id, len(report.conflicts), len(report.warnings),
        )
        self.conflict_report = report
        return report

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def _blocked_reason(self) -> str | None:
        if self.is_loading:
            return LOADING_NOTICE
        if self.is_submitting:
            return SUBMITTING_NOTICE
        if self.load_error is not None:
            return str(self.load_error)
        if self.state is None:
            return NOT_OPEN_NOTICE
        if self.context is None:
            return LOAD_FAILED_NOTICE
        return None

    def validate_active_stage(self) -> dict[str, str]:
        """Validate the active stage and record the errors on the state."""
        state = self._require_state()
        definition = self._registry.get(state.active_stage)
        if definition is None:
            # Nothing to check; payload assembly reports the missing definition.
            return {}
        result = validate_stage(
            definition,
            state.form_state.get(state.active_stage),
            state.instructions.entries,
            state.questions.items,
        )
        self.state = reduce(state, SetErrors(stage=state.active_stage, errors=result.errors))
        return result.errors

    async def submit(self) -> SubmitOutcome:
        """Validate, build and persist the transition to the active stage."""
        blocked = self._blocked_reason()
        if blocked is not None:
            logger.info("Submit blocked: %s", blocked)
            return SubmitOutcome(status=SubmitStatus.BLOCKED, message=blocked)

        state = self._require_state()
        errors = self.validate_active_stage()
        if errors:
            return SubmitOutcome(
                status=SubmitStatus.INVALID,
                message=INCOMPLETE_STAGE_NOTICE,
                errors=errors,
            )
        state = self._require_state()

        result = build_transition_payload(
            exam_id=state.exam_id,
            current_status=state.current_status,
            target_status=state.active_stage,
            context=self.context,
            registry=self._registry,
            form_state=state.form_state,
            instructions=state.instructions,
            questions=state.questions,
        )
        if not result.ok:
            return SubmitOutcome(status=SubmitStatus.BUILD_FAILED, message=BUILD_FAILURE_NOTICE)

        payload = result.payload
        self.is_submitting = True
        try:
            await self._repo.submit_transition(payload)
        except Exception as exc:
            logger.error("Failed to transition exam %s: %s", state.exam_id, exc)
            failure = classify_submission_error(exc)
            return SubmitOutcome(
                status=SubmitStatus.FAILED,
                message=failure.message,
                payload=payload,
                failure_kind=failure.kind,
            )
        finally:
            self.is_submitting = False

        label = self._registry.label_for(payload.target_status)
        logger.info(
            "Exam %s moved %s -> %s",
            state.exam_id, payload.current_status.value, payload.target_status.value,
        )
        # Reload so persisted ids replace the editor's unsaved rows.
        await self.open(state.exam_id, payload.target_status)
        return SubmitOutcome(
            status=SubmitStatus.SUCCESS,
            message=f"Status updated to {label}",
            payload=payload,
        )

    # ------------------------------------------------------------------
    # Read helpers
    # ------------------------------------------------------------------

    def stage_overview(self) -> list[StageOverview]:
        """Every defined stage in rank order with its picker flags."""
        state = self._require_state()
        reachable = allowed_stages(state.current_status)
        progress = {
            record.stage: record
            for record in (self.context.stage_progress if self.context else [])
        }
        rows: list[StageOverview] = []
        for definition in self._registry.ordered():
            record = progress.get(definition.status)
            rows.append(
                StageOverview(
                    status=definition.status,
                    label=definition.label,
                    description=definition.description or "",
                    emphasis=list(definition.emphasis),
                    allowed=definition.status in reachable,
                    active=definition.status is state.active_stage,
                    current=definition.status is state.current_status,
                    completed=bool(record and record.completed),
                    completed_at=record.completed_at if record else None,
                )
            )
        return rows
