"""Async repositories for mock exams and their lifecycle data.

All ``MockExamRepository`` methods accept an ``AsyncSession`` so the caller
controls transaction boundaries; methods only ``flush()``.  The FastAPI
``get_db`` dependency commits on success and rolls back on error, which
makes a whole transition atomic.

``SqlWizardRepository`` binds a session and the acting user to the
``WizardRepository`` interface the SDK expects.

The repository checks structure (the exam exists, rows belong to it, the
status the caller saw is still current, the edge is in the graph) but not
stage checklists; those are validated before a payload is built.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Iterable, Sequence

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from mockexam_db.models import (
    MockExam,
    MockExamInstruction,
    MockExamQuestion,
    MockExamStageProgress,
    MockExamStatusHistory,
    QuestionBankItemRow,
)
from mockexam_lifecycle.errors import StatusConflictError
from mockexam_lifecycle.interfaces import WizardRepository
from mockexam_lifecycle.models.context import (
    ExamSummary,
    InstructionRecord,
    QuestionBankItem,
    QuestionSelectionRecord,
    StageProgressRecord,
    StatusHistoryEntry,
    WizardContext,
)
from mockexam_lifecycle.models.enums import MockExamStatus, SourceType
from mockexam_lifecycle.models.payload import (
    InstructionUpsert,
    SelectedQuestionSubmission,
    TransitionPayload,
)
from mockexam_lifecycle.policy import require_transition

logger = logging.getLogger(__name__)

# Upper bound on bank items returned with a wizard context.
QUESTION_BANK_LIMIT = 500


def as_uuid(value: str | uuid.UUID | None) -> uuid.UUID | None:
    """Parse an id; malformed ids are treated as unknown (None)."""
    if value is None or isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


def _uuids(values: Iterable[str]) -> list[uuid.UUID]:
    return [u for u in (as_uuid(v) for v in values) if u is not None]


def _str_or_none(value: uuid.UUID | None) -> str | None:
    return str(value) if value is not None else None


class MockExamRepository:
    """Async read/write operations on the mock exam tables."""

    # ------------------------------------------------------------------
    # Exams
    # ------------------------------------------------------------------

    async def create_exam(
        self,
        db: AsyncSession,
        *,
        title: str,
        status: MockExamStatus = MockExamStatus.DRAFT,
        created_by: str | None = None,
        **details: Any,
    ) -> MockExam:
        """Insert a new exam row and return it.

        The caller must ``await db.commit()`` to persist.
        """
        exam = MockExam(title=title, status=status.value, created_by=created_by, **details)
        db.add(exam)
        await db.flush()
        return exam

    async def get_exam(self, db: AsyncSession, exam_id: str | uuid.UUID) -> MockExam | None:
        pk = as_uuid(exam_id)
        if pk is None:
            return None
        return await db.get(MockExam, pk)

    async def get_exam_for_update(
        self, db: AsyncSession, exam_id: str | uuid.UUID
    ) -> MockExam | None:
        """Fetch an exam with a row lock held until the transaction ends."""
        pk = as_uuid(exam_id)
        if pk is None:
            return None
        stmt = select(MockExam).where(MockExam.id == pk).with_for_update()
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    # ------------------------------------------------------------------
    # Reads for the wizard context
    # ------------------------------------------------------------------

    async def list_stage_progress(
        self, db: AsyncSession, exam_id: uuid.UUID
    ) -> list[MockExamStageProgress]:
        stmt = select(MockExamStageProgress).where(
            MockExamStageProgress.mock_exam_id == exam_id
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def list_instructions(
        self, db: AsyncSession, exam_id: uuid.UUID
    ) -> list[MockExamInstruction]:
        stmt = (
            select(MockExamInstruction)
            .where(MockExamInstruction.mock_exam_id == exam_id)
            .order_by(MockExamInstruction.created_at)
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def list_questions(
        self, db: AsyncSession, exam_id: uuid.UUID
    ) -> list[MockExamQuestion]:
        stmt = (
            select(MockExamQuestion)
            .where(MockExamQuestion.mock_exam_id == exam_id)
            .order_by(MockExamQuestion.sequence)
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def list_question_bank(
        self,
        db: AsyncSession,
        *,
        subject_id: str | None = None,
        ids: Sequence[uuid.UUID] | None = None,
        limit: int = QUESTION_BANK_LIMIT,
    ) -> list[QuestionBankItemRow]:
        """Bank items for a subject (or by id), in question-number order."""
        stmt = select(QuestionBankItemRow)
        if subject_id is not None:
            stmt = stmt.where(QuestionBankItemRow.subject_id == subject_id)
        if ids is not None:
            stmt = stmt.where(QuestionBankItemRow.id.in_(list(ids)))
        stmt = stmt.order_by(
            QuestionBankItemRow.question_number, QuestionBankItemRow.created_at
        ).limit(limit)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def add_bank_item(self, db: AsyncSession, **fields: Any) -> QuestionBankItemRow:
        """Insert a bank question (used for seeding)."""
        item = QuestionBankItemRow(**fields)
        db.add(item)
        await db.flush()
        return item

    async def list_status_history(
        self, db: AsyncSession, exam_id: uuid.UUID, *, limit: int = 50
    ) -> list[MockExamStatusHistory]:
        """Status changes for an exam, most recent first."""
        stmt = (
            select(MockExamStatusHistory)
            .where(MockExamStatusHistory.mock_exam_id == exam_id)
            .order_by(MockExamStatusHistory.created_at.desc())
            .limit(limit)
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())

    # ------------------------------------------------------------------
    # Writes for a transition
    # ------------------------------------------------------------------

    async def upsert_stage_progress(
        self,
        db: AsyncSession,
        exam_id: uuid.UUID,
        stage: MockExamStatus,
        *,
        requirements: dict[str, Any],
        completed: bool | None,
        user_id: str | None,
        notes: str | None = None,
        set_notes: bool = False,
    ) -> MockExamStageProgress:
        """Insert or update the checklist row for (exam, stage).

        ``completed`` is tri-state: True stamps completion, False clears it,
        None leaves it alone.  ``notes`` is written only when ``set_notes``
        is True so an untouched notes column keeps its value.
        """
        stmt = select(MockExamStageProgress).where(
            MockExamStageProgress.mock_exam_id == exam_id,
            MockExamStageProgress.stage == stage.value,
        )
        row = (await db.execute(stmt)).scalar_one_or_none()
        if row is None:
            row = MockExamStageProgress(mock_exam_id=exam_id, stage=stage.value)
            db.add(row)

        row.requirements = dict(requirements)
        if set_notes:
            row.notes = notes
        if completed is True:
            row.completed = True
            row.completed_at = datetime.now(timezone.utc)
            row.completed_by = user_id
        elif completed is False:
            row.completed = False
            row.completed_at = None
            row.completed_by = None

        await db.flush()
        return row

    async def delete_instructions(
        self, db: AsyncSession, exam_id: uuid.UUID, ids: Iterable[str]
    ) -> int:
        pks = _uuids(ids)
        if not pks:
            return 0
        stmt = delete(MockExamInstruction).where(
            MockExamInstruction.mock_exam_id == exam_id,
            MockExamInstruction.id.in_(pks),
        )
        result = await db.execute(stmt)
        return result.rowcount or 0

    async def upsert_instructions(
        self,
        db: AsyncSession,
        exam_id: uuid.UUID,
        instructions: Sequence[InstructionUpsert],
        user_id: str | None,
    ) -> list[MockExamInstruction]:
        """Update entries that carry an id and insert the rest.

        Raises:
            ValueError: an id does not belong to this exam.
        """
        rows: list[MockExamInstruction] = []
        for entry in instructions:
            if entry.id:
                row = await self._owned(db, MockExamInstruction, exam_id, entry.id)
                if row is None:
                    raise ValueError(f"Instruction not found: {entry.id}")
                row.audience = entry.audience.value
                row.instructions = entry.instructions
            else:
                row = MockExamInstruction(
                    mock_exam_id=exam_id,
                    audience=entry.audience.value,
                    instructions=entry.instructions,
                    created_by=user_id,
                )
                db.add(row)
            rows.append(row)
        await db.flush()
        return rows

    async def delete_questions(
        self, db: AsyncSession, exam_id: uuid.UUID, ids: Iterable[str]
    ) -> int:
        pks = _uuids(ids)
        if not pks:
            return 0
        stmt = delete(MockExamQuestion).where(
            MockExamQuestion.mock_exam_id == exam_id,
            MockExamQuestion.id.in_(pks),
        )
        result = await db.execute(stmt)
        return result.rowcount or 0

    async def upsert_questions(
        self,
        db: AsyncSession,
        exam_id: uuid.UUID,
        selections: Sequence[SelectedQuestionSubmission],
    ) -> list[MockExamQuestion]:
        """Update slots that carry an id and insert the rest.

        Bank slots store only ``question_id``; custom slots store only
        ``custom_question``.

        Raises:
            ValueError: an id does not belong to this exam, or a bank slot
                references a malformed question id.
        """
        rows: list[MockExamQuestion] = []
        for selection in selections:
            is_bank = selection.source_type is SourceType.BANK
            question_pk = as_uuid(selection.question_id) if is_bank else None
            if is_bank and question_pk is None:
                raise ValueError(f"Question not found: {selection.question_id}")
            values = {
                "source_type": selection.source_type.value,
                "question_id": question_pk,
                "custom_question": None if is_bank else selection.custom_question,
                "marks": selection.marks,
                "sequence": selection.sequence,
                "is_optional": selection.is_optional,
            }
            if selection.id:
                row = await self._owned(db, MockExamQuestion, exam_id, selection.id)
                if row is None:
                    raise ValueError(f"Question selection not found: {selection.id}")
                for key, value in values.items():
                    setattr(row, key, value)
            else:
                row = MockExamQuestion(mock_exam_id=exam_id, **values)
                db.add(row)
            rows.append(row)
        await db.flush()
        return rows

    async def set_status(
        self,
        db: AsyncSession,
        exam: MockExam,
        new_status: MockExamStatus,
        *,
        reason: str | None,
        user_id: str | None,
    ) -> MockExamStatusHistory | None:
        """Change the exam's status and log it.

        A no-op (same status) writes no history row.
        """
        old_status = MockExamStatus(exam.status)
        if old_status is new_status:
            return None
        exam.status = new_status.value
        entry = MockExamStatusHistory(
            mock_exam_id=exam.id,
            old_status=old_status.value,
            new_status=new_status.value,
            change_reason=reason,
            changed_by=user_id,
        )
        db.add(entry)
        await db.flush()
        return entry

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _owned(self, db: AsyncSession, model: type, exam_id: uuid.UUID, row_id: str):
        """Fetch a child row by id only if it belongs to *exam_id*."""
        pk = as_uuid(row_id)
        if pk is None:
            return None
        row = await db.get(model, pk)
        if row is None or row.mock_exam_id != exam_id:
            return None
        return row


# ----------------------------------------------------------------------
# ORM -> SDK model mapping
# ----------------------------------------------------------------------

def exam_summary(exam: MockExam) -> ExamSummary:
    return ExamSummary(
        id=str(exam.id),
        title=exam.title,
        status=MockExamStatus(exam.status),
        subject_id=exam.subject_id,
        subject_name=exam.subject_name,
        board_name=exam.board_name,
        programme_name=exam.programme_name,
        scheduled_date=exam.scheduled_date,
        scheduled_time=exam.scheduled_time,
        duration_minutes=exam.duration_minutes,
    )


def bank_item(row: QuestionBankItemRow) -> QuestionBankItem:
    return QuestionBankItem(
        id=str(row.id),
        question_number=row.question_number,
        question_description=row.question_description,
        type=row.type,
        marks=row.marks,
        status=row.status,
        year=row.year,
        topic_id=row.topic_id,
        topic_name=row.topic_name,
        subtopic_id=row.subtopic_id,
        subtopic_name=row.subtopic_name,
        subject_name=row.subject_name,
    )


def history_entry(row: MockExamStatusHistory) -> StatusHistoryEntry:
    return StatusHistoryEntry(
        id=str(row.id),
        mock_exam_id=str(row.mock_exam_id),
        old_status=MockExamStatus(row.old_status) if row.old_status else None,
        new_status=MockExamStatus(row.new_status),
        change_reason=row.change_reason,
        changed_by=row.changed_by,
        created_at=row.created_at,
    )


class SqlWizardRepository(WizardRepository):
    """``WizardRepository`` backed by PostgreSQL.

    Bound to one ``AsyncSession`` (one request) and the acting user, who is
    recorded as ``created_by`` / ``completed_by`` / ``changed_by``.
    """

    def __init__(
        self,
        db: AsyncSession,
        user_id: str | None,
        repo: MockExamRepository | None = None,
    ) -> None:
        self._db = db
        self._user_id = user_id
        self._repo = repo or MockExamRepository()

    async def load_wizard_context(self, exam_id: str) -> WizardContext | None:
        db = self._db
        exam = await self._repo.get_exam(db, exam_id)
        if exam is None:
            return None

        progress = await self._repo.list_stage_progress(db, exam.id)
        instructions = await self._repo.list_instructions(db, exam.id)
        questions = await self._repo.list_questions(db, exam.id)
        bank_rows = await self._repo.list_question_bank(db, subject_id=exam.subject_id)

        # Selected bank questions may fall outside the subject listing.
        bank = {str(row.id): row for row in bank_rows}
        missing = [
            q.question_id for q in questions
            if q.question_id is not None and str(q.question_id) not in bank
        ]
        if missing:
            for row in await self._repo.list_question_bank(db, ids=missing):
                bank[str(row.id)] = row

        def _bank_marks(question_id: uuid.UUID | None) -> float | None:
            row = bank.get(str(question_id)) if question_id else None
            return row.marks if row else None

        return WizardContext(
            exam=exam_summary(exam),
            stage_progress=[
                StageProgressRecord(
                    id=str(row.id),
                    mock_exam_id=str(row.mock_exam_id),
                    stage=MockExamStatus(row.stage),
                    requirements=row.requirements or {},
                    completed=row.completed,
                    completed_at=row.completed_at,
                    completed_by=row.completed_by,
                    notes=row.notes,
                )
                for row in progress
            ],
            instructions=[
                InstructionRecord(
                    id=str(row.id),
                    mock_exam_id=str(row.mock_exam_id),
                    audience=row.audience,
                    instructions=row.instructions or "",
                    created_by=row.created_by,
                    created_at=row.created_at,
                    updated_at=row.updated_at,
                )
                for row in instructions
            ],
            question_selections=[
                QuestionSelectionRecord(
                    id=str(row.id),
                    mock_exam_id=str(row.mock_exam_id),
                    source_type=SourceType(row.source_type),
                    question_id=_str_or_none(row.question_id),
                    custom_question=row.custom_question,
                    marks=row.marks,
                    sequence=row.sequence,
                    is_optional=row.is_optional,
                    bank_marks=_bank_marks(row.question_id),
                )
                for row in questions
            ],
            question_bank=[bank_item(row) for row in bank.values()],
        )

    async def submit_transition(self, payload: TransitionPayload) -> None:
        """Apply a transition inside the caller's transaction.

        Raises:
            ValueError: the exam (or a referenced row) does not exist.
            StatusConflictError: the exam's status changed since the
                payload was built.
            TransitionNotAllowedError: the edge is not in the graph.
        """
        db = self._db
        exam = await self._repo.get_exam_for_update(db, payload.exam_id)
        if exam is None:
            raise ValueError(f"Exam not found: {payload.exam_id}")

        persisted = MockExamStatus(exam.status)
        if persisted is not payload.current_status:
            raise StatusConflictError(payload.current_status, persisted)
        require_transition(persisted, payload.target_status)

        stage_data = payload.stage_data
        if stage_data is not None:
            await self._repo.upsert_stage_progress(
                db,
                exam.id,
                payload.target_status,
                requirements=stage_data.form_data,
                completed=stage_data.completed,
                user_id=self._user_id,
                notes=stage_data.notes,
                set_notes="notes" in stage_data.model_fields_set,
            )

            if stage_data.removed_instruction_ids:
                await self._repo.delete_instructions(
                    db, exam.id, stage_data.removed_instruction_ids
                )
            if stage_data.instructions:
                await self._repo.upsert_instructions(
                    db, exam.id, stage_data.instructions, self._user_id
                )

            bundle = stage_data.question_selections
            if bundle is not None:
                if bundle.removed_question_ids:
                    await self._repo.delete_questions(
                        db, exam.id, bundle.removed_question_ids
                    )
                if bundle.selected_questions:
                    await self._repo.upsert_questions(
                        db, exam.id, bundle.selected_questions
                    )

        await self._repo.set_status(
            db,
            exam,
            payload.target_status,
            reason=payload.reason,
            user_id=self._user_id,
        )
        logger.info(
            "Transition persisted: exam=%s %s -> %s by %s",
            payload.exam_id,
            payload.current_status.value,
            payload.target_status.value,
            self._user_id,
        )
