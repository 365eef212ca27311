"""Wizard context models — the snapshot loaded when the wizard opens.

A ``WizardContext`` is what ``WizardRepository.load_wizard_context`` returns:
the exam summary plus everything already persisted for its lifecycle.

  - ExamSummary: header information about the exam
  - StageProgressRecord: one checklist row per (exam, stage), never deleted
  - InstructionRecord: a persisted instruction block
  - QuestionSelectionRecord: a persisted question slot
  - QuestionBankItem: a selectable question from the shared bank
"""

from datetime import date, datetime, time
from typing import Any, Optional

from pydantic import BaseModel

from mockexam_lifecycle.models.enums import (
    InstructionAudience,
    MockExamStatus,
    SourceType,
)


class ExamSummary(BaseModel):
    """Header information shown at the top of the wizard."""

    id: str
    title: str
    status: MockExamStatus
    subject_id: Optional[str] = None
    subject_name: Optional[str] = None
    board_name: Optional[str] = None
    programme_name: Optional[str] = None
    scheduled_date: Optional[date] = None
    scheduled_time: Optional[time] = None
    duration_minutes: Optional[int] = None


class StageProgressRecord(BaseModel):
    """Checklist values recorded for one stage of one exam."""

    id: Optional[str] = None
    mock_exam_id: str
    stage: MockExamStatus
    requirements: dict[str, Any] = {}
    completed: bool = False
    completed_at: Optional[datetime] = None
    completed_by: Optional[str] = None
    notes: Optional[str] = None


class InstructionRecord(BaseModel):
    """A persisted instruction block."""

    id: str
    mock_exam_id: str
    audience: InstructionAudience
    instructions: str = ""
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class QuestionBankItem(BaseModel):
    """A question available for selection from the shared bank."""

    id: str
    question_number: Optional[int] = None
    question_description: Optional[str] = None
    type: Optional[str] = None
    marks: Optional[float] = None
    status: Optional[str] = None
    year: Optional[int] = None
    topic_id: Optional[str] = None
    topic_name: Optional[str] = None
    subtopic_id: Optional[str] = None
    subtopic_name: Optional[str] = None
    subject_name: Optional[str] = None

    @property
    def preview(self) -> str:
        """One-line label for the question picker, e.g. ``Q3: Define... (2 marks)``."""
        base = self.question_description or "Question"
        truncated = f"{base[:90]}…" if len(base) > 90 else base
        if self.marks:
            marks = f"{self.marks:g} mark{'' if self.marks == 1 else 's'}"
        else:
            marks = "Unscored"
        prefix = f"Q{self.question_number}" if self.question_number else "Question"
        return f"{prefix}: {truncated} ({marks})"


class QuestionSelectionRecord(BaseModel):
    """A persisted question slot.

    ``bank_marks`` carries the bank item's default marks so the wizard can
    fall back to it when the slot has no explicit marks.
    """

    id: str
    mock_exam_id: str
    source_type: SourceType
    question_id: Optional[str] = None
    custom_question: Optional[dict[str, Any]] = None
    marks: Optional[float] = None
    sequence: int
    is_optional: bool = False
    bank_marks: Optional[float] = None


class WizardContext(BaseModel):
    """Everything the status wizard needs to render and hydrate its state."""

    exam: ExamSummary
    stage_progress: list[StageProgressRecord] = []
    instructions: list[InstructionRecord] = []
    question_selections: list[QuestionSelectionRecord] = []
    question_bank: list[QuestionBankItem] = []

    def find_bank_item(self, question_id: str) -> QuestionBankItem | None:
        for item in self.question_bank:
            if item.id == question_id:
                return item
        return None


class StatusHistoryEntry(BaseModel):
    """One recorded status change."""

    id: str
    mock_exam_id: str
    old_status: Optional[MockExamStatus] = None
    new_status: MockExamStatus
    change_reason: Optional[str] = None
    changed_by: Optional[str] = None
    created_at: datetime
