"""Request/response models for the external services behind the wizard.

Random question selection and scheduling-conflict detection are black boxes
to this package: only their input/output contracts are modelled here.  See
``mockexam_lifecycle.interfaces`` for the ABCs that consume them.
"""

from datetime import date, time
from typing import Any, Literal, Optional

from pydantic import BaseModel

from mockexam_lifecycle.models.context import QuestionBankItem


class DifficultyDistribution(BaseModel):
    """How many questions to draw per difficulty level."""

    easy: int = 0
    medium: int = 0
    hard: int = 0


class RandomSelectionRequest(BaseModel):
    """Criteria for drawing bank questions at random.

    ``topic_distribution`` maps topic id to a question count and takes
    precedence over ``difficulty_distribution`` when both are given.
    """

    subject_id: str
    school_ids: list[str] = []
    total_questions: int
    topic_distribution: Optional[dict[str, int]] = None
    difficulty_distribution: Optional[DifficultyDistribution] = None
    include_global: bool = True
    include_custom: bool = True
    # Questions already on the paper, so the sampler can skip them
    exclude_question_ids: list[str] = []


class RandomSelectionResult(BaseModel):
    """Questions drawn by a sampler, at most ``total_questions`` of them."""

    items: list[QuestionBankItem] = []


class ConflictCheckRequest(BaseModel):
    """A proposed exam slot to check against the calendar."""

    scheduled_date: date
    scheduled_time: Optional[time] = None
    duration_minutes: int
    school_ids: list[str] = []
    branch_ids: list[str] = []
    grade_level_ids: list[str] = []
    section_ids: list[str] = []
    teacher_ids: list[str] = []
    venue_ids: list[str] = []
    # Set when rescheduling an existing exam so it does not clash with itself
    exclude_exam_id: Optional[str] = None


class SchedulingConflict(BaseModel):
    """A hard clash with another booking."""

    type: Literal["exam_overlap", "teacher_busy", "venue_busy", "holiday"]
    severity: Literal["critical", "high", "medium"]
    message: str
    details: dict[str, Any] = {}


class SchedulingWarning(BaseModel):
    """A soft concern about the chosen slot."""

    type: Literal["tight_schedule", "weekend", "after_hours", "multiple_exams_day"]
    message: str
    suggestion: Optional[str] = None


class ConflictReport(BaseModel):
    conflicts: list[SchedulingConflict] = []
    warnings: list[SchedulingWarning] = []

    @property
    def has_conflicts(self) -> bool:
        return bool(self.conflicts)
