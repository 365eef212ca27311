"""ORM models for mockexam_db."""

from mockexam_db.models.base import Base
from mockexam_db.models.exam import MockExam
from mockexam_db.models.instruction import MockExamInstruction
from mockexam_db.models.question import MockExamQuestion
from mockexam_db.models.question_bank import QuestionBankItemRow
from mockexam_db.models.stage_progress import MockExamStageProgress
from mockexam_db.models.status_history import MockExamStatusHistory

__all__ = [
    "Base",
    "MockExam",
    "MockExamInstruction",
    "MockExamQuestion",
    "MockExamStageProgress",
    "MockExamStatusHistory",
    "QuestionBankItemRow",
]
