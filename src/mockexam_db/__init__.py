"""mockexam_db — PostgreSQL persistence layer for the mock exam lifecycle.

This package provides the ORM models, async engine factory, and
repositories for loading wizard contexts and persisting stage transitions.
It is designed to be consumed by the FastAPI server.
"""

from mockexam_db.engine import dispose_engine, get_engine, get_session_factory
from mockexam_db.models import (
    MockExam,
    MockExamInstruction,
    MockExamQuestion,
    MockExamStageProgress,
    MockExamStatusHistory,
    QuestionBankItemRow,
)
from mockexam_db.repository import MockExamRepository, SqlWizardRepository

__all__ = [
    "MockExam",
    "MockExamInstruction",
    "MockExamQuestion",
    "MockExamStageProgress",
    "MockExamStatusHistory",
    "QuestionBankItemRow",
    "dispose_engine",
    "get_engine",
    "get_session_factory",
    "MockExamRepository",
    "SqlWizardRepository",
]
