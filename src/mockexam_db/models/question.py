"""MockExamQuestion ORM model — one question slot on an exam paper.

A slot is either bank-sourced (``question_id``) or custom-authored
(``custom_question`` JSONB).  ``sequence`` is kept contiguous by the
question editor before it reaches the database.
"""

import uuid

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Float,
    ForeignKey,
    Integer,
    String,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from mockexam_db.models.base import Base, TimestampMixin
from mockexam_lifecycle.models.enums import SourceType


class MockExamQuestion(TimestampMixin, Base):
    __tablename__ = "mock_exam_questions"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    mock_exam_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("mock_exams.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    source_type: Mapped[SourceType] = mapped_column(String(10), nullable=False)
    question_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("question_bank_items.id", ondelete="SET NULL"),
        nullable=True,
    )
    custom_question: Mapped[dict | None] = mapped_column(JSONB, nullable=True)
    marks: Mapped[float | None] = mapped_column(Float, nullable=True)
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)
    is_optional: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )

    __table_args__ = (
        CheckConstraint(
            "(source_type = 'bank' AND custom_question IS NULL) "
            "OR (source_type = 'custom' AND question_id IS NULL)",
            name="ck_question_source",
        ),
        CheckConstraint("sequence >= 1", name="ck_question_sequence_positive"),
    )
