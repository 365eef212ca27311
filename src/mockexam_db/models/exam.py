"""MockExam ORM model — one row per mock exam.

``status`` is the exam's current lifecycle stage.  It is only ever changed
through ``SqlWizardRepository.submit_transition`` so that every change is
paired with a history row.
"""

import uuid
from datetime import date, time

from sqlalchemy import CheckConstraint, Date, Index, Integer, String, Text, Time
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from mockexam_db.models.base import Base, TimestampMixin
from mockexam_lifecycle.models.enums import MockExamStatus

STATUS_VALUES = ", ".join(f"'{s.value}'" for s in MockExamStatus)


class MockExam(TimestampMixin, Base):
    __tablename__ = "mock_exams"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    title: Mapped[str] = mapped_column(Text, nullable=False)
    # Stored as the lowercase string value, not the Python name
    status: Mapped[MockExamStatus] = mapped_column(
        String(30), nullable=False, default=MockExamStatus.DRAFT
    )

    # --- Header details shown in the wizard ---
    subject_id: Mapped[str | None] = mapped_column(Text, nullable=True)
    subject_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    board_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    programme_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    scheduled_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    scheduled_time: Mapped[time | None] = mapped_column(Time, nullable=True)
    duration_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)

    created_by: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint(f"status IN ({STATUS_VALUES})", name="ck_mock_exam_status"),
        Index("ix_mock_exams_status", "status"),
    )

    def __repr__(self) -> str:
        return f"<MockExam(id={self.id!s}, title={self.title!r}, status={self.status!r})>"
