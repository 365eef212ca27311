"""MockExamStatusHistory ORM model — append-only log of status changes."""

import uuid
from datetime import datetime

from sqlalchemy import ForeignKey, Index, String, Text
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID
from sqlalchemy.orm import Mapped, mapped_column

from mockexam_db.models.base import Base, utcnow
from mockexam_lifecycle.models.enums import MockExamStatus


class MockExamStatusHistory(Base):
    __tablename__ = "mock_exam_status_history"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    mock_exam_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("mock_exams.id", ondelete="CASCADE"),
        nullable=False,
    )
    old_status: Mapped[MockExamStatus | None] = mapped_column(String(30), nullable=True)
    new_status: Mapped[MockExamStatus] = mapped_column(String(30), nullable=False)
    change_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    changed_by: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), nullable=False, default=utcnow
    )

    __table_args__ = (
        Index("ix_status_history_exam_created", "mock_exam_id", "created_at"),
    )
