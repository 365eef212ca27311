"""MockExamStageProgress ORM model — checklist values per (exam, stage).

Rows are upserted on every transition into a stage and never deleted, so
the checklist entered for an earlier stage is kept when the exam moves on.
"""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, ForeignKey, String, Text, UniqueConstraint, text
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP, UUID
from sqlalchemy.orm import Mapped, mapped_column

from mockexam_db.models.base import Base, TimestampMixin
from mockexam_lifecycle.models.enums import MockExamStatus


class MockExamStageProgress(TimestampMixin, Base):
    __tablename__ = "mock_exam_stage_progress"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    mock_exam_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("mock_exams.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    stage: Mapped[MockExamStatus] = mapped_column(String(30), nullable=False)

    # Field values keyed by stage field key, notes field excluded
    requirements: Mapped[dict] = mapped_column(
        JSONB, nullable=False, server_default=text("'{}'::jsonb"), default=dict
    )
    completed: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        TIMESTAMP(timezone=True), nullable=True
    )
    completed_by: Mapped[str | None] = mapped_column(Text, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint("mock_exam_id", "stage", name="uq_stage_progress_exam_stage"),
    )
