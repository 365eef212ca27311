"""MockExamInstruction ORM model — an audience-tagged instruction block."""

import uuid

from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from mockexam_db.models.base import Base, TimestampMixin
from mockexam_lifecycle.models.enums import InstructionAudience


class MockExamInstruction(TimestampMixin, Base):
    __tablename__ = "mock_exam_instructions"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    mock_exam_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("mock_exams.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    audience: Mapped[InstructionAudience] = mapped_column(String(20), nullable=False)
    instructions: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_by: Mapped[str | None] = mapped_column(Text, nullable=True)
