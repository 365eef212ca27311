"""QuestionBankItem ORM model — the shared pool of selectable questions.

The bank is owned by the question-authoring side of the product; this
package only reads it (plus a helper for seeding).
"""

import uuid

from sqlalchemy import Float, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from mockexam_db.models.base import Base, TimestampMixin


class QuestionBankItemRow(TimestampMixin, Base):
    __tablename__ = "question_bank_items"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    question_number: Mapped[int | None] = mapped_column(Integer, nullable=True)
    question_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    type: Mapped[str | None] = mapped_column(String(30), nullable=True)
    marks: Mapped[float | None] = mapped_column(Float, nullable=True)
    status: Mapped[str | None] = mapped_column(String(20), nullable=True)
    year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    difficulty_level: Mapped[str | None] = mapped_column(String(10), nullable=True)

    subject_id: Mapped[str | None] = mapped_column(Text, nullable=True)
    subject_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    topic_id: Mapped[str | None] = mapped_column(Text, nullable=True)
    topic_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    subtopic_id: Mapped[str | None] = mapped_column(Text, nullable=True)
    subtopic_name: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (Index("ix_question_bank_subject", "subject_id"),)
