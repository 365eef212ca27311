"""Create the mock exam lifecycle tables.

Initial migration: exams, the shared question bank, per-stage checklist
progress, instruction blocks, question slots and the status history log.

Revision ID: 20261019_lifecycle
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP, UUID

# revision identifiers, used by Alembic.
revision = "20261019_lifecycle"
down_revision = None
branch_labels = None
depends_on = None

STATUS_VALUES = (
    "'draft', 'planned', 'scheduled', 'materials_ready', 'in_progress', "
    "'grading', 'moderation', 'analytics_released', 'completed', 'cancelled'"
)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", TIMESTAMP(timezone=True), nullable=False),
        sa.Column("updated_at", TIMESTAMP(timezone=True), nullable=False),
    ]


def _exam_fk() -> sa.Column:
    return sa.Column(
        "mock_exam_id",
        UUID(as_uuid=True),
        sa.ForeignKey("mock_exams.id", ondelete="CASCADE"),
        nullable=False,
    )


def upgrade() -> None:
    # --- Exams ---
    op.create_table(
        "mock_exams",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("title", sa.Text, nullable=False),
        sa.Column(
            "status",
            sa.String(30),
            nullable=False,
            server_default=sa.text("'draft'"),
        ),
        sa.Column("subject_id", sa.Text, nullable=True),
        sa.Column("subject_name", sa.Text, nullable=True),
        sa.Column("board_name", sa.Text, nullable=True),
        sa.Column("programme_name", sa.Text, nullable=True),
        sa.Column("scheduled_date", sa.Date, nullable=True),
        sa.Column("scheduled_time", sa.Time, nullable=True),
        sa.Column("duration_minutes", sa.Integer, nullable=True),
        sa.Column("created_by", sa.Text, nullable=True),
        *_timestamps(),
        sa.CheckConstraint(f"status IN ({STATUS_VALUES})", name="ck_mock_exam_status"),
    )
    op.create_index("ix_mock_exams_status", "mock_exams", ["status"])

    # --- Question bank (read-mostly) ---
    op.create_table(
        "question_bank_items",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("question_number", sa.Integer, nullable=True),
        sa.Column("question_description", sa.Text, nullable=True),
        sa.Column("type", sa.String(30), nullable=True),
        sa.Column("marks", sa.Float, nullable=True),
        sa.Column("status", sa.String(20), nullable=True),
        sa.Column("year", sa.Integer, nullable=True),
        sa.Column("difficulty_level", sa.String(10), nullable=True),
        sa.Column("subject_id", sa.Text, nullable=True),
        sa.Column("subject_name", sa.Text, nullable=True),
        sa.Column("topic_id", sa.Text, nullable=True),
        sa.Column("topic_name", sa.Text, nullable=True),
        sa.Column("subtopic_id", sa.Text, nullable=True),
        sa.Column("subtopic_name", sa.Text, nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_question_bank_subject", "question_bank_items", ["subject_id"])

    # --- Stage checklist progress: one row per (exam, stage) ---
    op.create_table(
        "mock_exam_stage_progress",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        _exam_fk(),
        sa.Column("stage", sa.String(30), nullable=False),
        sa.Column(
            "requirements",
            JSONB,
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        sa.Column(
            "completed",
            sa.Boolean,
            nullable=False,
            server_default=sa.text("false"),
        ),
        sa.Column("completed_at", TIMESTAMP(timezone=True), nullable=True),
        sa.Column("completed_by", sa.Text, nullable=True),
        sa.Column("notes", sa.Text, nullable=True),
        *_timestamps(),
        sa.UniqueConstraint(
            "mock_exam_id", "stage", name="uq_stage_progress_exam_stage"
        ),
    )
    op.create_index(
        "ix_mock_exam_stage_progress_mock_exam_id",
        "mock_exam_stage_progress",
        ["mock_exam_id"],
    )

    # --- Instruction blocks ---
    op.create_table(
        "mock_exam_instructions",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        _exam_fk(),
        sa.Column("audience", sa.String(20), nullable=False),
        sa.Column("instructions", sa.Text, nullable=False, server_default=sa.text("''")),
        sa.Column("created_by", sa.Text, nullable=True),
        *_timestamps(),
    )
    op.create_index(
        "ix_mock_exam_instructions_mock_exam_id",
        "mock_exam_instructions",
        ["mock_exam_id"],
    )

    # --- Question slots ---
    op.create_table(
        "mock_exam_questions",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        _exam_fk(),
        sa.Column("source_type", sa.String(10), nullable=False),
        sa.Column(
            "question_id",
            UUID(as_uuid=True),
            sa.ForeignKey("question_bank_items.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("custom_question", JSONB, nullable=True),
        sa.Column("marks", sa.Float, nullable=True),
        sa.Column("sequence", sa.Integer, nullable=False),
        sa.Column(
            "is_optional",
            sa.Boolean,
            nullable=False,
            server_default=sa.text("false"),
        ),
        *_timestamps(),
        sa.CheckConstraint(
            "(source_type = 'bank' AND custom_question IS NULL) "
            "OR (source_type = 'custom' AND question_id IS NULL)",
            name="ck_question_source",
        ),
        sa.CheckConstraint("sequence >= 1", name="ck_question_sequence_positive"),
    )
    op.create_index(
        "ix_mock_exam_questions_mock_exam_id",
        "mock_exam_questions",
        ["mock_exam_id"],
    )

    # --- Status history (append-only) ---
    op.create_table(
        "mock_exam_status_history",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        _exam_fk(),
        sa.Column("old_status", sa.String(30), nullable=True),
        sa.Column("new_status", sa.String(30), nullable=False),
        sa.Column("change_reason", sa.Text, nullable=True),
        sa.Column("changed_by", sa.Text, nullable=True),
        sa.Column("created_at", TIMESTAMP(timezone=True), nullable=False),
    )
    op.create_index(
        "ix_status_history_exam_created",
        "mock_exam_status_history",
        ["mock_exam_id", "created_at"],
    )


def downgrade() -> None:
    op.drop_table("mock_exam_status_history")
    op.drop_table("mock_exam_questions")
    op.drop_table("mock_exam_instructions")
    op.drop_table("mock_exam_stage_progress")
    op.drop_table("question_bank_items")
    op.drop_table("mock_exams")
