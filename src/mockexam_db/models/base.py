"""SQLAlchemy declarative base and column helpers shared by all ORM models."""

from datetime import datetime, timezone

from sqlalchemy.dialects.postgresql import TIMESTAMP
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all ORM models in mockexam_db."""

    pass


class TimestampMixin:
    """``created_at`` / ``updated_at`` columns maintained on the Python side."""

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )
