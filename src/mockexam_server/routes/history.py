"""Status history endpoint — the audit trail of an exam's stage changes."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from mockexam_db.repository import MockExamRepository, history_entry
from mockexam_lifecycle.models.context import StatusHistoryEntry

from mockexam_server.config import DEFAULT_HISTORY_LIMIT, MAX_HISTORY_LIMIT
from mockexam_server.dependencies import get_db, get_exam_repository, get_user_id

router = APIRouter(tags=["history"])


@router.get("/exams/{exam_id}/history")
async def get_status_history(
    exam_id: str,
    limit: int = Query(DEFAULT_HISTORY_LIMIT, ge=1, le=MAX_HISTORY_LIMIT),
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
    repo: MockExamRepository = Depends(get_exam_repository),
) -> list[StatusHistoryEntry]:
    """Status changes for an exam, most recent first."""
    exam = await repo.get_exam(db, exam_id)
    if exam is None:
        raise ValueError(f"Exam not found: {exam_id}")
    rows = await repo.list_status_history(db, exam.id, limit=limit)
    return [history_entry(row) for row in rows]
