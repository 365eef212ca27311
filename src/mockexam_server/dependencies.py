"""Request dependencies: DB session, settings, stage registry, caller, repositories.

A transition is all-or-nothing: repositories only ``flush()`` and
``get_db()`` owns the commit or rollback for the whole request.
"""

import hmac
from typing import AsyncGenerator

from fastapi import Depends, Header, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from mockexam_db.engine import get_session_factory
from mockexam_db.repository import MockExamRepository, SqlWizardRepository
from mockexam_lifecycle.registry import StageRegistry

from mockexam_server.config import ServerSettings


# ------------------------------------------------------------------
# Database session
# ------------------------------------------------------------------

async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield a session for one request; commit on success, rollback on error."""
    async with get_session_factory()() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        else:
            await session.commit()


# ------------------------------------------------------------------
# Application state
# ------------------------------------------------------------------

def get_settings(request: Request) -> ServerSettings:
    return request.app.state.settings


def get_registry(request: Request) -> StageRegistry:
    """The stage catalog loaded by the lifespan handler."""
    return request.app.state.registry


# ------------------------------------------------------------------
# Caller identity
# ------------------------------------------------------------------

def _check_proxy_secret(expected: str | None, provided: str | None) -> None:
    if not expected:
        return
    if not provided:
        raise HTTPException(status_code=403, detail="X-Proxy-Secret header is required")
    if not hmac.compare_digest(provided.encode(), expected.encode()):
        raise HTTPException(status_code=403, detail="Invalid proxy secret")


async def get_user_id(
    settings: ServerSettings = Depends(get_settings),
    x_user_id: str | None = Header(None, alias="X-User-ID"),
    x_proxy_secret: str | None = Header(None, alias="X-Proxy-Secret"),
) -> str:
    """The staff member making the request, taken from ``X-User-ID``.

    Missing identity is a 401.  Behind a trusted proxy the shared secret
    must match as well, otherwise 403.
    """
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="X-User-ID header is required")
    _check_proxy_secret(settings.trusted_proxy_secret, x_proxy_secret)
    return x_user_id.strip()


# ------------------------------------------------------------------
# Repositories
# ------------------------------------------------------------------

def get_exam_repository() -> MockExamRepository:
    return MockExamRepository()


async def get_wizard_repository(
    db: AsyncSession = Depends(get_db),
    user_id: str = Depends(get_user_id),
) -> SqlWizardRepository:
    """``WizardRepository`` bound to this request's session and caller."""
    return SqlWizardRepository(db, user_id)
