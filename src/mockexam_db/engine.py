"""Process-wide async engine and session factory.

Both are built on first use from ``get_async_url()`` and the ``PG_POOL_SIZE``,
``PG_MAX_OVERFLOW`` and ``PG_ECHO`` variables.  ``dispose_engine()`` drops
them so the next call rebuilds from the current environment.
"""

import logging
import os
from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from mockexam_db.config import get_async_url

logger = logging.getLogger(__name__)

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def _engine_options() -> dict[str, Any]:
    return {
        "pool_size": int(os.getenv("PG_POOL_SIZE", "5")),
        "max_overflow": int(os.getenv("PG_MAX_OVERFLOW", "10")),
        "echo": os.getenv("PG_ECHO", "").lower() in ("1", "true", "yes"),
        "pool_pre_ping": True,
    }


def get_engine() -> AsyncEngine:
    global _engine
    if _engine is None:
        options = _engine_options()
        _engine = create_async_engine(get_async_url(), **options)
        logger.info(
            "Async engine ready (pool_size=%d, max_overflow=%d)",
            options["pool_size"], options["max_overflow"],
        )
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Sessions keep loaded rows usable after commit (``expire_on_commit=False``)."""
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(get_engine(), expire_on_commit=False)
    return _session_factory


async def dispose_engine() -> None:
    global _engine, _session_factory
    engine, _engine, _session_factory = _engine, None, None
    if engine is not None:
        await engine.dispose()
        logger.info("Async engine disposed")
