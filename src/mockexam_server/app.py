"""Application factory and CLI entry point.

``create_app()`` wires the stage catalog, the SDK error handlers and the
``/api/v1`` routers into a FastAPI application.  The catalog is loaded once
in the lifespan handler and shared through ``app.state.registry``; the
database engine is only touched lazily by request dependencies and by
``/health``.

``cli()`` backs the ``mockexam-server`` console script and runs uvicorn in
factory mode, so importing this module never builds an application.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from mockexam_db.engine import dispose_engine, get_engine
from mockexam_lifecycle.registry import StageRegistry

from mockexam_server.config import ServerSettings, load_settings
from mockexam_server.errors import (
    generic_error_handler,
    key_error_handler,
    value_error_handler,
)
from mockexam_server.routes import register_routes

logger = logging.getLogger(__name__)


def _configure_logging(level_name: str) -> None:
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


# ------------------------------------------------------------------
# Lifespan
# ------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings: ServerSettings = app.state.settings

    registry = StageRegistry(data_dir=settings.stage_data_dir)
    registry.load()
    app.state.registry = registry
    logger.info(
        "Serving %d stages from %s",
        len(registry), settings.stage_data_dir or "bundled catalog",
    )

    try:
        yield
    finally:
        await dispose_engine()


async def _probe_database() -> bool:
    try:
        async with get_engine().connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as exc:
        logger.error("Database probe failed: %s", exc)
        return False
    return True


# ------------------------------------------------------------------
# Factory
# ------------------------------------------------------------------

def create_app(settings: ServerSettings | None = None) -> FastAPI:
    """Build the mock exam lifecycle API."""
    settings = settings or load_settings()
    _configure_logging(settings.log_level)

    app = FastAPI(
        title="Mock Exam Lifecycle API",
        description="Stage catalog, status transitions and history for mock exams",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type", "X-User-ID", "X-Proxy-Secret"],
    )

    app.add_exception_handler(ValueError, value_error_handler)
    app.add_exception_handler(KeyError, key_error_handler)
    app.add_exception_handler(Exception, generic_error_handler)

    @app.get("/health")
    async def health() -> JSONResponse:
        """Readiness probe: catalog loaded and database reachable."""
        registry: StageRegistry | None = getattr(app.state, "registry", None)
        database_ok = await _probe_database()
        body = {
            "status": "ok" if database_ok and registry is not None else "error",
            "database": "ok" if database_ok else "unreachable",
            "stages": len(registry) if registry is not None else 0,
        }
        return JSONResponse(status_code=200 if body["status"] == "ok" else 503, content=body)

    register_routes(app, prefix=settings.api_prefix)
    return app


# ------------------------------------------------------------------
# CLI entry point
# ------------------------------------------------------------------

def cli() -> None:
    """Console-script entry point: ``mockexam-server``."""
    import uvicorn

    settings = load_settings()
    uvicorn.run(
        "mockexam_server.app:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
