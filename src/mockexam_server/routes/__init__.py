"""Route registration for the stage catalog, exam and history routers."""

from fastapi import FastAPI

from mockexam_server.routes.exams import router as exams_router
from mockexam_server.routes.history import router as history_router
from mockexam_server.routes.stages import router as stages_router

ROUTERS = (stages_router, exams_router, history_router)


def register_routes(app: FastAPI, prefix: str = "/api/v1") -> None:
    for router in ROUTERS:
        app.include_router(router, prefix=prefix)
