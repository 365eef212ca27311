"""Exception handlers that turn lifecycle errors into HTTP responses.

Typed lifecycle errors map by class.  Other ``ValueError``s raised by the
repository (an unknown exam or row id) map by message.  Clients only ever
see a fixed message per status code; the original text goes to the log.
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from mockexam_lifecycle.errors import (
    DuplicateQuestionError,
    StatusConflictError,
    TransitionNotAllowedError,
)

logger = logging.getLogger(__name__)

_STATUS_BY_TYPE: tuple[tuple[type[ValueError], int], ...] = (
    (StatusConflictError, 409),
    (DuplicateQuestionError, 409),
    (TransitionNotAllowedError, 400),
)

_STATUS_BY_MESSAGE: tuple[tuple[str, int], ...] = (
    ("not found", 404),
)

_CLIENT_MESSAGES: dict[int, str] = {
    400: "Invalid request",
    404: "Resource not found",
    409: "The exam was changed by someone else. Reload and try again.",
}


def status_for(exc: ValueError) -> int:
    """HTTP status for a ``ValueError``; 400 when nothing more specific applies."""
    for exc_type, status in _STATUS_BY_TYPE:
        if isinstance(exc, exc_type):
            return status
    message = str(exc).lower()
    for fragment, status in _STATUS_BY_MESSAGE:
        if fragment in message:
            return status
    return 400


def _detail(status: int) -> dict:
    return {"detail": _CLIENT_MESSAGES.get(status, _CLIENT_MESSAGES[400])}


async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
    status = status_for(exc)
    logger.warning("%s %s -> %d: %s", request.method, request.url.path, status, exc)
    return JSONResponse(status_code=status, content=_detail(status))


async def key_error_handler(request: Request, exc: KeyError) -> JSONResponse:
    """A lookup by unknown key (e.g. a stage without a definition) is a 404."""
    logger.warning("%s %s -> 404: missing key %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=404, content=_detail(404))


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})
