"""Exception handlers translating domain errors into HTTP responses."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from clientbook.domain.exceptions import (
    ConstraintViolationError,
    PersistenceError,
    RecordValidationError,
)

logger = logging.getLogger(__name__)


async def record_validation_handler(request: Request, exc: RecordValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "errors": [{"code": issue.code, "message": issue.message} for issue in exc.issues],
        },
    )


async def persistence_error_handler(request: Request, exc: PersistenceError) -> JSONResponse:
    if isinstance(exc, ConstraintViolationError):
        logger.warning("Constraint violation on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)})

    logger.error("Persistence failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": f"Failed to {exc.operation} {exc.entity_type}"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RecordValidationError, record_validation_handler)
    app.add_exception_handler(PersistenceError, persistence_error_handler)
