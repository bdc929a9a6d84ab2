from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import DataError, IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base of the errors that map onto an HTTP status."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BadRequestError(AppError):
    """Malformed input or a broken business rule (total mismatch, unsellable product...)."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(AppError):
    """Referenced entity is absent, or must look absent to the caller."""

    status_code = status.HTTP_404_NOT_FOUND


def _message(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message})


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(p) for p in first.get("loc", ()) if p not in ("body", "path", "query"))
    return f"Invalid {location}" if location else "Invalid request"


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    logger.info(
        "request rejected",
        extra={"error": type(exc).__name__, "status": exc.status_code, "path": request.url.path},
    )
    return _message(exc.status_code, exc.message)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return _message(status.HTTP_400_BAD_REQUEST, _validation_message(exc))


async def data_error_handler(request: Request, exc: Exception) -> JSONResponse:
    # Store-level faults never reach the client verbatim
    logger.warning("data access error translated to 400", extra={"error": type(exc).__name__})
    return _message(status.HTTP_400_BAD_REQUEST, "Invalid data")


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled error", extra={"path": request.url.path})
    return _message(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(IntegrityError, data_error_handler)
    app.add_exception_handler(DataError, data_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
