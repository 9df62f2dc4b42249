"""Domain exceptions and the global handlers that render them as ApiError bodies.

Services raise the exceptions below; routes stay free of status-code mapping.
Every error response has the same shape:

    {"status": "CONFLICT", "reason": "...", "message": "...",
     "timestamp": "2024-01-01 12:00:00", "errors": []}
"""

from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.formats import format_datetime, utcnow
from core.logger import get_logger

logger = get_logger(__name__)


class EwmError(Exception):
    """Base class for errors that map onto an HTTP status."""

    status_code: int = HTTPStatus.INTERNAL_SERVER_ERROR
    reason: str = "Unexpected error."

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(EwmError):
    status_code = HTTPStatus.NOT_FOUND
    reason = "The required object was not found."


class ConflictError(EwmError):
    status_code = HTTPStatus.CONFLICT
    reason = "For the requested operation the conditions are not met."


class BadRequestError(EwmError):
    status_code = HTTPStatus.BAD_REQUEST
    reason = "Incorrectly made request."


def api_error(
    status_code: int,
    reason: str,
    message: str,
    errors: list[str] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "status": HTTPStatus(status_code).name,
            "reason": reason,
            "message": message,
            "timestamp": format_datetime(utcnow()),
            "errors": errors or [],
        },
    )


async def ewm_error_handler(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, EwmError)
    logger.info(
        "request.rejected",
        error_type=type(exc).__name__,
        status_code=int(exc.status_code),
        path=request.url.path,
        message=exc.message,
    )
    return api_error(exc.status_code, exc.reason, exc.message)


def _format_validation_error(error: dict) -> str:
    location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
    return f"{location}: {error.get('msg', 'invalid value')}"


async def validation_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    """Request validation errors are reported as 400, not FastAPI's 422."""
    if not isinstance(exc, RequestValidationError):
        return api_error(500, EwmError.reason, "Unexpected error")

    errors = [_format_validation_error(e) for e in exc.errors()]
    logger.warning(
        "request.validation_error",
        path=request.url.path,
        method=request.method,
        error_count=len(errors),
    )
    return api_error(
        HTTPStatus.BAD_REQUEST,
        BadRequestError.reason,
        "; ".join(errors),
        errors,
    )


async def integrity_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Unique and foreign-key violations surface as 409."""
    detail = str(getattr(exc, "orig", exc))
    logger.warning("db.integrity_error", path=request.url.path, error=detail)
    return api_error(
        HTTPStatus.CONFLICT,
        "Integrity constraint has been violated.",
        detail,
    )


async def http_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, StarletteHTTPException)
    try:
        reason = HTTPStatus(exc.status_code).phrase
    except ValueError:
        reason = "HTTP error"
    return api_error(exc.status_code, reason, str(exc.detail))


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler for unhandled exceptions."""
    logger.exception(
        "unhandled.exception",
        exc_type=type(exc).__name__,
        path=request.url.path,
        method=request.method,
    )
    return api_error(
        HTTPStatus.INTERNAL_SERVER_ERROR,
        EwmError.reason,
        "An unexpected error occurred. Please try again.",
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(EwmError, ewm_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)
