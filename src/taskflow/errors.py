"""Error taxonomy and the handlers that turn errors into envelopes.

Services and auth dependencies raise TaskFlowError subclasses; the handlers
registered here shape every failure into the same body:

    {"success": false, "error": "...", "details": [...]}

Persistence errors never leak store-specific detail: integrity violations
become a generic 409, anything else from SQLAlchemy becomes a logged 500.
"""

from typing import Any, Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = structlog.get_logger()


class TaskFlowError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        details: Optional[list[dict[str, Any]]] = None,
        headers: Optional[dict[str, str]] = None,
    ):
        self.message = message or self.default_message
        self.details = details
        self.headers = headers
        super().__init__(self.message)


class ValidationError(TaskFlowError):
    status_code = 400
    default_message = "Validation error"


class BadRequest(TaskFlowError):
    status_code = 400
    default_message = "Bad request"


class Unauthenticated(TaskFlowError):
    status_code = 401
    default_message = "Invalid or missing authentication token"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message, headers={"WWW-Authenticate": "Bearer"})


class Forbidden(TaskFlowError):
    status_code = 403
    default_message = "Access denied"


class NotFound(TaskFlowError):
    status_code = 404
    default_message = "Resource not found"


class Conflict(TaskFlowError):
    status_code = 409
    default_message = "Resource already exists"


class InternalError(TaskFlowError):
    pass


def error_body(message: str, details: Optional[list[dict[str, Any]]] = None) -> dict:
    body: dict[str, Any] = {"success": False, "error": message}
    if details:
        body["details"] = details
    return body


_LOCATION_PREFIXES = {"body", "query", "path", "header", "cookie"}


def validation_details(errors: list[dict[str, Any]]) -> list[dict[str, str]]:
    """Map pydantic/FastAPI errors onto {path, message} pairs.

    The location prefix ("body", "query", ...) is dropped, so a missing
    `email` in the JSON body is reported as path "email".
    """
    details = []
    for err in errors:
        loc = [str(part) for part in err.get("loc", ())]
        if len(loc) > 1 and loc[0] in _LOCATION_PREFIXES:
            loc = loc[1:]
        details.append({"path": ".".join(loc), "message": err.get("msg", "Invalid value")})
    return details


# ─── Handlers ────────────────────────────────────────────


async def _taskflow_error_handler(request: Request, exc: TaskFlowError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.message, exc.details),
        headers=exc.headers,
    )


async def _request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=ValidationError.status_code,
        content=error_body(
            ValidationError.default_message, validation_details(list(exc.errors()))
        ),
    )


async def _integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    logger.warning("db.integrity_error", path=request.url.path, error=str(exc.orig))
    return JSONResponse(
        status_code=Conflict.status_code,
        content=error_body(Conflict.default_message),
    )


async def _database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("db.error", path=request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content=error_body(InternalError.default_message),
    )


async def _http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    message = "Route not found" if exc.status_code == 404 else str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(message),
        headers=getattr(exc, "headers", None),
    )


async def unhandled_error_response(request: Request, exc: Exception) -> JSONResponse:
    logger.error("request.unhandled_error", path=request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content=error_body(InternalError.default_message),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(TaskFlowError, _taskflow_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(IntegrityError, _integrity_error_handler)
    app.add_exception_handler(SQLAlchemyError, _database_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, unhandled_error_response)
