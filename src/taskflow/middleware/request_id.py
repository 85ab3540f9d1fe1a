"""Request ID middleware — unique ID per request for tracing.

Learn: Every request gets a UUID, either from the incoming
X-Request-ID header (for distributed tracing) or auto-generated.
The ID is bound to structlog's contextvars so it appears in all
log entries for that request, and returned in the response header.
"""

import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = structlog.get_logger()


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Generate and propagate a unique request ID, log one line per request."""

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

        # Bind to structlog for correlated logging
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        response: Response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        logger.info(
            "request.completed",
            method=request.method,
            path=request.url.path,
            status=response.status_code,
        )
        return response
