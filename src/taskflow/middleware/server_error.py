"""Server error middleware — unhandled exceptions as JSON envelopes.

Learn: Starlette runs the catch-all `Exception` handler in its outermost
ServerErrorMiddleware, outside CORS. Browsers then drop the 500 body
because it has no Access-Control-Allow-Origin header. Catching here,
just inside CORSMiddleware, lets the envelope go back through CORS.
"""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from taskflow.errors import unhandled_error_response


class ErrorEnvelopeMiddleware(BaseHTTPMiddleware):
    """Turn uncaught exceptions into the standard 500 envelope."""

    async def dispatch(self, request: Request, call_next) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            return await unhandled_error_response(request, exc)
