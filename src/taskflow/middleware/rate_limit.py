"""Rate limiting middleware — Redis-based fixed window.

Learn: Uses a per-window counter stored in Redis. Each client IP gets a
counter key like "taskflow:rl:{ip}:{bucket}:{window}". Only /api/ paths
are counted. Login and register share a stricter "auth" bucket to slow
down credential guessing.

Gracefully skips rate limiting if Redis is unavailable (e.g., in tests):
the client lives on app.state.redis and is None when not connected.
"""

import time

import structlog
from redis.exceptions import RedisError
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from taskflow.errors import error_body

logger = structlog.get_logger()

AUTH_PATHS = ("/api/auth/login", "/api/auth/register")


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Redis-based rate limiting per IP per window."""

    def __init__(
        self,
        app,
        default_limit: int = 100,
        auth_limit: int = 20,
        window_seconds: int = 900,
    ):
        super().__init__(app)
        self.default_limit = default_limit
        self.auth_limit = auth_limit
        self.window_seconds = window_seconds

    async def dispatch(self, request: Request, call_next) -> Response:
        path = request.url.path
        redis = getattr(request.app.state, "redis", None)
        if redis is None or not path.startswith("/api/"):
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        is_auth = path.startswith(AUTH_PATHS)
        limit = self.auth_limit if is_auth else self.default_limit

        window = int(time.time() // self.window_seconds)
        bucket = "auth" if is_auth else "api"
        key = f"taskflow:rl:{client_ip}:{bucket}:{window}"

        try:
            count = await redis.incr(key)
            if count == 1:
                await redis.expire(key, self.window_seconds * 2)
        except RedisError as e:
            # Redis error: don't block the request
            logger.warning("ratelimit.redis_error", error=str(e))
            return await call_next(request)

        if count > limit:
            logger.info("ratelimit.exceeded", client_ip=client_ip, bucket=bucket)
            return JSONResponse(
                status_code=429,
                content=error_body("Too many requests, please try again later."),
                headers={"Retry-After": str(self.window_seconds)},
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(limit)
        response.headers["X-RateLimit-Remaining"] = str(max(0, limit - count))
        return response
