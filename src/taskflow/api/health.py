"""Health check endpoint.

Learn: Simple GET endpoint that verifies the server is running
and dependencies (database, Redis) are reachable. Redis is optional,
so "disabled" does not make the service degraded.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Request

from taskflow import __version__
from taskflow.schemas.common import envelope

router = APIRouter()


@router.get("/health")
async def health_check(request: Request):
    """Check server health and dependency connectivity."""
    checks = {"server": "ok", "version": __version__}

    # Check database
    try:
        await request.app.state.db.ping()
        checks["database"] = "ok"
    except Exception as e:
        checks["database"] = f"error: {e}"

    # Check Redis
    redis = request.app.state.redis
    if redis is None:
        checks["redis"] = "disabled"
    else:
        try:
            await redis.ping()
            checks["redis"] = "ok"
        except Exception as e:
            checks["redis"] = f"error: {e}"

    healthy = checks["database"] == "ok" and checks["redis"] in ("ok", "disabled")
    return envelope(
        {
            "status": "healthy" if healthy else "degraded",
            **checks,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
    )
