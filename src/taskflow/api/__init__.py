"""API route aggregation.

All routers registered here get mounted in main.py under /api.

Learn: Auth is applied at the include_router level using FastAPI's
dependencies parameter. This protects all routes in each router
without modifying individual handlers. The auth router is open for
register/login; /auth/me declares the dependency itself. Health lives
outside /api and is mounted directly on the app.
"""

from fastapi import APIRouter, Depends

from taskflow.api.auth import router as auth_router
from taskflow.api.organizations import router as organizations_router
from taskflow.api.projects import router as projects_router
from taskflow.api.tasks import router as tasks_router
from taskflow.auth.dependencies import get_current_user

# All protected routers require authentication
_auth = [Depends(get_current_user)]

api_router = APIRouter(prefix="/api")

# Open routes (no auth required)
api_router.include_router(auth_router, tags=["auth"])

# Protected routes (require a valid bearer token)
api_router.include_router(organizations_router, tags=["organizations"], dependencies=_auth)
api_router.include_router(projects_router, tags=["projects"], dependencies=_auth)
api_router.include_router(tasks_router, tags=["tasks"], dependencies=_auth)
