"""Auth API — registration, login, current user.

Learn: Routes for user authentication:
- POST /auth/register → create a user account, returns {user, token}
- POST /auth/login → email/password → {user, token}
- GET /auth/me → current user with memberships

Register and login are open; /auth/me sits behind the bearer token.
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from taskflow.auth.dependencies import CurrentIdentity, get_current_user
from taskflow.auth.jwt import create_access_token
from taskflow.db.engine import get_db
from taskflow.db.models import User
from taskflow.schemas.auth import AuthResult, LoginRequest, MeRead, RegisterRequest
from taskflow.schemas.common import Envelope, envelope
from taskflow.services.user_service import UserService

router = APIRouter(prefix="/auth")


def _svc(db: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(db)


def _auth_result(request: Request, user: User) -> AuthResult:
    token = create_access_token(user.id, user.email, request.app.state.settings)
    return AuthResult.model_validate(
        {"user": user, "token": token}, from_attributes=True
    )


# ─── Register ────────────────────────────────────────────


@router.post(
    "/register",
    response_model=Envelope[AuthResult],
    response_model_exclude_unset=True,
    status_code=201,
)
async def register(
    body: RegisterRequest,
    request: Request,
    svc: UserService = Depends(_svc),
):
    """Create a new user account and sign them in."""
    user = await svc.register(email=body.email, name=body.name, password=body.password)
    return envelope(_auth_result(request, user), "User registered successfully")


# ─── Login ───────────────────────────────────────────────


@router.post(
    "/login",
    response_model=Envelope[AuthResult],
    response_model_exclude_unset=True,
)
async def login(
    body: LoginRequest,
    request: Request,
    svc: UserService = Depends(_svc),
):
    """Login with email and password → JWT."""
    user = await svc.authenticate(email=body.email, password=body.password)
    return envelope(_auth_result(request, user), "Login successful")


# ─── Current user ───────────────────────────────────────


@router.get("/me", response_model=Envelope[MeRead], response_model_exclude_unset=True)
async def get_me(
    identity: CurrentIdentity = Depends(get_current_user),
    svc: UserService = Depends(_svc),
):
    """The authenticated user's profile and organization memberships."""
    user = await svc.get_profile(identity.user_id)
    return envelope(MeRead.model_validate(user, from_attributes=True))
