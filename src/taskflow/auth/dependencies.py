"""Authentication gate — FastAPI dependency for the bearer token.

Learn: These are used as Depends() in route handlers to extract and
validate the current user from the request. Every failure mode (no header,
wrong scheme, bad signature, expired token, user gone) raises the same
Unauthenticated error, so callers cannot tell them apart.
"""

from dataclasses import dataclass
from typing import Optional

import structlog
from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from taskflow.auth.jwt import TokenError, verify_token
from taskflow.db.engine import get_db
from taskflow.db.models import User
from taskflow.errors import Unauthenticated

logger = structlog.get_logger()


@dataclass(frozen=True)
class CurrentIdentity:
    """The authenticated user making the request."""

    user_id: str
    email: str
    name: str


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def get_current_user(
    request: Request,
    authorization: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
) -> CurrentIdentity:
    """Resolve the bearer token to a CurrentIdentity (401 otherwise)."""
    token = _bearer_token(authorization)
    if token is None:
        raise Unauthenticated()

    try:
        payload = verify_token(token, request.app.state.settings)
    except TokenError as e:
        logger.info("auth.token_rejected", reason=str(e))
        raise Unauthenticated()

    # The token carries no name; the user row is the source of truth.
    user = await db.get(User, payload["sub"])
    if user is None:
        logger.info("auth.token_rejected", reason="unknown subject")
        raise Unauthenticated()

    structlog.contextvars.bind_contextvars(user_id=user.id)
    return CurrentIdentity(user_id=user.id, email=user.email, name=user.name)
