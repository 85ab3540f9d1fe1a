"""JWT token creation and verification.

Learn: JWT (JSON Web Token) provides stateless authentication.
The token carries the user id (`sub`) and email, is signed with the
process-wide secret (HS256) and expires after
settings.access_token_expire_minutes.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from taskflow.config import Settings


class TokenError(Exception):
    """Raised when token verification fails."""


def create_access_token(
    user_id: str,
    email: str,
    settings: Settings,
    expires_minutes: Optional[int] = None,
) -> str:
    """Create a signed JWT access token."""
    now = datetime.now(timezone.utc)
    expires = now + timedelta(
        minutes=expires_minutes or settings.access_token_expire_minutes
    )
    payload = {
        "sub": user_id,
        "email": email,
        "iat": now,
        "exp": expires,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_token(token: str, settings: Settings) -> dict:
    """Verify and decode a JWT token.

    Returns the payload dict on success.
    Raises TokenError on failure.
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError:
        raise TokenError("Token has expired")
    except jwt.InvalidTokenError as e:
        raise TokenError(f"Invalid token: {e}")
    if not isinstance(payload.get("sub"), str) or not payload["sub"]:
        raise TokenError("Invalid token: missing subject")
    return payload
