"""Pydantic schemas for registration, login and the current user."""

from pydantic import EmailStr, Field

from taskflow.db.models import Role
from taskflow.schemas.common import ApiModel, UtcDateTime


class RegisterRequest(ApiModel):
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    name: str = Field(..., min_length=2, max_length=100)


class LoginRequest(ApiModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserRead(ApiModel):
    id: str
    email: str
    name: str
    created_at: UtcDateTime


class AuthResult(ApiModel):
    """Returned by register and login."""
    user: UserRead
    token: str


class OrganizationRef(ApiModel):
    id: str
    name: str
    slug: str


class MembershipRead(ApiModel):
    id: str
    role: Role
    joined_at: UtcDateTime
    organization: OrganizationRef


class MeRead(UserRead):
    memberships: list[MembershipRead]
