"""Pydantic schemas for organizations and memberships.

Learn: Separate "Create" schemas (input) from "Read" schemas (output).
The list view is flattened for the caller: their own role plus counts,
instead of the full member list.
"""

from pydantic import EmailStr, Field, field_validator

from taskflow.db.models import Role
from taskflow.schemas.common import ApiModel, UserSummary, UtcDateTime


class OrganizationCreate(ApiModel):
    name: str = Field(..., min_length=2, max_length=100)
    slug: str = Field(..., min_length=3, max_length=100, pattern=r"^[a-z0-9-]+$")


class MemberInvite(ApiModel):
    email: EmailStr
    role: Role

    @field_validator("role")
    @classmethod
    def _not_owner(cls, value: Role) -> Role:
        if value == Role.OWNER:
            raise ValueError("Role must be ADMIN or MEMBER")
        return value


class MemberRead(ApiModel):
    id: str
    user_id: str
    organization_id: str
    role: Role
    joined_at: UtcDateTime
    user: UserSummary


class OrganizationRead(ApiModel):
    id: str
    name: str
    slug: str
    owner_id: str
    created_at: UtcDateTime
    members: list[MemberRead]
    project_count: int


class OrganizationListItem(ApiModel):
    id: str
    name: str
    slug: str
    role: Role
    member_count: int
    project_count: int
    created_at: UtcDateTime
