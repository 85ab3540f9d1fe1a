"""Tenancy resolver and role gate.

Learn: authentication only proves who the caller is. Whether they may see
an organization is decided here, from the membership row keyed by
(user id, organization id):

- no organization id        → 400 BadRequest
- no membership row         → 403 Forbidden (same answer whether or not
                              the organization exists)
- membership row            → TenantContext with the caller's role

The role attached to the context comes from that row and nothing else.
Role checks are a pure function (is_authorized) wrapped in a dependency
factory (require_role) so routes can declare them next to the tenant.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from taskflow.auth.dependencies import CurrentIdentity, get_current_user
from taskflow.db.engine import get_db
from taskflow.db.models import Organization, OrganizationMember, Role
from taskflow.errors import BadRequest, Forbidden


@dataclass(frozen=True)
class TenantContext:
    """Organization scope for one request, resolved from a membership row."""

    organization_id: str
    slug: str
    role: Role
    identity: CurrentIdentity

    @property
    def user_id(self) -> str:
        return self.identity.user_id


async def resolve_tenant(
    db: AsyncSession, identity: CurrentIdentity, organization_id: str
) -> TenantContext:
    """Look up the caller's membership in an organization."""
    if not organization_id:
        raise BadRequest("Organization ID is required")

    result = await db.execute(
        select(OrganizationMember.role, Organization.slug)
        .join(Organization, Organization.id == OrganizationMember.organization_id)
        .where(
            OrganizationMember.user_id == identity.user_id,
            OrganizationMember.organization_id == organization_id,
        )
    )
    row = result.first()
    if row is None:
        raise Forbidden("Access denied. You are not a member of this organization.")

    return TenantContext(
        organization_id=organization_id,
        slug=row.slug,
        role=Role(row.role),
        identity=identity,
    )


async def get_tenant(
    organization_id: str,
    identity: CurrentIdentity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> TenantContext:
    """FastAPI dependency — tenant from the {organization_id} path segment."""
    return await resolve_tenant(db, identity, organization_id)


def is_authorized(role: Role, required_roles: Iterable[Role]) -> bool:
    """True when `role` is one of `required_roles`."""
    return role in set(required_roles)


def require_role(*roles: Role):
    """Dependency factory: tenant membership plus one of `roles`.

    Usage:
        tenant: TenantContext = Depends(require_role(Role.OWNER, Role.ADMIN))
    """
    required = tuple(roles)

    async def _require_role(
        tenant: TenantContext = Depends(get_tenant),
    ) -> TenantContext:
        if not is_authorized(tenant.role, required):
            names = " or ".join(r.value for r in required)
            raise Forbidden(f"Insufficient permissions. Required role: {names}")
        return tenant

    return _require_role
