"""Organization and membership API routes.

Learn: the {organization_id} path segment is resolved into a TenantContext
by the get_tenant dependency before the handler runs. Membership changes go
through require_role(OWNER, ADMIN), which runs the tenant lookup first, so
a non-member always sees 403 "not a member" rather than a role message.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from taskflow.auth.dependencies import CurrentIdentity, get_current_user
from taskflow.auth.tenancy import TenantContext, get_tenant, require_role
from taskflow.db.engine import get_db
from taskflow.db.models import Role
from taskflow.schemas.common import Envelope, envelope
from taskflow.schemas.organization import (
    MemberInvite,
    MemberRead,
    OrganizationCreate,
    OrganizationListItem,
    OrganizationRead,
)
from taskflow.services.organization_service import OrganizationService

router = APIRouter(prefix="/organizations")

_manage_members = require_role(Role.OWNER, Role.ADMIN)


def _svc(db: AsyncSession = Depends(get_db)) -> OrganizationService:
    return OrganizationService(db)


# ─── Organizations ──────────────────────────────────────


@router.post(
    "",
    response_model=Envelope[OrganizationRead],
    response_model_exclude_unset=True,
    status_code=201,
)
async def create_organization(
    body: OrganizationCreate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: OrganizationService = Depends(_svc),
):
    """Create an organization. The caller becomes its OWNER."""
    org = await svc.create_organization(
        owner_id=identity.user_id, name=body.name, slug=body.slug
    )
    return envelope(
        OrganizationRead.model_validate(org, from_attributes=True),
        "Organization created successfully",
    )


@router.get(
    "",
    response_model=Envelope[list[OrganizationListItem]],
    response_model_exclude_unset=True,
)
async def list_organizations(
    identity: CurrentIdentity = Depends(get_current_user),
    svc: OrganizationService = Depends(_svc),
):
    orgs = await svc.list_for_user(identity.user_id)
    return envelope([OrganizationListItem.model_validate(o) for o in orgs])


@router.get(
    "/{organization_id}",
    response_model=Envelope[OrganizationRead],
    response_model_exclude_unset=True,
)
async def get_organization(
    tenant: TenantContext = Depends(get_tenant),
    svc: OrganizationService = Depends(_svc),
):
    org = await svc.get_organization(tenant.organization_id)
    return envelope(OrganizationRead.model_validate(org, from_attributes=True))


# ─── Members ────────────────────────────────────────────


@router.post(
    "/{organization_id}/members",
    response_model=Envelope[MemberRead],
    response_model_exclude_unset=True,
    status_code=201,
)
async def invite_member(
    body: MemberInvite,
    tenant: TenantContext = Depends(_manage_members),
    svc: OrganizationService = Depends(_svc),
):
    """Add an already-registered user to the organization."""
    member = await svc.invite_member(
        organization_id=tenant.organization_id, email=body.email, role=body.role
    )
    return envelope(
        MemberRead.model_validate(member, from_attributes=True),
        "Member added successfully",
    )


@router.delete("/{organization_id}/members/{user_id}")
async def remove_member(
    user_id: str,
    tenant: TenantContext = Depends(_manage_members),
    svc: OrganizationService = Depends(_svc),
):
    await svc.remove_member(organization_id=tenant.organization_id, user_id=user_id)
    return envelope(message="Member removed successfully")
