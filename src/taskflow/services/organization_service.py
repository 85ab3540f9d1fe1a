"""Organization service — organizations and their memberships.

Learn: Service layer separates business logic from HTTP routing.
API routes call services, services call the database. Tenant and role
checks have already run by the time a route calls in here; the service
only enforces the rules that depend on stored data (unique slug, one
membership per user, the owner's membership is permanent).
"""

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from taskflow.db.models import (
    Organization,
    OrganizationMember,
    Project,
    Role,
    User,
)
from taskflow.errors import BadRequest, Conflict, NotFound

logger = structlog.get_logger()


class OrganizationService:
    """Business logic for organizations and memberships."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Organizations ──────────────────────────────────

    async def create_organization(self, owner_id: str, name: str, slug: str) -> dict:
        """Create an organization and its owner's OWNER membership together."""
        existing = await self.db.execute(
            select(Organization.id).where(Organization.slug == slug)
        )
        if existing.first():
            raise Conflict("Organization slug already taken")

        org = Organization(name=name, slug=slug, owner_id=owner_id)
        org.members.append(OrganizationMember(user_id=owner_id, role=Role.OWNER))
        self.db.add(org)
        await self.db.commit()

        logger.info("org.created", organization_id=org.id, slug=slug)
        return await self.get_organization(org.id)

    async def list_for_user(self, user_id: str) -> list[dict]:
        """Organizations the user belongs to, newest first, with role and counts."""
        member_count = (
            select(func.count(OrganizationMember.id))
            .where(OrganizationMember.organization_id == Organization.id)
            .correlate(Organization)
            .scalar_subquery()
        )
        project_count = (
            select(func.count(Project.id))
            .where(Project.organization_id == Organization.id)
            .correlate(Organization)
            .scalar_subquery()
        )
        result = await self.db.execute(
            select(
                Organization,
                OrganizationMember.role,
                member_count.label("member_count"),
                project_count.label("project_count"),
            )
            .join(
                OrganizationMember,
                OrganizationMember.organization_id == Organization.id,
            )
            .where(OrganizationMember.user_id == user_id)
            .order_by(Organization.created_at.desc())
        )
        return [
            {
                "id": org.id,
                "name": org.name,
                "slug": org.slug,
                "role": role,
                "member_count": members,
                "project_count": projects,
                "created_at": org.created_at,
            }
            for org, role, members, projects in result.all()
        ]

    async def get_organization(self, organization_id: str) -> dict:
        """Organization with members (oldest first) and its project count."""
        result = await self.db.execute(
            select(Organization)
            .where(Organization.id == organization_id)
            .options(
                selectinload(Organization.members).selectinload(
                    OrganizationMember.user
                )
            )
            .execution_options(populate_existing=True)
        )
        org = result.scalars().first()
        if org is None:
            raise NotFound("Organization not found")

        project_count = await self.db.scalar(
            select(func.count(Project.id)).where(
                Project.organization_id == organization_id
            )
        )
        members = sorted(org.members, key=lambda m: m.joined_at)
        return {
            "id": org.id,
            "name": org.name,
            "slug": org.slug,
            "owner_id": org.owner_id,
            "created_at": org.created_at,
            "members": members,
            "project_count": project_count or 0,
        }

    # ─── Members ────────────────────────────────────────

    async def _get_membership(
        self, organization_id: str, user_id: str
    ) -> OrganizationMember | None:
        result = await self.db.execute(
            select(OrganizationMember).where(
                OrganizationMember.organization_id == organization_id,
                OrganizationMember.user_id == user_id,
            )
        )
        return result.scalars().first()

    async def is_member(self, organization_id: str, user_id: str) -> bool:
        return await self._get_membership(organization_id, user_id) is not None

    async def invite_member(
        self, organization_id: str, email: str, role: Role
    ) -> OrganizationMember:
        """Add a registered user to the organization."""
        result = await self.db.execute(select(User).where(User.email == email))
        user = result.scalars().first()
        if user is None:
            raise NotFound("User not found. They need to register first.")

        if await self.is_member(organization_id, user.id):
            raise Conflict("User is already a member of this organization")

        member = OrganizationMember(
            user_id=user.id, organization_id=organization_id, role=role
        )
        self.db.add(member)
        await self.db.commit()

        logger.info(
            "org.member_added",
            organization_id=organization_id,
            user_id=user.id,
            role=role.value,
        )
        result = await self.db.execute(
            select(OrganizationMember)
            .where(OrganizationMember.id == member.id)
            .options(selectinload(OrganizationMember.user))
            .execution_options(populate_existing=True)
        )
        return result.scalars().one()

    async def remove_member(self, organization_id: str, user_id: str) -> None:
        """Delete a membership. The owner's membership can never be removed."""
        owner_id = await self.db.scalar(
            select(Organization.owner_id).where(Organization.id == organization_id)
        )
        if owner_id == user_id:
            raise BadRequest("Cannot remove the organization owner")

        member = await self._get_membership(organization_id, user_id)
        if member is None:
            raise NotFound("Member not found")

        await self.db.delete(member)
        await self.db.commit()
        logger.info("org.member_removed", organization_id=organization_id, user_id=user_id)
