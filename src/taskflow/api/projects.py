"""Project API routes — nested under an organization.

Learn: every handler takes the TenantContext and passes its
organization_id down to the service, which scopes every lookup by it.
Any member may create, edit or delete projects.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from taskflow.auth.tenancy import TenantContext, get_tenant
from taskflow.db.engine import get_db
from taskflow.db.models import ProjectStatus
from taskflow.schemas.common import Envelope, envelope
from taskflow.schemas.project import (
    ProjectCreate,
    ProjectDetail,
    ProjectRead,
    ProjectUpdate,
)
from taskflow.services.project_service import ProjectService

router = APIRouter(prefix="/organizations/{organization_id}/projects")


def _svc(db: AsyncSession = Depends(get_db)) -> ProjectService:
    return ProjectService(db)


@router.post(
    "",
    response_model=Envelope[ProjectRead],
    response_model_exclude_unset=True,
    status_code=201,
)
async def create_project(
    body: ProjectCreate,
    tenant: TenantContext = Depends(get_tenant),
    svc: ProjectService = Depends(_svc),
):
    project = await svc.create_project(
        organization_id=tenant.organization_id,
        creator_id=tenant.user_id,
        name=body.name,
        description=body.description,
    )
    return envelope(
        ProjectRead.model_validate(project, from_attributes=True),
        "Project created successfully",
    )


@router.get(
    "",
    response_model=Envelope[list[ProjectRead]],
    response_model_exclude_unset=True,
)
async def list_projects(
    status: Optional[ProjectStatus] = Query(None),
    tenant: TenantContext = Depends(get_tenant),
    svc: ProjectService = Depends(_svc),
):
    """Projects of the organization, newest first, optionally by status."""
    projects = await svc.list_projects(tenant.organization_id, status=status)
    return envelope(
        [ProjectRead.model_validate(p, from_attributes=True) for p in projects]
    )


@router.get(
    "/{project_id}",
    response_model=Envelope[ProjectDetail],
    response_model_exclude_unset=True,
)
async def get_project(
    project_id: str,
    tenant: TenantContext = Depends(get_tenant),
    svc: ProjectService = Depends(_svc),
):
    project = await svc.get_project_detail(tenant.organization_id, project_id)
    return envelope(ProjectDetail.model_validate(project, from_attributes=True))


@router.patch(
    "/{project_id}",
    response_model=Envelope[ProjectRead],
    response_model_exclude_unset=True,
)
async def update_project(
    project_id: str,
    body: ProjectUpdate,
    tenant: TenantContext = Depends(get_tenant),
    svc: ProjectService = Depends(_svc),
):
    """Partial update — only the fields present in the body change."""
    project = await svc.update_project(
        tenant.organization_id, project_id, body.model_dump(exclude_unset=True)
    )
    return envelope(
        ProjectRead.model_validate(project, from_attributes=True),
        "Project updated successfully",
    )


@router.delete("/{project_id}")
async def delete_project(
    project_id: str,
    tenant: TenantContext = Depends(get_tenant),
    svc: ProjectService = Depends(_svc),
):
    """Delete a project and all of its tasks."""
    await svc.delete_project(tenant.organization_id, project_id)
    return envelope(message="Project deleted successfully")
