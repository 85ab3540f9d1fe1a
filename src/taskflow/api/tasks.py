"""Task API routes — nested under organization and project."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from taskflow.auth.tenancy import TenantContext, get_tenant
from taskflow.db.engine import get_db
from taskflow.db.models import TaskPriority, TaskStatus
from taskflow.schemas.common import Envelope, envelope
from taskflow.schemas.task import TaskCreate, TaskDetail, TaskRead, TaskUpdate
from taskflow.services.task_service import TaskService

router = APIRouter(
    prefix="/organizations/{organization_id}/projects/{project_id}/tasks"
)


def _svc(db: AsyncSession = Depends(get_db)) -> TaskService:
    return TaskService(db)


@router.post(
    "",
    response_model=Envelope[TaskRead],
    response_model_exclude_unset=True,
    status_code=201,
)
async def create_task(
    project_id: str,
    body: TaskCreate,
    tenant: TenantContext = Depends(get_tenant),
    svc: TaskService = Depends(_svc),
):
    """Create a task. New tasks always start in TODO."""
    task = await svc.create_task(
        organization_id=tenant.organization_id,
        project_id=project_id,
        creator_id=tenant.user_id,
        title=body.title,
        description=body.description,
        priority=body.priority,
        assignee_id=body.assignee_id,
        due_date=body.due_date,
    )
    return envelope(
        TaskRead.model_validate(task, from_attributes=True),
        "Task created successfully",
    )


@router.get(
    "",
    response_model=Envelope[list[TaskRead]],
    response_model_exclude_unset=True,
)
async def list_tasks(
    project_id: str,
    status: Optional[TaskStatus] = Query(None),
    priority: Optional[TaskPriority] = Query(None),
    assignee_id: Optional[str] = Query(None, alias="assigneeId"),
    tenant: TenantContext = Depends(get_tenant),
    svc: TaskService = Depends(_svc),
):
    """Tasks of the project, most urgent first, then newest first."""
    tasks = await svc.list_tasks(
        tenant.organization_id,
        project_id,
        status=status,
        priority=priority,
        assignee_id=assignee_id,
    )
    return envelope([TaskRead.model_validate(t, from_attributes=True) for t in tasks])


@router.get(
    "/{task_id}",
    response_model=Envelope[TaskDetail],
    response_model_exclude_unset=True,
)
async def get_task(
    project_id: str,
    task_id: str,
    tenant: TenantContext = Depends(get_tenant),
    svc: TaskService = Depends(_svc),
):
    task = await svc.get_task(tenant.organization_id, project_id, task_id)
    return envelope(TaskDetail.model_validate(task, from_attributes=True))


@router.patch(
    "/{task_id}",
    response_model=Envelope[TaskRead],
    response_model_exclude_unset=True,
)
async def update_task(
    project_id: str,
    task_id: str,
    body: TaskUpdate,
    tenant: TenantContext = Depends(get_tenant),
    svc: TaskService = Depends(_svc),
):
    """Partial update. An explicit null clears assigneeId, description or dueDate."""
    task = await svc.update_task(
        tenant.organization_id,
        project_id,
        task_id,
        body.model_dump(exclude_unset=True),
    )
    return envelope(
        TaskRead.model_validate(task, from_attributes=True),
        "Task updated successfully",
    )


@router.delete("/{task_id}")
async def delete_task(
    project_id: str,
    task_id: str,
    tenant: TenantContext = Depends(get_tenant),
    svc: TaskService = Depends(_svc),
):
    await svc.delete_task(tenant.organization_id, project_id, task_id)
    return envelope(message="Task deleted successfully")
