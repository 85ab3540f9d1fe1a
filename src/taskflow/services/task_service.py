"""Task service — CRUD for tasks inside one project.

Learn: a task is reached through its whole parent chain. Lookups join
the project and filter on (task id, project id, project's organization id),
so a task id from another project or another organization is simply
"not found".

Listing order is priority first (URGENT > HIGH > MEDIUM > LOW), newest
first within a priority. Priorities are stored as text, so the ordering
goes through a CASE expression instead of the column itself.
"""

from datetime import datetime
from typing import Any, Optional

import structlog
from sqlalchemy import case, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from taskflow.db.models import (
    PRIORITY_RANK,
    OrganizationMember,
    Project,
    Task,
    TaskPriority,
    TaskStatus,
)
from taskflow.errors import BadRequest, NotFound

logger = structlog.get_logger()

_priority_rank = case(PRIORITY_RANK, value=Task.priority, else_=0)

_task_relations = (selectinload(Task.assignee), selectinload(Task.creator))


class TaskService:
    """Business logic for task CRUD."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Guards ─────────────────────────────────────────

    async def _require_project(self, organization_id: str, project_id: str) -> Project:
        result = await self.db.execute(
            select(Project).where(
                Project.id == project_id,
                Project.organization_id == organization_id,
            )
        )
        project = result.scalars().first()
        if project is None:
            raise NotFound("Project not found")
        return project

    async def ensure_assignable(self, organization_id: str, assignee_id: str) -> None:
        """Assignees must be members of the task's organization."""
        result = await self.db.execute(
            select(OrganizationMember.id).where(
                OrganizationMember.organization_id == organization_id,
                OrganizationMember.user_id == assignee_id,
            )
        )
        if result.first() is None:
            raise BadRequest("Assignee must be a member of the organization")

    async def _load(
        self, organization_id: str, project_id: str, task_id: str, *options
    ) -> Task:
        result = await self.db.execute(
            select(Task)
            .join(Project, Project.id == Task.project_id)
            .where(
                Task.id == task_id,
                Task.project_id == project_id,
                Project.organization_id == organization_id,
            )
            .options(*_task_relations, *options)
            .execution_options(populate_existing=True)
        )
        task = result.scalars().first()
        if task is None:
            raise NotFound("Task not found")
        return task

    # ─── CRUD ───────────────────────────────────────────

    async def create_task(
        self,
        organization_id: str,
        project_id: str,
        creator_id: str,
        title: str,
        description: Optional[str] = None,
        priority: TaskPriority = TaskPriority.MEDIUM,
        assignee_id: Optional[str] = None,
        due_date: Optional[datetime] = None,
    ) -> Task:
        """Create a task in TODO status."""
        await self._require_project(organization_id, project_id)
        if assignee_id is not None:
            await self.ensure_assignable(organization_id, assignee_id)

        task = Task(
            title=title,
            description=description,
            priority=priority,
            project_id=project_id,
            assignee_id=assignee_id,
            creator_id=creator_id,
            due_date=due_date,
        )
        self.db.add(task)
        await self.db.commit()

        logger.info("task.created", project_id=project_id, task_id=task.id)
        return await self._load(organization_id, project_id, task.id)

    async def list_tasks(
        self,
        organization_id: str,
        project_id: str,
        status: Optional[TaskStatus] = None,
        priority: Optional[TaskPriority] = None,
        assignee_id: Optional[str] = None,
    ) -> list[Task]:
        await self._require_project(organization_id, project_id)

        stmt = (
            select(Task)
            .where(Task.project_id == project_id)
            .options(*_task_relations)
            .order_by(_priority_rank.desc(), Task.created_at.desc())
        )
        if status is not None:
            stmt = stmt.where(Task.status == status)
        if priority is not None:
            stmt = stmt.where(Task.priority == priority)
        if assignee_id:
            stmt = stmt.where(Task.assignee_id == assignee_id)

        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_task(self, organization_id: str, project_id: str, task_id: str) -> Task:
        return await self._load(
            organization_id, project_id, task_id, selectinload(Task.project)
        )

    async def update_task(
        self,
        organization_id: str,
        project_id: str,
        task_id: str,
        changes: dict[str, Any],
    ) -> Task:
        """Apply a partial update (keys already validated by TaskUpdate)."""
        task = await self._load(organization_id, project_id, task_id)
        if changes.get("assignee_id") is not None:
            await self.ensure_assignable(organization_id, changes["assignee_id"])

        for key, value in changes.items():
            setattr(task, key, value)
        await self.db.commit()

        logger.info("task.updated", task_id=task_id, fields=sorted(changes))
        return await self._load(organization_id, project_id, task_id)

    async def delete_task(self, organization_id: str, project_id: str, task_id: str) -> None:
        task = await self._load(organization_id, project_id, task_id)
        await self.db.delete(task)
        await self.db.commit()
        logger.info("task.deleted", project_id=project_id, task_id=task_id)
