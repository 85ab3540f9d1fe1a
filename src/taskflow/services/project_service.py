"""Project service — CRUD for projects inside one organization.

Learn: every lookup is keyed by (project id, organization id), never by
project id alone. A member of organization A who sends the id of a project
in organization B gets "Project not found", exactly as if the id did not
exist.
"""

from typing import Any, Optional

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from taskflow.db.models import Project, ProjectStatus, Task
from taskflow.errors import NotFound

logger = structlog.get_logger()


def project_payload(project: Project, task_count: int) -> dict[str, Any]:
    return {
        "id": project.id,
        "name": project.name,
        "description": project.description,
        "status": project.status,
        "organization_id": project.organization_id,
        "creator_id": project.creator_id,
        "creator": project.creator,
        "task_count": task_count,
        "created_at": project.created_at,
        "updated_at": project.updated_at,
    }


class ProjectService:
    """Business logic for projects."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _task_counts(self, project_ids: list[str]) -> dict[str, int]:
        if not project_ids:
            return {}
        result = await self.db.execute(
            select(Task.project_id, func.count(Task.id).label("cnt"))
            .where(Task.project_id.in_(project_ids))
            .group_by(Task.project_id)
        )
        return {row.project_id: row.cnt for row in result}

    async def _load(self, organization_id: str, project_id: str, *options) -> Project:
        result = await self.db.execute(
            select(Project)
            .where(Project.id == project_id, Project.organization_id == organization_id)
            .options(selectinload(Project.creator), *options)
            .execution_options(populate_existing=True)
        )
        project = result.scalars().first()
        if project is None:
            raise NotFound("Project not found")
        return project

    async def get_project(self, organization_id: str, project_id: str) -> dict:
        project = await self._load(organization_id, project_id)
        counts = await self._task_counts([project.id])
        return project_payload(project, counts.get(project.id, 0))

    async def get_project_detail(self, organization_id: str, project_id: str) -> dict:
        """Project plus its tasks (newest first) with assignee/creator loaded."""
        project = await self._load(
            organization_id,
            project_id,
            selectinload(Project.tasks).selectinload(Task.assignee),
            selectinload(Project.tasks).selectinload(Task.creator),
        )
        tasks = sorted(project.tasks, key=lambda t: t.created_at, reverse=True)
        payload = project_payload(project, len(tasks))
        payload["tasks"] = tasks
        return payload

    async def create_project(
        self,
        organization_id: str,
        creator_id: str,
        name: str,
        description: Optional[str] = None,
    ) -> dict:
        project = Project(
            name=name,
            description=description,
            organization_id=organization_id,
            creator_id=creator_id,
        )
        self.db.add(project)
        await self.db.commit()

        logger.info("project.created", organization_id=organization_id, project_id=project.id)
        return await self.get_project(organization_id, project.id)

    async def list_projects(
        self, organization_id: str, status: Optional[ProjectStatus] = None
    ) -> list[dict]:
        """Projects of the organization, newest first."""
        stmt = (
            select(Project)
            .where(Project.organization_id == organization_id)
            .options(selectinload(Project.creator))
            .order_by(Project.created_at.desc())
        )
        if status is not None:
            stmt = stmt.where(Project.status == status)

        result = await self.db.execute(stmt)
        projects = list(result.scalars().all())
        counts = await self._task_counts([p.id for p in projects])
        return [project_payload(p, counts.get(p.id, 0)) for p in projects]

    async def update_project(
        self, organization_id: str, project_id: str, changes: dict[str, Any]
    ) -> dict:
        """Apply a partial update (keys already validated by ProjectUpdate)."""
        project = await self._load(organization_id, project_id)
        for key, value in changes.items():
            setattr(project, key, value)
        await self.db.commit()

        logger.info("project.updated", project_id=project_id, fields=sorted(changes))
        return await self.get_project(organization_id, project_id)

    async def delete_project(self, organization_id: str, project_id: str) -> None:
        """Delete a project and, by cascade, all of its tasks."""
        project = await self._load(organization_id, project_id)
        await self.db.delete(project)
        await self.db.commit()
        logger.info("project.deleted", organization_id=organization_id, project_id=project_id)
