"""Pydantic schemas for projects."""

from typing import Optional

from pydantic import Field, field_validator

from taskflow.db.models import ProjectStatus
from taskflow.schemas.common import ApiModel, UserSummary, UtcDateTime
from taskflow.schemas.task import TaskRead


class ProjectCreate(ApiModel):
    name: str = Field(..., min_length=2, max_length=255)
    description: Optional[str] = None


class ProjectUpdate(ApiModel):
    """Partial update — only fields present in the body are applied."""
    name: Optional[str] = Field(None, min_length=2, max_length=255)
    description: Optional[str] = None
    status: Optional[ProjectStatus] = None

    @field_validator("name", "status")
    @classmethod
    def _not_null(cls, value):
        if value is None:
            raise ValueError("Field cannot be null")
        return value


class ProjectRead(ApiModel):
    id: str
    name: str
    description: Optional[str]
    status: ProjectStatus
    organization_id: str
    creator_id: str
    creator: UserSummary
    task_count: int
    created_at: UtcDateTime
    updated_at: UtcDateTime


class ProjectDetail(ProjectRead):
    """Single-project view with its tasks, newest first."""
    tasks: list[TaskRead]
