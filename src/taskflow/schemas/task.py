"""Pydantic schemas for tasks.

Learn: Separate schemas for create/update/read keeps the API clean.
- TaskCreate: what you POST to create a task (status always starts TODO)
- TaskUpdate: what you PATCH (all optional; explicit null clears the
  nullable fields assigneeId, description and dueDate)
- TaskRead: what the API returns, with assignee/creator summaries
"""

from typing import Optional

from pydantic import Field, field_validator

from taskflow.db.models import TaskPriority, TaskStatus
from taskflow.schemas.common import ApiModel, IsoDateTime, UserSummary, UtcDateTime


class TaskCreate(ApiModel):
    title: str = Field(..., min_length=2, max_length=500)
    description: Optional[str] = None
    priority: TaskPriority = TaskPriority.MEDIUM
    assignee_id: Optional[str] = None
    due_date: Optional[IsoDateTime] = None


class TaskUpdate(ApiModel):
    """Partial update — only fields present in the body are applied."""
    title: Optional[str] = Field(None, min_length=2, max_length=500)
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    assignee_id: Optional[str] = None
    due_date: Optional[IsoDateTime] = None

    @field_validator("title", "status", "priority")
    @classmethod
    def _not_null(cls, value):
        if value is None:
            raise ValueError("Field cannot be null")
        return value


class ProjectRef(ApiModel):
    id: str
    name: str


class TaskRead(ApiModel):
    id: str
    title: str
    description: Optional[str]
    status: TaskStatus
    priority: TaskPriority
    project_id: str
    assignee_id: Optional[str]
    assignee: Optional[UserSummary]
    creator_id: str
    creator: UserSummary
    due_date: Optional[UtcDateTime]
    created_at: UtcDateTime
    updated_at: UtcDateTime


class TaskDetail(TaskRead):
    project: ProjectRef
