"""
Task schemas.

Request/response models for task CRUD, status, assignment, dependency and
bulk endpoints.
"""

from __future__ import annotations

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, Field

from app.schemas.tag import TagResponse


# ---------------------------------------------------------------------------
# Task Create
# ---------------------------------------------------------------------------

class TaskCreateRequest(BaseModel):
    """Request body for POST /projects/{project_id}/tasks."""

    title: str = Field(min_length=1, max_length=500)
    description: str | None = None
    due_date: date | None = None
    priority: str = Field(default="medium", pattern="^(low|medium|high)$")
    recurrence_pattern: str = Field(default="none", pattern="^(none|daily|weekly|monthly)$")
    recurrence_end_date: date | None = None
    tag_ids: list[UUID] = Field(default_factory=list)
    depends_on_ids: list[UUID] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Task Update
# ---------------------------------------------------------------------------

class TaskUpdateRequest(BaseModel):
    """
    Request body for PATCH /tasks/{task_id}.

    ``completed`` is the legacy completion toggle; it is translated into a
    status change.
    """

    title: str | None = Field(default=None, min_length=1, max_length=500)
    description: str | None = None
    due_date: date | None = None
    priority: str | None = Field(default=None, pattern="^(low|medium|high)$")
    recurrence_pattern: str | None = Field(default=None, pattern="^(none|daily|weekly|monthly)$")
    recurrence_end_date: date | None = None
    tag_ids: list[UUID] | None = None
    completed: bool | None = None


class TaskStatusUpdateRequest(BaseModel):
    """Request body for PATCH /tasks/{task_id}/status."""

    status: str = Field(pattern="^(todo|in_progress|done)$")


class TaskAssignRequest(BaseModel):
    """Request body for PUT /tasks/{task_id}/assignee."""

    user_id: UUID


class TaskDependencyRequest(BaseModel):
    depends_on_id: UUID


class BulkTaskRequest(BaseModel):
    """Request body for the bulk endpoints. Order is evaluation order."""

    task_ids: list[UUID] = Field(min_length=1, max_length=500)


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------

class TaskResponse(BaseModel):
    id: UUID
    project_id: UUID
    title: str
    description: str | None
    due_date: date | None
    status: str
    completed: bool
    priority: str
    recurrence_pattern: str
    recurrence_end_date: date | None
    assignee_id: UUID | None
    created_by: UUID
    tags: list[TagResponse] = Field(default_factory=list)
    depends_on_ids: list[UUID] = Field(default_factory=list)
    blocked_by_ids: list[UUID] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class TaskListResponse(BaseModel):
    tasks: list[TaskResponse]
    total: int


class BulkCompleteResponse(BaseModel):
    completed: list[TaskResponse]
    total: int


class BulkDeleteResponse(BaseModel):
    deleted_ids: list[UUID]
    total: int
