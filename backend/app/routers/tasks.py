"""
Task management endpoints.

CRUD, status changes, assignment, dependencies and bulk operations.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from app.core.dependencies import get_current_user, get_task_service
from app.models.task import TaskStatus
from app.models.user import User
from app.schemas.task import (
    BulkCompleteResponse,
    BulkDeleteResponse,
    BulkTaskRequest,
    TaskAssignRequest,
    TaskCreateRequest,
    TaskDependencyRequest,
    TaskListResponse,
    TaskResponse,
    TaskStatusUpdateRequest,
    TaskUpdateRequest,
)
from app.services.task_service import TaskService

router = APIRouter()


# ---------------------------------------------------------------------------
# List / Create
# ---------------------------------------------------------------------------

@router.get(
    "/projects/{project_id}/tasks",
    response_model=TaskListResponse,
    summary="List tasks in a project",
)
async def list_tasks(
    project_id: UUID,
    status_filter: str | None = Query(
        default=None, alias="status", pattern="^(todo|in_progress|done)$"
    ),
    assignee_id: UUID | None = Query(default=None),
    current_user: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
) -> TaskListResponse:
    return await service.list_tasks(
        project_id,
        current_user,
        status=TaskStatus(status_filter) if status_filter else None,
        assignee_id=assignee_id,
    )


@router.post(
    "/projects/{project_id}/tasks",
    response_model=TaskResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a task",
)
async def create_task(
    project_id: UUID,
    data: TaskCreateRequest,
    current_user: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
) -> TaskResponse:
    """
    Create a task in TODO.

    - Requires project membership
    - tag_ids and depends_on_ids must belong to the same project
    """
    return await service.create_task(project_id, data, current_user)


# ---------------------------------------------------------------------------
# Bulk operations
# ---------------------------------------------------------------------------

@router.post(
    "/tasks/bulk-complete",
    response_model=BulkCompleteResponse,
    summary="Complete several tasks",
)
async def bulk_complete(
    data: BulkTaskRequest,
    current_user: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
) -> BulkCompleteResponse:
    """
    Tasks are evaluated in the order given. Tasks with unfinished
    dependencies, in foreign projects, or unknown are skipped.
    """
    return await service.bulk_complete(data.task_ids, current_user)


@router.post(
    "/tasks/bulk-delete",
    response_model=BulkDeleteResponse,
    summary="Delete several tasks",
)
async def bulk_delete(
    data: BulkTaskRequest,
    current_user: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
) -> BulkDeleteResponse:
    return await service.bulk_delete(data.task_ids, current_user)


# ---------------------------------------------------------------------------
# Single task
# ---------------------------------------------------------------------------

@router.get(
    "/tasks/{task_id}",
    response_model=TaskResponse,
    summary="Get task detail",
)
async def get_task(
    task_id: UUID,
    current_user: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
) -> TaskResponse:
    return await service.get_task(task_id, current_user)


@router.patch(
    "/tasks/{task_id}",
    response_model=TaskResponse,
    summary="Update a task",
)
async def update_task(
    task_id: UUID,
    data: TaskUpdateRequest,
    current_user: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
) -> TaskResponse:
    return await service.update_task(task_id, data, current_user)


@router.patch(
    "/tasks/{task_id}/status",
    response_model=TaskResponse,
    summary="Change task status",
)
async def update_task_status(
    task_id: UUID,
    data: TaskStatusUpdateRequest,
    current_user: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
) -> TaskResponse:
    """Only the assignee, the owner or an admin may change status."""
    return await service.update_status(task_id, TaskStatus(data.status), current_user)


@router.delete(
    "/tasks/{task_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a task",
)
async def delete_task(
    task_id: UUID,
    current_user: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
) -> None:
    await service.delete_task(task_id, current_user)


# ---------------------------------------------------------------------------
# Assignment
# ---------------------------------------------------------------------------

@router.put(
    "/tasks/{task_id}/assignee",
    response_model=TaskResponse,
    summary="Assign a task",
)
async def assign_task(
    task_id: UUID,
    data: TaskAssignRequest,
    current_user: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
) -> TaskResponse:
    return await service.assign(task_id, data.user_id, current_user)


@router.delete(
    "/tasks/{task_id}/assignee",
    response_model=TaskResponse,
    summary="Unassign a task",
)
async def unassign_task(
    task_id: UUID,
    current_user: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
) -> TaskResponse:
    return await service.unassign(task_id, current_user)


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------

@router.post(
    "/tasks/{task_id}/dependencies",
    response_model=TaskResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a dependency",
)
async def add_dependency(
    task_id: UUID,
    data: TaskDependencyRequest,
    current_user: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
) -> TaskResponse:
    return await service.add_dependency(task_id, data.depends_on_id, current_user)


@router.delete(
    "/tasks/{task_id}/dependencies/{depends_on_id}",
    response_model=TaskResponse,
    summary="Remove a dependency",
)
async def remove_dependency(
    task_id: UUID,
    depends_on_id: UUID,
    current_user: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
) -> TaskResponse:
    return await service.remove_dependency(task_id, depends_on_id, current_user)
