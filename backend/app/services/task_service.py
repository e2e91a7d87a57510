"""
Task business logic.

Handles task CRUD, status transitions, assignment, dependencies and bulk
operations. Every mutation is authorized through MembershipService.

Completion is derived from status: a task is completed exactly when its
status is ``done``.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from uuid import UUID

from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import flush_or_conflict
from app.core.exceptions import ConflictError, ForbiddenError, NotFoundError
from app.core.permissions import Action, can_edit_task, is_allowed
from app.models.member import ProjectRole
from app.models.tag import Tag, TaskTag
from app.models.task import RecurrencePattern, Task, TaskDependency, TaskPriority, TaskStatus
from app.models.user import User
from app.schemas.tag import TagResponse
from app.schemas.task import (
    BulkCompleteResponse,
    BulkDeleteResponse,
    TaskCreateRequest,
    TaskListResponse,
    TaskResponse,
    TaskUpdateRequest,
)
from app.services.membership_service import MembershipService

logger = logging.getLogger(__name__)


class TaskService:
    """Handles all task operations."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db
        self.members = MembershipService(db)

    # -----------------------------------------------------------------------
    # Create Task
    # -----------------------------------------------------------------------

    async def create_task(
        self, project_id: UUID, data: TaskCreateRequest, actor: User
    ) -> TaskResponse:
        """
        Create a new task in TODO.

        Tags and dependencies must belong to the same project.
        """
        logger.debug("Creating task for project %s by user %s", project_id, actor.id)
        await self.members.authorize(project_id, actor.id, Action.create_task)

        depends_on_ids = list(dict.fromkeys(data.depends_on_ids))
        await self._ensure_tasks_in_project(project_id, depends_on_ids)

        task = Task(
            project_id=project_id,
            title=data.title,
            description=data.description,
            due_date=data.due_date,
            status=TaskStatus.todo,
            priority=TaskPriority(data.priority),
            recurrence_pattern=RecurrencePattern(data.recurrence_pattern),
            recurrence_end_date=data.recurrence_end_date,
            created_by=actor.id,
        )
        self.db.add(task)
        await self.db.flush()

        for dependency_id in depends_on_ids:
            self.db.add(TaskDependency(task_id=task.id, depends_on_id=dependency_id))

        if data.tag_ids:
            await self._set_task_tags(task, data.tag_ids)

        await self.db.flush()
        logger.info("Task created: id=%s title=%r project=%s", task.id, task.title, project_id)
        return (await self._to_responses([task]))[0]

    # -----------------------------------------------------------------------
    # Read
    # -----------------------------------------------------------------------

    async def get_task(self, task_id: UUID, actor: User) -> TaskResponse:
        task = await self._get_task(task_id)
        await self.members.authorize(task.project_id, actor.id, Action.view_project)
        return (await self._to_responses([task]))[0]

    async def list_tasks(
        self,
        project_id: UUID,
        actor: User,
        status: TaskStatus | None = None,
        assignee_id: UUID | None = None,
    ) -> TaskListResponse:
        """List tasks for a project with optional filters."""
        await self.members.authorize(project_id, actor.id, Action.view_project)

        stmt = select(Task).where(Task.project_id == project_id)
        if status is not None:
            stmt = stmt.where(Task.status == status)
        if assignee_id is not None:
            stmt = stmt.where(Task.assignee_id == assignee_id)
        stmt = stmt.order_by(Task.created_at)

        result = await self.db.execute(stmt)
        tasks = list(result.scalars().all())
        items = await self._to_responses(tasks)
        return TaskListResponse(tasks=items, total=len(items))

    # -----------------------------------------------------------------------
    # Update Task
    # -----------------------------------------------------------------------

    async def update_task(
        self, task_id: UUID, data: TaskUpdateRequest, actor: User
    ) -> TaskResponse:
        """
        Partially update a task.

        ``completed`` is the legacy toggle. It is applied as a status change:
        true moves the task to done, false moves a done task back to todo.
        """
        logger.debug("Updating task %s by user %s", task_id, actor.id)
        task = await self._get_task(task_id)
        await self._authorize_edit(task, actor)

        if data.title is not None:
            task.title = data.title
        if data.description is not None:
            task.description = data.description
        if "due_date" in data.model_fields_set:
            task.due_date = data.due_date
        if data.priority is not None:
            task.priority = TaskPriority(data.priority)
        if data.recurrence_pattern is not None:
            task.recurrence_pattern = RecurrencePattern(data.recurrence_pattern)
        if "recurrence_end_date" in data.model_fields_set:
            task.recurrence_end_date = data.recurrence_end_date
        if data.tag_ids is not None:
            await self._set_task_tags(task, data.tag_ids)

        if data.completed is True:
            task.status = TaskStatus.done
        elif data.completed is False and task.status == TaskStatus.done:
            task.status = TaskStatus.todo

        await self.db.flush()
        logger.info("Task %s updated by user %s: status=%s", task_id, actor.id, task.status.value)
        return (await self._to_responses([task]))[0]

    async def update_status(
        self, task_id: UUID, new_status: TaskStatus, actor: User
    ) -> TaskResponse:
        """
        Move a task to any status.

        Only the assignee, the owner or an admin may do this. There is no
        transition graph; completion follows the new status.
        """
        logger.debug("Updating task %s status to %s", task_id, new_status.value)
        task = await self._get_task(task_id)
        await self._authorize_edit(task, actor)

        task.status = new_status
        await self.db.flush()
        logger.info("Task %s status updated to %s by user %s", task_id, new_status.value, actor.id)
        return (await self._to_responses([task]))[0]

    # -----------------------------------------------------------------------
    # Assignment
    # -----------------------------------------------------------------------

    async def assign(self, task_id: UUID, assignee_id: UUID, actor: User) -> TaskResponse:
        """Assign a task. The assignee must be a member of the task's project."""
        logger.debug("Assigning task %s to user %s", task_id, assignee_id)
        task = await self._get_task(task_id)
        await self.members.authorize(task.project_id, actor.id, Action.assign_task)

        if not await self.members.is_member(task.project_id, assignee_id):
            raise ConflictError("ASSIGNEE_NOT_MEMBER", "Cannot assign task to non-member")

        task.assignee_id = assignee_id
        await self.db.flush()
        logger.info("Task %s assigned to user %s", task_id, assignee_id)
        return (await self._to_responses([task]))[0]

    async def unassign(self, task_id: UUID, actor: User) -> TaskResponse:
        """Clear the assignee. Any member may do this, not only the assignee or admins."""
        logger.debug("Unassigning task %s", task_id)
        task = await self._get_task(task_id)
        await self.members.authorize(task.project_id, actor.id, Action.unassign_task)

        task.assignee_id = None
        await self.db.flush()
        logger.info("Task %s unassigned by user %s", task_id, actor.id)
        return (await self._to_responses([task]))[0]

    # -----------------------------------------------------------------------
    # Dependencies
    # -----------------------------------------------------------------------

    async def add_dependency(
        self, task_id: UUID, depends_on_id: UUID, actor: User
    ) -> TaskResponse:
        """
        Record that ``task_id`` depends on ``depends_on_id``.

        Cycles, including a task depending on itself, are not rejected.
        """
        task = await self._get_task(task_id)
        await self.members.authorize(task.project_id, actor.id, Action.manage_dependencies)
        await self._ensure_tasks_in_project(task.project_id, [depends_on_id])

        existing = await self.db.get(TaskDependency, (task_id, depends_on_id))
        if existing is not None:
            raise ConflictError("DEPENDENCY_EXISTS", "Task already depends on this task")

        self.db.add(TaskDependency(task_id=task_id, depends_on_id=depends_on_id))
        await flush_or_conflict(self.db, "DEPENDENCY_EXISTS", "Task already depends on this task")
        logger.info("Task %s now depends on task %s", task_id, depends_on_id)
        return (await self._to_responses([task]))[0]

    async def remove_dependency(
        self, task_id: UUID, depends_on_id: UUID, actor: User
    ) -> TaskResponse:
        task = await self._get_task(task_id)
        await self.members.authorize(task.project_id, actor.id, Action.manage_dependencies)

        edge = await self.db.get(TaskDependency, (task_id, depends_on_id))
        if edge is None:
            raise NotFoundError("DEPENDENCY_NOT_FOUND", "Dependency not found")

        await self.db.delete(edge)
        await self.db.flush()
        logger.info("Task %s no longer depends on task %s", task_id, depends_on_id)
        return (await self._to_responses([task]))[0]

    # -----------------------------------------------------------------------
    # Delete Task
    # -----------------------------------------------------------------------

    async def delete_task(self, task_id: UUID, actor: User) -> None:
        """Delete a task together with its dependency edges and tag links."""
        logger.debug("Deleting task %s by user %s", task_id, actor.id)
        task = await self._get_task(task_id)
        await self.members.authorize(task.project_id, actor.id, Action.delete_task)

        await self._delete_tasks([task.id])
        logger.info("Task %s deleted", task_id)

    # -----------------------------------------------------------------------
    # Bulk operations
    # -----------------------------------------------------------------------

    async def bulk_complete(self, task_ids: list[UUID], actor: User) -> BulkCompleteResponse:
        """
        Complete tasks in the order given.

        Tasks the actor cannot access, unknown ids, and tasks with an
        unfinished dependency are skipped without error. Each task is
        flushed before the next is checked, so a dependency listed earlier
        in the batch counts as completed for a dependent listed later.
        """
        ordered_ids = list(dict.fromkeys(task_ids))
        logger.debug("Bulk completing %d tasks", len(ordered_ids))

        tasks_by_id = await self._load_tasks(ordered_ids)
        roles: dict[UUID, ProjectRole | None] = {}
        completed: list[Task] = []

        for task_id in ordered_ids:
            task = tasks_by_id.get(task_id)
            if task is None:
                continue
            if task.project_id not in roles:
                roles[task.project_id] = await self.members.get_role(task.project_id, actor.id)
            if not is_allowed(roles[task.project_id], Action.edit_task):
                logger.debug("Skipping task %s: user %s is not a member", task_id, actor.id)
                continue
            if not await self._dependencies_satisfied(task_id):
                logger.debug("Skipping task %s: unfinished dependencies", task_id)
                continue

            task.status = TaskStatus.done
            await self.db.flush()
            completed.append(task)

        logger.info("Bulk completed %d of %d tasks", len(completed), len(ordered_ids))
        items = await self._to_responses(completed)
        return BulkCompleteResponse(completed=items, total=len(items))

    async def bulk_delete(self, task_ids: list[UUID], actor: User) -> BulkDeleteResponse:
        """
        Delete every listed task in a project the actor belongs to.

        No dependency check: dependents simply lose the edge to a deleted task.
        """
        ordered_ids = list(dict.fromkeys(task_ids))
        logger.debug("Bulk deleting %d tasks", len(ordered_ids))

        tasks_by_id = await self._load_tasks(ordered_ids)
        roles: dict[UUID, ProjectRole | None] = {}
        deletable: list[UUID] = []

        for task_id in ordered_ids:
            task = tasks_by_id.get(task_id)
            if task is None:
                continue
            if task.project_id not in roles:
                roles[task.project_id] = await self.members.get_role(task.project_id, actor.id)
            if is_allowed(roles[task.project_id], Action.delete_task):
                deletable.append(task_id)

        await self._delete_tasks(deletable)
        logger.info("Bulk deleted %d of %d tasks", len(deletable), len(ordered_ids))
        return BulkDeleteResponse(deleted_ids=deletable, total=len(deletable))

    # -----------------------------------------------------------------------
    # Helpers
    # -----------------------------------------------------------------------

    async def _get_task(self, task_id: UUID) -> Task:
        task = await self.db.get(Task, task_id)
        if task is None:
            raise NotFoundError("TASK_NOT_FOUND", "Task not found")
        return task

    async def _load_tasks(self, task_ids: list[UUID]) -> dict[UUID, Task]:
        if not task_ids:
            return {}
        result = await self.db.execute(select(Task).where(Task.id.in_(task_ids)))
        return {task.id: task for task in result.scalars().all()}

    async def _authorize_edit(self, task: Task, actor: User) -> None:
        role = await self.members.get_role(task.project_id, actor.id)
        if role is None:
            raise ForbiddenError("NOT_A_MEMBER", "You are not a member of this project")
        if not can_edit_task(role, task.assignee_id == actor.id):
            raise ForbiddenError(
                "INSUFFICIENT_ROLE",
                "Only the assigned user or project admins can update this task",
            )

    async def _dependencies_satisfied(self, task_id: UUID) -> bool:
        """True when every task this one depends on is currently done."""
        result = await self.db.execute(
            select(Task.status)
            .join(TaskDependency, TaskDependency.depends_on_id == Task.id)
            .where(TaskDependency.task_id == task_id)
        )
        return all(status == TaskStatus.done for status in result.scalars().all())

    async def _ensure_tasks_in_project(self, project_id: UUID, task_ids: list[UUID]) -> None:
        if not task_ids:
            return
        result = await self.db.execute(
            select(Task.id).where(Task.id.in_(task_ids), Task.project_id == project_id)
        )
        found = set(result.scalars().all())
        missing = [str(task_id) for task_id in task_ids if task_id not in found]
        if missing:
            raise NotFoundError(
                "TASK_NOT_FOUND",
                f"Dependency task(s) not found in this project: {', '.join(missing)}",
            )

    async def _set_task_tags(self, task: Task, tag_ids: list[UUID]) -> None:
        """Replace the task's tag set. Tags must belong to the task's project."""
        unique_ids = list(dict.fromkeys(tag_ids))
        if unique_ids:
            result = await self.db.execute(
                select(Tag.id).where(Tag.id.in_(unique_ids), Tag.project_id == task.project_id)
            )
            found = set(result.scalars().all())
            if len(found) != len(unique_ids):
                raise NotFoundError("TAG_NOT_FOUND", "One or more tags not found in this project")

        await self.db.execute(delete(TaskTag).where(TaskTag.task_id == task.id))
        for tag_id in unique_ids:
            self.db.add(TaskTag(task_id=task.id, tag_id=tag_id))
        await self.db.flush()

    async def _delete_tasks(self, task_ids: list[UUID]) -> None:
        if not task_ids:
            return
        await self.db.execute(
            delete(TaskDependency).where(
                or_(
                    TaskDependency.task_id.in_(task_ids),
                    TaskDependency.depends_on_id.in_(task_ids),
                )
            )
        )
        await self.db.execute(delete(TaskTag).where(TaskTag.task_id.in_(task_ids)))
        await self.db.execute(delete(Task).where(Task.id.in_(task_ids)))
        await self.db.flush()

    async def _to_responses(self, tasks: list[Task]) -> list[TaskResponse]:
        """Build task views with tags and both directions of the dependency edges."""
        task_ids = [t.id for t in tasks]
        tags_by_task: dict[UUID, list[TagResponse]] = defaultdict(list)
        depends_on: dict[UUID, list[UUID]] = defaultdict(list)
        blocked_by: dict[UUID, list[UUID]] = defaultdict(list)

        if task_ids:
            tag_rows = await self.db.execute(
                select(TaskTag.task_id, Tag)
                .join(Tag, TaskTag.tag_id == Tag.id)
                .where(TaskTag.task_id.in_(task_ids))
                .order_by(Tag.name)
            )
            for task_id, tag in tag_rows.all():
                tags_by_task[task_id].append(TagResponse.model_validate(tag))

            edge_rows = await self.db.execute(
                select(TaskDependency.task_id, TaskDependency.depends_on_id).where(
                    or_(
                        TaskDependency.task_id.in_(task_ids),
                        TaskDependency.depends_on_id.in_(task_ids),
                    )
                )
            )
            for task_id, depends_on_id in edge_rows.all():
                depends_on[task_id].append(depends_on_id)
                blocked_by[depends_on_id].append(task_id)

        return [
            TaskResponse(
                id=t.id,
                project_id=t.project_id,
                title=t.title,
                description=t.description,
                due_date=t.due_date,
                status=t.status.value,
                completed=t.completed,
                priority=t.priority.value,
                recurrence_pattern=t.recurrence_pattern.value,
                recurrence_end_date=t.recurrence_end_date,
                assignee_id=t.assignee_id,
                created_by=t.created_by,
                tags=tags_by_task.get(t.id, []),
                depends_on_ids=depends_on.get(t.id, []),
                blocked_by_ids=blocked_by.get(t.id, []),
                created_at=t.created_at,
                updated_at=t.updated_at,
            )
            for t in tasks
        ]
