"""
Project business logic.

Handles project creation, lookup, update and progress.
"""

from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.permissions import Action
from app.models.member import ProjectMember
from app.models.project import Project
from app.models.task import Task
from app.models.user import User
from app.schemas.project import (
    ProgressResponse,
    ProjectCreateRequest,
    ProjectListResponse,
    ProjectResponse,
    ProjectUpdateRequest,
)
from app.services.membership_service import MembershipService

logger = logging.getLogger(__name__)


class ProjectService:

    def __init__(self, db: AsyncSession) -> None:
        self.db = db
        self.members = MembershipService(db)

    async def create_project(self, data: ProjectCreateRequest, creator: User) -> ProjectResponse:
        """Create a project and record the creator as its sole owner."""
        logger.debug("Creating project for user %s", creator.id)
        project = Project(
            title=data.title,
            description=data.description,
            created_by=creator.id,
        )
        self.db.add(project)
        await self.db.flush()

        await self.members.add_owner(project, creator)
        logger.info("Project created: id=%s title=%r", project.id, project.title)
        return ProjectResponse.model_validate(project)

    async def list_projects(self, actor: User) -> ProjectListResponse:
        result = await self.db.execute(
            select(Project)
            .join(ProjectMember, ProjectMember.project_id == Project.id)
            .where(ProjectMember.user_id == actor.id)
            .order_by(Project.created_at)
        )
        projects = list(result.scalars().all())
        return ProjectListResponse(
            projects=[ProjectResponse.model_validate(p) for p in projects],
            total=len(projects),
        )

    async def get_project(self, project_id: UUID, actor: User) -> ProjectResponse:
        await self.members.authorize(project_id, actor.id, Action.view_project)
        project = await self.members.get_project(project_id)
        return ProjectResponse.model_validate(project)

    async def update_project(
        self, project_id: UUID, data: ProjectUpdateRequest, actor: User
    ) -> ProjectResponse:
        logger.debug("Updating project %s by user %s", project_id, actor.id)
        await self.members.authorize(project_id, actor.id, Action.update_project)
        project = await self.members.get_project(project_id)
        if data.title is not None:
            project.title = data.title
        if data.description is not None:
            project.description = data.description
        await self.db.flush()
        logger.info("Project %s updated by user %s", project_id, actor.id)
        return ProjectResponse.model_validate(project)

    async def get_progress(self, project_id: UUID, actor: User) -> ProgressResponse:
        """Task completion ratio for a project, as a percentage with two decimals."""
        await self.members.authorize(project_id, actor.id, Action.view_project)

        total = (
            await self.db.execute(
                select(func.count(Task.id)).where(Task.project_id == project_id)
            )
        ).scalar_one()
        completed = (
            await self.db.execute(
                select(func.count(Task.id)).where(Task.project_id == project_id, Task.completed)
            )
        ).scalar_one()

        percentage = round(completed / total * 100, 2) if total else 0.0
        logger.info("Project %s progress: %d/%d (%s%%)", project_id, completed, total, percentage)
        return ProgressResponse(
            project_id=project_id,
            total_tasks=total,
            completed_tasks=completed,
            progress_percentage=percentage,
        )
