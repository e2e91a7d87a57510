"""
Project membership business logic.

Owns the (project, user, role) records and enforces the single-owner rule.
Every other service resolves permissions through :meth:`MembershipService.authorize`.
"""

from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import flush_or_conflict
from app.core.exceptions import ConflictError, ForbiddenError, NotFoundError
from app.core.permissions import Action, ensure_allowed
from app.models.member import ProjectMember, ProjectRole
from app.models.project import Project
from app.models.user import User
from app.schemas.member import MemberResponse, MembersListResponse

logger = logging.getLogger(__name__)


def _member_response(member: ProjectMember, user: User) -> MemberResponse:
    return MemberResponse(
        id=member.id,
        project_id=member.project_id,
        user_id=member.user_id,
        email=user.email,
        display_name=user.display_name,
        role=member.role.value,
        joined_at=member.joined_at,
    )


class MembershipService:
    """Handles project membership and role checks."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    # -----------------------------------------------------------------------
    # Lookups
    # -----------------------------------------------------------------------

    async def get_project(self, project_id: UUID) -> Project:
        project = await self.db.get(Project, project_id)
        if project is None:
            raise NotFoundError("PROJECT_NOT_FOUND", "Project not found")
        return project

    async def get_membership(self, project_id: UUID, user_id: UUID) -> ProjectMember | None:
        result = await self.db.execute(
            select(ProjectMember).where(
                ProjectMember.project_id == project_id,
                ProjectMember.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()

    async def get_role(self, project_id: UUID, user_id: UUID) -> ProjectRole | None:
        member = await self.get_membership(project_id, user_id)
        return member.role if member is not None else None

    async def is_member(self, project_id: UUID, user_id: UUID) -> bool:
        return await self.get_role(project_id, user_id) is not None

    async def is_owner(self, project_id: UUID, user_id: UUID) -> bool:
        return await self.get_role(project_id, user_id) == ProjectRole.owner

    async def is_admin(self, project_id: UUID, user_id: UUID) -> bool:
        return await self.get_role(project_id, user_id) == ProjectRole.admin

    # -----------------------------------------------------------------------
    # Authorization
    # -----------------------------------------------------------------------

    async def authorize(self, project_id: UUID, user_id: UUID, action: Action) -> ProjectMember:
        """
        Resolve the caller's membership and check it against the permission table.

        Raises 404 if the project does not exist, 403 otherwise.
        """
        await self.get_project(project_id)
        member = await self.get_membership(project_id, user_id)
        if member is None:
            raise ForbiddenError("NOT_A_MEMBER", "You are not a member of this project")
        ensure_allowed(member.role, action)
        return member

    async def verify_can_manage_members(self, project_id: UUID, user_id: UUID) -> ProjectMember:
        return await self.authorize(project_id, user_id, Action.manage_members)

    # -----------------------------------------------------------------------
    # Owner
    # -----------------------------------------------------------------------

    async def add_owner(self, project: Project, user: User) -> ProjectMember:
        """
        Record the project creator as OWNER.

        Only called from project creation. A second call for the same pair
        is rejected rather than silently duplicated.
        """
        if await self.get_membership(project.id, user.id) is not None:
            raise ConflictError("ALREADY_MEMBER", "User is already a member of this project")

        member = ProjectMember(project_id=project.id, user_id=user.id, role=ProjectRole.owner)
        self.db.add(member)
        await flush_or_conflict(self.db, "ALREADY_MEMBER", "User is already a member of this project")
        logger.info("Added user %s as owner of project %s", user.id, project.id)
        return member

    # -----------------------------------------------------------------------
    # Membership records
    # -----------------------------------------------------------------------

    async def create_membership(
        self, project_id: UUID, user_id: UUID, role: ProjectRole
    ) -> ProjectMember:
        """Insert a non-owner membership row. Used by direct adds and invitations."""
        if role == ProjectRole.owner:
            raise ConflictError(
                "CANNOT_ADD_OWNER",
                "Cannot add another owner. Each project can only have one owner.",
            )
        member = ProjectMember(project_id=project_id, user_id=user_id, role=role)
        self.db.add(member)
        await flush_or_conflict(self.db, "ALREADY_MEMBER", "User is already a member of this project")
        return member

    async def add_member(
        self, project_id: UUID, email: str, role: ProjectRole, actor: User
    ) -> MemberResponse:
        """
        Add an existing user to the project directly.

        - Requires Owner or Admin role
        - Target must not already be a member
        - Role cannot be owner
        """
        logger.debug("Adding member %s to project %s", email, project_id)
        await self.verify_can_manage_members(project_id, actor.id)

        result = await self.db.execute(select(User).where(User.email == email.lower()))
        user = result.scalar_one_or_none()
        if user is None:
            raise NotFoundError("USER_NOT_FOUND", "User not found")

        if await self.is_member(project_id, user.id):
            raise ConflictError("ALREADY_MEMBER", "User is already a member of this project")

        member = await self.create_membership(project_id, user.id, role)
        logger.info("Added member %s to project %s with role %s", user.email, project_id, role.value)
        return _member_response(member, user)

    async def remove_member(self, project_id: UUID, target_user_id: UUID, actor: User) -> None:
        """Remove a member. The owner can never be removed."""
        logger.debug("Removing member %s from project %s", target_user_id, project_id)
        await self.verify_can_manage_members(project_id, actor.id)

        target = await self.get_membership(project_id, target_user_id)
        if target is None:
            raise NotFoundError("MEMBER_NOT_FOUND", "Member not found in project")

        if target.role == ProjectRole.owner:
            raise ConflictError("CANNOT_REMOVE_OWNER", "Cannot remove the project owner")

        await self.db.delete(target)
        await self.db.flush()
        logger.info("Removed member %s from project %s", target_user_id, project_id)

    async def update_role(
        self,
        project_id: UUID,
        target_user_id: UUID,
        new_role: ProjectRole,
        actor: User,
    ) -> MemberResponse:
        """
        Change a member's role.

        - Only the owner may change roles
        - The owner's own role is fixed
        - Nobody can be promoted to owner
        """
        logger.debug(
            "Updating role for member %s in project %s to %s",
            target_user_id, project_id, new_role.value,
        )
        await self.authorize(project_id, actor.id, Action.change_roles)

        result = await self.db.execute(
            select(ProjectMember, User)
            .join(User, ProjectMember.user_id == User.id)
            .where(
                ProjectMember.project_id == project_id,
                ProjectMember.user_id == target_user_id,
            )
        )
        row = result.one_or_none()
        if row is None:
            raise NotFoundError("MEMBER_NOT_FOUND", "Member not found in project")

        target, target_user = row

        if target.role == ProjectRole.owner:
            raise ConflictError("CANNOT_CHANGE_OWNER", "Cannot change the owner's role")

        if new_role == ProjectRole.owner:
            raise ConflictError(
                "CANNOT_ASSIGN_OWNER",
                "Cannot assign OWNER role. Each project can only have one owner.",
            )

        target.role = new_role
        await self.db.flush()
        logger.info(
            "Updated role for member %s in project %s to %s",
            target_user_id, project_id, new_role.value,
        )
        return _member_response(target, target_user)

    # -----------------------------------------------------------------------
    # Queries
    # -----------------------------------------------------------------------

    async def list_members(self, project_id: UUID, actor: User) -> MembersListResponse:
        """List all members of a project with user details."""
        await self.authorize(project_id, actor.id, Action.view_project)

        result = await self.db.execute(
            select(ProjectMember, User)
            .join(User, ProjectMember.user_id == User.id)
            .where(ProjectMember.project_id == project_id)
            .order_by(ProjectMember.joined_at)
        )
        members = [_member_response(member, user) for member, user in result.all()]
        return MembersListResponse(members=members, total=len(members))

    async def member_response(self, member: ProjectMember) -> MemberResponse:
        user = await self.db.get(User, member.user_id)
        if user is None:
            raise NotFoundError("USER_NOT_FOUND", "User not found")
        return _member_response(member, user)
