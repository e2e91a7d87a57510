"""
Invitation business logic.

Handles direct invitations (pending -> accepted | declined | cancelled) and
invite-code joins. Accepted invitations and code joins become membership
rows through MembershipService.
"""

from __future__ import annotations

import logging
import secrets
import string
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from app.core.config import settings
from app.core.database import flush_or_conflict
from app.core.exceptions import ConflictError, ForbiddenError, NotFoundError
from app.models.base import utcnow
from app.models.invitation import InvitationStatus, ProjectInvitation
from app.models.member import ProjectRole
from app.models.project import Project
from app.models.user import User
from app.schemas.invitation import (
    InvitationListResponse,
    InvitationResponse,
    InviteCodeResponse,
)
from app.schemas.member import MemberResponse
from app.services.membership_service import MembershipService

logger = logging.getLogger(__name__)

INVITE_CODE_ALPHABET = string.ascii_uppercase + string.digits


def generate_invite_code(length: int | None = None) -> str:
    """Return a random uppercase alphanumeric code."""
    length = length or settings.INVITE_CODE_LENGTH
    return "".join(secrets.choice(INVITE_CODE_ALPHABET) for _ in range(length))


def _queue_invitation_email(
    to_email: str,
    project_title: str,
    inviter_name: str,
    role: str,
) -> None:
    """
    Fire-and-forget: enqueue the invitation email.
    Import is deferred to avoid loading Celery at module import.
    """
    from app.workers.email_tasks import send_invitation_email
    try:
        send_invitation_email.delay(
            to_email=to_email,
            project_title=project_title,
            inviter_name=inviter_name,
            role=role,
            frontend_url=settings.FRONTEND_URL,
        )
    except Exception:
        logger.exception("Failed to queue invitation email to %s", to_email)


class InvitationService:
    """Handles all invitation operations."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db
        self.members = MembershipService(db)

    # -----------------------------------------------------------------------
    # Helpers
    # -----------------------------------------------------------------------

    async def _get_invitation(self, invitation_id: UUID) -> ProjectInvitation:
        invitation = await self.db.get(ProjectInvitation, invitation_id)
        if invitation is None:
            raise NotFoundError("INVITE_NOT_FOUND", "Invitation not found")
        return invitation

    async def _respond(
        self, invitation: ProjectInvitation, new_status: InvitationStatus
    ) -> None:
        """Move a pending invitation to a terminal state exactly once."""
        if invitation.status.is_terminal:
            raise ConflictError(
                "INVITE_NOT_PENDING",
                f"This invitation is no longer valid (status: {invitation.status.value})",
            )
        invitation.status = new_status
        invitation.responded_at = utcnow()
        await self.db.flush()

    async def _to_response(self, invitation: ProjectInvitation) -> InvitationResponse:
        invitee = aliased(User)
        inviter = aliased(User)
        result = await self.db.execute(
            select(Project.title, invitee.email, inviter.email)
            .select_from(ProjectInvitation)
            .join(Project, ProjectInvitation.project_id == Project.id)
            .join(invitee, ProjectInvitation.invitee_id == invitee.id)
            .join(inviter, ProjectInvitation.inviter_id == inviter.id)
            .where(ProjectInvitation.id == invitation.id)
        )
        project_title, invitee_email, inviter_email = result.one()
        return InvitationResponse(
            id=invitation.id,
            project_id=invitation.project_id,
            project_title=project_title,
            invitee_id=invitation.invitee_id,
            invitee_email=invitee_email,
            inviter_id=invitation.inviter_id,
            inviter_email=inviter_email,
            role=invitation.role.value,
            status=invitation.status.value,
            invited_at=invitation.invited_at,
            responded_at=invitation.responded_at,
        )

    # -----------------------------------------------------------------------
    # Invite
    # -----------------------------------------------------------------------

    async def invite(
        self, project_id: UUID, email: str, role: ProjectRole, inviter: User
    ) -> InvitationResponse:
        """
        Invite an existing user to the project.

        - Requires Owner or Admin role
        - Invitee must not be a member or hold a pending invitation
        - Role cannot be owner
        - Queues invitation email via Celery
        """
        logger.debug("Inviting %s to project %s", email, project_id)
        await self.members.verify_can_manage_members(project_id, inviter.id)
        project = await self.members.get_project(project_id)

        result = await self.db.execute(select(User).where(User.email == email.lower()))
        invitee = result.scalar_one_or_none()
        if invitee is None:
            raise NotFoundError("USER_NOT_FOUND", "User not found")

        if await self.members.is_member(project_id, invitee.id):
            raise ConflictError("ALREADY_MEMBER", "User is already a member of this project")

        existing = await self.db.execute(
            select(ProjectInvitation.id).where(
                ProjectInvitation.project_id == project_id,
                ProjectInvitation.invitee_id == invitee.id,
                ProjectInvitation.status == InvitationStatus.pending,
            )
        )
        if existing.first() is not None:
            raise ConflictError("INVITE_EXISTS", "User already has a pending invitation")

        if role == ProjectRole.owner:
            raise ConflictError("CANNOT_INVITE_OWNER", "Cannot invite someone as OWNER")

        invitation = ProjectInvitation(
            project_id=project_id,
            invitee_id=invitee.id,
            inviter_id=inviter.id,
            role=role,
            status=InvitationStatus.pending,
        )
        self.db.add(invitation)
        await flush_or_conflict(self.db, "INVITE_EXISTS", "User already has a pending invitation")
        logger.info("Invitation sent to %s for project %s", invitee.email, project_id)

        _queue_invitation_email(
            to_email=invitee.email,
            project_title=project.title,
            inviter_name=inviter.display_name,
            role=role.value,
        )

        return await self._to_response(invitation)

    # -----------------------------------------------------------------------
    # Invitee decisions
    # -----------------------------------------------------------------------

    async def accept(self, invitation_id: UUID, actor: User) -> MemberResponse:
        """
        Accept an invitation.

        - Only the invitee may accept
        - Invitation must still be pending
        - Adds the invitee with the invited role
        """
        logger.debug("User %s accepting invitation %s", actor.id, invitation_id)
        invitation = await self._get_invitation(invitation_id)

        if invitation.invitee_id != actor.id:
            raise ForbiddenError("NOT_INVITEE", "This invitation is not for you")

        if invitation.status.is_terminal:
            raise ConflictError(
                "INVITE_NOT_PENDING",
                f"This invitation is no longer valid (status: {invitation.status.value})",
            )

        if await self.members.is_member(invitation.project_id, actor.id):
            raise ConflictError("ALREADY_MEMBER", "You are already a member of this project")

        await self._respond(invitation, InvitationStatus.accepted)
        member = await self.members.create_membership(
            invitation.project_id, actor.id, invitation.role
        )
        logger.info(
            "User %s accepted invitation and joined project %s", actor.id, invitation.project_id
        )
        return await self.members.member_response(member)

    async def decline(self, invitation_id: UUID, actor: User) -> InvitationResponse:
        logger.debug("User %s declining invitation %s", actor.id, invitation_id)
        invitation = await self._get_invitation(invitation_id)

        if invitation.invitee_id != actor.id:
            raise ForbiddenError("NOT_INVITEE", "This invitation is not for you")

        await self._respond(invitation, InvitationStatus.declined)
        logger.info("User %s declined invitation to project %s", actor.id, invitation.project_id)
        return await self._to_response(invitation)

    # -----------------------------------------------------------------------
    # Cancel
    # -----------------------------------------------------------------------

    async def cancel(self, invitation_id: UUID, project_id: UUID, actor: User) -> InvitationResponse:
        """Cancel a pending invitation. Requires Owner or Admin role on the project."""
        logger.debug("Cancelling invitation %s", invitation_id)
        await self.members.verify_can_manage_members(project_id, actor.id)

        invitation = await self._get_invitation(invitation_id)
        if invitation.project_id != project_id:
            raise NotFoundError("INVITE_NOT_FOUND", "Invitation does not belong to this project")

        await self._respond(invitation, InvitationStatus.cancelled)
        logger.info("Invitation %s cancelled", invitation_id)
        return await self._to_response(invitation)

    # -----------------------------------------------------------------------
    # Queries
    # -----------------------------------------------------------------------

    async def list_pending_for_user(self, actor: User) -> InvitationListResponse:
        result = await self.db.execute(
            select(ProjectInvitation)
            .where(
                ProjectInvitation.invitee_id == actor.id,
                ProjectInvitation.status == InvitationStatus.pending,
            )
            .order_by(ProjectInvitation.invited_at)
        )
        invitations = [await self._to_response(i) for i in result.scalars().all()]
        return InvitationListResponse(invitations=invitations, total=len(invitations))

    async def list_for_project(self, project_id: UUID, actor: User) -> InvitationListResponse:
        await self.members.verify_can_manage_members(project_id, actor.id)
        result = await self.db.execute(
            select(ProjectInvitation)
            .where(ProjectInvitation.project_id == project_id)
            .order_by(ProjectInvitation.invited_at)
        )
        invitations = [await self._to_response(i) for i in result.scalars().all()]
        return InvitationListResponse(invitations=invitations, total=len(invitations))

    # -----------------------------------------------------------------------
    # Invite codes
    # -----------------------------------------------------------------------

    async def generate_invite_code(self, project_id: UUID, actor: User) -> InviteCodeResponse:
        """
        Generate a fresh invite code, replacing any previous one.

        Retries on collision with another project's code.
        """
        logger.debug("Generating invite code for project %s", project_id)
        await self.members.verify_can_manage_members(project_id, actor.id)
        project = await self.members.get_project(project_id)

        for _ in range(settings.INVITE_CODE_MAX_ATTEMPTS):
            code = generate_invite_code()
            taken = await self.db.execute(
                select(Project.id).where(Project.invite_code == code)
            )
            if taken.first() is None:
                break
        else:
            raise ConflictError(
                "INVITE_CODE_EXHAUSTED", "Could not generate a unique invite code, try again"
            )

        project.invite_code = code
        await flush_or_conflict(
            self.db, "INVITE_CODE_TAKEN", "Could not generate a unique invite code, try again"
        )
        logger.info("Generated invite code for project %s", project_id)
        return InviteCodeResponse(project_id=project.id, invite_code=code)

    async def join_by_code(self, code: str, actor: User) -> MemberResponse:
        """Join the project holding ``code``. Always joins as member."""
        logger.debug("User %s joining project by invite code", actor.id)
        result = await self.db.execute(select(Project).where(Project.invite_code == code))
        project = result.scalar_one_or_none()
        if project is None:
            raise NotFoundError("INVALID_INVITE_CODE", "Invalid invite code")

        if await self.members.is_member(project.id, actor.id):
            raise ConflictError("ALREADY_MEMBER", "You are already a member of this project")

        member = await self.members.create_membership(project.id, actor.id, ProjectRole.member)
        logger.info("User %s joined project %s via invite code", actor.id, project.id)
        return await self.members.member_response(member)
