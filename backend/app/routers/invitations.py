"""
Invitation endpoints.

Direct invitations, invitee decisions, invite codes and code joins.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, status

from app.core.dependencies import get_current_user, get_invitation_service
from app.models.member import ProjectRole
from app.models.user import User
from app.schemas.invitation import (
    InvitationListResponse,
    InvitationResponse,
    InviteCodeResponse,
    InviteRequest,
    JoinProjectRequest,
)
from app.schemas.member import MemberResponse
from app.services.invitation_service import InvitationService

router = APIRouter()


# ---------------------------------------------------------------------------
# Project side
# ---------------------------------------------------------------------------

@router.post(
    "/projects/{project_id}/invitations",
    response_model=InvitationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Invite a user to the project",
)
async def invite_user(
    project_id: UUID,
    data: InviteRequest,
    current_user: User = Depends(get_current_user),
    service: InvitationService = Depends(get_invitation_service),
) -> InvitationResponse:
    """
    Invite an existing user by email.

    - Requires Owner or Admin role
    - Sends invitation email via Celery
    """
    return await service.invite(project_id, data.email, ProjectRole(data.role), current_user)


@router.get(
    "/projects/{project_id}/invitations",
    response_model=InvitationListResponse,
    summary="List all invitations of a project",
)
async def list_project_invitations(
    project_id: UUID,
    current_user: User = Depends(get_current_user),
    service: InvitationService = Depends(get_invitation_service),
) -> InvitationListResponse:
    return await service.list_for_project(project_id, current_user)


@router.post(
    "/projects/{project_id}/invitations/{invitation_id}/cancel",
    response_model=InvitationResponse,
    summary="Cancel a pending invitation",
)
async def cancel_invitation(
    project_id: UUID,
    invitation_id: UUID,
    current_user: User = Depends(get_current_user),
    service: InvitationService = Depends(get_invitation_service),
) -> InvitationResponse:
    return await service.cancel(invitation_id, project_id, current_user)


@router.post(
    "/projects/{project_id}/invite-code",
    response_model=InviteCodeResponse,
    summary="Generate a new invite code",
)
async def generate_invite_code(
    project_id: UUID,
    current_user: User = Depends(get_current_user),
    service: InvitationService = Depends(get_invitation_service),
) -> InviteCodeResponse:
    """Replaces any previous code; the old code stops working immediately."""
    return await service.generate_invite_code(project_id, current_user)


@router.post(
    "/projects/join",
    response_model=MemberResponse,
    summary="Join a project with an invite code",
)
async def join_project(
    data: JoinProjectRequest,
    current_user: User = Depends(get_current_user),
    service: InvitationService = Depends(get_invitation_service),
) -> MemberResponse:
    return await service.join_by_code(data.invite_code, current_user)


# ---------------------------------------------------------------------------
# Invitee side
# ---------------------------------------------------------------------------

@router.get(
    "/invitations",
    response_model=InvitationListResponse,
    summary="List the current user's pending invitations",
)
async def list_my_invitations(
    current_user: User = Depends(get_current_user),
    service: InvitationService = Depends(get_invitation_service),
) -> InvitationListResponse:
    return await service.list_pending_for_user(current_user)


@router.post(
    "/invitations/{invitation_id}/accept",
    response_model=MemberResponse,
    summary="Accept an invitation",
)
async def accept_invitation(
    invitation_id: UUID,
    current_user: User = Depends(get_current_user),
    service: InvitationService = Depends(get_invitation_service),
) -> MemberResponse:
    return await service.accept(invitation_id, current_user)


@router.post(
    "/invitations/{invitation_id}/decline",
    response_model=InvitationResponse,
    summary="Decline an invitation",
)
async def decline_invitation(
    invitation_id: UUID,
    current_user: User = Depends(get_current_user),
    service: InvitationService = Depends(get_invitation_service),
) -> InvitationResponse:
    return await service.decline(invitation_id, current_user)
