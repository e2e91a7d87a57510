"""
Project member endpoints.

List, add, remove members and change roles.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, status

from app.core.dependencies import get_current_user, get_membership_service
from app.models.member import ProjectRole
from app.models.user import User
from app.schemas.member import (
    AddMemberRequest,
    MemberResponse,
    MemberRoleUpdateRequest,
    MembersListResponse,
)
from app.services.membership_service import MembershipService

router = APIRouter()


@router.get(
    "/projects/{project_id}/members",
    response_model=MembersListResponse,
    summary="List project members",
)
async def list_members(
    project_id: UUID,
    current_user: User = Depends(get_current_user),
    service: MembershipService = Depends(get_membership_service),
) -> MembersListResponse:
    return await service.list_members(project_id, current_user)


@router.post(
    "/projects/{project_id}/members",
    response_model=MemberResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add an existing user to the project",
)
async def add_member(
    project_id: UUID,
    data: AddMemberRequest,
    current_user: User = Depends(get_current_user),
    service: MembershipService = Depends(get_membership_service),
) -> MemberResponse:
    """Requires Owner or Admin role. The owner role cannot be granted."""
    return await service.add_member(project_id, data.email, ProjectRole(data.role), current_user)


@router.patch(
    "/projects/{project_id}/members/{user_id}",
    response_model=MemberResponse,
    summary="Change a member's role",
)
async def update_member_role(
    project_id: UUID,
    user_id: UUID,
    data: MemberRoleUpdateRequest,
    current_user: User = Depends(get_current_user),
    service: MembershipService = Depends(get_membership_service),
) -> MemberResponse:
    """Owner only. The owner's role cannot be changed and nobody can become owner."""
    return await service.update_role(project_id, user_id, ProjectRole(data.role), current_user)


@router.delete(
    "/projects/{project_id}/members/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove a member",
)
async def remove_member(
    project_id: UUID,
    user_id: UUID,
    current_user: User = Depends(get_current_user),
    service: MembershipService = Depends(get_membership_service),
) -> None:
    await service.remove_member(project_id, user_id, current_user)
