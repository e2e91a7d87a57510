"""
Member schemas.

Request/response models for project membership endpoints.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field


class AddMemberRequest(BaseModel):
    """Request body for POST /projects/{project_id}/members."""

    email: EmailStr
    role: str = Field(default="member", pattern="^(owner|admin|member)$")


class MemberRoleUpdateRequest(BaseModel):
    """Request body for PATCH /projects/{project_id}/members/{user_id}."""

    role: str = Field(pattern="^(owner|admin|member)$")


class MemberResponse(BaseModel):
    """Single project member with user info and role."""

    id: UUID
    project_id: UUID
    user_id: UUID
    email: str
    display_name: str
    role: str
    joined_at: datetime


class MembersListResponse(BaseModel):
    members: list[MemberResponse]
    total: int
