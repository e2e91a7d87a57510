"""
Invitation schemas.

Request/response models for direct invitations and invite-code joins.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator


class InviteRequest(BaseModel):
    """Request body for POST /projects/{project_id}/invitations."""

    email: EmailStr
    role: str = Field(default="member", pattern="^(owner|admin|member)$")


class InvitationResponse(BaseModel):
    id: UUID
    project_id: UUID
    project_title: str
    invitee_id: UUID
    invitee_email: str
    inviter_id: UUID
    inviter_email: str
    role: str
    status: str
    invited_at: datetime
    responded_at: datetime | None


class InvitationListResponse(BaseModel):
    invitations: list[InvitationResponse]
    total: int


class InviteCodeResponse(BaseModel):
    project_id: UUID
    invite_code: str


class JoinProjectRequest(BaseModel):
    """Request body for POST /projects/join."""

    invite_code: str = Field(min_length=4, max_length=32)

    @field_validator("invite_code")
    @classmethod
    def normalize_code(cls, v: str) -> str:
        return v.strip().upper()
