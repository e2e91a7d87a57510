"""
ProjectInvitation ORM model.
"""

from __future__ import annotations

import enum
from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import DateTime, Enum, ForeignKey, Index, func, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, UUIDMixin, utcnow
from app.models.member import ProjectRole

if TYPE_CHECKING:
    from app.models.project import Project
    from app.models.user import User


class InvitationStatus(str, enum.Enum):
    """Invitation lifecycle. pending is the only non-terminal state."""

    pending = "pending"
    accepted = "accepted"
    declined = "declined"
    cancelled = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self is not InvitationStatus.pending


class ProjectInvitation(Base, UUIDMixin):
    """A proposed membership awaiting the invitee's decision."""

    __tablename__ = "project_invitations"
    __table_args__ = (
        # At most one pending invitation per (project, invitee).
        Index(
            "uq_project_invitations_pending",
            "project_id",
            "invitee_id",
            unique=True,
            postgresql_where=text("status = 'pending'"),
            sqlite_where=text("status = 'pending'"),
        ),
    )

    project_id: Mapped[UUID] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True
    )
    invitee_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    inviter_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    role: Mapped[ProjectRole] = mapped_column(
        Enum(ProjectRole, name="project_role"), nullable=False
    )
    status: Mapped[InvitationStatus] = mapped_column(
        Enum(InvitationStatus, name="invitation_status"),
        nullable=False,
        default=InvitationStatus.pending,
    )
    invited_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )
    responded_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Relationships
    project: Mapped[Project] = relationship("Project", back_populates="invitations")
    invitee: Mapped[User] = relationship("User", foreign_keys=[invitee_id])
    inviter: Mapped[User] = relationship("User", foreign_keys=[inviter_id])

    def __repr__(self) -> str:
        return (
            f"<ProjectInvitation id={self.id} project_id={self.project_id} "
            f"invitee_id={self.invitee_id} status={self.status}>"
        )
