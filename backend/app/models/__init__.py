"""
SQLAlchemy ORM models.

All models imported here to ensure they are registered with Base.metadata.
Import order matters: base models before dependent models.
"""

from app.models.base import Base, TimestampMixin, UUIDMixin
from app.models.user import User
from app.models.member import ProjectMember, ProjectRole
from app.models.project import Project
from app.models.invitation import InvitationStatus, ProjectInvitation
from app.models.task import RecurrencePattern, Task, TaskDependency, TaskPriority, TaskStatus
from app.models.tag import Tag, TaskTag

__all__ = [
    "Base",
    "TimestampMixin",
    "UUIDMixin",
    "User",
    "ProjectMember",
    "ProjectRole",
    "Project",
    "InvitationStatus",
    "ProjectInvitation",
    "RecurrencePattern",
    "Task",
    "TaskDependency",
    "TaskPriority",
    "TaskStatus",
    "Tag",
    "TaskTag",
]
