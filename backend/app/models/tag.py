"""
Tag and TaskTag ORM models.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import DateTime, ForeignKey, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, UUIDMixin, utcnow

if TYPE_CHECKING:
    from app.models.project import Project
    from app.models.task import Task


class Tag(Base, UUIDMixin):
    """A label that can be applied to tasks within a project."""

    __tablename__ = "tags"
    __table_args__ = (
        UniqueConstraint("project_id", "name", name="uq_tags_project_name"),
    )

    project_id: Mapped[UUID] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    color: Mapped[str] = mapped_column(String(7), nullable=False, default="#6366f1")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )

    # Relationships
    project: Mapped[Project] = relationship("Project", back_populates="tags")
    task_tags: Mapped[list[TaskTag]] = relationship(
        "TaskTag", back_populates="tag", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Tag id={self.id} name={self.name!r} project_id={self.project_id}>"


class TaskTag(Base):
    """Junction table linking tasks to tags."""

    __tablename__ = "task_tags"

    task_id: Mapped[UUID] = mapped_column(
        ForeignKey("tasks.id", ondelete="CASCADE"),
        primary_key=True,
    )
    tag_id: Mapped[UUID] = mapped_column(
        ForeignKey("tags.id", ondelete="CASCADE"),
        primary_key=True,
    )

    # Relationships
    task: Mapped[Task] = relationship("Task", back_populates="task_tags")
    tag: Mapped[Tag] = relationship("Tag", back_populates="task_tags")

    def __repr__(self) -> str:
        return f"<TaskTag task_id={self.task_id} tag_id={self.tag_id}>"
