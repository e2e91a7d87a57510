"""
Tag business logic.
"""

from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import flush_or_conflict
from app.core.exceptions import ConflictError, NotFoundError
from app.core.permissions import Action
from app.models.tag import Tag
from app.models.user import User
from app.schemas.tag import TagCreateRequest, TagListResponse, TagResponse
from app.services.membership_service import MembershipService

logger = logging.getLogger(__name__)


class TagService:

    def __init__(self, db: AsyncSession) -> None:
        self.db = db
        self.members = MembershipService(db)

    async def create_tag(self, project_id: UUID, data: TagCreateRequest, actor: User) -> TagResponse:
        logger.debug("Creating tag %r for project %s", data.name, project_id)
        await self.members.authorize(project_id, actor.id, Action.manage_tags)

        existing = await self.db.execute(
            select(Tag.id).where(Tag.project_id == project_id, Tag.name == data.name)
        )
        if existing.first() is not None:
            raise ConflictError("TAG_EXISTS", "Tag with this name already exists in this project")

        tag = Tag(project_id=project_id, name=data.name, color=data.color)
        self.db.add(tag)
        await flush_or_conflict(
            self.db, "TAG_EXISTS", "Tag with this name already exists in this project"
        )
        logger.info("Tag created: %r for project %s", tag.name, project_id)
        return TagResponse.model_validate(tag)

    async def list_tags(self, project_id: UUID, actor: User) -> TagListResponse:
        await self.members.authorize(project_id, actor.id, Action.view_project)
        result = await self.db.execute(
            select(Tag).where(Tag.project_id == project_id).order_by(Tag.name)
        )
        tags = [TagResponse.model_validate(t) for t in result.scalars().all()]
        return TagListResponse(tags=tags, total=len(tags))

    async def delete_tag(self, tag_id: UUID, actor: User) -> None:
        logger.debug("Deleting tag %s by user %s", tag_id, actor.id)
        tag = await self.db.get(Tag, tag_id)
        if tag is None:
            raise NotFoundError("TAG_NOT_FOUND", "Tag not found")
        await self.members.authorize(tag.project_id, actor.id, Action.manage_tags)

        await self.db.delete(tag)
        await self.db.flush()
        logger.info("Tag deleted: %s", tag_id)
