"""
User lookup for the invite and add-member flows.
"""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User
from app.schemas.user import UserSearchResponse, UserSearchResult

logger = logging.getLogger(__name__)

SEARCH_RESULT_LIMIT = 10


class UserService:

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def search_by_email(self, query: str | None, actor: User) -> UserSearchResponse:
        """
        Case-insensitive substring match on email among active users.

        A blank query returns nothing. ``%`` and ``_`` in the query match
        literally.
        """
        term = (query or "").strip()
        if not term:
            return UserSearchResponse(users=[], total=0)

        logger.debug("User %s searching emails for %r", actor.id, term)
        escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        pattern = f"%{escaped}%"

        result = await self.db.execute(
            select(User)
            .where(User.email.ilike(pattern, escape="\\"), User.is_active.is_(True))
            .order_by(User.email)
            .limit(SEARCH_RESULT_LIMIT)
        )
        users = [UserSearchResult.model_validate(u) for u in result.scalars().all()]
        return UserSearchResponse(users=users, total=len(users))
