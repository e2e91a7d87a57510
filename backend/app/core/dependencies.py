"""
FastAPI dependency injection functions.

Provides the authenticated user and service instances.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.exceptions import UnauthorizedError
from app.core.security import decode_access_token
from app.models.user import User
from app.services.invitation_service import InvitationService
from app.services.membership_service import MembershipService
from app.services.project_service import ProjectService
from app.services.stats_service import StatsService
from app.services.tag_service import TagService
from app.services.task_service import TaskService
from app.services.user_service import UserService

# ---------------------------------------------------------------------------
# HTTP Bearer scheme (auto_error=False so we can return custom 401)
# ---------------------------------------------------------------------------

bearer_scheme = HTTPBearer(auto_error=False)


# ---------------------------------------------------------------------------
# Current user
# ---------------------------------------------------------------------------

async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Validate Bearer JWT and return the authenticated User.

    Raises 401 if:
    - No token provided
    - Token is invalid or expired
    - User does not exist or is inactive
    """
    if credentials is None:
        raise UnauthorizedError("MISSING_TOKEN", "Authorization header required")

    try:
        payload = decode_access_token(credentials.credentials)
        user_id = UUID(payload["sub"])
    except (JWTError, ValueError):
        raise UnauthorizedError("INVALID_TOKEN", "Token is invalid or expired")

    user = await db.get(User, user_id)
    if user is None or not user.is_active:
        raise UnauthorizedError("USER_NOT_FOUND", "User not found or inactive")

    return user


# ---------------------------------------------------------------------------
# Services
# ---------------------------------------------------------------------------

def get_project_service(db: AsyncSession = Depends(get_db)) -> ProjectService:
    return ProjectService(db=db)


def get_membership_service(db: AsyncSession = Depends(get_db)) -> MembershipService:
    return MembershipService(db=db)


def get_invitation_service(db: AsyncSession = Depends(get_db)) -> InvitationService:
    return InvitationService(db=db)


def get_task_service(db: AsyncSession = Depends(get_db)) -> TaskService:
    return TaskService(db=db)


def get_tag_service(db: AsyncSession = Depends(get_db)) -> TagService:
    return TagService(db=db)


def get_stats_service(db: AsyncSession = Depends(get_db)) -> StatsService:
    return StatsService(db=db)


def get_user_service(db: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(db=db)
