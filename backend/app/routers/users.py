"""
User search endpoint.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from app.core.dependencies import get_current_user, get_user_service
from app.models.user import User
from app.schemas.user import UserSearchResponse
from app.services.user_service import UserService

router = APIRouter()


@router.get(
    "/users/search",
    response_model=UserSearchResponse,
    summary="Find users by email",
)
async def search_users(
    email: str | None = Query(default=None, max_length=255),
    current_user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
) -> UserSearchResponse:
    """Case-insensitive email substring search, at most 10 results."""
    return await service.search_by_email(email, current_user)
