"""
User statistics endpoint.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends

from app.core.dependencies import get_current_user, get_stats_service
from app.models.user import User
from app.schemas.stats import UserStatsResponse
from app.services.stats_service import StatsService

router = APIRouter()


@router.get(
    "/stats",
    response_model=UserStatsResponse,
    summary="Statistics across the current user's projects",
)
async def get_user_statistics(
    current_user: User = Depends(get_current_user),
    service: StatsService = Depends(get_stats_service),
) -> UserStatsResponse:
    return await service.get_user_statistics(current_user)
