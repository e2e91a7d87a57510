"""
Tag endpoints.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, status

from app.core.dependencies import get_current_user, get_tag_service
from app.models.user import User
from app.schemas.tag import TagCreateRequest, TagListResponse, TagResponse
from app.services.tag_service import TagService

router = APIRouter()


@router.get(
    "/projects/{project_id}/tags",
    response_model=TagListResponse,
    summary="List project tags",
)
async def list_tags(
    project_id: UUID,
    current_user: User = Depends(get_current_user),
    service: TagService = Depends(get_tag_service),
) -> TagListResponse:
    return await service.list_tags(project_id, current_user)


@router.post(
    "/projects/{project_id}/tags",
    response_model=TagResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a tag",
)
async def create_tag(
    project_id: UUID,
    data: TagCreateRequest,
    current_user: User = Depends(get_current_user),
    service: TagService = Depends(get_tag_service),
) -> TagResponse:
    return await service.create_tag(project_id, data, current_user)


@router.delete(
    "/tags/{tag_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a tag",
)
async def delete_tag(
    tag_id: UUID,
    current_user: User = Depends(get_current_user),
    service: TagService = Depends(get_tag_service),
) -> None:
    await service.delete_tag(tag_id, current_user)
