from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel, Field


class TagCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=50)
    color: str = Field(default="#6366f1", pattern="^#[0-9a-fA-F]{6}$")


class TagResponse(BaseModel):
    id: UUID
    project_id: UUID
    name: str
    color: str

    model_config = {"from_attributes": True}


class TagListResponse(BaseModel):
    tags: list[TagResponse]
    total: int
