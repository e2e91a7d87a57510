from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel


class UserSearchResult(BaseModel):
    id: UUID
    email: str

    model_config = {"from_attributes": True}


class UserSearchResponse(BaseModel):
    users: list[UserSearchResult]
    total: int
