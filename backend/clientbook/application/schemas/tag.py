"""Pydantic DTOs (Data Transfer Objects) for the Tag feature."""

from datetime import datetime

from pydantic import BaseModel, Field


class TagCreate(BaseModel):
    """Schema for creating a new tag."""

    name: str = Field("", examples=["VIP"])
    slug: str | None = None
    color: str | None = Field(None, examples=["#3b82f6"])
    description: str | None = None


class TagUpdate(TagCreate):
    """Schema for updating an existing tag — only the fields sent are applied."""

    name: str | None = None


class TagMerge(BaseModel):
    source_id: str = Field(..., min_length=1)
    target_id: str = Field(..., min_length=1)


class TagResponse(BaseModel):
    """Schema returned to the client."""

    id: str
    name: str
    slug: str
    color: str | None
    description: str | None
    client_count: int | None = None
    created_at: datetime

    model_config = {"from_attributes": True}
