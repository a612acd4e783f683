"""Pydantic DTOs (Data Transfer Objects) for the Client feature.

Input DTOs stay permissive about values (empty names, malformed emails) so
the service can report every validation issue at once.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from clientbook.application.schemas.tag import TagResponse
from clientbook.domain.entities import ClientStatus


class ClientCreate(BaseModel):
    """Schema for creating a new client."""

    name: str = Field("", examples=["Acme Corporation"])
    slug: str | None = Field(None, examples=["acme"])
    status: ClientStatus | None = None
    email: str | None = Field(None, examples=["hello@acme.com"])
    phone: str | None = None
    website: str | None = Field(None, examples=["https://acme.com"])
    industry: str | None = None
    notes: str | None = None
    logo: str | None = None
    description: str | None = None
    address: dict[str, str | None] | None = Field(
        None, examples=[{"street": "1 Main St", "city": "Springfield", "country": "US"}],
    )
    contacts: list[dict[str, Any]] | None = None
    document: dict[str, Any] | None = Field(
        None, description="Extra attributes merged into the client's document.",
    )
    tags: list[str] | None = Field(
        None, description="Tag ids or tag names.", examples=[["vip", "prospect"]],
    )


class ClientUpdate(ClientCreate):
    """Schema for updating an existing client — only the fields sent are applied."""

    name: str | None = None


class ClientTagsUpdate(BaseModel):
    """Schema for replacing a client's tag set."""

    tags: list[str] = Field(default_factory=list, examples=[["vip", "partner"]])


class ClientResponse(BaseModel):
    """Schema returned to the client."""

    id: str
    name: str
    slug: str
    status: ClientStatus
    status_label: str
    email: str | None = None
    phone: str | None = None
    website: str | None = None
    industry: str | None = None
    notes: str | None = None
    logo: str | None = None
    description: str | None = None
    address: dict[str, Any] | None = None
    contacts: list[Any] = Field(default_factory=list)
    document: dict[str, Any]
    tags: list[TagResponse] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ClientCounts(BaseModel):
    active: int = 0
    inactive: int = 0
    prospect: int = 0
    archived: int = 0
    all: int = 0
