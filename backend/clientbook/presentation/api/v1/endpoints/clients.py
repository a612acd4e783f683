"""Client endpoints — CRUD, search, status counts, tagging and export."""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, status

from clientbook.application.schemas import (
    ClientCounts,
    ClientCreate,
    ClientResponse,
    ClientTagsUpdate,
    ClientUpdate,
    TagResponse,
)
from clientbook.application.services import ClientService
from clientbook.domain.entities import ClientStatus
from clientbook.domain.exceptions import EntityNotFoundError
from clientbook.infrastructure.dependencies import get_client_service

router = APIRouter(prefix="/clients", tags=["Clients"])


def _not_found(exc: EntityNotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))


@router.get("", response_model=list[ClientResponse])
async def list_clients(
    client_status: ClientStatus | None = Query(None, alias="status", description="Filter by status"),
    limit: int = Query(0, ge=0, le=500, description="0 returns every client"),
    offset: int = Query(0, ge=0),
    with_tags: bool = Query(False),
    service: ClientService = Depends(get_client_service),
) -> list[ClientResponse]:
    """Retrieve clients ordered by name, optionally filtered by status."""
    clients = await service.list_clients(
        status=client_status, limit=limit, offset=offset, with_tags=with_tags
    )
    return [ClientResponse.model_validate(c, from_attributes=True) for c in clients]


@router.get("/search", response_model=list[ClientResponse])
async def search_clients(
    q: str = Query(..., min_length=1, description="Substring matched against names, details and tag names"),
    limit: int = Query(0, ge=0, le=500),
    offset: int = Query(0, ge=0),
    service: ClientService = Depends(get_client_service),
) -> list[ClientResponse]:
    clients = await service.search(q, limit=limit, offset=offset)
    return [ClientResponse.model_validate(c, from_attributes=True) for c in clients]


@router.get("/counts", response_model=ClientCounts)
async def count_clients(
    service: ClientService = Depends(get_client_service),
) -> ClientCounts:
    """Number of clients per status plus the overall total."""
    return ClientCounts(**await service.counts_by_status())


@router.get("/export")
async def export_clients(
    client_status: ClientStatus | None = Query(None, alias="status"),
    service: ClientService = Depends(get_client_service),
) -> list[dict[str, Any]]:
    criteria = {"status": client_status} if client_status else None
    return await service.export(criteria)


@router.get("/by-slug/{slug}", response_model=ClientResponse)
async def get_client_by_slug(
    slug: str,
    service: ClientService = Depends(get_client_service),
) -> ClientResponse:
    try:
        client = await service.get_by_slug(slug)
    except EntityNotFoundError as e:
        raise _not_found(e)
    client.tags = await service.get_tags(client.id)
    return ClientResponse.model_validate(client, from_attributes=True)


@router.get("/{client_id}", response_model=ClientResponse)
async def get_client(
    client_id: str,
    service: ClientService = Depends(get_client_service),
) -> ClientResponse:
    """Retrieve a single client, with its tags, by ID."""
    try:
        client = await service.get(client_id)
    except EntityNotFoundError as e:
        raise _not_found(e)
    client.tags = await service.get_tags(client_id)
    return ClientResponse.model_validate(client, from_attributes=True)


@router.post("", response_model=ClientResponse, status_code=status.HTTP_201_CREATED)
async def create_client(
    data: ClientCreate,
    service: ClientService = Depends(get_client_service),
) -> ClientResponse:
    """Create a new client; tag names that do not exist yet are created."""
    client = await service.create(data)
    return ClientResponse.model_validate(client, from_attributes=True)


@router.put("/{client_id}", response_model=ClientResponse)
async def update_client(
    client_id: str,
    data: ClientUpdate,
    service: ClientService = Depends(get_client_service),
) -> ClientResponse:
    """Update an existing client. Tags are replaced only when ``tags`` is sent."""
    try:
        client = await service.update(client_id, data)
    except EntityNotFoundError as e:
        raise _not_found(e)
    return ClientResponse.model_validate(client, from_attributes=True)


@router.post("/{client_id}/archive", response_model=ClientResponse)
async def archive_client(
    client_id: str,
    service: ClientService = Depends(get_client_service),
) -> ClientResponse:
    try:
        client = await service.archive(client_id)
    except EntityNotFoundError as e:
        raise _not_found(e)
    return ClientResponse.model_validate(client, from_attributes=True)


@router.post("/{client_id}/activate", response_model=ClientResponse)
async def activate_client(
    client_id: str,
    service: ClientService = Depends(get_client_service),
) -> ClientResponse:
    try:
        client = await service.activate(client_id)
    except EntityNotFoundError as e:
        raise _not_found(e)
    return ClientResponse.model_validate(client, from_attributes=True)


@router.put("/{client_id}/tags", response_model=list[TagResponse])
async def replace_client_tags(
    client_id: str,
    data: ClientTagsUpdate,
    service: ClientService = Depends(get_client_service),
) -> list[TagResponse]:
    """Replace the client's tags with the given tag ids or names."""
    try:
        await service.sync_tags(client_id, data.tags)
    except EntityNotFoundError as e:
        raise _not_found(e)
    tags = await service.get_tags(client_id)
    return [TagResponse.model_validate(t, from_attributes=True) for t in tags]


@router.delete("/{client_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_client(
    client_id: str,
    service: ClientService = Depends(get_client_service),
) -> None:
    """Delete a client and its tag associations."""
    try:
        await service.delete(client_id)
    except EntityNotFoundError as e:
        raise _not_found(e)
