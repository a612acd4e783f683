"""Tag endpoints — CRUD with client counts, search and merge."""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from clientbook.application.schemas import TagCreate, TagMerge, TagResponse, TagUpdate
from clientbook.application.services import TagService
from clientbook.domain.exceptions import EntityNotFoundError
from clientbook.infrastructure.dependencies import get_tag_service

router = APIRouter(prefix="/tags", tags=["Tags"])


@router.get("", response_model=list[TagResponse])
async def list_tags(
    sort: str = Query("name", pattern="^(name|client_count)$"),
    direction: str = Query("asc", pattern="^(asc|desc)$"),
    service: TagService = Depends(get_tag_service),
) -> list[TagResponse]:
    """Retrieve every tag with the number of clients carrying it."""
    tags = await service.list_with_counts({sort: direction})
    return [TagResponse.model_validate(t, from_attributes=True) for t in tags]


@router.get("/search", response_model=list[TagResponse])
async def search_tags(
    q: str = Query(..., min_length=1),
    limit: int = Query(0, ge=0, le=500),
    offset: int = Query(0, ge=0),
    service: TagService = Depends(get_tag_service),
) -> list[TagResponse]:
    tags = await service.search(q, limit=limit, offset=offset)
    return [TagResponse.model_validate(t, from_attributes=True) for t in tags]


@router.post("/merge")
async def merge_tags(
    data: TagMerge,
    service: TagService = Depends(get_tag_service),
) -> dict:
    """Move every client of the source tag onto the target tag, then delete the source."""
    merged = await service.merge(data.source_id, data.target_id)
    if not merged:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Tags could not be merged: they must be two different existing tags.",
        )
    return {"merged": True, "target_id": data.target_id}


@router.get("/{tag_id}", response_model=TagResponse)
async def get_tag(
    tag_id: str,
    service: TagService = Depends(get_tag_service),
) -> TagResponse:
    try:
        tag = await service.get(tag_id)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return TagResponse.model_validate(tag, from_attributes=True)


@router.post("", response_model=TagResponse, status_code=status.HTTP_201_CREATED)
async def create_tag(
    data: TagCreate,
    service: TagService = Depends(get_tag_service),
) -> TagResponse:
    tag = await service.create(data)
    return TagResponse.model_validate(tag, from_attributes=True)


@router.put("/{tag_id}", response_model=TagResponse)
async def update_tag(
    tag_id: str,
    data: TagUpdate,
    service: TagService = Depends(get_tag_service),
) -> TagResponse:
    try:
        tag = await service.update(tag_id, data)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return TagResponse.model_validate(tag, from_attributes=True)


@router.delete("/{tag_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_tag(
    tag_id: str,
    service: TagService = Depends(get_tag_service),
) -> None:
    """Delete a tag and detach it from every client."""
    try:
        await service.delete(tag_id)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
