"""Application service (use case) for Tag operations."""

import logging

from clientbook.application.interfaces import OrderBy, TagRepository
from clientbook.application.schemas.tag import TagCreate, TagUpdate
from clientbook.application.services.validation import ValidationResult
from clientbook.domain.entities import Tag
from clientbook.domain.exceptions import EntityNotFoundError

logger = logging.getLogger(__name__)

NAME_MAX_LENGTH = 100


class TagService:
    """Orchestrates tag CRUD, counting and merging. Depends on the repository port (DI)."""

    def __init__(self, repository: TagRepository):
        self._repository = repository

    async def validate(self, tag: Tag, exclude_id: str | None = None) -> ValidationResult:
        result = ValidationResult(Tag.ENTITY_TYPE)

        if not tag.name:
            result.add("name_required", "Tag name is required.")
        if len(tag.name) > NAME_MAX_LENGTH:
            result.add("name_too_long", f"Tag name must be {NAME_MAX_LENGTH} characters or less.")
        if not tag.has_valid_color:
            result.add("invalid_color", "Tag color must be a hex value such as #3b82f6.")

        if tag.slug:
            existing = await self._repository.find_by_slug(tag.slug)
            if existing is not None and existing.id != exclude_id:
                result.add("slug_exists", "A tag with this slug already exists.")
        return result

    async def create(self, data: TagCreate) -> Tag:
        tag = Tag().fill(data.model_dump(exclude_unset=True))
        (await self.validate(tag)).raise_for_issues()
        tag = await self._repository.save(tag)
        logger.info("Created tag '%s' (%s)", tag.name, tag.id)
        return tag

    async def update(self, tag_id: str, data: TagUpdate) -> Tag:
        tag = await self.get(tag_id)
        tag.fill(data.model_dump(exclude_unset=True))
        (await self.validate(tag, exclude_id=tag_id)).raise_for_issues()
        return await self._repository.save(tag)

    async def delete(self, tag_id: str) -> bool:
        await self.get(tag_id)
        return await self._repository.delete(tag_id)

    async def get(self, tag_id: str) -> Tag:
        tag = await self._repository.find_by_id(tag_id)
        if tag is None:
            raise EntityNotFoundError(Tag.ENTITY_TYPE, tag_id)
        return tag

    async def list_with_counts(self, order_by: OrderBy | None = None) -> list[Tag]:
        return await self._repository.find_with_counts(order_by)

    async def search(self, query: str, limit: int = 0, offset: int = 0) -> list[Tag]:
        return await self._repository.search(query, limit=limit, offset=offset)

    async def find_or_create(self, name: str) -> Tag:
        return await self._repository.find_or_create(name)

    async def merge(self, source_id: str, target_id: str) -> bool:
        """Fold the source tag into the target. False when nothing was merged."""
        merged = await self._repository.merge_tags(source_id, target_id)
        if not merged:
            logger.info("Tag merge %s -> %s skipped", source_id, target_id)
        return merged
