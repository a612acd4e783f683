"""Concrete Tag repository backed by SQLAlchemy Core."""

import logging
from collections.abc import Mapping
from typing import Any

from sqlalchemy import RowMapping, Select, Table, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from clientbook.application.interfaces import ClientTagRepository, OrderBy, TagRepository
from clientbook.domain.entities import Tag
from clientbook.domain.slug import slugify
from clientbook.infrastructure.database.repositories.record_repository import (
    SQLAlchemyRecordRepository,
    utc_datetime,
)
from clientbook.infrastructure.database.schema import StoreSchema

logger = logging.getLogger(__name__)

CLIENT_COUNT = "client_count"


def row_to_tag(row: Mapping[str, Any]) -> Tag:
    """Map a ``tags`` row (optionally carrying a client count) → Tag entity."""
    created_at = utc_datetime(row["created_at"])
    return Tag(
        id=row["id"],
        name=row["name"],
        slug=row["slug"],
        color=row["color"],
        description=row["description"],
        created_at=created_at,
        updated_at=created_at,
        client_count=int(row[CLIENT_COUNT]) if CLIENT_COUNT in row else None,
    )


def tag_to_row(tag: Tag) -> dict[str, Any]:
    return {
        "id": tag.id,
        "name": tag.name,
        "slug": tag.slug,
        "color": tag.color,
        "description": tag.description,
        "created_at": tag.created_at,
    }


class SQLAlchemyTagRepository(SQLAlchemyRecordRepository[Tag], TagRepository):
    """Implements the TagRepository port on the ``tags`` table."""

    entity_type = "Tag"
    search_fields = ("name", "slug", "description")

    def __init__(
        self,
        session: AsyncSession,
        schema: StoreSchema,
        edges: ClientTagRepository,
        default_color: str = Tag.DEFAULT_COLORS[0],
    ):
        super().__init__(session, schema)
        self._edges = edges
        self._default_color = default_color

    def _select_table(self, schema: StoreSchema) -> Table:
        return schema.tags

    def _to_entity(self, row: RowMapping) -> Tag:
        return row_to_tag(row)

    def _to_row(self, entity: Tag) -> dict[str, Any]:
        return tag_to_row(entity)

    async def save(self, record: Tag) -> Tag:
        if not record.color:
            record.color = self._default_color
        saved = await super().save(record)
        saved.updated_at = saved.created_at
        return saved

    async def delete(self, record_id: str) -> bool:
        await self._edges.remove_tag_edges(record_id)
        return await super().delete(record_id)

    async def find_or_create(self, name: str) -> Tag:
        name = name.strip()
        slug = slugify(name)
        if slug:
            existing = await self.find_by_slug(slug)
        else:
            # punctuation-only names have no slug of their own
            matches = await self.find({"name": name}, limit=1)
            existing = matches[0] if matches else None
        if existing is not None:
            return existing
        tag = Tag(name=name)
        logger.info("Creating tag '%s' on first use", name)
        return await self.save(tag)

    async def find_with_counts(self, order_by: OrderBy | None = None) -> list[Tag]:
        edges = self._schema.client_tags
        client_count = func.count(edges.c.client_id).label(CLIENT_COUNT)
        stmt = (
            select(self._table, client_count)
            .outerjoin(edges, edges.c.tag_id == self._table.c.id)
            .group_by(*self._table.c)
        )
        stmt = self._counted_order(stmt, order_by or {"name": "asc"}, client_count)
        return await self._fetch_entities(stmt, "count clients of")

    async def find_by_client(self, client_id: str) -> list[Tag]:
        edges = self._schema.client_tags
        stmt = (
            select(self._table)
            .join(edges, edges.c.tag_id == self._table.c.id)
            .where(edges.c.client_id == client_id)
            .order_by(self._table.c.name.asc())
        )
        return await self._fetch_entities(stmt, "find")

    async def merge_tags(self, source_id: str, target_id: str) -> bool:
        if source_id == target_id:
            return False
        if not await self.exists(source_id) or not await self.exists(target_id):
            return False

        moved = await self._edges.repoint_edges(source_id, target_id)
        await super().delete(source_id)
        logger.info("Merged tag %s into %s (%d client(s) moved)", source_id, target_id, moved)
        return True

    def _counted_order(self, stmt: Select, order_by: OrderBy, client_count) -> Select:
        for name, direction in order_by.items():
            column = client_count if name == CLIENT_COUNT else self._column(name)
            stmt = stmt.order_by(column.desc() if str(direction).upper() == "DESC" else column.asc())
        return stmt
