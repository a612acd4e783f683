"""Concrete client ↔ tag edge repository backed by SQLAlchemy Core."""

import logging
from collections.abc import Sequence

from sqlalchemy import delete, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from clientbook.application.interfaces import ClientTagRepository
from clientbook.domain.entities import Tag
from clientbook.infrastructure.database.repositories.record_repository import run_statement
from clientbook.infrastructure.database.repositories.tag_repository import row_to_tag
from clientbook.infrastructure.database.schema import StoreSchema

logger = logging.getLogger(__name__)

_ENTITY = "ClientTag"


class SQLAlchemyClientTagRepository(ClientTagRepository):
    """Implements the ClientTagRepository port on the ``client_tags`` table."""

    def __init__(self, session: AsyncSession, schema: StoreSchema):
        self._session = session
        self._schema = schema
        self._edges = schema.client_tags

    async def add_edge(self, client_id: str, tag_id: str) -> None:
        await run_statement(
            self._session,
            insert(self._edges).values(client_id=client_id, tag_id=tag_id),
            "add",
            _ENTITY,
        )

    async def remove_edge(self, client_id: str, tag_id: str) -> bool:
        result = await run_statement(
            self._session,
            delete(self._edges).where(
                self._edges.c.client_id == client_id,
                self._edges.c.tag_id == tag_id,
            ),
            "remove",
            _ENTITY,
        )
        return result.rowcount > 0

    async def replace_edges(self, client_id: str, tag_ids: Sequence[str]) -> None:
        await self.remove_client_edges(client_id)
        unique_ids = list(dict.fromkeys(tag_ids))
        if not unique_ids:
            return
        await run_statement(
            self._session,
            insert(self._edges),
            "add",
            _ENTITY,
            [{"client_id": client_id, "tag_id": tag_id} for tag_id in unique_ids],
        )
        logger.debug("Client %s now carries %d tag(s)", client_id, len(unique_ids))

    async def edge_tag_ids(self, client_id: str) -> list[str]:
        result = await run_statement(
            self._session,
            select(self._edges.c.tag_id).where(self._edges.c.client_id == client_id),
            "read",
            _ENTITY,
        )
        return list(result.scalars().all())

    async def load_edges_for_clients(
        self, client_ids: Sequence[str]
    ) -> dict[str, list[Tag]]:
        grouped: dict[str, list[Tag]] = {client_id: [] for client_id in client_ids}
        if not grouped:
            return grouped

        tags = self._schema.tags
        stmt = (
            select(tags, self._edges.c.client_id.label("edge_client_id"))
            .join(self._edges, self._edges.c.tag_id == tags.c.id)
            .where(self._edges.c.client_id.in_(list(grouped)))
            .order_by(tags.c.name.asc())
        )
        result = await run_statement(self._session, stmt, "read", _ENTITY)
        for row in result.mappings().all():
            grouped[row["edge_client_id"]].append(row_to_tag(row))
        return grouped

    async def edges_for_tag(self, tag_id: str) -> list[str]:
        result = await run_statement(
            self._session,
            select(self._edges.c.client_id).where(self._edges.c.tag_id == tag_id),
            "read",
            _ENTITY,
        )
        return list(result.scalars().all())

    async def remove_client_edges(self, client_id: str) -> int:
        result = await run_statement(
            self._session,
            delete(self._edges).where(self._edges.c.client_id == client_id),
            "remove",
            _ENTITY,
        )
        return result.rowcount

    async def remove_tag_edges(self, tag_id: str) -> int:
        result = await run_statement(
            self._session,
            delete(self._edges).where(self._edges.c.tag_id == tag_id),
            "remove",
            _ENTITY,
        )
        return result.rowcount

    async def repoint_edges(self, source_tag_id: str, target_tag_id: str) -> int:
        source_clients = await self.edges_for_tag(source_tag_id)
        target_clients = set(await self.edges_for_tag(target_tag_id))
        moved = [client_id for client_id in source_clients if client_id not in target_clients]

        if moved:
            await run_statement(
                self._session,
                insert(self._edges),
                "add",
                _ENTITY,
                [{"client_id": client_id, "tag_id": target_tag_id} for client_id in moved],
            )
        await self.remove_tag_edges(source_tag_id)
        logger.debug(
            "Repointed %d edge(s) from tag %s to %s", len(moved), source_tag_id, target_tag_id
        )
        return len(moved)
