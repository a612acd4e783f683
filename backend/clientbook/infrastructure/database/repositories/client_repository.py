"""Concrete Client repository backed by SQLAlchemy Core."""

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from sqlalchemy import ColumnElement, RowMapping, Table, select
from sqlalchemy.ext.asyncio import AsyncSession

from clientbook.application.interfaces import (
    ClientRepository,
    ClientTagRepository,
    Criteria,
    OrderBy,
)
from clientbook.domain.entities import Client, ClientStatus
from clientbook.infrastructure.database.document_codec import DocumentCodec
from clientbook.infrastructure.database.repositories.record_repository import (
    LIKE_ESCAPE,
    SQLAlchemyRecordRepository,
    utc_datetime,
)
from clientbook.infrastructure.database.schema import StoreSchema

logger = logging.getLogger(__name__)


def row_to_client(row: Mapping[str, Any], codec: DocumentCodec) -> Client:
    """Map a ``clients`` row → Client entity, decoding the document column."""
    try:
        status = ClientStatus(row["status"])
    except ValueError:
        logger.warning("Client %s has unknown status '%s'; treating as active", row["id"], row["status"])
        status = ClientStatus.ACTIVE
    return Client(
        id=row["id"],
        name=row["name"],
        slug=row["slug"],
        status=status,
        created_at=utc_datetime(row["created_at"]),
        updated_at=utc_datetime(row["updated_at"]),
        document=codec.decode(row["data"]),
    )


def client_to_row(client: Client, codec: DocumentCodec) -> dict[str, Any]:
    return {
        "id": client.id,
        "name": client.name,
        "slug": client.slug,
        "status": client.status.value,
        "created_at": client.created_at,
        "updated_at": client.updated_at,
        "data": codec.encode(client.document),
    }


class SQLAlchemyClientRepository(SQLAlchemyRecordRepository[Client], ClientRepository):
    """Implements the ClientRepository port on the ``clients`` table.

    Search additionally matches the names of tags attached to a client.
    """

    entity_type = "Client"
    search_fields = ("name", "slug")

    def __init__(self, session: AsyncSession, schema: StoreSchema, edges: ClientTagRepository):
        super().__init__(session, schema)
        self._edges = edges

    def _select_table(self, schema: StoreSchema) -> Table:
        return schema.clients

    def _to_entity(self, row: RowMapping) -> Client:
        return row_to_client(row, self._codec)

    def _to_row(self, entity: Client) -> dict[str, Any]:
        return client_to_row(entity, self._codec)

    async def delete(self, record_id: str) -> bool:
        removed = await self._edges.remove_client_edges(record_id)
        logger.debug("Removed %d tag edge(s) of client %s", removed, record_id)
        return await super().delete(record_id)

    async def find_by_status(
        self,
        status: ClientStatus | str,
        order_by: OrderBy | None = None,
        limit: int = 0,
        offset: int = 0,
    ) -> list[Client]:
        return await self.find({"status": status}, order_by, limit, offset)

    async def find_active(
        self, order_by: OrderBy | None = None, limit: int = 0, offset: int = 0
    ) -> list[Client]:
        return await self.find_by_status(ClientStatus.ACTIVE, order_by, limit, offset)

    async def find_with_tags(
        self,
        criteria: Criteria | None = None,
        order_by: OrderBy | None = None,
        limit: int = 0,
        offset: int = 0,
    ) -> list[Client]:
        clients = await self.find(criteria, order_by, limit, offset)
        await self.attach_tags(clients)
        return clients

    async def find_by_tag(
        self,
        tag_id: str,
        order_by: OrderBy | None = None,
        limit: int = 0,
        offset: int = 0,
    ) -> list[Client]:
        edges = self._schema.client_tags
        stmt = (
            select(self._table)
            .join(edges, edges.c.client_id == self._table.c.id)
            .where(edges.c.tag_id == tag_id)
        )
        stmt = self._ordered(stmt, order_by or {"name": "asc"})
        stmt = self._paginated(stmt, limit, offset)
        return await self._fetch_entities(stmt, "find")

    async def attach_tags(self, clients: Sequence[Client]) -> None:
        """Populate ``tags`` on every client with one batched edge query."""
        tags_by_client = await self._edges.load_edges_for_clients(
            [client.id for client in clients if client.id]
        )
        for client in clients:
            client.tags = tags_by_client.get(client.id, [])

    def _search_clauses(self, pattern: str, fields: Sequence[str]) -> list[ColumnElement[bool]]:
        clauses = super()._search_clauses(pattern, fields)
        tags = self._schema.tags
        edges = self._schema.client_tags
        tagged = (
            select(edges.c.client_id)
            .join(tags, tags.c.id == edges.c.tag_id)
            .where(tags.c.name.ilike(pattern, escape=LIKE_ESCAPE))
        )
        clauses.append(self._table.c.id.in_(tagged))
        return clauses
