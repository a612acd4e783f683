"""Physical schema of the record store.

The client and tag tables share one layout idea: indexed columns plus a
document column whose type depends on the database's capabilities. The
tables are therefore built at startup by ``build_schema`` once the
capability detector has answered, then created with ``create_all``.
"""

from dataclasses import dataclass, field

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    ForeignKey,
    Index,
    MetaData,
    String,
    Table,
    Text,
)
from sqlalchemy.dialects.mysql import LONGTEXT
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.types import TypeEngine

from clientbook.infrastructure.database.document_codec import DocumentCodec

CLIENTS_TABLE = "clients"
TAGS_TABLE = "tags"
CLIENT_TAGS_TABLE = "client_tags"


def document_column_type(native: bool) -> TypeEngine:
    """JSON (JSONB on PostgreSQL) when native, else the largest text type."""
    if native:
        return JSON().with_variant(JSONB(), "postgresql")
    return Text().with_variant(LONGTEXT(), "mysql", "mariadb")


@dataclass(frozen=True)
class StoreSchema:
    """The store's tables plus the document encoding they were built for."""

    native_documents: bool
    metadata: MetaData
    clients: Table
    tags: Table
    client_tags: Table
    codec: DocumentCodec = field(init=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "codec", DocumentCodec(self.native_documents))


def build_schema(native_documents: bool) -> StoreSchema:
    """Build the client, tag and client-tag tables on a fresh MetaData."""
    metadata = MetaData()

    clients = Table(
        CLIENTS_TABLE,
        metadata,
        Column("id", String(36), primary_key=True),
        Column("name", String(255), nullable=False),
        Column("slug", String(255), nullable=False, unique=True),
        Column("status", String(50), nullable=False, server_default="active"),
        Column("created_at", DateTime(timezone=True), nullable=False),
        Column("updated_at", DateTime(timezone=True), nullable=False),
        Column("data", document_column_type(native_documents), nullable=True),
        Index("ix_clients_status", "status"),
        Index("ix_clients_name", "name"),
        Index("ix_clients_created_at", "created_at"),
    )

    tags = Table(
        TAGS_TABLE,
        metadata,
        Column("id", String(36), primary_key=True),
        Column("name", String(100), nullable=False),
        Column("slug", String(100), nullable=False, unique=True),
        Column("color", String(7), nullable=True),
        Column("description", Text, nullable=True),
        Column("created_at", DateTime(timezone=True), nullable=False),
        Index("ix_tags_name", "name"),
    )

    client_tags = Table(
        CLIENT_TAGS_TABLE,
        metadata,
        Column("client_id", String(36), ForeignKey(f"{CLIENTS_TABLE}.id"), primary_key=True),
        Column("tag_id", String(36), ForeignKey(f"{TAGS_TABLE}.id"), primary_key=True),
        Index("ix_client_tags_tag", "tag_id"),
    )

    return StoreSchema(
        native_documents=native_documents,
        metadata=metadata,
        clients=clients,
        tags=tags,
        client_tags=client_tags,
    )
