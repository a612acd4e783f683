"""FastAPI dependency injection — wires infrastructure to application layer."""

from collections.abc import AsyncGenerator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from clientbook.config import get_settings
from clientbook.application.services import ClientService, LifecycleEvents, TagService
from clientbook.domain.entities import ClientStatus
from clientbook.infrastructure.database.repositories import (
    SQLAlchemyClientRepository,
    SQLAlchemyClientTagRepository,
    SQLAlchemyTagRepository,
)
from clientbook.infrastructure.database.schema import StoreSchema
from clientbook.infrastructure.database.session import get_db_session


def get_store_schema(request: Request) -> StoreSchema:
    """The tables built at startup for the detected document storage mode."""
    return request.app.state.store_schema


def get_lifecycle_events(request: Request) -> LifecycleEvents:
    return request.app.state.lifecycle_events


async def get_client_service(
    session: AsyncSession = Depends(get_db_session),
    schema: StoreSchema = Depends(get_store_schema),
    events: LifecycleEvents = Depends(get_lifecycle_events),
) -> AsyncGenerator[ClientService, None]:
    """Provides a ClientService with client, tag and edge repositories wired up."""
    settings = get_settings()
    edges = SQLAlchemyClientTagRepository(session, schema)
    yield ClientService(
        repository=SQLAlchemyClientRepository(session, schema, edges),
        tag_repository=SQLAlchemyTagRepository(
            session, schema, edges, default_color=settings.default_tag_color
        ),
        edges=edges,
        events=events,
        default_status=ClientStatus(settings.default_client_status),
    )


async def get_tag_service(
    session: AsyncSession = Depends(get_db_session),
    schema: StoreSchema = Depends(get_store_schema),
) -> AsyncGenerator[TagService, None]:
    """Provides a TagService instance with its repository wired up."""
    settings = get_settings()
    edges = SQLAlchemyClientTagRepository(session, schema)
    repository = SQLAlchemyTagRepository(
        session, schema, edges, default_color=settings.default_tag_color
    )
    yield TagService(repository)
