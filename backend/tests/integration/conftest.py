"""Shared fixtures: an in-memory SQLite store built for each document encoding."""

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from clientbook.infrastructure.database.base import Base
from clientbook.infrastructure.database.document_codec import dumps_document
from clientbook.infrastructure.database.models import StoreSettingModel  # noqa: F401
from clientbook.infrastructure.database.repositories import (
    SQLAlchemyClientRepository,
    SQLAlchemyClientTagRepository,
    SQLAlchemyTagRepository,
)
from clientbook.infrastructure.database.schema import StoreSchema, build_schema

MEMORY_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        MEMORY_URL, poolclass=StaticPool, json_serializer=dumps_document
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(params=[False, True], ids=["text", "native"])
async def schema(request, engine) -> StoreSchema:
    schema = build_schema(native_documents=request.param)
    async with engine.begin() as conn:
        await conn.run_sync(schema.metadata.create_all)
    return schema


@pytest_asyncio.fixture
async def session(session_factory, schema):
    async with session_factory() as session:
        yield session


@pytest.fixture
def edges(session, schema) -> SQLAlchemyClientTagRepository:
    return SQLAlchemyClientTagRepository(session, schema)


@pytest.fixture
def clients(session, schema, edges) -> SQLAlchemyClientRepository:
    return SQLAlchemyClientRepository(session, schema, edges)


@pytest.fixture
def tags(session, schema, edges) -> SQLAlchemyTagRepository:
    return SQLAlchemyTagRepository(session, schema, edges)
