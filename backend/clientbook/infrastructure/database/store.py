"""One-time creation of the record store at startup."""

import logging

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from clientbook.infrastructure.database.base import Base
from clientbook.infrastructure.database.capability import CapabilityDetector
from clientbook.infrastructure.database.schema import StoreSchema, build_schema

logger = logging.getLogger(__name__)


async def initialize_store(
    engine: AsyncEngine,
    session_factory: async_sessionmaker[AsyncSession],
    detector: CapabilityDetector,
) -> StoreSchema:
    """Create the settings table, decide the document column type, then create the record tables.

    Safe to call on every startup: ``create_all`` skips existing tables and
    the capability decision is read back from the settings table.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with session_factory() as session:
        native = await detector.document_column_native(session)
        await session.commit()

    schema = build_schema(native)
    async with engine.begin() as conn:
        await conn.run_sync(schema.metadata.create_all)

    logger.info(
        "Record store ready (documents stored as %s)", "native JSON" if native else "text"
    )
    return schema
