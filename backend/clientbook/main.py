"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.engine import make_url

from clientbook.config import get_settings
from clientbook.application.services import LifecycleEvents
from clientbook.infrastructure.database import async_session_factory, engine
from clientbook.infrastructure.database.capability import CapabilityDetector
from clientbook.infrastructure.database.store import initialize_store
from clientbook.infrastructure.logging.log_config import setup_logging
from clientbook.presentation.api.errors import register_exception_handlers
from clientbook.presentation.api.router import router as api_router

logger = logging.getLogger(__name__)


def _ensure_sqlite_directory() -> None:
    """Create the parent directory of a file-based SQLite database."""
    url = make_url(get_settings().database_url)
    if url.get_backend_name() != "sqlite" or not url.database or url.database == ":memory:":
        return
    directory = Path(url.database).parent
    if not directory.exists():
        directory.mkdir(parents=True, exist_ok=True)
        logger.info("Created database directory '%s'", directory)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan — detect document support, create tables, wire shared state."""
    settings = get_settings()
    setup_logging()

    # 1. Make sure a SQLite file has somewhere to live
    _ensure_sqlite_directory()

    # 2. Decide the document column type and create the tables
    detector = CapabilityDetector(override=settings.native_documents_override)
    schema = await initialize_store(engine, async_session_factory, detector)

    # 3. Process-wide collaborators handed to request dependencies
    app.state.capability_detector = detector
    app.state.store_schema = schema
    app.state.lifecycle_events = LifecycleEvents()

    yield

    # Shutdown
    await engine.dispose()


def create_app() -> FastAPI:
    """Factory function that builds and configures the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_title,
        version=settings.app_version,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Mount API routes
    app.include_router(api_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "clientbook.main:app",
        host="0.0.0.0",
        port=8020,
        reload=True,
    )
