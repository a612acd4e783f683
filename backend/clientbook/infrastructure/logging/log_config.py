"""Per-category log levels for clientbook.

Each category groups the loggers of one part of the stack (SQL, uvicorn,
the database layer, the services) under a single Settings field, so the
SQL echo can be turned up while leaving the services at INFO.

Usage:
    from clientbook.infrastructure.logging.log_config import setup_logging
    setup_logging()   # once, from the FastAPI lifespan
"""

import logging
import sys

from clientbook.config import Settings, get_settings

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

# Settings field → loggers it controls
LOGGER_CATEGORIES: dict[str, tuple[str, ...]] = {
    "log_level_sql": ("sqlalchemy.engine", "sqlalchemy.pool", "aiosqlite"),
    "log_level_uvicorn": ("uvicorn", "uvicorn.access", "uvicorn.error"),
    "log_level_repository": ("clientbook.infrastructure.database",),
    "log_level_services": ("clientbook.application",),
}


def setup_logging(settings: Settings | None = None) -> dict[str, int]:
    """Apply the root and per-category levels; returns logger name → level applied."""
    settings = settings or get_settings()

    root = logging.getLogger()
    root.setLevel(level_from_name(settings.log_level))
    # uvicorn installs its own handler; plain scripts and tests do not.
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)

    applied: dict[str, int] = {}
    for field, logger_names in LOGGER_CATEGORIES.items():
        level = level_from_name(getattr(settings, field))
        for name in logger_names:
            logging.getLogger(name).setLevel(level)
            applied[name] = level

    logging.getLogger(__name__).debug(
        "Log levels: root=%s sql=%s repository=%s services=%s",
        settings.log_level,
        settings.log_level_sql,
        settings.log_level_repository,
        settings.log_level_services,
    )
    return applied


def level_from_name(name: str) -> int:
    """``"debug"`` → ``logging.DEBUG``; unknown names fall back to INFO."""
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else logging.INFO
