import logging
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings

_config_logger = logging.getLogger(__name__)

_BACKEND_DIR = Path(__file__).resolve().parents[1]
_ENV_FILES = (
    _BACKEND_DIR / ".env",
    ".env",
)
_CLIENT_STATUSES = frozenset({"active", "inactive", "prospect", "archived"})


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    app_title: str = "Clientbook API"
    app_version: str = "1.0.0"
    app_env: str = "development"
    database_url: str = "sqlite:///data/clientbook.db"
    cors_origins: list[str] = ["http://localhost:3020"]

    # Physical storage of the document column: "auto" probes the database
    # version, "native" / "text" skip the probe.
    document_storage: Literal["auto", "native", "text"] = "auto"

    # Record defaults
    default_client_status: str = "active"
    default_tag_color: str = "#3b82f6"

    # Logging: per-category log levels (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    log_level: str = "INFO"                  # Root / app-wide
    log_level_sql: str = "WARNING"           # sqlalchemy.engine SQL queries
    log_level_uvicorn: str = "INFO"          # uvicorn.access / uvicorn.error
    log_level_repository: str = "INFO"       # repositories, schema, capability probe
    log_level_services: str = "INFO"         # client / tag services, lifecycle events

    model_config = {
        "env_file": _ENV_FILES,
        "env_file_encoding": "utf-8",
    }

    def model_post_init(self, __context: object) -> None:
        """Fall back to 'active' when the configured client status is unknown."""
        if self.default_client_status not in _CLIENT_STATUSES:
            _config_logger.warning(
                "Unknown default_client_status %r — using 'active'",
                self.default_client_status,
            )
            object.__setattr__(self, "default_client_status", "active")

    @property
    def native_documents_override(self) -> bool | None:
        """Forced document storage mode, or None when it should be probed."""
        if self.document_storage == "native":
            return True
        if self.document_storage == "text":
            return False
        return None


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance — reads .env once."""
    return Settings()
