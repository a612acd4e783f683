"""Detection of native structured-document support in the backing database.

The detector asks the database for its version once, decides whether the
document column can use a native JSON type, and remembers the answer for
the rest of the process. The answer is also written to the
``store_settings`` table so that later startups reuse it without probing.

Recognised families and the first version with usable native JSON:

    mysql        5.7.0
    mariadb     10.2.0   (reports itself through the MySQL dialect)
    postgresql   9.4.0
    sqlite      3.38.0
"""

import logging
import re
from dataclasses import dataclass

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from clientbook.domain.exceptions import PersistenceError, UnknownCapabilityError
from clientbook.infrastructure.database.repositories.store_setting_repository import (
    SQLAlchemyStoreSettingRepository,
)

logger = logging.getLogger(__name__)

NATIVE_DOCUMENTS_SETTING = "native_documents"

MIN_NATIVE_VERSIONS: dict[str, tuple[int, int, int]] = {
    "mysql": (5, 7, 0),
    "mariadb": (10, 2, 0),
    "postgresql": (9, 4, 0),
    "sqlite": (3, 38, 0),
}

_VERSION_QUERIES: dict[str, str] = {
    "mysql": "SELECT VERSION()",
    "mariadb": "SELECT VERSION()",
    "postgresql": "SHOW server_version",
    "sqlite": "SELECT sqlite_version()",
}

_VERSION_PATTERN = re.compile(r"^(\d+)\.(\d+)(?:\.(\d+))?")
# Older MariaDB servers prepend a fake MySQL version for replication clients.
_MARIADB_COMPAT_PREFIX = "5.5.5-"


@dataclass(frozen=True)
class StoreVersion:
    """Parsed answer of the version probe."""

    family: str
    version: tuple[int, int, int]
    raw: str

    @property
    def supports_native_documents(self) -> bool:
        return self.version >= MIN_NATIVE_VERSIONS[self.family]

    @property
    def version_string(self) -> str:
        return ".".join(str(part) for part in self.version)


def parse_version(raw: str, dialect_name: str) -> StoreVersion:
    """Work out the product family and a three-part version from a version string.

    Unparseable versions become ``(0, 0, 0)``; an unrecognised family raises
    UnknownCapabilityError.
    """
    family = "mariadb" if "mariadb" in raw.lower() else dialect_name
    if family not in MIN_NATIVE_VERSIONS:
        raise UnknownCapabilityError(f"unsupported database family '{family}'")

    candidate = raw.strip()
    if family == "mariadb" and candidate.startswith(_MARIADB_COMPAT_PREFIX):
        candidate = candidate[len(_MARIADB_COMPAT_PREFIX):]

    match = _VERSION_PATTERN.match(candidate)
    if match:
        major, minor, patch = match.groups()
        version = (int(major), int(minor), int(patch or 0))
    else:
        version = (0, 0, 0)
    return StoreVersion(family=family, version=version, raw=raw)


class CapabilityDetector:
    """Decides, once per process, whether documents are stored as native JSON.

    Usage:
        detector = CapabilityDetector()
        async with session_factory() as session:
            native = await detector.document_column_native(session)
    """

    def __init__(self, override: bool | None = None):
        self._override = override
        self._native: bool | None = None

    @property
    def cached(self) -> bool | None:
        """The remembered decision, or None before the first successful answer."""
        return self._native

    async def probe(self, session: AsyncSession) -> StoreVersion:
        """Query the database for its version string and parse it."""
        dialect_name = session.get_bind().dialect.name
        query = _VERSION_QUERIES.get(dialect_name)
        if query is None:
            raise UnknownCapabilityError(f"no version query for dialect '{dialect_name}'")

        try:
            result = await session.execute(text(query))
            raw = result.scalar()
        except SQLAlchemyError as exc:
            raise UnknownCapabilityError(str(exc)) from exc

        if not raw:
            raise UnknownCapabilityError("database returned an empty version string")
        return parse_version(str(raw), dialect_name)

    async def supports_native_documents(self, session: AsyncSession) -> bool:
        """Return the cached, configured, persisted or freshly probed decision.

        Raises UnknownCapabilityError when a probe is needed and fails; nothing
        is cached in that case.
        """
        if self._native is not None:
            return self._native

        settings = SQLAlchemyStoreSettingRepository(session)

        if self._override is not None:
            native = self._override
            logger.info("Document storage forced by configuration: native=%s", native)
        else:
            stored = await settings.get(NATIVE_DOCUMENTS_SETTING)
            if stored is not None:
                self._native = stored == "1"
                logger.debug("Document storage read from store settings: native=%s", self._native)
                return self._native

            version = await self.probe(session)
            native = version.supports_native_documents
            logger.info(
                "Detected %s %s — native JSON documents %s",
                version.family,
                version.version_string,
                "enabled" if native else "unavailable",
            )

        await settings.set(NATIVE_DOCUMENTS_SETTING, "1" if native else "0")
        self._native = native
        return native

    async def document_column_native(self, session: AsyncSession) -> bool:
        """Like supports_native_documents(), defaulting to plain text on failure."""
        try:
            return await self.supports_native_documents(session)
        except UnknownCapabilityError as exc:
            logger.warning("%s; storing documents as plain text", exc)
            return False
        except PersistenceError as exc:
            logger.warning("Store settings unavailable (%s); storing documents as plain text", exc)
            await session.rollback()
            return False
