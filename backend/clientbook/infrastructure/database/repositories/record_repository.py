"""Generic SQLAlchemy repository for hybrid records.

Concrete repositories pick their table from the StoreSchema and provide the
row ↔ entity mapping; everything else (criteria lowering, slug uniqueness,
insert-or-update, substring search) lives here.
"""

import logging
from abc import abstractmethod
from collections.abc import Mapping, Sequence
from datetime import datetime, timezone
from enum import Enum
from typing import Any, ClassVar
from uuid import uuid4

from sqlalchemy import (
    ColumnElement,
    Executable,
    Result,
    RowMapping,
    Select,
    Table,
    Text,
    cast,
    delete,
    func,
    insert,
    or_,
    select,
    update,
)
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from clientbook.application.interfaces import Criteria, OrderBy, RecordRepository, RecordT
from clientbook.domain.exceptions import (
    ConstraintViolationError,
    EntityNotFoundError,
    PersistenceError,
)
from clientbook.infrastructure.database.schema import StoreSchema

logger = logging.getLogger(__name__)

LIKE_ESCAPE = "\\"


def like_pattern(query: str) -> str:
    """Wrap a search term in % wildcards, escaping LIKE metacharacters in it."""
    escaped = (
        query.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"


def utc_datetime(value: datetime | None) -> datetime | None:
    """Re-attach UTC to naive datetimes returned by drivers such as SQLite."""
    if value is None:
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def bind_value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


async def run_statement(
    session: AsyncSession,
    statement: Executable,
    operation: str,
    entity_type: str,
    parameters: Sequence[Mapping[str, Any]] | None = None,
) -> Result:
    """Execute a statement, translating driver failures into PersistenceError."""
    try:
        if parameters is None:
            return await session.execute(statement)
        return await session.execute(statement, parameters)
    except IntegrityError as exc:
        raise ConstraintViolationError(operation, entity_type, str(exc.orig or exc)) from exc
    except SQLAlchemyError as exc:
        raise PersistenceError(operation, entity_type, str(exc)) from exc


class SQLAlchemyRecordRepository(RecordRepository[RecordT]):
    """Implements the generic RecordRepository port over one Core table."""

    entity_type: ClassVar[str] = "Record"
    search_fields: ClassVar[tuple[str, ...]] = ("name",)

    def __init__(self, session: AsyncSession, schema: StoreSchema):
        self._session = session
        self._schema = schema
        self._codec = schema.codec
        self._table = self._select_table(schema)

    # ── Mapping (per concrete type) ──────────────────────────────────

    @abstractmethod
    def _select_table(self, schema: StoreSchema) -> Table:
        ...

    @abstractmethod
    def _to_entity(self, row: RowMapping) -> RecordT:
        """Map a table row → domain entity."""
        ...

    @abstractmethod
    def _to_row(self, entity: RecordT) -> dict[str, Any]:
        """Map a domain entity → column values."""
        ...

    # ── Queries ──────────────────────────────────────────────────────

    async def find(
        self,
        criteria: Criteria | None = None,
        order_by: OrderBy | None = None,
        limit: int = 0,
        offset: int = 0,
    ) -> list[RecordT]:
        stmt = select(self._table)
        conditions = self._criteria_clauses(criteria)
        if conditions:
            stmt = stmt.where(*conditions)
        stmt = self._ordered(stmt, order_by)
        stmt = self._paginated(stmt, limit, offset)
        return await self._fetch_entities(stmt, "find")

    async def find_by_id(self, record_id: str) -> RecordT | None:
        stmt = select(self._table).where(self._table.c.id == record_id).limit(1)
        result = await self._execute(stmt, "read")
        row = result.mappings().first()
        return self._to_entity(row) if row else None

    async def find_by_slug(self, slug: str) -> RecordT | None:
        stmt = select(self._table).where(self._table.c.slug == slug).limit(1)
        result = await self._execute(stmt, "read")
        row = result.mappings().first()
        return self._to_entity(row) if row else None

    async def search(
        self,
        query: str,
        fields: Sequence[str] | None = None,
        limit: int = 0,
        offset: int = 0,
    ) -> list[RecordT]:
        pattern = like_pattern(query)
        stmt = (
            select(self._table)
            .where(or_(*self._search_clauses(pattern, fields or self.search_fields)))
            .order_by(self._table.c.name.asc())
        )
        stmt = self._paginated(stmt, limit, offset)
        return await self._fetch_entities(stmt, "search")

    async def count(self, criteria: Criteria | None = None) -> int:
        stmt = select(func.count()).select_from(self._table)
        conditions = self._criteria_clauses(criteria)
        if conditions:
            stmt = stmt.where(*conditions)
        result = await self._execute(stmt, "count")
        return int(result.scalar_one())

    async def exists(self, record_id: str) -> bool:
        return await self.count({"id": record_id}) > 0

    # ── Writes ───────────────────────────────────────────────────────

    async def save(self, record: RecordT) -> RecordT:
        now = datetime.now(timezone.utc)

        if record.is_new:
            record.id = str(uuid4())
            record.created_at = now
            record.updated_at = now
            record.generate_slug()
            try:
                record.slug = await self.ensure_unique_slug(record.slug)
                await self._execute(insert(self._table).values(**self._to_row(record)), "insert")
            except PersistenceError:
                record.id = None
                raise
            logger.debug("Inserted %s %s (slug=%s)", self.entity_type, record.id, record.slug)
            return record

        record.updated_at = now
        record.generate_slug()
        record.slug = await self.ensure_unique_slug(record.slug, exclude_id=record.id)
        values = self._to_row(record)
        values.pop("id", None)
        values.pop("created_at", None)
        result = await self._execute(
            update(self._table).where(self._table.c.id == record.id).values(**values),
            "update",
        )
        if result.rowcount == 0:
            raise EntityNotFoundError(self.entity_type, record.id)
        return record

    async def delete(self, record_id: str) -> bool:
        result = await self._execute(
            delete(self._table).where(self._table.c.id == record_id), "delete"
        )
        return result.rowcount > 0

    async def ensure_unique_slug(self, slug: str, exclude_id: str | None = None) -> str:
        """Return ``slug``, or the first free ``slug-N`` (N = 1, 2, …) in this table."""
        candidate = slug
        suffix = 0
        while True:
            stmt = (
                select(func.count())
                .select_from(self._table)
                .where(self._table.c.slug == candidate)
            )
            if exclude_id:
                stmt = stmt.where(self._table.c.id != exclude_id)
            taken = (await self._execute(stmt, "check slug of")).scalar_one()
            if taken == 0:
                return candidate
            suffix += 1
            candidate = f"{slug}-{suffix}"
            logger.debug("%s slug '%s' taken, trying '%s'", self.entity_type, slug, candidate)

    # ── Statement helpers ────────────────────────────────────────────

    def _column(self, name: str, table: Table | None = None) -> ColumnElement[Any]:
        table = table if table is not None else self._table
        try:
            return table.c[name]
        except KeyError:
            raise ValueError(f"Unknown {self.entity_type} field '{name}'") from None

    def _criteria_clauses(self, criteria: Criteria | None) -> list[ColumnElement[bool]]:
        """Lower criteria: sequences → IN, None → IS NULL, anything else → equality."""
        clauses: list[ColumnElement[bool]] = []
        for name, value in (criteria or {}).items():
            column = self._column(name)
            if isinstance(value, (list, tuple, set, frozenset)):
                clauses.append(column.in_([bind_value(v) for v in value]))
            elif value is None:
                clauses.append(column.is_(None))
            else:
                clauses.append(column == bind_value(value))
        return clauses

    def _ordered(self, stmt: Select, order_by: OrderBy | None, table: Table | None = None) -> Select:
        for name, direction in (order_by or {}).items():
            column = self._column(name, table)
            stmt = stmt.order_by(column.desc() if str(direction).upper() == "DESC" else column.asc())
        return stmt

    @staticmethod
    def _paginated(stmt: Select, limit: int, offset: int) -> Select:
        if limit > 0:
            stmt = stmt.limit(limit)
            if offset > 0:
                stmt = stmt.offset(offset)
        return stmt

    def _search_clauses(self, pattern: str, fields: Sequence[str]) -> list[ColumnElement[bool]]:
        clauses = [self._column(name).ilike(pattern, escape=LIKE_ESCAPE) for name in fields]
        if "data" in self._table.c:
            clauses.append(self._document_text().ilike(pattern, escape=LIKE_ESCAPE))
        return clauses

    def _document_text(self) -> ColumnElement[Any]:
        """The document as searchable text: a cast for native JSON, the column itself otherwise."""
        column = self._table.c.data
        if self._schema.native_documents:
            return cast(column, Text)
        return column

    async def _execute(self, statement: Executable, operation: str) -> Result:
        return await run_statement(self._session, statement, operation, self.entity_type)

    async def _fetch_entities(self, stmt: Select, operation: str) -> list[RecordT]:
        result = await self._execute(stmt, operation)
        return [self._to_entity(row) for row in result.mappings().all()]
