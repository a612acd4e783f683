"""Abstract generic repository interface (port) for hybrid records."""

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from typing import Any, Generic, TypeVar

from clientbook.domain.entities import SluggedRecord

RecordT = TypeVar("RecordT", bound=SluggedRecord)

Criteria = Mapping[str, Any]
OrderBy = Mapping[str, str]


class RecordRepository(ABC, Generic[RecordT]):
    """Port for record persistence — implemented in the infrastructure layer.

    ``criteria`` maps field names to values: a list/tuple value means
    membership, ``None`` means IS NULL, anything else equality. Multiple
    criteria are AND-joined. ``order_by`` maps field names to "asc"/"desc".
    ``limit``/``offset`` only apply when ``limit > 0``.
    """

    @abstractmethod
    async def find(
        self,
        criteria: Criteria | None = None,
        order_by: OrderBy | None = None,
        limit: int = 0,
        offset: int = 0,
    ) -> list[RecordT]:
        """Retrieve records matching every criterion."""
        ...

    @abstractmethod
    async def find_by_id(self, record_id: str) -> RecordT | None:
        ...

    @abstractmethod
    async def find_by_slug(self, slug: str) -> RecordT | None:
        ...

    @abstractmethod
    async def save(self, record: RecordT) -> RecordT:
        """Insert a new record (assigning id, timestamps and a unique slug) or update it."""
        ...

    @abstractmethod
    async def delete(self, record_id: str) -> bool:
        """Delete a record. Returns True if a row was removed."""
        ...

    @abstractmethod
    async def search(
        self,
        query: str,
        fields: Sequence[str] | None = None,
        limit: int = 0,
        offset: int = 0,
    ) -> list[RecordT]:
        """Substring search across indexed fields and the document, ordered by name."""
        ...

    @abstractmethod
    async def count(self, criteria: Criteria | None = None) -> int:
        ...

    @abstractmethod
    async def exists(self, record_id: str) -> bool:
        ...
