"""Abstract repository interface (port) for Client persistence."""

from abc import abstractmethod

from clientbook.application.interfaces.record_repository import (
    Criteria,
    OrderBy,
    RecordRepository,
)
from clientbook.domain.entities import Client, ClientStatus


class ClientRepository(RecordRepository[Client]):
    """Client persistence port. Deleting a client also removes its tag edges."""

    @abstractmethod
    async def find_by_status(
        self,
        status: ClientStatus | str,
        order_by: OrderBy | None = None,
        limit: int = 0,
        offset: int = 0,
    ) -> list[Client]:
        ...

    @abstractmethod
    async def find_active(
        self, order_by: OrderBy | None = None, limit: int = 0, offset: int = 0
    ) -> list[Client]:
        ...

    @abstractmethod
    async def find_with_tags(
        self,
        criteria: Criteria | None = None,
        order_by: OrderBy | None = None,
        limit: int = 0,
        offset: int = 0,
    ) -> list[Client]:
        """Like find(), with each client's ``tags`` loaded in one batched query."""
        ...

    @abstractmethod
    async def find_by_tag(
        self,
        tag_id: str,
        order_by: OrderBy | None = None,
        limit: int = 0,
        offset: int = 0,
    ) -> list[Client]:
        ...
