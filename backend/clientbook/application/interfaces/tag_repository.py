"""Abstract repository interface (port) for Tag persistence."""

from abc import abstractmethod

from clientbook.application.interfaces.record_repository import OrderBy, RecordRepository
from clientbook.domain.entities import Tag


class TagRepository(RecordRepository[Tag]):
    """Tag persistence port. Deleting a tag also removes its client edges."""

    @abstractmethod
    async def find_or_create(self, name: str) -> Tag:
        """Return the tag whose slug matches the name, creating it if absent."""
        ...

    @abstractmethod
    async def find_with_counts(self, order_by: OrderBy | None = None) -> list[Tag]:
        """All tags with ``client_count`` populated."""
        ...

    @abstractmethod
    async def find_by_client(self, client_id: str) -> list[Tag]:
        """Tags attached to a client, ordered by name."""
        ...

    @abstractmethod
    async def merge_tags(self, source_id: str, target_id: str) -> bool:
        """Move every client from source to target, then delete source.

        Returns False without changing anything when source == target or
        either tag does not exist.
        """
        ...
