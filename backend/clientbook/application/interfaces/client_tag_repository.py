"""Abstract interface (port) for the client ↔ tag relationship store."""

from abc import ABC, abstractmethod
from collections.abc import Sequence

from clientbook.domain.entities import Tag


class ClientTagRepository(ABC):
    """Port for client-tag edges. An edge is the (client_id, tag_id) pair itself.

    Multi-statement operations are not atomic; they are safe to re-run.
    """

    @abstractmethod
    async def add_edge(self, client_id: str, tag_id: str) -> None:
        """Insert an edge. A duplicate pair raises ConstraintViolationError."""
        ...

    @abstractmethod
    async def remove_edge(self, client_id: str, tag_id: str) -> bool:
        ...

    @abstractmethod
    async def replace_edges(self, client_id: str, tag_ids: Sequence[str]) -> None:
        """Drop every edge of the client, then add one edge per tag id."""
        ...

    @abstractmethod
    async def edge_tag_ids(self, client_id: str) -> list[str]:
        ...

    @abstractmethod
    async def load_edges_for_clients(
        self, client_ids: Sequence[str]
    ) -> dict[str, list[Tag]]:
        """Tags grouped by client id, ordered by tag name, in a single query."""
        ...

    @abstractmethod
    async def edges_for_tag(self, tag_id: str) -> list[str]:
        """Client ids carrying the tag."""
        ...

    @abstractmethod
    async def remove_client_edges(self, client_id: str) -> int:
        ...

    @abstractmethod
    async def remove_tag_edges(self, tag_id: str) -> int:
        ...

    @abstractmethod
    async def repoint_edges(self, source_tag_id: str, target_tag_id: str) -> int:
        """Move edges from one tag to another, skipping pairs that already exist.

        Returns the number of edges added to the target.
        """
        ...
