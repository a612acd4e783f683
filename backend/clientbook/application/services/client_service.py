"""Application service (use case) for Client operations.

Validates input, resolves tag references, persists through the repository
ports and notifies lifecycle listeners before and after each write.
"""

import copy
import logging
import re
from collections.abc import Iterable, Sequence
from typing import Any

from clientbook.application.interfaces import (
    ClientRepository,
    ClientTagRepository,
    Criteria,
    OrderBy,
    TagRepository,
)
from clientbook.application.schemas.client import ClientCreate, ClientUpdate
from clientbook.application.services.lifecycle import (
    CLIENT_BEFORE_CREATE,
    CLIENT_BEFORE_DELETE,
    CLIENT_BEFORE_UPDATE,
    CLIENT_CREATED,
    CLIENT_DELETED,
    CLIENT_UPDATED,
    LifecycleEvents,
)
from clientbook.application.services.validation import (
    ValidationResult,
    ValidationRule,
    is_valid_email,
    is_valid_url,
)
from clientbook.domain.entities import Client, ClientStatus, Tag
from clientbook.domain.exceptions import EntityNotFoundError

logger = logging.getLogger(__name__)

NAME_MAX_LENGTH = 255
TAG_ID_PATTERN = re.compile(r"^[a-f0-9-]{36}$")


def is_tag_id(reference: str) -> bool:
    """True when a tag reference has the shape of a stored tag id."""
    return bool(TAG_ID_PATTERN.match(reference))


class ClientService:
    """Orchestrates client CRUD, tagging and reporting. Depends on the repository ports (DI)."""

    def __init__(
        self,
        repository: ClientRepository,
        tag_repository: TagRepository,
        edges: ClientTagRepository,
        events: LifecycleEvents | None = None,
        rules: Iterable[ValidationRule] = (),
        default_status: ClientStatus = ClientStatus.ACTIVE,
    ):
        self._repository = repository
        self._tag_repository = tag_repository
        self._edges = edges
        self._events = events or LifecycleEvents()
        self._rules = list(rules)
        self._default_status = default_status

    # ── Validation ───────────────────────────────────────────────────

    async def validate(self, client: Client, exclude_id: str | None = None) -> ValidationResult:
        """Check every rule and collect all issues instead of stopping at the first."""
        result = ValidationResult(Client.ENTITY_TYPE)

        if not client.name:
            result.add("name_required", "Client name is required.")
        if len(client.name) > NAME_MAX_LENGTH:
            result.add("name_too_long", f"Client name must be {NAME_MAX_LENGTH} characters or less.")

        if client.slug:
            existing = await self._repository.find_by_slug(client.slug)
            if existing is not None and existing.id != exclude_id:
                result.add("slug_exists", "A client with this name already exists.")

        if client.email and not is_valid_email(client.email):
            result.add("invalid_email", "Please provide a valid email address.")
        if client.website and not is_valid_url(client.website):
            result.add("invalid_website", "Please provide a valid website URL.")

        for rule in self._rules:
            result.extend(rule(client, exclude_id))
        return result

    # ── Writes ───────────────────────────────────────────────────────

    async def create(self, data: ClientCreate) -> Client:
        attributes = data.model_dump(exclude_unset=True, exclude={"tags"})
        client = Client(status=self._default_status).fill(attributes)

        (await self.validate(client)).raise_for_issues()
        await self._events.emit(CLIENT_BEFORE_CREATE, client, attributes)

        client = await self._repository.save(client)
        if data.tags is not None:
            await self.sync_tags(client.id, data.tags)
        client.tags = await self.get_tags(client.id)

        logger.info("Created client '%s' (%s)", client.name, client.id)
        await self._events.emit(CLIENT_CREATED, client)
        return client

    async def update(self, client_id: str, data: ClientUpdate) -> Client:
        client = await self.get(client_id)
        original = copy.deepcopy(client)

        attributes = data.model_dump(exclude_unset=True, exclude={"tags"})
        client.fill(attributes)

        (await self.validate(client, exclude_id=client_id)).raise_for_issues()
        await self._events.emit(CLIENT_BEFORE_UPDATE, client, original, attributes)

        client = await self._repository.save(client)
        if data.tags is not None:
            await self.sync_tags(client.id, data.tags)
        client.tags = await self.get_tags(client.id)

        await self._events.emit(CLIENT_UPDATED, client, original)
        return client

    async def delete(self, client_id: str) -> bool:
        client = await self.get(client_id)
        await self._events.emit(CLIENT_BEFORE_DELETE, client)

        deleted = await self._repository.delete(client_id)
        if deleted:
            logger.info("Deleted client '%s' (%s)", client.name, client_id)
            await self._events.emit(CLIENT_DELETED, client_id, client)
        return deleted

    async def archive(self, client_id: str) -> Client:
        return await self.update(client_id, ClientUpdate(status=ClientStatus.ARCHIVED))

    async def activate(self, client_id: str) -> Client:
        return await self.update(client_id, ClientUpdate(status=ClientStatus.ACTIVE))

    # ── Reads ────────────────────────────────────────────────────────

    async def get(self, client_id: str) -> Client:
        client = await self._repository.find_by_id(client_id)
        if client is None:
            raise EntityNotFoundError(Client.ENTITY_TYPE, client_id)
        return client

    async def get_by_slug(self, slug: str) -> Client:
        client = await self._repository.find_by_slug(slug)
        if client is None:
            raise EntityNotFoundError(Client.ENTITY_TYPE, slug)
        return client

    async def list_clients(
        self,
        status: ClientStatus | str | None = None,
        order_by: OrderBy | None = None,
        limit: int = 0,
        offset: int = 0,
        with_tags: bool = False,
    ) -> list[Client]:
        criteria: Criteria = {"status": status} if status else {}
        order_by = order_by or {"name": "asc"}
        if with_tags:
            return await self._repository.find_with_tags(criteria, order_by, limit, offset)
        return await self._repository.find(criteria, order_by, limit, offset)

    async def search(
        self,
        query: str,
        fields: Sequence[str] | None = None,
        limit: int = 0,
        offset: int = 0,
        with_tags: bool = True,
    ) -> list[Client]:
        clients = await self._repository.search(query, fields, limit, offset)
        if with_tags and clients:
            tags_by_client = await self._edges.load_edges_for_clients([c.id for c in clients])
            for client in clients:
                client.tags = tags_by_client.get(client.id, [])
        return clients

    async def count(self, criteria: Criteria | None = None) -> int:
        return await self._repository.count(criteria)

    async def counts_by_status(self) -> dict[str, int]:
        counts = {
            status.value: await self._repository.count({"status": status})
            for status in ClientStatus
        }
        counts["all"] = sum(counts.values())
        return counts

    async def export(self, criteria: Criteria | None = None) -> list[dict[str, Any]]:
        """Plain dictionaries of matching clients, each with its tag names."""
        clients = await self._repository.find_with_tags(criteria, {"name": "asc"})
        exported = []
        for client in clients:
            row = client.to_dict()
            row["tags"] = [tag.name for tag in client.tags]
            exported.append(row)
        return exported

    # ── Tags ─────────────────────────────────────────────────────────

    async def sync_tags(self, client_id: str, tag_refs: Sequence[str]) -> list[str]:
        """Replace the client's tags with the referenced ones.

        A reference shaped like a tag id is used when that tag exists; unknown
        ids are skipped with a warning. Anything else is a tag name, looked up
        by its slug and created when missing.
        """
        if not await self._repository.exists(client_id):
            raise EntityNotFoundError(Client.ENTITY_TYPE, client_id)

        resolved: list[str] = []
        for reference in tag_refs:
            reference = str(reference).strip()
            if not reference:
                continue
            if is_tag_id(reference):
                if not await self._tag_repository.exists(reference):
                    logger.warning("Client %s: skipping unknown tag id %s", client_id, reference)
                    continue
                resolved.append(reference)
            else:
                tag = await self._tag_repository.find_or_create(reference)
                resolved.append(tag.id)

        await self._edges.replace_edges(client_id, resolved)
        return resolved

    async def get_tags(self, client_id: str) -> list[Tag]:
        return await self._tag_repository.find_by_client(client_id)

    async def add_tag(self, client_id: str, tag_id: str) -> bool:
        """Attach a tag; an edge that already exists counts as done."""
        if tag_id in await self._edges.edge_tag_ids(client_id):
            return True
        await self._edges.add_edge(client_id, tag_id)
        return True

    async def remove_tag(self, client_id: str, tag_id: str) -> bool:
        return await self._edges.remove_edge(client_id, tag_id)
