"""Unit tests for the ClientService, using in-memory fake repositories."""

import uuid
from collections.abc import Sequence

import pytest

from clientbook.application.interfaces import (
    ClientRepository,
    ClientTagRepository,
    TagRepository,
)
from clientbook.application.schemas import ClientCreate, ClientUpdate
from clientbook.application.services import ClientService, LifecycleEvents
from clientbook.application.services.client_service import is_tag_id
from clientbook.domain.entities import Client, ClientStatus, Tag
from clientbook.domain.exceptions import (
    EntityNotFoundError,
    RecordValidationError,
    ValidationIssue,
)
from clientbook.domain.slug import slugify


class FakeRecordStore:
    """Dict-backed stand-in for the generic repository operations."""

    def __init__(self):
        self.rows: dict[str, object] = {}

    async def find(self, criteria=None, order_by=None, limit=0, offset=0):
        found = [
            r for r in self.rows.values()
            if all(getattr(r, k) == v for k, v in (criteria or {}).items())
        ]
        return sorted(found, key=lambda r: r.name)

    async def find_by_id(self, record_id):
        return self.rows.get(record_id)

    async def find_by_slug(self, slug):
        return next((r for r in self.rows.values() if r.slug == slug), None)

    async def save(self, record):
        if record.is_new:
            record.id = str(uuid.uuid4())
            record.generate_slug()
            base, suffix = record.slug, 0
            while await self.find_by_slug(record.slug):
                suffix += 1
                record.slug = f"{base}-{suffix}"
        self.rows[record.id] = record
        return record

    async def delete(self, record_id):
        return self.rows.pop(record_id, None) is not None

    async def search(self, query, fields=None, limit=0, offset=0):
        return [r for r in await self.find() if query.lower() in r.name.lower()]

    async def count(self, criteria=None):
        return len(await self.find(criteria))

    async def exists(self, record_id):
        return record_id in self.rows


class FakeEdges(ClientTagRepository):
    def __init__(self, tags: "FakeTagRepository"):
        self.pairs: list[tuple[str, str]] = []
        self._tags = tags

    async def add_edge(self, client_id, tag_id):
        self.pairs.append((client_id, tag_id))

    async def remove_edge(self, client_id, tag_id):
        before = len(self.pairs)
        self.pairs = [p for p in self.pairs if p != (client_id, tag_id)]
        return len(self.pairs) < before

    async def replace_edges(self, client_id, tag_ids: Sequence[str]):
        await self.remove_client_edges(client_id)
        for tag_id in dict.fromkeys(tag_ids):
            self.pairs.append((client_id, tag_id))

    async def edge_tag_ids(self, client_id):
        return [t for c, t in self.pairs if c == client_id]

    async def load_edges_for_clients(self, client_ids):
        return {
            cid: sorted(
                (self._tags.rows[t] for c, t in self.pairs if c == cid), key=lambda t: t.name
            )
            for cid in client_ids
        }

    async def edges_for_tag(self, tag_id):
        return [c for c, t in self.pairs if t == tag_id]

    async def remove_client_edges(self, client_id):
        before = len(self.pairs)
        self.pairs = [p for p in self.pairs if p[0] != client_id]
        return before - len(self.pairs)

    async def remove_tag_edges(self, tag_id):
        before = len(self.pairs)
        self.pairs = [p for p in self.pairs if p[1] != tag_id]
        return before - len(self.pairs)

    async def repoint_edges(self, source_tag_id, target_tag_id):
        return 0


class FakeTagRepository(FakeRecordStore, TagRepository):
    edges: FakeEdges

    async def save(self, record):
        record.color = record.color or Tag.DEFAULT_COLORS[0]
        return await super().save(record)

    async def find_or_create(self, name):
        return await self.find_by_slug(slugify(name)) or await self.save(Tag(name=name))

    async def find_with_counts(self, order_by=None):
        return await self.find()

    async def find_by_client(self, client_id):
        return (await self.edges.load_edges_for_clients([client_id]))[client_id]

    async def merge_tags(self, source_id, target_id):
        return False


class FakeClientRepository(FakeRecordStore, ClientRepository):
    edges: FakeEdges

    async def delete(self, record_id):
        await self.edges.remove_client_edges(record_id)
        return await super().delete(record_id)

    async def find_by_status(self, status, order_by=None, limit=0, offset=0):
        return await self.find({"status": ClientStatus(status)})

    async def find_active(self, order_by=None, limit=0, offset=0):
        return await self.find_by_status(ClientStatus.ACTIVE)

    async def find_with_tags(self, criteria=None, order_by=None, limit=0, offset=0):
        clients = await self.find(criteria)
        tags = await self.edges.load_edges_for_clients([c.id for c in clients])
        for client in clients:
            client.tags = tags[client.id]
        return clients

    async def find_by_tag(self, tag_id, order_by=None, limit=0, offset=0):
        ids = await self.edges.edges_for_tag(tag_id)
        return [self.rows[i] for i in ids]


@pytest.fixture
def events() -> LifecycleEvents:
    return LifecycleEvents()


@pytest.fixture
def service(events: LifecycleEvents) -> ClientService:
    tags = FakeTagRepository()
    edges = FakeEdges(tags)
    tags.edges = edges
    clients = FakeClientRepository()
    clients.edges = edges
    return ClientService(clients, tags, edges, events=events)


@pytest.mark.asyncio
async def test_create_client_derives_slug_and_resolves_tag_names(service: ClientService):
    client = await service.create(ClientCreate(name="Acme", tags=["vip", "prospect"]))

    assert client.id is not None
    assert client.slug == "acme"
    assert client.status is ClientStatus.ACTIVE
    assert [t.name for t in client.tags] == ["prospect", "vip"]
    assert all(t.color == "#3b82f6" for t in client.tags)


@pytest.mark.asyncio
async def test_validation_accumulates_every_issue(service: ClientService):
    with pytest.raises(RecordValidationError) as exc_info:
        await service.create(ClientCreate(name="", email="not-an-email", website="nope"))

    assert exc_info.value.codes == ["name_required", "invalid_email", "invalid_website"]


@pytest.mark.asyncio
async def test_validation_reports_long_name_and_bad_email_together(service: ClientService):
    result = await service.validate(Client(name="x" * 256, document={"email": "not-an-email"}))
    assert not result.is_valid
    assert result.codes == ["name_too_long", "invalid_email"]


@pytest.mark.asyncio
async def test_explicit_slug_collision_is_a_validation_issue(service: ClientService):
    await service.create(ClientCreate(name="Acme"))
    with pytest.raises(RecordValidationError) as exc_info:
        await service.create(ClientCreate(name="Acme Two", slug="acme"))
    assert exc_info.value.codes == ["slug_exists"]


@pytest.mark.asyncio
async def test_same_name_without_slug_gets_suffixed(service: ClientService):
    first = await service.create(ClientCreate(name="Acme"))
    second = await service.create(ClientCreate(name="Acme"))
    assert (first.slug, second.slug) == ("acme", "acme-1")


@pytest.mark.asyncio
async def test_extra_rules_append_issues():
    tags = FakeTagRepository()
    edges = FakeEdges(tags)
    tags.edges = edges
    clients = FakeClientRepository()
    clients.edges = edges

    def require_industry(client, exclude_id):
        if not client.industry:
            yield ValidationIssue("industry_required", "Industry is required.")

    service = ClientService(clients, tags, edges, rules=[require_industry])
    result = await service.validate(Client(name="Acme"))
    assert result.codes == ["industry_required"]


@pytest.mark.asyncio
async def test_update_keeps_unsent_fields_and_resyncs_tags(service: ClientService):
    created = await service.create(
        ClientCreate(name="Acme", email="hello@acme.com", tags=["vip"])
    )
    updated = await service.update(created.id, ClientUpdate(phone="555-0100", tags=["gold"]))

    assert updated.email == "hello@acme.com"
    assert updated.phone == "555-0100"
    assert [t.name for t in updated.tags] == ["gold"]


@pytest.mark.asyncio
async def test_update_without_tags_leaves_edges_alone(service: ClientService):
    created = await service.create(ClientCreate(name="Acme", tags=["vip"]))
    updated = await service.update(created.id, ClientUpdate(industry="Retail"))
    assert [t.name for t in updated.tags] == ["vip"]


@pytest.mark.asyncio
async def test_update_missing_client_raises(service: ClientService):
    with pytest.raises(EntityNotFoundError):
        await service.update("missing", ClientUpdate(name="X"))


@pytest.mark.asyncio
async def test_sync_tags_accepts_ids_and_skips_blank_names(service: ClientService):
    client = await service.create(ClientCreate(name="Acme"))
    vip = await service.create(ClientCreate(name="Other", tags=["vip"]))
    vip_id = vip.tags[0].id

    resolved = await service.sync_tags(client.id, [vip_id, "  ", "partner"])

    assert resolved[0] == vip_id
    assert len(resolved) == 2
    assert {t.name for t in await service.get_tags(client.id)} == {"vip", "partner"}


def test_tag_id_shape():
    assert is_tag_id(str(uuid.uuid4()))
    assert not is_tag_id("vip")
    assert not is_tag_id(str(uuid.uuid4()).upper())


@pytest.mark.asyncio
async def test_add_tag_twice_is_satisfied(service: ClientService):
    client = await service.create(ClientCreate(name="Acme", tags=["vip"]))
    tag_id = client.tags[0].id
    assert await service.add_tag(client.id, tag_id) is True
    assert [t.id for t in await service.get_tags(client.id)] == [tag_id]


@pytest.mark.asyncio
async def test_counts_by_status_includes_total(service: ClientService):
    await service.create(ClientCreate(name="A"))
    await service.create(ClientCreate(name="B", status=ClientStatus.PROSPECT))
    archived = await service.create(ClientCreate(name="C"))
    await service.archive(archived.id)

    counts = await service.counts_by_status()
    assert counts == {"active": 1, "inactive": 0, "prospect": 1, "archived": 1, "all": 3}


@pytest.mark.asyncio
async def test_export_lists_tag_names(service: ClientService):
    await service.create(ClientCreate(name="Acme", industry="Retail", tags=["vip"]))
    exported = await service.export()
    assert exported[0]["name"] == "Acme"
    assert exported[0]["data"] == {"industry": "Retail"}
    assert exported[0]["tags"] == ["vip"]


@pytest.mark.asyncio
async def test_lifecycle_events_fire_in_order(service: ClientService, events: LifecycleEvents):
    seen: list[str] = []
    for name in (
        "client.before_create", "client.created",
        "client.before_update", "client.updated",
        "client.before_delete", "client.deleted",
    ):
        events.subscribe(name, lambda *args, _name=name: seen.append(_name))

    client = await service.create(ClientCreate(name="Acme"))
    await service.update(client.id, ClientUpdate(notes="Key account"))
    assert await service.delete(client.id) is True

    assert seen == [
        "client.before_create", "client.created",
        "client.before_update", "client.updated",
        "client.before_delete", "client.deleted",
    ]


@pytest.mark.asyncio
async def test_failing_listener_does_not_block_create(service: ClientService, events: LifecycleEvents):
    async def broken(client):
        raise RuntimeError("audit log unavailable")

    events.subscribe("client.created", broken)
    client = await service.create(ClientCreate(name="Acme"))
    assert await service.get(client.id) is client


@pytest.mark.asyncio
async def test_before_update_receives_original_snapshot(service: ClientService, events: LifecycleEvents):
    captured = {}

    def remember(client, original, data):
        captured["before"] = original.name
        captured["after"] = client.name

    events.subscribe("client.before_update", remember)
    client = await service.create(ClientCreate(name="Acme"))
    await service.update(client.id, ClientUpdate(name="Acme Holdings"))

    assert captured == {"before": "Acme", "after": "Acme Holdings"}
