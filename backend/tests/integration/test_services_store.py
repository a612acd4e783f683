"""End-to-end service scenarios against the SQLite store."""

import uuid

import pytest

from clientbook.application.schemas import ClientCreate, ClientUpdate, TagCreate, TagUpdate
from clientbook.application.services import ClientService, TagService
from clientbook.domain.entities import ClientStatus
from clientbook.domain.exceptions import RecordValidationError


@pytest.fixture
def client_service(clients, tags, edges) -> ClientService:
    return ClientService(clients, tags, edges)


@pytest.fixture
def tag_service(tags) -> TagService:
    return TagService(tags)


@pytest.mark.asyncio
async def test_acme_with_new_tag_names(client_service, edges):
    acme = await client_service.create(ClientCreate(name="Acme", tags=["vip", "prospect"]))

    assert acme.slug == "acme"
    loaded = await edges.load_edges_for_clients([acme.id])
    assert [t.name for t in loaded[acme.id]] == ["prospect", "vip"]
    assert all(t.color == "#3b82f6" for t in loaded[acme.id])


@pytest.mark.asyncio
async def test_tag_references_mix_ids_and_names(client_service, tag_service):
    vip = await tag_service.create(TagCreate(name="VIP", color="#EF4444"))
    acme = await client_service.create(ClientCreate(name="Acme", tags=[vip.id, "Partner"]))

    assert sorted(t.name for t in acme.tags) == ["Partner", "VIP"]
    assert await tag_service.search("partner")


@pytest.mark.asyncio
async def test_search_loads_tags_and_matches_document(client_service):
    await client_service.create(
        ClientCreate(name="Acme", address={"city": "Springfield"}, tags=["vip"])
    )
    await client_service.create(ClientCreate(name="Globex"))

    found = await client_service.search("springfield")
    assert [(c.name, [t.name for t in c.tags]) for c in found] == [("Acme", ["vip"])]


@pytest.mark.asyncio
async def test_status_lifecycle_and_counts(client_service):
    acme = await client_service.create(ClientCreate(name="Acme"))
    await client_service.create(ClientCreate(name="Globex", status=ClientStatus.PROSPECT))

    archived = await client_service.archive(acme.id)
    assert archived.status is ClientStatus.ARCHIVED
    assert (await client_service.counts_by_status())["archived"] == 1

    reactivated = await client_service.activate(acme.id)
    assert reactivated.is_active
    assert [c.name for c in await client_service.list_clients(status="active")] == ["Acme"]


@pytest.mark.asyncio
async def test_rename_keeps_slug_unless_changed(client_service):
    acme = await client_service.create(ClientCreate(name="Acme"))
    renamed = await client_service.update(acme.id, ClientUpdate(name="Acme Holdings"))
    assert renamed.slug == "acme"

    other = await client_service.create(ClientCreate(name="Other"))
    with pytest.raises(RecordValidationError) as exc_info:
        await client_service.update(other.id, ClientUpdate(slug="acme"))
    assert exc_info.value.codes == ["slug_exists"]


@pytest.mark.asyncio
async def test_blank_slug_on_update_is_regenerated_and_unique(client_service, tag_service):
    acme = await client_service.create(ClientCreate(name="Acme"))
    other = await client_service.create(ClientCreate(name="Other"))

    cleared = await client_service.update(acme.id, ClientUpdate(slug=""))
    assert (await client_service.get(acme.id)).slug == cleared.slug == "acme"

    clash = await client_service.update(other.id, ClientUpdate(name="Acme", slug=""))
    assert clash.slug == "acme-1"
    assert (await client_service.get_by_slug("acme-1")).id == other.id

    vip = await tag_service.create(TagCreate(name="VIP"))
    retagged = await tag_service.update(vip.id, TagUpdate(slug=""))
    assert retagged.slug == "vip"


@pytest.mark.asyncio
async def test_unknown_tag_ids_are_skipped(client_service, tags):
    vip = await tags.find_or_create("vip")
    missing = str(uuid.uuid4())

    acme = await client_service.create(ClientCreate(name="Acme", tags=[missing, vip.id]))

    assert [t.id for t in acme.tags] == [vip.id]
    assert await client_service.sync_tags(acme.id, [missing]) == []
    assert await client_service.get_tags(acme.id) == []


@pytest.mark.asyncio
async def test_delete_client_cascades_edges(client_service, edges):
    acme = await client_service.create(ClientCreate(name="Acme", tags=["vip"]))
    vip_id = acme.tags[0].id

    assert await client_service.delete(acme.id) is True
    assert await edges.edges_for_tag(vip_id) == []


@pytest.mark.asyncio
async def test_tag_validation_codes(tag_service):
    await tag_service.create(TagCreate(name="VIP"))

    with pytest.raises(RecordValidationError) as exc_info:
        await tag_service.create(TagCreate(name="x" * 101, color="blue", slug="vip"))
    assert exc_info.value.codes == ["name_too_long", "invalid_color", "slug_exists"]

    with pytest.raises(RecordValidationError) as exc_info:
        await tag_service.create(TagCreate(name=""))
    assert exc_info.value.codes == ["name_required"]


@pytest.mark.asyncio
async def test_tag_update_and_merge(client_service, tag_service):
    acme = await client_service.create(ClientCreate(name="Acme", tags=["customer"]))
    customer = acme.tags[0]
    client_tag = await tag_service.create(TagCreate(name="Client"))

    updated = await tag_service.update(customer.id, TagUpdate(color="#10B981"))
    assert updated.color == "#10b981"

    assert await tag_service.merge(customer.id, client_tag.id) is True
    assert [t.name for t in await client_service.get_tags(acme.id)] == ["Client"]
    assert [(t.name, t.client_count) for t in await tag_service.list_with_counts()] == [
        ("Client", 1),
    ]
