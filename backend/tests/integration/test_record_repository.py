"""Integration tests for the generic repository over both document encodings."""

import pytest
from sqlalchemy import select

from clientbook.domain.entities import Client, ClientStatus, Tag
from clientbook.domain.exceptions import ConstraintViolationError, EntityNotFoundError
from clientbook.infrastructure.database.repositories.record_repository import like_pattern


@pytest.mark.asyncio
async def test_insert_assigns_id_timestamps_and_slug(clients):
    client = await clients.save(Client(name="Acme Corporation"))

    assert len(client.id) == 36
    assert client.slug == "acme-corporation"
    assert client.created_at is not None
    assert client.created_at <= client.updated_at


@pytest.mark.asyncio
async def test_same_name_gets_numbered_slugs(clients):
    slugs = [(await clients.save(Client(name="Acme"))).slug for _ in range(3)]
    assert slugs == ["acme", "acme-1", "acme-2"]


@pytest.mark.asyncio
async def test_ids_are_unique(clients):
    ids = {(await clients.save(Client(name="Acme"))).id for _ in range(5)}
    assert len(ids) == 5


@pytest.mark.asyncio
async def test_ensure_unique_slug_ignores_own_row(clients):
    client = await clients.save(Client(name="Acme"))
    assert await clients.ensure_unique_slug("acme", exclude_id=client.id) == "acme"
    assert await clients.ensure_unique_slug("acme") == "acme-1"


@pytest.mark.asyncio
async def test_update_keeps_id_and_created_at(clients):
    client = await clients.save(Client(name="Acme"))
    original_id, created_at = client.id, client.created_at

    reloaded = await clients.find_by_id(original_id)
    reloaded.set_status("inactive")
    reloaded.set_value("industry", "Retail")
    await clients.save(reloaded)

    stored = await clients.find_by_id(original_id)
    assert stored.id == original_id
    assert stored.created_at == created_at
    assert stored.updated_at >= stored.created_at
    assert stored.status is ClientStatus.INACTIVE
    assert stored.industry == "Retail"


@pytest.mark.asyncio
async def test_update_of_missing_row_raises(clients):
    ghost = Client(id="00000000-0000-0000-0000-000000000000", name="Ghost", slug="ghost")
    with pytest.raises(EntityNotFoundError):
        await clients.save(ghost)


@pytest.mark.asyncio
async def test_nested_document_survives_storage(clients, schema):
    document = {
        "address": {"city": "X", "country": "BE"},
        "contacts": [{"name": "Y", "phones": ["1", "2"]}],
        "score": 4.5,
        "vip": True,
        "note": "ünïcode",
    }
    client = await clients.save(Client(name="Acme", document=dict(document)))

    stored = await clients.find_by_id(client.id)
    assert stored.document == document

    raw = (
        await clients._session.execute(
            select(schema.clients.c.data).where(schema.clients.c.id == client.id)
        )
    ).scalar_one()
    if schema.native_documents:
        assert raw == document
    else:
        assert raw == schema.codec.encode(document)


@pytest.mark.asyncio
async def test_find_lowers_criteria(clients):
    for name, status in [("A", "active"), ("B", "prospect"), ("C", "archived")]:
        await clients.save(Client(name=name, status=ClientStatus(status)))

    active = await clients.find({"status": ClientStatus.ACTIVE})
    some = await clients.find({"status": ["prospect", "archived"]}, {"name": "desc"})
    none_missing_slug = await clients.find({"slug": None})

    assert [c.name for c in active] == ["A"]
    assert [c.name for c in some] == ["C", "B"]
    assert none_missing_slug == []


@pytest.mark.asyncio
async def test_find_paginates_only_with_limit(clients):
    for name in ["A", "B", "C", "D"]:
        await clients.save(Client(name=name))

    assert len(await clients.find(order_by={"name": "asc"}, offset=2)) == 4
    page = await clients.find(order_by={"name": "asc"}, limit=2, offset=2)
    assert [c.name for c in page] == ["C", "D"]


@pytest.mark.asyncio
async def test_unknown_field_raises_value_error(clients):
    with pytest.raises(ValueError):
        await clients.find({"colour": "red"})


@pytest.mark.asyncio
async def test_count_exists_and_delete(clients):
    client = await clients.save(Client(name="Acme"))
    await clients.save(Client(name="Beta", status=ClientStatus.PROSPECT))

    assert await clients.count() == 2
    assert await clients.count({"status": "prospect"}) == 1
    assert await clients.exists(client.id)

    assert await clients.delete(client.id) is True
    assert await clients.delete(client.id) is False
    assert not await clients.exists(client.id)


@pytest.mark.asyncio
async def test_search_matches_columns_and_document(clients):
    await clients.save(Client(name="Acme", document={"address": {"city": "Springfield"}}))
    await clients.save(Client(name="Globex"))
    await clients.save(Client(name="Initech", document={"notes": "acme partner"}))

    by_name = await clients.search("acme")
    by_document = await clients.search("springfield")

    assert [c.name for c in by_name] == ["Acme", "Initech"]
    assert [c.name for c in by_document] == ["Acme"]


@pytest.mark.asyncio
async def test_search_treats_wildcards_literally(clients):
    await clients.save(Client(name="100% Organic"))
    await clients.save(Client(name="1000 Widgets"))

    assert [c.name for c in await clients.search("100%")] == ["100% Organic"]
    assert like_pattern("a_b%c") == "%a\\_b\\%c%"


@pytest.mark.asyncio
async def test_database_unique_slug_surfaces_as_constraint_violation(clients, session, schema):
    client = await clients.save(Client(name="Acme"))
    other = await clients.save(Client(name="Other"))
    other.slug = client.slug

    with pytest.raises(ConstraintViolationError) as exc_info:
        await clients.save(other)
    assert "UNIQUE" in exc_info.value.detail.upper()


@pytest.mark.asyncio
async def test_tag_defaults_color_and_mirrors_created_at(tags):
    tag = await tags.save(Tag(name="VIP"))
    stored = await tags.find_by_id(tag.id)

    assert stored.color == "#3b82f6"
    assert stored.updated_at == stored.created_at


@pytest.mark.asyncio
async def test_tag_find_or_create_reuses_slug(tags):
    first = await tags.find_or_create("Key Account")
    again = await tags.find_or_create("key account")
    assert again.id == first.id
    assert await tags.count() == 1


@pytest.mark.asyncio
async def test_tag_search_covers_description(tags):
    tag = Tag(name="Gold")
    tag.set_description("Top tier partners")
    await tags.save(tag)
    await tags.save(Tag(name="Silver"))

    assert [t.name for t in await tags.search("tier")] == ["Gold"]


@pytest.mark.asyncio
async def test_tag_find_or_create_keeps_non_latin_names_apart(tags):
    japan = await tags.find_or_create("日本")
    moscow = await tags.find_or_create("Москва")

    assert (japan.slug, moscow.slug) == ("日本", "москва")
    assert moscow.id != japan.id
    assert (await tags.find_or_create("москва")).id == moscow.id
    assert await tags.count() == 2


@pytest.mark.asyncio
async def test_punctuation_only_names_get_a_fallback_slug(clients, tags):
    first = await clients.save(Client(name="!!!"))
    second = await clients.save(Client(name="???"))
    assert (first.slug, second.slug) == ("client", "client-1")

    marker = await tags.find_or_create("***")
    assert marker.slug == "tag"
    assert (await tags.find_or_create("***")).id == marker.id
    assert (await tags.find_or_create("+++")).id != marker.id
