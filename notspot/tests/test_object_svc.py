"""Test the CRM object store."""

from __future__ import annotations

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from notspot.errors import NotFoundError, ValidationError
from notspot.schemas.object import BatchUpdateInput, SimplePublicObject, UpsertInput
from notspot.services import association_svc, object_svc


@pytest.mark.asyncio
async def test_create_sets_default_properties(db: AsyncSession):
    obj = await object_svc.create_object(db, "contacts", {"email": "a@example.com"})
    assert obj.id.isdigit()
    assert obj.properties["hs_object_id"] == obj.id
    assert obj.properties["email"] == "a@example.com"
    assert obj.properties["createdate"] == obj.created_at
    assert obj.properties["hs_object_source"] == "API"
    assert obj.archived is False


@pytest.mark.asyncio
async def test_create_resolves_type_by_id(db: AsyncSession):
    obj = await object_svc.create_object(db, "0-2", {"name": "Acme"})
    fetched = await object_svc.get_object(db, "companies", obj.id, ["name"])
    assert fetched.properties["name"] == "Acme"


@pytest.mark.asyncio
async def test_get_returns_defaults_plus_requested(db: AsyncSession, contact: SimplePublicObject):
    fetched = await object_svc.get_object(db, "contacts", contact.id, ["firstname"])
    assert set(fetched.properties) == {"hs_object_id", "createdate", "lastmodifieddate", "firstname"}
    assert fetched.properties["firstname"] == "Ada"


@pytest.mark.asyncio
async def test_get_unknown_type_or_id(db: AsyncSession, contact: SimplePublicObject):
    with pytest.raises(NotFoundError):
        await object_svc.get_object(db, "spaceships", "1")
    with pytest.raises(NotFoundError):
        await object_svc.get_object(db, "contacts", "999999")
    with pytest.raises(NotFoundError):
        await object_svc.get_object(db, "contacts", "abc")
    # Right id, wrong type
    with pytest.raises(NotFoundError):
        await object_svc.get_object(db, "companies", contact.id)


@pytest.mark.asyncio
async def test_get_by_id_property(db: AsyncSession, contact: SimplePublicObject):
    found = await object_svc.get_object_by_property(db, "contacts", "email", "ada@example.com")
    assert found.id == contact.id
    with pytest.raises(NotFoundError):
        await object_svc.get_object_by_property(db, "contacts", "email", "nobody@example.com")


@pytest.mark.asyncio
async def test_update_overwrites_and_keeps_history(db: AsyncSession, contact: SimplePublicObject):
    updated = await object_svc.update_object(db, "contacts", contact.id, {"firstname": "Augusta"})
    assert updated.properties["firstname"] == "Augusta"
    assert updated.properties["lastname"] == "Lovelace"

    fetched = await object_svc.get_object(
        db, "contacts", contact.id, ["firstname"], properties_with_history=["firstname"]
    )
    history = fetched.properties_with_history["firstname"]
    assert [h.value for h in history] == ["Augusta", "Ada"]
    assert history[0].source_type == "API"


@pytest.mark.asyncio
async def test_number_properties_are_validated(db: AsyncSession):
    with pytest.raises(ValidationError):
        await object_svc.create_object(db, "deals", {"dealname": "Big", "amount": "lots"})
    deal = await object_svc.create_object(db, "deals", {"dealname": "Big", "amount": "1500.50"})
    assert deal.properties["amount"] == "1500.50"
    with pytest.raises(ValidationError):
        await object_svc.update_object(db, "deals", deal.id, {"amount": "a few"})


@pytest.mark.asyncio
async def test_archive_hides_object_from_list(db: AsyncSession):
    keep = await object_svc.create_object(db, "tickets", {"subject": "keep"})
    gone = await object_svc.create_object(db, "tickets", {"subject": "gone"})
    await object_svc.archive_object(db, "tickets", gone.id)

    live = await object_svc.list_objects(db, "tickets")
    assert [o.id for o in live.results] == [keep.id]

    archived = await object_svc.list_objects(db, "tickets", archived=True)
    assert [o.id for o in archived.results] == [gone.id]
    assert archived.results[0].archived_at

    with pytest.raises(NotFoundError):
        await object_svc.update_object(db, "tickets", gone.id, {"subject": "back"})
    with pytest.raises(NotFoundError):
        await object_svc.archive_object(db, "tickets", gone.id)


@pytest.mark.asyncio
async def test_archive_removes_associations(
    db: AsyncSession, contact: SimplePublicObject, company: SimplePublicObject
):
    await association_svc.associate_default(db, "contacts", contact.id, "companies", company.id)
    await object_svc.archive_object(db, "companies", company.id)
    assert await association_svc.get_associations(db, "contacts", contact.id, "companies") == []


@pytest.mark.asyncio
async def test_list_paging(db: AsyncSession):
    ids = [
        (await object_svc.create_object(db, "products", {"name": f"p{i}"})).id
        for i in range(3)
    ]
    first = await object_svc.list_objects(db, "products", limit=2)
    assert [o.id for o in first.results] == ids[:2]
    assert first.after == ids[1]

    second = await object_svc.list_objects(db, "products", limit=2, after=first.after)
    assert [o.id for o in second.results] == ids[2:]
    assert second.after is None

    wire = first.to_wire("/crm/v3/objects/products")
    assert wire["paging"]["next"]["link"] == f"/crm/v3/objects/products?after={ids[1]}"

    with pytest.raises(ValidationError):
        await object_svc.list_objects(db, "products", after="not-a-cursor")


@pytest.mark.asyncio
async def test_batch_read_counts_missing(db: AsyncSession, contact: SimplePublicObject):
    result = await object_svc.batch_read(db, "contacts", [contact.id, "424242"], ["email"])
    assert [o.id for o in result.results] == [contact.id]
    assert result.num_errors == 1

    by_email = await object_svc.batch_read(
        db, "contacts", ["ada@example.com"], id_property="email"
    )
    assert by_email.results[0].id == contact.id


@pytest.mark.asyncio
async def test_batch_create_and_update(db: AsyncSession):
    created = await object_svc.batch_create(
        db, "companies", [{"name": "One"}, {"name": "Two"}]
    )
    assert created.status == "COMPLETE"
    assert len(created.results) == 2

    updated = await object_svc.batch_update(db, "companies", [
        BatchUpdateInput(id=created.results[0].id, properties={"industry": "SOFTWARE"}),
    ])
    assert updated.results[0].properties["industry"] == "SOFTWARE"
    assert updated.results[0].properties["name"] == "One"


@pytest.mark.asyncio
async def test_batch_upsert_matches_on_id_property(db: AsyncSession):
    first = await object_svc.batch_upsert(
        db, "contacts",
        [UpsertInput(id="grace@example.com", properties={"email": "grace@example.com"})],
        id_property="email",
    )
    second = await object_svc.batch_upsert(
        db, "contacts",
        [UpsertInput(id="grace@example.com", properties={"firstname": "Grace"})],
        id_property="email",
    )
    assert first.results[0].id == second.results[0].id
    assert second.results[0].properties["firstname"] == "Grace"


@pytest.mark.asyncio
async def test_batch_archive(db: AsyncSession):
    a = await object_svc.create_object(db, "notes", {"hs_note_body": "a"})
    b = await object_svc.create_object(db, "notes", {"hs_note_body": "b"})
    await object_svc.batch_archive(db, "notes", [a.id, b.id])
    assert (await object_svc.list_objects(db, "notes")).results == []


@pytest.mark.asyncio
async def test_merge_primary_values_win(db: AsyncSession):
    primary = await object_svc.create_object(db, "contacts", {"firstname": "Ada"})
    other = await object_svc.create_object(
        db, "contacts", {"firstname": "Augusta", "phone": "555-0100"}
    )

    merged = await object_svc.merge_objects(db, "contacts", primary.id, other.id)
    assert merged.id == primary.id
    assert merged.properties["firstname"] == "Ada"
    assert merged.properties["phone"] == "555-0100"
    assert merged.properties["hs_merged_object_ids"] == other.id

    loser = await object_svc.get_object(db, "contacts", other.id)
    assert loser.archived is True


@pytest.mark.asyncio
async def test_merge_rejects_self_and_archived(db: AsyncSession, contact: SimplePublicObject):
    with pytest.raises(ValidationError):
        await object_svc.merge_objects(db, "contacts", contact.id, contact.id)

    other = await object_svc.create_object(db, "contacts", {"email": "x@example.com"})
    await object_svc.archive_object(db, "contacts", other.id)
    with pytest.raises(NotFoundError):
        await object_svc.merge_objects(db, "contacts", contact.id, other.id)


@pytest.mark.asyncio
async def test_batch_create_is_fail_fast(db: AsyncSession):
    with pytest.raises(ValidationError):
        await object_svc.batch_create(db, "deals", [
            {"dealname": "First", "amount": "10"},
            {"dealname": "Second", "amount": "ten"},
            {"dealname": "Third", "amount": "30"},
        ])
    page = await object_svc.list_objects(db, "deals", properties=["dealname"])
    assert [o.properties["dealname"] for o in page.results] == ["First"]


@pytest.mark.asyncio
async def test_batch_update_is_fail_fast(db: AsyncSession):
    a = await object_svc.create_object(db, "companies", {"name": "A"})
    b = await object_svc.create_object(db, "companies", {"name": "B"})
    with pytest.raises(NotFoundError):
        await object_svc.batch_update(db, "companies", [
            BatchUpdateInput(id=a.id, properties={"name": "A2"}),
            BatchUpdateInput(id="999999", properties={"name": "ghost"}),
            BatchUpdateInput(id=b.id, properties={"name": "B2"}),
        ])
    assert (await object_svc.get_object(db, "companies", a.id, ["name"])).properties["name"] == "A2"
    assert (await object_svc.get_object(db, "companies", b.id, ["name"])).properties["name"] == "B"


@pytest.mark.asyncio
async def test_get_by_property_prefers_lowest_id(db: AsyncSession):
    first = await object_svc.create_object(db, "contacts", {"email": "twin@example.com"})
    await object_svc.create_object(db, "contacts", {"email": "twin@example.com"})
    found = await object_svc.get_object_by_property(db, "contacts", "email", "twin@example.com")
    assert found.id == first.id

    await object_svc.archive_object(db, "contacts", first.id)
    found = await object_svc.get_object_by_property(db, "contacts", "email", "twin@example.com")
    assert found.id != first.id


@pytest.mark.asyncio
async def test_batch_read_by_id_property_keeps_history(db: AsyncSession, contact: SimplePublicObject):
    await object_svc.update_object(db, "contacts", contact.id, {"firstname": "Augusta"})
    result = await object_svc.batch_read(
        db, "contacts", ["ada@example.com"],
        id_property="email", properties_with_history=["firstname"],
    )
    history = result.results[0].properties_with_history["firstname"]
    assert [h.value for h in history] == ["Augusta", "Ada"]
