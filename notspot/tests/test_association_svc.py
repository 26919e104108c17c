"""Test the association store and label management."""

from __future__ import annotations

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from notspot.errors import ConflictError, NotFoundError
from notspot.models.association import HUBSPOT_DEFINED, USER_DEFINED, AssociationType
from notspot.schemas.association import AssociationSpec
from notspot.schemas.object import SimplePublicObject
from notspot.services import association_svc, object_svc


def _type_ids(results) -> dict[str, list[int]]:
    return {r.to_object_id: [t.type_id for t in r.association_types] for r in results}


@pytest.mark.asyncio
async def test_associate_default_mirrors_reverse_edge(
    db: AsyncSession, contact: SimplePublicObject, company: SimplePublicObject
):
    spec = await association_svc.associate_default(
        db, "contacts", contact.id, "companies", company.id
    )
    assert spec.association_type_id == 1
    assert spec.association_category == HUBSPOT_DEFINED

    forward = await association_svc.get_associations(db, "contacts", contact.id, "companies")
    assert _type_ids(forward) == {company.id: [1]}
    assert forward[0].association_types[0].label is None

    reverse = await association_svc.get_associations(db, "companies", company.id, "contacts")
    assert _type_ids(reverse) == {contact.id: [2]}


@pytest.mark.asyncio
async def test_associate_is_idempotent(
    db: AsyncSession, contact: SimplePublicObject, company: SimplePublicObject
):
    for _ in range(3):
        await association_svc.associate_default(db, "0-1", contact.id, "0-2", company.id)
    forward = await association_svc.get_associations(db, "contacts", contact.id, "companies")
    assert _type_ids(forward) == {company.id: [1]}


@pytest.mark.asyncio
async def test_reverse_edge_skipped_without_reverse_default(db: AsyncSession):
    # products -> quotes has a default type, quotes -> products does not
    db.add(AssociationType(from_object_type="0-7", to_object_type="0-14", category=HUBSPOT_DEFINED))
    await db.commit()
    product = await object_svc.create_object(db, "products", {"name": "Widget"})
    quote = await object_svc.create_object(db, "quotes", {})

    await association_svc.associate_default(db, "products", product.id, "quotes", quote.id)
    forward = await association_svc.get_associations(db, "products", product.id, "quotes")
    assert list(_type_ids(forward)) == [quote.id]
    assert await association_svc.get_associations(db, "quotes", quote.id, "products") == []


@pytest.mark.asyncio
async def test_associate_default_requires_default_type(db: AsyncSession):
    product = await object_svc.create_object(db, "products", {"name": "Widget"})
    item = await object_svc.create_object(db, "carts", {})
    with pytest.raises(NotFoundError):
        await association_svc.associate_default(db, "products", product.id, "carts", item.id)


@pytest.mark.asyncio
async def test_associate_requires_live_objects(
    db: AsyncSession, contact: SimplePublicObject, company: SimplePublicObject
):
    with pytest.raises(NotFoundError):
        await association_svc.associate_default(db, "contacts", contact.id, "companies", "999999")
    await object_svc.archive_object(db, "companies", company.id)
    with pytest.raises(NotFoundError):
        await association_svc.associate_default(db, "contacts", contact.id, "companies", company.id)


@pytest.mark.asyncio
async def test_associate_with_labels_adds_default_and_label(
    db: AsyncSession, contact: SimplePublicObject, company: SimplePublicObject
):
    spec = await association_svc.associate_with_labels(
        db, "contacts", contact.id, "companies", company.id,
        [AssociationSpec(association_category=HUBSPOT_DEFINED, association_type_id=279)],
    )
    assert spec.association_type_id == 279

    forward = await association_svc.get_associations(db, "contacts", contact.id, "companies")
    assert _type_ids(forward) == {company.id: [1, 279]}
    labels = {t.type_id: t.label for t in forward[0].association_types}
    assert labels == {1: None, 279: "Primary"}

    reverse = await association_svc.get_associations(db, "companies", company.id, "contacts")
    assert _type_ids(reverse) == {contact.id: [2]}


@pytest.mark.asyncio
async def test_associate_with_labels_without_types_uses_default(
    db: AsyncSession, contact: SimplePublicObject, company: SimplePublicObject
):
    spec = await association_svc.associate_with_labels(
        db, "contacts", contact.id, "companies", company.id, []
    )
    assert spec.association_type_id == 1


@pytest.mark.asyncio
async def test_associate_with_unknown_type(
    db: AsyncSession, contact: SimplePublicObject, company: SimplePublicObject
):
    with pytest.raises(NotFoundError):
        await association_svc.associate_with_labels(
            db, "contacts", contact.id, "companies", company.id,
            [AssociationSpec(association_type_id=987654)],
        )


@pytest.mark.asyncio
async def test_remove_deletes_forward_edges_only(
    db: AsyncSession, contact: SimplePublicObject, company: SimplePublicObject
):
    await association_svc.associate_with_labels(
        db, "contacts", contact.id, "companies", company.id,
        [AssociationSpec(association_type_id=279)],
    )
    await association_svc.remove_associations(db, "contacts", contact.id, "companies", company.id)

    assert await association_svc.get_associations(db, "contacts", contact.id, "companies") == []
    reverse = await association_svc.get_associations(db, "companies", company.id, "contacts")
    assert _type_ids(reverse) == {contact.id: [2]}


@pytest.mark.asyncio
async def test_seeded_labels_for_pair(db: AsyncSession):
    labels = await association_svc.list_labels(db, "contacts", "companies")
    assert [(lbl.type_id, lbl.label) for lbl in labels] == [(1, None), (279, "Primary")]


@pytest.mark.asyncio
async def test_label_lifecycle(
    db: AsyncSession, contact: SimplePublicObject, company: SimplePublicObject
):
    created = await association_svc.create_label(db, "contacts", "companies", "Billing contact")
    assert created.category == USER_DEFINED
    assert created.label == "Billing contact"

    with pytest.raises(ConflictError):
        await association_svc.create_label(db, "contacts", "companies", "Billing contact")

    renamed = await association_svc.update_label(
        db, "contacts", "companies", created.type_id, "Invoice contact"
    )
    assert renamed.label == "Invoice contact"
    assert renamed.type_id == created.type_id

    with pytest.raises(NotFoundError):
        await association_svc.update_label(db, "contacts", "deals", created.type_id, "Nope")


@pytest.mark.asyncio
async def test_delete_label_cascades_to_edges(
    db: AsyncSession, contact: SimplePublicObject, company: SimplePublicObject
):
    label = await association_svc.create_label(db, "contacts", "companies", "Manager")
    await association_svc.associate_with_labels(
        db, "contacts", contact.id, "companies", company.id,
        [AssociationSpec(association_category=USER_DEFINED, association_type_id=label.type_id)],
    )
    await association_svc.delete_label(db, "contacts", "companies", label.type_id)

    forward = await association_svc.get_associations(db, "contacts", contact.id, "companies")
    assert _type_ids(forward) == {company.id: [1]}
    remaining = [lbl.type_id for lbl in await association_svc.list_labels(db, "contacts", "companies")]
    assert label.type_id not in remaining

    with pytest.raises(NotFoundError):
        await association_svc.delete_label(db, "contacts", "companies", label.type_id)


@pytest.mark.asyncio
async def test_batch_associate_and_read(db: AsyncSession, company: SimplePublicObject):
    a = await object_svc.create_object(db, "contacts", {"email": "a@example.com"})
    b = await object_svc.create_object(db, "contacts", {"email": "b@example.com"})

    results = await association_svc.batch_associate_default(
        db, "contacts", "companies", [(a.id, company.id), (b.id, company.id)]
    )
    assert [r.from_object_id for r in results] == [a.id, b.id]
    assert results[0].to_batch_item()["to"][0]["associationTypes"][0]["typeId"] == 1

    read = await association_svc.batch_read(db, "companies", "contacts", [company.id, "nope"])
    assert read[0][0] == company.id
    assert sorted(r.to_object_id for r in read[0][1]) == sorted([a.id, b.id])
    assert read[1] == ("nope", [])


@pytest.mark.asyncio
async def test_batch_create_with_labels(
    db: AsyncSession, contact: SimplePublicObject, company: SimplePublicObject
):
    results = await association_svc.batch_create(
        db, "contacts", "companies",
        [(contact.id, company.id, [AssociationSpec(association_type_id=279)])],
    )
    assert [t.type_id for t in results[0].labels] == [279]
    forward = await association_svc.get_associations(db, "contacts", contact.id, "companies")
    assert _type_ids(forward) == {company.id: [1, 279]}


@pytest.mark.asyncio
async def test_batch_archive_labels_keeps_default_edge(
    db: AsyncSession, contact: SimplePublicObject, company: SimplePublicObject
):
    await association_svc.associate_with_labels(
        db, "contacts", contact.id, "companies", company.id,
        [AssociationSpec(association_type_id=279)],
    )
    await association_svc.batch_archive_labels(
        db, "contacts", "companies", [(contact.id, company.id, [279])]
    )
    forward = await association_svc.get_associations(db, "contacts", contact.id, "companies")
    assert _type_ids(forward) == {company.id: [1]}


@pytest.mark.asyncio
async def test_batch_archive_removes_every_type(
    db: AsyncSession, contact: SimplePublicObject, company: SimplePublicObject
):
    await association_svc.associate_with_labels(
        db, "contacts", contact.id, "companies", company.id,
        [AssociationSpec(association_type_id=279)],
    )
    await association_svc.batch_archive(db, "contacts", "companies", [(contact.id, company.id)])
    assert await association_svc.get_associations(db, "contacts", contact.id, "companies") == []
