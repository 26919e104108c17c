"""Test the builtin catalogue seed."""

from __future__ import annotations

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from notspot.models import AssociationType, CrmObject, ObjectType
from notspot.services import object_svc, seed_svc


def test_engagement_association_ids():
    rows = seed_svc.engagement_association_types()
    assert rows[0] == (202, "0-46", "0-1", None)
    assert rows[1] == (203, "0-1", "0-46", None)
    assert rows[-1][0] == 231
    assert len({r[0] for r in rows}) == len(rows)


@pytest.mark.asyncio
async def test_seed_is_idempotent(db: AsyncSession):
    counts = await seed_svc.seed_all(db)
    assert set(counts.values()) == {0}

    types = (await db.execute(select(func.count()).select_from(ObjectType))).scalar_one()
    assert types == len(seed_svc.OBJECT_TYPES)

    assoc_types = (await db.execute(select(func.count()).select_from(AssociationType))).scalar_one()
    assert assoc_types == len(seed_svc.ASSOCIATION_TYPES) + len(seed_svc.engagement_association_types())


@pytest.mark.asyncio
async def test_reset_store_drops_records(db: AsyncSession):
    await object_svc.create_object(db, "contacts", {"email": "gone@example.com"})
    counts = await seed_svc.reset_store(db)
    assert counts["object_types"] == len(seed_svc.OBJECT_TYPES)
    assert counts["owners"] == len(seed_svc.OWNERS)

    remaining = (await db.execute(select(func.count()).select_from(CrmObject))).scalar_one()
    assert remaining == 0
