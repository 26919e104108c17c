"""Reads and writes against the sparse property value table.

These helpers never commit. The object and association stores call them in
the middle of a unit of work and commit once the whole operation is staged.
"""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.crm_object import PropertyValue, PropertyValueHistory

# Always returned on get/list/batch read, whatever the caller asked for.
DEFAULT_PROPERTIES = ("hs_object_id", "createdate", "lastmodifieddate")


def wanted_properties(requested: Iterable[str] | None) -> list[str]:
    names = list(DEFAULT_PROPERTIES)
    for name in requested or ():
        if name and name not in names:
            names.append(name)
    return names


async def set_properties(
    db: AsyncSession, object_id: int, props: dict[str, str], ts: str, source: str = "API"
) -> None:
    """Upsert current values and append one history row per key."""
    if not props:
        return
    stmt = select(PropertyValue).where(
        PropertyValue.object_id == object_id,
        PropertyValue.property_name.in_(list(props)),
    )
    result = await db.execute(stmt)
    existing = {pv.property_name: pv for pv in result.scalars().all()}

    for name, value in props.items():
        pv = existing.get(name)
        if pv:
            pv.value = value
            pv.updated_at = ts
        else:
            db.add(PropertyValue(
                object_id=object_id, property_name=name, value=value, updated_at=ts,
            ))
        db.add(PropertyValueHistory(
            object_id=object_id, property_name=name, value=value,
            timestamp=ts, source=source,
        ))
    await db.flush()


async def get_properties(
    db: AsyncSession, object_id: int, names: Iterable[str] | None = None
) -> dict[str, str]:
    """Current values for one object; every property when ``names`` is None."""
    bulk = await get_properties_bulk(db, [object_id], names)
    return bulk.get(object_id, {})


async def get_properties_bulk(
    db: AsyncSession, object_ids: list[int], names: Iterable[str] | None = None
) -> dict[int, dict[str, str]]:
    if not object_ids:
        return {}
    stmt = select(PropertyValue).where(PropertyValue.object_id.in_(object_ids))
    if names is not None:
        stmt = stmt.where(PropertyValue.property_name.in_(list(names)))
    result = await db.execute(stmt)

    out: dict[int, dict[str, str]] = {oid: {} for oid in object_ids}
    for pv in result.scalars().all():
        out[pv.object_id][pv.property_name] = pv.value if pv.value is not None else ""
    return out


async def get_history(
    db: AsyncSession, object_id: int, names: Iterable[str]
) -> dict[str, list[PropertyValueHistory]]:
    """History rows per property, newest first."""
    names = list(names)
    if not names:
        return {}
    stmt = (
        select(PropertyValueHistory)
        .where(
            PropertyValueHistory.object_id == object_id,
            PropertyValueHistory.property_name.in_(names),
        )
        .order_by(PropertyValueHistory.timestamp.desc(), PropertyValueHistory.id.desc())
    )
    result = await db.execute(stmt)
    out: dict[str, list[PropertyValueHistory]] = {name: [] for name in names}
    for row in result.scalars().all():
        out[row.property_name].append(row)
    return out
