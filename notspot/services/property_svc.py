"""Property definition and property group service."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..errors import ConflictError, NotFoundError
from ..models.base import utc_timestamp
from ..models.property import PropertyDefinition, PropertyGroup
from ..schemas.property import (
    PropertyCreate,
    PropertyGroupCreate,
    PropertyGroupUpdate,
    PropertyUpdate,
)
from .type_svc import resolve_object_type

log = logging.getLogger(__name__)


def _options(options) -> list[dict]:
    return [o.model_dump(by_alias=True) for o in options]


# ── Property definitions ───────────────────────────────────────────────────

async def list_properties(
    db: AsyncSession, object_type: str, archived: bool = False
) -> list[PropertyDefinition]:
    type_id = await resolve_object_type(db, object_type)
    stmt = (
        select(PropertyDefinition)
        .where(
            PropertyDefinition.object_type_id == type_id,
            PropertyDefinition.archived.is_(archived),
        )
        .order_by(PropertyDefinition.display_order, PropertyDefinition.name)
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def _find_property(db: AsyncSession, type_id: str, name: str) -> PropertyDefinition:
    pd = await db.get(PropertyDefinition, (type_id, name))
    if pd is None:
        raise NotFoundError(f"Property {name!r} not found")
    return pd


async def get_property(db: AsyncSession, object_type: str, name: str) -> PropertyDefinition:
    type_id = await resolve_object_type(db, object_type)
    return await _find_property(db, type_id, name)


async def insert_property(
    db: AsyncSession, type_id: str, data: PropertyCreate, hubspot_defined: bool = False
) -> PropertyDefinition:
    if await db.get(PropertyDefinition, (type_id, data.name)) is not None:
        raise ConflictError(f"Property {data.name!r} already exists")
    pd = PropertyDefinition(
        object_type_id=type_id,
        name=data.name,
        label=data.label,
        type=data.type,
        field_type=data.field_type,
        group_name=data.group_name,
        description=data.description,
        options_json=_options(data.options),
        display_order=data.display_order,
        has_unique_value=data.has_unique_value,
        hidden=data.hidden,
        form_field=data.form_field,
        calculated=data.calculated,
        external_options=data.external_options,
        hubspot_defined=hubspot_defined,
    )
    db.add(pd)
    await db.flush()
    return pd


async def create_property(
    db: AsyncSession, object_type: str, data: PropertyCreate
) -> PropertyDefinition:
    type_id = await resolve_object_type(db, object_type)
    pd = await insert_property(db, type_id, data)
    await db.commit()
    await db.refresh(pd)
    log.info("Created property %s.%s", type_id, pd.name)
    return pd


async def update_property(
    db: AsyncSession, object_type: str, name: str, data: PropertyUpdate
) -> PropertyDefinition:
    type_id = await resolve_object_type(db, object_type)
    pd = await _find_property(db, type_id, name)
    if pd.archived:
        raise NotFoundError(f"Property {name!r} not found")

    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    if "options" in changes:
        pd.options_json = _options(data.options)
        del changes["options"]
    for key, value in changes.items():
        setattr(pd, key, value)
    pd.updated_at = utc_timestamp()

    await db.commit()
    await db.refresh(pd)
    return pd


async def _archive_property(db: AsyncSession, type_id: str, name: str) -> None:
    pd = await _find_property(db, type_id, name)
    if pd.archived:
        raise NotFoundError(f"Property {name!r} not found")
    ts = utc_timestamp()
    pd.archived = True
    pd.archived_at = ts
    pd.updated_at = ts


async def archive_property(db: AsyncSession, object_type: str, name: str) -> None:
    type_id = await resolve_object_type(db, object_type)
    await _archive_property(db, type_id, name)
    await db.commit()


# ── Batch ──────────────────────────────────────────────────────────────────

async def batch_create_properties(
    db: AsyncSession, object_type: str, inputs: list[PropertyCreate]
) -> list[PropertyDefinition]:
    """Create each definition in order; the first failure stops the batch."""
    return [await create_property(db, object_type, data) for data in inputs]


async def batch_read_properties(
    db: AsyncSession, object_type: str, names: list[str]
) -> list[PropertyDefinition]:
    type_id = await resolve_object_type(db, object_type)
    return [await _find_property(db, type_id, name) for name in names]


async def batch_archive_properties(
    db: AsyncSession, object_type: str, names: list[str]
) -> None:
    type_id = await resolve_object_type(db, object_type)
    for name in names:
        await _archive_property(db, type_id, name)
        await db.commit()


# ── Property groups ────────────────────────────────────────────────────────

async def list_groups(db: AsyncSession, object_type: str) -> list[PropertyGroup]:
    type_id = await resolve_object_type(db, object_type)
    stmt = (
        select(PropertyGroup)
        .where(PropertyGroup.object_type_id == type_id, PropertyGroup.archived.is_(False))
        .order_by(PropertyGroup.display_order, PropertyGroup.name)
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def _find_group(db: AsyncSession, type_id: str, name: str, live_only: bool = False) -> PropertyGroup:
    group = await db.get(PropertyGroup, (type_id, name))
    if group is None or (live_only and group.archived):
        raise NotFoundError(f"Property group {name!r} not found")
    return group


async def get_group(db: AsyncSession, object_type: str, name: str) -> PropertyGroup:
    type_id = await resolve_object_type(db, object_type)
    return await _find_group(db, type_id, name)


async def create_group(
    db: AsyncSession, object_type: str, data: PropertyGroupCreate
) -> PropertyGroup:
    type_id = await resolve_object_type(db, object_type)
    if await db.get(PropertyGroup, (type_id, data.name)) is not None:
        raise ConflictError(f"Property group {data.name!r} already exists")
    group = PropertyGroup(
        object_type_id=type_id,
        name=data.name,
        label=data.label,
        display_order=data.display_order,
    )
    db.add(group)
    await db.commit()
    await db.refresh(group)
    return group


async def update_group(
    db: AsyncSession, object_type: str, name: str, data: PropertyGroupUpdate
) -> PropertyGroup:
    type_id = await resolve_object_type(db, object_type)
    group = await _find_group(db, type_id, name, live_only=True)
    for key, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(group, key, value)
    await db.commit()
    await db.refresh(group)
    return group


async def archive_group(db: AsyncSession, object_type: str, name: str) -> None:
    type_id = await resolve_object_type(db, object_type)
    group = await _find_group(db, type_id, name, live_only=True)
    group.archived = True
    await db.commit()
