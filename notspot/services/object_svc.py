"""CRM object store: CRUD, batch operations and merge over the EAV tables."""

from __future__ import annotations

import logging

from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..errors import NotFoundError, ValidationError
from ..models.association import Association
from ..models.base import utc_timestamp
from ..models.crm_object import CrmObject, PropertyValue
from ..models.property import PropertyDefinition
from ..schemas.object import (
    BatchResult,
    BatchUpdateInput,
    ObjectPage,
    SimplePublicObject,
    UpsertInput,
    ValueWithTimestamp,
)
from . import property_value_svc as pv_svc
from .type_svc import parse_object_id, resolve_object_type

log = logging.getLogger(__name__)

DEFAULT_LIST_LIMIT = 10
MAX_LIST_LIMIT = 100


def to_public(
    obj: CrmObject,
    properties: dict[str, str],
    history: dict[str, list] | None = None,
) -> SimplePublicObject:
    with_history = None
    if history is not None:
        with_history = {
            name: [
                ValueWithTimestamp(
                    value=row.value if row.value is not None else "",
                    timestamp=row.timestamp,
                    source_type=row.source,
                )
                for row in rows
            ]
            for name, rows in history.items()
        }
    return SimplePublicObject(
        id=str(obj.id),
        properties=properties,
        created_at=obj.created_at,
        updated_at=obj.updated_at,
        archived=obj.archived,
        archived_at=obj.archived_at,
        properties_with_history=with_history,
    )


async def _load(
    db: AsyncSession, type_id: str, object_id: str | int, *, live_only: bool = False
) -> CrmObject:
    oid = parse_object_id(object_id)
    obj = await db.get(CrmObject, oid) if oid is not None else None
    if obj is None or obj.object_type_id != type_id or (live_only and obj.archived):
        raise NotFoundError(f"Object {object_id} not found")
    return obj


async def _with_all_properties(db: AsyncSession, obj: CrmObject) -> SimplePublicObject:
    props = await pv_svc.get_properties(db, obj.id)
    return to_public(obj, props)


async def _check_number_properties(db: AsyncSession, type_id: str, props: dict[str, str]) -> None:
    """Reject values that cannot be parsed for ``number`` typed definitions."""
    if not props:
        return
    stmt = select(PropertyDefinition.name).where(
        PropertyDefinition.object_type_id == type_id,
        PropertyDefinition.type == "number",
        PropertyDefinition.name.in_(list(props)),
    )
    result = await db.execute(stmt)
    for name in result.scalars().all():
        value = props[name]
        if value == "":
            continue
        try:
            float(value)
        except ValueError:
            raise ValidationError(
                f"Property value {value!r} is not valid for type number ({name})"
            ) from None


# ── Single-object CRUD ─────────────────────────────────────────────────────

async def create_object(
    db: AsyncSession, object_type: str, properties: dict[str, str]
) -> SimplePublicObject:
    type_id = await resolve_object_type(db, object_type)
    await _check_number_properties(db, type_id, properties)

    ts = utc_timestamp()
    obj = CrmObject(object_type_id=type_id, created_at=ts, updated_at=ts)
    db.add(obj)
    await db.flush()

    values = {
        "hs_object_id": str(obj.id),
        "hs_createdate": ts,
        "hs_lastmodifieddate": ts,
        "createdate": ts,
        "lastmodifieddate": ts,
        "hs_object_source": "API",
        "hs_object_source_id": "",
        "hs_object_source_label": "",
    }
    values.update(properties)
    await pv_svc.set_properties(db, obj.id, values, ts)
    await db.commit()
    log.debug("Created %s object %s", type_id, obj.id)
    return await _with_all_properties(db, obj)


async def get_object(
    db: AsyncSession,
    object_type: str,
    object_id: str,
    properties: list[str] | None = None,
    properties_with_history: list[str] | None = None,
) -> SimplePublicObject:
    type_id = await resolve_object_type(db, object_type)
    obj = await _load(db, type_id, object_id)
    props = await pv_svc.get_properties(db, obj.id, pv_svc.wanted_properties(properties))
    history = None
    if properties_with_history:
        history = await pv_svc.get_history(db, obj.id, properties_with_history)
    return to_public(obj, props, history)


async def get_object_by_property(
    db: AsyncSession,
    object_type: str,
    name: str,
    value: str,
    properties: list[str] | None = None,
    properties_with_history: list[str] | None = None,
) -> SimplePublicObject:
    """First live object (lowest id) whose ``name`` equals ``value``."""
    type_id = await resolve_object_type(db, object_type)
    stmt = (
        select(CrmObject)
        .join(PropertyValue, PropertyValue.object_id == CrmObject.id)
        .where(
            CrmObject.object_type_id == type_id,
            CrmObject.archived.is_(False),
            PropertyValue.property_name == name,
            PropertyValue.value == value,
        )
        .order_by(CrmObject.id)
        .limit(1)
    )
    result = await db.execute(stmt)
    obj = result.scalars().first()
    if obj is None:
        raise NotFoundError(f"No {object_type} object with {name}={value!r}")
    props = await pv_svc.get_properties(db, obj.id, pv_svc.wanted_properties(properties))
    history = None
    if properties_with_history:
        history = await pv_svc.get_history(db, obj.id, properties_with_history)
    return to_public(obj, props, history)


async def list_objects(
    db: AsyncSession,
    object_type: str,
    *,
    limit: int | None = None,
    after: str | None = None,
    archived: bool = False,
    properties: list[str] | None = None,
) -> ObjectPage:
    type_id = await resolve_object_type(db, object_type)

    if not limit or limit <= 0:
        limit = DEFAULT_LIST_LIMIT
    limit = min(limit, MAX_LIST_LIMIT)

    stmt = select(CrmObject).where(
        CrmObject.object_type_id == type_id,
        CrmObject.archived.is_(archived),
    )
    if after:
        after_id = parse_object_id(after)
        if after_id is None:
            raise ValidationError(f"Invalid paging cursor {after!r}")
        stmt = stmt.where(CrmObject.id > after_id)
    stmt = stmt.order_by(CrmObject.id).limit(limit + 1)

    result = await db.execute(stmt)
    rows = list(result.scalars().all())

    next_after = None
    if len(rows) > limit:
        rows = rows[:limit]
        next_after = str(rows[-1].id)

    values = await pv_svc.get_properties_bulk(
        db, [o.id for o in rows], pv_svc.wanted_properties(properties)
    )
    return ObjectPage(
        results=[to_public(o, values[o.id]) for o in rows],
        after=next_after,
    )


async def update_object(
    db: AsyncSession, object_type: str, object_id: str, properties: dict[str, str]
) -> SimplePublicObject:
    type_id = await resolve_object_type(db, object_type)
    obj = await _load(db, type_id, object_id, live_only=True)
    await _check_number_properties(db, type_id, properties)

    ts = utc_timestamp()
    values = dict(properties)
    values["hs_lastmodifieddate"] = ts
    values["lastmodifieddate"] = ts
    await pv_svc.set_properties(db, obj.id, values, ts)
    obj.updated_at = ts
    await db.commit()
    return await _with_all_properties(db, obj)


async def archive_object(db: AsyncSession, object_type: str, object_id: str) -> None:
    type_id = await resolve_object_type(db, object_type)
    obj = await _load(db, type_id, object_id, live_only=True)

    ts = utc_timestamp()
    obj.archived = True
    obj.archived_at = ts
    obj.updated_at = ts
    await db.execute(
        delete(Association).where(
            or_(Association.from_object_id == obj.id, Association.to_object_id == obj.id)
        )
    )
    await db.commit()
    log.debug("Archived %s object %s", type_id, obj.id)


# ── Batch operations ───────────────────────────────────────────────────────
# Sequential and fail-fast: items processed before a failure stay committed.

async def batch_create(
    db: AsyncSession, object_type: str, inputs: list[dict[str, str]]
) -> BatchResult:
    result = BatchResult(started_at=utc_timestamp())
    for properties in inputs:
        result.results.append(await create_object(db, object_type, properties))
    result.completed_at = utc_timestamp()
    return result


async def batch_read(
    db: AsyncSession,
    object_type: str,
    ids: list[str],
    properties: list[str] | None = None,
    id_property: str | None = None,
    properties_with_history: list[str] | None = None,
) -> BatchResult:
    """Missing ids are omitted from the results and counted in ``num_errors``."""
    # Unknown type fails the whole batch rather than every item.
    await resolve_object_type(db, object_type)
    result = BatchResult(started_at=utc_timestamp())
    for object_id in ids:
        try:
            if id_property and id_property != "hs_object_id":
                obj = await get_object_by_property(
                    db, object_type, id_property, object_id, properties, properties_with_history
                )
            else:
                obj = await get_object(
                    db, object_type, object_id, properties, properties_with_history
                )
        except NotFoundError:
            result.num_errors += 1
            continue
        result.results.append(obj)
    result.completed_at = utc_timestamp()
    return result


async def batch_update(
    db: AsyncSession, object_type: str, inputs: list[BatchUpdateInput]
) -> BatchResult:
    result = BatchResult(started_at=utc_timestamp())
    for item in inputs:
        result.results.append(await update_object(db, object_type, item.id, item.properties))
    result.completed_at = utc_timestamp()
    return result


async def batch_upsert(
    db: AsyncSession,
    object_type: str,
    inputs: list[UpsertInput],
    id_property: str = "hs_object_id",
) -> BatchResult:
    result = BatchResult(started_at=utc_timestamp())
    for item in inputs:
        prop = item.id_property or id_property
        lookup = item.id or item.properties.get(prop, "")
        try:
            existing = await get_object_by_property(db, object_type, prop, lookup)
        except NotFoundError:
            properties = dict(item.properties)
            if prop != "hs_object_id" and lookup:
                properties.setdefault(prop, lookup)
            obj = await create_object(db, object_type, properties)
        else:
            obj = await update_object(db, object_type, existing.id, item.properties)
        result.results.append(obj)
    result.completed_at = utc_timestamp()
    return result


async def batch_archive(db: AsyncSession, object_type: str, ids: list[str]) -> None:
    for object_id in ids:
        await archive_object(db, object_type, object_id)


# ── Merge ──────────────────────────────────────────────────────────────────

async def merge_objects(
    db: AsyncSession, object_type: str, primary_id: str, merge_id: str
) -> SimplePublicObject:
    """Fold ``merge_id`` into ``primary_id``; the primary's values win."""
    type_id = await resolve_object_type(db, object_type)
    pid = parse_object_id(primary_id)
    if pid is not None and pid == parse_object_id(merge_id):
        raise ValidationError("Cannot merge an object into itself")
    primary = await _load(db, type_id, primary_id, live_only=True)
    merged = await _load(db, type_id, merge_id, live_only=True)

    merged_props = await pv_svc.get_properties(db, merged.id)
    primary_props = await pv_svc.get_properties(db, primary.id)

    ts = utc_timestamp()
    to_set = {k: v for k, v in merged_props.items() if k not in primary_props}
    previous = primary_props.get("hs_merged_object_ids", "")
    to_set["hs_merged_object_ids"] = f"{previous};{merged.id}" if previous else str(merged.id)
    to_set["hs_lastmodifieddate"] = ts
    to_set["lastmodifieddate"] = ts
    await pv_svc.set_properties(db, primary.id, to_set, ts)
    primary.updated_at = ts

    merged.archived = True
    merged.archived_at = ts
    merged.updated_at = ts
    merged.merged_into_id = primary.id
    await db.commit()
    log.info("Merged %s object %s into %s", type_id, merged.id, primary.id)
    return await _with_all_properties(db, primary)
