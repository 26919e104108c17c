"""Custom object schemas: register ``2-N`` object types with their properties and associations."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..errors import ConflictError, NotFoundError, ValidationError
from ..models.association import HUBSPOT_DEFINED, USER_DEFINED, Association, AssociationType
from ..models.base import utc_timestamp
from ..models.object_type import ObjectType
from ..models.property import PropertyDefinition, PropertyGroup
from ..schemas.property import PropertyCreate
from ..schemas.schema import SchemaAssociationCreate, SchemaCreate, SchemaUpdate
from .property_svc import insert_property
from .type_svc import parse_object_id, resolve_object_type

log = logging.getLogger(__name__)

SCHEMA_GROUP = "schemainfo"

# Definitions every custom type starts with.
DEFAULT_SCHEMA_PROPERTIES = (
    PropertyCreate(name="hs_object_id", label="Object ID", type="number", field_type="number",
                   group_name=SCHEMA_GROUP),
    PropertyCreate(name="hs_createdate", label="Create date", type="datetime", field_type="date",
                   group_name=SCHEMA_GROUP),
    PropertyCreate(name="hs_lastmodifieddate", label="Last modified date", type="datetime",
                   field_type="date", group_name=SCHEMA_GROUP),
)


@dataclass
class ObjectSchema:
    object_type: ObjectType
    properties: list[PropertyDefinition] = field(default_factory=list)
    associations: list[AssociationType] = field(default_factory=list)


async def _resolve_custom(db: AsyncSession, ref: str) -> ObjectType:
    stmt = select(ObjectType).where(
        or_(ObjectType.name == ref, ObjectType.id == ref), ObjectType.is_custom.is_(True)
    )
    ot = (await db.execute(stmt)).scalars().first()
    if ot is None:
        raise NotFoundError(f"Schema {ref!r} not found")
    return ot


async def _load_schema(db: AsyncSession, ot: ObjectType) -> ObjectSchema:
    props = await db.execute(
        select(PropertyDefinition)
        .where(PropertyDefinition.object_type_id == ot.id, PropertyDefinition.archived.is_(False))
        .order_by(PropertyDefinition.display_order, PropertyDefinition.name)
    )
    assocs = await db.execute(
        select(AssociationType)
        .where(or_(AssociationType.from_object_type == ot.id, AssociationType.to_object_type == ot.id))
        .order_by(AssociationType.id)
    )
    return ObjectSchema(ot, list(props.scalars().all()), list(assocs.scalars().all()))


async def _next_custom_type_id(db: AsyncSession) -> str:
    ids = (await db.execute(select(ObjectType.id).where(ObjectType.id.like("2-%")))).scalars().all()
    highest = max((int(i[2:]) for i in ids if i[2:].isdigit()), default=0)
    return f"2-{highest + 1}"


async def _ensure_default_type(db: AsyncSession, from_type_id: str, to_type_id: str) -> None:
    # NULL labels never collide under the unique constraint, so check first.
    stmt = select(AssociationType.id).where(
        AssociationType.from_object_type == from_type_id,
        AssociationType.to_object_type == to_type_id,
        AssociationType.category == HUBSPOT_DEFINED,
        AssociationType.label.is_(None),
    )
    if (await db.execute(stmt)).first() is None:
        db.add(AssociationType(
            from_object_type=from_type_id, to_object_type=to_type_id, category=HUBSPOT_DEFINED,
        ))
        await db.flush()


# ── Schema CRUD ────────────────────────────────────────────────────────────

async def list_schemas(db: AsyncSession) -> list[ObjectSchema]:
    stmt = (
        select(ObjectType)
        .where(ObjectType.is_custom.is_(True), ObjectType.archived.is_(False))
        .order_by(ObjectType.created_at, ObjectType.id)
    )
    types = (await db.execute(stmt)).scalars().all()
    return [await _load_schema(db, ot) for ot in types]


async def get_schema(db: AsyncSession, object_type: str) -> ObjectSchema:
    return await _load_schema(db, await _resolve_custom(db, object_type))


async def create_schema(db: AsyncSession, data: SchemaCreate) -> ObjectSchema:
    """Register a custom object type.

    Inserts the type row, the default property definitions plus any supplied
    ones, and forward and reverse default association types for each entry in
    ``associatedObjects``. Unknown associated types are skipped.
    """
    if not data.name:
        raise ValidationError("Schema name is required")
    existing = await db.execute(select(ObjectType.id).where(ObjectType.name == data.name))
    if existing.first() is not None:
        raise ConflictError(f"Schema {data.name!r} already exists")

    type_id = await _next_custom_type_id(db)
    ot = ObjectType(
        id=type_id,
        name=data.name,
        label_singular=data.labels.singular,
        label_plural=data.labels.plural,
        primary_display_property=data.primary_display_property,
        is_custom=True,
        fully_qualified_name=f"p0_{data.name}",
        description=data.description,
    )
    db.add(ot)
    db.add(PropertyGroup(object_type_id=type_id, name=SCHEMA_GROUP, label="Schema Information"))
    await db.flush()

    for prop in DEFAULT_SCHEMA_PROPERTIES:
        await insert_property(db, type_id, prop, hubspot_defined=True)
    for prop in data.properties:
        if not prop.group_name:
            prop = prop.model_copy(update={"group_name": SCHEMA_GROUP})
        await insert_property(db, type_id, prop)

    for ref in data.associated_objects:
        try:
            other = await resolve_object_type(db, ref)
        except NotFoundError:
            log.warning("Schema %s: associated object type %r not found, skipped", data.name, ref)
            continue
        await _ensure_default_type(db, type_id, other)
        await _ensure_default_type(db, other, type_id)

    await db.commit()
    log.info("Created custom object schema %s (%s)", data.name, type_id)
    return await _load_schema(db, ot)


async def update_schema(db: AsyncSession, object_type: str, data: SchemaUpdate) -> ObjectSchema:
    """Only non-empty fields overwrite the stored values."""
    ot = await _resolve_custom(db, object_type)
    if ot.archived:
        raise NotFoundError(f"Schema {object_type!r} not found")
    if data.labels is not None:
        if data.labels.singular:
            ot.label_singular = data.labels.singular
        if data.labels.plural:
            ot.label_plural = data.labels.plural
    if data.primary_display_property:
        ot.primary_display_property = data.primary_display_property
    if data.description:
        ot.description = data.description
    ot.updated_at = utc_timestamp()
    await db.commit()
    return await _load_schema(db, ot)


async def archive_schema(db: AsyncSession, object_type: str) -> None:
    ot = await _resolve_custom(db, object_type)
    if ot.archived:
        raise NotFoundError(f"Schema {object_type!r} not found")
    ot.archived = True
    ot.updated_at = utc_timestamp()
    await db.commit()


# ── Schema associations ────────────────────────────────────────────────────

async def create_association(
    db: AsyncSession, object_type: str, data: SchemaAssociationCreate
) -> AssociationType:
    ot = await _resolve_custom(db, object_type)
    from_type_id = (
        await resolve_object_type(db, data.from_object_type_id)
        if data.from_object_type_id else ot.id
    )
    to_type_id = await resolve_object_type(db, data.to_object_type_id)

    label = data.name or None
    stmt = select(AssociationType.id).where(
        AssociationType.from_object_type == from_type_id,
        AssociationType.to_object_type == to_type_id,
        AssociationType.category == USER_DEFINED,
        AssociationType.label.is_(None) if label is None else AssociationType.label == label,
    )
    if (await db.execute(stmt)).first() is not None:
        raise ConflictError("Association already exists")

    at = AssociationType(
        from_object_type=from_type_id, to_object_type=to_type_id, category=USER_DEFINED, label=label,
    )
    db.add(at)
    await db.commit()
    await db.refresh(at)
    return at


async def delete_association(db: AsyncSession, object_type: str, association_id: str) -> None:
    ot = await _resolve_custom(db, object_type)
    assoc_id = parse_object_id(association_id)
    if assoc_id is None:
        raise ValidationError(f"Invalid association id {association_id!r}")
    stmt = select(AssociationType).where(
        AssociationType.id == assoc_id,
        or_(AssociationType.from_object_type == ot.id, AssociationType.to_object_type == ot.id),
    )
    at = (await db.execute(stmt)).scalars().first()
    if at is None:
        raise NotFoundError(f"Association {association_id!r} not found")
    await db.execute(delete(Association).where(Association.association_type_id == at.id))
    await db.delete(at)
    await db.commit()
