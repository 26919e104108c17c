"""Association store: typed directed edges between objects, plus label CRUD.

Creating an association through the default or labeled path also tries to
insert the mirrored edge using the default type registered for the reverse
pair. When no such type exists the reverse edge is skipped, so associations
are not symmetric by construction.
"""

from __future__ import annotations

import logging

from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..errors import ConflictError, NotFoundError
from ..models.association import HUBSPOT_DEFINED, USER_DEFINED, Association, AssociationType
from ..models.base import utc_timestamp
from ..models.crm_object import CrmObject
from ..schemas.association import (
    AssociationResult,
    AssociationSpec,
    AssociationTypeInfo,
    LabelsBetweenObjectPair,
)
from .type_svc import parse_object_id, resolve_object_type

log = logging.getLogger(__name__)


def type_info(at: AssociationType) -> AssociationTypeInfo:
    return AssociationTypeInfo(category=at.category, type_id=at.id, label=at.label or None)


def _object_id(raw: str) -> int:
    oid = parse_object_id(raw)
    if oid is None:
        raise NotFoundError(f"Object {raw} not found")
    return oid


async def _require_live_object(db: AsyncSession, type_id: str, raw_id: str) -> int:
    oid = _object_id(raw_id)
    obj = await db.get(CrmObject, oid)
    if obj is None or obj.archived or obj.object_type_id != type_id:
        raise NotFoundError(f"Object {raw_id} not found")
    return oid


async def default_type_id(db: AsyncSession, from_type_id: str, to_type_id: str) -> int | None:
    """Lowest-id unlabeled HUBSPOT_DEFINED type for the pair, if any."""
    stmt = (
        select(AssociationType.id)
        .where(
            AssociationType.from_object_type == from_type_id,
            AssociationType.to_object_type == to_type_id,
            AssociationType.category == HUBSPOT_DEFINED,
            or_(AssociationType.label.is_(None), AssociationType.label == ""),
        )
        .order_by(AssociationType.id)
        .limit(1)
    )
    result = await db.execute(stmt)
    return result.scalars().first()


async def _insert_edge(db: AsyncSession, from_id: int, to_id: int, type_id: int, ts: str) -> bool:
    """Insert-or-ignore on the (from, to, type) key."""
    if await db.get(Association, (from_id, to_id, type_id)) is not None:
        return False
    db.add(Association(
        from_object_id=from_id, to_object_id=to_id, association_type_id=type_id, created_at=ts,
    ))
    await db.flush()
    return True


async def _mirror_default(
    db: AsyncSession, from_type_id: str, from_id: int, to_type_id: str, to_id: int, ts: str
) -> bool:
    """Insert the reverse default edge (to -> from). False when the reverse pair has no default type."""
    reverse_type = await default_type_id(db, to_type_id, from_type_id)
    if reverse_type is None:
        return False
    await _insert_edge(db, to_id, from_id, reverse_type, ts)
    return True


async def _mirror_or_log(
    db: AsyncSession, from_type_id: str, from_id: int, to_type_id: str, to_id: int, ts: str
) -> None:
    if not await _mirror_default(db, from_type_id, from_id, to_type_id, to_id, ts):
        log.debug("No default association type %s->%s; reverse edge skipped", to_type_id, from_type_id)


async def _type_pair(db: AsyncSession, from_type: str, to_type: str) -> tuple[str, str]:
    return await resolve_object_type(db, from_type), await resolve_object_type(db, to_type)


# ── Record-level operations ────────────────────────────────────────────────

async def _associate_default(
    db: AsyncSession, from_type_id: str, from_id: str, to_type_id: str, to_id: str
) -> AssociationSpec:
    fid = await _require_live_object(db, from_type_id, from_id)
    tid = await _require_live_object(db, to_type_id, to_id)
    type_id = await default_type_id(db, from_type_id, to_type_id)
    if type_id is None:
        raise NotFoundError(f"No default association type for {from_type_id}->{to_type_id}")

    ts = utc_timestamp()
    await _insert_edge(db, fid, tid, type_id, ts)
    await _mirror_or_log(db, from_type_id, fid, to_type_id, tid, ts)
    return AssociationSpec(association_category=HUBSPOT_DEFINED, association_type_id=type_id)


async def associate_default(
    db: AsyncSession, from_type: str, from_id: str, to_type: str, to_id: str
) -> AssociationSpec:
    from_type_id, to_type_id = await _type_pair(db, from_type, to_type)
    spec = await _associate_default(db, from_type_id, from_id, to_type_id, to_id)
    await db.commit()
    return spec


async def _associate_with_labels(
    db: AsyncSession,
    from_type_id: str,
    from_id: str,
    to_type_id: str,
    to_id: str,
    types: list[AssociationSpec],
) -> list[AssociationType]:
    fid = await _require_live_object(db, from_type_id, from_id)
    tid = await _require_live_object(db, to_type_id, to_id)

    default_id = await default_type_id(db, from_type_id, to_type_id)
    if not types and default_id is None:
        raise NotFoundError(f"No default association type for {from_type_id}->{to_type_id}")

    ts = utc_timestamp()
    applied: list[AssociationType] = []
    if default_id is not None:
        await _insert_edge(db, fid, tid, default_id, ts)
    for spec in types:
        at = await db.get(AssociationType, spec.association_type_id)
        if at is None:
            raise NotFoundError(f"Association type {spec.association_type_id} not found")
        await _insert_edge(db, fid, tid, at.id, ts)
        applied.append(at)
    await _mirror_or_log(db, from_type_id, fid, to_type_id, tid, ts)

    if not types:
        applied.append(await db.get(AssociationType, default_id))
    return applied


async def associate_with_labels(
    db: AsyncSession,
    from_type: str,
    from_id: str,
    to_type: str,
    to_id: str,
    types: list[AssociationSpec],
) -> AssociationSpec:
    """Default edge (when the pair has one) plus one edge per requested type.

    Returns the first requested type, or the default type when none were given.
    """
    from_type_id, to_type_id = await _type_pair(db, from_type, to_type)
    applied = await _associate_with_labels(db, from_type_id, from_id, to_type_id, to_id, types)
    await db.commit()
    if types:
        return types[0]
    return AssociationSpec(
        association_category=applied[0].category, association_type_id=applied[0].id,
    )


async def _association_results(
    db: AsyncSession, from_type_id: str, from_id: int, to_type_id: str
) -> list[AssociationResult]:
    stmt = (
        select(Association.to_object_id, AssociationType)
        .join(AssociationType, AssociationType.id == Association.association_type_id)
        .where(
            Association.from_object_id == from_id,
            AssociationType.from_object_type == from_type_id,
            AssociationType.to_object_type == to_type_id,
        )
        .order_by(Association.to_object_id, AssociationType.id)
    )
    result = await db.execute(stmt)

    grouped: dict[int, AssociationResult] = {}
    for to_id, at in result.all():
        entry = grouped.get(to_id)
        if entry is None:
            entry = grouped[to_id] = AssociationResult(to_object_id=str(to_id))
        entry.association_types.append(type_info(at))
    return list(grouped.values())


async def get_associations(
    db: AsyncSession, from_type: str, from_id: str, to_type: str
) -> list[AssociationResult]:
    from_type_id, to_type_id = await _type_pair(db, from_type, to_type)
    return await _association_results(db, from_type_id, _object_id(from_id), to_type_id)


async def _remove_pair(
    db: AsyncSession, from_type_id: str, from_id: int, to_type_id: str, to_id: int
) -> None:
    registered = select(AssociationType.id).where(
        AssociationType.from_object_type == from_type_id,
        AssociationType.to_object_type == to_type_id,
    )
    stmt = delete(Association).where(
        Association.from_object_id == from_id,
        Association.to_object_id == to_id,
        Association.association_type_id.in_(registered),
    )
    await db.execute(stmt)


async def remove_associations(
    db: AsyncSession, from_type: str, from_id: str, to_type: str, to_id: str
) -> None:
    """Delete every forward edge of the pair. The reverse edge is left alone."""
    from_type_id, to_type_id = await _type_pair(db, from_type, to_type)
    await _remove_pair(db, from_type_id, _object_id(from_id), to_type_id, _object_id(to_id))
    await db.commit()


# ── Labels ─────────────────────────────────────────────────────────────────

async def list_labels(db: AsyncSession, from_type: str, to_type: str) -> list[AssociationTypeInfo]:
    from_type_id, to_type_id = await _type_pair(db, from_type, to_type)
    stmt = (
        select(AssociationType)
        .where(
            AssociationType.from_object_type == from_type_id,
            AssociationType.to_object_type == to_type_id,
        )
        .order_by(AssociationType.id)
    )
    result = await db.execute(stmt)
    return [type_info(at) for at in result.scalars().all()]


async def _find_label(
    db: AsyncSession, from_type_id: str, to_type_id: str, category: str, label: str
) -> AssociationType | None:
    stmt = select(AssociationType).where(
        AssociationType.from_object_type == from_type_id,
        AssociationType.to_object_type == to_type_id,
        AssociationType.category == category,
        AssociationType.label == label,
    )
    result = await db.execute(stmt)
    return result.scalars().first()


async def create_label(
    db: AsyncSession,
    from_type: str,
    to_type: str,
    label: str,
    category: str | None = None,
    inverse_label: str | None = None,
) -> AssociationTypeInfo:
    from_type_id, to_type_id = await _type_pair(db, from_type, to_type)
    category = category or USER_DEFINED
    if await _find_label(db, from_type_id, to_type_id, category, label):
        raise ConflictError(f"Association label {label!r} already exists for {from_type_id}->{to_type_id}")

    at = AssociationType(
        from_object_type=from_type_id, to_object_type=to_type_id,
        category=category, label=label, inverse_label=inverse_label,
    )
    db.add(at)
    await db.commit()
    await db.refresh(at)
    log.info("Created association label %s %r (%s->%s)", at.id, label, from_type_id, to_type_id)
    return type_info(at)


async def _pair_type(
    db: AsyncSession, from_type_id: str, to_type_id: str, type_id: int
) -> AssociationType:
    at = await db.get(AssociationType, type_id)
    if at is None or at.from_object_type != from_type_id or at.to_object_type != to_type_id:
        raise NotFoundError(f"Association type {type_id} not found for {from_type_id}->{to_type_id}")
    return at


async def update_label(
    db: AsyncSession,
    from_type: str,
    to_type: str,
    type_id: int,
    label: str,
    inverse_label: str | None = None,
) -> AssociationTypeInfo:
    from_type_id, to_type_id = await _type_pair(db, from_type, to_type)
    at = await _pair_type(db, from_type_id, to_type_id, type_id)
    clash = await _find_label(db, from_type_id, to_type_id, at.category, label)
    if clash is not None and clash.id != at.id:
        raise ConflictError(f"Association label {label!r} already exists for {from_type_id}->{to_type_id}")

    at.label = label
    if inverse_label is not None:
        at.inverse_label = inverse_label
    await db.commit()
    return type_info(at)


async def delete_label(db: AsyncSession, from_type: str, to_type: str, type_id: int) -> None:
    """Remove the type and every association that uses it."""
    from_type_id, to_type_id = await _type_pair(db, from_type, to_type)
    at = await _pair_type(db, from_type_id, to_type_id, type_id)
    await db.execute(delete(Association).where(Association.association_type_id == at.id))
    await db.delete(at)
    await db.commit()
    log.info("Deleted association type %s (%s->%s)", type_id, from_type_id, to_type_id)


# ── Batch operations ───────────────────────────────────────────────────────

async def batch_associate_default(
    db: AsyncSession, from_type: str, to_type: str, pairs: list[tuple[str, str]]
) -> list[LabelsBetweenObjectPair]:
    from_type_id, to_type_id = await _type_pair(db, from_type, to_type)
    if await default_type_id(db, from_type_id, to_type_id) is None:
        raise NotFoundError(f"No default association type for {from_type_id}->{to_type_id}")

    results = []
    for from_id, to_id in pairs:
        spec = await _associate_default(db, from_type_id, from_id, to_type_id, to_id)
        await db.commit()
        results.append(LabelsBetweenObjectPair(
            from_object_type_id=from_type_id, from_object_id=from_id,
            to_object_type_id=to_type_id, to_object_id=to_id,
            labels=[AssociationTypeInfo(
                category=spec.association_category, type_id=spec.association_type_id,
            )],
        ))
    return results


async def batch_create(
    db: AsyncSession,
    from_type: str,
    to_type: str,
    inputs: list[tuple[str, str, list[AssociationSpec]]],
) -> list[LabelsBetweenObjectPair]:
    from_type_id, to_type_id = await _type_pair(db, from_type, to_type)
    results = []
    for from_id, to_id, types in inputs:
        applied = await _associate_with_labels(db, from_type_id, from_id, to_type_id, to_id, types)
        await db.commit()
        results.append(LabelsBetweenObjectPair(
            from_object_type_id=from_type_id, from_object_id=from_id,
            to_object_type_id=to_type_id, to_object_id=to_id,
            labels=[type_info(at) for at in applied],
        ))
    return results


async def batch_read(
    db: AsyncSession, from_type: str, to_type: str, ids: list[str]
) -> list[tuple[str, list[AssociationResult]]]:
    from_type_id, to_type_id = await _type_pair(db, from_type, to_type)
    out = []
    for from_id in ids:
        oid = parse_object_id(from_id)
        results = await _association_results(db, from_type_id, oid, to_type_id) if oid is not None else []
        out.append((from_id, results))
    return out


async def batch_archive(
    db: AsyncSession, from_type: str, to_type: str, pairs: list[tuple[str, str]]
) -> None:
    """Remove every edge between each pair, whatever its type."""
    from_type_id, to_type_id = await _type_pair(db, from_type, to_type)
    for from_id, to_id in pairs:
        await _remove_pair(db, from_type_id, _object_id(from_id), to_type_id, _object_id(to_id))
    await db.commit()


async def batch_archive_labels(
    db: AsyncSession,
    from_type: str,
    to_type: str,
    inputs: list[tuple[str, str, list[int]]],
) -> None:
    """Remove only the listed association types for each pair."""
    await _type_pair(db, from_type, to_type)
    for from_id, to_id, type_ids in inputs:
        if not type_ids:
            continue
        await db.execute(delete(Association).where(
            Association.from_object_id == _object_id(from_id),
            Association.to_object_id == _object_id(to_id),
            Association.association_type_id.in_(type_ids),
        ))
    await db.commit()
