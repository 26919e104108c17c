"""List store: named sets of records and their memberships."""

from __future__ import annotations

import logging

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..errors import ConflictError, NotFoundError, ValidationError
from ..models.base import utc_timestamp
from ..models.crm_object import CrmObject
from ..models.list import PROCESSING_TYPES, CrmList, ListMembership
from .type_svc import parse_object_id, resolve_object_type

log = logging.getLogger(__name__)

DEFAULT_SEARCH_COUNT = 25
MAX_SEARCH_COUNT = 100
DEFAULT_MEMBERSHIP_LIMIT = 100
MAX_MEMBERSHIP_LIMIT = 250


async def _load(db: AsyncSession, list_id: str | int, *, deleted: bool = False) -> CrmList:
    lid = parse_object_id(list_id)
    lst = await db.get(CrmList, lid) if lid is not None else None
    if lst is None or lst.archived != deleted:
        raise NotFoundError(f"List {list_id} not found")
    return lst


async def _check_name_free(db: AsyncSession, name: str, exclude_id: int | None = None) -> None:
    stmt = select(CrmList.id).where(CrmList.name == name)
    if exclude_id is not None:
        stmt = stmt.where(CrmList.id != exclude_id)
    if (await db.execute(stmt)).first() is not None:
        raise ConflictError(f"List name {name!r} already exists")


async def _commit(db: AsyncSession, lst: CrmList) -> CrmList:
    await db.commit()
    await db.refresh(lst)
    return lst


def _check_manual(lst: CrmList) -> None:
    if not lst.accepts_manual_changes:
        raise ValidationError(
            f"Membership changes are not allowed on {lst.processing_type} list {lst.id}"
        )


# ── Lists ──────────────────────────────────────────────────────────────────

async def create_list(
    db: AsyncSession,
    name: str,
    object_type: str,
    processing_type: str = "MANUAL",
    filter_branch: dict | None = None,
) -> CrmList:
    if not name or not name.strip():
        raise ValidationError("name is required")
    if not object_type:
        raise ValidationError("objectTypeId is required")
    processing_type = (processing_type or "MANUAL").upper()
    if processing_type not in PROCESSING_TYPES:
        raise ValidationError(f"Unknown processingType {processing_type!r}")
    type_id = await resolve_object_type(db, object_type)
    await _check_name_free(db, name)

    lst = CrmList(
        name=name,
        object_type_id=type_id,
        processing_type=processing_type,
        filter_branch=filter_branch,
    )
    db.add(lst)
    await _commit(db, lst)
    log.info("Created %s list %s (%s)", processing_type, lst.id, name)
    return lst


async def get_list(db: AsyncSession, list_id: str) -> CrmList:
    return await _load(db, list_id)


async def get_lists(db: AsyncSession, list_ids: list[str]) -> list[CrmList]:
    """Live lists among ``list_ids``; unknown ids are skipped."""
    ids = [i for i in (parse_object_id(raw) for raw in list_ids) if i is not None]
    if not ids:
        return []
    stmt = (
        select(CrmList)
        .where(CrmList.id.in_(ids), CrmList.archived.is_(False))
        .order_by(CrmList.id)
    )
    return list((await db.execute(stmt)).scalars().all())


async def search_lists(
    db: AsyncSession, query: str = "", offset: int = 0, count: int = DEFAULT_SEARCH_COUNT
) -> tuple[list[CrmList], int, bool]:
    """Offset page of live lists whose name contains ``query``.

    Returns (lists, total, has_more).
    """
    if count <= 0:
        count = DEFAULT_SEARCH_COUNT
    count = min(count, MAX_SEARCH_COUNT)
    offset = max(offset, 0)

    where = [CrmList.archived.is_(False)]
    if query:
        where.append(CrmList.name.contains(query, autoescape=True))

    total = (await db.execute(select(func.count(CrmList.id)).where(*where))).scalar_one()
    stmt = select(CrmList).where(*where).order_by(CrmList.id).offset(offset).limit(count)
    lists = list((await db.execute(stmt)).scalars().all())
    return lists, total, offset + len(lists) < total


async def delete_list(db: AsyncSession, list_id: str) -> None:
    lst = await _load(db, list_id)
    ts = utc_timestamp()
    lst.archived = True
    lst.deleted_at = ts
    lst.updated_at = ts
    await db.commit()
    log.debug("Deleted list %s", lst.id)


async def restore_list(db: AsyncSession, list_id: str) -> None:
    lst = await _load(db, list_id, deleted=True)
    lst.archived = False
    lst.deleted_at = None
    lst.updated_at = utc_timestamp()
    await db.commit()


async def update_list_name(db: AsyncSession, list_id: str, name: str) -> CrmList:
    if not name or not name.strip():
        raise ValidationError("name is required")
    lst = await _load(db, list_id)
    await _check_name_free(db, name, exclude_id=lst.id)
    lst.name = name
    lst.list_version += 1
    lst.updated_at = utc_timestamp()
    return await _commit(db, lst)


async def update_list_filters(db: AsyncSession, list_id: str, filter_branch: dict | None) -> CrmList:
    lst = await _load(db, list_id)
    lst.filter_branch = filter_branch
    lst.list_version += 1
    lst.updated_at = utc_timestamp()
    return await _commit(db, lst)


# ── Memberships ────────────────────────────────────────────────────────────

async def get_memberships(
    db: AsyncSession,
    list_id: str,
    *,
    limit: int = DEFAULT_MEMBERSHIP_LIMIT,
    after: str | None = None,
) -> tuple[list[ListMembership], str | None]:
    """Keyset page of memberships ordered by record id. Returns (rows, next_after)."""
    lst = await _load(db, list_id)
    if limit <= 0:
        limit = DEFAULT_MEMBERSHIP_LIMIT
    limit = min(limit, MAX_MEMBERSHIP_LIMIT)

    stmt = select(ListMembership).where(ListMembership.list_id == lst.id)
    if after:
        after_id = parse_object_id(after)
        if after_id is None:
            raise ValidationError(f"Invalid after cursor {after!r}")
        stmt = stmt.where(ListMembership.object_id > after_id)
    stmt = stmt.order_by(ListMembership.object_id).limit(limit + 1)

    rows = list((await db.execute(stmt)).scalars().all())
    next_after = None
    if len(rows) > limit:
        rows = rows[:limit]
        next_after = str(rows[-1].object_id)
    return rows, next_after


async def _add(db: AsyncSession, lst: CrmList, record_ids: list[str]) -> tuple[list[str], list[str]]:
    added: list[str] = []
    missing: list[str] = []
    ts = utc_timestamp()
    for raw in record_ids:
        oid = parse_object_id(raw)
        obj = await db.get(CrmObject, oid) if oid is not None else None
        if obj is None or obj.archived or obj.object_type_id != lst.object_type_id:
            missing.append(str(raw))
            continue
        if await db.get(ListMembership, (lst.id, obj.id)) is None:
            db.add(ListMembership(list_id=lst.id, object_id=obj.id, added_at=ts))
            await db.flush()
        added.append(str(obj.id))
    return added, missing


async def _remove(
    db: AsyncSession, lst: CrmList, record_ids: list[str]
) -> tuple[list[str], list[str]]:
    removed: list[str] = []
    missing: list[str] = []
    for raw in record_ids:
        oid = parse_object_id(raw)
        membership = await db.get(ListMembership, (lst.id, oid)) if oid is not None else None
        if membership is None:
            missing.append(str(raw))
            continue
        await db.delete(membership)
        await db.flush()
        removed.append(str(oid))
    return removed, missing


async def add_members(
    db: AsyncSession, list_id: str, record_ids: list[str]
) -> tuple[list[str], list[str]]:
    """Add existing records of the list's type. Returns (added, missing)."""
    lst = await _load(db, list_id)
    _check_manual(lst)
    added, missing = await _add(db, lst, record_ids)
    lst.updated_at = utc_timestamp()
    await _commit(db, lst)
    return added, missing


async def remove_members(
    db: AsyncSession, list_id: str, record_ids: list[str]
) -> tuple[list[str], list[str]]:
    """Returns (removed, missing); non-members count as missing."""
    lst = await _load(db, list_id)
    _check_manual(lst)
    removed, missing = await _remove(db, lst, record_ids)
    lst.updated_at = utc_timestamp()
    await _commit(db, lst)
    return removed, missing


async def add_and_remove_members(
    db: AsyncSession, list_id: str, to_add: list[str], to_remove: list[str]
) -> tuple[list[str], list[str], list[str]]:
    """Apply both changes in one commit. Returns (added, removed, missing)."""
    lst = await _load(db, list_id)
    _check_manual(lst)
    added, missing_add = await _add(db, lst, to_add)
    removed, missing_remove = await _remove(db, lst, to_remove)
    lst.updated_at = utc_timestamp()
    await _commit(db, lst)
    return added, removed, missing_add + missing_remove


async def remove_all_members(db: AsyncSession, list_id: str) -> None:
    lst = await _load(db, list_id)
    _check_manual(lst)
    await db.execute(delete(ListMembership).where(ListMembership.list_id == lst.id))
    lst.updated_at = utc_timestamp()
    await _commit(db, lst)
