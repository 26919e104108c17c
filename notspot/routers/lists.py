"""List routes (``/crm/v3/lists``)."""

from __future__ import annotations

from fastapi import APIRouter, Body, Depends, Query, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..errors import ValidationError
from ..schemas.list import (
    ListCreate,
    ListFiltersUpdate,
    ListNameUpdate,
    ListSearch,
    MembershipChange,
    list_wire,
    membership_change_wire,
    membership_wire,
)
from ..services import list_svc
from .params import split_csv

router = APIRouter(prefix="/crm/v3/lists", tags=["lists"])


# ── Lists ──────────────────────────────────────────────────────────────────

@router.post("")
@router.post("/", include_in_schema=False)
async def create_list(data: ListCreate, db: AsyncSession = Depends(get_db)):
    lst = await list_svc.create_list(
        db, data.name, data.object_type_id, data.processing_type, data.filter_branch
    )
    return list_wire(lst)


@router.get("")
@router.get("/", include_in_schema=False)
async def get_lists(
    list_ids: list[str] | None = Query(None, alias="listId"),
    db: AsyncSession = Depends(get_db),
):
    ids = split_csv(list_ids)
    if not ids:
        raise ValidationError("listId query parameter is required")
    lists = await list_svc.get_lists(db, ids)
    return {"lists": [list_wire(lst) for lst in lists]}


@router.post("/search")
async def search_lists(data: ListSearch, db: AsyncSession = Depends(get_db)):
    lists, total, has_more = await list_svc.search_lists(
        db, data.query, data.offset, data.count
    )
    return {
        "lists": [list_wire(lst) for lst in lists],
        "offset": data.offset + len(lists),
        "hasMore": has_more,
        "total": total,
    }


@router.get("/{list_id}")
async def get_list(list_id: str, db: AsyncSession = Depends(get_db)):
    return list_wire(await list_svc.get_list(db, list_id))


@router.delete("/{list_id}", status_code=204)
async def delete_list(list_id: str, db: AsyncSession = Depends(get_db)):
    await list_svc.delete_list(db, list_id)
    return Response(status_code=204)


@router.put("/{list_id}/restore", status_code=204)
async def restore_list(list_id: str, db: AsyncSession = Depends(get_db)):
    await list_svc.restore_list(db, list_id)
    return Response(status_code=204)


@router.put("/{list_id}/update-list-name")
async def update_list_name(
    list_id: str, data: ListNameUpdate, db: AsyncSession = Depends(get_db)
):
    return list_wire(await list_svc.update_list_name(db, list_id, data.name))


@router.put("/{list_id}/update-list-filters")
async def update_list_filters(
    list_id: str, data: ListFiltersUpdate, db: AsyncSession = Depends(get_db)
):
    return list_wire(await list_svc.update_list_filters(db, list_id, data.filter_branch))


# ── Memberships ────────────────────────────────────────────────────────────

@router.get("/{list_id}/memberships")
async def get_memberships(
    list_id: str,
    request: Request,
    limit: int = list_svc.DEFAULT_MEMBERSHIP_LIMIT,
    after: str | None = None,
    db: AsyncSession = Depends(get_db),
):
    rows, next_after = await list_svc.get_memberships(db, list_id, limit=limit, after=after)
    body: dict = {"results": [membership_wire(m) for m in rows]}
    if next_after:
        body["paging"] = {"next": {
            "after": next_after,
            "link": f"{request.url.path}?after={next_after}",
        }}
    return body


@router.put("/{list_id}/memberships/add")
async def add_members(
    list_id: str,
    record_ids: list[str | int] = Body(...),
    db: AsyncSession = Depends(get_db),
):
    added, missing = await list_svc.add_members(db, list_id, [str(r) for r in record_ids])
    return membership_change_wire(added, [], missing)


@router.put("/{list_id}/memberships/remove")
async def remove_members(
    list_id: str,
    record_ids: list[str | int] = Body(...),
    db: AsyncSession = Depends(get_db),
):
    removed, missing = await list_svc.remove_members(db, list_id, [str(r) for r in record_ids])
    return membership_change_wire([], removed, missing)


@router.put("/{list_id}/memberships/add-and-remove")
async def add_and_remove_members(
    list_id: str, data: MembershipChange, db: AsyncSession = Depends(get_db)
):
    added, removed, missing = await list_svc.add_and_remove_members(
        db,
        list_id,
        [str(r) for r in data.record_ids_to_add],
        [str(r) for r in data.record_ids_to_remove],
    )
    return membership_change_wire(added, removed, missing)


@router.delete("/{list_id}/memberships", status_code=204)
async def remove_all_members(list_id: str, db: AsyncSession = Depends(get_db)):
    await list_svc.remove_all_members(db, list_id)
    return Response(status_code=204)
