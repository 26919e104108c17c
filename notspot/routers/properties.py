"""Property definition and property group routes (``/crm/v3/properties``)."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..models.base import utc_timestamp
from ..schemas.property import (
    PropertyBatchCreateRequest,
    PropertyBatchNamesRequest,
    PropertyCreate,
    PropertyGroupCreate,
    PropertyGroupUpdate,
    PropertyUpdate,
    group_wire,
    property_wire,
)
from ..services import property_svc
from .params import check_batch_size

router = APIRouter(prefix="/crm/v3/properties", tags=["properties"])


def _batch_body(props) -> dict:
    ts = utc_timestamp()
    return {
        "status": "COMPLETE",
        "startedAt": ts,
        "completedAt": ts,
        "results": [property_wire(p) for p in props],
    }


# Group and batch routes are declared before "/{object_type}/{name}" so they win the match.

# ── Groups ─────────────────────────────────────────────────────────────────

@router.get("/{object_type}/groups")
async def list_groups(object_type: str, db: AsyncSession = Depends(get_db)):
    groups = await property_svc.list_groups(db, object_type)
    return {"results": [group_wire(g) for g in groups]}


@router.post("/{object_type}/groups", status_code=201)
async def create_group(
    object_type: str, data: PropertyGroupCreate, db: AsyncSession = Depends(get_db)
):
    group = await property_svc.create_group(db, object_type, data)
    return group_wire(group)


@router.get("/{object_type}/groups/{group_name}")
async def get_group(object_type: str, group_name: str, db: AsyncSession = Depends(get_db)):
    group = await property_svc.get_group(db, object_type, group_name)
    return group_wire(group)


@router.patch("/{object_type}/groups/{group_name}")
async def update_group(
    object_type: str,
    group_name: str,
    data: PropertyGroupUpdate,
    db: AsyncSession = Depends(get_db),
):
    group = await property_svc.update_group(db, object_type, group_name, data)
    return group_wire(group)


@router.delete("/{object_type}/groups/{group_name}", status_code=204)
async def archive_group(object_type: str, group_name: str, db: AsyncSession = Depends(get_db)):
    await property_svc.archive_group(db, object_type, group_name)
    return Response(status_code=204)


# ── Batch ──────────────────────────────────────────────────────────────────

@router.post("/{object_type}/batch/create", status_code=201)
async def batch_create(
    object_type: str, data: PropertyBatchCreateRequest, db: AsyncSession = Depends(get_db)
):
    check_batch_size(data.inputs)
    props = await property_svc.batch_create_properties(db, object_type, data.inputs)
    return _batch_body(props)


@router.post("/{object_type}/batch/read")
async def batch_read(
    object_type: str, data: PropertyBatchNamesRequest, db: AsyncSession = Depends(get_db)
):
    check_batch_size(data.inputs)
    props = await property_svc.batch_read_properties(db, object_type, [i.name for i in data.inputs])
    return _batch_body(props)


@router.post("/{object_type}/batch/archive", status_code=204)
async def batch_archive(
    object_type: str, data: PropertyBatchNamesRequest, db: AsyncSession = Depends(get_db)
):
    check_batch_size(data.inputs)
    await property_svc.batch_archive_properties(db, object_type, [i.name for i in data.inputs])
    return Response(status_code=204)


# ── Definitions ────────────────────────────────────────────────────────────

@router.get("/{object_type}")
async def list_properties(
    object_type: str, archived: bool = False, db: AsyncSession = Depends(get_db)
):
    props = await property_svc.list_properties(db, object_type, archived=archived)
    return {"results": [property_wire(p) for p in props]}


@router.post("/{object_type}", status_code=201)
async def create_property(
    object_type: str, data: PropertyCreate, db: AsyncSession = Depends(get_db)
):
    prop = await property_svc.create_property(db, object_type, data)
    return property_wire(prop)


@router.get("/{object_type}/{name}")
async def get_property(object_type: str, name: str, db: AsyncSession = Depends(get_db)):
    prop = await property_svc.get_property(db, object_type, name)
    return property_wire(prop)


@router.patch("/{object_type}/{name}")
async def update_property(
    object_type: str, name: str, data: PropertyUpdate, db: AsyncSession = Depends(get_db)
):
    prop = await property_svc.update_property(db, object_type, name, data)
    return property_wire(prop)


@router.delete("/{object_type}/{name}", status_code=204)
async def archive_property(object_type: str, name: str, db: AsyncSession = Depends(get_db)):
    await property_svc.archive_property(db, object_type, name)
    return Response(status_code=204)
