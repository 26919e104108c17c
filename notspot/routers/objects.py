"""CRM object routes (``/crm/v3/objects``): CRUD, search, batch and merge."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..schemas.object import (
    BatchArchiveRequest,
    BatchCreateRequest,
    BatchReadRequest,
    BatchUpdateRequest,
    BatchUpsertRequest,
    MergeRequest,
    ObjectCreate,
    ObjectUpdate,
)
from ..schemas.search import PublicObjectSearchRequest
from ..services import object_svc, search_svc
from ..services.type_svc import resolve_object_type
from .params import check_batch_size, split_csv

router = APIRouter(prefix="/crm/v3/objects", tags=["objects"])

# Upserts default to matching on email for contacts, on the record id elsewhere.
DEFAULT_ID_PROPERTY = {"0-1": "email"}


@router.get("/{object_type}")
async def list_objects(
    object_type: str,
    request: Request,
    limit: int | None = None,
    after: str | None = None,
    archived: bool = False,
    properties: list[str] | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    page = await object_svc.list_objects(
        db, object_type,
        limit=limit, after=after, archived=archived, properties=split_csv(properties),
    )
    return page.to_wire(str(request.url.path))


@router.post("/{object_type}", status_code=201)
async def create_object(
    object_type: str,
    data: ObjectCreate,
    db: AsyncSession = Depends(get_db),
):
    obj = await object_svc.create_object(db, object_type, data.properties)
    return obj.to_wire()


@router.get("/{object_type}/{object_id}")
async def get_object(
    object_type: str,
    object_id: str,
    properties: list[str] | None = Query(None),
    properties_with_history: list[str] | None = Query(None, alias="propertiesWithHistory"),
    id_property: str | None = Query(None, alias="idProperty"),
    db: AsyncSession = Depends(get_db),
):
    props = split_csv(properties)
    history = split_csv(properties_with_history)
    if id_property and id_property != "hs_object_id":
        obj = await object_svc.get_object_by_property(
            db, object_type, id_property, object_id, props, history
        )
    else:
        obj = await object_svc.get_object(db, object_type, object_id, props, history)
    return obj.to_wire()


@router.patch("/{object_type}/{object_id}")
async def update_object(
    object_type: str,
    object_id: str,
    data: ObjectUpdate,
    db: AsyncSession = Depends(get_db),
):
    obj = await object_svc.update_object(db, object_type, object_id, data.properties)
    return obj.to_wire()


@router.delete("/{object_type}/{object_id}", status_code=204)
async def archive_object(
    object_type: str,
    object_id: str,
    db: AsyncSession = Depends(get_db),
):
    await object_svc.archive_object(db, object_type, object_id)
    return Response(status_code=204)


@router.post("/{object_type}/search")
async def search_objects(
    object_type: str,
    data: PublicObjectSearchRequest,
    db: AsyncSession = Depends(get_db),
):
    result = await search_svc.search_objects(db, object_type, data)
    return result.to_wire()


# ── Batch ──────────────────────────────────────────────────────────────────

@router.post("/{object_type}/batch/create", status_code=201)
async def batch_create(
    object_type: str,
    data: BatchCreateRequest,
    db: AsyncSession = Depends(get_db),
):
    check_batch_size(data.inputs)
    result = await object_svc.batch_create(db, object_type, [i.properties for i in data.inputs])
    return result.to_wire()


@router.post("/{object_type}/batch/read")
async def batch_read(
    object_type: str,
    data: BatchReadRequest,
    db: AsyncSession = Depends(get_db),
):
    check_batch_size(data.inputs)
    result = await object_svc.batch_read(
        db, object_type, [i.id for i in data.inputs],
        properties=data.properties,
        id_property=data.id_property,
        properties_with_history=data.properties_with_history,
    )
    return result.to_wire()


@router.post("/{object_type}/batch/update")
async def batch_update(
    object_type: str,
    data: BatchUpdateRequest,
    db: AsyncSession = Depends(get_db),
):
    check_batch_size(data.inputs)
    result = await object_svc.batch_update(db, object_type, data.inputs)
    return result.to_wire()


@router.post("/{object_type}/batch/upsert")
async def batch_upsert(
    object_type: str,
    data: BatchUpsertRequest,
    db: AsyncSession = Depends(get_db),
):
    check_batch_size(data.inputs)
    type_id = await resolve_object_type(db, object_type)
    id_property = DEFAULT_ID_PROPERTY.get(type_id, "hs_object_id")
    result = await object_svc.batch_upsert(db, object_type, data.inputs, id_property)
    return result.to_wire()


@router.post("/{object_type}/batch/archive", status_code=204)
async def batch_archive(
    object_type: str,
    data: BatchArchiveRequest,
    db: AsyncSession = Depends(get_db),
):
    check_batch_size(data.inputs)
    await object_svc.batch_archive(db, object_type, [i.id for i in data.inputs])
    return Response(status_code=204)


@router.post("/{object_type}/merge")
async def merge_objects(
    object_type: str,
    data: MergeRequest,
    db: AsyncSession = Depends(get_db),
):
    obj = await object_svc.merge_objects(
        db, object_type, data.primary_object_id, data.object_id_to_merge
    )
    return obj.to_wire()
