"""Association routes (``/crm/v4``): record-level edges, batch operations and labels."""

from __future__ import annotations

from fastapi import APIRouter, Body, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..errors import ValidationError
from ..models.base import utc_timestamp
from ..schemas.association import (
    AssociationSpec,
    BatchIdsRequest,
    BatchPairRequest,
    BatchPairWithTypesRequest,
    LabelCreate,
    LabelUpdate,
)
from ..services import association_svc
from .params import check_batch_size

router = APIRouter(prefix="/crm/v4", tags=["associations"])

MAX_BATCH_WRITE = 2000
MAX_BATCH_READ = 1000
DEFAULT_PAGE_SIZE = 500


def _single_result(to_id: str, spec: AssociationSpec) -> dict:
    return {"results": [{
        "toObjectId": to_id,
        "associationTypes": [{
            "category": spec.association_category,
            "typeId": spec.association_type_id,
            "label": None,
        }],
    }]}


def _batch_body(results: list[dict]) -> dict:
    ts = utc_timestamp()
    return {
        "status": "COMPLETE",
        "startedAt": ts,
        "completedAt": ts,
        "results": results,
        "numErrors": 0,
    }


# ── Record-level ───────────────────────────────────────────────────────────

@router.put("/objects/{from_type}/{from_id}/associations/default/{to_type}/{to_id}")
async def associate_default(
    from_type: str,
    from_id: str,
    to_type: str,
    to_id: str,
    db: AsyncSession = Depends(get_db),
):
    spec = await association_svc.associate_default(db, from_type, from_id, to_type, to_id)
    return _single_result(to_id, spec)


@router.put("/objects/{from_type}/{from_id}/associations/{to_type}/{to_id}")
async def associate_with_labels(
    from_type: str,
    from_id: str,
    to_type: str,
    to_id: str,
    types: list[AssociationSpec] | None = Body(None),
    db: AsyncSession = Depends(get_db),
):
    spec = await association_svc.associate_with_labels(
        db, from_type, from_id, to_type, to_id, types or []
    )
    return _single_result(to_id, spec)


@router.get("/objects/{from_type}/{from_id}/associations/{to_type}")
async def get_associations(
    from_type: str,
    from_id: str,
    to_type: str,
    limit: int | None = None,
    after: str | None = None,
    db: AsyncSession = Depends(get_db),
):
    results = await association_svc.get_associations(db, from_type, from_id, to_type)

    if not limit or limit <= 0:
        limit = DEFAULT_PAGE_SIZE
    start = 0
    if after:
        if not after.isdigit():
            raise ValidationError(f"Invalid after cursor {after!r}")
        start = min(int(after), len(results))
    end = start + limit

    body: dict = {"results": [r.to_wire() for r in results[start:end]]}
    if end < len(results):
        body["paging"] = {"next": {"after": str(end)}}
    return body


@router.delete("/objects/{from_type}/{from_id}/associations/{to_type}/{to_id}", status_code=204)
async def remove_associations(
    from_type: str,
    from_id: str,
    to_type: str,
    to_id: str,
    db: AsyncSession = Depends(get_db),
):
    await association_svc.remove_associations(db, from_type, from_id, to_type, to_id)
    return Response(status_code=204)


# ── Batch ──────────────────────────────────────────────────────────────────

@router.post("/associations/{from_type}/{to_type}/batch/associate/default")
async def batch_associate_default(
    from_type: str,
    to_type: str,
    data: BatchPairRequest,
    db: AsyncSession = Depends(get_db),
):
    check_batch_size(data.inputs, MAX_BATCH_WRITE)
    results = await association_svc.batch_associate_default(
        db, from_type, to_type, [(i.from_.id, i.to.id) for i in data.inputs]
    )
    return _batch_body([r.to_batch_item() for r in results])


@router.post("/associations/{from_type}/{to_type}/batch/create")
async def batch_create(
    from_type: str,
    to_type: str,
    data: BatchPairWithTypesRequest,
    db: AsyncSession = Depends(get_db),
):
    check_batch_size(data.inputs, MAX_BATCH_WRITE)
    results = await association_svc.batch_create(
        db, from_type, to_type, [(i.from_.id, i.to.id, i.types) for i in data.inputs]
    )
    return _batch_body([r.to_batch_item() for r in results])


@router.post("/associations/{from_type}/{to_type}/batch/read")
async def batch_read(
    from_type: str,
    to_type: str,
    data: BatchIdsRequest,
    db: AsyncSession = Depends(get_db),
):
    check_batch_size(data.inputs, MAX_BATCH_READ)
    results = await association_svc.batch_read(db, from_type, to_type, [i.id for i in data.inputs])
    return _batch_body([
        {"from": {"id": from_id}, "to": [r.to_wire() for r in to_results]}
        for from_id, to_results in results
    ])


@router.post("/associations/{from_type}/{to_type}/batch/archive", status_code=204)
async def batch_archive(
    from_type: str,
    to_type: str,
    data: BatchPairRequest,
    db: AsyncSession = Depends(get_db),
):
    check_batch_size(data.inputs, MAX_BATCH_WRITE)
    await association_svc.batch_archive(
        db, from_type, to_type, [(i.from_.id, i.to.id) for i in data.inputs]
    )
    return Response(status_code=204)


@router.post("/associations/{from_type}/{to_type}/batch/labels/archive", status_code=204)
async def batch_archive_labels(
    from_type: str,
    to_type: str,
    data: BatchPairWithTypesRequest,
    db: AsyncSession = Depends(get_db),
):
    check_batch_size(data.inputs, MAX_BATCH_WRITE)
    await association_svc.batch_archive_labels(
        db, from_type, to_type,
        [(i.from_.id, i.to.id, [t.association_type_id for t in i.types]) for i in data.inputs],
    )
    return Response(status_code=204)


# ── Labels ─────────────────────────────────────────────────────────────────

@router.get("/associations/{from_type}/{to_type}/labels")
async def list_labels(
    from_type: str,
    to_type: str,
    db: AsyncSession = Depends(get_db),
):
    labels = await association_svc.list_labels(db, from_type, to_type)
    return {"results": [label.to_wire() for label in labels]}


@router.post("/associations/{from_type}/{to_type}/labels", status_code=201)
async def create_label(
    from_type: str,
    to_type: str,
    data: LabelCreate,
    db: AsyncSession = Depends(get_db),
):
    if not data.label:
        raise ValidationError("label is required")
    info = await association_svc.create_label(
        db, from_type, to_type, data.label,
        category=data.association_category, inverse_label=data.inverse_label,
    )
    return info.to_wire()


@router.put("/associations/{from_type}/{to_type}/labels")
async def update_label(
    from_type: str,
    to_type: str,
    data: LabelUpdate,
    db: AsyncSession = Depends(get_db),
):
    if not data.label:
        raise ValidationError("label is required")
    info = await association_svc.update_label(
        db, from_type, to_type, data.association_type_id, data.label,
        inverse_label=data.inverse_label,
    )
    return info.to_wire()


@router.delete("/associations/{from_type}/{to_type}/labels/{type_id}", status_code=204)
async def delete_label(
    from_type: str,
    to_type: str,
    type_id: int,
    db: AsyncSession = Depends(get_db),
):
    await association_svc.delete_label(db, from_type, to_type, type_id)
    return Response(status_code=204)
