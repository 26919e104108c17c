"""Pipeline and stage routes (``/crm/v3/pipelines``)."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..schemas.pipeline import (
    PipelineCreate,
    PipelineReplace,
    PipelineUpdate,
    StageCreate,
    StageUpdate,
    pipeline_wire,
    stage_wire,
)
from ..services import pipeline_svc

router = APIRouter(prefix="/crm/v3/pipelines", tags=["pipelines"])


# ── Pipelines ──────────────────────────────────────────────────────────────

@router.get("/{object_type}")
async def list_pipelines(object_type: str, db: AsyncSession = Depends(get_db)):
    pipelines = await pipeline_svc.list_pipelines(db, object_type)
    return {"results": [pipeline_wire(p) for p in pipelines]}


@router.post("/{object_type}", status_code=201)
async def create_pipeline(
    object_type: str, data: PipelineCreate, db: AsyncSession = Depends(get_db)
):
    pipeline = await pipeline_svc.create_pipeline(db, object_type, data)
    return pipeline_wire(pipeline)


@router.get("/{object_type}/{pipeline_id}")
async def get_pipeline(object_type: str, pipeline_id: str, db: AsyncSession = Depends(get_db)):
    pipeline = await pipeline_svc.get_pipeline(db, object_type, pipeline_id)
    return pipeline_wire(pipeline)


@router.patch("/{object_type}/{pipeline_id}")
async def update_pipeline(
    object_type: str,
    pipeline_id: str,
    data: PipelineUpdate,
    db: AsyncSession = Depends(get_db),
):
    pipeline = await pipeline_svc.update_pipeline(db, object_type, pipeline_id, data)
    return pipeline_wire(pipeline)


@router.put("/{object_type}/{pipeline_id}")
async def replace_pipeline(
    object_type: str,
    pipeline_id: str,
    data: PipelineReplace,
    db: AsyncSession = Depends(get_db),
):
    pipeline = await pipeline_svc.replace_pipeline(db, object_type, pipeline_id, data)
    return pipeline_wire(pipeline)


@router.delete("/{object_type}/{pipeline_id}", status_code=204)
async def delete_pipeline(object_type: str, pipeline_id: str, db: AsyncSession = Depends(get_db)):
    await pipeline_svc.delete_pipeline(db, object_type, pipeline_id)
    return Response(status_code=204)


# ── Stages ─────────────────────────────────────────────────────────────────

@router.get("/{object_type}/{pipeline_id}/stages")
async def list_stages(object_type: str, pipeline_id: str, db: AsyncSession = Depends(get_db)):
    stages = await pipeline_svc.list_stages(db, object_type, pipeline_id)
    return {"results": [stage_wire(s) for s in stages]}


@router.post("/{object_type}/{pipeline_id}/stages", status_code=201)
async def create_stage(
    object_type: str,
    pipeline_id: str,
    data: StageCreate,
    db: AsyncSession = Depends(get_db),
):
    stage = await pipeline_svc.create_stage(db, object_type, pipeline_id, data)
    return stage_wire(stage)


@router.get("/{object_type}/{pipeline_id}/stages/{stage_id}")
async def get_stage(
    object_type: str, pipeline_id: str, stage_id: str, db: AsyncSession = Depends(get_db)
):
    stage = await pipeline_svc.get_stage(db, object_type, pipeline_id, stage_id)
    return stage_wire(stage)


@router.patch("/{object_type}/{pipeline_id}/stages/{stage_id}")
async def update_stage(
    object_type: str,
    pipeline_id: str,
    stage_id: str,
    data: StageUpdate,
    db: AsyncSession = Depends(get_db),
):
    stage = await pipeline_svc.update_stage(db, object_type, pipeline_id, stage_id, data)
    return stage_wire(stage)


@router.put("/{object_type}/{pipeline_id}/stages/{stage_id}")
async def replace_stage(
    object_type: str,
    pipeline_id: str,
    stage_id: str,
    data: StageCreate,
    db: AsyncSession = Depends(get_db),
):
    stage = await pipeline_svc.replace_stage(db, object_type, pipeline_id, stage_id, data)
    return stage_wire(stage)


@router.delete("/{object_type}/{pipeline_id}/stages/{stage_id}", status_code=204)
async def delete_stage(
    object_type: str, pipeline_id: str, stage_id: str, db: AsyncSession = Depends(get_db)
):
    await pipeline_svc.delete_stage(db, object_type, pipeline_id, stage_id)
    return Response(status_code=204)
