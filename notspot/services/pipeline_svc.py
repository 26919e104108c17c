"""Pipeline and stage service."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..errors import NotFoundError
from ..models.base import utc_timestamp
from ..models.pipeline import Pipeline, PipelineStage
from ..schemas.pipeline import (
    PipelineCreate,
    PipelineReplace,
    PipelineUpdate,
    StageCreate,
    StageUpdate,
)
from .type_svc import parse_object_id, resolve_object_type


def _stage_from(data: StageCreate) -> PipelineStage:
    return PipelineStage(
        label=data.label,
        display_order=data.display_order,
        metadata_json=dict(data.metadata),
    )


# ── Pipeline CRUD ──────────────────────────────────────────────────────────

async def list_pipelines(db: AsyncSession, object_type: str) -> list[Pipeline]:
    type_id = await resolve_object_type(db, object_type)
    stmt = (
        select(Pipeline)
        .where(Pipeline.object_type_id == type_id)
        .options(selectinload(Pipeline.stages))
        .order_by(Pipeline.display_order, Pipeline.id)
    )
    result = await db.execute(stmt)
    return list(result.scalars().unique().all())


async def _load_pipeline(db: AsyncSession, type_id: str, pipeline_id: str) -> Pipeline:
    pid = parse_object_id(pipeline_id)
    if pid is None:
        raise NotFoundError(f"Pipeline {pipeline_id} not found")
    stmt = (
        select(Pipeline)
        .where(Pipeline.id == pid, Pipeline.object_type_id == type_id)
        .options(selectinload(Pipeline.stages))
        .execution_options(populate_existing=True)
    )
    pipeline = (await db.execute(stmt)).scalar_one_or_none()
    if pipeline is None:
        raise NotFoundError(f"Pipeline {pipeline_id} not found")
    return pipeline


async def get_pipeline(db: AsyncSession, object_type: str, pipeline_id: str) -> Pipeline:
    type_id = await resolve_object_type(db, object_type)
    return await _load_pipeline(db, type_id, pipeline_id)


async def create_pipeline(db: AsyncSession, object_type: str, data: PipelineCreate) -> Pipeline:
    type_id = await resolve_object_type(db, object_type)
    pipeline = Pipeline(
        object_type_id=type_id,
        label=data.label,
        display_order=data.display_order,
        stages=[_stage_from(s) for s in data.stages],
    )
    db.add(pipeline)
    await db.commit()
    return await _load_pipeline(db, type_id, str(pipeline.id))


async def update_pipeline(
    db: AsyncSession, object_type: str, pipeline_id: str, data: PipelineUpdate
) -> Pipeline:
    """Partial update: only the fields present in ``data`` change."""
    type_id = await resolve_object_type(db, object_type)
    pipeline = await _load_pipeline(db, type_id, pipeline_id)
    if data.label:
        pipeline.label = data.label
    if data.display_order is not None:
        pipeline.display_order = data.display_order
    if data.archived is not None:
        pipeline.archived = data.archived
    pipeline.updated_at = utc_timestamp()
    await db.commit()
    return await _load_pipeline(db, type_id, pipeline_id)


async def replace_pipeline(
    db: AsyncSession, object_type: str, pipeline_id: str, data: PipelineReplace
) -> Pipeline:
    """Overwrite label and order; when stages are given they replace the old set."""
    type_id = await resolve_object_type(db, object_type)
    pipeline = await _load_pipeline(db, type_id, pipeline_id)
    pipeline.label = data.label
    pipeline.display_order = data.display_order
    pipeline.updated_at = utc_timestamp()
    if data.stages is not None:
        pipeline.stages = [_stage_from(s) for s in data.stages]
    await db.commit()
    return await _load_pipeline(db, type_id, pipeline_id)


async def delete_pipeline(db: AsyncSession, object_type: str, pipeline_id: str) -> None:
    type_id = await resolve_object_type(db, object_type)
    pipeline = await _load_pipeline(db, type_id, pipeline_id)
    await db.delete(pipeline)
    await db.commit()


# ── Stage CRUD ─────────────────────────────────────────────────────────────

async def list_stages(
    db: AsyncSession, object_type: str, pipeline_id: str
) -> list[PipelineStage]:
    pipeline = await get_pipeline(db, object_type, pipeline_id)
    return list(pipeline.stages)


def _find_stage(pipeline: Pipeline, stage_id: str) -> PipelineStage:
    sid = parse_object_id(stage_id)
    for stage in pipeline.stages:
        if stage.id == sid:
            return stage
    raise NotFoundError(f"Stage {stage_id} not found in pipeline {pipeline.id}")


async def get_stage(
    db: AsyncSession, object_type: str, pipeline_id: str, stage_id: str
) -> PipelineStage:
    pipeline = await get_pipeline(db, object_type, pipeline_id)
    return _find_stage(pipeline, stage_id)


async def create_stage(
    db: AsyncSession, object_type: str, pipeline_id: str, data: StageCreate
) -> PipelineStage:
    pipeline = await get_pipeline(db, object_type, pipeline_id)
    stage = _stage_from(data)
    stage.pipeline_id = pipeline.id
    db.add(stage)
    await db.commit()
    await db.refresh(stage)
    return stage


async def update_stage(
    db: AsyncSession, object_type: str, pipeline_id: str, stage_id: str, data: StageUpdate
) -> PipelineStage:
    pipeline = await get_pipeline(db, object_type, pipeline_id)
    stage = _find_stage(pipeline, stage_id)
    if data.label:
        stage.label = data.label
    if data.display_order is not None:
        stage.display_order = data.display_order
    if data.metadata is not None:
        stage.metadata_json = dict(data.metadata)
    stage.updated_at = utc_timestamp()
    await db.commit()
    await db.refresh(stage)
    return stage


async def replace_stage(
    db: AsyncSession, object_type: str, pipeline_id: str, stage_id: str, data: StageCreate
) -> PipelineStage:
    pipeline = await get_pipeline(db, object_type, pipeline_id)
    stage = _find_stage(pipeline, stage_id)
    stage.label = data.label
    stage.display_order = data.display_order
    stage.metadata_json = dict(data.metadata)
    stage.updated_at = utc_timestamp()
    await db.commit()
    await db.refresh(stage)
    return stage


async def delete_stage(
    db: AsyncSession, object_type: str, pipeline_id: str, stage_id: str
) -> None:
    pipeline = await get_pipeline(db, object_type, pipeline_id)
    stage = _find_stage(pipeline, stage_id)
    pipeline.stages.remove(stage)
    await db.commit()
