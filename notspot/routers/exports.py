"""Export routes (``/crm/v3/exports``)."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..errors import NotFoundError
from ..schemas.export_job import ExportRequest, export_status_wire
from ..services import export_svc

router = APIRouter(prefix="/crm/v3/exports/export/async", tags=["exports"])


def _download_url(request: Request, job) -> str:
    return str(request.url_for("download_export", task_id=str(job.id)))


@router.post("", status_code=202)
async def start_export(
    data: ExportRequest, request: Request, db: AsyncSession = Depends(get_db)
):
    job = await export_svc.start_export(db, data)
    return export_status_wire(job, _download_url(request, job))


@router.get("/tasks/{task_id}/status")
async def get_export_status(task_id: str, request: Request, db: AsyncSession = Depends(get_db)):
    job = await export_svc.get_export(db, task_id)
    return export_status_wire(job, _download_url(request, job))


@router.get("/tasks/{task_id}/download", name="download_export")
async def download_export(task_id: str, db: AsyncSession = Depends(get_db)):
    job = await export_svc.get_export(db, task_id)
    if job.result_csv is None:
        raise NotFoundError(f"Export task {task_id} has no file yet")
    return Response(
        job.result_csv,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="export-{job.id}.csv"'},
    )
