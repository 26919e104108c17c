"""Export store: snapshots of an object type written out as CSV."""

from __future__ import annotations

import csv
import io
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from ..errors import NotFoundError, ValidationError
from ..models.base import utc_timestamp
from ..models.export_job import COMPLETE, PROCESSING, ExportJob
from ..schemas.export_job import ExportRequest
from . import object_svc
from .type_svc import parse_object_id, resolve_object_type

log = logging.getLogger(__name__)

EXPORT_TYPES = ("VIEW", "LIST")


async def start_export(db: AsyncSession, data: ExportRequest) -> ExportJob:
    """Write every live object of the type to CSV and complete the job.

    Columns are ``hs_object_id`` followed by the requested properties; absent
    values are written as empty cells.
    """
    if not data.object_type:
        raise ValidationError("objectType is required")
    if not data.object_properties:
        raise ValidationError("objectProperties is required")
    export_type = (data.export_type or "VIEW").upper()
    if export_type not in EXPORT_TYPES:
        raise ValidationError(f"Unknown exportType {export_type!r}")
    try:
        type_id = await resolve_object_type(db, data.object_type)
    except NotFoundError as exc:
        raise ValidationError(exc.message) from None

    job = ExportJob(
        name=data.export_name or f"{data.object_type} export",
        state=PROCESSING,
        export_type=export_type,
        object_type_id=type_id,
        object_properties=list(data.object_properties),
        request_json=data.model_dump(by_alias=True),
    )
    db.add(job)
    await db.commit()

    buf = io.StringIO()
    writer = csv.writer(buf)
    writer.writerow(["hs_object_id", *data.object_properties])
    count = 0
    after = None
    while True:
        page = await object_svc.list_objects(
            db,
            type_id,
            limit=object_svc.MAX_LIST_LIMIT,
            after=after,
            properties=data.object_properties,
        )
        for obj in page.results:
            writer.writerow([obj.id, *(obj.properties.get(p, "") for p in data.object_properties)])
            count += 1
        if not page.after:
            break
        after = page.after

    job.result_csv = buf.getvalue()
    job.record_count = count
    job.state = COMPLETE
    job.updated_at = utc_timestamp()
    await db.commit()
    log.info("Export %s wrote %d %s records", job.id, count, type_id)
    return job


async def get_export(db: AsyncSession, task_id: str) -> ExportJob:
    eid = parse_object_id(task_id)
    job = await db.get(ExportJob, eid) if eid is not None else None
    if job is None:
        raise NotFoundError(f"Export task {task_id} not found")
    return job
