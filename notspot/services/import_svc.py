"""Import store: CSV rows ingested into the object store as tracked jobs."""

from __future__ import annotations

import csv
import io
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..errors import NotFoundError, ValidationError
from ..models.base import utc_timestamp
from ..models.import_job import (
    CANCELED,
    DONE,
    FAILED,
    PROCESSING,
    ImportJob,
    ImportRowError,
)
from ..schemas.import_job import FileImportPage, ImportRequest
from . import object_svc
from .type_svc import parse_object_id, resolve_object_type

log = logging.getLogger(__name__)

DEFAULT_IMPORT_LIMIT = 100
OPERATIONS = ("CREATE", "UPDATE", "UPSERT")


async def _set_state(db: AsyncSession, job: ImportJob, state: str) -> None:
    job.state = state
    job.updated_at = utc_timestamp()
    await db.commit()


def _column_map(page: FileImportPage, reader) -> dict[int, str]:
    """Column position to property name; consumes the header row when present."""
    header = next(reader, []) if page.has_header else []
    if not page.column_mappings:
        return {i: name for i, name in enumerate(header)}
    positions = {name: i for i, name in enumerate(header)}
    return {
        positions.get(mapping.column_name, i): mapping.property_name
        for i, mapping in enumerate(page.column_mappings)
    }


async def _apply_row(
    db: AsyncSession, type_id: str, operation: str, props: dict[str, str]
) -> str:
    """Write one row; returns ``created`` or ``updated``."""
    object_id = props.pop("hs_object_id", "")
    if operation == "UPDATE":
        if not object_id:
            raise ValidationError("hs_object_id is required for UPDATE rows")
        await object_svc.update_object(db, type_id, object_id, props)
        return "updated"
    if operation == "UPSERT":
        id_property = "email" if type_id == "0-1" else "hs_object_id"
        lookup = props.get(id_property, "") if id_property == "email" else object_id
        if not lookup:
            raise ValidationError(f"Lookup property {id_property} is empty")
        try:
            existing = await object_svc.get_object_by_property(db, type_id, id_property, lookup)
        except NotFoundError:
            pass
        else:
            await object_svc.update_object(db, type_id, existing.id, props)
            return "updated"
    await object_svc.create_object(db, type_id, props)
    return "created"


# ── Jobs ───────────────────────────────────────────────────────────────────

async def start_import(
    db: AsyncSession,
    data: ImportRequest,
    csv_text: str | None,
    request_json: dict | None = None,
) -> ImportJob:
    """Create a job and ingest every row of ``csv_text`` before returning.

    Row failures are recorded on the job and do not stop the import. The job
    ends DONE, or FAILED when every row failed.
    """
    if not data.files:
        raise ValidationError("At least one file definition is required")

    job = ImportJob(name=data.name, request_json=request_json, metadata_json={})
    db.add(job)
    await db.commit()
    await _set_state(db, job, PROCESSING)

    type_ref, operation = data.operation()
    try:
        if csv_text is None:
            raise ValidationError("CSV file is required")
        if not type_ref:
            raise ValidationError("objectTypeId is required")
        if operation not in OPERATIONS:
            raise ValidationError(f"Unknown import operation {operation!r}")
        type_id = await resolve_object_type(db, type_ref)
    except (NotFoundError, ValidationError):
        await _set_state(db, job, FAILED)
        raise

    reader = csv.reader(io.StringIO(csv_text))
    columns = _column_map(data.files[0].file_import_page, reader)
    counts = {"created": 0, "updated": 0}
    failed = 0
    for record in reader:
        if not record:
            continue
        props = {columns[i]: value for i, value in enumerate(record) if columns.get(i)}
        try:
            counts[await _apply_row(db, type_id, operation, props)] += 1
        except (NotFoundError, ValidationError) as exc:
            failed += 1
            db.add(ImportRowError(
                import_id=job.id,
                error_type="OBJECT_CREATE_ERROR",
                message=exc.message,
                object_type_id=type_id,
                line_number=reader.line_num,
            ))
            await db.commit()

    imported = counts["created"] + counts["updated"]
    job.metadata_json = {
        "objectLists": [
            {"objectType": type_id, "objectsImported": imported, "objectsFailed": failed},
        ],
        "counters": {
            "TOTAL_ROWS": imported + failed,
            "CREATED_OBJECTS": counts["created"],
            "UPDATED_OBJECTS": counts["updated"],
            "ERRORS": failed,
        },
    }
    await _set_state(db, job, FAILED if imported == 0 and failed else DONE)
    log.info(
        "Import %s finished %s: %d imported, %d failed", job.id, job.state, imported, failed
    )
    return job


async def get_import(db: AsyncSession, import_id: str) -> ImportJob:
    iid = parse_object_id(import_id)
    job = await db.get(ImportJob, iid) if iid is not None else None
    if job is None:
        raise NotFoundError(f"Import {import_id} not found")
    return job


async def list_imports(
    db: AsyncSession, *, limit: int = DEFAULT_IMPORT_LIMIT, after: str | None = None
) -> tuple[list[ImportJob], str | None]:
    """Keyset page of imports ordered by id. Returns (jobs, next_after)."""
    if limit <= 0:
        limit = DEFAULT_IMPORT_LIMIT

    stmt = select(ImportJob)
    if after:
        after_id = parse_object_id(after)
        if after_id is None:
            raise ValidationError(f"Invalid after cursor {after!r}")
        stmt = stmt.where(ImportJob.id > after_id)
    stmt = stmt.order_by(ImportJob.id).limit(limit + 1)

    jobs = list((await db.execute(stmt)).scalars().all())
    next_after = None
    if len(jobs) > limit:
        jobs = jobs[:limit]
        next_after = str(jobs[-1].id)
    return jobs, next_after


async def cancel_import(db: AsyncSession, import_id: str) -> ImportJob:
    job = await get_import(db, import_id)
    await _set_state(db, job, CANCELED)
    return job


async def get_import_errors(db: AsyncSession, import_id: str) -> list[ImportRowError]:
    job = await get_import(db, import_id)
    stmt = (
        select(ImportRowError)
        .where(ImportRowError.import_id == job.id)
        .order_by(ImportRowError.id)
    )
    return list((await db.execute(stmt)).scalars().all())
