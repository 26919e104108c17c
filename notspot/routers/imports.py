"""Import routes (``/crm/v3/imports``)."""

from __future__ import annotations

import json

import pydantic
from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..errors import ValidationError
from ..schemas.import_job import ImportRequest, import_error_wire, import_wire
from ..services import import_svc

router = APIRouter(prefix="/crm/v3/imports", tags=["imports"])


@router.post("")
@router.post("/", include_in_schema=False)
async def start_import(
    import_request: str = Form(..., alias="importRequest"),
    files: UploadFile | None = File(None),
    db: AsyncSession = Depends(get_db),
):
    try:
        payload = json.loads(import_request)
        data = ImportRequest.model_validate(payload)
    except (json.JSONDecodeError, pydantic.ValidationError):
        raise ValidationError("Invalid importRequest JSON") from None

    csv_text = None
    if files is not None:
        try:
            csv_text = (await files.read()).decode("utf-8-sig")
        except UnicodeDecodeError:
            raise ValidationError("Import file must be UTF-8 encoded CSV") from None

    job = await import_svc.start_import(db, data, csv_text, payload)
    return import_wire(job)


@router.get("")
@router.get("/", include_in_schema=False)
async def list_imports(
    request: Request,
    limit: int = import_svc.DEFAULT_IMPORT_LIMIT,
    after: str | None = None,
    db: AsyncSession = Depends(get_db),
):
    jobs, next_after = await import_svc.list_imports(db, limit=limit, after=after)
    body: dict = {"results": [import_wire(j) for j in jobs]}
    if next_after:
        body["paging"] = {"next": {
            "after": next_after,
            "link": f"{request.url.path}?after={next_after}",
        }}
    return body


@router.get("/{import_id}")
async def get_import(import_id: str, db: AsyncSession = Depends(get_db)):
    return import_wire(await import_svc.get_import(db, import_id))


@router.post("/{import_id}/cancel")
async def cancel_import(import_id: str, db: AsyncSession = Depends(get_db)):
    return import_wire(await import_svc.cancel_import(db, import_id))


@router.get("/{import_id}/errors")
async def get_import_errors(import_id: str, db: AsyncSession = Depends(get_db)):
    errors = await import_svc.get_import_errors(db, import_id)
    return {"results": [import_error_wire(e) for e in errors]}
