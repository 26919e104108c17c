"""Owner routes (``/crm/v3/owners``)."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..schemas.owner import owner_wire
from ..services import owner_svc

router = APIRouter(prefix="/crm/v3/owners", tags=["owners"])


@router.get("")
@router.get("/", include_in_schema=False)
async def list_owners(
    request: Request,
    limit: int = owner_svc.DEFAULT_OWNER_LIMIT,
    after: str | None = None,
    email: str | None = None,
    archived: bool = False,
    db: AsyncSession = Depends(get_db),
):
    owners, next_after = await owner_svc.list_owners(
        db, limit=limit, after=after, email=email, archived=archived
    )
    body: dict = {"results": [owner_wire(o) for o in owners]}
    if next_after:
        body["paging"] = {"next": {
            "after": next_after,
            "link": f"{request.url.path}?after={next_after}",
        }}
    return body


@router.get("/{owner_id}")
async def get_owner(owner_id: str, db: AsyncSession = Depends(get_db)):
    owner = await owner_svc.get_owner(db, owner_id)
    return owner_wire(owner)
