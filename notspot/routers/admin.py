"""Test-harness admin routes (``/_notspot``)."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..services import seed_svc

router = APIRouter(prefix="/_notspot", tags=["admin"])


@router.post("/reset")
async def reset(db: AsyncSession = Depends(get_db)):
    """Drop every table, recreate the schema and reseed."""
    counts = await seed_svc.reset_store(db)
    return {"status": "ok", "seeded": counts}


@router.post("/seed")
async def seed(db: AsyncSession = Depends(get_db)):
    counts = await seed_svc.seed_all(db)
    return {"status": "ok", "seeded": counts}
