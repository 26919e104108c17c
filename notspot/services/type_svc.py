"""Object type resolution shared by every store."""

from __future__ import annotations

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..errors import NotFoundError
from ..models.object_type import ObjectType


async def resolve_object_type(db: AsyncSession, ref: str) -> str:
    """Map a type name (``contacts``) or id (``0-1``) to its type id."""
    stmt = select(ObjectType.id).where(or_(ObjectType.name == ref, ObjectType.id == ref))
    result = await db.execute(stmt)
    type_id = result.scalars().first()
    if type_id is None:
        raise NotFoundError(f"Object type {ref!r} not found")
    return type_id


async def get_object_type(db: AsyncSession, ref: str) -> ObjectType:
    type_id = await resolve_object_type(db, ref)
    return await db.get(ObjectType, type_id)


async def list_object_types(db: AsyncSession, *, custom_only: bool = False) -> list[ObjectType]:
    stmt = select(ObjectType).order_by(ObjectType.id)
    if custom_only:
        stmt = stmt.where(ObjectType.is_custom.is_(True))
    result = await db.execute(stmt)
    return list(result.scalars().all())


def parse_object_id(raw: str | int | None) -> int | None:
    """Decimal object id, or None when ``raw`` is not a positive integer."""
    if raw is None:
        return None
    text = str(raw).strip()
    if not text.isdigit():
        return None
    return int(text)
