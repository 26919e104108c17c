"""Owner service: the users CRM records can be assigned to."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..errors import NotFoundError, ValidationError
from ..models.owner import Owner
from .type_svc import parse_object_id

DEFAULT_OWNER_LIMIT = 100


async def list_owners(
    db: AsyncSession,
    *,
    limit: int = DEFAULT_OWNER_LIMIT,
    after: str | None = None,
    email: str | None = None,
    archived: bool = False,
) -> tuple[list[Owner], str | None]:
    """Keyset page of owners ordered by id. Returns (owners, next_after)."""
    if limit <= 0:
        limit = DEFAULT_OWNER_LIMIT

    stmt = select(Owner).where(Owner.archived.is_(archived))
    if email:
        stmt = stmt.where(Owner.email == email)
    if after:
        after_id = parse_object_id(after)
        if after_id is None:
            raise ValidationError(f"Invalid after cursor {after!r}")
        stmt = stmt.where(Owner.id > after_id)
    stmt = stmt.order_by(Owner.id).limit(limit + 1)

    owners = list((await db.execute(stmt)).scalars().all())
    next_after = None
    if len(owners) > limit:
        owners = owners[:limit]
        next_after = str(owners[-1].id)
    return owners, next_after


async def get_owner(db: AsyncSession, owner_id: str) -> Owner:
    oid = parse_object_id(owner_id)
    owner = await db.get(Owner, oid) if oid is not None else None
    if owner is None:
        raise NotFoundError(f"Owner {owner_id} not found")
    return owner


async def create_owner(
    db: AsyncSession,
    email: str,
    first_name: str | None = None,
    last_name: str | None = None,
    user_id: int | None = None,
) -> Owner:
    owner = Owner(email=email, first_name=first_name, last_name=last_name, user_id=user_id)
    db.add(owner)
    await db.commit()
    await db.refresh(owner)
    return owner
