"""Object lists and their membership rows."""

from __future__ import annotations

from sqlalchemy import JSON, ForeignKey, Integer, String, func, select
from sqlalchemy.orm import Mapped, column_property, mapped_column

from .base import ArchivableMixin, Base, TimestampMixin, utc_timestamp

MANUAL = "MANUAL"
SNAPSHOT = "SNAPSHOT"
DYNAMIC = "DYNAMIC"
PROCESSING_TYPES = (MANUAL, SNAPSHOT, DYNAMIC)


class ListMembership(Base):
    __tablename__ = "list_membership"

    list_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("crm_list.id", ondelete="CASCADE"), primary_key=True
    )
    object_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("crm_object.id"), primary_key=True
    )
    added_at: Mapped[str] = mapped_column(String(30), default=utc_timestamp)


class CrmList(TimestampMixin, ArchivableMixin, Base):
    """A named set of records of one object type."""

    __tablename__ = "crm_list"
    __table_args__ = ({"sqlite_autoincrement": True},)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), unique=True)
    object_type_id: Mapped[str] = mapped_column(String(20), ForeignKey("object_type.id"))
    processing_type: Mapped[str] = mapped_column(String(20), default=MANUAL)
    processing_status: Mapped[str] = mapped_column(String(20), default="COMPLETE")
    filter_branch: Mapped[dict | None] = mapped_column(JSON, default=None)
    list_version: Mapped[int] = mapped_column(Integer, default=1)
    deleted_at: Mapped[str | None] = mapped_column(String(30), default=None)

    size: Mapped[int] = column_property(
        select(func.count(ListMembership.object_id))
        .where(ListMembership.list_id == id)
        .correlate_except(ListMembership)
        .scalar_subquery()
    )

    @property
    def accepts_manual_changes(self) -> bool:
        return self.processing_type in (MANUAL, SNAPSHOT)

    def __repr__(self) -> str:
        return f"<CrmList {self.id} {self.name!r}>"
