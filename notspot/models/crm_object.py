"""CRM objects and their sparse property value table (EAV pattern)."""

from __future__ import annotations

from sqlalchemy import ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import ArchivableMixin, Base, TimestampMixin


class CrmObject(TimestampMixin, ArchivableMixin, Base):
    """A record of any object type. Its attributes live in ``property_value``."""

    __tablename__ = "crm_object"
    __table_args__ = (
        Index("ix_crm_object_type_archived", "object_type_id", "archived"),
        {"sqlite_autoincrement": True},
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    object_type_id: Mapped[str] = mapped_column(String(20), ForeignKey("object_type.id"))
    archived_at: Mapped[str | None] = mapped_column(String(30), default=None)
    merged_into_id: Mapped[int | None] = mapped_column(Integer, default=None)

    def __repr__(self) -> str:
        return f"<CrmObject {self.object_type_id}/{self.id}>"


class PropertyValue(Base):
    """Current value of one property on one object (last write wins)."""

    __tablename__ = "property_value"
    __table_args__ = (
        Index("ix_property_value_name_value", "property_name", "value"),
    )

    object_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("crm_object.id"), primary_key=True
    )
    property_name: Mapped[str] = mapped_column(String(200), primary_key=True)
    value: Mapped[str | None] = mapped_column(Text, default=None)
    updated_at: Mapped[str] = mapped_column(String(30))

    def __repr__(self) -> str:
        return f"<PropertyValue {self.object_id}.{self.property_name}={self.value!r}>"


class PropertyValueHistory(Base):
    """Append-only audit log of every property write."""

    __tablename__ = "property_value_history"
    __table_args__ = (
        Index("ix_property_history_lookup", "object_id", "property_name", "timestamp"),
        {"sqlite_autoincrement": True},
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    object_id: Mapped[int] = mapped_column(Integer, ForeignKey("crm_object.id"))
    property_name: Mapped[str] = mapped_column(String(200))
    value: Mapped[str | None] = mapped_column(Text, default=None)
    timestamp: Mapped[str] = mapped_column(String(30))
    source: Mapped[str] = mapped_column(String(50), default="API")
