"""Property definitions and property groups, keyed per object type."""

from __future__ import annotations

from sqlalchemy import JSON, Boolean, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import ArchivableMixin, Base, TimestampMixin


class PropertyDefinition(TimestampMixin, ArchivableMixin, Base):
    __tablename__ = "property_definition"

    object_type_id: Mapped[str] = mapped_column(String(20), primary_key=True)
    name: Mapped[str] = mapped_column(String(200), primary_key=True)
    label: Mapped[str] = mapped_column(String(200))
    type: Mapped[str] = mapped_column(String(50), default="string")
    field_type: Mapped[str] = mapped_column(String(50), default="text")
    group_name: Mapped[str] = mapped_column(String(200), default="contactinformation")
    description: Mapped[str] = mapped_column(Text, default="")
    display_order: Mapped[int] = mapped_column(Integer, default=0)
    has_unique_value: Mapped[bool] = mapped_column(Boolean, default=False)
    hidden: Mapped[bool] = mapped_column(Boolean, default=False)
    form_field: Mapped[bool] = mapped_column(Boolean, default=False)
    calculated: Mapped[bool] = mapped_column(Boolean, default=False)
    external_options: Mapped[bool] = mapped_column(Boolean, default=False)
    hubspot_defined: Mapped[bool] = mapped_column(Boolean, default=False)
    # List of {label, value, displayOrder, hidden}
    options_json: Mapped[list | None] = mapped_column(JSON, default=None)
    archived_at: Mapped[str | None] = mapped_column(String(30), default=None)

    def __repr__(self) -> str:
        return f"<PropertyDefinition {self.object_type_id}.{self.name}>"


class PropertyGroup(ArchivableMixin, Base):
    __tablename__ = "property_group"

    object_type_id: Mapped[str] = mapped_column(String(20), primary_key=True)
    name: Mapped[str] = mapped_column(String(200), primary_key=True)
    label: Mapped[str] = mapped_column(String(200))
    display_order: Mapped[int] = mapped_column(Integer, default=0)

    def __repr__(self) -> str:
        return f"<PropertyGroup {self.object_type_id}.{self.name}>"
