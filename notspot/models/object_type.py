"""Object type registry (builtin ``0-N`` and custom ``2-N`` types)."""

from __future__ import annotations

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import ArchivableMixin, Base, TimestampMixin


class ObjectType(TimestampMixin, ArchivableMixin, Base):
    __tablename__ = "object_type"

    id: Mapped[str] = mapped_column(String(20), primary_key=True)
    name: Mapped[str] = mapped_column(String(100), unique=True)
    label_singular: Mapped[str] = mapped_column(String(200))
    label_plural: Mapped[str] = mapped_column(String(200))
    primary_display_property: Mapped[str | None] = mapped_column(String(200), default=None)
    is_custom: Mapped[bool] = mapped_column(default=False)
    fully_qualified_name: Mapped[str | None] = mapped_column(String(200), default=None)
    description: Mapped[str | None] = mapped_column(Text, default=None)

    def __repr__(self) -> str:
        return f"<ObjectType {self.id} {self.name!r}>"
