"""Association types (labels) and the directed association edge table."""

from __future__ import annotations

from sqlalchemy import ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, utc_timestamp

HUBSPOT_DEFINED = "HUBSPOT_DEFINED"
USER_DEFINED = "USER_DEFINED"


class AssociationType(Base):
    __tablename__ = "association_type"
    __table_args__ = (
        UniqueConstraint(
            "from_object_type", "to_object_type", "category", "label",
            name="uq_association_type_pair_label",
        ),
        {"sqlite_autoincrement": True},
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    from_object_type: Mapped[str] = mapped_column(String(20), index=True)
    to_object_type: Mapped[str] = mapped_column(String(20), index=True)
    category: Mapped[str] = mapped_column(String(30))
    label: Mapped[str | None] = mapped_column(String(200), default=None)
    inverse_label: Mapped[str | None] = mapped_column(String(200), default=None)

    @property
    def is_default(self) -> bool:
        return self.category == HUBSPOT_DEFINED and not self.label

    def __repr__(self) -> str:
        return f"<AssociationType {self.id} {self.from_object_type}->{self.to_object_type} {self.label!r}>"


class Association(Base):
    """One directed, typed edge. Unique per (from, to, type)."""

    __tablename__ = "association"
    __table_args__ = (
        Index("ix_association_from_type", "from_object_id", "association_type_id"),
        Index("ix_association_to", "to_object_id"),
    )

    from_object_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("crm_object.id"), primary_key=True
    )
    to_object_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("crm_object.id"), primary_key=True
    )
    association_type_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("association_type.id"), primary_key=True
    )
    created_at: Mapped[str] = mapped_column(String(30), default=utc_timestamp)
