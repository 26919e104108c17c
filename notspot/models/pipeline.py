"""Pipeline and PipelineStage models."""

from __future__ import annotations

from sqlalchemy import JSON, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import ArchivableMixin, Base, TimestampMixin


class Pipeline(TimestampMixin, ArchivableMixin, Base):
    __tablename__ = "pipeline"
    __table_args__ = ({"sqlite_autoincrement": True},)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    object_type_id: Mapped[str] = mapped_column(String(20), index=True)
    label: Mapped[str] = mapped_column(String(200))
    display_order: Mapped[int] = mapped_column(Integer, default=0)

    # Relationships
    stages: Mapped[list["PipelineStage"]] = relationship(
        back_populates="pipeline", cascade="all, delete-orphan",
        order_by="PipelineStage.display_order"
    )

    def __repr__(self) -> str:
        return f"<Pipeline {self.label!r}>"


class PipelineStage(TimestampMixin, ArchivableMixin, Base):
    __tablename__ = "pipeline_stage"
    __table_args__ = ({"sqlite_autoincrement": True},)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    pipeline_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("pipeline.id", ondelete="CASCADE"), index=True
    )
    label: Mapped[str] = mapped_column(String(200))
    display_order: Mapped[int] = mapped_column(Integer, default=0)
    # "metadata" is reserved on declarative classes
    metadata_json: Mapped[dict | None] = mapped_column("metadata", JSON, default=None)

    # Relationships
    pipeline: Mapped["Pipeline"] = relationship(back_populates="stages")

    def __repr__(self) -> str:
        return f"<PipelineStage {self.label!r}>"
