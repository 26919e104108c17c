"""Export jobs; the generated CSV is kept on the row."""

from __future__ import annotations

from sqlalchemy import JSON, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin

ENQUEUED = "ENQUEUED"
PROCESSING = "PROCESSING"
COMPLETE = "COMPLETE"


class ExportJob(TimestampMixin, Base):
    __tablename__ = "export_job"
    __table_args__ = ({"sqlite_autoincrement": True},)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200))
    state: Mapped[str] = mapped_column(String(20), default=ENQUEUED)
    export_type: Mapped[str] = mapped_column(String(20), default="VIEW")
    object_type_id: Mapped[str] = mapped_column(String(20), ForeignKey("object_type.id"))
    object_properties: Mapped[list | None] = mapped_column(JSON, default=None)
    request_json: Mapped[dict | None] = mapped_column(JSON, default=None)
    result_csv: Mapped[str | None] = mapped_column(Text, default=None)
    record_count: Mapped[int] = mapped_column(Integer, default=0)

    def __repr__(self) -> str:
        return f"<ExportJob {self.id} {self.state}>"
