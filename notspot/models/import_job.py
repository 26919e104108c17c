"""Import jobs and the per-row errors they record."""

from __future__ import annotations

from sqlalchemy import JSON, Boolean, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin, utc_timestamp

STARTED = "STARTED"
PROCESSING = "PROCESSING"
DONE = "DONE"
FAILED = "FAILED"
CANCELED = "CANCELED"


class ImportJob(TimestampMixin, Base):
    __tablename__ = "import_job"
    __table_args__ = ({"sqlite_autoincrement": True},)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), default="")
    state: Mapped[str] = mapped_column(String(20), default=STARTED)
    opt_out_import: Mapped[bool] = mapped_column(Boolean, default=False)
    request_json: Mapped[dict | None] = mapped_column(JSON, default=None)
    # "metadata" is reserved on declarative classes
    metadata_json: Mapped[dict | None] = mapped_column("metadata", JSON, default=None)

    errors: Mapped[list[ImportRowError]] = relationship(
        back_populates="job", cascade="all, delete-orphan", order_by="ImportRowError.id"
    )

    def __repr__(self) -> str:
        return f"<ImportJob {self.id} {self.state}>"


class ImportRowError(Base):
    __tablename__ = "import_row_error"
    __table_args__ = ({"sqlite_autoincrement": True},)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    import_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("import_job.id", ondelete="CASCADE"), index=True
    )
    error_type: Mapped[str] = mapped_column(String(50))
    message: Mapped[str] = mapped_column(Text, default="")
    invalid_value: Mapped[str | None] = mapped_column(Text, default=None)
    object_type_id: Mapped[str | None] = mapped_column(String(20), default=None)
    line_number: Mapped[int | None] = mapped_column(Integer, default=None)
    created_at: Mapped[str] = mapped_column(String(30), default=utc_timestamp)

    job: Mapped[ImportJob] = relationship(back_populates="errors")
