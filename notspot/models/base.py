"""Base model classes and mixins for NotSpot models."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utc_timestamp() -> str:
    """Current UTC time as a HubSpot timestamp, e.g. ``2024-01-01T00:00:00.000Z``."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class Base(DeclarativeBase):
    pass


class TimestampMixin:
    """Adds created_at / updated_at columns stored as HubSpot timestamp strings."""

    created_at: Mapped[str] = mapped_column(String(30), default=utc_timestamp)
    updated_at: Mapped[str] = mapped_column(
        String(30), default=utc_timestamp, onupdate=utc_timestamp
    )


class ArchivableMixin:
    """Adds a soft-delete flag."""

    archived: Mapped[bool] = mapped_column(default=False)
