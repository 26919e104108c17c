"""Smoke tests for the Alembic migrations."""

from __future__ import annotations

from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

from notspot.config import settings
from notspot.models import Base


def test_alembic_upgrade_matches_models(tmp_path: Path, monkeypatch):
    db_path = tmp_path / "notspot_migrations.db"
    monkeypatch.setattr(settings, "database_url", f"sqlite+aiosqlite:///{db_path}")

    cfg = Config(str(settings.base_dir / "alembic.ini"))
    command.upgrade(cfg, "head")

    engine = create_engine(f"sqlite:///{db_path}")
    try:
        insp = inspect(engine)
        tables = set(insp.get_table_names())
        association_indexes = {ix["name"] for ix in insp.get_indexes("association")}
    finally:
        engine.dispose()

    assert set(Base.metadata.tables) <= tables
    assert "alembic_version" in tables
    assert {"ix_association_from_type", "ix_association_to"} <= association_indexes


def test_alembic_downgrade_drops_tables(tmp_path: Path, monkeypatch):
    db_path = tmp_path / "notspot_downgrade.db"
    monkeypatch.setattr(settings, "database_url", f"sqlite+aiosqlite:///{db_path}")

    cfg = Config(str(settings.base_dir / "alembic.ini"))
    command.upgrade(cfg, "head")
    command.downgrade(cfg, "base")

    engine = create_engine(f"sqlite:///{db_path}")
    try:
        tables = set(inspect(engine).get_table_names())
    finally:
        engine.dispose()
    assert tables <= {"alembic_version"}
