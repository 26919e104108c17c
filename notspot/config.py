"""NotSpot configuration via pydantic-settings."""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings


class NotSpotSettings(BaseSettings):
    environment: str = "development"
    database_url: str = "sqlite+aiosqlite:///notspot.db"
    echo_sql: bool = False
    app_title: str = "NotSpot CRM Emulator"
    host: str = "127.0.0.1"
    port: int = 8080
    log_level: str = "INFO"

    # Seed builtin object types, association types, pipelines and owners at startup.
    seed_on_startup: bool = True

    # Busy timeout handed to SQLite connections, in milliseconds.
    sqlite_busy_timeout_ms: int = 5000

    max_batch_size: int = 100

    model_config = {"env_prefix": "NOTSPOT_", "env_file": ".env", "extra": "ignore"}

    @property
    def base_dir(self) -> Path:
        return Path(__file__).resolve().parent

    @property
    def project_dir(self) -> Path:
        return self.base_dir.parent

    @property
    def migrations_dir(self) -> Path:
        return self.base_dir / "migrations"

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    @property
    def is_production(self) -> bool:
        return self.environment.strip().lower() in {"prod", "production"}


settings = NotSpotSettings()
