from datetime import UTC, datetime
from pathlib import Path

from pydantic_settings import BaseSettings


def utcnow() -> datetime:
    """Return the current UTC time as a naive datetime.

    Replaces the deprecated ``datetime.utcnow()`` while keeping datetimes
    naive so they stay compatible with SQLite (which doesn't store tz info).
    """
    return datetime.now(UTC).replace(tzinfo=None)


class Settings(BaseSettings):
    app_name: str = "Sentence Memorizer"
    database_url: str = f"sqlite+aiosqlite:///{Path(__file__).resolve().parent.parent / 'data' / 'memorizer.db'}"
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]
    sqlite_busy_timeout_ms: int = 30000
    debug: bool = False

    model_config = {"env_prefix": "MEMORIZER_", "env_file": ".env"}


settings = Settings()
