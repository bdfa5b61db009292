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
    app_name: str = "Phrase SRS"
    database_url: str = f"sqlite+aiosqlite:///{Path(__file__).resolve().parent.parent / 'data' / 'phrase_srs.db'}"
    default_queue_limit: int = 20
    max_queue_limit: int = 100
    queue_overfetch_factor: int = 2  # candidates fetched per queue slot before re-sorting
    initial_easiness_factor: float = 2.5
    min_easiness_factor: float = 1.3
    timezone: str = "UTC"  # IANA zone whose calendar day bounds due/overdue stats
    debug: bool = False

    model_config = {"env_prefix": "PHRASE_SRS_", "env_file": ".env"}


settings = Settings()
