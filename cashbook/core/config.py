from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment with defaults.

    Environment variable mapping follows pydantic's rules (e.g., APP_NAME, DEBUG,
    DATA_DIR, DB_FILENAME, CIVIL_TIMEZONE, QUERY_CACHE_TTL_SECONDS).
    """

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Basic app metadata
    app_name: str = "Cash Book"
    debug: bool = True
    version: str = "0.1.0"
    host: str = "127.0.0.1"
    port: int = 8000

    # Data & persistence
    data_dir: Path = Path("data")
    db_filename: str = "cashbook.sqlite3"
    db_path: Optional[Path] = None  # derived if not provided

    # Civil calendar: month boundaries and "today" are read in this zone
    civil_timezone: str = "Asia/Dhaka"
    week_start: Literal["saturday", "sunday", "monday"] = "saturday"
    recent_days: int = 7
    # Longest custom window the daily and series views will scan
    max_window_days: int = 366

    # Auth sessions
    session_ttl_minutes: int = 60 * 24 * 7
    min_password_length: int = 6

    # Cached per-user query results
    query_cache_ttl_seconds: int = 300
    query_cache_max_entries: int = 1024

    # Reports
    report_currency_symbol: str = "৳"

    @field_validator("civil_timezone")
    @classmethod
    def _known_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"unknown timezone '{v}'") from exc
        return v

    def init_post_load(self) -> None:
        """Finalize derived fields and ensure directories exist."""
        if self.db_path is None:
            self.db_path = self.data_dir / self.db_filename
        self.data_dir.mkdir(parents=True, exist_ok=True)
        if self.recent_days < 1:
            raise ValueError("recent_days must be at least 1")
        if self.max_window_days < 1:
            raise ValueError("max_window_days must be at least 1")
        if self.query_cache_ttl_seconds < 0:
            raise ValueError("query_cache_ttl_seconds cannot be negative")
        if self.query_cache_max_entries < 1:
            raise ValueError("query_cache_max_entries must be at least 1")


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    settings.init_post_load()
    return settings
