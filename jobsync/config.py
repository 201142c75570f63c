"""Client configuration and settings."""
from enum import Enum
from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class ReadReceiptPolicy(str, Enum):
    """How mark-as-read reconciles local state with the server."""

    LOCAL_FIRST = "local_first"
    NETWORK_FIRST = "network_first"


class Settings(BaseSettings):
    """Central configuration for the access layer."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    api_origins: list[str] = ["http://10.184.72.116:4000", "http://localhost:4000"]
    api_prefix: str = "/api"
    health_path: str = "/health"

    standard_timeout_seconds: float = 10.0
    probe_timeout_seconds: float = 3.0
    upload_timeout_seconds: float = 30.0

    database_url: str = "sqlite+aiosqlite:///./data/jobsync.db"
    data_directory: Path = Path("data")

    read_receipt_policy: ReadReceiptPolicy = ReadReceiptPolicy.LOCAL_FIRST
    deduplicate_inflight_mutations: bool = True
    recommended_jobs_limit: int = 10

    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""

    settings = Settings()
    settings.data_directory.mkdir(parents=True, exist_ok=True)
    return settings
