"""Configuration and environment settings for the Extracto Normalizer."""

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings for the Extracto Normalizer."""

    database_url: str = "sqlite:///jobs/jobs.db"
    jobs_dir: str = "jobs"
    log_file: str = "jobs/extracto.log"
    storage_backend: Literal["local", "s3"] = "local"
    S3_ENDPOINT_URL: str | None = None
    S3_ACCESS_KEY: str | None = None
    S3_SECRET_KEY: str | None = None
    S3_BUCKET: str = "extractos"
    S3_PREFIX: str = ""
    rules_file: str | None = None
    date_pattern: str = "yyyy/MM/dd"
    reconcile_date_window_days: int = 3
    reconcile_similarity_threshold: float = 0.85
    server_host: str = "127.0.0.1"
    server_port: int = 8000

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


def get_settings() -> "Settings":
    """Return an instance of the application settings."""
    return Settings()
