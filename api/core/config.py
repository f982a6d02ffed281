"""
Process-wide settings.

Built once at startup (`get_settings()` is cached) and handed to the DB pool,
the storage backend and the CORS middleware.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024  # 10 MiB

STORAGE_BACKENDS = {"local", "s3"}


class Settings(BaseSettings):
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"

    database_url: str = ""
    db_pool_min_size: int = 1
    db_pool_max_size: int = 5
    db_command_timeout: float = 30.0
    init_schema: bool = True

    storage_backend: str = "local"
    upload_path: str = "uploads"
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES

    s3_bucket_name: str = ""
    aws_region: str = "us-east-1"
    aws_access_key_id: str | None = None
    aws_secret_access_key: str | None = None
    s3_endpoint_url: str | None = None
    # Overrides the derived public URL prefix (e.g. a CDN in front of the bucket).
    s3_public_base_url: str | None = None

    # Comma separated in the environment.
    cors_origins: str = "http://localhost:5173"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("storage_backend")
    @classmethod
    def _normalize_backend(cls, value: str) -> str:
        value = (value or "").strip().lower()
        if value not in STORAGE_BACKENDS:
            raise ValueError(f"STORAGE_BACKEND must be one of {sorted(STORAGE_BACKENDS)}.")
        return value

    @field_validator("max_upload_bytes")
    @classmethod
    def _positive_upload_limit(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("MAX_UPLOAD_BYTES must be > 0.")
        return value

    @model_validator(mode="after")
    def _bucket_required_for_s3(self) -> "Settings":
        if self.storage_backend == "s3" and not self.s3_bucket_name.strip():
            raise ValueError("S3_BUCKET_NAME is required when STORAGE_BACKEND=s3.")
        return self

    @property
    def allowed_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()
