"""
Configuration settings for the price archive service.

Uses Pydantic Settings to load environment variables for the PostgreSQL
connection, the HTTP listener, logging, and the archive naming convention.
Defaults match a local development database.
"""
from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Database
    db_host: str = Field("localhost", alias="POSTGRES_HOST")
    db_port: int = Field(5432, alias="POSTGRES_PORT")
    db_user: str = Field("validator", alias="POSTGRES_USER")
    db_password: str = Field("val1dat0r", alias="POSTGRES_PASSWORD")
    db_name: str = Field("project-sem-1", alias="POSTGRES_DB")
    db_pool_min_size: int = Field(1, alias="DB_POOL_MIN_SIZE")
    db_pool_max_size: int = Field(10, alias="DB_POOL_MAX_SIZE")
    db_statement_timeout_ms: int = Field(30_000, alias="DB_STATEMENT_TIMEOUT_MS")

    # Application
    app_env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")
    log_access: bool = Field(True, alias="LOG_ACCESS")

    # HTTP listener
    server_host: str = Field("0.0.0.0", alias="SERVER_HOST")
    server_port: int = Field(8080, alias="SERVER_PORT")
    max_upload_bytes: int = Field(32 << 20, alias="MAX_UPLOAD_BYTES")

    # Archive layout
    payload_name: str = Field("data.csv", alias="PAYLOAD_NAME")
    payload_extension: str = Field(".csv", alias="PAYLOAD_EXTENSION")
    export_archive_name: str = Field("prices.zip", alias="EXPORT_ARCHIVE_NAME")
    export_batch_size: int = Field(1_000, alias="EXPORT_BATCH_SIZE")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "get_settings"]
