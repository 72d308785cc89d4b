"""Configuration management for the database gateway."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseConfig(BaseModel):
    """Database file configuration."""

    path: Path = Field(default=Path("gateway.db"), description="SQLite database file path")
    schema_version: int = Field(
        default=0, ge=0, le=2**63 - 1, description="Target schema version (PRAGMA user_version)"
    )
    busy_timeout_seconds: float = Field(
        default=5.0, ge=0.0, description="Seconds a connection waits on a locked file"
    )


class ExecutionConfig(BaseModel):
    """Background execution configuration."""

    thread_name_prefix: str = Field(
        default="db_gateway", description="Name prefix of the serialized worker thread"
    )


class ObservabilityConfig(BaseModel):
    """Observability configuration."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Log level"
    )
    log_format: Literal["json", "console"] = Field(default="json", description="Log format")
    metrics_port: int | None = Field(
        default=None, ge=1, le=65535, description="Prometheus metrics port (disabled if unset)"
    )
    otel_endpoint: str | None = Field(
        default=None, description="OpenTelemetry collector endpoint"
    )
    otel_service_name: str = Field(default="db_gateway", description="Service name for tracing")


class Config(BaseSettings):
    """Main configuration for the database gateway."""

    model_config = SettingsConfigDict(
        env_prefix="DB_GATEWAY_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    execution: ExecutionConfig = Field(default_factory=ExecutionConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    def ensure_directories(self) -> None:
        """Ensure the directory holding the database file exists."""
        self.database.path.parent.mkdir(parents=True, exist_ok=True)


@lru_cache
def get_config() -> Config:
    """Get the global configuration instance."""
    config = Config()
    config.ensure_directories()
    return config
