"""Pydantic models for parsing the config.yaml configuration file.

These models mirror the structure of config.yaml and handle validation and type
conversion of the rendered template.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, computed_field, model_validator
from sqlalchemy.engine import URL, make_url


class LoggingConfig(BaseModel):
    """Logging configuration model."""

    level: str | None = Field(
        default=None,
        description="Logging level; defaults to DEBUG outside production, INFO in production",
    )
    format: Literal["json", "plain"] | None = Field(
        default=None,
        description="Console format; defaults to json in production, plain elsewhere",
    )
    file: str | None = Field(default=None, description="Optional log file path")
    max_size_mb: int = Field(default=10, description="Maximum log file size in MB")
    backup_count: int = Field(
        default=5, description="Number of rotated log files to keep"
    )


class DatabaseConfig(BaseModel):
    """Database connection and pool configuration."""

    url: str | None = Field(
        default=None,
        description="Full connection URL; overrides the individual connection fields",
    )
    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    user: str = Field(default="postgres", description="Database username")
    password: str = Field(default="postgres", description="Database password")
    name: str = Field(default="ewallet_ums", description="Database name")
    ssl_mode: str = Field(default="disable", description="SSL mode passed to the driver")

    max_open_conns: int = Field(default=25, ge=1, description="Maximum open connections")
    max_idle_conns: int = Field(default=10, ge=1, description="Maximum idle connections")
    conn_max_lifetime: int = Field(
        default=300, ge=1, description="Maximum connection lifetime in seconds"
    )
    conn_max_idle_time: int = Field(
        default=60, ge=1, description="Maximum idle time of a pooled connection in seconds"
    )
    pool_timeout: int = Field(
        default=30, description="Seconds to wait for a free pooled connection"
    )
    ping_timeout: float = Field(
        default=5.0, description="Timeout of the post-connect liveness check in seconds"
    )
    query_timeout: float | None = Field(
        default=None, description="Default timeout of a repository round trip in seconds"
    )
    migrations_dir: str = Field(
        default="migrations", description="Alembic script directory"
    )

    @model_validator(mode="after")
    def _check_pool_bounds(self) -> DatabaseConfig:
        if self.max_idle_conns > self.max_open_conns:
            raise ValueError("max_idle_conns cannot exceed max_open_conns")
        return self

    @computed_field
    @property
    def connection_string(self) -> str:
        """Async SQLAlchemy URL, rendered with the password in clear."""
        if self.url:
            base_url = make_url(self.url)
            if base_url.drivername in ("postgres", "postgresql"):
                base_url = base_url.set(drivername="postgresql+asyncpg")
            return base_url.render_as_string(hide_password=False)

        url = URL.create(
            drivername="postgresql+asyncpg",
            username=self.user,
            password=self.password,
            host=self.host,
            port=self.port,
            database=self.name,
            query={"ssl": self.ssl_mode},
        )
        return url.render_as_string(hide_password=False)

    @property
    def is_postgres(self) -> bool:
        return make_url(self.connection_string).get_backend_name() == "postgresql"


class AppConfig(BaseModel):
    """Application configuration model."""

    environment: Literal["development", "production", "test"] = Field(
        default="development", description="Application environment"
    )
    host: str = Field(default="0.0.0.0", description="Listening host")
    port: int = Field(default=8080, description="Listening port")
    request_timeout: float = Field(
        default=60.0, gt=0, description="Per-request timeout in seconds"
    )
    shutdown_timeout: float = Field(
        default=30.0, gt=0, description="Graceful shutdown drain timeout in seconds"
    )


class ConfigData(BaseModel):
    """Root configuration model that matches the config.yaml structure."""

    app: AppConfig = Field(
        default_factory=AppConfig, description="Application configuration"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
    database: DatabaseConfig = Field(
        default_factory=DatabaseConfig, description="Database configuration"
    )
