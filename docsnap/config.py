"""
Configuration for docsnap.

Uses pydantic-settings for environment variable loading. Every setting has
a default suitable for local development; a `.env` file in the working
directory is read as well.

Invariants:
    - Credentials embedded in MongoDB URIs are never logged or returned
    - Timeouts are strictly positive

How to change safely:
    - Add new settings with defaults that keep existing deployments working
    - Keep MONGODB_URI accepted as an alias, older deployments rely on it
"""

from __future__ import annotations

import logging
from pathlib import Path
from urllib.parse import urlsplit, urlunsplit

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


def redact_uri(uri: str) -> str:
    """Strip the password from a connection URI."""
    parts = urlsplit(uri)
    if not parts.password:
        return uri
    host = parts.hostname or ""
    if parts.port:
        host = f"{host}:{parts.port}"
    netloc = f"{parts.username}:***@{host}" if parts.username else host
    return urlunsplit((parts.scheme, netloc, parts.path, parts.query, parts.fragment))


class Settings(BaseSettings):
    """docsnap configuration loaded from environment."""

    # Source deployment (the one being backed up)
    mongodb_uri: str = Field(
        default="mongodb://localhost:27017",
        validation_alias=AliasChoices("DOCSNAP_MONGODB_URI", "MONGODB_URI"),
        description="URI of the store to back up",
    )
    # Restore target (usually a local instance)
    restore_target_uri: str = Field(
        default="mongodb://127.0.0.1:27017",
        description="URI of the store snapshots are restored into",
    )
    max_pool_size: int = Field(default=10, description="Max pooled store connections")
    store_timeout_ms: int = Field(default=30000, description="Per-operation store timeout")
    server_selection_timeout_ms: int = Field(
        default=5000, description="How long to wait for a reachable server"
    )

    # Snapshot storage
    backups_dir: Path = Field(default=Path("backups"), description="Snapshot root directory")
    file_io_timeout_seconds: float = Field(
        default=60.0, description="Deadline for reading or writing one snapshot file"
    )

    # HTTP settings
    host: str = Field(default="0.0.0.0", description="Bind host")
    port: int = Field(default=3000, description="Bind port")
    public_base_url: str | None = Field(
        default=None, description="Base URL used in response links"
    )
    cors_origins: list[str] = Field(
        default=["http://localhost:3000"],
        description="Allowed CORS origins",
    )
    debug: bool = Field(default=False, description="Echo raw internal errors to clients")

    # Observability
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Log format (json, text)")

    model_config = SettingsConfigDict(
        env_prefix="DOCSNAP_",
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("store_timeout_ms", "server_selection_timeout_ms", "max_pool_size")
    @classmethod
    def _positive_int(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("must be greater than zero")
        return value

    @field_validator("file_io_timeout_seconds")
    @classmethod
    def _positive_float(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("must be greater than zero")
        return value

    @field_validator("log_format")
    @classmethod
    def _known_format(cls, value: str) -> str:
        value = value.lower()
        if value not in ("json", "text"):
            raise ValueError("must be one of: json, text")
        return value

    @field_validator("public_base_url")
    @classmethod
    def _strip_slash(cls, value: str | None) -> str | None:
        return value.rstrip("/") if value else value

    @property
    def base_url(self) -> str:
        """Base URL for links in responses."""
        return self.public_base_url or f"http://localhost:{self.port}"

    def log_config(self) -> None:
        """Log configuration (redacting secrets)."""
        logger.info(
            "Configuration loaded",
            extra={
                "mongodb_uri": redact_uri(self.mongodb_uri),
                "restore_target_uri": redact_uri(self.restore_target_uri),
                "backups_dir": str(self.backups_dir),
                "bind": f"{self.host}:{self.port}",
                "base_url": self.base_url,
                "store_timeout_ms": self.store_timeout_ms,
                "debug": self.debug,
                "log_level": self.log_level,
            },
        )
