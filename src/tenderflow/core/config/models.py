"""
Pydantic configuration models for Tenderflow.

These models provide type-safe configuration with validation for:
- Database connection and bootstrap
- Logging
- Listing pagination defaults
- Optimistic-lock retries for versioned writes
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator


# =============================================================================
# Database Configuration
# =============================================================================


class DatabaseConfig(BaseModel):
    """Database connection settings."""

    url: str = Field(
        default="sqlite:///data/tenderflow.db",
        description="SQLAlchemy database URL",
    )
    echo: bool = Field(
        default=False,
        description="Echo SQL statements (debugging)",
    )
    pool_size: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Connection pool size",
    )
    connect_attempts: int = Field(
        default=3,
        ge=1,
        le=20,
        description="Connection attempts at startup before giving up",
    )
    connect_timeout_seconds: float = Field(
        default=5.0,
        ge=0.0,
        le=120.0,
        description="Delay between startup connection attempts",
    )


# =============================================================================
# Logging Configuration
# =============================================================================


class LoggingConfig(BaseModel):
    """Logging settings."""

    level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR)",
    )
    file: Path | None = Field(
        default=Path("logs/tenderflow.log"),
        description="Log file path",
    )
    json_format: bool = Field(
        default=True,
        description="Use JSON format for file logs",
    )
    rich_console: bool = Field(
        default=True,
        description="Use Rich for console output",
    )

    @field_validator("level")
    @classmethod
    def known_level(cls, v: str) -> str:
        """Normalize and check the level name."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {v}")
        return level


# =============================================================================
# Pagination Configuration
# =============================================================================


class PaginationConfig(BaseModel):
    """Defaults for listing operations."""

    default_limit: int = Field(
        default=5,
        ge=0,
        description="Page size used when a caller omits limit",
    )
    max_limit: int = Field(
        default=50,
        ge=1,
        description="Largest page size a caller may request",
    )

    @field_validator("max_limit")
    @classmethod
    def max_gte_default(cls, v: int, info: Any) -> int:
        """Ensure max limit is at least the default limit."""
        default_limit = info.data.get("default_limit", 0)
        if v < default_limit:
            raise ValueError("max_limit must be >= default_limit")
        return v


# =============================================================================
# Versioning Configuration
# =============================================================================


class VersioningConfig(BaseModel):
    """Versioned write settings."""

    max_write_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts for a write that loses an optimistic-lock race",
    )


# =============================================================================
# Application Configuration
# =============================================================================


class AppConfig(BaseModel):
    """Root application configuration.

    This is the main configuration object loaded from app.yaml.
    """

    data_dir: Path = Field(
        default=Path("data"),
        description="Data storage directory",
    )

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    pagination: PaginationConfig = Field(default_factory=PaginationConfig)
    versioning: VersioningConfig = Field(default_factory=VersioningConfig)

    def ensure_directories(self) -> None:
        """Create required directories if they don't exist."""
        self.data_dir.mkdir(parents=True, exist_ok=True)

        if self.logging.file:
            self.logging.file.parent.mkdir(parents=True, exist_ok=True)
