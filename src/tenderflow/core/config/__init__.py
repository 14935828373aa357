"""Configuration loading and validation."""

from .models import (
    AppConfig,
    DatabaseConfig,
    LoggingConfig,
    PaginationConfig,
    VersioningConfig,
)
from .loader import ConfigError, load_app_config

__all__ = [
    # Config models
    "AppConfig",
    "DatabaseConfig",
    "LoggingConfig",
    "PaginationConfig",
    "VersioningConfig",
    # Loaders
    "ConfigError",
    "load_app_config",
]
