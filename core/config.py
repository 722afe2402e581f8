"""
Centralized configuration for the CPG Performance Dashboard API.

This module provides a single source of truth for all configuration values.
Configuration is loaded from environment variables (``.env`` first, then
``.env.local`` overriding it) with sensible defaults.

Usage:
    from core.config import config

    uri = config.mongo.uri
    port = config.web.port
"""

import os
from dataclasses import dataclass, field
from typing import List

from dotenv import load_dotenv

# Load .env, then let .env.local override it
load_dotenv()
load_dotenv(".env.local", override=True)


def _env_flag(name: str, default: bool) -> bool:
    """Parse a boolean environment variable (1/true/yes/on)."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str, default: List[str]) -> List[str]:
    """Parse a comma-separated environment variable."""
    raw = os.getenv(name, "")
    values = [item.strip() for item in raw.split(",") if item.strip()]
    return values or list(default)


DEFAULT_CORS_ORIGINS = [
    "https://cpg-dashboard-frontend.onrender.com",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]


@dataclass(frozen=True)
class MongoConfig:
    """MongoDB connection configuration."""

    uri: str = field(default_factory=lambda: os.getenv("MONGODB_URI", ""))
    database: str = field(default_factory=lambda: os.getenv("MONGODB_DB", ""))
    server_selection_timeout_ms: int = field(
        default_factory=lambda: int(os.getenv("MONGODB_TIMEOUT_MS", "10000"))
    )

    @property
    def is_configured(self) -> bool:
        return bool(self.uri and self.database)


@dataclass(frozen=True)
class WebConfig:
    """HTTP server configuration."""

    host: str = field(default_factory=lambda: os.getenv("HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: int(os.getenv("PORT", "3001")))
    environment: str = field(
        default_factory=lambda: os.getenv("APP_ENV") or os.getenv("NODE_ENV") or "development"
    )
    cors_origins: List[str] = field(
        default_factory=lambda: _env_list("CORS_ORIGINS", DEFAULT_CORS_ORIGINS)
    )
    cors_methods: List[str] = field(
        default_factory=lambda: ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]
    )
    cors_headers: List[str] = field(default_factory=lambda: ["Content-Type", "Authorization"])

    # Rate limiting. Off by default: behind a proxy every dashboard user
    # shares one remote address, and each filter change fires every endpoint.
    rate_limit_enabled: bool = field(default_factory=lambda: _env_flag("RATE_LIMIT_ENABLED", False))
    rate_limit_metrics: str = field(
        default_factory=lambda: os.getenv("RATE_LIMIT_METRICS", "600/minute")
    )
    rate_limit_meta: str = field(default_factory=lambda: os.getenv("RATE_LIMIT_META", "600/minute"))

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


@dataclass(frozen=True)
class LoggingConfig:
    """Logging configuration."""

    level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    format: str = field(default_factory=lambda: os.getenv("LOG_FORMAT", "text"))

    @property
    def json_format(self) -> bool:
        return self.format.lower() == "json"


@dataclass(frozen=True)
class MetricsConfig:
    """Metric computation settings."""

    # Hardcoded last step of every fallback cascade. These numbers mask a
    # field-mapping gap in the fact collections; turn off to surface zeros.
    placeholders: bool = field(default_factory=lambda: _env_flag("FALLBACK_PLACEHOLDERS", True))

    # Response colors
    primary_color: str = "#14B8A6"
    day_one_color: str = "#059669"


@dataclass(frozen=True)
class AppConfig:
    """Main application configuration."""

    version: str = "1.0.0"
    mongo: MongoConfig = field(default_factory=MongoConfig)
    web: WebConfig = field(default_factory=WebConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    metrics: MetricsConfig = field(default_factory=MetricsConfig)


# Global config instance
config = AppConfig()

VERSION = config.version


class ConfigurationError(Exception):
    """Raised when required configuration is missing or invalid."""
    pass


def validate_config(app_config: AppConfig = None) -> None:
    """
    Validate that all required configuration is present.

    Args:
        app_config: Configuration to check (default: the global config)

    Raises:
        ConfigurationError: If required configuration is missing
    """
    cfg = app_config or config
    errors = []

    if not cfg.mongo.uri:
        errors.append("MONGODB_URI is required but not set")
    if not cfg.mongo.database:
        errors.append("MONGODB_DB is required but not set")

    if cfg.mongo.uri and not cfg.mongo.uri.startswith(("mongodb://", "mongodb+srv://")):
        errors.append("MONGODB_URI appears to be invalid (expected mongodb:// or mongodb+srv://)")

    if cfg.mongo.server_selection_timeout_ms <= 0:
        errors.append("MONGODB_TIMEOUT_MS must be positive")

    if errors:
        error_msg = "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
        raise ConfigurationError(error_msg)
