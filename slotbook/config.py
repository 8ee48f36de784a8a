"""
Centralized configuration with environment variable overrides.

Slot granularity, storage backend, and API binding are all configurable
here. Nothing is hardcoded in engine or service logic.
"""

import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from slotbook.logging_context import RequestIdFilter

load_dotenv()

logger = logging.getLogger(__name__)

STORE_BACKENDS = ("memory", "sql")
MINUTES_PER_DAY = 24 * 60


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_bool(env_var: str, default: str) -> bool:
    """Parse a boolean flag from an env var ("true"/"false", "1"/"0")."""
    raw = os.getenv(env_var, default).strip().lower()
    if raw in ("true", "1", "yes"):
        return True
    if raw in ("false", "0", "no", ""):
        return False
    raise ValueError(f"Invalid boolean for {env_var}: {raw!r}")


@dataclass(frozen=True)
class SchedulingConfig:
    """Slot generation settings."""

    slot_granularity_minutes: int = _safe_int("SLOT_GRANULARITY_MINUTES", "60")
    booking_horizon_days: int = _safe_int("BOOKING_HORIZON_DAYS", "60")


@dataclass(frozen=True)
class StorageConfig:
    """Appointment store backend selection."""

    backend: str = os.getenv("STORE_BACKEND", "memory")
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./slotbook.db")
    echo: bool = _safe_bool("DB_ECHO", "false")
    catalog_file: str = os.getenv("CATALOG_FILE", "")


@dataclass(frozen=True)
class ApiConfig:
    """HTTP server binding."""

    host: str = os.getenv("API_HOST", "127.0.0.1")
    port: int = _safe_int("API_PORT", "8000")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    scheduling: SchedulingConfig = field(default_factory=SchedulingConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    api: ApiConfig = field(default_factory=ApiConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    app_name: str = os.getenv("APP_NAME", "slotbook")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    granularity = config.scheduling.slot_granularity_minutes
    if not 1 <= granularity <= MINUTES_PER_DAY:
        raise ValueError(
            f"SLOT_GRANULARITY_MINUTES must be between 1 and {MINUTES_PER_DAY}, got {granularity}"
        )
    if config.scheduling.booking_horizon_days < 1:
        raise ValueError(
            f"BOOKING_HORIZON_DAYS must be >= 1, got {config.scheduling.booking_horizon_days}"
        )
    if config.storage.backend not in STORE_BACKENDS:
        raise ValueError(
            f"STORE_BACKEND must be one of {STORE_BACKENDS}, got {config.storage.backend!r}"
        )
    if config.storage.backend == "sql" and not config.storage.database_url:
        raise ValueError("DATABASE_URL is required when STORE_BACKEND is 'sql'")
    if not 0 < config.api.port < 65536:
        raise ValueError(f"API_PORT must be between 1 and 65535, got {config.api.port}")


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s [%(request_id)s %(request_route)s]: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, RequestIdFilter) for f in handler.filters):
            handler.addFilter(RequestIdFilter())
    logger.info("Configuration loaded for '%s'", config.app_name)
    return config


# Singleton instance
settings = load_config()
