"""Configuration contract for accesscore.

Pydantic-validated settings for the decision engine and its policy store.
Direct os.environ/os.getenv usage is only allowed inside
``load_access_config_from_env()``; everything else receives an
``AccessConfig`` instance.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class LogLevel(str, Enum):
    """Standard log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class StoreBackend(str, Enum):
    """Supported policy store backends."""

    MEMORY = "memory"
    REDIS = "redis"


class AccessConfig(BaseModel):
    """Settings for the authorization engine and its policy store."""

    # Logging
    log_level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Logging level",
    )
    log_json: bool = Field(
        default=False,
        description="Use JSON log format (default: plain text)",
    )

    # Policy store
    store_backend: StoreBackend = Field(
        default=StoreBackend.MEMORY,
        description="Policy store backend: memory (tests, single process) or redis",
    )
    redis_url: Optional[str] = Field(
        default=None,
        description="Redis connection URL (e.g., redis://localhost:6379/0)",
    )
    redis_key_prefix: str = Field(
        default="accesscore:policy",
        description="Prefix for all policy keys in Redis",
    )
    store_timeout_seconds: float = Field(
        default=2.0,
        gt=0,
        description="Socket timeout for store reads. A timed-out read denies.",
    )

    # Decision engine
    global_admin_only_modules: list[str] = Field(
        default_factory=lambda: ["userassignment"],
        description="Modules the tenant admin role may never touch",
    )

    @field_validator("redis_url")
    @classmethod
    def validate_redis_url(cls, v: Optional[str]) -> Optional[str]:
        """Validate Redis URL format."""
        if v is None:
            return v
        if not v.startswith(("redis://", "rediss://", "unix://")):
            raise ValueError("Redis URL must start with redis://, rediss://, or unix://")
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str | LogLevel) -> LogLevel:
        """Convert string to LogLevel enum."""
        if isinstance(v, LogLevel):
            return v
        if isinstance(v, str):
            try:
                return LogLevel[v.upper()]
            except KeyError:
                raise ValueError(f"Invalid log level: {v}. Must be one of {[e.value for e in LogLevel]}")
        raise ValueError(f"Log level must be string or LogLevel enum, got {type(v)}")

    @field_validator("store_backend", mode="before")
    @classmethod
    def validate_store_backend(cls, v: str | StoreBackend) -> StoreBackend:
        if isinstance(v, StoreBackend):
            return v
        try:
            return StoreBackend(str(v).lower())
        except ValueError:
            raise ValueError(f"Invalid store backend: {v}. Must be one of {[e.value for e in StoreBackend]}")

    model_config = {
        "extra": "forbid",  # Prevent accidental extra fields
    }


def load_access_config_from_env() -> AccessConfig:
    """Load configuration from environment variables.

    This is the ONLY place where os.getenv is allowed.

    Environment variables:
    - LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - LOG_JSON: Use JSON log format (true/false, default: false)
    - ACCESS_STORE_BACKEND: memory | redis
    - REDIS_URL: Redis connection URL
    - ACCESS_REDIS_PREFIX: Key prefix for policy documents
    - ACCESS_STORE_TIMEOUT: Store read timeout in seconds
    - ACCESS_GLOBAL_ADMIN_ONLY: Comma-separated module ids reserved for global admins

    Returns:
        AccessConfig instance with values from environment or defaults.
    """
    import os

    kwargs: dict = {
        "log_level": os.getenv("LOG_LEVEL", "INFO"),
        "log_json": os.getenv("LOG_JSON", "false").lower() in ("true", "1", "yes"),
        "store_backend": os.getenv("ACCESS_STORE_BACKEND", "memory"),
        "redis_url": os.getenv("REDIS_URL"),
        "redis_key_prefix": os.getenv("ACCESS_REDIS_PREFIX", "accesscore:policy"),
        "store_timeout_seconds": float(os.getenv("ACCESS_STORE_TIMEOUT", "2.0")),
    }

    global_only_raw = os.getenv("ACCESS_GLOBAL_ADMIN_ONLY")
    if global_only_raw is not None:
        kwargs["global_admin_only_modules"] = [m.strip() for m in global_only_raw.split(",") if m.strip()]

    return AccessConfig(**kwargs)


__all__ = [
    "AccessConfig",
    "LogLevel",
    "StoreBackend",
    "load_access_config_from_env",
]
