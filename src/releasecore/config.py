"""Configuration contract for releasecore.

Pydantic-validated configuration models for the release/authorization core.
Embedding services construct a ReleaseCoreConfig directly or load it from the
environment with load_config_from_env(). Direct os.environ/os.getenv usage
outside this module is not allowed for any setting defined here.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

DEFAULT_MAX_DEPTH = 100


class LogLevel(str, Enum):
    """Standard log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class TreeConfig(BaseModel):
    """Bounds for dependency/authorization tree construction.

    Depth counts tree levels, not resources: a wide level does not consume
    more budget than a narrow one.
    """

    model_config = {"extra": "forbid"}

    max_depth: int = Field(
        default=DEFAULT_MAX_DEPTH,
        description="Default maximum depth for dependency tree queries",
    )
    auth_max_depth: int = Field(
        default=DEFAULT_MAX_DEPTH,
        description="Depth used when materializing the tree behind an authorization tree",
    )

    @field_validator("max_depth", "auth_max_depth")
    @classmethod
    def validate_depth(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Tree depth must be at least 1")
        return v


class SchemeConfig(BaseModel):
    """Release scheme orchestration settings."""

    model_config = {"extra": "forbid"}

    sign_on_create: bool = Field(
        default=True,
        description="Trigger contract signing right after a scheme is created or updated",
    )


class ReleaseCoreConfig(BaseModel):
    """Top-level configuration for releasecore."""

    # Logging
    log_level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Logging level",
    )
    log_json: bool = Field(
        default=False,
        description="Use JSON log format (default: plain text)",
    )

    service_name: Optional[str] = Field(
        default=None,
        description="Name of the embedding service, used as logger name",
    )

    tree: TreeConfig = Field(default_factory=TreeConfig)
    scheme: SchemeConfig = Field(default_factory=SchemeConfig)

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

    model_config = {
        "extra": "forbid",
    }


def _env_flag(value: str) -> bool:
    return value.strip().lower() in ("true", "1", "yes", "on")


def load_config_from_env() -> ReleaseCoreConfig:
    """Load configuration from environment variables.

    This is the ONLY place where os.getenv is allowed for these settings.

    Environment variables:
    - LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - LOG_JSON: Use JSON log format (true/false, default: false)
    - SERVICE_NAME: Embedding service name
    - TREE_MAX_DEPTH: Default dependency tree depth (default: 100)
    - TREE_AUTH_MAX_DEPTH: Depth behind authorization trees (default: 100)
    - SCHEME_SIGN_ON_CREATE: Sign contracts right after scheme writes (default: true)

    Returns:
        ReleaseCoreConfig instance with values from environment or defaults.

    Raises:
        ConfigurationError: when a numeric variable is not an integer.
    """
    import os

    from .exceptions import ConfigurationError

    def _int(name: str, default: int) -> int:
        raw = os.getenv(name)
        if raw is None or not raw.strip():
            return default
        try:
            return int(raw)
        except ValueError:
            raise ConfigurationError(f"{name} must be an integer, got {raw!r}", variable=name)

    return ReleaseCoreConfig(
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        log_json=_env_flag(os.getenv("LOG_JSON", "false")),
        service_name=os.getenv("SERVICE_NAME"),
        tree=TreeConfig(
            max_depth=_int("TREE_MAX_DEPTH", DEFAULT_MAX_DEPTH),
            auth_max_depth=_int("TREE_AUTH_MAX_DEPTH", DEFAULT_MAX_DEPTH),
        ),
        scheme=SchemeConfig(
            sign_on_create=_env_flag(os.getenv("SCHEME_SIGN_ON_CREATE", "true")),
        ),
    )


__all__ = [
    "DEFAULT_MAX_DEPTH",
    "LogLevel",
    "ReleaseCoreConfig",
    "SchemeConfig",
    "TreeConfig",
    "load_config_from_env",
]
