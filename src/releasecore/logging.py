"""Centralized logging utilities for releasecore.

This module provides:
- Logging configuration from ReleaseCoreConfig
- Bounded previews of tree/scheme payloads
- Structured logging with release/request context
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from .config import LogLevel, ReleaseCoreConfig

# Record attributes set by logging itself; everything else is an "extra".
_RESERVED_ATTRS = frozenset(
    {
        "name", "msg", "args", "created", "filename", "funcName",
        "levelname", "levelno", "lineno", "module", "msecs",
        "message", "pathname", "process", "processName", "relativeCreated",
        "thread", "threadName", "exc_info", "exc_text", "stack_info",
        "taskName", "release_id", "request_id",
    }
)


def safe_preview(value: Any, limit: int = 240) -> str:
    """Create a length-bounded, single-line preview of a value for logging.

    Resolve lists and trees can be large; logging them whole floods the logs.

    Args:
        value: The value to preview (any type)
        limit: Maximum length of the preview (default: 240)

    Returns:
        A truncated string representation
    """
    if value is None:
        return ""

    if isinstance(value, str):
        s = value
    elif isinstance(value, (dict, list, tuple)):
        try:
            s = json.dumps(value, default=str, ensure_ascii=False)
        except (TypeError, ValueError):
            s = str(value)
    elif hasattr(value, "model_dump"):
        s = json.dumps(value.model_dump(mode="json"), ensure_ascii=False)
    else:
        s = str(value)

    s = " ".join(s.split())

    if len(s) > limit:
        return s[: limit - 1] + "…"

    return s


class ReleaseFormatter(logging.Formatter):
    """Formatter that includes release/request context and optional JSON output."""

    def __init__(
        self,
        json_format: bool = True,
        *args: Any,
        **kwargs: Any,
    ):
        super().__init__(*args, **kwargs)
        self.json_format = json_format

    def format(self, record: logging.LogRecord) -> str:
        release_id = getattr(record, "release_id", None)
        request_id = getattr(record, "request_id", None)

        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if release_id:
            log_data["release_id"] = release_id
        if request_id:
            log_data["request_id"] = request_id

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_data[key] = safe_preview(value)

        if self.json_format:
            return json.dumps(log_data, default=str, ensure_ascii=False)

        parts = [
            f"[{log_data['timestamp']}]",
            log_data["level"],
            log_data["logger"],
        ]
        if release_id:
            parts.append(f"release_id={release_id}")
        if request_id:
            parts.append(f"request_id={request_id}")
        parts.append(f": {log_data['message']}")
        if "exception" in log_data:
            parts.append("\n" + log_data["exception"])
        return " ".join(parts)


class ReleaseLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that adds release_id and request_id to log records.

    Usage:
        logger = get_release_logger(__name__, release_id=release_id)
        logger.info("Scheme created", scheme_id=scheme.scheme_id)
    """

    def __init__(
        self,
        logger: logging.Logger,
        release_id: Optional[str] = None,
        request_id: Optional[str] = None,
    ):
        super().__init__(logger, {})
        self.release_id = release_id
        self.request_id = request_id

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        release_id = kwargs.pop("release_id", self.release_id)
        request_id = kwargs.pop("request_id", self.request_id)

        extra = dict(kwargs.get("extra") or {})
        # Remaining non-logging kwargs become structured fields.
        for key in list(kwargs):
            if key not in ("exc_info", "stack_info", "stacklevel", "extra"):
                extra[key] = kwargs.pop(key)
        if release_id:
            extra["release_id"] = release_id
        if request_id:
            extra["request_id"] = request_id
        kwargs["extra"] = extra

        return msg, kwargs


def setup_logging(
    config: Optional[ReleaseCoreConfig] = None,
    json_format: Optional[bool] = None,
) -> None:
    """Configure the root logger.

    Args:
        config: ReleaseCoreConfig instance (if None, loads from environment)
        json_format: Force JSON (True) or plain text (False); defaults to config.log_json
    """
    if config is None:
        from .config import load_config_from_env

        config = load_config_from_env()

    level_map = {
        LogLevel.DEBUG: logging.DEBUG,
        LogLevel.INFO: logging.INFO,
        LogLevel.WARNING: logging.WARNING,
        LogLevel.ERROR: logging.ERROR,
        LogLevel.CRITICAL: logging.CRITICAL,
    }
    log_level = level_map.get(LogLevel(config.log_level), logging.INFO)
    use_json = config.log_json if json_format is None else json_format

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(ReleaseFormatter(json_format=use_json))
    root_logger.addHandler(console_handler)

    if config.service_name:
        logging.getLogger(config.service_name).setLevel(log_level)


def get_release_logger(
    name: str,
    release_id: Optional[str] = None,
    request_id: Optional[str] = None,
) -> ReleaseLoggerAdapter:
    """Get a logger adapter carrying release/request context.

    Args:
        name: Logger name (typically __name__)
        release_id: Optional release id to include in all logs
        request_id: Optional request id to include in all logs
    """
    return ReleaseLoggerAdapter(logging.getLogger(name), release_id=release_id, request_id=request_id)


__all__ = [
    "safe_preview",
    "ReleaseFormatter",
    "ReleaseLoggerAdapter",
    "setup_logging",
    "get_release_logger",
]
