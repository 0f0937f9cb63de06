"""Centralized logging utilities for accesscore.

This module provides:
- Logging configuration from AccessConfig
- Bounded, redacted rendering of policy documents for log lines
- Secret redaction
- Structured logging with tenant_id / principal_id propagation
"""

from __future__ import annotations

import json
import logging
import re
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel

from .config import AccessConfig, LogLevel


_CONTEXT_FIELDS = ("tenant_id", "principal_id")

_RESERVED_ATTRS = {
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "message", "pathname", "process", "processName", "relativeCreated",
    "thread", "threadName", "exc_info", "exc_text", "stack_info",
    "taskName", *_CONTEXT_FIELDS,
}


# Credentials that can reach a log line: redis URL passwords, tokens and keys
_SECRET_PATTERNS = tuple(
    re.compile(pattern)
    for pattern in (
        r"(?i)(?:password|passwd|secret|token|api[_-]?key)\s*[:=]\s*[\"']?[^\"'\s,}]+",
        r"(?i)\b(?:bearer|basic)\s+[a-zA-Z0-9+/=._-]+",
        r"(?i)rediss?://[^:@/\s]*:[^@/\s]+@",
    )
)

_MAX_VALUE_CHARS = 240


def redact_secrets(text: str, replacement: str = "[REDACTED]") -> str:
    """Mask credentials in a log string. Non-strings are returned unchanged."""
    if not isinstance(text, str):
        return text
    for pattern in _SECRET_PATTERNS:
        text = pattern.sub(replacement, text)
    return text


def _json_default(value: Any) -> Any:
    if isinstance(value, (set, frozenset)):
        return sorted(str(v) for v in value)
    if isinstance(value, Enum):
        return value.value
    return str(value)


def safe_log_value(value: Any, limit: int = _MAX_VALUE_CHARS, redact: bool = True) -> str:
    """Render ``value`` as one bounded, log-safe line.

    Role, policy and override documents (dicts or pydantic models) are
    dumped as compact JSON with sorted keys, so one policy always logs the
    same way. Redaction runs before truncation so a secret is never left
    half-visible at the cut.

    Example::

        safe_log_value({"accessType": "whitelist", "allowedResources": {"b", "a"}})
        # '{"accessType":"whitelist","allowedResources":["a","b"]}'
    """
    if value is None:
        return ""
    if isinstance(value, BaseModel):
        value = value.model_dump(by_alias=True)

    if isinstance(value, (dict, list, tuple, set, frozenset)):
        try:
            text = json.dumps(
                value, default=_json_default, sort_keys=True, separators=(",", ":"), ensure_ascii=False
            )
        except (TypeError, ValueError):
            text = " ".join(str(value).split())
    else:
        text = " ".join(str(value).split())

    if redact:
        text = redact_secrets(text)
    if len(text) > limit:
        text = text[: limit - 1] + "…"
    return text


class AccessLogFormatter(logging.Formatter):
    """Formatter that adds tenant/principal context and optional JSON output."""

    def __init__(
        self,
        include_context: bool = True,
        json_format: bool = True,
        redact_secrets: bool = True,
        *args: Any,
        **kwargs: Any,
    ):
        super().__init__(*args, **kwargs)
        self.include_context = include_context
        self.json_format = json_format
        self.redact_secrets = redact_secrets

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        context: dict[str, str] = {}
        if self.include_context:
            for key in _CONTEXT_FIELDS:
                value = getattr(record, key, None)
                if value:
                    context[key] = str(value)
        log_data.update(context)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_data[key] = safe_log_value(value, redact=self.redact_secrets)

        if self.redact_secrets:
            log_data["message"] = redact_secrets(log_data["message"])

        if self.json_format:
            return json.dumps(log_data, default=str, ensure_ascii=False)

        parts = [
            f"[{log_data['timestamp']}]",
            f"{log_data['level']}",
            f"{log_data['logger']}",
        ]
        parts.extend(f"{key}={value}" for key, value in context.items())
        parts.append(f": {log_data['message']}")
        return " ".join(parts)


class AccessLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that adds tenant_id and principal_id to log records.

    Usage:
        logger = get_access_logger(__name__, tenant_id="church-1")
        logger.warning("Role %s not found", name, principal_id="u-42")
    """

    def __init__(
        self,
        logger: logging.Logger,
        tenant_id: Optional[str] = None,
        principal_id: Optional[str] = None,
    ):
        super().__init__(logger, {})
        self.tenant_id = tenant_id
        self.principal_id = principal_id

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        tenant_id = kwargs.pop("tenant_id", self.tenant_id)
        principal_id = kwargs.pop("principal_id", self.principal_id)

        extra = kwargs.get("extra", {})
        if tenant_id:
            extra["tenant_id"] = tenant_id
        if principal_id:
            extra["principal_id"] = principal_id
        kwargs["extra"] = extra

        return msg, kwargs


def setup_logging(
    config: Optional[AccessConfig] = None,
    json_format: Optional[bool] = None,
    redact_secrets: bool = True,
) -> None:
    """Configure the root logger from AccessConfig.

    Args:
        config: AccessConfig instance (if None, loads from environment)
        json_format: Override config.log_json
        redact_secrets: Whether to redact secrets (default: True)
    """
    if config is None:
        from .config import load_access_config_from_env
        config = load_access_config_from_env()

    level_map = {
        LogLevel.DEBUG: logging.DEBUG,
        LogLevel.INFO: logging.INFO,
        LogLevel.WARNING: logging.WARNING,
        LogLevel.ERROR: logging.ERROR,
        LogLevel.CRITICAL: logging.CRITICAL,
    }
    log_level = level_map.get(config.log_level, logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(
        AccessLogFormatter(
            include_context=True,
            json_format=config.log_json if json_format is None else json_format,
            redact_secrets=redact_secrets,
        )
    )
    root_logger.addHandler(console_handler)


def get_access_logger(
    name: str,
    tenant_id: Optional[str] = None,
    principal_id: Optional[str] = None,
) -> AccessLoggerAdapter:
    """Get a logger adapter bound to a tenant and/or principal.

    Example:
        logger = get_access_logger(__name__, tenant_id=tenant)
        logger.info("Member permissions saved")
    """
    logger = logging.getLogger(name)
    return AccessLoggerAdapter(logger, tenant_id=tenant_id, principal_id=principal_id)


__all__ = [
    "redact_secrets",
    "safe_log_value",
    "AccessLogFormatter",
    "AccessLoggerAdapter",
    "setup_logging",
    "get_access_logger",
]
