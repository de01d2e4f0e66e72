"""
Structured logging using structlog with:
- JSON/console switchable format
- Correlation ID + request context
- Secret redaction (bearer tokens, signed assertions, client secrets)
- Safe defaults for Uvicorn/httpx

"""

from __future__ import annotations

import datetime
import logging
import logging.config
import re
import sys
import uuid
from typing import Any, Dict, Iterable, Optional

import structlog
from pythonjsonlogger import jsonlogger

# ---------------------------------------------------------------------
# Secret redaction
# ---------------------------------------------------------------------


class SecretRedactionProcessor:
    """
    Structlog processor to redact credentials inside event_dict (recursively).
    - Keys that name a secret are fully masked.
    - Bearer tokens and JWT-shaped strings inside free text are masked.
    """
    SECRET_KEYS = frozenset({
        "access_token", "assertion", "authorization", "client_secret",
        "password", "private_key", "token",
    })
    P_BEARER = re.compile(r"(?i)\bbearer\s+[A-Za-z0-9._~+/=-]+")
    P_JWT = re.compile(r"\beyJ[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+")

    def __call__(self, logger, method_name, event_dict):
        return self._redact(event_dict)

    def _redact(self, value: Any, key: Optional[str] = None) -> Any:
        if key is not None and key.lower() in self.SECRET_KEYS:
            return "***REDACTED***"
        if isinstance(value, dict):
            return {k: self._redact(v, k) for k, v in value.items()}
        if isinstance(value, (list, tuple)):
            return [self._redact(v) for v in value]
        if isinstance(value, str):
            s = self.P_BEARER.sub("Bearer ***", value)
            return self.P_JWT.sub("***JWT***", s)
        return value


# ---------------------------------------------------------------------
# Context processors
# ---------------------------------------------------------------------


def add_request_context(logger, method_name, event_dict):
    """Copy standard request fields from contextvars into the event."""
    ctx = structlog.contextvars.get_contextvars()
    for key in ("correlation_id", "path", "method", "client_ip"):
        if key in ctx:
            event_dict.setdefault(key, ctx[key])
    return event_dict


def add_timestamp(logger, method_name, event_dict):
    # UTC ISO8601 Z
    now = datetime.datetime.now(datetime.timezone.utc)
    event_dict["timestamp"] = now.strftime("%Y-%m-%dT%H:%M:%SZ")
    return event_dict


def _passthrough(logger, method_name, event_dict):
    return event_dict


# ---------------------------------------------------------------------
# Public helpers to use from API code
# ---------------------------------------------------------------------


def set_correlation_id(correlation_id: Optional[str] = None) -> str:
    """Generate/bind a correlation_id if not provided; returns the id."""
    cid = correlation_id or str(uuid.uuid4())
    structlog.contextvars.bind_contextvars(correlation_id=cid)
    return cid


def bind_request_context(
    *,
    path: Optional[str] = None,
    method: Optional[str] = None,
    client_ip: Optional[str] = None,
    extras: Optional[Dict[str, Any]] = None,
) -> None:
    """Bind standard request context fields (call in middleware)."""
    payload = {
        k: v
        for k, v in dict(path=path, method=method, client_ip=client_ip).items()
        if v is not None
    }
    if extras:
        payload.update(extras)
    if payload:
        structlog.contextvars.bind_contextvars(**payload)


def clear_request_context() -> None:
    """Clear all bound contextvars (call at end of request)."""
    structlog.contextvars.clear_contextvars()


# ---------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------

def _ensure_log_format(settings) -> str:
    """
    Determine output format:
      - If settings has .log_format, use it ("json"|"console").
      - Else default: "console" for development, "json" otherwise.
    """
    fmt = getattr(settings, "log_format", None)
    if fmt in ("json", "console"):
        return fmt
    return "console" if getattr(settings, "is_dev", False) else "json"


def _level_name_to_int(level: str) -> int:
    return getattr(logging, level.upper(), logging.INFO)


def setup_logging(settings: Any) -> None:
    """Idempotent structured logging configuration."""
    log_format = _ensure_log_format(settings)
    redact = not getattr(settings, "is_dev", False)

    logging_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "()": jsonlogger.JsonFormatter,
                "format": "%(asctime)s %(name)s %(levelname)s %(message)s",
                "datefmt": "%Y-%m-%dT%H:%M:%S",
            },
            "console": {
                "format": "%(asctime)s - %(levelname)s - %(name)s - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "json" if log_format == "json" else "console",
                "stream": sys.stdout,
            },
        },
        "root": {
            "level": _level_name_to_int(getattr(settings, "log_level", "INFO")),
            "handlers": ["console"],
        },
        "loggers": {
            # Quiet noisy libs, but keep errors
            "uvicorn.error": {"level": "INFO", "handlers": ["console"], "propagate": False},
            "uvicorn.access": {"level": "WARNING", "handlers": ["console"], "propagate": False},
            "httpx": {"level": "WARNING", "handlers": ["console"], "propagate": False},
        },
    }
    logging.config.dictConfig(logging_config)

    processors: Iterable[Any] = [
        structlog.contextvars.merge_contextvars,
        add_timestamp,
        add_request_context,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        # Keep secrets readable only in local development
        (SecretRedactionProcessor() if redact else _passthrough),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        (structlog.processors.JSONRenderer() if log_format == "json" else structlog.dev.ConsoleRenderer()),
    ]

    structlog.configure(
        processors=list(processors),
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )

    structlog.contextvars.clear_contextvars()


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
