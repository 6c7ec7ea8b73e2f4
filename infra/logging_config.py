"""Centralized logging configuration.

Tidy runs emit either human-friendly text logs or structured JSON logs (for CI
log collectors). The runner uses this module to configure logging in a
defensive way so it doesn't break environments that already configure root
handlers (pytest, IDE runners, wrapping build drivers).
"""

from __future__ import annotations

import json
import logging
import sys
import time
from collections.abc import Mapping
from contextvars import ContextVar
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from infra.config import get_settings

# Context that follows a tidy run through every check.
# Use set_log_context() to populate, clear_log_context() to reset.
log_ctx: ContextVar[dict[str, Any] | None] = ContextVar("log_ctx", default=None)


def set_log_context(**kwargs: Any) -> None:
    """Set context values that will be included in all subsequent log entries."""
    current = log_ctx.get()
    if current is None:
        current = {}
    else:
        current = dict(current)
    current.update(kwargs)
    log_ctx.set(current)


def clear_log_context() -> None:
    """Clear the log context (typically at the start of a new check)."""
    log_ctx.set({})


def get_log_context() -> dict[str, Any]:
    """Get a copy of the current log context."""
    ctx = log_ctx.get()
    return dict(ctx) if ctx else {}


def _utc_iso8601() -> str:
    # Example: 2026-01-24T18:03:12.123Z
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


_STANDARD_RECORD_ATTRS = frozenset(
    {
        "name", "msg", "args", "levelname", "levelno", "pathname", "filename", "module",
        "exc_info", "exc_text", "stack_info", "lineno", "funcName", "created", "msecs",
        "relativeCreated", "thread", "threadName", "processName", "process", "taskName",
    }
)


class JsonFormatter(logging.Formatter):
    """
    Safe JSON formatter:
      - Always outputs valid JSON (message escaped via json.dumps)
      - Adds common fields (logger, module, line)
      - Includes exception info when present
    """

    def __init__(self, *, extra_fields: Mapping[str, Any] | None = None) -> None:
        super().__init__()
        self._extra_fields = dict(extra_fields or {})

    def format(self, record: logging.LogRecord) -> str:
        base: dict[str, Any] = {
            "timestamp": _utc_iso8601(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "func": record.funcName,
            "line": record.lineno,
        }

        # Optional structured context via `extra={...}`
        for k, v in self._extract_extras(record).items():
            if k not in base:
                base[k] = v

        for k, v in self._extra_fields.items():
            base.setdefault(k, v)

        if record.exc_info:
            base["exception"] = self.formatException(record.exc_info)

        ctx = log_ctx.get()
        if ctx:
            for k, v in ctx.items():
                if k not in base:
                    base[k] = v

        return json.dumps(base, ensure_ascii=False, default=str)

    @staticmethod
    def _extract_extras(record: logging.LogRecord) -> dict[str, Any]:
        # Anything not in standard LogRecord attributes is "extra"
        return {
            key: value
            for key, value in record.__dict__.items()
            if key not in _STANDARD_RECORD_ATTRS
        }


class TextFormatter(logging.Formatter):
    """
    Human-friendly logs, but UTC timestamps.
    """
    converter = time.gmtime  # UTC

    def __init__(self) -> None:
        super().__init__("%(asctime)sZ | %(levelname)s | %(name)s | %(message)s")


class StructuredLogger:
    """
    Event-style logger with automatic context injection.

    Usage:
        from infra.logging_config import StructuredLogger, set_log_context

        logger = StructuredLogger(__name__)
        set_log_context(check="run_make_makefiles", bless=False)
        logger.error("tidy_error", kind="violation", path="run-make/foo/Makefile")
        clear_log_context()
    """

    def __init__(self, name: str) -> None:
        self._logger = logging.getLogger(name)

    def _log(self, level: int, event: str, message: str | None = None, **kwargs: Any) -> None:
        extra = {
            "event": event,
            **get_log_context(),
            **kwargs,
        }
        self._logger.log(level, message or event, extra=extra)

    def debug(self, event: str, message: str | None = None, **kwargs: Any) -> None:
        self._log(logging.DEBUG, event, message, **kwargs)

    def info(self, event: str, message: str | None = None, **kwargs: Any) -> None:
        self._log(logging.INFO, event, message, **kwargs)

    def warning(self, event: str, message: str | None = None, **kwargs: Any) -> None:
        self._log(logging.WARNING, event, message, **kwargs)

    def error(self, event: str, message: str | None = None, **kwargs: Any) -> None:
        self._log(logging.ERROR, event, message, **kwargs)


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"
    json_logs: bool = False
    override_root_handlers: bool = False
    extra_fields: Mapping[str, Any] | None = None


def setup_logging(
    *,
    level: str | None = None,
    json_logs: bool | None = None,
    override_root_handlers: bool | None = None,
    extra_fields: Mapping[str, Any] | None = None,
) -> None:
    """
    Central logging setup for tidy runs.

    Env vars:
      - TIDY_LOG_LEVEL: DEBUG|INFO|WARNING|ERROR (default INFO)
      - TIDY_LOG_JSON:  1/0 (default 0)
      - TIDY_LOG_OVERRIDE: 1/0 (default 0)
         If 1, replaces any pre-configured root handlers.
         If 0, only configures logging if root has no handlers.

    Logs go to stderr so that the per-error report lines printed by the runner
    on stdout stay machine-readable.
    """
    config = get_settings(reload=True).logging

    cfg = LoggingConfig(
        level=(level or config.level).upper(),
        json_logs=json_logs if json_logs is not None else bool(config.json_logs),
        override_root_handlers=override_root_handlers
        if override_root_handlers is not None
        else bool(config.override_root_handlers),
        extra_fields=extra_fields,
    )

    root = logging.getLogger()
    root.setLevel(getattr(logging, cfg.level, logging.INFO))

    handler = logging.StreamHandler(sys.stderr)
    if cfg.json_logs:
        handler.setFormatter(JsonFormatter(extra_fields=cfg.extra_fields))
    else:
        handler.setFormatter(TextFormatter())

    if cfg.override_root_handlers:
        for h in list(root.handlers):
            root.removeHandler(h)
        root.addHandler(handler)
    else:
        if not root.handlers:
            root.addHandler(handler)
