"""Structured logging for the application runtime.

One process-wide logger (`appboot`) is configured per start. Application code
receives `ScopedLogger` adapters that carry a `scope` field and can derive
child loggers with additional fields.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import IO, Any, Mapping, MutableMapping


ROOT_LOGGER_NAME = "appboot"

# Finer than DEBUG, for configs written with `trace`.
TRACE = 5
logging.addLevelName(TRACE, "TRACE")

# Custom level above CRITICAL for lifecycle announcements that should always be shown.
ALWAYS = 100
SILENT = ALWAYS + 1
logging.addLevelName(ALWAYS, "ALWAYS")

_RESERVED_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "message",
        "asctime",
    }
)


class JsonFormatter(logging.Formatter):
    """Minimal JSON log formatter suitable for structured logs."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "time": datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
            "level": record.levelname.lower(),
            "logger": record.name,
            "msg": record.getMessage(),
        }

        # Capture non-standard fields attached via `extra={...}`.
        for k, v in record.__dict__.items():
            if k in _RESERVED_ATTRS or k.startswith("_"):
                continue
            payload[k] = v

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, default=str)


class _ScopeDefault(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "scope"):
            record.scope = "-"
        return True


_TEXT_FORMAT = "%(asctime)s %(levelname)s scope=%(scope)s %(name)s: %(message)s"


def parse_level(level: str | int | None) -> int:
    if level is None:
        return logging.ERROR
    if isinstance(level, int):
        return level
    name = level.strip().upper()
    if name in {"SILENT", "OFF", "NONE"}:
        return SILENT
    resolved = logging.getLevelName(name)
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return resolved


def configure_logging(
    *,
    level: str | int | None = "error",
    fmt: str = "json",
    stream: IO[str] | None = None,
) -> logging.Logger:
    """Configure the process-wide `appboot` logger.

    Safe to call on every start: the handler installed by a previous call is
    replaced rather than duplicated.
    """

    base = logging.getLogger(ROOT_LOGGER_NAME)
    base.setLevel(parse_level(level))

    for handler in list(base.handlers):
        if getattr(handler, "_appboot_handler", False):
            base.removeHandler(handler)
            handler.close()

    handler = logging.StreamHandler(stream=stream or sys.stdout)
    handler.addFilter(_ScopeDefault())
    if fmt == "text":
        handler.setFormatter(logging.Formatter(fmt=_TEXT_FORMAT))
    else:
        handler.setFormatter(JsonFormatter())
    setattr(handler, "_appboot_handler", True)
    base.addHandler(handler)
    return base


class ScopedLogger(logging.LoggerAdapter):
    """Logger adapter carrying static fields (at least `scope`)."""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
        extra = dict(self.extra or {})
        extra.update(kwargs.get("extra") or {})
        kwargs["extra"] = extra
        return msg, kwargs

    @property
    def fields(self) -> Mapping[str, Any]:
        return dict(self.extra or {})

    def child(self, **fields: Any) -> "ScopedLogger":
        merged = dict(self.extra or {})
        merged.update(fields)
        return ScopedLogger(self.logger, merged)

    def always(self, msg: Any, *args: Any, **kwargs: Any) -> None:
        self.log(ALWAYS, msg, *args, **kwargs)


def get_logger(scope: str = "app", **fields: Any) -> ScopedLogger:
    """Return a scoped adapter over the process-wide logger."""

    return ScopedLogger(logging.getLogger(ROOT_LOGGER_NAME), {"scope": scope, **fields})
