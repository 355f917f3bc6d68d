"""Logging for the PageMeter backend.

``logger`` is the process-wide ContextualLogger. Call ``with_context(**dims)``
to derive a logger whose records carry extra structured dimensions
(request_id, user_id, ...). Outside local development records are emitted
as one JSON object per line.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, MutableMapping

from pagemeter.core.config import settings

_STANDARD_FIELDS = frozenset(
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
    }
)


class JSONFormatter(logging.Formatter):
    """Render a log record and its extra dimensions as a JSON line."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D102
        data: dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            data["exc_info"] = self.formatException(record.exc_info)
        for key, value in record.__dict__.items():
            if key in _STANDARD_FIELDS or key.startswith("_"):
                continue
            data[key] = value
        return json.dumps(data, ensure_ascii=False, default=str)


class ContextualLogger(logging.LoggerAdapter):
    """Logger adapter that merges fixed dimensions into every record."""

    def __init__(self, logger: logging.Logger, dimensions: dict[str, Any] | None = None):
        super().__init__(logger, dict(dimensions or {}))

    @property
    def dimensions(self) -> dict[str, Any]:
        """The dimensions attached to every record from this logger."""
        return dict(self.extra)

    def with_context(self, **dimensions: Any) -> "ContextualLogger":
        """Return a new logger with additional dimensions merged in."""
        merged = {**self.extra, **dimensions}
        return ContextualLogger(self.logger, merged)

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        extra = kwargs.get("extra") or {}
        kwargs["extra"] = {**self.extra, **extra}
        return msg, kwargs


def _configure_root(name: str) -> logging.Logger:
    base = logging.getLogger(name)
    if base.handlers:
        return base

    handler = logging.StreamHandler(sys.stdout)
    if settings.is_local:
        handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
    else:
        handler.setFormatter(JSONFormatter())

    base.addHandler(handler)
    base.setLevel(settings.LOG_LEVEL.value)
    base.propagate = False
    return base


logger = ContextualLogger(_configure_root("pagemeter"))
