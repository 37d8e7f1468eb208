"""JSON log lines for the bridge.

Every record becomes one JSON object on stderr, leaving stdout to the CLI's own
output. Fields passed through ``extra=`` are kept under ``"extra"``; any whose
name mentions a token, secret, password or key is masked.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import IO, Any

REDACTED = "***"

# Attributes every LogRecord carries; anything else came in through ``extra=``.
_STANDARD_ATTRS: frozenset[str] = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", (), None).__dict__
) | {"asctime", "message"}

_SENSITIVE_KEY_PARTS: tuple[str, ...] = ("token", "secret", "password", "key")

# Client libraries that are chatty at DEBUG.
_NOISY_LOGGERS: tuple[str, ...] = ("github", "urllib3")


def _mask(key: str, value: object) -> object:
    lowered = key.lower()
    return REDACTED if any(part in lowered for part in _SENSITIVE_KEY_PARTS) else value


def _extra_fields(record: logging.LogRecord) -> dict[str, object]:
    return {
        key: _mask(key, value)
        for key, value in vars(record).items()
        if key not in _STANDARD_ATTRS and not key.startswith("_")
    }


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # noqa: A003 (record)
        line: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        extra = _extra_fields(record)
        if extra:
            line["extra"] = extra
        if record.exc_info:
            line["exception"] = self.formatException(record.exc_info)
        # Values such as ids or dataclasses fall back to str().
        return json.dumps(line, ensure_ascii=False, default=str)


def configure_logging(level: str, *, stream: IO[str] | None = None) -> None:
    """Send all logging through a single JSON handler at ``level``."""

    handler = logging.StreamHandler(stream=stream or sys.stderr)
    handler.setFormatter(JsonFormatter())

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level.upper())

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(root.level, logging.INFO))
