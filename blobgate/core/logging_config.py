"""Logging setup for blobgate.

One stdout handler on the root logger. ``LOG_FORMAT=json`` writes one JSON
object per line; ``text`` writes a single readable line. Both carry the
request id set by the request context middleware.

Access tokens reach the gateway in the ``Authorization`` header and in the
``?key=`` query parameter, so every message is rendered and scrubbed before
it is formatted.
"""

import contextvars
import json
import logging
import re
import sys
from datetime import datetime, timezone
from typing import Optional

# Set by RequestContextMiddleware for the duration of a request.
request_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("request_id", default="")

REDACTED = "***REDACTED***"

# Each pattern keeps group 1 and replaces the rest of the match.
_TOKEN_PATTERNS = (
    re.compile(r"(?i)(bearer\s+)[^\s,'\"]+"),
    re.compile(r"(?i)([?&](?:key|token)=)[^\s&'\"]+"),
    re.compile(r"(?i)((?:authorization|token|secret|password)\s*[=:]\s*)[^\s,'\"]+"),
)

_TEXT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s [%(request_id)s] %(message)s"

# Attributes every LogRecord has; anything else came from ``extra=``.
_RECORD_ATTRS = frozenset(logging.makeLogRecord({}).__dict__) | {"message", "request_id"}


def redact(text: str) -> str:
    """Replace bearer tokens and token-bearing parameters in *text*."""
    for pattern in _TOKEN_PATTERNS:
        text = pattern.sub(lambda m: m.group(1) + REDACTED, text)
    return text


class _ContextFilter(logging.Filter):
    """Stamp the request id and scrub tokens from the rendered message.

    The message is rendered here (``msg % args``) so values passed as
    arguments are scrubbed too, then ``args`` is cleared.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get() or "-"
        record.msg = redact(record.getMessage())
        record.args = None
        return True


class _ScrubbingFormatter(logging.Formatter):
    def formatException(self, ei) -> str:
        return redact(super().formatException(ei))


class _JsonFormatter(_ScrubbingFormatter):
    """One JSON object per record, with ``extra`` fields at the top level."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if getattr(record, "request_id", "-") != "-":
            payload["request_id"] = record.request_id
        payload.update(
            (k, v) for k, v in record.__dict__.items() if k not in _RECORD_ATTRS
        )
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def build_handler(log_format: str = "json", stream=None) -> logging.Handler:
    """A stream handler with the context filter and the requested formatter."""
    handler = logging.StreamHandler(stream or sys.stdout)
    handler.addFilter(_ContextFilter())
    if log_format.lower() == "json":
        handler.setFormatter(_JsonFormatter())
    else:
        handler.setFormatter(_ScrubbingFormatter(_TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    return handler


def setup_logging(log_level: Optional[str] = None, log_format: Optional[str] = None) -> None:
    """Install the blobgate handler on the root logger.

    Args:
        log_level: Standard level name. Defaults to INFO.
        log_format: ``"json"`` or ``"text"``. Defaults to ``"json"``.
    """
    level = (log_level or "INFO").upper()
    fmt = (log_format or "json").lower()

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(build_handler(fmt))
    root.setLevel(level)

    # uvicorn's access line repeats the query string; ours logs the path only.
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    logging.getLogger(__name__).debug("Logging configured", extra={"level": level, "format": fmt})
