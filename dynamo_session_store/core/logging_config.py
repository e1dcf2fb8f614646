"""
Structured logging for the session store.

Records are rendered as JSON carrying the id of the request they were emitted
under. The session middleware binds that id per request, taking it from the
X-Request-ID header when the client sends one. Extras whose names look like
session ids, cookies or credentials are redacted.
"""

import json
import logging
import sys
import uuid
from contextvars import ContextVar, Token
from datetime import datetime, timezone
from typing import Any, Dict, Optional

# Correlation id of the request being served
correlation_id_ctx: ContextVar[Optional[str]] = ContextVar('correlation_id', default=None)

REQUEST_ID_HEADER = "x-request-id"

# Attributes every LogRecord carries; anything else came in through `extra`
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {'message', 'asctime'}

SENSITIVE_KEYWORDS = frozenset({
    'password', 'secret', 'key', 'token', 'credential', 'auth',
    'session', 'cookie', 'sid',
})

# Libraries whose DEBUG output would drown the store's own records
_QUIET_LOGGERS = ("botocore", "aiobotocore", "urllib3")


class StructuredFormatter(logging.Formatter):
    """Render records as one JSON object per line"""

    def __init__(self, include_sensitive: bool = False):
        super().__init__()
        self.include_sensitive = include_sensitive

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        correlation_id = correlation_id_ctx.get()
        if correlation_id:
            entry["correlation_id"] = correlation_id
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        extra = self._extra_fields(record)
        if extra:
            entry["extra"] = extra

        return json.dumps(entry, default=str)

    def _extra_fields(self, record: logging.LogRecord) -> Dict[str, Any]:
        fields = {}
        for key, value in vars(record).items():
            if key in _RECORD_ATTRS:
                continue
            if not self.include_sensitive and is_sensitive(key):
                value = "[REDACTED]"
            fields[key] = value
        return fields


def is_sensitive(name: str) -> bool:
    """Whether a log field name suggests it holds a secret or a session identifier"""
    name = name.lower()
    return any(keyword in name for keyword in SENSITIVE_KEYWORDS)


def bind_correlation_id(value: Optional[str] = None) -> Token:
    """
    Bind the correlation id for the current context.

    Args:
        value: Id supplied by the caller; a new one is generated when empty

    Returns:
        Token for correlation_id_ctx.reset()
    """
    return correlation_id_ctx.set(value or uuid.uuid4().hex)


def configure_logging(
    settings: Optional[Any] = None,
    log_file: Optional[str] = None,
    include_sensitive: bool = False,
) -> None:
    """
    Install root handlers from LOG_LEVEL and LOG_JSON.

    Args:
        settings: Settings to read; the global settings when omitted
        log_file: Optional file receiving the same records as stdout
        include_sensitive: Log sensitive extras unredacted
    """
    if settings is None:
        from dynamo_session_store.core.config import settings

    if settings.LOG_JSON:
        formatter: logging.Formatter = StructuredFormatter(include_sensitive=include_sensitive)
    else:
        formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    handlers: list = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    root = logging.getLogger()
    root.handlers.clear()
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)
    root.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger("dynamo_session_store.startup").info(
        "Logging configured",
        extra={"json_logging": settings.LOG_JSON, "log_level": settings.LOG_LEVEL},
    )
