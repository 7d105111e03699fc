"""
Structured JSON logging with request context and credential redaction
"""

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

SERVICE_NAME = "multimediablast-api"

# Keys that carry OAuth or billing credentials; values never reach the log stream
REDACTED_FIELDS = frozenset({
    "access_token",
    "refresh_token",
    "code",
    "client_secret",
    "fb_exchange_token",
    "authorization",
    "api_key",
})
REDACTED = "[redacted]"

request_id_var: ContextVar[Optional[str]] = ContextVar('request_id', default=None)
user_id_var: ContextVar[Optional[str]] = ContextVar('user_id', default=None)


def redact(fields: Dict[str, Any]) -> Dict[str, Any]:
    """Copy of fields with credential values masked, nested dicts included"""
    clean = {}
    for key, value in fields.items():
        if key.lower() in REDACTED_FIELDS and value:
            clean[key] = REDACTED
        elif isinstance(value, dict):
            clean[key] = redact(value)
        else:
            clean[key] = value
    return clean


class StructuredFormatter(logging.Formatter):
    """One JSON object per record, carrying request context and extra fields"""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "service": SERVICE_NAME,
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno
        }

        request_id = request_id_var.get()
        if request_id:
            log_data["request_id"] = request_id
        user_id = user_id_var.get()
        if user_id:
            log_data["user_id"] = user_id

        extra_fields = getattr(record, "extra_fields", None)
        if extra_fields:
            log_data.update(redact(extra_fields))

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class StructuredLogger:
    """Logger taking keyword fields instead of preformatted strings"""

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)

    def debug(self, message: str, **fields: Any) -> None:
        self._log(logging.DEBUG, message, fields)

    def info(self, message: str, **fields: Any) -> None:
        self._log(logging.INFO, message, fields)

    def warning(self, message: str, **fields: Any) -> None:
        self._log(logging.WARNING, message, fields)

    def error(self, message: str, **fields: Any) -> None:
        self._log(logging.ERROR, message, fields)

    def _log(self, level: int, message: str, fields: Dict[str, Any]) -> None:
        if not self.logger.isEnabledFor(level):
            return
        self.logger.log(level, message, extra={"extra_fields": fields} if fields else None)


def setup_structured_logging(level: str = "INFO") -> None:
    """Route every logger through a single JSON stdout handler"""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(StructuredFormatter())

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    # httpx logs full request URLs, which include OAuth query parameters
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("stripe").setLevel(logging.WARNING)


def set_request_context(request_id: str, user_id: Optional[str] = None) -> None:
    """Bind request_id (and optionally user_id) to the current task"""
    request_id_var.set(request_id)
    user_id_var.set(user_id)


def get_structured_logger(name: str) -> StructuredLogger:
    return StructuredLogger(name)
