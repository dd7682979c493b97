"""
Logging setup for the Cinema Booking Platform.

Only three logger trees are configured: the application's own, uvicorn's and
httpx's. Everything else falls through to the root logger.
"""

import json
import logging
import logging.config
import re
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from .request_context import request_id_var

APP_LOGGER = "cinema_booking_platform"

# None means "follow the configured level".
LOGGER_LEVELS: Dict[str, Optional[str]] = {
    APP_LOGGER: None,
    "uvicorn": "INFO",
    # catalog calls are timed by the client already
    "httpx": "WARNING",
}

_DOTTED_PATH = f"{__name__}.%s"
_LOG_FILE_BYTES = 10 * 1024 * 1024
_LOG_FILE_BACKUPS = 5

MASK = "***MASKED***"
EMAIL_MASK = "***EMAIL***"

# Attributes every LogRecord carries; anything else arrived through ``extra``.
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "request_id"}


def _handler(formatter: str, level: str, **options: Any) -> Dict[str, Any]:
    return {
        "level": level,
        "formatter": formatter,
        "filters": ["request_id", "sensitive_data"],
        **options,
    }


def build_logging_config(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    enable_json_logging: bool = False
) -> Dict[str, Any]:
    """Build the ``dictConfig`` mapping without applying it."""
    formatter = "json" if enable_json_logging else "plain"

    handlers = {"console": _handler(formatter, log_level, **{"class": "logging.StreamHandler", "stream": sys.stdout})}
    if log_file:
        handlers["file"] = _handler(
            formatter,
            log_level,
            **{
                "class": "logging.handlers.RotatingFileHandler",
                "filename": log_file,
                "maxBytes": _LOG_FILE_BYTES,
                "backupCount": _LOG_FILE_BACKUPS,
            }
        )
    handler_names: List[str] = list(handlers)

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "plain": {
                "format": "%(asctime)s %(levelname)-8s %(name)s [%(request_id)s] %(message)s",
                "datefmt": "%Y-%m-%dT%H:%M:%S",
            },
            "json": {"()": _DOTTED_PATH % "JSONFormatter"},
        },
        "filters": {
            "request_id": {"()": _DOTTED_PATH % "RequestIDFilter"},
            "sensitive_data": {"()": _DOTTED_PATH % "SensitiveDataFilter"},
        },
        "handlers": handlers,
        "loggers": {
            name: {"level": level or log_level, "handlers": handler_names, "propagate": False}
            for name, level in LOGGER_LEVELS.items()
        },
        "root": {"level": log_level, "handlers": handler_names},
    }


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    enable_json_logging: bool = False
) -> None:
    """
    Configure console logging, plus a rotating file when ``log_file`` is set.

    Args:
        log_level: Level for the application loggers and the root logger
        log_file: Path of the rotating log file; its directory is created
        enable_json_logging: Emit one JSON object per line instead of text
    """
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
    logging.config.dictConfig(build_logging_config(log_level, log_file, enable_json_logging))


class RequestIDFilter(logging.Filter):
    """Stamp each record with the id of the request being served."""

    def filter(self, record):
        record.request_id = getattr(record, "request_id", None) or request_id_var.get()
        return True


class SensitiveDataFilter(logging.Filter):
    """Mask customer identity and credentials before a record is written.

    Extra fields named like a sensitive key are replaced outright; email
    addresses anywhere in the message or in string fields are blanked.
    """

    SENSITIVE_KEYS = frozenset({"email", "nic", "customer", "password", "token", "authorization", "cookie"})
    EMAIL_PATTERN = re.compile(r"[\w.%+-]+@[\w-]+(?:\.[\w-]+)+")

    def filter(self, record):
        if isinstance(record.msg, str):
            record.msg = self.EMAIL_PATTERN.sub(EMAIL_MASK, record.msg)
        for key in [name for name in vars(record) if name not in _RECORD_ATTRS]:
            setattr(record, key, self.mask(getattr(record, key), key))
        return True

    def _is_sensitive(self, key: Any) -> bool:
        name = str(key).lower()
        return any(word in name for word in self.SENSITIVE_KEYS)

    def mask(self, value: Any, key: Any = None) -> Any:
        if key is not None and self._is_sensitive(key):
            return MASK
        if isinstance(value, str):
            return self.EMAIL_PATTERN.sub(EMAIL_MASK, value)
        if isinstance(value, dict):
            return {k: self.mask(v, k) for k, v in value.items()}
        if isinstance(value, (list, tuple)):
            return type(value)(self.mask(item) for item in value)
        return value


class JSONFormatter(logging.Formatter):
    """One JSON object per record; ``extra`` fields are nested under ``extra``."""

    def format(self, record):
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "request_id": getattr(record, "request_id", None),
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        extra = {key: value for key, value in vars(record).items() if key not in _RECORD_ATTRS}
        if extra:
            entry["extra"] = extra
        return json.dumps(entry, default=str, ensure_ascii=False)


_performance_logger = logging.getLogger(f"{APP_LOGGER}.performance")
_business_logger = logging.getLogger(f"{APP_LOGGER}.business")


def log_performance(operation_name: str, duration: float, **kwargs):
    """Record how long an outbound operation took, at debug level."""
    _performance_logger.debug(
        "%s took %.4fs",
        operation_name,
        duration,
        extra={"operation": operation_name, "duration": duration, **kwargs}
    )


def log_business_event(event_type: str, details: Dict[str, Any]):
    """Record a booking workflow milestone such as a started session or a confirmed reservation."""
    _business_logger.info("Booking event: %s", event_type, extra={"event_type": event_type, **details})
