"""
Logging configuration.

JSON lines for production (LOG_FORMAT=json), readable text otherwise. Every
record carries a correlation_id ('system' outside of requests).
"""
import os
import sys
import json
import logging
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

# Correlation id of the request being handled
correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="system")

# LogRecord attributes that are not user-supplied extras
_RESERVED_ATTRS = {
    'name', 'msg', 'args', 'created', 'filename', 'funcName', 'levelname',
    'levelno', 'lineno', 'module', 'msecs', 'pathname', 'process',
    'processName', 'relativeCreated', 'stack_info', 'thread', 'threadName',
    'exc_info', 'exc_text', 'message', 'correlation_id', 'taskName',
}


class CorrelationIdFilter(logging.Filter):
    """Attach the current correlation id to records that lack one."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, 'correlation_id'):
            record.correlation_id = correlation_id_var.get()
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per log line."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "correlation_id": getattr(record, 'correlation_id', 'system'),
        }

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith('_'):
                log_data[key] = value

        return json.dumps(log_data, default=str)


class TextFormatter(logging.Formatter):
    def __init__(self):
        super().__init__(
            fmt='%(asctime)s - %(name)s - %(levelname)s - [%(correlation_id)s] - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )


def configure_logging(log_level: Optional[str] = None) -> None:
    """
    Configure the root logger.

    Args:
        log_level: Level name; defaults to the LOG_LEVEL env var
    """
    log_format = os.getenv('LOG_FORMAT', 'text').lower()
    level_name = (log_level or os.getenv('LOG_LEVEL', 'INFO')).upper()

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level_name, logging.INFO))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(CorrelationIdFilter())
    handler.setFormatter(JSONFormatter() if log_format == 'json' else TextFormatter())
    root_logger.addHandler(handler)

    # Reduce noise from third-party libraries
    logging.getLogger('uvicorn.access').setLevel(logging.WARNING)
    logging.getLogger('multipart').setLevel(logging.WARNING)

    if log_format == 'json':
        root_logger.info("Structured JSON logging enabled")
