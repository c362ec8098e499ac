"""
Placement Tracker - Centralized Logging Configuration
Supports both plain text and JSON structured logging
"""

import logging
import os
import sys
import json
import traceback
from datetime import datetime, timezone
from pathlib import Path
from logging.handlers import RotatingFileHandler
from typing import Any, Dict, Optional
from contextvars import ContextVar


# Active reporter for log context
reporter_var: ContextVar[str] = ContextVar('reporter', default='')


def get_reporter() -> str:
    """Get current reporter from context"""
    return reporter_var.get() or ''


def set_reporter(reporter: str) -> None:
    """Set reporter in context"""
    reporter_var.set(reporter)


_RESERVED_ATTRS = {
    'name', 'msg', 'args', 'created', 'filename', 'funcName',
    'levelname', 'levelno', 'lineno', 'module', 'msecs',
    'pathname', 'process', 'processName', 'relativeCreated',
    'stack_info', 'exc_info', 'exc_text', 'thread', 'threadName',
    'message', 'taskName', 'reporter',
}


class JSONFormatter(logging.Formatter):
    """
    JSON formatter for structured logging
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        reporter = get_reporter()
        if reporter:
            log_data["reporter"] = reporter

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": traceback.format_exception(*record.exc_info) if record.exc_info[0] else None
            }

        # Extra fields from record
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith('_'):
                log_data[key] = value

        return json.dumps(log_data, default=str)


class ContextualFormatter(logging.Formatter):
    """
    Readable formatter that includes the active reporter
    """

    def format(self, record: logging.LogRecord) -> str:
        record.reporter = get_reporter() or '-'
        return super().format(record)


class TrackerLogger(logging.Logger):
    """
    Custom logger with convenience methods for structured logging
    """

    def log_request(self, method: str, path: str, status_code: int,
                    duration_ms: float, **kwargs) -> None:
        """Log HTTP request details"""
        self.info(
            f"HTTP {method} {path} - {status_code} ({duration_ms:.2f}ms)",
            extra={
                "event_type": "http_request",
                "http_method": method,
                "http_path": path,
                "http_status": status_code,
                "duration_ms": duration_ms,
                **kwargs
            }
        )

    def log_auth_event(self, event: str, success: bool, user_email: str = None,
                       reason: str = None, **kwargs) -> None:
        """Log authentication events"""
        level = logging.INFO if success else logging.WARNING
        self.log(
            level,
            f"Auth {event}: {'success' if success else 'failed'}" +
            (f" - {user_email}" if user_email else "") +
            (f" - {reason}" if reason else ""),
            extra={
                "event_type": "auth",
                "auth_event": event,
                "auth_success": success,
                "user_email": user_email,
                "failure_reason": reason,
                **kwargs
            }
        )

    def log_error_with_context(self, error: Exception, context: str = None,
                               **kwargs) -> None:
        """Log error with full context"""
        self.error(
            f"Error in {context}: {type(error).__name__}: {str(error)}",
            exc_info=True,
            extra={
                "event_type": "error",
                "error_type": type(error).__name__,
                "error_message": str(error),
                "error_context": context,
                **kwargs
            }
        )


def setup_logging(level: Optional[str] = None,
                  log_file: Optional[str] = None,
                  json_logs: Optional[bool] = None) -> TrackerLogger:
    """Setup logging; arguments default to PLACEMENT_LOG_* environment variables"""
    level = level or os.getenv("PLACEMENT_LOG_LEVEL", "WARNING")
    log_file = log_file or os.getenv("PLACEMENT_LOG_FILE")
    if json_logs is None:
        json_logs = os.getenv("PLACEMENT_LOG_FORMAT", "text").lower() == "json"

    logging.setLoggerClass(TrackerLogger)

    logger = logging.getLogger("placement_tracker")
    logger.__class__ = TrackerLogger
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    logger.handlers.clear()

    if json_logs:
        console_formatter = JSONFormatter()
        file_formatter = JSONFormatter()
    else:
        console_formatter = ContextualFormatter("%(levelname)-8s | %(message)s")
        file_formatter = ContextualFormatter(
            "%(asctime)s | %(levelname)-8s | [%(reporter)s] | "
            "%(funcName)s:%(lineno)d | %(message)s"
        )

    # stderr keeps logs apart from rich output on stdout
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(getattr(logging, level.upper(), logging.WARNING))
    console_handler.setFormatter(console_formatter)
    logger.addHandler(console_handler)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            path,
            maxBytes=10485760,  # 10MB
            backupCount=5
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(file_formatter)
        logger.addHandler(file_handler)

    # Suppress noisy loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("matplotlib").setLevel(logging.WARNING)

    logger.debug(
        "Logging initialized",
        extra={"log_level": level, "json_logging": json_logs}
    )

    return logger


# Create logger instance
logger: TrackerLogger = setup_logging()


__all__ = [
    'logger',
    'setup_logging',
    'get_reporter',
    'set_reporter',
    'TrackerLogger',
    'JSONFormatter',
    'ContextualFormatter',
]
