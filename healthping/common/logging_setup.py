"""
Structured Logging Setup

Consistent logging configuration across the listener components.
Uses JSON format for structured logs in production.
"""

import logging
import sys
import os
from datetime import datetime, timezone
from typing import Any
import json

ROOT_LOGGER_NAME = "healthping"

# Record attributes that are never copied into the JSON payload
_RESERVED_ATTRS = frozenset((
    "name", "msg", "args", "levelname", "levelno", "pathname",
    "filename", "module", "exc_info", "exc_text", "stack_info",
    "lineno", "funcName", "created", "msecs", "relativeCreated",
    "thread", "threadName", "processName", "process", "service",
    "message", "taskName",
))

_configured = False


class JsonFormatter(logging.Formatter):
    """JSON log formatter for structured logging"""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "service": getattr(record, "service", "unknown"),
            "message": record.getMessage(),
            "logger": record.name,
        }

        # Add exception info if present
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Add extra fields
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_data[key] = value

        return json.dumps(log_data, default=str)


class ServiceLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that adds service name to all logs"""

    def process(self, msg: str, kwargs: dict) -> tuple[str, dict]:
        extra = dict(kwargs.get("extra") or {})
        extra["service"] = self.extra.get("service", "unknown")
        kwargs["extra"] = extra
        return msg, kwargs


def setup_logging(
    log_level: str = "INFO",
    json_format: bool = True,
) -> logging.Logger:
    """
    Set up structured logging for the whole process.

    Every component logger is a child of the ``healthping`` logger, so
    configuring it once here covers all of them. Calling it again replaces
    the previous handler (used when CLI flags override the environment).

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Use JSON format (True for production, False for dev)

    Returns:
        Configured root logger for the package
    """
    global _configured

    # Get numeric log level
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(numeric_level)

    # Clear existing handlers
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(numeric_level)

    if json_format:
        formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    handler.setFormatter(formatter)
    logger.addHandler(handler)

    # Don't propagate to root logger
    logger.propagate = False

    _configured = True
    return logger


def env_log_settings() -> tuple[str, bool]:
    """Read (log_level, json_format) from the environment."""
    log_level = os.environ.get("HEALTHPING_LOG_LEVEL", "INFO")
    json_format = os.environ.get("HEALTHPING_LOG_FORMAT", "json").lower() == "json"
    return log_level, json_format


def get_service_logger(service_name: str) -> ServiceLoggerAdapter:
    """
    Get a logger adapter with service context.

    The package logger is configured from the environment on first use
    so components log sensibly even when imported outside the CLI.

    Args:
        service_name: Name of the component (e.g., "listener.channel")

    Returns:
        Logger adapter with service name in all logs
    """
    if not _configured:
        log_level, json_format = env_log_settings()
        setup_logging(log_level, json_format)

    logger = logging.getLogger(f"{ROOT_LOGGER_NAME}.{service_name}")
    return ServiceLoggerAdapter(logger, {"service": service_name})


def log_command(
    logger: logging.LoggerAdapter,
    command: Any,
    action: str,
    level: int = logging.INFO,
) -> None:
    """Log a dispatch decision for an inbound command"""
    host, port = command.sender[0], command.sender[1]
    logger.log(
        level,
        f"{action}: {command.raw_text!r} from {host}:{port}",
        extra={
            "verb": command.verb,
            "sender": f"{host}:{port}",
            "action": action,
        },
    )
