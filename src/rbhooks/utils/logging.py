"""Logging setup for rbhooks.

Status lines meant for the person committing are printed by
``rbhooks.output_utils``. This module only handles diagnostics: which git
commands ran, exit codes, where configuration came from, and an audit trail of
every file rbhooks modifies.

Environment variables:
    RBHOOKS_DEBUG       "true" enables DEBUG level and the detailed formatter
    RBHOOKS_LOG_LEVEL   Level name for the console handler (default WARNING)
    RBHOOKS_LOG_FILE    Path of an optional rotating log file
    RBHOOKS_LOG_FORMAT  "json" for JSON lines in the log file, else human
"""

import json
import logging
import logging.handlers
import os
import sys
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Union

ROOT_LOGGER_NAME = "rbhooks"
AUDIT_LOGGER_NAME = "rbhooks.audit"

_configured = False


class LogFormat(Enum):
    """Log formatter selection."""
    JSON = "json"
    HUMAN = "human"
    DEBUG = "debug"


class JsonFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        audit = getattr(record, "audit", None)
        if audit:
            log_data["audit"] = audit
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data, ensure_ascii=False, separators=(",", ":"))


class HumanFormatter(logging.Formatter):

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )


class DebugFormatter(logging.Formatter):
    """Adds module, function and line, plus audit fields when present."""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s [%(levelname)s] %(name)s:%(module)s:%(funcName)s:%(lineno)d - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        result = super().format(record)
        audit = getattr(record, "audit", None)
        if audit:
            result += " | " + ", ".join(f"{k}={v}" for k, v in audit.items())
        return result


def _get_formatter(log_format: LogFormat) -> logging.Formatter:
    if log_format == LogFormat.JSON:
        return JsonFormatter()
    if log_format == LogFormat.DEBUG:
        return DebugFormatter()
    return HumanFormatter()


def _level_from_name(name: str, default: int) -> int:
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else default


def is_debug_mode() -> bool:
    return os.getenv("RBHOOKS_DEBUG", "false").lower() == "true"


def configure_logging(
    level: Optional[Union[int, str]] = None,
    log_file: Optional[Union[str, Path]] = None,
    log_format: Optional[LogFormat] = None,
    force: bool = False,
    max_file_size: int = 1024 * 1024,
    backup_count: int = 3,
) -> logging.Logger:
    """Install handlers on the ``rbhooks`` logger.

    Arguments left as None are read from the environment. Calling this more
    than once is a no-op unless ``force`` is set.
    """
    global _configured
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    if _configured and not force:
        return logger

    debug = is_debug_mode()
    if level is None:
        level = logging.DEBUG if debug else _level_from_name(
            os.getenv("RBHOOKS_LOG_LEVEL", "WARNING"), logging.WARNING
        )
    elif isinstance(level, str):
        level = _level_from_name(level, logging.WARNING)

    if log_file is None:
        log_file = os.getenv("RBHOOKS_LOG_FILE") or None
    if log_format is None:
        env_format = os.getenv("RBHOOKS_LOG_FORMAT", "").lower()
        log_format = LogFormat.JSON if env_format == "json" else (
            LogFormat.DEBUG if debug else LogFormat.HUMAN
        )

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(_get_formatter(LogFormat.DEBUG if debug else LogFormat.HUMAN))
    console_handler.setLevel(level)
    logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_path, maxBytes=max_file_size, backupCount=backup_count, encoding="utf-8"
        )
        file_handler.setFormatter(_get_formatter(log_format))
        file_handler.setLevel(logging.DEBUG)
        logger.addHandler(file_handler)

    logger.setLevel(logging.DEBUG if log_file else level)
    logger.propagate = False
    _configured = True
    return logger


def audit(action: str, resource: Union[str, Path], result: str = "success", **details: Any) -> None:
    """Record a modification of a user file."""
    record: Dict[str, Any] = {
        "action": action,
        "resource": str(resource),
        "result": result,
        **details,
    }
    logging.getLogger(AUDIT_LOGGER_NAME).info("audit: %s %s (%s)", action, resource, result,
                                              extra={"audit": record})


__all__ = [
    "LogFormat",
    "JsonFormatter",
    "HumanFormatter",
    "DebugFormatter",
    "configure_logging",
    "is_debug_mode",
    "audit",
]
