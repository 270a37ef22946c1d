"""Logging setup shared by every DevCourses component.

All loggers live under the "devcourses" namespace and write to one rotating
file (plus the console when requested). Registrant email addresses are
masked before any record is written.
"""

from __future__ import annotations

import logging
import os
import re
from logging.handlers import RotatingFileHandler
from pathlib import Path

ROOT_LOGGER = "devcourses"

LOG_DIR_ENV = "DEVCOURSES_LOG_DIR"
LOG_LEVEL_ENV = "DEVCOURSES_LOG_LEVEL"

DEFAULT_LOG_DIR = "logs"
DEFAULT_LOG_FILE = "devcourses.log"
DEFAULT_MAX_BYTES = 10 * 1024 * 1024  # 10MB
DEFAULT_BACKUP_COUNT = 5
DEFAULT_LOG_LEVEL = "INFO"

# 2026-03-15 19:00:00 | INFO     | devcourses.capacity.manager | Seat reserved in FE101 (3/20)
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_EMAIL_RE = re.compile(r"([A-Za-z0-9._%+-])[A-Za-z0-9._%+-]*@([A-Za-z0-9.-]+\.[A-Za-z]{2,})")


def mask_email(text: str) -> str:
    """Redact email addresses, keeping the first character and the domain.

    Args:
        text: Text that may contain email addresses.

    Returns:
        Text with each address rewritten as 'a***@example.com'.
    """
    return _EMAIL_RE.sub(r"\1***@\2", text)


class EmailMaskingFilter(logging.Filter):
    """Masks email addresses in the final message of every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        masked = mask_email(message)
        if masked != message:
            record.msg = masked
            record.args = None
        return True


def setup_logging(
    log_dir: str | Path | None = None,
    log_file: str = DEFAULT_LOG_FILE,
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = DEFAULT_BACKUP_COUNT,
    level: str | None = None,
    console: bool = True,
) -> logging.Logger:
    """Configure the "devcourses" logger. Safe to call repeatedly.

    Args:
        log_dir: Log directory. Falls back to $DEVCOURSES_LOG_DIR, then 'logs'.
        log_file: File name inside log_dir.
        max_bytes: Size at which the file is rotated.
        backup_count: Rotated files to keep.
        level: Level name. Falls back to $DEVCOURSES_LOG_LEVEL, then INFO.
            Unknown names mean INFO.
        console: Also write to stderr.

    Returns:
        The configured "devcourses" logger.
    """
    if log_dir is None:
        log_dir = os.environ.get(LOG_DIR_ENV, DEFAULT_LOG_DIR)
    directory = Path(log_dir)
    directory.mkdir(parents=True, exist_ok=True)
    level_name = (level or os.environ.get(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL)).upper()
    log_level = logging.getLevelName(level_name)
    if not isinstance(log_level, int):
        log_level = logging.INFO

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(log_level)
    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()

    log_path = directory / log_file
    handlers: list[logging.Handler] = [
        RotatingFileHandler(
            log_path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
    ]
    if console:
        handlers.append(logging.StreamHandler())

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    for handler in handlers:
        handler.setLevel(log_level)
        handler.setFormatter(formatter)
        handler.addFilter(EmailMaskingFilter())
        logger.addHandler(handler)

    logger.info("DevCourses logging initialized (level=%s, file=%s)", level_name, log_path)
    return logger


def get_logger(name: str) -> logging.Logger:
    """Logger for a component, e.g. get_logger("capacity") -> "devcourses.capacity"."""
    prefix = f"{ROOT_LOGGER}."
    return logging.getLogger(name if name.startswith(prefix) else prefix + name)
