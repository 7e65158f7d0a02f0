"""Logging setup for the College Admin API.

Every component logs under the ``collegeadmin`` hierarchy into one rotating
file (plus the console when wanted). Records pass through a filter that
scrubs bearer tokens, reset tokens and passwords before they are written.
"""

from __future__ import annotations

import logging
import os
import re
from logging.handlers import RotatingFileHandler
from pathlib import Path

ROOT_LOGGER_NAME = "collegeadmin"

LOG_DIR_ENV = "COLLEGEADMIN_LOG_DIR"
LOG_LEVEL_ENV = "COLLEGEADMIN_LOG_LEVEL"

DEFAULT_LOG_DIR = "logs"
DEFAULT_LOG_FILE = "collegeadmin.log"
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_MAX_BYTES = 10 * 1024 * 1024
DEFAULT_BACKUP_COUNT = 5

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

REDACTED = "[REDACTED]"

_SECRET_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"Bearer [A-Za-z0-9._-]+"), f"Bearer {REDACTED}"),
    (re.compile(r"token=[A-Za-z0-9._-]+"), f"token={REDACTED}"),
    (
        re.compile(r"(\"?(?:password|current_password|new_password)\"?\s*[:=]\s*)\"[^\"]*\""),
        rf'\1"{REDACTED}"',
    ),
    (re.compile(r"(\"?(?:token|reset_token)\"?\s*:\s*)\"[^\"]*\""), rf'\1"{REDACTED}"'),
]


def sanitize_for_log(text: str) -> str:
    """Replace secrets in ``text`` with a redaction marker."""
    for pattern, replacement in _SECRET_PATTERNS:
        text = pattern.sub(replacement, text)
    return text


def mask_email(email: str) -> str:
    """Hide all but the first character of an address's local part.

    ``"ada@college.edu"`` becomes ``"a***@college.edu"``; input without an
    ``@`` is masked entirely.
    """
    local, at, domain = email.partition("@")
    if not at:
        return "***"
    return f"{local[:1]}***@{domain}"


class RedactingFilter(logging.Filter):
    """Scrubs secrets from the fully formatted message of each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        cleaned = sanitize_for_log(message)
        if cleaned != message:
            record.msg = cleaned
            record.args = None
        return True


def _resolve_level(level: str | None) -> tuple[str, int]:
    name = (level or os.environ.get(LOG_LEVEL_ENV) or DEFAULT_LOG_LEVEL).upper()
    return name, getattr(logging, name, logging.INFO)


def setup_logging(
    log_dir: str | Path | None = None,
    log_file: str = DEFAULT_LOG_FILE,
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = DEFAULT_BACKUP_COUNT,
    level: str | None = None,
    console: bool = True,
) -> logging.Logger:
    """Configure the ``collegeadmin`` logger.

    Calling this again replaces the previous handlers instead of stacking them.

    Args:
        log_dir: Directory for the log file; ``COLLEGEADMIN_LOG_DIR`` or
            ``logs`` when omitted. Created if missing.
        log_file: File name inside ``log_dir``.
        max_bytes: Size at which the file is rotated.
        backup_count: Rotated files to keep.
        level: Level name; ``COLLEGEADMIN_LOG_LEVEL`` or INFO when omitted.
        console: Also write to stderr.

    Returns:
        The configured ``collegeadmin`` logger.
    """
    directory = Path(log_dir or os.environ.get(LOG_DIR_ENV) or DEFAULT_LOG_DIR)
    directory.mkdir(parents=True, exist_ok=True)
    level_name, level_value = _resolve_level(level)

    root = logging.getLogger(ROOT_LOGGER_NAME)
    for old in list(root.handlers):
        root.removeHandler(old)
        old.close()
    root.setLevel(level_value)

    handlers: list[logging.Handler] = [
        RotatingFileHandler(
            directory / log_file,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
    ]
    if console:
        handlers.append(logging.StreamHandler())

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    redactor = RedactingFilter()
    for handler in handlers:
        handler.setLevel(level_value)
        handler.setFormatter(formatter)
        handler.addFilter(redactor)
        root.addHandler(handler)

    root.info("Logging to %s at level %s", directory / log_file, level_name)
    return root


def get_logger(name: str) -> logging.Logger:
    """Logger for a component, e.g. ``get_logger("auth")`` -> ``collegeadmin.auth``."""
    prefix = f"{ROOT_LOGGER_NAME}."
    return logging.getLogger(name if name.startswith(prefix) else prefix + name)
