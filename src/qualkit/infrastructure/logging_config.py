"""
Logging configuration for the application.

Every module gets its logger through ``get_logger(__name__)``; the CLI (or any
other entry point) calls ``setup_logging`` once at startup.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

from .paths import get_log_file_path, get_old_log_file_path

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def rotate_log_files(log_file: Optional[Path] = None) -> None:
    """
    Keep the previous session's log next to the new one.

    ``log.txt`` becomes ``log.old.txt``, replacing any older copy, so only
    the last two sessions are kept.

    Args:
        log_file: Current log file. Defaults to the persistent data directory.
    """
    if log_file is None:
        log_file = get_log_file_path()
        old_log_file = get_old_log_file_path()
    else:
        old_log_file = log_file.with_name(f"{log_file.stem}.old{log_file.suffix}")

    if not log_file.exists():
        return

    try:
        log_file.replace(old_log_file)
    except OSError as e:
        # Logging is not configured yet, so stderr is the only channel.
        print(f"Warning: Could not rotate log file: {e}", file=sys.stderr)


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
    format_string: Optional[str] = None,
    log_to_file: bool = True
) -> None:
    """
    Configure application-wide logging.

    Args:
        level: Logging level (e.g., logging.DEBUG, logging.INFO).
        log_file: Log file path. If None and log_to_file=True, uses the default location.
        format_string: Custom format string for log messages.
        log_to_file: Whether to also log to a file.
    """
    formatter = logging.Formatter(format_string or DEFAULT_FORMAT)
    handlers: list[logging.Handler] = []

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    handlers.append(console_handler)

    if log_to_file:
        rotate_log_files(log_file)
        if log_file is None:
            log_file = get_log_file_path()
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file, encoding='utf-8', mode='w')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    logging.basicConfig(level=level, handlers=handlers, force=True)

    # Silence overly verbose third-party loggers
    logging.getLogger("markdown_it").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: Logger name (typically __name__).

    Returns:
        A logger instance.
    """
    return logging.getLogger(name)
