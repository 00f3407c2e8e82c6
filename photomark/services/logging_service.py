"""
Logging setup for Photomark.

Everything logs through the standard library: modules call
get_logger(__name__) and app.main() calls setup_logging() once. Output goes
to the console and to a per-day file under ~/.local/share/photomark/logs/.
"""

import logging
from datetime import date
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List, Optional


# XDG data directory
DEFAULT_LOG_DIR = Path.home() / ".local" / "share" / "photomark" / "logs"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# A day of heavy editing stays well under this
MAX_LOG_BYTES = 2 * 1024 * 1024
LOG_BACKUP_COUNT = 3

_installed_handlers: List[logging.Handler] = []


def log_file_path(log_dir: Optional[Path] = None, day: Optional[date] = None) -> Path:
    """Path of the log file for a given day (today by default)."""
    log_dir = log_dir if log_dir is not None else DEFAULT_LOG_DIR
    day = day or date.today()
    return log_dir / f"photomark_{day.strftime('%Y%m%d')}.log"


def _formatter() -> logging.Formatter:
    return logging.Formatter(LOG_FORMAT, DATE_FORMAT)


def _console_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(_formatter())
    return handler


def _file_handler(level: int, log_dir: Path) -> logging.Handler:
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        log_file_path(log_dir),
        maxBytes=MAX_LOG_BYTES,
        backupCount=LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(_formatter())
    return handler


def setup_logging(
    log_level: int = logging.INFO,
    log_to_file: bool = True,
    log_dir: Optional[Path] = None,
) -> None:
    """
    Install Photomark's console and file handlers on the root logger.

    Args:
        log_level: Level for the root logger and both handlers.
        log_to_file: Also write to the dated log file.
        log_dir: Directory for log files. Defaults to DEFAULT_LOG_DIR.

    Calling this again before reset_logging() does nothing. If the log
    directory cannot be created the console handler is kept and a warning
    is logged.
    """
    if _installed_handlers:
        return

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    handlers = [_console_handler(log_level)]
    file_error: Optional[OSError] = None
    if log_to_file:
        try:
            handlers.append(_file_handler(log_level, log_dir if log_dir is not None else DEFAULT_LOG_DIR))
        except OSError as e:
            file_error = e

    for handler in handlers:
        root_logger.addHandler(handler)
        _installed_handlers.append(handler)

    if file_error is not None:
        root_logger.warning(f"Could not create log file: {file_error}. Logging to console only.")


def reset_logging() -> None:
    """Remove the handlers installed by setup_logging() so it can run again."""
    root_logger = logging.getLogger()
    while _installed_handlers:
        handler = _installed_handlers.pop()
        root_logger.removeHandler(handler)
        handler.close()


def get_logger(name: str) -> logging.Logger:
    """Logger for a module; pass __name__."""
    return logging.getLogger(name)
