"""Shell logging configuration.

Provides file logging for request traces and unexpected errors.
Logs are written to ~/.couch-shell/logs/shell.log
"""
from __future__ import annotations

import logging
import traceback
from pathlib import Path
from typing import Optional

# Directory for log files
LOGS_DIR = Path.home() / ".couch-shell" / "logs"

LOGGER_NAME = "couch_shell"

# Module-level state
_file_handler: Optional[logging.FileHandler] = None


def configure_file_logging(
    log_path: Optional[Path] = None,
    level: int = logging.DEBUG,
) -> Path:
    """Attach a file handler to the couch_shell logger.

    Args:
        log_path: Log file (default ~/.couch-shell/logs/shell.log)
        level: Logging level for file output (default DEBUG)

    Returns:
        Path to the log file
    """
    global _file_handler

    log_path = log_path or LOGS_DIR / "shell.log"
    log_path.parent.mkdir(parents=True, exist_ok=True)

    close_file_logging()

    _file_handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
    _file_handler.setLevel(level)
    _file_handler.setFormatter(logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))

    shell_logger = logging.getLogger(LOGGER_NAME)
    shell_logger.addHandler(_file_handler)
    shell_logger.setLevel(min(shell_logger.level or logging.DEBUG, level))

    shell_logger.info("=== Shell started ===")
    return log_path


def close_file_logging() -> None:
    """Flush and detach the file handler, if any."""
    global _file_handler

    if _file_handler is not None:
        shell_logger = logging.getLogger(LOGGER_NAME)
        shell_logger.info("=== Shell ended ===")
        shell_logger.removeHandler(_file_handler)
        _file_handler.close()
        _file_handler = None


def log_exception(error: BaseException, context: str = "") -> str:
    """Log an unexpected exception with its traceback.

    The traceback goes to the log while the caller shows the returned
    one-line message to the user.

    Args:
        error: The exception to log
        context: What was happening (e.g. the input line)

    Returns:
        User-friendly error message (without traceback)
    """
    logger = logging.getLogger(LOGGER_NAME)

    error_type = type(error).__name__
    user_msg = f"{error_type}: {error}"

    tb_str = "".join(traceback.format_exception(type(error), error, error.__traceback__))
    logger.error(f"{context}\n{user_msg}\n\nTraceback:\n{tb_str}")

    return user_msg
