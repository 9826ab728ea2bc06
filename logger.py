"""Logging configuration for the reminder skill."""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from config import LOG_DIR, DEBUG


def setup_logging(log_file: Optional[Path] = None, level: Optional[int] = None) -> logging.Logger:
    """Set up logging to a file and, when attached to a terminal, stderr.

    Args:
        log_file: Where to write. Defaults to a dated file under LOG_DIR.
        level: Log level. Defaults to DEBUG when REMINDER_DEBUG is set, else INFO.

    Returns:
        The shared "reminder_skill" logger
    """
    if level is None:
        level = logging.DEBUG if DEBUG else logging.INFO

    logger = logging.getLogger("reminder_skill")
    logger.setLevel(level)

    # Clear any existing handlers (the worker re-targets the shared logger)
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()

    # File handler - dated log file unless a sink was given
    if log_file is None:
        log_file = LOG_DIR / f"{datetime.now().strftime('%Y-%m-%d')}.log"
    log_file = Path(log_file)
    log_file.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(level)
    file_formatter = logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )
    file_handler.setFormatter(file_formatter)
    logger.addHandler(file_handler)

    # Console handler on stderr: stdout is the MCP transport
    if sys.stderr is not None and sys.stderr.isatty():
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)
        console_formatter = logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(message)s",
            datefmt="%H:%M:%S"
        )
        console_handler.setFormatter(console_formatter)
        logger.addHandler(console_handler)

    return logger


# Global logger instance
logger = setup_logging()
