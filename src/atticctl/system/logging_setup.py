# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.13
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/atticctl/system/logging_setup.py

import sys
from pathlib import Path

from loguru import logger

# Short level tags shown on the console, e.g. "[W] Exclude file not found"
LEVEL_TAGS = {
    "TRACE": " ",
    "DEBUG": " ",
    "INFO": "I",
    "SUCCESS": "I",
    "WARNING": "W",
    "ERROR": "E",
    "CRITICAL": "E",
}

FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}"


def console_level(verbose: bool = False, quiet: bool = False) -> str:
    if quiet:
        return "WARNING"
    if verbose:
        return "DEBUG"
    return "INFO"


def _console_format(record) -> str:
    tag = LEVEL_TAGS.get(record["level"].name, "?")
    return f"<level>[{tag}]</level> {{message}}\n{{exception}}"


def setup_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Setup loguru logging for the entire application.

    Configures the console handler only; file logging depends on the
    profile and is added later by add_file_logging().
    """
    logger.remove()
    logger.add(
        sys.stderr,
        level=console_level(verbose, quiet),
        format=_console_format,
    )


def add_file_logging(log_dir: Path, profile_name: str) -> Path | None:
    """Add a DEBUG file handler writing to <log_dir>/atticctl-<profile>.log.

    Returns:
        Path of the log file, or None if it could not be set up
    """
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_dir / f"atticctl-{profile_name}.log"
        logger.add(
            log_file,
            level="DEBUG",
            format=FILE_FORMAT,
            rotation="10 MB",
            retention="30 days",
            compression="gz",
        )
    except (OSError, ValueError) as e:
        # Don't fail the backup because the log directory is unusable
        logger.warning(f"Failed to setup file logging: {e}")
        return None

    logger.debug(f"File logging enabled: {log_file}")
    return log_file
