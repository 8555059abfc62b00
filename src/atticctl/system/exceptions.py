# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.12
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/atticctl/system/exceptions.py

"""
atticctl exception classes.

Every exception carries the process exit code the CLI reports when it
escapes a command, so the mapping from failure to exit status lives in
one place.
"""

# Exit codes reported to the shell
EXIT_INIT_FAILED = 1
EXIT_USAGE = 2
EXIT_BACKUP_FAILED = 3
EXIT_ARCHIVE_FAILED = 4
EXIT_MAINTENANCE_FAILED = 5
EXIT_LOCKED = 9


class AtticctlError(Exception):
    """Base exception for all atticctl errors."""

    exit_code: int = 1

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ConfigError(AtticctlError):
    """Raised when a profile cannot be loaded or validated."""

    exit_code = EXIT_USAGE


class MissingArchiveError(AtticctlError):
    """Raised when an archive command is called without an archive ID."""

    exit_code = EXIT_USAGE


class KeyNotFoundError(AtticctlError):
    """Raised when the key file for a repository cannot be located."""

    exit_code = EXIT_ARCHIVE_FAILED


# === LOCKING ===

class LockError(AtticctlError):
    """Base exception for repository locking errors."""

    exit_code = EXIT_LOCKED


class LockConflictError(LockError):
    """Raised when the repository lock is held by another process."""

    def __init__(self, message: str, owner: str = "", **kwargs):
        self.owner = owner
        super().__init__(message, **kwargs)


# === ENGINE ===

class EngineError(AtticctlError):
    """Raised when the backup engine exits unsuccessfully."""

    def __init__(self, message: str, returncode: int, exit_code: int | None = None):
        self.returncode = returncode
        # Default to passing the engine's own status through
        super().__init__(message, exit_code=returncode if exit_code is None else exit_code)
