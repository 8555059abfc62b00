# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.13
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/atticctl/system/locking.py

"""
Advisory locking for repository-mutating operations.

A lock is a file inside the repository directory holding "<hostname>:<pid>"
of the process that created it. Mutating commands (init, backup, delete,
repair) take the lock around their engine calls so two invocations cannot
modify the same repository at once. The lock is advisory: the engine
itself never looks at it, and a crashed process leaves it behind until
it is removed with break-lock.
"""

import os
import socket
import time
from pathlib import Path
from typing import Optional

import humanize
from loguru import logger

from atticctl.system.exceptions import LockConflictError, LockError


class LockInfo:
    """Owner of an existing lock file."""

    def __init__(self, owner: str, created: Optional[float] = None):
        self.owner = owner
        self.created = created

    @property
    def hostname(self) -> str:
        return self.owner.rpartition(":")[0]

    @property
    def pid(self) -> Optional[int]:
        pid = self.owner.rpartition(":")[2]
        return int(pid) if pid.isdigit() else None

    def age(self) -> str:
        """How long ago the lock was taken, e.g. "3 hours ago"."""
        if self.created is None:
            return "at an unknown time"
        return humanize.naturaltime(time.time() - self.created)

    @classmethod
    def read(cls, lock_file: Path) -> Optional["LockInfo"]:
        """Read an existing lock file; None when there is no lock.

        Raises:
            LockError: If the lock file exists but cannot be read
        """
        try:
            owner = lock_file.read_text(encoding="utf-8").strip()
            created = lock_file.stat().st_mtime
        except (FileNotFoundError, NotADirectoryError):
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise LockError(f"Cannot read lock file {lock_file}: {e}") from e
        return cls(owner, created)


def lock_owner_token() -> str:
    return f"{socket.gethostname()}:{os.getpid()}"


class RepositoryLock:
    """
    File-based advisory lock for one repository.

    Usage as context manager:
        with RepositoryLock(profile.lock_file):
            # run the engine
            pass

    The lock file is removed on exit whether or not the body raised.
    """

    def __init__(self, lock_file: Path):
        self.lock_file = Path(lock_file)
        self._acquired = False

    @property
    def acquired(self) -> bool:
        return self._acquired

    def __enter__(self) -> "RepositoryLock":
        self.acquire()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.release()

    def acquire(self) -> None:
        """
        Take the lock.

        Raises:
            LockConflictError: If a lock file already exists
            LockError: If the lock file cannot be created
        """
        if self._acquired:
            logger.warning(f"Lock {self.lock_file} already held by this process")
            return

        logger.debug(f"Checking for lock on {self.lock_file}")
        self._raise_if_locked()

        lock_dir = self.lock_file.parent
        if not lock_dir.is_dir():
            logger.debug(f"Creating lock directory {lock_dir}")
            try:
                lock_dir.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise LockError(f"Could not create lock directory {lock_dir}: {e}") from e

        logger.debug(f"Creating lock file {self.lock_file}")
        try:
            # O_EXCL closes the gap between the existence check and creation
            fd = os.open(self.lock_file, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o644)
        except FileExistsError:
            self._raise_if_locked()
            raise LockConflictError("Repository was locked concurrently, bailing out")
        except OSError as e:
            raise LockError(f"Could not create lock file {self.lock_file}: {e}") from e

        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(lock_owner_token())
        self._acquired = True

    def release(self) -> None:
        """Remove the lock file if this instance created it."""
        if not self._acquired:
            return

        logger.debug(f"Removing lock file {self.lock_file}")
        try:
            self.lock_file.unlink()
        except FileNotFoundError:
            logger.warning(f"Lock file {self.lock_file} disappeared before release")
        finally:
            self._acquired = False

    def is_locked(self) -> tuple[bool, Optional[LockInfo]]:
        """Return (is_locked, lock_info); lock_info is None when unlocked."""
        info = LockInfo.read(self.lock_file)
        return info is not None, info

    def break_lock(self) -> Optional[LockInfo]:
        """Forcibly remove a lock left behind by another process.

        Returns:
            The removed lock's owner, or None if there was no lock
        """
        info = LockInfo.read(self.lock_file)
        if info is None:
            return None
        try:
            self.lock_file.unlink(missing_ok=True)
        except OSError as e:
            raise LockError(f"Could not remove lock file {self.lock_file}: {e}") from e
        logger.info(f"Removed lock held by {info.owner} (taken {info.age()})")
        return info

    def _raise_if_locked(self) -> None:
        locked, info = self.is_locked()
        if locked:
            raise LockConflictError(
                f"Repository is locked by {info.owner} (taken {info.age()}), bailing out",
                owner=info.owner,
            )
