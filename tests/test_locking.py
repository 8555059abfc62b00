# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.16
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# tests/test_locking.py

"""
Tests for the repository lock.

Tests cover acquisition, release, conflicts, release on failure and
breaking a leftover lock.
"""

import os
import socket
import time
from pathlib import Path
from unittest.mock import patch

import pytest

from atticctl.system.exceptions import LockConflictError, LockError
from atticctl.system.locking import LockInfo, RepositoryLock, lock_owner_token


@pytest.fixture
def lock_file(tmp_path):
    return tmp_path / "repo" / "lockfile"


class TestLockInfo:
    def test_owner_parts(self):
        info = LockInfo("backup.example.org:4242")
        assert info.hostname == "backup.example.org"
        assert info.pid == 4242

    def test_non_numeric_pid(self):
        assert LockInfo("garbage").pid is None

    def test_age_unknown(self):
        assert LockInfo("h:1").age() == "at an unknown time"

    def test_age_is_humanized(self):
        info = LockInfo("h:1", created=time.time() - 3 * 3600)
        assert info.age() == "3 hours ago"

    def test_read_missing(self, lock_file):
        assert LockInfo.read(lock_file) is None

    def test_read_unreadable_raises_lock_error(self, lock_file):
        lock_file.parent.mkdir(parents=True)
        lock_file.write_text("otheruser:12")

        with patch.object(Path, "read_text", side_effect=PermissionError(13, "Permission denied")):
            with pytest.raises(LockError, match="Cannot read lock file") as excinfo:
                LockInfo.read(lock_file)

        assert excinfo.value.exit_code == 9


class TestAcquireRelease:
    def test_owner_token(self):
        assert lock_owner_token() == f"{socket.gethostname()}:{os.getpid()}"

    def test_acquire_creates_directory_and_file(self, lock_file):
        lock = RepositoryLock(lock_file)
        lock.acquire()

        assert lock.acquired
        assert lock_file.read_text() == lock_owner_token()  # no trailing newline

        lock.release()
        assert not lock_file.exists()
        assert not lock.acquired

    def test_context_manager(self, lock_file):
        with RepositoryLock(lock_file) as lock:
            assert lock_file.exists()
            locked, info = lock.is_locked()
            assert locked
            assert info.owner == lock_owner_token()
        assert not lock_file.exists()

    def test_released_when_body_raises(self, lock_file):
        with pytest.raises(RuntimeError):
            with RepositoryLock(lock_file):
                raise RuntimeError("engine blew up")
        assert not lock_file.exists()

    def test_release_without_acquire_is_noop(self, lock_file):
        lock_file.parent.mkdir(parents=True)
        lock_file.write_text("other:1")
        RepositoryLock(lock_file).release()
        assert lock_file.exists()

    def test_release_tolerates_missing_file(self, lock_file, log_messages):
        lock = RepositoryLock(lock_file)
        lock.acquire()
        lock_file.unlink()
        lock.release()
        assert not lock.acquired
        assert any("disappeared" in m for m in log_messages)

    def test_double_acquire_is_noop(self, lock_file):
        lock = RepositoryLock(lock_file)
        lock.acquire()
        lock.acquire()
        assert lock.acquired
        lock.release()


class TestConflicts:
    def test_existing_lock_conflicts(self, lock_file):
        lock_file.parent.mkdir(parents=True)
        lock_file.write_text("otherhost:999")

        with pytest.raises(LockConflictError, match="Repository is locked by otherhost:999") as excinfo:
            RepositoryLock(lock_file).acquire()

        assert excinfo.value.exit_code == 9
        assert excinfo.value.owner == "otherhost:999"
        # The other process's lock is left alone
        assert lock_file.read_text() == "otherhost:999"

    def test_second_instance_conflicts(self, lock_file):
        with RepositoryLock(lock_file):
            with pytest.raises(LockConflictError):
                RepositoryLock(lock_file).acquire()

    def test_unlocked_repository(self, lock_file):
        assert RepositoryLock(lock_file).is_locked() == (False, None)

    def test_unreadable_lock_refuses_acquire(self, lock_file):
        lock_file.parent.mkdir(parents=True)
        lock_file.write_text("otheruser:12")

        with patch.object(Path, "read_text", side_effect=PermissionError(13, "Permission denied")):
            with pytest.raises(LockError):
                RepositoryLock(lock_file).acquire()

        assert lock_file.read_text() == "otheruser:12"

    def test_unwritable_lock_directory(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("")
        with pytest.raises(LockError):
            RepositoryLock(blocker / "repo" / "lockfile").acquire()


class TestBreakLock:
    def test_break_existing_lock(self, lock_file):
        lock_file.parent.mkdir(parents=True)
        lock_file.write_text("crashed:77")

        info = RepositoryLock(lock_file).break_lock()

        assert info.owner == "crashed:77"
        assert (info.hostname, info.pid) == ("crashed", 77)
        assert not lock_file.exists()

    def test_break_without_lock(self, lock_file):
        assert RepositoryLock(lock_file).break_lock() is None

    def test_break_unremovable_lock(self, lock_file):
        lock_file.parent.mkdir(parents=True)
        lock_file.write_text("crashed:77")

        with patch.object(Path, "unlink", side_effect=PermissionError(13, "Permission denied")):
            with pytest.raises(LockError, match="Could not remove lock file"):
                RepositoryLock(lock_file).break_lock()
