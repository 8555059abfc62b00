# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.16
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# tests/conftest.py

"""
Shared test fixtures for the atticctl test suite.

Every test runs with ATTICCTL_HOME pointing into its own tmp_path and
with the profile environment fallbacks cleared, so nothing reads the
real ~/.attic or the caller's HOST/REPOSITORY variables.
"""

from pathlib import Path
from unittest.mock import patch

import pytest
from loguru import logger

from atticctl.config.manager import ENV_FALLBACKS, Profile
from atticctl.core.engine import Engine
from atticctl.system.execution import CommandExecutor, CommandResult


@pytest.fixture(autouse=True)
def attic_home(tmp_path, monkeypatch) -> Path:
    """Isolated ATTICCTL_HOME with an empty configs directory."""
    home = tmp_path / "attic-home"
    (home / "configs").mkdir(parents=True)
    monkeypatch.setenv("ATTICCTL_HOME", str(home))
    for env_name in ENV_FALLBACKS.values():
        monkeypatch.delenv(env_name, raising=False)
    return home


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop any loguru handlers a test (or the CLI) installed."""
    yield
    logger.remove()


@pytest.fixture
def log_messages():
    """Collect loguru messages emitted during the test."""
    messages: list[str] = []
    handler_id = logger.add(lambda m: messages.append(m.record["message"]), level="DEBUG")
    yield messages
    try:
        logger.remove(handler_id)
    except ValueError:
        pass  # already removed by setup_logging()


@pytest.fixture
def repo_dir(tmp_path) -> Path:
    return tmp_path / "Backups" / "web1"


@pytest.fixture
def profile(repo_dir) -> Profile:
    """A profile with a fixed host and a repository under tmp_path."""
    return Profile(
        name="test",
        host="web1",
        repository=str(repo_dir),
        backup_sources=["/etc", "/home"],
        mount_point=Path("/mnt/restore"),
    )


@pytest.fixture
def engine() -> Engine:
    return Engine("attic")


@pytest.fixture
def mock_run():
    """Patch CommandExecutor.run; every engine call succeeds unless told otherwise.

    Set mock_run.side_effect to a list of CommandResult to script outcomes.
    """
    with patch.object(CommandExecutor, "run", return_value=CommandResult(returncode=0)) as mocked:
        yield mocked


@pytest.fixture
def write_profile(attic_home):
    """Write a profile file into the isolated configs directory."""
    def _write(name: str, content: str) -> Path:
        path = attic_home / "configs" / name
        path.write_text(content)
        return path
    return _write
