# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.13
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/atticctl/core/engine.py

"""
Command lines for the external backup engine.

The build_* functions only assemble argv lists; Engine runs them (or,
in dry-run mode, prints them). The flags are part of the tool's
contract with existing repositories and scripts, so they are kept
exactly as they have always been passed.
"""

from pathlib import Path
from typing import Callable, Literal, Optional

from loguru import logger

from atticctl.system.execution import CommandExecutor, CommandResult

CheckScope = Literal["all", "repository", "archives"]

CHECK_SCOPE_FLAGS: dict[str, list[str]] = {
    "all": [],
    "repository": ["--repository-only"],
    "archives": ["--archive-only"],
}


# ---- Command builders ----

def build_init_command(engine: str, repository: str, encryption: str = "keyfile") -> list[str]:
    return [engine, "init", "-e", encryption, repository]


def build_create_command(engine: str, archive_ref: str, sources: list[str], exclude_file: Path,
                         checkpoint_interval: int = 300, verbose: bool = False) -> list[str]:
    cmd = [engine, "create"]
    if verbose:
        cmd.append("--verbose")
    cmd += [
        "--stats",
        "--checkpoint-interval", str(checkpoint_interval),
        "--exclude-caches",
        "--do-not-cross-mountpoints",
        "--exclude-from", str(exclude_file),
        archive_ref,
    ]
    return cmd + list(sources)


def build_prune_command(engine: str, repository: str, retention: dict[str, int]) -> list[str]:
    """Prune keeps the newest archive of each period for as many periods as configured."""
    cmd = [engine, "prune", "--stats", "--verbose", repository]
    for period in ("hourly", "daily", "weekly", "monthly", "yearly"):
        cmd.append(f"--keep-{period}={retention[period]}")
    return cmd


def build_list_command(engine: str, target: str) -> list[str]:
    return [engine, "list", target]


def build_info_command(engine: str, archive_ref: str) -> list[str]:
    return [engine, "info", archive_ref]


def build_delete_command(engine: str, archive_ref: str) -> list[str]:
    return [engine, "delete", "--stats", archive_ref]


def build_extract_command(engine: str, archive_ref: str, dry_run: bool = True) -> list[str]:
    cmd = [engine, "extract"]
    if dry_run:
        cmd.append("-n")
    return cmd + ["-v", archive_ref]


def build_mount_command(engine: str, archive_ref: str, mount_point: Path) -> list[str]:
    return [engine, "mount", archive_ref, str(mount_point)]


def build_check_command(engine: str, repository: str, scope: CheckScope = "all",
                        repair: bool = False) -> list[str]:
    cmd = [engine, "check", "-v"]
    if repair:
        cmd.append("--repair")
    else:
        cmd += CHECK_SCOPE_FLAGS[scope]
    return cmd + [repository]


# ---- Runner ----

class Engine:
    """Runs engine commands for one binary.

    Args:
        binary: Engine executable name or path ("attic", "borg", ...)
        dry_run: Print commands instead of running them
        echo: Callable used to show commands in dry-run mode
    """

    def __init__(self, binary: str = "attic", dry_run: bool = False,
                 echo: Optional[Callable[[str], None]] = None):
        self.binary = binary
        self.dry_run = dry_run
        self.echo = echo or print

    def run(self, cmd: list[str]) -> CommandResult:
        if self.dry_run:
            self.echo(CommandExecutor.format_command(cmd))
            return CommandResult(returncode=0)
        return CommandExecutor.run(cmd)

    def init(self, repository: str, encryption: str = "keyfile") -> CommandResult:
        return self.run(build_init_command(self.binary, repository, encryption))

    def create(self, archive_ref: str, sources: list[str], exclude_file: Path,
               checkpoint_interval: int = 300, verbose: bool = False) -> CommandResult:
        logger.debug(f"Parameters: ARCHIVE: {archive_ref}; SOURCE: '{' '.join(sources)}'")
        return self.run(build_create_command(
            self.binary, archive_ref, sources, exclude_file,
            checkpoint_interval=checkpoint_interval, verbose=verbose,
        ))

    def prune(self, repository: str, retention: dict[str, int]) -> CommandResult:
        return self.run(build_prune_command(self.binary, repository, retention))

    def list(self, target: str) -> CommandResult:
        return self.run(build_list_command(self.binary, target))

    def info(self, archive_ref: str) -> CommandResult:
        return self.run(build_info_command(self.binary, archive_ref))

    def delete(self, archive_ref: str) -> CommandResult:
        return self.run(build_delete_command(self.binary, archive_ref))

    def extract(self, archive_ref: str, dry_run: bool = True) -> CommandResult:
        return self.run(build_extract_command(self.binary, archive_ref, dry_run=dry_run))

    def mount(self, archive_ref: str, mount_point: Path) -> CommandResult:
        return self.run(build_mount_command(self.binary, archive_ref, mount_point))

    def check(self, repository: str, scope: CheckScope = "all", repair: bool = False) -> CommandResult:
        return self.run(build_check_command(self.binary, repository, scope=scope, repair=repair))
