# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.15
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/atticctl/cli/commands/actions.py

"""
Action command handlers - commands that change a repository or the local system.

Handles: init, backup, delete, repair, restore, mount, break-lock
"""

from typing import Any, Optional

from rich.console import Console

from atticctl.config.manager import Profile
from atticctl.core.engine import Engine
from atticctl.core.operations import (
    backup as backup_repository,
    break_repository_lock,
    delete_archive,
    init_repository,
    mount_archive,
    repair_repository,
    restore_archive,
)


def init(
    console: Console,
    profile: Profile,
    engine: Engine,
    verbose: bool = False,
    quiet: bool = False
) -> dict[str, Any]:
    """Initialize a new engine repository at the profile's repository path.

    Args:
        console: Rich console for output
        profile: Resolved profile
        engine: Engine to run
        verbose: Show detailed output
        quiet: Suppress output

    Returns:
        Init result for JSON output
    """
    result = init_repository(profile, engine)
    if not quiet and not engine.dry_run:
        console.print(f"[green]✓[/green] Initialized repository {profile.repository}")
    return result


def backup(
    console: Console,
    profile: Profile,
    engine: Engine,
    verbose: bool = False,
    quiet: bool = False
) -> dict[str, Any]:
    """Create a new archive and prune old ones.

    verbose is forwarded to the engine's create command.
    """
    result = backup_repository(profile, engine, verbose=verbose)
    if not quiet and not engine.dry_run:
        console.print(f"[green]✓[/green] Created archive {result['archive']}")
    return result


def delete(
    console: Console,
    profile: Profile,
    engine: Engine,
    archive: Optional[str] = None,
    verbose: bool = False,
    quiet: bool = False
) -> dict[str, Any]:
    return delete_archive(profile, engine, archive)


def repair(
    console: Console,
    profile: Profile,
    engine: Engine,
    verbose: bool = False,
    quiet: bool = False
) -> dict[str, Any]:
    return repair_repository(profile, engine)


def restore(
    console: Console,
    profile: Profile,
    engine: Engine,
    archive: Optional[str] = None,
    apply: bool = False,
    verbose: bool = False,
    quiet: bool = False
) -> dict[str, Any]:
    result = restore_archive(profile, engine, archive, apply=apply)
    if not apply and not quiet:
        console.print("[dim]Nothing was written. Re-run with --apply to extract files.[/dim]")
    return result


def mount(
    console: Console,
    profile: Profile,
    engine: Engine,
    archive: Optional[str] = None,
    verbose: bool = False,
    quiet: bool = False
) -> dict[str, Any]:
    return mount_archive(profile, engine, archive)


def break_lock(
    console: Console,
    profile: Profile,
    engine: Engine,
    verbose: bool = False,
    quiet: bool = False
) -> dict[str, Any]:
    """Remove a lock file left behind by a crashed or killed run."""
    if engine.dry_run:
        console.print(f"rm {profile.lock_file}", markup=False, highlight=False)
        return {'operation': 'break-lock', 'dry_run': True}

    info = break_repository_lock(profile)
    if not quiet:
        if info is None:
            console.print(f"[dim]No lock on {profile.repository}[/dim]")
        elif info.pid is None:
            console.print(f"[green]✓[/green] Removed lock held by {info.owner}")
        else:
            console.print(f"[green]✓[/green] Removed lock held by pid {info.pid} on {info.hostname}")
    return {
        'operation': 'break-lock',
        'owner': info.owner if info else None,
        'pid': info.pid if info else None,
    }
