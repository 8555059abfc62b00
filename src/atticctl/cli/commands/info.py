# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.15
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/atticctl/cli/commands/info.py

"""
Info command handlers - read-only commands.

Handles: config, list-configs, show-key, list-repo, list-archive, info, verify-*
"""

from typing import Any, Optional

from loguru import logger
from rich.console import Console

from atticctl.config.manager import Profile, list_profiles
from atticctl.core.engine import CheckScope, Engine
from atticctl.core.operations import (
    archive_info,
    find_repository_keys,
    list_archive,
    list_repository,
    verify_repository,
)
from atticctl.system.display import display_file, display_profile, display_profiles, profile_to_json


def show_config(
    console: Console,
    profile: Profile,
    engine: Engine,
    to_json: bool = False,
    verbose: bool = False,
    quiet: bool = False
) -> dict[str, Any]:
    """Show the resolved profile.

    Args:
        console: Rich console for output
        profile: Resolved profile
        engine: Engine (unused, accepted for a uniform signature)
        to_json: Print the profile as JSON instead of a table
        verbose: Show detailed output
        quiet: Minimize output

    Returns:
        Result dict for the profile shown
    """
    if to_json:
        console.print_json(profile_to_json(profile))
    else:
        display_profile(console, profile)
    return {'operation': 'config', 'profile': profile}


def list_configs(console: Console, verbose: bool = False, quiet: bool = False) -> dict[str, Any]:
    """Print every profile in the configs directory with its contents."""
    logger.info("Listing configurations")
    profiles = list_profiles()
    display_profiles(console, profiles)
    logger.info("End of configuration listing")
    return {'operation': 'list-configs', 'profiles': [p.name for p in profiles]}


def show_key(
    console: Console,
    profile: Profile,
    engine: Engine,
    verbose: bool = False,
    quiet: bool = False
) -> dict[str, Any]:
    """Print the key file(s) belonging to the profile's repository.

    Keyfile-encrypted repositories are useless without their key, which
    lives outside the repository; this makes it easy to copy somewhere safe.
    """
    keys = find_repository_keys(profile)
    for path, content in keys:
        display_file(console, path, content, "KEY")
    return {'operation': 'show-key', 'keys': [str(path) for path, _ in keys]}


def list_repo(
    console: Console,
    profile: Profile,
    engine: Engine,
    verbose: bool = False,
    quiet: bool = False
) -> dict[str, Any]:
    return list_repository(profile, engine)


def list_archive_files(
    console: Console,
    profile: Profile,
    engine: Engine,
    archive: Optional[str] = None,
    verbose: bool = False,
    quiet: bool = False
) -> dict[str, Any]:
    return list_archive(profile, engine, archive)


def info(
    console: Console,
    profile: Profile,
    engine: Engine,
    archive: Optional[str] = None,
    verbose: bool = False,
    quiet: bool = False
) -> dict[str, Any]:
    return archive_info(profile, engine, archive)


def verify(
    console: Console,
    profile: Profile,
    engine: Engine,
    scope: CheckScope = "all",
    verbose: bool = False,
    quiet: bool = False
) -> dict[str, Any]:
    """Check repository and/or archive consistency without changing anything."""
    result = verify_repository(profile, engine, scope=scope)
    if not quiet and not engine.dry_run:
        console.print(f"[green]✓[/green] Verification ({scope}) passed")
    return result
