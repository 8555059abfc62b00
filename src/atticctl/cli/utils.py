# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.15
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/atticctl/cli/utils.py

"""
CLI utility functions shared by all atticctl commands.

This module provides:
- CliState: global options collected by the app callback
- Profile loading with error reporting and file logging
- Translation of atticctl errors into typer exits with the right code

Command handlers raise; only this module turns exceptions into exit codes.
"""

from dataclasses import dataclass
from typing import Any, Callable

import typer
from loguru import logger
from rich.console import Console

from atticctl.config.manager import DEFAULT_PROFILE, Profile, load_profile
from atticctl.core.engine import Engine
from atticctl.system.exceptions import AtticctlError
from atticctl.system.logging_setup import add_file_logging


@dataclass
class CliState:
    """Global options, stored on the typer context."""
    profile_name: str = DEFAULT_PROFILE
    verbose: bool = False
    quiet: bool = False
    dry_run: bool = False


def get_state(ctx: typer.Context) -> CliState:
    return ctx.ensure_object(CliState)


def handle_operation_error(error: AtticctlError) -> None:
    """Report an atticctl error and exit with its code.

    Raises:
        typer.Exit: Always
    """
    logger.error(str(error))
    raise typer.Exit(error.exit_code)


def load_profile_with_logging(state: CliState) -> Profile:
    """
    Load the selected profile and enable file logging if it asks for it.

    Raises:
        typer.Exit: If the profile is invalid
    """
    try:
        profile = load_profile(state.profile_name)
    except AtticctlError as e:
        handle_operation_error(e)

    if profile.local_log:
        add_file_logging(profile.local_log, profile.name)
    return profile


def make_engine(console: Console, profile: Profile, state: CliState) -> Engine:
    return Engine(
        profile.engine,
        dry_run=state.dry_run,
        echo=lambda line: console.print(line, markup=False, highlight=False, soft_wrap=True),
    )


def run_profile_command(
    ctx: typer.Context,
    console: Console,
    handler: Callable[..., Any],
    **params: Any,
) -> Any:
    """Load the profile, build the engine and run a command handler.

    The handler is called as handler(console, profile, engine, verbose=,
    quiet=, **params).

    Raises:
        typer.Exit: With the handler's error exit code on failure
    """
    state = get_state(ctx)
    profile = load_profile_with_logging(state)
    engine = make_engine(console, profile, state)
    try:
        return handler(console, profile, engine, verbose=state.verbose, quiet=state.quiet, **params)
    except AtticctlError as e:
        handle_operation_error(e)
