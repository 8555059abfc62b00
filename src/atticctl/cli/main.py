# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.16
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/atticctl/cli/main.py

"""
CLI dispatcher.

Global options (profile, verbosity, dry run) are collected by the app
callback; each command routes to a handler in cli/commands through
run_profile_command, which owns profile loading and exit codes.
"""

# Standard library imports
from importlib.metadata import PackageNotFoundError, version
from typing import Any, Optional

# Third-party imports
import typer
from rich.console import Console

# Local atticctl imports
from atticctl.cli.commands import actions as action_commands
from atticctl.cli.commands import info as info_commands
from atticctl.cli.utils import CliState, get_state, run_profile_command
from atticctl.config.manager import DEFAULT_PROFILE
from atticctl.system.logging_setup import setup_logging

# Initialize Typer app
app = typer.Typer(
    help="""atticctl - profile-driven front-end for attic backups

[bold blue]Configuration:[/bold blue] list-configs, config, show-key
[bold green]Backups:[/bold green] init, backup, delete, repair, break-lock
[bold magenta]Archives:[/bold magenta] list-repo, list-archive, info, mount, restore
[bold red]Verification:[/bold red] verify-repo, verify-archives, verify-all
""",
    rich_markup_mode="rich",
    no_args_is_help=True,
)

console = Console()

ARCHIVE_HELP = "Archive name, or the timestamp part of it (list-repo gives a list of archives)"


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        try:
            pkg_version = version("atticctl")
        except PackageNotFoundError:
            pkg_version = "unknown"
        console.print(f"atticctl version {pkg_version}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    config: str = typer.Option(DEFAULT_PROFILE, "--config", "-c", help="Configuration profile name under ~/.attic/configs"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug output, and verbose engine output for backup"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only show warnings and errors"),
    dry_run: bool = typer.Option(False, "--dry-run", "-n", help="Print engine commands instead of running them"),
    version: Optional[bool] = typer.Option(
        None, "--version", callback=version_callback, is_eager=True,
        help="Show version and exit"
    ),
) -> None:
    """atticctl - profile-driven front-end for attic backups."""
    setup_logging(verbose=verbose, quiet=quiet)
    ctx.obj = CliState(profile_name=config, verbose=verbose, quiet=quiet, dry_run=dry_run)


# =============================================================================
# CONFIGURATION COMMANDS
# =============================================================================

@app.command(name="list-configs")
def list_configs_command(ctx: typer.Context) -> Any:
    """[bold blue]Configuration[/bold blue]: Show every configuration profile and its contents."""
    state = get_state(ctx)
    return info_commands.list_configs(console, verbose=state.verbose, quiet=state.quiet)


@app.command(name="config")
def config_command(
    ctx: typer.Context,
    to_json: bool = typer.Option(False, "--json", help="Output the profile as JSON"),
) -> Any:
    """[bold blue]Configuration[/bold blue]: Show the resolved configuration profile."""
    return run_profile_command(ctx, console, info_commands.show_config, to_json=to_json)


@app.command(name="show-key")
def show_key_command(ctx: typer.Context) -> Any:
    """[bold blue]Configuration[/bold blue]: Print the key file of the repository."""
    return run_profile_command(ctx, console, info_commands.show_key)


# =============================================================================
# BACKUP COMMANDS - take the repository lock
# =============================================================================

@app.command()
def init(ctx: typer.Context) -> Any:
    """[bold green]Backups[/bold green]: Initialize a new repository."""
    return run_profile_command(ctx, console, action_commands.init)


@app.command()
def backup(ctx: typer.Context) -> Any:
    """[bold green]Backups[/bold green]: Create a new archive, then prune old archives."""
    return run_profile_command(ctx, console, action_commands.backup)


@app.command()
def delete(
    ctx: typer.Context,
    archive: Optional[str] = typer.Argument(None, help=ARCHIVE_HELP),
) -> Any:
    """[bold green]Backups[/bold green]: Delete an archive."""
    return run_profile_command(ctx, console, action_commands.delete, archive=archive)


@app.command()
def repair(ctx: typer.Context) -> Any:
    """[bold green]Backups[/bold green]: Check and repair the repository."""
    return run_profile_command(ctx, console, action_commands.repair)


@app.command(name="break-lock")
def break_lock_command(ctx: typer.Context) -> Any:
    """[bold green]Backups[/bold green]: Remove a lock left behind by a crashed run."""
    return run_profile_command(ctx, console, action_commands.break_lock)


# =============================================================================
# ARCHIVE COMMANDS
# =============================================================================

@app.command(name="list-repo")
def list_repo_command(ctx: typer.Context) -> Any:
    """[bold magenta]Archives[/bold magenta]: List the archives in the repository."""
    return run_profile_command(ctx, console, info_commands.list_repo)


@app.command(name="list-archive")
def list_archive_command(
    ctx: typer.Context,
    archive: Optional[str] = typer.Argument(None, help=ARCHIVE_HELP),
) -> Any:
    """[bold magenta]Archives[/bold magenta]: List the files in an archive."""
    return run_profile_command(ctx, console, info_commands.list_archive_files, archive=archive)


@app.command()
def info(
    ctx: typer.Context,
    archive: Optional[str] = typer.Argument(None, help=ARCHIVE_HELP),
) -> Any:
    """[bold magenta]Archives[/bold magenta]: Show archive statistics."""
    return run_profile_command(ctx, console, info_commands.info, archive=archive)


@app.command()
def mount(
    ctx: typer.Context,
    archive: Optional[str] = typer.Argument(None, help=ARCHIVE_HELP),
) -> Any:
    """[bold magenta]Archives[/bold magenta]: Mount an archive on the profile's mount point."""
    return run_profile_command(ctx, console, action_commands.mount, archive=archive)


@app.command()
def restore(
    ctx: typer.Context,
    archive: Optional[str] = typer.Argument(None, help=ARCHIVE_HELP),
    apply: bool = typer.Option(False, "--apply", help="Write files instead of only listing them"),
) -> Any:
    """[bold magenta]Archives[/bold magenta]: Restore everything from an archive into the current directory."""
    return run_profile_command(ctx, console, action_commands.restore, archive=archive, apply=apply)


# =============================================================================
# VERIFICATION COMMANDS - read-only checks
# =============================================================================

@app.command(name="verify-repo")
def verify_repo_command(ctx: typer.Context) -> Any:
    """[bold red]Verification[/bold red]: Check repository metadata only."""
    return run_profile_command(ctx, console, info_commands.verify, scope="repository")


@app.command(name="verify-archives")
def verify_archives_command(ctx: typer.Context) -> Any:
    """[bold red]Verification[/bold red]: Check archive metadata only."""
    return run_profile_command(ctx, console, info_commands.verify, scope="archives")


@app.command(name="verify-all")
def verify_all_command(ctx: typer.Context) -> Any:
    """[bold red]Verification[/bold red]: Check repository and archive metadata."""
    return run_profile_command(ctx, console, info_commands.verify, scope="all")


@app.command(name="help", hidden=True)
def help_command(ctx: typer.Context) -> None:
    """Show this message and exit."""
    console.print(ctx.parent.get_help())


# =============================================================================
# ENTRY POINT
# =============================================================================

def cli_main() -> None:  # pragma: no cover - entry point
    """Entry point for the atticctl CLI application."""
    app()


if __name__ == "__main__":  # pragma: no cover
    cli_main()
