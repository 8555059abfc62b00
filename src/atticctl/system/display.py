# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.14
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/atticctl/system/display.py

# Standard library imports
from pathlib import Path

# Third-party imports
import orjson
from loguru import logger
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

# Local atticctl imports
from atticctl.config.manager import RETENTION_CLASSES, Profile


def profile_to_table(profile: Profile) -> Table:
    """Convert a resolved profile to a rich Table for display.

    Args:
        profile: The resolved profile

    Returns:
        Rich Table object ready for display
    """
    table = Table(title=f"Configuration: {profile.name}", show_header=False)
    table.add_column("Setting", style="bold")
    table.add_column("Value")

    source = str(profile.source_path) if profile.source_path else "(defaults)"
    if profile.migrated:
        source += " (legacy format)"

    table.add_row("Profile file", source)
    table.add_row("Hostname", profile.host)
    table.add_row("Repository", profile.repository)
    table.add_row("Locations to back up", " ".join(profile.backup_sources))
    table.add_row("Engine", profile.engine)
    table.add_row("Exclude file", str(profile.exclude_file))
    table.add_row("Mount point", str(profile.mount_point))
    for period in RETENTION_CLASSES:
        table.add_row(f"Keep {period}", str(getattr(profile, period)))

    return table


def display_profile(console: Console, profile: Profile) -> None:
    console.print(profile_to_table(profile))


def profile_to_json(profile: Profile) -> str:
    data = profile.model_dump(mode="json")
    data["exclude_file"] = str(profile.exclude_file)
    data["lock_file"] = str(profile.lock_file)
    return orjson.dumps(data, option=orjson.OPT_INDENT_2).decode()


def display_file(console: Console, path: Path, content: str, title: str) -> None:
    """Show a file's raw content in a panel, without interpreting rich markup."""
    console.print(Panel(
        Text(content.rstrip("\n")),
        title=Text(f"{title}: {path.name}"),
        title_align="left",
        expand=False,
    ))


def display_profiles(console: Console, profiles: list[Path]) -> None:
    if not profiles:
        console.print("[dim]No configurations found[/dim]")
        return
    for path in profiles:
        try:
            # Swap files and other non-UTF-8 leftovers are shown, not fatal
            content = path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            logger.warning(f"Skipping unreadable configuration {path}: {e}")
            continue
        display_file(console, path, content, "CONFIGURATION")
